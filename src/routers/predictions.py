"""Prediction endpoints: compute, read back, forecast and calendar window."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from src.cycle.base import InvalidProfileError, ProfileNotFoundError
from src.cycle.prediction.engine import PredictionEngine
from src.dependencies import CurrentService, CycleServiceDep
from src.models.base import ErrorDetail
from src.models.cycle import (
    ComputePredictionRequest,
    ForecastRead,
    PersonPredictionStatusRead,
    PredictedWindowRead,
    PredictionRead,
    PreviewPredictionRequest,
)

router = APIRouter(prefix="/predictions", tags=["predictions"])
logger = logging.getLogger("cyclecast.routers.predictions")

NOT_FOUND = {404: {"model": ErrorDetail}}
PROFILE_ERRORS = {404: {"model": ErrorDetail}, 422: {"model": ErrorDetail}}


@router.post("/compute", response_model=PredictionRead, responses=PROFILE_ERRORS)
async def compute_prediction(
    caller: CurrentService, body: ComputePredictionRequest, service: CycleServiceDep
) -> Any:
    try:
        prediction = await service.compute_prediction(body.person_id)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    except InvalidProfileError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return PredictionRead.from_result(prediction)


@router.post("/compute-all", response_model=list[PersonPredictionStatusRead])
async def compute_all_predictions(caller: CurrentService, service: CycleServiceDep) -> Any:
    logger.info("Prediction sweep requested by %s", caller.subject or caller.role)
    statuses = await service.compute_all_predictions()
    return [
        PersonPredictionStatusRead(
            person_id=s.person_id,
            status=s.status,
            message=s.message,
            prediction=PredictionRead.from_result(s.prediction) if s.prediction else None,
        )
        for s in statuses
    ]


@router.post("/preview", response_model=ForecastRead)
async def preview_prediction(caller: CurrentService, body: PreviewPredictionRequest) -> Any:
    engine = PredictionEngine()
    predictions = engine.predict_multiple(
        [e.to_entry() for e in body.entries],
        body.profile.to_profile(),
        cycles=body.cycles,
        today=body.today,
    )
    return ForecastRead(predictions=[PredictionRead.from_result(p) for p in predictions])


@router.get("/{person_id}/latest", response_model=PredictionRead, responses=NOT_FOUND)
async def latest_prediction(
    person_id: uuid.UUID, caller: CurrentService, service: CycleServiceDep
) -> Any:
    prediction = await service.latest_prediction(person_id)
    if prediction is None:
        raise HTTPException(status_code=404, detail="No prediction found")
    return PredictionRead.from_result(prediction)


@router.get("/{person_id}/forecast", response_model=ForecastRead, responses=PROFILE_ERRORS)
async def forecast(
    person_id: uuid.UUID,
    caller: CurrentService,
    service: CycleServiceDep,
    cycles: int = Query(default=3, ge=1, le=12),
) -> Any:
    try:
        predictions = await service.forecast(person_id, cycles=cycles)
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    except InvalidProfileError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return ForecastRead(
        person_id=person_id,
        predictions=[PredictionRead.from_result(p) for p in predictions],
    )


@router.get(
    "/{person_id}/window",
    response_model=PredictedWindowRead,
    responses={400: {"model": ErrorDetail}, **PROFILE_ERRORS},
)
async def predicted_window(
    person_id: uuid.UUID,
    caller: CurrentService,
    service: CycleServiceDep,
    start: date = Query(),
    end: date = Query(),
) -> Any:
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    try:
        window = await service.predicted_window(person_id, start, end)
    except InvalidProfileError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if window is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return PredictedWindowRead.from_window(window)
