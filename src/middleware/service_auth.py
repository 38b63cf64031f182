"""Service-role JWT verification middleware for FastAPI.

The prediction and reminder endpoints are invoked by the scheduler and by
trusted backends with a Supabase service-role token.  The middleware checks
the HS256 signature against the project's JWT secret, requires the
``service_role`` role claim, and sets ``request.state.auth``.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt as pyjwt
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.config import Settings, get_settings
from src.dependencies import ServiceContext

logger = logging.getLogger("cyclecast.auth")

REQUIRED_ROLE = "service_role"

# Paths that do not require authentication
PUBLIC_PATHS: set[str] = {
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


def _is_public(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc")


def _unauthorized(detail: str, status_code: int = 401) -> Response:
    return Response(
        content=f'{{"detail":"{detail}"}}',
        status_code=status_code,
        media_type="application/json",
    )


class ServiceAuthMiddleware(BaseHTTPMiddleware):
    """Verify service-role JWTs and populate request.state.auth."""

    def __init__(self, app: Any, settings: Settings | None = None) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_public(request.url.path):
            return await call_next(request)

        # OPTIONS requests pass through (CORS preflight)
        if request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return _unauthorized("Missing or invalid Authorization header")

        token = auth_header.removeprefix("Bearer ").strip()

        try:
            payload = pyjwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
        except pyjwt.ExpiredSignatureError:
            return _unauthorized("Token expired")
        except pyjwt.InvalidTokenError as exc:
            logger.warning("JWT validation failed: %s", exc)
            return _unauthorized("Invalid token")

        role = payload.get("role")
        if role != REQUIRED_ROLE:
            logger.warning("Rejected token with role %r", role)
            return _unauthorized("Service role required", status_code=403)

        request.state.auth = ServiceContext(role=role, subject=payload.get("sub"))
        return await call_next(request)
