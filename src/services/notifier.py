"""Notification transports for reminder delivery.

``EmailTransport`` posts ``{to, subject, body}`` as JSON to an email relay
with a bearer API key.  ``LogTransport`` is used when no relay is configured:
the message is logged as an in-app notification and counted as delivered.
"""

from __future__ import annotations

import logging

import httpx

from src.config import Settings, get_settings
from src.cycle.reminders.dispatcher import NotificationTransport

logger = logging.getLogger("cyclecast.notifier")


class EmailTransport:
    """Deliver reminders through an HTTP email relay."""

    def __init__(
        self,
        service_url: str,
        api_key: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            service_url: Relay endpoint receiving the JSON payload.
            api_key:     Bearer token for the relay.
            timeout:     Request timeout in seconds.
            http_client: Optional pre-configured httpx client (for testing).
        """
        self._service_url = service_url
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client

    async def send(self, address: str, subject: str, body: str) -> bool:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {"to": address, "subject": subject, "body": body}

        try:
            if self._http_client:
                response = await self._http_client.post(
                    self._service_url, json=payload, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(
                        self._service_url, json=payload, headers=headers
                    )
        except httpx.HTTPError as exc:
            logger.error("Failed to send email to %s: %s", address, exc)
            return False

        if not response.is_success:
            logger.warning(
                "Email relay rejected message to %s: HTTP %d",
                address,
                response.status_code,
            )
        return response.is_success


class LogTransport:
    """Fallback transport that only logs the message."""

    async def send(self, address: str, subject: str, body: str) -> bool:
        logger.info("[IN-APP NOTIFICATION] To: %s, Subject: %s, Message: %s", address, subject, body)
        return True


def build_transport(settings: Settings | None = None) -> NotificationTransport:
    """Email transport when a relay is configured, otherwise the log fallback."""
    s = settings or get_settings()
    if s.email_service_url and s.email_api_key:
        return EmailTransport(
            s.email_service_url,
            s.email_api_key,
            timeout=s.email_timeout_seconds,
        )
    logger.info("No email relay configured; reminders will be logged only")
    return LogTransport()
