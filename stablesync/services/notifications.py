"""Downstream notifications for newly stored records."""

import logging
from typing import Any, Protocol

import httpx

from stablesync.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives ``{horse_id, record_summary}`` after a record is stored."""

    async def notify(self, payload: dict[str, Any]) -> None:
        ...


class LoggingNotifier:
    """Notifier used when no webhook is configured."""

    async def notify(self, payload: dict[str, Any]) -> None:
        logger.info(f"New record for horse {payload.get('horse_id')}: {payload.get('record_summary')}")


class WebhookNotifier:
    """POSTs the payload as JSON. Delivery failures are logged, never raised."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def notify(self, payload: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Notification for horse {payload.get('horse_id')} failed: {e}")


def build_notifier(settings: Settings | None = None) -> Notifier:
    """Webhook notifier if a URL is configured, else a logging one."""
    settings = settings or get_settings()
    if settings.notify_webhook_url:
        return WebhookNotifier(settings.notify_webhook_url, timeout=settings.notify_timeout)
    return LoggingNotifier()
