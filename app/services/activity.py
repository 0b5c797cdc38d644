import logging
from typing import Protocol

import httpx

from app.exceptions.custom import ActivitySinkError
from app.schemas.activity import ActivityEvent

logger = logging.getLogger(__name__)


class ActivitySink(Protocol):
    async def record_activity(self, event: ActivityEvent) -> None: ...


class LoggingActivitySink:
    """Writes activity events to the application log."""

    async def record_activity(self, event: ActivityEvent) -> None:
        logger.info(
            "Activity %s (restaurant=%s, actor=%s): %s",
            event.event_type, event.restaurant_id, event.actor, event.description,
        )


class WebhookActivitySink:
    """Posts activity events as JSON to an external activity-log endpoint."""

    def __init__(self, client: httpx.AsyncClient, url: str):
        self._client = client
        self._url = url

    async def record_activity(self, event: ActivityEvent) -> None:
        resp = await self._client.post(self._url, json=event.model_dump(mode="json"))
        if resp.status_code >= 400:
            raise ActivitySinkError(resp.text, status_code=resp.status_code)
        logger.info("Posted %s activity for restaurant %s", event.event_type, event.restaurant_id)
