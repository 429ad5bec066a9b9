"""
Change notifications for live-refreshing admin views.

After a successful mutation the services call ``notify(table, event, ids)``
on a ChangeNotifier. Delivery is best-effort: nothing in the trash
lifecycle or the catalog services depends on a notification arriving,
so publish failures are logged and dropped.

Channel layout (Redis pub/sub):
    <realtime_channel_prefix>:<table>   e.g. storefront:changes:products

Payload:
    {"table": "products", "event": "UPDATE", "ids": ["..."], "ts": "..."}
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Iterable, Protocol

import redis

from storefront_shared.config.logging import get_logger
from storefront_shared.config.settings import settings

logger = get_logger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"


class ChangeNotifier(Protocol):
    """Sink for table change events."""

    def notify(self, table: str, event: str, ids: Iterable[str]) -> None: ...


class NullNotifier:
    """Notifier used when realtime refresh is disabled."""

    def notify(self, table: str, event: str, ids: Iterable[str]) -> None:
        return None


class RedisChangeNotifier:
    """Publishes change events on a Redis channel per table."""

    def __init__(self, client: redis.Redis, channel_prefix: str):
        self._client = client
        self._prefix = channel_prefix

    def channel_for(self, table: str) -> str:
        return f"{self._prefix}:{table}"

    def notify(self, table: str, event: str, ids: Iterable[str]) -> None:
        payload = json.dumps(
            {
                "table": table,
                "event": event,
                "ids": [str(i) for i in ids],
                "ts": datetime.now(timezone.utc).isoformat(),
            }
        )
        try:
            self._client.publish(self.channel_for(table), payload)
        except redis.RedisError as e:
            logger.warning(
                "Change notification dropped",
                table=table,
                event=event,
                error=str(e),
            )


_notifier: ChangeNotifier | None = None


def get_notifier() -> ChangeNotifier:
    """
    Return the process-wide notifier, built from settings on first use.
    """
    global _notifier
    if _notifier is None:
        if settings.realtime_enabled:
            client = redis.Redis.from_url(
                settings.redis_url,
                socket_timeout=2,
                socket_connect_timeout=2,
            )
            _notifier = RedisChangeNotifier(client, settings.realtime_channel_prefix)
            logger.info("Realtime change notifications enabled", prefix=settings.realtime_channel_prefix)
        else:
            _notifier = NullNotifier()
    return _notifier
