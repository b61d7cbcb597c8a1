"""Outbound notification sinks.

The services publish `(event, data)` pairs; a broadcaster wraps them in the
`{"event": ..., "data": ...}` envelope the browser clients subscribe to.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional
import logging

from .redis import RedisClient

logger = logging.getLogger(__name__)


class Broadcaster(ABC):

    @abstractmethod
    async def publish(self, event: str, data: Any, *, channel: Optional[str] = None) -> None:
        """Publish one notification. `channel` overrides the default channel."""

    async def close(self) -> None:
        return None


class RedisBroadcaster(Broadcaster):
    """Publishes notifications over Redis pub/sub."""

    def __init__(self, client: RedisClient, channel: str):
        self.client = client
        self.channel = channel

    async def publish(self, event: str, data: Any, *, channel: Optional[str] = None) -> None:
        target = channel or self.channel
        receivers = await self.client.publish_json(target, {"event": event, "data": data})
        logger.debug(f"[BROADCAST] {event} -> {target} ({receivers} subscribers)")

    async def close(self) -> None:
        await self.client.close()


class LogBroadcaster(Broadcaster):
    """Used when no Redis is configured: notifications only reach the log."""

    def __init__(self, channel: str):
        self.channel = channel

    async def publish(self, event: str, data: Any, *, channel: Optional[str] = None) -> None:
        logger.info(f"[BROADCAST] {event} -> {channel or self.channel}: {data}")


async def create_broadcaster(redis_url: Optional[str], channel: str) -> Broadcaster:
    """Connect a RedisBroadcaster, or fall back to logging when no URL is set."""
    if not redis_url:
        logger.warning("[BROADCAST] no Redis URL configured; notifications are only logged")
        return LogBroadcaster(channel)
    client = RedisClient.from_url(redis_url)
    await client.init()
    logger.info(f"[BROADCAST] publishing on Redis channel '{channel}'")
    return RedisBroadcaster(client, channel)
