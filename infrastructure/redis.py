from typing import Any, Optional
import json
import logging

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis connection used to publish notification envelopes.

    Usage:
        client = RedisClient.from_url("redis://localhost:6379/0")
        await client.init()
        await client.publish_json("joystick-channel", {"event": "move", "data": {...}})
        await client.close()

    A publish that hits a dropped connection reconnects once and retries;
    a second failure propagates to the caller.
    """

    def __init__(self, url: str, *, decode_responses: bool = True):
        self.url = url
        self.decode_responses = decode_responses
        self._client: Optional[redis.Redis] = None

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisClient":
        return cls(url, **kwargs)

    async def init(self) -> None:
        """Connect and PING. Must be awaited before publishing."""
        if self._client is not None:
            return
        self._client = redis.from_url(self.url, decode_responses=self.decode_responses)
        await self._client.ping()
        logger.info(f"[BROADCAST] connected to {self.url}")

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None

    def get(self) -> redis.Redis:
        """Return the underlying `redis.Redis` client. Raises if not initialized."""
        if self._client is None:
            raise RuntimeError("Redis client not initialized; call init() first")
        return self._client

    async def _reconnect(self) -> None:
        await self.close()
        await self.init()

    async def publish_json(self, channel: str, message: Any) -> int:
        """Publish `message` as compact JSON on `channel`. Returns the subscriber count."""
        payload = json.dumps(message, separators=(",", ":"))
        try:
            return await self.get().publish(channel, payload)
        except RedisConnectionError as exc:
            logger.warning(f"[BROADCAST] publish on {channel} lost the connection ({exc}); reconnecting")
            await self._reconnect()
            return await self.get().publish(channel, payload)
