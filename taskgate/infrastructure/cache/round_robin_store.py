"""Redis-backed round-robin cursor store (implements IRoundRobinCursorStore).

Each group's cursor is a Redis counter advanced with INCR, so several
processes share one rotation and the rotation survives restarts. The
selected index is (counter - 1) mod size. Call connect() at startup and
disconnect() at shutdown.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis

from taskgate.core.config import Settings, get_settings
from taskgate.infrastructure.cache.keys import round_robin_key, round_robin_pattern

logger = logging.getLogger(__name__)


class RedisRoundRobinCursorStore:
    """Round-robin cursors kept in Redis."""

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize.

        Args:
            redis_client: Optional Redis client for testing or DI.
            settings: Connection settings and key namespace.
        """
        self.redis = redis_client
        self.settings = settings or get_settings()

    async def connect(self) -> bool:
        """Open and ping the connection. Returns False when Redis is unreachable."""
        if self.redis is not None:
            return True
        s = self.settings
        client = redis.Redis(
            host=s.redis_host,
            port=s.redis_port,
            db=s.redis_db,
            password=s.redis_password.get_secret_value() if s.redis_password else None,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
        try:
            await client.ping()
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning("Redis connection failed: %s", e)
            await client.aclose()
            return False
        self.redis = client
        logger.info("Round-robin store connected: %s:%s", s.redis_host, s.redis_port)
        return True

    async def disconnect(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Round-robin store disconnected")

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise RuntimeError("RedisRoundRobinCursorStore is not connected")
        return self.redis

    async def next_index(self, group_id: str, size: int) -> int:
        if size <= 0:
            raise ValueError("size must be positive")
        value = await self._client().incr(
            round_robin_key(self.settings.round_robin_key_prefix, group_id)
        )
        index = (int(value) - 1) % size
        logger.debug("Round-robin %s -> %d of %d", group_id, index, size)
        return index

    async def reset(self, group_id: str | None = None) -> None:
        client = self._client()
        namespace = self.settings.round_robin_key_prefix
        if group_id is not None:
            await client.delete(round_robin_key(namespace, group_id))
            return
        keys = [key async for key in client.scan_iter(match=round_robin_pattern(namespace))]
        if keys:
            await client.delete(*keys)
        logger.info("Reset %d round-robin cursors", len(keys))
