"""Cache: Redis round-robin cursor store and key builders."""

from taskgate.infrastructure.cache.keys import round_robin_key, round_robin_pattern
from taskgate.infrastructure.cache.round_robin_store import RedisRoundRobinCursorStore

__all__ = ["RedisRoundRobinCursorStore", "round_robin_key", "round_robin_pattern"]
