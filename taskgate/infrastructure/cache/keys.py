"""Cache key builders. Single place for key format.

Key components must not contain CACHE_KEY_SEP to avoid colliding keys.
"""

from taskgate.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_ROUND_ROBIN


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator."""
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def round_robin_key(namespace: str, group_id: str) -> str:
    """Key holding a group's round-robin counter: {namespace}:rr:{group_id}."""
    _validate_key_component(group_id, "group_id")
    return CACHE_KEY_SEP.join((namespace, CACHE_PREFIX_ROUND_ROBIN, group_id))


def round_robin_pattern(namespace: str) -> str:
    """SCAN pattern matching every round-robin counter in namespace."""
    return CACHE_KEY_SEP.join((namespace, CACHE_PREFIX_ROUND_ROBIN, "*"))
