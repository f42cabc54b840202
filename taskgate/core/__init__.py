"""Core: configuration, constants and application bootstrap."""

from taskgate.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
