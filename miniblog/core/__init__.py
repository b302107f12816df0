"""Core configuration, database, security, errors and request context."""

from miniblog.core.config import Settings, get_settings, load_settings

__all__ = ["Settings", "get_settings", "load_settings"]
