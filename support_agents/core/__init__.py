"""Core infrastructure: configuration and hooks."""

from .config import Settings, get_settings
from .hooks import HookRegistry

__all__ = ["HookRegistry", "Settings", "get_settings"]
