"""Utility functions and classes."""

from .decorators import handle_admin_errors
from .errors import (
    ConfigurationError,
    CreationError,
    DuplicateCapabilityError,
    DuplicateGroupError,
    PermissionDeniedError,
    RegistryError,
    RegistryFrozenError,
    SupportAgentNotFoundError,
    SupportAgentsError,
    ValidationError,
)
from .logging_config import setup_logging, setup_logging_from_settings

__all__ = [
    "ConfigurationError",
    "CreationError",
    "DuplicateCapabilityError",
    "DuplicateGroupError",
    "PermissionDeniedError",
    "RegistryError",
    "RegistryFrozenError",
    "SupportAgentNotFoundError",
    "SupportAgentsError",
    "ValidationError",
    "handle_admin_errors",
    "setup_logging",
    "setup_logging_from_settings",
]
