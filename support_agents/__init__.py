"""Support Agents - restricted network admin access for WP Ultimo networks."""

__version__ = "1.0.8"

from .accounts import UserAccount, UserDirectory
from .admin import SupportAgentAdmin, SupportAgentListTable
from .core.config import Settings, get_settings
from .core.hooks import HookRegistry
from .manager import SupportAgentCreateRequest, SupportAgentManager
from .permissions import (
    Capability,
    CapabilityRegistry,
    CapabilityResolver,
    SupportAgent,
    build_default_registry,
)
from .plugin import SupportAgentsPlugin
from .storage import OptionStore, SupportAgentStore
from .utils.errors import (
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

__all__ = [
    "Settings",
    "get_settings",
    "HookRegistry",
    "SupportAgentsPlugin",
    # Permissions
    "Capability",
    "CapabilityRegistry",
    "CapabilityResolver",
    "SupportAgent",
    "build_default_registry",
    # Lifecycle
    "SupportAgentCreateRequest",
    "SupportAgentManager",
    "SupportAgentAdmin",
    "SupportAgentListTable",
    # Storage
    "OptionStore",
    "SupportAgentStore",
    "UserAccount",
    "UserDirectory",
    # Errors
    "SupportAgentsError",
    "RegistryError",
    "DuplicateGroupError",
    "DuplicateCapabilityError",
    "RegistryFrozenError",
    "ValidationError",
    "CreationError",
    "SupportAgentNotFoundError",
    "PermissionDeniedError",
]
