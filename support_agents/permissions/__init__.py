"""Support agent capabilities and resolution.

This module provides the capability model behind support agents:

- Capability: A grantable permission unit (key, title, description)
- CapabilityRegistry: Static catalogue of capabilities, grouped
- SupportAgent: Restricted identity wrapping a user account
- CapabilityResolver: Computes effective capabilities and answers checks

Example usage:
    registry = build_default_registry()
    resolver = CapabilityResolver(registry)

    agent = SupportAgent(id=1, user_id=42, granted_capabilities={"list_users"})
    resolver.has_capability(agent, "list_users")  # True
    resolver.has_capability(agent, "delete_sites")  # False

Security model:
- Only registered keys are ever granted; unknown keys are dropped
- Agents inherit the capabilities of the admin who granted theirs
- Missing or malformed agents resolve to no capabilities (fail-safe)
"""

from .capabilities import WORDPRESS_GROUP, Capability, CapabilityRegistry
from .defaults import (
    PLATFORM_CAPABILITY_GROUPS,
    WORDPRESS_CAPABILITIES,
    build_default_registry,
    register_default_capabilities,
)
from .identity import SupportAgent
from .resolver import CapabilityResolver

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "CapabilityResolver",
    "PLATFORM_CAPABILITY_GROUPS",
    "SupportAgent",
    "WORDPRESS_CAPABILITIES",
    "WORDPRESS_GROUP",
    "build_default_registry",
    "register_default_capabilities",
]
