"""Error types for the support agents add-on."""


class SupportAgentsError(Exception):
    """Base exception for support agents errors."""

    pass


# Registry errors (fatal at startup)
class RegistryError(SupportAgentsError):
    """Raised when the capability registry is misused."""

    pass


class DuplicateGroupError(RegistryError):
    """Raised when a capability group name is registered twice."""

    def __init__(self, group: str):
        super().__init__(f"Capability group already registered: {group}")
        self.group = group


class DuplicateCapabilityError(RegistryError):
    """Raised when a capability key already belongs to another group."""

    def __init__(self, key: str, group: str, existing_group: str):
        super().__init__(
            f"Capability '{key}' in group '{group}' is already registered "
            f"in group '{existing_group}'"
        )
        self.key = key
        self.group = group
        self.existing_group = existing_group


class RegistryFrozenError(RegistryError):
    """Raised when registering after the registry was frozen."""

    def __init__(self, group: str):
        super().__init__(f"Cannot register group '{group}': registry is frozen")
        self.group = group


# Boundary errors (surfaced to the admin UI)
class ValidationError(SupportAgentsError):
    """Raised when create/edit input is invalid."""

    def __init__(self, message: str, code: str = "invalid_input"):
        super().__init__(message)
        self.code = code


class CreationError(SupportAgentsError):
    """Raised when the underlying user account could not be provisioned."""

    def __init__(self, message: str, code: str = "creation_failed"):
        super().__init__(message)
        self.code = code


class SupportAgentNotFoundError(SupportAgentsError):
    """Raised when a support agent id does not exist."""

    def __init__(self, agent_id: int):
        super().__init__(f"Support agent not found: {agent_id}")
        self.agent_id = agent_id
        self.code = "not_found"


class PermissionDeniedError(SupportAgentsError):
    """Raised when the acting identity lacks a required capability."""

    def __init__(self, capability: str):
        super().__init__(f"Permission denied: missing capability '{capability}'")
        self.capability = capability
        self.code = "permission_denied"


class ConfigurationError(SupportAgentsError):
    """Raised when configuration is missing or invalid."""

    pass
