"""Support agents plugin composition root.

SupportAgentsPlugin is built once when the host loads the add-on. It
creates every component and wires them together; hosts keep the instance
and hand its parts to whoever needs them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from . import __version__
from .accounts import UserDirectory
from .admin.actions import SupportAgentAdmin
from .admin.list_table import SupportAgentListTable
from .core.config import Settings, get_settings
from .core.hooks import HookRegistry
from .manager import IdentityResolver, SupportAgentManager
from .permissions.capabilities import CapabilityRegistry, CapabilitySpec
from .permissions.defaults import register_default_capabilities
from .permissions.identity import SupportAgent
from .permissions.resolver import CapabilityResolver
from .storage.agent_store import SupportAgentStore
from .storage.option_store import OptionStore

logger = logging.getLogger(__name__)

ExtraGroups = Mapping[str, Iterable[CapabilitySpec] | Mapping[str, Any]]


class SupportAgentsPlugin:
    """
    Process-wide container for the support agents add-on.

    Loading order:
    1. Option store and user directory
    2. Capability registry: defaults, extra groups, then the
       "register_capabilities" action; frozen afterwards
    3. Resolver, agent store, manager, admin handlers and list table
    4. "support_agents_loaded" action

    Agents inherit the capabilities of the account recorded as granted_by.
    A super-admin granter contributes every built-in WordPress capability;
    platform capabilities come only from what the account itself holds.

    Example:
        plugin = SupportAgentsPlugin(resolve_current_identity=lambda: request.user_id)
        if plugin.admin.can_view_list_page():
            rows = plugin.list_table.rows()
    """

    version = __version__

    def __init__(
        self,
        settings: Settings | None = None,
        resolve_current_identity: IdentityResolver | None = None,
        extra_capability_groups: ExtraGroups | None = None,
        hooks: HookRegistry | None = None,
        options: OptionStore | None = None,
    ):
        """
        Build and wire all components.

        Args:
            settings: Add-on settings (defaults to the shared instance)
            resolve_current_identity: Returns the current request's user id
            extra_capability_groups: Additional platform groups to register
            hooks: Hook registry; callbacks added before construction can
                extend the registry through "register_capabilities"
            options: Option store (defaults to one under settings.option_storage_path)
        """
        self.settings = settings or get_settings()
        self.hooks = hooks or HookRegistry()
        self.options = options or OptionStore(
            self.settings.option_storage_path, prefix=self.settings.option_prefix
        )
        self.users = UserDirectory(self.options)

        self.registry = self._build_registry(extra_capability_groups or {})

        self.resolver = CapabilityResolver(
            self.registry,
            admin_capabilities=self._granting_admin_capabilities,
            platform_marker=self.settings.platform_marker,
        )
        self.store = SupportAgentStore(self.options)
        self.manager = SupportAgentManager(
            self.store,
            self.users,
            self.registry,
            hooks=self.hooks,
            resolve_current_identity=resolve_current_identity,
        )
        self.admin = SupportAgentAdmin(
            self.manager,
            self.resolver,
            self.users,
            resolve_current_identity=resolve_current_identity,
            admin_base_url=self.settings.admin_base_url,
        )
        self.list_table = SupportAgentListTable(self.manager, self.resolver, self.users)

        logger.info(
            f"Support agents {self.version} loaded with {len(self.registry)} capabilities "
            f"in {len(self.registry.all_capabilities())} groups"
        )
        self.hooks.do_action("support_agents_loaded", self)

    def _build_registry(self, extra_groups: ExtraGroups) -> CapabilityRegistry:
        registry = register_default_capabilities(CapabilityRegistry())
        for name, capabilities in extra_groups.items():
            registry.register_group(name, capabilities)
        self.hooks.do_action("register_capabilities", registry)
        registry.freeze()
        return registry

    def _granting_admin_capabilities(self, agent: SupportAgent) -> frozenset[str]:
        if not self.settings.inherit_admin_capabilities or agent.granted_by is None:
            return frozenset()
        granter = self.users.get_user(agent.granted_by)
        if granter is None:
            return frozenset()
        if granter.is_super_admin:
            # Super admins hold every built-in WordPress capability
            builtin = {key for key in self.registry.keys() if self.registry.is_builtin(key)}
            return granter.capabilities | builtin
        return granter.capabilities

    def has_capability(self, agent: SupportAgent | None, key: str) -> bool:
        """Access gate predicate for the admin rendering layer."""
        return self.resolver.has_capability(agent, key)

    def current_user_can(self, key: str) -> bool:
        """Check a capability for the current request's user."""
        return self.admin.current_user_can(key)
