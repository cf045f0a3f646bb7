"""Capability resolution for support agents.

The resolver turns a support agent record into the set of capabilities it
may actually use, and answers access checks against that set.

Security model:
- Effective set = (granted ∪ granting admin's capabilities) ∩ registry
- Keys missing from the registry are never granted
- Missing or malformed agent records resolve to the empty set (fail closed)
- has_capability() never raises; any doubt resolves to "deny"
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .capabilities import CapabilityRegistry
from .identity import SupportAgent

logger = logging.getLogger(__name__)

AdminCapabilityProvider = Callable[[SupportAgent], Iterable[str]]

DEFAULT_PLATFORM_MARKER = "[WU]"


class CapabilityResolver:
    """Computes and checks effective capabilities for support agents.

    Purely functional: every call re-derives the result from the agent
    snapshot, the registry and the granting admin's capabilities. Nothing
    is cached.

    Example:
        resolver = CapabilityResolver(registry)
        resolver.effective_capabilities(agent, {"manage_sites"})
        resolver.has_capability(agent, "edit_users")
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        admin_capabilities: AdminCapabilityProvider | None = None,
        platform_marker: str = DEFAULT_PLATFORM_MARKER,
    ):
        """Initialize the resolver.

        Args:
            registry: The capability catalogue
            admin_capabilities: Returns the granting admin's capabilities for an
                agent; used when callers don't pass granting_admin_caps
            platform_marker: Prefix for platform capability titles in listings
        """
        self.registry = registry
        self._admin_capabilities = admin_capabilities
        self.platform_marker = platform_marker

    def effective_capabilities(
        self,
        agent: SupportAgent | Mapping[str, Any] | None,
        granting_admin_caps: Iterable[str] | None = None,
    ) -> frozenset[str]:
        """Compute the capabilities an agent may use.

        Args:
            agent: Support agent record (or its dict form)
            granting_admin_caps: Capabilities held by the granting admin. If None,
                the configured admin capability provider is asked.

        Returns:
            Registered keys from the agent's grants and the admin's capabilities
        """
        resolved = self._coerce_agent(agent)
        if resolved is None:
            return frozenset()

        if granting_admin_caps is None:
            granting_admin_caps = self._provided_admin_caps(resolved)

        candidates = set(resolved.granted_capabilities)
        candidates.update(self._admin_keys(granting_admin_caps))

        return frozenset(key for key in candidates if self.registry.is_registered(key))

    def has_capability(
        self,
        agent: SupportAgent | Mapping[str, Any] | None,
        key: str,
        granting_admin_caps: Iterable[str] | None = None,
    ) -> bool:
        """Check whether an agent may use a capability.

        Returns False for a missing agent, an empty key, or any key that is
        not registered.
        """
        if agent is None or not key or not isinstance(key, str):
            return False
        return key in self.effective_capabilities(agent, granting_admin_caps)

    def capability_titles_for_display(
        self,
        agent: SupportAgent | Mapping[str, Any] | None,
        granting_admin_caps: Iterable[str] | None = None,
    ) -> dict[str, str]:
        """Map each effective capability to its display title.

        Built-in WordPress capabilities come first and use their plain title;
        platform capabilities follow, prefixed with the platform marker. Both
        keep registry order.

        Returns:
            Ordered dict of key -> title
        """
        effective = self.effective_capabilities(agent, granting_admin_caps)
        builtin: dict[str, str] = {}
        platform: dict[str, str] = {}

        for cap in self.registry:
            if cap.key not in effective:
                continue
            if self.registry.is_builtin(cap.key):
                builtin[cap.key] = cap.title
            else:
                platform[cap.key] = f"{self.platform_marker} {cap.title}".strip()

        return {**builtin, **platform}

    def display_groups(
        self,
        agent: SupportAgent | Mapping[str, Any] | None,
        granting_admin_caps: Iterable[str] | None = None,
    ) -> dict[str, dict[str, str]]:
        """Effective capability titles grouped by registry group.

        Groups without any effective capability are omitted.
        """
        effective = self.effective_capabilities(agent, granting_admin_caps)
        groups: dict[str, dict[str, str]] = {}
        for group, capabilities in self.registry.all_capabilities().items():
            titles = {cap.key: cap.title for cap in capabilities if cap.key in effective}
            if titles:
                groups[group] = titles
        return groups

    def _provided_admin_caps(self, agent: SupportAgent) -> Iterable[str]:
        if self._admin_capabilities is None:
            return ()
        return self._admin_capabilities(agent) or ()

    @staticmethod
    def _admin_keys(granting_admin_caps: Any) -> set[str]:
        if isinstance(granting_admin_caps, str):
            return {granting_admin_caps}
        if isinstance(granting_admin_caps, Mapping):
            # {capability: bool}, as user records store them
            return {
                cap for cap, held in granting_admin_caps.items() if held and isinstance(cap, str)
            }
        try:
            return {cap for cap in granting_admin_caps if isinstance(cap, str)}
        except TypeError:
            logger.warning(
                f"Ignoring non-iterable admin capabilities: {type(granting_admin_caps).__name__}"
            )
            return set()

    @staticmethod
    def _coerce_agent(agent: SupportAgent | Mapping[str, Any] | None) -> SupportAgent | None:
        if agent is None:
            return None
        if isinstance(agent, SupportAgent):
            return agent
        if isinstance(agent, Mapping):
            try:
                return SupportAgent.from_dict(agent)
            except PydanticValidationError as e:
                logger.warning(f"Malformed support agent record, denying all capabilities: {e}")
                return None
        logger.warning(f"Unexpected support agent type {type(agent).__name__}, denying all")
        return None
