"""Capability records and the capability registry.

The registry is the static catalogue of capabilities an admin may grant to
a support agent. It is filled once while the plugin loads, frozen, and only
read afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..utils.errors import (
    DuplicateCapabilityError,
    DuplicateGroupError,
    RegistryError,
    RegistryFrozenError,
)

logger = logging.getLogger(__name__)

WORDPRESS_GROUP = "wordpress"


@dataclass(frozen=True)
class Capability:
    """A grantable capability.

    Attributes:
        key: Unique identifier checked by access gates (e.g. "manage_sites")
        title: Label shown next to the checkbox and in listings
        description: Longer help text
    """

    key: str
    title: str
    description: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], key: str | None = None) -> Capability:
        """Create from a mapping.

        Accepts {"key", "title", "description"} as well as the
        {"title", "desc"} shape used when capabilities are keyed by name.

        Args:
            data: Capability fields
            key: Key to use when the mapping itself is keyed by capability

        Returns:
            Capability instance
        """
        return cls(
            key=key if key is not None else str(data.get("key", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", data.get("desc", "")) or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "title": self.title, "description": self.description}


CapabilitySpec = Capability | Mapping[str, Any]


def _normalize(
    group: str, capabilities: Iterable[CapabilitySpec] | Mapping[str, Any]
) -> list[Capability]:
    if isinstance(capabilities, Mapping):
        records = [
            Capability.from_mapping(value, key=key)
            if isinstance(value, Mapping)
            else Capability(key=key, title=str(value))
            for key, value in capabilities.items()
        ]
    else:
        records = [
            cap if isinstance(cap, Capability) else Capability.from_mapping(cap)
            for cap in capabilities
        ]

    for cap in records:
        if not cap.key or not isinstance(cap.key, str):
            raise RegistryError(f"Capability in group '{group}' has an empty key")
        if not cap.title:
            raise RegistryError(f"Capability '{cap.key}' in group '{group}' has no title")
    return records


class CapabilityRegistry:
    """Catalogue of grantable capabilities, organised in named groups.

    Capability keys are unique across all groups. Groups named in
    builtin_groups hold core WordPress capabilities; every other group is
    platform-specific.

    Example:
        registry = CapabilityRegistry()
        registry.register_group("wordpress", [
            Capability("manage_options", "Manage Options"),
        ])
        registry.freeze()

        registry.is_registered("manage_options")  # True
    """

    def __init__(self, builtin_groups: Iterable[str] = (WORDPRESS_GROUP,)):
        self._groups: dict[str, tuple[Capability, ...]] = {}
        self._by_key: dict[str, Capability] = {}
        self._group_of: dict[str, str] = {}
        self._builtin_groups = frozenset(builtin_groups)
        self._frozen = False

    def register_group(
        self,
        name: str,
        capabilities: Iterable[CapabilitySpec] | Mapping[str, Any],
    ) -> None:
        """Add a named group of capabilities.

        Args:
            name: Group name (e.g. "wordpress", "wp-ultimo-customers")
            capabilities: Capability records, mappings with key/title/description,
                or a mapping of key -> {"title", "desc"}

        Raises:
            RegistryFrozenError: If the registry was already frozen
            DuplicateGroupError: If the group name is already registered
            DuplicateCapabilityError: If a key already belongs to another group
            RegistryError: If a record has no key or title
        """
        if self._frozen:
            raise RegistryFrozenError(name)
        if name in self._groups:
            raise DuplicateGroupError(name)

        records = _normalize(name, capabilities)

        seen: set[str] = set()
        for cap in records:
            if cap.key in self._group_of:
                raise DuplicateCapabilityError(cap.key, name, self._group_of[cap.key])
            if cap.key in seen:
                raise DuplicateCapabilityError(cap.key, name, name)
            seen.add(cap.key)

        self._groups[name] = tuple(records)
        for cap in records:
            self._by_key[cap.key] = cap
            self._group_of[cap.key] = name

        logger.info(f"Registered capability group: {name} ({len(records)} capabilities)")

    def freeze(self) -> None:
        """Reject any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def all_capabilities(self) -> dict[str, tuple[Capability, ...]]:
        """Return group -> capability records, in registration order."""
        return dict(self._groups)

    def is_registered(self, key: object) -> bool:
        """Check whether a capability key exists in any group."""
        return isinstance(key, str) and key in self._by_key

    def get(self, key: str) -> Capability | None:
        return self._by_key.get(key)

    def group_of(self, key: str) -> str | None:
        return self._group_of.get(key)

    def is_builtin(self, key: str) -> bool:
        """Check whether a key belongs to a built-in WordPress group."""
        return self._group_of.get(key) in self._builtin_groups

    def keys(self) -> frozenset[str]:
        return frozenset(self._by_key)

    def ordered_keys(self) -> list[str]:
        """All keys in registration order (group by group)."""
        return [cap.key for caps in self._groups.values() for cap in caps]

    def __contains__(self, key: object) -> bool:
        return self.is_registered(key)

    def __iter__(self) -> Iterator[Capability]:
        for caps in self._groups.values():
            yield from caps

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        return f"CapabilityRegistry(groups={list(self._groups)}, capabilities={len(self)})"
