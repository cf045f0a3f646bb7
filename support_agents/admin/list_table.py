"""Row data for the support agents list page."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..accounts import UserDirectory
from ..manager import SupportAgentManager
from ..permissions.identity import SupportAgent
from ..permissions.resolver import CapabilityResolver

COLUMNS: dict[str, str] = {
    "name": "Name",
    "last_login": "Last Login",
    "date_registered": "Agent Since",
    "caps": "Capabilities",
    "id": "ID",
}


@dataclass
class SupportAgentRow:
    """One row of the support agents list."""

    id: int
    user_id: int
    name: str
    email: str | None
    user_exists: bool
    last_login: datetime | None
    date_registered: datetime
    capabilities: dict[str, str] = field(default_factory=dict)

    @property
    def caps_column(self) -> str:
        """Capability titles, one per line."""
        return "\n".join(self.capabilities.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "email": self.email,
            "user_exists": self.user_exists,
            "last_login": self.last_login.isoformat() if self.last_login else None,
            "date_registered": self.date_registered.isoformat(),
            "capabilities": self.capabilities,
        }


class SupportAgentListTable:
    """Builds list rows for support agents.

    The capabilities column shows the agent's effective capabilities,
    i.e. its own grants merged with those of the admin who granted them.
    """

    def __init__(
        self,
        manager: SupportAgentManager,
        resolver: CapabilityResolver,
        users: UserDirectory,
    ):
        self.manager = manager
        self.resolver = resolver
        self.users = users

    def row(self, agent: SupportAgent) -> SupportAgentRow:
        user = self.users.get_user(agent.user_id)
        if user is None:
            name = f"#{agent.user_id} - User not found"
        else:
            name = user.label

        return SupportAgentRow(
            id=agent.id,
            user_id=agent.user_id,
            name=name,
            email=user.email if user else None,
            user_exists=user is not None,
            last_login=agent.last_login,
            date_registered=agent.created_at,
            capabilities=self.resolver.capability_titles_for_display(agent),
        )

    def rows(self, search: str | None = None) -> list[SupportAgentRow]:
        """
        All rows, optionally filtered by a case-insensitive search on
        name or email.
        """
        rows = [self.row(agent) for agent in self.manager.list_support_agents()]
        if search:
            needle = search.lower()
            rows = [
                r for r in rows
                if needle in r.name.lower() or (r.email and needle in r.email.lower())
            ]
        return rows
