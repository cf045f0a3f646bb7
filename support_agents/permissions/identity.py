"""Support agent identity records.

A SupportAgent wraps an existing user account and carries the capabilities
explicitly granted to it. Records are immutable snapshots: edits produce a
new record, which the store persists.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _now() -> datetime:
    return datetime.now(UTC)


class SupportAgent(BaseModel):
    """A restricted-privilege identity linked to a user account.

    Attributes:
        id: Support agent id
        user_id: Underlying user account (referenced, not owned)
        granted_capabilities: Capability keys explicitly granted to this agent
        granted_by: User id of the admin who granted them, if known
        dashboard_widgets: "context:priority:widget_id" -> visible flag
        created_at: When the agent was created
        last_login: Last time the underlying user logged in as an agent

    Example:
        agent = SupportAgent(id=1, user_id=42, granted_capabilities={"list_users"})
        agent = agent.with_capabilities(["list_users", "edit_users"])
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Support agent id")
    user_id: int = Field(..., ge=1, description="Underlying user account id")
    granted_capabilities: frozenset[str] = Field(
        default_factory=frozenset, description="Explicitly granted capability keys"
    )
    granted_by: int | None = Field(None, description="Admin user id that granted capabilities")
    dashboard_widgets: dict[str, bool] = Field(
        default_factory=dict, description="Network dashboard widget visibility"
    )
    created_at: datetime = Field(default_factory=_now, description="When the agent was created")
    last_login: datetime | None = Field(None, description="Last login as this agent")

    @field_validator("granted_capabilities", mode="before")
    @classmethod
    def normalize_capabilities(cls, v: Any) -> Any:
        """Accept a {key: bool} map and keep only the truthy keys."""
        if v is None:
            return frozenset()
        if isinstance(v, Mapping):
            return frozenset(key for key, enabled in v.items() if enabled)
        return v

    def with_capabilities(
        self, capabilities: Iterable[str], granted_by: int | None = None
    ) -> SupportAgent:
        """Return a copy with a new set of granted capabilities."""
        update: dict[str, Any] = {"granted_capabilities": frozenset(capabilities)}
        if granted_by is not None:
            update["granted_by"] = granted_by
        return self.model_copy(update=update)

    def with_login(self, when: datetime | None = None) -> SupportAgent:
        """Return a copy with last_login set (defaults to now)."""
        return self.model_copy(update={"last_login": when or _now()})

    def with_dashboard_widgets(self, widgets: Mapping[str, bool]) -> SupportAgent:
        """Return a copy with widget visibility merged in."""
        merged = dict(self.dashboard_widgets)
        merged.update({key: bool(visible) for key, visible in widgets.items()})
        return self.model_copy(update={"dashboard_widgets": merged})

    @property
    def hidden_dashboard_widgets(self) -> list[str]:
        """Widget ids ("context:priority:widget_id") the agent must not see."""
        return [key for key, visible in self.dashboard_widgets.items() if key and not visible]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "granted_capabilities": sorted(self.granted_capabilities),
            "granted_by": self.granted_by,
            "dashboard_widgets": dict(self.dashboard_widgets),
            "created_at": self.created_at.isoformat(),
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SupportAgent:
        """Create from dictionary.

        Raises:
            pydantic.ValidationError: If the record is malformed
        """
        return cls.model_validate(dict(data))
