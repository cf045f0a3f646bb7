"""Support agent lifecycle.

Handles the processes related to support agents: creating them from an
existing account or by inviting a new one, editing what they are granted,
deleting them, looking them up, and hiding the network dashboard widgets
they are not allowed to see.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .accounts import UserAccount, UserDirectory, is_valid_email
from .core.hooks import HookRegistry
from .permissions.capabilities import CapabilityRegistry
from .permissions.identity import SupportAgent
from .storage.agent_store import SupportAgentStore
from .utils.errors import CreationError, SupportAgentNotFoundError, ValidationError

logger = logging.getLogger(__name__)

IdentityResolver = Callable[[], int | None]

# Dashboard contexts widgets can be moved into besides their own
DASHBOARD_SIDE_CONTEXT = "side"


class SupportAgentCreateRequest(BaseModel):
    """Data submitted by the "add new support agent" form."""

    type: Literal["existing", "new"] = Field(
        default="existing", description="Link an existing user or invite a new one"
    )
    user_id: int | None = Field(None, description="Existing user id (type=existing)")
    username: str | None = Field(None, description="New username (type=new)")
    email: str | None = Field(None, description="New email address (type=new)")
    password: str | None = Field(None, description="Optional password (type=new)")
    granted_capabilities: list[str] = Field(
        default_factory=list, description="Capabilities to grant right away"
    )
    granted_by: int | None = Field(None, description="Admin user creating the agent")

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> SupportAgentCreateRequest:
        """Build a request from raw form data.

        Raises:
            ValidationError: If the data doesn't fit the form
        """
        fields = dict(data)
        if not fields.get("set_password", True) or fields.get("password") in ("", False):
            fields["password"] = None
        for key in ("user_id", "username", "email"):
            if fields.get(key) in ("", 0, "0"):
                fields[key] = None
        try:
            return cls.model_validate(fields)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid support agent data: {e}") from e


class SupportAgentManager:
    """
    Creates, edits, deletes and looks up support agents.

    Emits these hooks:
    - filter "support_agent_create_data" (SupportAgentCreateRequest)
    - action "support_agent_created" (agent)
    - action "support_agent_updated" (agent, previous)
    - action "support_agent_deleted" (agent)
    """

    def __init__(
        self,
        store: SupportAgentStore,
        users: UserDirectory,
        registry: CapabilityRegistry,
        hooks: HookRegistry | None = None,
        resolve_current_identity: IdentityResolver | None = None,
    ):
        """
        Initialize the manager.

        Args:
            store: Support agent persistence
            users: Host user accounts
            registry: Capability catalogue used to validate grants
            hooks: Hook registry for lifecycle events
            resolve_current_identity: Returns the user id of the current request
        """
        self.store = store
        self.users = users
        self.registry = registry
        self.hooks = hooks or HookRegistry()
        self._resolve_current_identity = resolve_current_identity

    # -- creation -----------------------------------------------------------

    def create_support_agent(
        self, request: SupportAgentCreateRequest | Mapping[str, Any]
    ) -> SupportAgent:
        """
        Create a support agent from an existing user or a new invite.

        Args:
            request: Create request or raw form data

        Returns:
            The new SupportAgent

        Raises:
            ValidationError: Bad input, unknown or duplicate user, user already
                an agent, or unregistered capabilities
            CreationError: If the new user account could not be created
        """
        if not isinstance(request, SupportAgentCreateRequest):
            request = SupportAgentCreateRequest.from_form(request)

        request = self.hooks.apply_filters("support_agent_create_data", request)
        self.validate_capabilities(request.granted_capabilities)

        if request.type == "new":
            user = self._provision_user(request)
        else:
            user = self._existing_user(request.user_id)

        if self.store.get_by_user(user.id) is not None:
            raise ValidationError(
                f"User {user.username} is already a support agent", code="already_agent"
            )

        agent = self.store.add(
            user_id=user.id,
            granted_capabilities=request.granted_capabilities,
            granted_by=request.granted_by,
        )
        logger.info(f"Created support agent {agent.id} for user {user.username}")
        self.hooks.do_action("support_agent_created", agent)
        return agent

    def _existing_user(self, user_id: int | None) -> UserAccount:
        if not user_id or user_id < 1:
            raise ValidationError("Select an existing user", code="missing_user")
        user = self.users.get_user(user_id)
        if user is None:
            raise ValidationError(f"User not found: {user_id}", code="invalid_user")
        return user

    def _provision_user(self, request: SupportAgentCreateRequest) -> UserAccount:
        username = (request.username or "").strip()
        email = (request.email or "").strip()

        if not username:
            raise ValidationError("A username is required", code="empty_user_login")
        if not email or not is_valid_email(email):
            raise ValidationError(f"Invalid email address: {email!r}", code="invalid_email")
        if self.users.get_user_by_login(username):
            raise ValidationError(
                f"Username already exists: {username}", code="existing_user_login"
            )
        if self.users.get_user_by_email(email):
            raise ValidationError(f"Email already registered: {email}", code="existing_user_email")

        try:
            return self.users.create_user(username, email, password=request.password)
        except CreationError:
            raise
        except Exception as e:
            raise CreationError(f"Failed to create user {username}: {e}") from e

    # -- editing ------------------------------------------------------------

    def validate_capabilities(self, capabilities: Iterable[str]) -> list[str]:
        """
        Reject capability keys the registry doesn't know.

        Returns:
            The keys, as a list

        Raises:
            ValidationError: If any key is not registered
        """
        keys = list(capabilities)
        unknown = sorted(
            str(key) for key in keys if not self.registry.is_registered(key)
        )
        if unknown:
            raise ValidationError(
                f"Unknown capabilities: {', '.join(unknown)}", code="invalid_capability"
            )
        return keys

    def update_capabilities(
        self, agent_id: int, capabilities: Iterable[str], granted_by: int | None = None
    ) -> SupportAgent:
        """
        Replace the capabilities granted to an agent.

        Raises:
            SupportAgentNotFoundError: If the agent doesn't exist
            ValidationError: If any key is not registered
        """
        keys = self.validate_capabilities(capabilities)
        previous = self.require_support_agent(agent_id)
        agent = self.store.save(previous.with_capabilities(keys, granted_by=granted_by))

        logger.info(
            f"Updated support agent {agent_id} capabilities: "
            f"{sorted(agent.granted_capabilities)}"
        )
        self.hooks.do_action("support_agent_updated", agent, previous)
        return agent

    @staticmethod
    def validate_dashboard_widgets(widgets: Mapping[str, bool]) -> None:
        """
        Reject widget ids that aren't "context:priority:widget_id".

        Raises:
            ValidationError: If a widget id is malformed
        """
        for key in widgets:
            if len(str(key).split(":")) != 3:
                raise ValidationError(
                    f"Widget ids look like 'context:priority:id', got {key!r}",
                    code="invalid_widget",
                )

    def set_dashboard_widgets(self, agent_id: int, widgets: Mapping[str, bool]) -> SupportAgent:
        """
        Update which network dashboard widgets an agent may see.

        Args:
            agent_id: Support agent id
            widgets: "context:priority:widget_id" -> visible

        Raises:
            SupportAgentNotFoundError: If the agent doesn't exist
            ValidationError: If a widget id is malformed
        """
        self.validate_dashboard_widgets(widgets)
        previous = self.require_support_agent(agent_id)
        agent = self.store.save(previous.with_dashboard_widgets(widgets))
        self.hooks.do_action("support_agent_updated", agent, previous)
        return agent

    def record_login(self, user_id: int, when: datetime | None = None) -> SupportAgent | None:
        """Stamp last_login on the agent linked to a user, if there is one."""
        agent = self.store.get_by_user(user_id)
        if agent is None:
            return None
        return self.store.save(agent.with_login(when))

    # -- deletion -----------------------------------------------------------

    def delete_support_agent(self, agent_id: int) -> SupportAgent:
        """
        Delete a support agent. The user account is left untouched.

        Returns:
            The deleted agent record

        Raises:
            SupportAgentNotFoundError: If the agent doesn't exist
        """
        agent = self.require_support_agent(agent_id)
        self.store.delete(agent_id)
        logger.info(f"Deleted support agent {agent_id} (user {agent.user_id} kept)")
        self.hooks.do_action("support_agent_deleted", agent)
        return agent

    # -- lookups ------------------------------------------------------------

    def get_support_agent(self, agent_id: int) -> SupportAgent | None:
        return self.store.get(agent_id)

    def require_support_agent(self, agent_id: int) -> SupportAgent:
        agent = self.store.get(agent_id)
        if agent is None:
            raise SupportAgentNotFoundError(agent_id)
        return agent

    def get_support_agent_by_user(self, user_id: int | None) -> SupportAgent | None:
        if user_id is None:
            return None
        return self.store.get_by_user(user_id)

    def get_current_support_agent(self) -> SupportAgent | None:
        """The agent linked to the current request's user, if any."""
        if self._resolve_current_identity is None:
            return None
        return self.get_support_agent_by_user(self._resolve_current_identity())

    def list_support_agents(self) -> list[SupportAgent]:
        return self.store.all()

    # -- dashboard ----------------------------------------------------------

    def clean_up_widgets(
        self,
        meta_boxes: dict[str, dict[str, dict[str, Any]]],
        agent: SupportAgent | None = None,
    ) -> dict[str, dict[str, dict[str, Any]]]:
        """
        Remove the widgets hidden from the current agent.

        Args:
            meta_boxes: Network dashboard widgets as context -> priority -> id
            agent: Agent to filter for (defaults to the current agent)

        Returns:
            The same structure with hidden widgets removed (modified in place)
        """
        agent = agent or self.get_current_support_agent()
        if agent is None:
            return meta_boxes

        for key in agent.hidden_dashboard_widgets:
            parts = key.split(":")
            if len(parts) != 3:
                continue
            context, priority, widget_id = parts
            for place in (context, DASHBOARD_SIDE_CONTEXT):
                meta_boxes.get(place, {}).get(priority, {}).pop(widget_id, None)

        return meta_boxes
