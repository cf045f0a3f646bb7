"""Admin form handlers for support agents.

The host calls dispatch() when one of the support agent forms is
submitted. Each form requires a capability; the acting user passes the gate
if they are a super admin, or a support agent whose effective capabilities
include it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import urlencode

from ..accounts import UserDirectory
from ..manager import IdentityResolver, SupportAgentCreateRequest, SupportAgentManager
from ..permissions.resolver import CapabilityResolver
from ..utils.decorators import handle_admin_errors
from ..utils.errors import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

# Mapping of form ids to the capability required to submit them
FORM_CAPABILITIES: dict[str, str] = {
    "add_new_support_agent": "wu_add_support_agents",
    "edit_support_agent": "wu_edit_support_agents",
    "delete_support_agent": "wu_delete_support_agents",
}

LIST_PAGE_ID = "wp-ultimo-support-agents"
EDIT_PAGE_ID = "wp-ultimo-edit-support-agent"
LIST_PAGE_CAPABILITY = "wu_read_support_agents"


def _parse_id(data: Mapping[str, Any], field: str = "id") -> int:
    try:
        value = int(data.get(field, 0))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {data.get(field)!r}") from None
    if value < 1:
        raise ValidationError(f"Missing {field}", code="missing_id")
    return value


def _parse_capabilities(value: Any) -> list[str]:
    """Accept a list of keys, a {key: bool} checkbox map, or a comma string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, Mapping):
        keys = [key for key, checked in value.items() if checked]
    else:
        try:
            keys = list(value)
        except TypeError:
            raise ValidationError(
                f"Invalid capabilities: {value!r}", code="invalid_capability"
            ) from None
    if not all(isinstance(key, str) for key in keys):
        raise ValidationError(f"Invalid capabilities: {value!r}", code="invalid_capability")
    return keys


class SupportAgentAdmin:
    """
    Access gate and form handlers for the support agent admin pages.

    Example:
        admin = SupportAgentAdmin(manager, resolver, users, current_user_id)
        response = admin.dispatch("add_new_support_agent", {"type": "existing", "user_id": 7})
        # {"success": True, "data": {"id": 1, "redirect_url": "..."}}
    """

    def __init__(
        self,
        manager: SupportAgentManager,
        resolver: CapabilityResolver,
        users: UserDirectory,
        resolve_current_identity: IdentityResolver | None = None,
        admin_base_url: str = "/wp-admin/network/admin.php",
    ):
        self.manager = manager
        self.resolver = resolver
        self.users = users
        self._resolve_current_identity = resolve_current_identity
        self.admin_base_url = admin_base_url
        self._handlers: dict[str, Callable[[Mapping[str, Any]], dict[str, Any]]] = {
            "add_new_support_agent": self.handle_add_new_support_agent,
            "edit_support_agent": self.handle_edit_support_agent,
            "delete_support_agent": self.handle_delete_support_agent,
        }

    def current_user_id(self) -> int | None:
        if self._resolve_current_identity is None:
            return None
        return self._resolve_current_identity()

    def user_can(self, user_id: int | None, capability: str) -> bool:
        """
        Check whether a user may use an admin capability.

        Super admins can do everything. Any other user must be a support
        agent with the capability in its effective set.
        """
        if user_id is None:
            return False
        user = self.users.get_user(user_id)
        if user is None:
            return False
        if user.is_super_admin:
            return True
        agent = self.manager.get_support_agent_by_user(user_id)
        return self.resolver.has_capability(agent, capability)

    def current_user_can(self, capability: str) -> bool:
        return self.user_can(self.current_user_id(), capability)

    def require(self, capability: str) -> None:
        """Raise PermissionDeniedError unless the current user has a capability."""
        if not self.current_user_can(capability):
            raise PermissionDeniedError(capability)

    def is_super_admin(self, user_id: int | None) -> bool:
        if user_id is None:
            return False
        user = self.users.get_user(user_id)
        return user is not None and user.is_super_admin

    def check_grantable(self, capabilities: Iterable[str]) -> None:
        """
        Reject capabilities the current user can't hand out.

        Super admins may grant any registered key. A support agent may only
        grant keys in its own effective set.

        Raises:
            ValidationError: If a key is unregistered or beyond the granter's reach
        """
        keys = self.manager.validate_capabilities(capabilities)
        actor_id = self.current_user_id()
        if self.is_super_admin(actor_id):
            return
        held = self.resolver.effective_capabilities(
            self.manager.get_support_agent_by_user(actor_id)
        )
        beyond = sorted(set(keys) - held)
        if beyond:
            raise ValidationError(
                f"Cannot grant capabilities you don't hold: {', '.join(beyond)}",
                code="invalid_capability",
            )

    def can_view_list_page(self) -> bool:
        return self.current_user_can(LIST_PAGE_CAPABILITY)

    def edit_url(self, agent_id: int) -> str:
        return f"{self.admin_base_url}?{urlencode({'page': EDIT_PAGE_ID, 'id': agent_id})}"

    def dispatch(self, form_id: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """
        Run the handler for a submitted form.

        Args:
            form_id: One of FORM_CAPABILITIES
            data: Submitted form data

        Returns:
            {"success": bool, "data": {...}} response envelope
        """
        handler = self._handlers.get(form_id)
        if handler is None:
            logger.warning(f"Unknown admin form submitted: {form_id}")
            return {
                "success": False,
                "data": {"code": "unknown_form", "message": f"Unknown form: {form_id}"},
            }
        logger.info(f"Handling admin form {form_id} for user {self.current_user_id()}")
        return handler(data)

    @handle_admin_errors
    def handle_add_new_support_agent(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Create a support agent from an existing user or a new invite."""
        self.require(FORM_CAPABILITIES["add_new_support_agent"])

        fields = dict(data)
        fields["granted_capabilities"] = _parse_capabilities(fields.get("granted_capabilities"))
        self.check_grantable(fields["granted_capabilities"])
        fields["granted_by"] = self.current_user_id()
        agent = self.manager.create_support_agent(SupportAgentCreateRequest.from_form(fields))

        return {"id": agent.id, "redirect_url": self.edit_url(agent.id)}

    @handle_admin_errors
    def handle_edit_support_agent(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Replace an agent's capabilities and dashboard widget visibility."""
        self.require(FORM_CAPABILITIES["edit_support_agent"])

        agent_id = _parse_id(data)
        capabilities = _parse_capabilities(data.get("granted_capabilities"))
        widgets = data.get("dashboard_widgets")
        if not isinstance(widgets, Mapping):
            widgets = {}

        # Everything is checked before the first write
        self.manager.validate_dashboard_widgets(widgets)
        target = self.manager.require_support_agent(agent_id)
        actor_id = self.current_user_id()
        if target.user_id == actor_id and not self.is_super_admin(actor_id):
            raise ValidationError("Support agents can't edit their own record", code="self_edit")
        self.check_grantable(capabilities)

        agent = self.manager.update_capabilities(agent_id, capabilities, granted_by=actor_id)
        if widgets:
            agent = self.manager.set_dashboard_widgets(agent_id, widgets)

        return {
            "id": agent.id,
            "granted_capabilities": sorted(agent.granted_capabilities),
            "redirect_url": self.edit_url(agent.id),
        }

    @handle_admin_errors
    def handle_delete_support_agent(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Delete a support agent, keeping the user account."""
        self.require(FORM_CAPABILITIES["delete_support_agent"])

        agent = self.manager.delete_support_agent(_parse_id(data))
        return {
            "id": agent.id,
            "message": "Support Agent removed successfully.",
            "redirect_url": f"{self.admin_base_url}?{urlencode({'page': LIST_PAGE_ID})}",
        }
