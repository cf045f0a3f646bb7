"""Tests for SupportAgentManager."""

from datetime import UTC, datetime

import pytest

from support_agents.accounts import UserAccount, UserDirectory
from support_agents.core.hooks import HookRegistry
from support_agents.manager import SupportAgentCreateRequest, SupportAgentManager
from support_agents.utils.errors import (
    CreationError,
    SupportAgentNotFoundError,
    ValidationError,
)


class TestCreateRequest:
    """Tests for SupportAgentCreateRequest.from_form()."""

    def test_defaults_to_existing(self):
        request = SupportAgentCreateRequest.from_form({"user_id": "3"})

        assert request.type == "existing"
        assert request.user_id == 3
        assert request.granted_capabilities == []

    def test_empty_fields_become_none(self):
        request = SupportAgentCreateRequest.from_form(
            {"type": "new", "user_id": "0", "username": "", "email": ""}
        )
        assert (request.user_id, request.username, request.email) == (None, None, None)

    def test_password_dropped_unless_set(self):
        request = SupportAgentCreateRequest.from_form(
            {"type": "new", "username": "bob", "password": "pw", "set_password": False}
        )
        assert request.password is None

    def test_invalid_form(self):
        with pytest.raises(ValidationError):
            SupportAgentCreateRequest.from_form({"type": "sideways"})


class TestCreateSupportAgent:
    """Tests for create_support_agent()."""

    def test_from_existing_user(self, manager: SupportAgentManager, plain_user: UserAccount):
        agent = manager.create_support_agent(
            {"type": "existing", "user_id": plain_user.id, "granted_capabilities": ["edit_users"]}
        )

        assert agent.user_id == plain_user.id
        assert agent.granted_capabilities == {"edit_users"}
        assert manager.get_support_agent(agent.id) == agent

    def test_invite_new_user(self, manager: SupportAgentManager, users: UserDirectory):
        agent = manager.create_support_agent(
            SupportAgentCreateRequest(
                type="new", username="bob", email="bob@example.com", password="pw"
            )
        )

        user = users.get_user_by_login("bob")
        assert user is not None
        assert agent.user_id == user.id
        assert user.password_hash is not None

    def test_records_granter(self, manager: SupportAgentManager, plain_user, super_admin):
        agent = manager.create_support_agent(
            {"user_id": plain_user.id, "granted_by": super_admin.id}
        )
        assert agent.granted_by == super_admin.id

    def test_rejects_unregistered_capabilities(self, manager: SupportAgentManager, plain_user):
        with pytest.raises(ValidationError) as exc_info:
            manager.create_support_agent(
                {"user_id": plain_user.id, "granted_capabilities": ["zeta", "edit_users", "alpha"]}
            )

        assert exc_info.value.code == "invalid_capability"
        assert "alpha, zeta" in str(exc_info.value)
        assert manager.list_support_agents() == []

    @pytest.mark.parametrize(
        "data, code",
        [
            ({"type": "existing"}, "missing_user"),
            ({"type": "existing", "user_id": 999}, "invalid_user"),
            ({"type": "new", "email": "x@example.com"}, "empty_user_login"),
            ({"type": "new", "username": "bob", "email": "nope"}, "invalid_email"),
            ({"type": "new", "username": "JANE", "email": "x@example.com"}, "existing_user_login"),
            (
                {"type": "new", "username": "bob", "email": "jane@example.com"},
                "existing_user_email",
            ),
        ],
    )
    def test_validation_errors(self, manager: SupportAgentManager, plain_user, data, code):
        with pytest.raises(ValidationError) as exc_info:
            manager.create_support_agent(data)
        assert exc_info.value.code == code

    def test_user_already_agent(self, manager: SupportAgentManager, plain_user):
        manager.create_support_agent({"user_id": plain_user.id})

        with pytest.raises(ValidationError) as exc_info:
            manager.create_support_agent({"user_id": plain_user.id})
        assert exc_info.value.code == "already_agent"

    def test_provisioning_failure_wrapped(
        self, manager: SupportAgentManager, users: UserDirectory, monkeypatch
    ):
        def broken(*args, **kwargs):
            raise RuntimeError("mail server down")

        monkeypatch.setattr(users, "create_user", broken)

        with pytest.raises(CreationError) as exc_info:
            manager.create_support_agent(
                {"type": "new", "username": "bob", "email": "b@example.com"}
            )
        assert exc_info.value.code == "creation_failed"

    def test_create_hooks(self, manager: SupportAgentManager, hooks: HookRegistry, plain_user):
        created = []
        hooks.add_filter(
            "support_agent_create_data",
            lambda request: request.model_copy(update={"granted_capabilities": ["view_billing"]}),
        )
        hooks.add_action("support_agent_created", created.append)

        agent = manager.create_support_agent({"user_id": plain_user.id})

        assert agent.granted_capabilities == {"view_billing"}
        assert created == [agent]


class TestEditSupportAgent:
    """Tests for capability and widget edits."""

    @pytest.fixture
    def agent(self, manager: SupportAgentManager, plain_user):
        return manager.create_support_agent(
            {"user_id": plain_user.id, "granted_capabilities": ["edit_users"]}
        )

    def test_update_capabilities(self, manager: SupportAgentManager, hooks: HookRegistry, agent):
        updates = []
        hooks.add_action("support_agent_updated", lambda new, old: updates.append((new, old)))

        updated = manager.update_capabilities(agent.id, ["view_billing"], granted_by=1)

        assert updated.granted_capabilities == {"view_billing"}
        assert updated.granted_by == 1
        assert manager.get_support_agent(agent.id).granted_capabilities == {"view_billing"}
        assert updates == [(updated, agent)]

    def test_update_rejects_unknown_capability(self, manager: SupportAgentManager, agent):
        with pytest.raises(ValidationError):
            manager.update_capabilities(agent.id, ["not_a_cap"])
        assert manager.get_support_agent(agent.id).granted_capabilities == {"edit_users"}

    def test_update_missing_agent(self, manager: SupportAgentManager):
        with pytest.raises(SupportAgentNotFoundError):
            manager.update_capabilities(42, [])

    def test_set_dashboard_widgets(self, manager: SupportAgentManager, agent):
        updated = manager.set_dashboard_widgets(agent.id, {"normal:core:dashboard_activity": False})
        assert updated.hidden_dashboard_widgets == ["normal:core:dashboard_activity"]

    def test_invalid_widget_id(self, manager: SupportAgentManager, agent):
        with pytest.raises(ValidationError) as exc_info:
            manager.set_dashboard_widgets(agent.id, {"dashboard_activity": False})
        assert exc_info.value.code == "invalid_widget"

    def test_validate_dashboard_widgets_writes_nothing(self, manager: SupportAgentManager, agent):
        with pytest.raises(ValidationError):
            manager.validate_dashboard_widgets({"normal:core:ok": True, "bad": False})

        manager.validate_dashboard_widgets({"normal:core:ok": True})
        assert manager.get_support_agent(agent.id).dashboard_widgets == {}

    def test_record_login(self, manager: SupportAgentManager, agent, plain_user):
        when = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)

        manager.record_login(plain_user.id, when)

        assert manager.get_support_agent(agent.id).last_login == when
        assert manager.record_login(999) is None


class TestDeleteAndLookup:
    """Tests for deletion and lookups."""

    def test_delete_keeps_user(
        self, manager: SupportAgentManager, hooks: HookRegistry, users: UserDirectory, plain_user
    ):
        deleted = []
        hooks.add_action("support_agent_deleted", deleted.append)
        agent = manager.create_support_agent({"user_id": plain_user.id})

        assert manager.delete_support_agent(agent.id) == agent
        assert manager.get_support_agent(agent.id) is None
        assert users.get_user(plain_user.id) is not None
        assert deleted == [agent]

    def test_delete_missing(self, manager: SupportAgentManager):
        with pytest.raises(SupportAgentNotFoundError):
            manager.delete_support_agent(1)

    def test_current_support_agent(self, manager: SupportAgentManager, current_user, plain_user):
        agent = manager.create_support_agent({"user_id": plain_user.id})

        assert manager.get_current_support_agent() is None
        current_user.user_id = plain_user.id
        assert manager.get_current_support_agent() == agent

    def test_get_by_user_none(self, manager: SupportAgentManager):
        assert manager.get_support_agent_by_user(None) is None


class TestCleanUpWidgets:
    """Tests for clean_up_widgets()."""

    def _meta_boxes(self):
        return {
            "normal": {"core": {"dashboard_activity": {}, "dashboard_right_now": {}}},
            "side": {"core": {"dashboard_activity": {}, "dashboard_primary": {}}},
        }

    def test_hidden_widgets_removed_from_context_and_side(
        self, manager: SupportAgentManager, plain_user
    ):
        agent = manager.create_support_agent({"user_id": plain_user.id})
        agent = manager.set_dashboard_widgets(
            agent.id,
            {"normal:core:dashboard_activity": False, "normal:core:dashboard_right_now": True},
        )

        boxes = manager.clean_up_widgets(self._meta_boxes(), agent)

        assert boxes == {
            "normal": {"core": {"dashboard_right_now": {}}},
            "side": {"core": {"dashboard_primary": {}}},
        }

    def test_no_agent_leaves_widgets(self, manager: SupportAgentManager):
        assert manager.clean_up_widgets(self._meta_boxes()) == self._meta_boxes()
