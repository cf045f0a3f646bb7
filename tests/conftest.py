"""Pytest configuration and fixtures for support agents tests."""

from pathlib import Path
from typing import Any

import pytest

from support_agents.accounts import UserAccount, UserDirectory
from support_agents.admin.actions import SupportAgentAdmin
from support_agents.admin.list_table import SupportAgentListTable
from support_agents.core.config import Settings
from support_agents.core.hooks import HookRegistry
from support_agents.manager import SupportAgentManager
from support_agents.permissions.capabilities import Capability, CapabilityRegistry
from support_agents.permissions.defaults import build_default_registry
from support_agents.permissions.resolver import CapabilityResolver
from support_agents.storage.agent_store import SupportAgentStore
from support_agents.storage.option_store import OptionStore


class CurrentUser:
    """Mutable stand-in for the host's current request identity."""

    def __init__(self):
        self.user_id: int | None = None

    def __call__(self) -> int | None:
        return self.user_id


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(
        option_storage_path=tmp_path / "options",
        log_dir=tmp_path / "logs",
        _env_file=None,
    )


@pytest.fixture
def options(tmp_path: Path) -> OptionStore:
    """Create an OptionStore with a temporary storage path."""
    return OptionStore(storage_path=tmp_path / "options")


@pytest.fixture
def registry() -> CapabilityRegistry:
    """Small frozen registry with one built-in and one platform group."""
    registry = CapabilityRegistry()
    registry.register_group(
        "wordpress",
        [
            Capability("manage_options", "Manage Options"),
            Capability("edit_users", "Edit Users"),
            Capability("manage_network", "Manage Network"),
        ],
    )
    registry.register_group(
        "wp-ultimo-payments",
        [
            Capability("view_billing", "View Billing"),
            Capability("wu_read_support_agents", "View Support Agents"),
            Capability("wu_add_support_agents", "Add Support Agents"),
            Capability("wu_edit_support_agents", "Edit Support Agents"),
            Capability("wu_delete_support_agents", "Delete Support Agents"),
        ],
    )
    registry.freeze()
    return registry


@pytest.fixture
def default_registry() -> CapabilityRegistry:
    return build_default_registry()


@pytest.fixture
def resolver(registry: CapabilityRegistry) -> CapabilityResolver:
    return CapabilityResolver(registry)


@pytest.fixture
def users(options: OptionStore) -> UserDirectory:
    return UserDirectory(options)


@pytest.fixture
def super_admin(users: UserDirectory) -> UserAccount:
    return users.create_user(
        "network-admin",
        "admin@example.com",
        capabilities={"manage_network", "manage_options", "edit_users"},
        is_super_admin=True,
    )


@pytest.fixture
def plain_user(users: UserDirectory) -> UserAccount:
    return users.create_user("jane", "jane@example.com", display_name="Jane Doe")


@pytest.fixture
def agent_store(options: OptionStore) -> SupportAgentStore:
    return SupportAgentStore(options)


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def current_user() -> CurrentUser:
    return CurrentUser()


@pytest.fixture
def manager(
    agent_store: SupportAgentStore,
    users: UserDirectory,
    registry: CapabilityRegistry,
    hooks: HookRegistry,
    current_user: CurrentUser,
) -> SupportAgentManager:
    return SupportAgentManager(
        agent_store, users, registry, hooks=hooks, resolve_current_identity=current_user
    )


@pytest.fixture
def admin(
    manager: SupportAgentManager,
    resolver: CapabilityResolver,
    users: UserDirectory,
    current_user: CurrentUser,
) -> SupportAgentAdmin:
    return SupportAgentAdmin(manager, resolver, users, resolve_current_identity=current_user)


@pytest.fixture
def list_table(
    manager: SupportAgentManager, resolver: CapabilityResolver, users: UserDirectory
) -> SupportAgentListTable:
    return SupportAgentListTable(manager, resolver, users)


@pytest.fixture
def agent_record() -> dict[str, Any]:
    """A stored support agent record, as found in the option store."""
    return {
        "id": 1,
        "user_id": 42,
        "granted_capabilities": ["edit_users", "view_billing"],
        "granted_by": None,
        "dashboard_widgets": {},
        "created_at": "2024-01-15T10:00:00+00:00",
        "last_login": None,
    }
