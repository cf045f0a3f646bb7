"""Support agent persistence.

All support agent records live in a single network option, keyed by agent
id, next to an id counter option.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..permissions.identity import SupportAgent
from ..utils.errors import SupportAgentNotFoundError, SupportAgentsError
from .option_store import OptionStore

logger = logging.getLogger(__name__)

AGENTS_OPTION = "support_agents"
NEXT_ID_OPTION = "support_agents_next_id"


class SupportAgentStore:
    """Stores SupportAgent records in the option store.

    Records that fail validation on load are skipped (and logged) so a
    single corrupt entry can't take the whole list down.
    """

    def __init__(self, options: OptionStore):
        self.options = options

    def _raw(self) -> dict[str, Any]:
        data = self.options.get_option(AGENTS_OPTION, {})
        return dict(data) if isinstance(data, dict) else {}

    def _write(self, raw: dict[str, Any]) -> None:
        if not self.options.save_option(AGENTS_OPTION, raw):
            raise SupportAgentsError("Failed to persist support agents")

    def _next_id(self) -> int:
        existing = [int(key) for key in self._raw() if str(key).isdigit()]
        next_id = int(self.options.get_option(NEXT_ID_OPTION, 1) or 1)
        return max([next_id, *(i + 1 for i in existing)])

    def add(
        self,
        user_id: int,
        granted_capabilities: Iterable[str] = (),
        granted_by: int | None = None,
        dashboard_widgets: Mapping[str, bool] | None = None,
    ) -> SupportAgent:
        """
        Create and persist a new support agent record.

        Args:
            user_id: Underlying user account id
            granted_capabilities: Capability keys to grant
            granted_by: Admin user id granting them
            dashboard_widgets: Initial widget visibility

        Returns:
            The stored SupportAgent
        """
        agent = SupportAgent(
            id=self._next_id(),
            user_id=user_id,
            granted_capabilities=frozenset(granted_capabilities),
            granted_by=granted_by,
            dashboard_widgets=dict(dashboard_widgets or {}),
        )
        raw = self._raw()
        raw[str(agent.id)] = agent.to_dict()
        self._write(raw)
        self.options.save_option(NEXT_ID_OPTION, agent.id + 1)

        logger.info(f"Stored support agent {agent.id} for user {user_id}")
        return agent

    def save(self, agent: SupportAgent) -> SupportAgent:
        """
        Persist changes to an existing agent.

        Raises:
            SupportAgentNotFoundError: If the agent id isn't stored
        """
        raw = self._raw()
        if str(agent.id) not in raw:
            raise SupportAgentNotFoundError(agent.id)
        raw[str(agent.id)] = agent.to_dict()
        self._write(raw)
        logger.debug(f"Updated support agent {agent.id}")
        return agent

    def get(self, agent_id: int) -> SupportAgent | None:
        """
        Retrieve an agent by id.

        Returns:
            SupportAgent if found and valid, None otherwise
        """
        data = self._raw().get(str(agent_id))
        if data is None:
            return None
        return self._parse(agent_id, data)

    def get_by_user(self, user_id: int) -> SupportAgent | None:
        """Retrieve the agent linked to a user account, if any."""
        for agent in self.all():
            if agent.user_id == user_id:
                return agent
        return None

    def delete(self, agent_id: int) -> bool:
        """
        Delete an agent record.

        Returns:
            True if the record existed and was removed
        """
        raw = self._raw()
        if raw.pop(str(agent_id), None) is None:
            return False
        self._write(raw)
        logger.info(f"Deleted support agent record {agent_id}")
        return True

    def all(self) -> list[SupportAgent]:
        """All valid agents, ordered by id."""
        agents = []
        for key, data in self._raw().items():
            agent = self._parse(key, data)
            if agent is not None:
                agents.append(agent)
        return sorted(agents, key=lambda a: a.id)

    def count(self) -> int:
        return len(self.all())

    @staticmethod
    def _parse(key: Any, data: Any) -> SupportAgent | None:
        if not isinstance(data, Mapping):
            logger.warning(f"Skipping malformed support agent record {key}")
            return None
        try:
            return SupportAgent.from_dict(data)
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed support agent record {key}: {e}")
            return None
