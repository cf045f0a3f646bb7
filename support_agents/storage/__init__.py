"""Storage backends for options, user accounts and support agents."""

from .agent_store import SupportAgentStore
from .option_store import OptionStore

__all__ = ["OptionStore", "SupportAgentStore"]
