"""Admin page handlers and list data for support agents."""

from .actions import FORM_CAPABILITIES, LIST_PAGE_CAPABILITY, SupportAgentAdmin
from .list_table import COLUMNS, SupportAgentListTable, SupportAgentRow

__all__ = [
    "COLUMNS",
    "FORM_CAPABILITIES",
    "LIST_PAGE_CAPABILITY",
    "SupportAgentAdmin",
    "SupportAgentListTable",
    "SupportAgentRow",
]
