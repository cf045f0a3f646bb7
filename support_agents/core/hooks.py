"""Action and filter hooks.

Extension points are explicit: each hook name maps to the list of
callbacks registered for it, called in registration order. A HookRegistry
is created by the plugin and passed to whoever needs it.
"""

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class HookRegistry:
    """Registered action and filter callbacks.

    Actions are notifications: every callback receives the same arguments
    and return values are ignored. Filters thread a value through each
    callback in turn; each callback returns the (possibly modified) value.

    Example:
        hooks = HookRegistry()
        hooks.add_action("support_agent_created", notify_admins)
        hooks.do_action("support_agent_created", agent)

        hooks.add_filter("support_agent_create_data", add_default_caps)
        data = hooks.apply_filters("support_agent_create_data", data)
    """

    def __init__(self):
        self._actions: dict[str, list[Callable[..., Any]]] = {}
        self._filters: dict[str, list[Callable[..., Any]]] = {}

    def add_action(self, name: str, callback: Callable[..., Any]) -> None:
        """Register a callback for an action."""
        self._actions.setdefault(name, []).append(callback)
        logger.debug(f"Added action callback for {name}: {callback!r}")

    def add_filter(self, name: str, callback: Callable[..., Any]) -> None:
        """Register a callback for a filter."""
        self._filters.setdefault(name, []).append(callback)
        logger.debug(f"Added filter callback for {name}: {callback!r}")

    def remove_action(self, name: str, callback: Callable[..., Any]) -> bool:
        """Unregister an action callback.

        Returns:
            True if the callback was registered and removed
        """
        return self._remove(self._actions, name, callback)

    def remove_filter(self, name: str, callback: Callable[..., Any]) -> bool:
        """Unregister a filter callback.

        Returns:
            True if the callback was registered and removed
        """
        return self._remove(self._filters, name, callback)

    def has_action(self, name: str) -> bool:
        return bool(self._actions.get(name))

    def has_filter(self, name: str) -> bool:
        return bool(self._filters.get(name))

    def do_action(self, name: str, *args: Any, **kwargs: Any) -> None:
        """Call every callback registered for an action.

        Exceptions raised by a callback propagate to the caller; callbacks
        after the failing one are not called.
        """
        for callback in list(self._actions.get(name, [])):
            callback(*args, **kwargs)

    def apply_filters(self, name: str, value: Any, *args: Any, **kwargs: Any) -> Any:
        """Pass a value through every callback registered for a filter.

        Args:
            name: Filter name
            value: Initial value
            *args: Extra context passed to each callback after the value

        Returns:
            The value returned by the last callback (or the initial value)
        """
        for callback in list(self._filters.get(name, [])):
            value = callback(value, *args, **kwargs)
        return value

    @staticmethod
    def _remove(
        table: dict[str, list[Callable[..., Any]]],
        name: str,
        callback: Callable[..., Any],
    ) -> bool:
        callbacks = table.get(name, [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True
