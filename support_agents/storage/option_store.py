"""Network option storage.

This module provides the persistent key-value option store the add-on
writes to. Option names are prefixed ("slugified") with the add-on slug so
they can't collide with other plugins' options. Values are stored as JSON
in a single file for easy inspection.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "wp_ultimo_support_agents_"

_MISSING = object()


class OptionStore:
    """
    File-based network option store.

    Mirrors the get_option/save_option/delete_option interface of the
    host's option table. Every read goes to the in-memory copy; every
    write is flushed to disk immediately.
    """

    def __init__(self, storage_path: Path | str = "./options", prefix: str = DEFAULT_PREFIX):
        """
        Initialize option store.

        Args:
            storage_path: Directory to store the options file
            prefix: Prefix applied to every option name
        """
        self.storage_path = Path(storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        self.options_file = self.storage_path / "options.json"
        self.prefix = prefix

        self._options: dict[str, Any] = {}
        self._load()

        logger.info(f"Initialized option store with {len(self._options)} options")

    def slugify(self, name: str) -> str:
        """Return the stored name for an option (prefix + name)."""
        return f"{self.prefix}{name}"

    def _load(self) -> None:
        """Load options from file."""
        if not self.options_file.exists():
            return

        try:
            with open(self.options_file) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            self._options = data
            logger.debug(f"Loaded {len(self._options)} options from {self.options_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load options from {self.options_file}: {e}")

    def _save(self) -> bool:
        """Save options to file."""
        try:
            tmp_file = self.options_file.with_suffix(".json.tmp")
            with open(tmp_file, "w") as f:
                json.dump(self._options, f, indent=2, default=str)
            tmp_file.replace(self.options_file)
            logger.debug(f"Saved {len(self._options)} options to {self.options_file}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save options: {e}")
            return False

    def get_option(self, name: str, default: Any = None) -> Any:
        """
        Get the value of an option.

        Args:
            name: Option name, without prefix
            default: Value returned if the option isn't set

        Returns:
            The stored value or default
        """
        return self._options.get(self.slugify(name), default)

    def save_option(self, name: str, value: Any) -> bool:
        """
        Save an option.

        Args:
            name: Option name, without prefix
            value: JSON-serializable value

        Returns:
            True if the value was written to disk
        """
        key = self.slugify(name)
        previous = self._options.get(key, _MISSING)
        self._options[key] = value
        if self._save():
            return True
        # Keep memory consistent with disk
        if previous is _MISSING:
            self._options.pop(key, None)
        else:
            self._options[key] = previous
        return False

    def delete_option(self, name: str) -> bool:
        """
        Delete an option.

        Args:
            name: Option name, without prefix

        Returns:
            True if the option existed and was removed
        """
        key = self.slugify(name)
        if key not in self._options:
            return False
        value = self._options.pop(key)
        if self._save():
            logger.info(f"Deleted option: {key}")
            return True
        self._options[key] = value
        return False

    def has_option(self, name: str) -> bool:
        return self.slugify(name) in self._options

    def option_names(self) -> list[str]:
        """Names (without prefix) of every option owned by this store."""
        return sorted(
            key[len(self.prefix):] for key in self._options if key.startswith(self.prefix)
        )
