"""Metadata store and configuration view for test cases."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType

logger = logging.getLogger(__name__)


class MetadataStore:
    """Ordered string-to-string metadata of a test case.

    Keys are unique and insertion ordered; setting an existing key replaces
    its value without changing its position.

    Example:
        store = MetadataStore()
        store.set("ident", "basic_io")
        store.set("descr", "Checks basic I/O")
        if store.has("descr"):
            print(store.get("descr"))
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._vars: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        """Store a value, replacing any previous value for the name.

        Args:
            name: Variable name.
            value: Variable value.

        Raises:
            TypeError: If name or value is not a string.
        """
        if not isinstance(name, str):
            raise TypeError(f"Metadata name must be a string, got {type(name).__name__}")
        if not isinstance(value, str):
            raise TypeError(f"Metadata value for '{name}' must be a string, got {type(value).__name__}")
        self._vars[name] = value
        logger.debug("Metadata %s = %r", name, value)

    def get(self, name: str) -> str:
        """Get a value by name.

        Args:
            name: Variable name.

        Returns:
            The stored value.

        Raises:
            KeyError: If the variable is not defined.
        """
        return self._vars[name]

    def has(self, name: str) -> bool:
        """Check if a variable is defined.

        Args:
            name: Variable name.

        Returns:
            True if the variable exists.
        """
        return name in self._vars

    def items(self) -> list[tuple[str, str]]:
        """Return the variables as (name, value) pairs in insertion order."""
        return list(self._vars.items())

    def as_dict(self) -> Mapping[str, str]:
        """Return a read-only snapshot of the variables."""
        return MappingProxyType(dict(self._vars))

    def clear(self) -> None:
        """Release all variables."""
        self._vars.clear()

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __contains__(self, name: object) -> bool:
        return name in self._vars


class ConfigView:
    """Read-only view over an optional configuration mapping.

    A view built from None represents an absent configuration, which is
    distinct from an empty one; both answer has() with False.
    """

    def __init__(self, config: Mapping[str, str] | None = None) -> None:
        """Initialize the view.

        Args:
            config: Configuration variables, or None if no configuration
                was supplied.
        """
        self._config = config

    @property
    def present(self) -> bool:
        """Return True if a configuration was supplied, even an empty one."""
        return self._config is not None

    def has(self, name: str) -> bool:
        """Check if a configuration variable is defined."""
        if self._config is None:
            return False
        return name in self._config

    def get(self, name: str) -> str:
        """Get a configuration variable.

        Args:
            name: Variable name.

        Returns:
            The configured value.

        Raises:
            KeyError: If the variable is not defined.
        """
        if self._config is None:
            raise KeyError(name)
        return self._config[name]

    def get_or(self, name: str, default: str) -> str:
        """Get a configuration variable, falling back to a default.

        Args:
            name: Variable name.
            default: Value returned when the variable is not defined.

        Returns:
            The configured value or the default.
        """
        if not self.has(name):
            return default
        return self.get(name)
