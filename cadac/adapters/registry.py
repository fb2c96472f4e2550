"""
Adapter registry for managing database adapters.

Adapters register themselves with the default registry when their module is
imported; engines may also be given a registry of their own.
"""

import logging

from cadac.exceptions import UnsupportedDialectError

from .base import DatabaseAdapter


class AdapterRegistry:
    """Registry of database adapters keyed by dialect."""

    def __init__(self):
        self._adapters: dict[str, type[DatabaseAdapter]] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def register(self, dialect: str, adapter_class: type[DatabaseAdapter]) -> None:
        """
        Register a database adapter.

        Args:
            dialect: Dialect identifier (e.g., 'postgres', 'snowflake')
            adapter_class: Adapter class that implements DatabaseAdapter
        """
        self._adapters[dialect.lower()] = adapter_class
        self.logger.debug(f"Registered adapter: {dialect} -> {adapter_class.__name__}")

    def get_adapter_class(self, dialect: str) -> type[DatabaseAdapter] | None:
        """Get the adapter class for a dialect, or None if not registered."""
        return self._adapters.get(dialect.lower())

    def get(self, dialect: str) -> DatabaseAdapter:
        """
        Create the adapter for a dialect.

        Raises:
            UnsupportedDialectError: If no adapter is registered for the dialect
        """
        adapter_class = self.get_adapter_class(dialect)
        if adapter_class is None:
            raise UnsupportedDialectError(dialect, supported=self.list_adapters())
        return adapter_class()

    def for_scheme(self, scheme: str) -> DatabaseAdapter:
        """
        Create the adapter that accepts a connection string scheme.

        Raises:
            UnsupportedDialectError: If no registered adapter accepts the scheme
        """
        scheme = scheme.lower()
        for dialect in sorted(self._adapters):
            adapter_class = self._adapters[dialect]
            if scheme in adapter_class.schemes:
                return adapter_class()
        raise UnsupportedDialectError(scheme, supported=self.list_adapters())

    def list_adapters(self) -> list[str]:
        """Get list of registered dialects."""
        return sorted(self._adapters)

    def is_supported(self, dialect: str) -> bool:
        """Check if a dialect has a registered adapter."""
        return dialect.lower() in self._adapters


# Global registry instance
_registry = AdapterRegistry()


def default_registry() -> AdapterRegistry:
    """The registry populated by the bundled adapters."""
    return _registry


def register_adapter(dialect: str, adapter_class: type[DatabaseAdapter]) -> None:
    """Register an adapter with the global registry."""
    _registry.register(dialect, adapter_class)


def list_available_adapters() -> list[str]:
    """Get list of available dialects."""
    return _registry.list_adapters()


def is_adapter_supported(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return _registry.is_supported(dialect)
