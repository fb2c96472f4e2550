"""
Configuration types for database adapters.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote, urlsplit

from cadac.exceptions import InvalidConnectionStringError


class MaterializationType(Enum):
    """Supported materialization modes."""

    TABLE = "table"
    VIEW = "view"

    @classmethod
    def from_value(cls, value: "str | MaterializationType") -> "MaterializationType":
        """
        Convert a configuration value to a MaterializationType.

        Raises:
            ValueError: If the value names no supported mode
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            supported = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unsupported materialization: {value}. Supported: {supported}"
            ) from None


@dataclass(frozen=True)
class Target:
    """A parsed connection string."""

    url: str
    scheme: str
    host: str | None = None
    port: int | None = None
    database: str | None = None
    user: str | None = None

    @classmethod
    def parse(cls, connection_string: str) -> "Target":
        """
        Split a connection string into its parts.

        Only the shape is checked here; adapters validate scheme specific rules.

        Raises:
            InvalidConnectionStringError: If the string is not a URL with a scheme
        """
        if not connection_string or "://" not in connection_string:
            raise InvalidConnectionStringError(
                "Connection string must have the form <scheme>://<location>"
            )

        parts = urlsplit(connection_string)
        if not parts.scheme:
            raise InvalidConnectionStringError(
                "Connection string must have the form <scheme>://<location>"
            )

        try:
            port = parts.port
        except ValueError as e:
            raise InvalidConnectionStringError(f"Invalid port in connection string: {e}") from e

        database = parts.path.lstrip("/") or None
        return cls(
            url=connection_string,
            scheme=parts.scheme.lower(),
            host=parts.hostname,
            port=port,
            database=unquote(database) if database else None,
            user=unquote(parts.username) if parts.username else None,
        )

    def redacted(self) -> str:
        """The connection string without its password, for logging."""
        location = self.host or ""
        if self.port:
            location += f":{self.port}"
        if self.user:
            location = f"{self.user}@{location}"
        path = f"/{self.database}" if self.database else ""
        return f"{self.scheme}://{location}{path}"
