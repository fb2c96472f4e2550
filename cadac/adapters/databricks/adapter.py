"""
Databricks adapter.

Connection strings are validated and materializations rendered, but connecting
is not implemented yet.
"""

from cadac.adapters.base import DatabaseAdapter, DatabaseConnection
from cadac.adapters.registry import register_adapter


class DatabricksAdapter(DatabaseAdapter):
    """Databricks database adapter (connection not implemented)."""

    dialect = "databricks"
    schemes = ("databricks",)
    sqlglot_dialect = "databricks"

    def connect(self, connection_string: str, timeout: float | None = None) -> DatabaseConnection:
        self.validate_connection_string(connection_string)
        raise NotImplementedError("Databricks adapter is not implemented yet")


# Register the adapter
register_adapter("databricks", DatabricksAdapter)
