"""Backend and policy protocol definitions.

Defines the two narrow interfaces the reconciliation engine consumes:

- ``SchemaBackend``: run SQL, fetch rows, toggle error suppression.
- ``TablePolicy``: decide whether shared/global tables may be migrated.

Usage:
    from schema_delta.adapters.base import SchemaBackend, TablePolicy

    def describe(backend: SchemaBackend, table: str) -> list[dict]:
        previous = backend.suppress_errors(True)
        try:
            return backend.get_results(f"DESCRIBE {table};")
        finally:
            backend.suppress_errors(previous)
"""

from typing import Any, Protocol


class SchemaBackend(Protocol):
    """SQL execution interface that every backend must implement.

    All methods are synchronous; each call is one blocking round-trip.
    """

    def query(self, sql: str) -> Any:
        """Execute a statement.

        Args:
            sql: Raw SQL statement (DDL, INSERT, UPDATE, ...).

        Returns:
            Affected row count, or ``None`` if the statement failed while
            errors are suppressed.

        Raises:
            Exception: Backend-specific error, unless errors are suppressed.

        Example:
            backend.query("ALTER TABLE t ADD COLUMN age int(11)")
        """
        ...

    def get_results(self, sql: str) -> list[dict[str, Any]]:
        """Run a query and return all rows as dicts keyed by column name.

        Returns an empty list if the query failed while errors are
        suppressed.

        Example:
            rows = backend.get_results("DESCRIBE wp_posts;")
            rows[0]["Field"]
        """
        ...

    def get_col(self, sql: str) -> list[Any]:
        """Run a query and return the first column of every row."""
        ...

    def get_var(self, sql: str) -> Any:
        """Run a query and return the first column of the first row."""
        ...

    def suppress_errors(self, suppress: bool = True) -> bool:
        """Set error suppression and return the previous setting."""
        ...


class TablePolicy(Protocol):
    """Decides whether global tables may be altered in this run."""

    def list_global_tables(self) -> set[str]:
        """Names of tables shared across the whole installation."""
        ...

    def should_upgrade_global_tables(self) -> bool:
        """True if global tables may be altered in the current context."""
        ...
