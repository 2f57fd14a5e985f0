"""Live MySQL schema introspection.

Queries the backend for a table's live structure and reshapes it into the
same model used for declared schemas:
- Columns via ``DESCRIBE`` (name, reported type, reported default)
- Indexes via ``SHOW INDEX FROM`` (grouped by key name)

A table that does not exist yields an empty ``TableSchema``; backend
errors are suppressed for the duration of each call and the caller's
suppression setting is restored afterwards.
"""

import logging

from schema_delta.adapters.base import SchemaBackend
from schema_delta.schema.indexes import indexes_from_rows
from schema_delta.schema.models import ColumnDef, IndexDef, TableSchema

logger = logging.getLogger(__name__)


def _text(value: object) -> str:
    """Decode bytes values (MySQL 8 reports some DESCRIBE fields as blobs)."""
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class SchemaIntrospector:
    """Introspects live table structure through a ``SchemaBackend``.

    Usage:
        introspector = SchemaIntrospector(backend)
        live = introspector.get_table("wp_posts")
        if not live.exists:
            ...  # route to CREATE TABLE
    """

    def __init__(self, backend: SchemaBackend):
        """Initialize with the backend to query.

        Args:
            backend: Any ``SchemaBackend`` implementation.
        """
        self._backend = backend

    def get_table(self, table_name: str) -> TableSchema:
        """Introspect columns and indexes of one table.

        Args:
            table_name: Table to describe.

        Returns:
            TableSchema; ``columns`` is empty if the table does not exist,
            in which case indexes are not queried.
        """
        table = TableSchema(name=table_name)
        table.columns = self.get_columns(table_name)

        if not table.columns:
            logger.debug(f"Table {table_name} not found")
            return table

        table.indexes = self.get_indexes(table_name)
        return table

    def get_columns(self, table_name: str) -> list[ColumnDef]:
        """Get live columns of a table (empty if it does not exist)."""
        rows = self._suppressed_results(f"DESCRIBE {table_name};")

        columns: list[ColumnDef] = []
        for row in rows:
            default = row.get("Default")
            columns.append(
                ColumnDef(
                    name=_text(row["Field"]),
                    type_token=_text(row["Type"]),
                    default_literal=None if default is None else _text(default),
                )
            )
        return columns

    def get_indexes(self, table_name: str) -> list[IndexDef]:
        """Get live indexes of a table."""
        return indexes_from_rows(self._suppressed_results(f"SHOW INDEX FROM {table_name};"))

    def _suppressed_results(self, sql: str) -> list[dict]:
        previous = self._backend.suppress_errors(True)
        try:
            return self._backend.get_results(sql) or []
        finally:
            self._backend.suppress_errors(previous)
