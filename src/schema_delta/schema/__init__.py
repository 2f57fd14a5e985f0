"""Schema classification, extraction, introspection, diffing and execution.

Provides the reconciliation entry point (``db_delta``, ``DeltaEngine``)
and the pieces it is built from: statement classification
(``classify_queries``), declared-schema extraction (``parse_create_table``,
``parse_index_clause``), live introspection (``SchemaIntrospector``) and
the differ (``diff_table``).

Usage:
    from schema_delta.schema import db_delta, DeltaEngine
    from schema_delta.schema import parse_create_table, diff_table
"""

from schema_delta.schema.classifier import classify_queries, split_queries
from schema_delta.schema.delta import (
    SENTINEL_SCOPES,
    DeltaEngine,
    QueryFilters,
    db_delta,
    execute_statements,
)
from schema_delta.schema.differ import diff_table, is_capacity_downgrade
from schema_delta.schema.indexes import indexes_from_rows, parse_index_clause
from schema_delta.schema.introspector import SchemaIntrospector
from schema_delta.schema.models import (
    Change,
    ClassifiedQueries,
    ColumnDef,
    DeltaResult,
    IndexColumn,
    IndexDef,
    StatementResult,
    TableSchema,
)
from schema_delta.schema.parser import ParsedTable, parse_create_table

__all__ = [
    "db_delta",
    "DeltaEngine",
    "QueryFilters",
    "SENTINEL_SCOPES",
    "execute_statements",
    "classify_queries",
    "split_queries",
    "parse_create_table",
    "ParsedTable",
    "parse_index_clause",
    "indexes_from_rows",
    "SchemaIntrospector",
    "diff_table",
    "is_capacity_downgrade",
    "ColumnDef",
    "IndexColumn",
    "IndexDef",
    "TableSchema",
    "ClassifiedQueries",
    "Change",
    "StatementResult",
    "DeltaResult",
]
