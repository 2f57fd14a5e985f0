"""schema-delta: non-destructive MySQL schema reconciliation.

Compares declared ``CREATE TABLE`` statements with the live database and
plans (optionally applies) the ``CREATE``/``ALTER`` statements needed to
bring the live schema up to date.  Columns and tables are never dropped.

Usage:
    from schema_delta import db_delta, DeltaEngine, MySQLBackend
    from schema_delta import StaticTablePolicy, load_db_config, get_backend
"""

__version__ = "0.1.0"

# Adapters
from schema_delta.adapters.base import SchemaBackend, TablePolicy
from schema_delta.adapters.mysql import MySQLBackend
from schema_delta.adapters.policy import StaticTablePolicy

# Config
from schema_delta.config.loader import load_db_config, load_schema_text
from schema_delta.config.models import DatabaseConfig, DatabaseProfile

# Factory
from schema_delta.factory import (
    ProfileNotFoundError,
    get_backend,
    resolve_url,
)

# Schema
from schema_delta.schema.delta import DeltaEngine, QueryFilters, db_delta
from schema_delta.schema.models import DeltaResult

__all__ = [
    # Adapters
    "SchemaBackend",
    "TablePolicy",
    "MySQLBackend",
    "StaticTablePolicy",
    # Config
    "load_db_config",
    "load_schema_text",
    "DatabaseProfile",
    "DatabaseConfig",
    # Factory
    "get_backend",
    "ProfileNotFoundError",
    "resolve_url",
    # Schema
    "db_delta",
    "DeltaEngine",
    "QueryFilters",
    "DeltaResult",
]
