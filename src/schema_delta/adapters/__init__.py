"""Backend adapters package.

Provides the ``SchemaBackend`` and ``TablePolicy`` Protocols, the
SQLAlchemy/PyMySQL backend, and a static global-table policy.

Usage:
    from schema_delta.adapters import MySQLBackend, SchemaBackend, StaticTablePolicy
"""

from schema_delta.adapters.base import SchemaBackend, TablePolicy
from schema_delta.adapters.mysql import MySQLBackend
from schema_delta.adapters.policy import StaticTablePolicy

__all__ = [
    "SchemaBackend",
    "TablePolicy",
    "MySQLBackend",
    "StaticTablePolicy",
]
