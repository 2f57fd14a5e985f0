"""Shared fixtures: an in-memory MySQL stand-in for the SchemaBackend Protocol.

``FakeMySQLBackend`` answers ``DESCRIBE`` and ``SHOW INDEX FROM`` from an
in-memory table map and applies the ``CREATE TABLE``/``ALTER TABLE``
statements the engine emits, so a second run can be checked for
convergence.
"""

import re
from typing import Any

import pytest

from schema_delta.schema.indexes import parse_index_clause
from schema_delta.schema.models import ColumnDef, IndexDef
from schema_delta.schema.parser import parse_create_table


class FakeBackendError(Exception):
    """Raised by the fake backend for unknown tables or injected failures."""


def _index_rows(index: IndexDef) -> list[dict[str, Any]]:
    if index.kind == "PRIMARY KEY":
        key_name = "PRIMARY"
    else:
        key_name = index.name
    non_unique = 0 if index.kind in ("PRIMARY KEY", "UNIQUE KEY") else 1
    index_type = "BTREE"
    for special in ("FULLTEXT", "SPATIAL"):
        if special in index.kind:
            index_type = special
    return [
        {
            "Key_name": key_name,
            "Seq_in_index": position,
            "Column_name": column.name,
            "Sub_part": column.prefix_length,
            "Non_unique": non_unique,
            "Index_type": index_type,
        }
        for position, column in enumerate(index.columns, start=1)
    ]


class FakeMySQLBackend:
    """In-memory SchemaBackend recording every statement it runs."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.executed: list[str] = []
        self.fail_on: set[str] = set()
        self.suppress_calls: list[bool] = []
        self._suppress = False

    # ------------------------------------------------------------------
    # Test setup helpers
    # ------------------------------------------------------------------

    def add_table(
        self,
        name: str,
        columns: list[tuple[str, str, str | None]],
        indexes: list[tuple[str, str, int | None, int, str]] | None = None,
    ) -> None:
        """Add a live table.

        Args:
            columns: ``(Field, Type, Default)`` tuples.
            indexes: ``(Key_name, Column_name, Sub_part, Non_unique,
                Index_type)`` tuples, one per indexed column.
        """
        self.tables[name] = {
            "columns": [
                {"Field": field, "Type": type_, "Null": "YES", "Key": "", "Default": default, "Extra": ""}
                for field, type_, default in columns
            ],
            "indexes": [
                {
                    "Key_name": key_name,
                    "Column_name": column,
                    "Sub_part": sub_part,
                    "Non_unique": non_unique,
                    "Index_type": index_type,
                }
                for key_name, column, sub_part, non_unique, index_type in (indexes or [])
            ],
        }

    def column(self, table: str, field: str) -> dict[str, Any]:
        for row in self.tables[table]["columns"]:
            if row["Field"].lower() == field.lower():
                return row
        raise KeyError(field)

    # ------------------------------------------------------------------
    # SchemaBackend Protocol
    # ------------------------------------------------------------------

    def _fail(self, message: str) -> None:
        if not self._suppress:
            raise FakeBackendError(message)

    def get_results(self, sql: str) -> list[dict[str, Any]]:
        if match := re.match(r"DESCRIBE (\S+);", sql):
            table = self.tables.get(match.group(1))
            if table is None:
                self._fail(f"Table '{match.group(1)}' doesn't exist")
                return []
            return [dict(row) for row in table["columns"]]
        if match := re.match(r"SHOW INDEX FROM (\S+);", sql):
            table = self.tables.get(match.group(1))
            if table is None:
                self._fail(f"Table '{match.group(1)}' doesn't exist")
                return []
            return [dict(row) for row in table["indexes"]]
        self._fail(f"Unsupported query: {sql}")
        return []

    def get_col(self, sql: str) -> list[Any]:
        return [next(iter(row.values())) for row in self.get_results(sql)]

    def get_var(self, sql: str) -> Any:
        column = self.get_col(sql)
        return column[0] if column else None

    def suppress_errors(self, suppress: bool = True) -> bool:
        self.suppress_calls.append(suppress)
        previous = self._suppress
        self._suppress = suppress
        return previous

    def query(self, sql: str) -> int | None:
        self.executed.append(sql)
        if any(marker in sql for marker in self.fail_on):
            self._fail(f"Injected failure: {sql}")
            return None
        self._apply(sql)
        return 0

    # ------------------------------------------------------------------
    # DDL application
    # ------------------------------------------------------------------

    def _apply(self, sql: str) -> None:
        if match := re.search(r"CREATE TABLE (\S+)", sql):
            name = match.group(1).strip("`")
            parsed = parse_create_table(name, sql)
            self.tables[name] = {"columns": [], "indexes": []}
            for column in parsed.table.columns:
                self._set_column(name, column)
            for index in parsed.table.indexes:
                self.tables[name]["indexes"].extend(_index_rows(index))
        elif match := re.match(r"ALTER TABLE (\S+) ADD COLUMN (.*)$", sql, re.DOTALL):
            self._set_column(match.group(1), ColumnDef.from_clause(match.group(2)))
        elif match := re.match(r"ALTER TABLE (\S+) CHANGE COLUMN `([^`]+)` (.*)$", sql, re.DOTALL):
            table, old_name = match.group(1), match.group(2)
            row = self.column(table, old_name)
            column = ColumnDef.from_clause(match.group(3))
            row.update(Field=column.name, Type=column.type_token)
            if column.default_literal is not None:
                row["Default"] = column.default_literal
        elif match := re.match(
            r"ALTER TABLE (\S+) ALTER COLUMN `([^`]+)` SET DEFAULT '(.*)'$", sql
        ):
            self.column(match.group(1), match.group(2))["Default"] = match.group(3)
        elif match := re.match(r"ALTER TABLE (\S+) ADD (.*)$", sql, re.DOTALL):
            index = parse_index_clause(match.group(2))
            self.tables[match.group(1)]["indexes"].extend(_index_rows(index))

    def _set_column(self, table: str, column: ColumnDef) -> None:
        self.tables[table]["columns"].append(
            {
                "Field": column.name,
                "Type": column.type_token,
                "Null": "YES",
                "Key": "",
                "Default": column.default_literal,
                "Extra": "",
            }
        )


@pytest.fixture
def backend() -> FakeMySQLBackend:
    """Empty in-memory backend."""
    return FakeMySQLBackend()


# Declared schema modelled on a blog's term tables.
TERMS_SQL = """CREATE TABLE wp_terms (
 term_id bigint(20) unsigned NOT NULL auto_increment,
 name varchar(200) NOT NULL default '',
 slug varchar(200) NOT NULL default '',
 term_group bigint(10) NOT NULL default 0,
 PRIMARY KEY  (term_id),
 KEY slug (slug(191)),
 KEY name (name(191))
) DEFAULT CHARACTER SET utf8mb4"""

TERM_TAXONOMY_SQL = """CREATE TABLE wp_term_taxonomy (
 term_taxonomy_id bigint(20) unsigned NOT NULL auto_increment,
 term_id bigint(20) unsigned NOT NULL default 0,
 taxonomy varchar(32) NOT NULL default '',
 description longtext NOT NULL,
 parent bigint(20) unsigned NOT NULL default 0,
 count bigint(20) NOT NULL default 0,
 PRIMARY KEY  (term_taxonomy_id),
 UNIQUE KEY term_id_taxonomy (term_id,taxonomy),
 KEY taxonomy (taxonomy)
) DEFAULT CHARACTER SET utf8mb4"""


@pytest.fixture
def blog_schema() -> str:
    """Two-table declared schema as one ``;``-separated string."""
    return f"{TERMS_SQL};\n{TERM_TAXONOMY_SQL};\n"


@pytest.fixture
def terms_sql() -> str:
    return TERMS_SQL


@pytest.fixture
def term_taxonomy_sql() -> str:
    return TERM_TAXONOMY_SQL
