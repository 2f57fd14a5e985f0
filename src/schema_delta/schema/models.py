"""Pydantic models for schema reconciliation.

This module contains the reconciliation domain models:
- Schema models: ColumnDef, IndexColumn, IndexDef, TableSchema
- Classification: ClassifiedQueries
- Change models: Change, StatementResult, DeltaResult

Configuration models (DatabaseProfile, DatabaseConfig) live in
schema_delta.config.models.
"""

import re

from pydantic import BaseModel, Field


_TYPE_AFTER_NAME = r"^`?{name}`?\s+(\S+(?:\s+unsigned)?)"
_DEFAULT_LITERAL = re.compile(r" DEFAULT '(.*?)'", re.IGNORECASE)


# ============================================================================
# Schema Models
# ============================================================================


class ColumnDef(BaseModel):
    """A column definition, either declared or introspected.

    Declared columns keep the clause exactly as written in ``raw_clause``
    and derive ``type_token`` and ``default_literal`` from it.  Live
    columns carry the type and default reported by ``DESCRIBE``.

    Example:
        >>> col = ColumnDef.from_clause("`age` int(11) DEFAULT '0'")
        >>> col.type_token
        'int(11)'
        >>> col.default_literal
        '0'
    """

    name: str
    raw_clause: str = ""
    type_token: str = ""
    default_literal: str | None = None

    @property
    def key(self) -> str:
        """Lower-cased lookup key."""
        return self.name.lower()

    @classmethod
    def from_clause(cls, clause: str) -> "ColumnDef | None":
        """Build a declared column from one field clause.

        Returns ``None`` when the clause has no leading token.
        """
        parts = clause.split(None, 1)
        if not parts:
            return None
        name = parts[0].strip("`")
        if not name:
            return None

        type_match = re.search(
            _TYPE_AFTER_NAME.format(name=re.escape(name)), clause, re.IGNORECASE
        )
        default_match = _DEFAULT_LITERAL.search(clause)

        return cls(
            name=name,
            raw_clause=clause,
            type_token=type_match.group(1) if type_match else "",
            default_literal=default_match.group(1) if default_match else None,
        )


class IndexColumn(BaseModel):
    """One column of an index, with its optional prefix length."""

    name: str
    prefix_length: int | None = None


class IndexDef(BaseModel):
    """A normalized index definition.

    ``kind`` is one of ``PRIMARY KEY``, ``UNIQUE KEY``, ``FULLTEXT KEY``,
    ``SPATIAL KEY`` or ``KEY``.  ``name`` is empty for primary keys and
    lower-cased otherwise.

    Example:
        >>> idx = IndexDef(
        ...     kind="UNIQUE KEY",
        ...     name="slug",
        ...     columns=[IndexColumn(name="slug", prefix_length=20)],
        ... )
        >>> idx.canonical
        'UNIQUE KEY `slug` (`slug`(20))'
        >>> idx.canonical_no_prefix
        'UNIQUE KEY `slug` (`slug`)'
    """

    kind: str
    name: str = ""
    columns: list[IndexColumn] = Field(default_factory=list)

    def _render(self, with_prefix: bool) -> str:
        quoted_name = f"`{self.name}`" if self.name else ""
        rendered: list[str] = []
        for column in self.columns:
            part = f"`{column.name}`"
            if with_prefix and column.prefix_length is not None:
                part += f"({column.prefix_length})"
            rendered.append(part)
        return f"{self.kind} {quoted_name} ({','.join(rendered)})"

    @property
    def canonical(self) -> str:
        """Rendered form including prefix lengths."""
        return self._render(with_prefix=True)

    @property
    def canonical_no_prefix(self) -> str:
        """Rendered form without prefix lengths (identity for matching)."""
        return self._render(with_prefix=False)


class TableSchema(BaseModel):
    """Columns and indexes of one table, declared or live."""

    name: str
    columns: list[ColumnDef] = Field(default_factory=list)
    indexes: list[IndexDef] = Field(default_factory=list)

    def get_column(self, name: str) -> ColumnDef | None:
        """Look up a column case-insensitively."""
        key = name.lower()
        for column in self.columns:
            if column.key == key:
                return column
        return None

    @property
    def exists(self) -> bool:
        """A table without columns is treated as not existing yet."""
        return bool(self.columns)


# ============================================================================
# Classification
# ============================================================================


class ClassifiedQueries(BaseModel):
    """Statements of one batch, grouped by kind.

    ``create_tables`` preserves declaration order; a later statement for
    the same table replaces the earlier one.  ``unclassified`` keeps the
    statements that matched none of the recognised kinds.
    """

    create_databases: list[str] = Field(default_factory=list)
    create_tables: dict[str, str] = Field(default_factory=dict)
    inserts: list[str] = Field(default_factory=list)
    unclassified: list[str] = Field(default_factory=list)


# ============================================================================
# Change Models
# ============================================================================


class Change(BaseModel):
    """One planned DDL statement and the report entry describing it.

    Example:
        >>> change = Change(
        ...     ddl="ALTER TABLE t ADD COLUMN age int(11)",
        ...     report_key="t.age",
        ...     report_message="Added column t.age",
        ... )
        >>> change.report_key
        't.age'
    """

    ddl: str
    report_key: str
    report_message: str
    table: str = ""


class StatementResult(BaseModel):
    """Outcome of executing one statement."""

    sql: str
    success: bool
    error: str | None = None


class DeltaResult(BaseModel):
    """Result of one reconciliation run.

    Attributes:
        statements: Every statement in execution order.
        changes: Report-bearing changes in the order they were planned.
        results: Per-statement outcomes (empty when not executed).
        unclassified: Statements that matched no recognised kind.
        unparseable: ``(table, clause)`` pairs the extractor could not use.
        skipped_tables: Global tables skipped by policy.
        executed: Whether the statements were run against the backend.
    """

    statements: list[str] = Field(default_factory=list)
    changes: list[Change] = Field(default_factory=list)
    results: list[StatementResult] = Field(default_factory=list)
    unclassified: list[str] = Field(default_factory=list)
    unparseable: list[tuple[str, str]] = Field(default_factory=list)
    skipped_tables: list[str] = Field(default_factory=list)
    executed: bool = False

    @property
    def report(self) -> dict[str, str]:
        """Report map: key -> human-readable message (last writer wins)."""
        return {change.report_key: change.report_message for change in self.changes}

    @property
    def failed(self) -> list[StatementResult]:
        """Executed statements that raised."""
        return [result for result in self.results if not result.success]

    @property
    def success(self) -> bool:
        """True unless an executed statement failed."""
        return not self.failed

    def format_report(self) -> str:
        """Format the report as human-readable text."""
        if not self.changes:
            return "Schema up to date"

        lines = [f"Schema changes ({len(self.report)}):"]
        for message in self.report.values():
            lines.append(f"  - {message}")

        if self.failed:
            lines.append(f"\n  Failed statements ({len(self.failed)}):")
            for result in self.failed:
                lines.append(f"    - {result.sql}: {result.error}")

        return "\n".join(lines)
