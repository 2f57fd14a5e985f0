"""Column and index extraction from ``CREATE TABLE`` text.

Line-oriented: the table body must hold one column or index definition
per line, each terminated by a comma (the last one optionally not).
This is a precondition on the schema text, not a general SQL parser.

Usage:
    from schema_delta.schema.parser import parse_create_table

    parsed = parse_create_table("wp_terms", create_sql)
    parsed.table.columns      # [ColumnDef, ...]
    parsed.table.indexes      # [IndexDef, ...]
    parsed.unparseable        # clauses that could not be used
"""

import re
from dataclasses import dataclass, field

from schema_delta.schema.indexes import parse_index_clause
from schema_delta.schema.models import ColumnDef, TableSchema

# Leading tokens that introduce an index definition instead of a column.
INDEX_KEYWORDS = frozenset({"primary", "index", "fulltext", "unique", "key", "spatial"})

_QUOTES = "'\"`"
# Backtick-optional column name.
_COLUMN_NAME = re.compile(r"^`?[\w$-]+`?$")
_CLAUSE_TRIM = " \t\n\r\0\x0b,"


@dataclass
class ParsedTable:
    """Declared schema of one table plus the clauses that were dropped.

    Example:
        parsed = ParsedTable(table=TableSchema(name="t"))
        parsed.unparseable
        # []
    """

    table: TableSchema
    unparseable: list[str] = field(default_factory=list)


def extract_body(create_sql: str) -> str:
    """Return the text between the first ``(`` and its matching ``)``.

    Parentheses inside quoted strings and identifiers are skipped, so
    table options such as ``COMMENT='prices (net)'`` stay out of the body.
    Returns an empty string if the statement has no balanced body.
    """
    start = create_sql.find("(")
    if start == -1:
        return ""

    depth = 0
    quote: str | None = None
    position = start
    while position < len(create_sql):
        char = create_sql[position]
        if quote is not None:
            if char == "\\" and quote != "`":
                position += 1
            elif char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return create_sql[start + 1 : position].strip()
        position += 1

    return ""


def split_clauses(body: str) -> list[str]:
    """Split a table body into trimmed field clauses, one per line."""
    clauses: list[str] = []
    for line in body.split("\n"):
        clause = line.strip(_CLAUSE_TRIM)
        if clause:
            clauses.append(clause)
    return clauses


def is_index_clause(clause: str) -> bool:
    """True if the clause's leading token introduces an index."""
    parts = clause.split(None, 1)
    leading = parts[0].strip("`").lower() if parts else ""
    return leading == "" or leading in INDEX_KEYWORDS


def parse_create_table(table_name: str, create_sql: str) -> ParsedTable:
    """Extract declared columns and indexes from a ``CREATE TABLE`` statement.

    Columns keep their clause verbatim; indexes are normalized by
    ``parse_index_clause``.  A column key that repeats replaces the earlier
    definition.  Index clauses that do not parse, and column clauses whose
    leading token is not an identifier, are reported in ``unparseable``
    instead of being dropped silently.

    Args:
        table_name: Name of the table (backticks already stripped).
        create_sql: Full ``CREATE TABLE`` statement.

    Returns:
        ``ParsedTable`` with the declared ``TableSchema``.
    """
    columns: dict[str, ColumnDef] = {}
    table = TableSchema(name=table_name)
    parsed = ParsedTable(table=table)

    for clause in split_clauses(extract_body(create_sql)):
        if is_index_clause(clause):
            index = parse_index_clause(clause)
            if index is None:
                parsed.unparseable.append(clause)
            else:
                table.indexes.append(index)
            continue

        if not _COLUMN_NAME.match(clause.split(None, 1)[0]):
            parsed.unparseable.append(clause)
            continue

        column = ColumnDef.from_clause(clause)
        if column is None:
            parsed.unparseable.append(clause)
            continue
        columns[column.key] = column

    table.columns = list(columns.values())
    return parsed
