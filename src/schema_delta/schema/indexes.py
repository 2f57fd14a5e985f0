"""Index normalization.

Turns index clauses from ``CREATE TABLE`` text and rows returned by
``SHOW INDEX FROM`` into the same ``IndexDef`` model, so declared and live
indexes compare by their rendered canonical forms.

Usage:
    from schema_delta.schema.indexes import parse_index_clause, indexes_from_rows

    declared = parse_index_clause("UNIQUE KEY `slug` (`slug`(20),`taxonomy`)")
    live = indexes_from_rows(backend.get_results("SHOW INDEX FROM wp_terms;"))
"""

import re
from typing import Any

from schema_delta.schema.models import IndexColumn, IndexDef

# Backtick-optional identifier: ASCII word characters, '$', '-' and
# two-byte UTF-8 code points.
_IDENT = r"(?:[0-9a-zA-Z$_\-]|[\u0080-\u07ff])+"

_INDEX_CLAUSE = re.compile(
    r"""
    ^
    (?P<index_type>
        PRIMARY\s+KEY|(?:UNIQUE|FULLTEXT|SPATIAL)\s+(?:KEY|INDEX)|KEY|INDEX
    )
    \s+
    (?:
        `?(?P<index_name>""" + _IDENT + r""")`?
        \s+
    )*
    \(
        (?P<index_columns>.+?)
    \)
    $
    """,
    re.IGNORECASE | re.MULTILINE | re.VERBOSE,
)

_INDEX_COLUMN = re.compile(
    r"""
    `?(?P<column_name>""" + _IDENT + r""")`?
    (?:
        \s*\(\s*(?P<sub_part>\d+)\s*\)
    )?
    """,
    re.VERBOSE,
)


def parse_index_clause(clause: str) -> IndexDef | None:
    """Parse one declared index clause.

    ``INDEX`` is normalized to ``KEY``, whitespace in the type is
    collapsed, and the name is lower-cased (empty for ``PRIMARY KEY``).

    Args:
        clause: An index line from a ``CREATE TABLE`` body, trailing
            comma already stripped.

    Returns:
        ``IndexDef``, or ``None`` if the clause is not a recognisable
        index definition.

    Example:
        >>> parse_index_clause("KEY `Name` (`name`(191))").canonical
        'KEY `name` (`name`(191))'
    """
    match = _INDEX_CLAUSE.search(clause.strip())
    if match is None:
        return None

    kind = re.sub(r"\s+", " ", match.group("index_type").strip()).upper()
    kind = kind.replace("INDEX", "KEY")

    name = "" if kind == "PRIMARY KEY" else (match.group("index_name") or "").lower()

    columns: list[IndexColumn] = []
    for entry in match.group("index_columns").split(","):
        column_match = _INDEX_COLUMN.search(entry.strip())
        if column_match is None:
            return None
        sub_part = column_match.group("sub_part")
        columns.append(
            IndexColumn(
                name=column_match.group("column_name"),
                prefix_length=int(sub_part) if sub_part is not None else None,
            )
        )

    return IndexDef(kind=kind, name=name, columns=columns)


def _row_value(row: Any, field: str) -> Any:
    """Read a field from a dict-like or attribute-style result row."""
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def indexes_from_rows(rows: list[Any]) -> list[IndexDef]:
    """Group ``SHOW INDEX`` rows into ``IndexDef`` objects.

    Rows sharing a ``Key_name`` (compared lower-cased) form one index;
    column order follows the row order as reported.  ``Non_unique`` and
    ``Index_type`` decide the kind: ``PRIMARY KEY`` for the ``PRIMARY``
    key, otherwise ``UNIQUE``/``FULLTEXT``/``SPATIAL`` prefixes before
    ``KEY``.

    Args:
        rows: Rows with ``Key_name``, ``Column_name``, ``Sub_part``,
            ``Non_unique`` and ``Index_type`` fields.

    Returns:
        List of ``IndexDef`` in first-seen order.
    """
    grouped: dict[str, dict[str, Any]] = {}

    for row in rows:
        key_name = str(_row_value(row, "Key_name")).lower()
        entry = grouped.setdefault(key_name, {"columns": []})

        sub_part = _row_value(row, "Sub_part")
        entry["columns"].append(
            IndexColumn(
                name=str(_row_value(row, "Column_name")),
                prefix_length=int(sub_part) if sub_part is not None else None,
            )
        )
        entry["unique"] = str(_row_value(row, "Non_unique")) == "0"
        entry["index_type"] = str(_row_value(row, "Index_type") or "").upper()

    indexes: list[IndexDef] = []
    for key_name, entry in grouped.items():
        if key_name == "primary":
            kind = "PRIMARY KEY"
        else:
            kind = "KEY"
            if entry["index_type"] in ("FULLTEXT", "SPATIAL"):
                kind = f"{entry['index_type']} {kind}"
            if entry["unique"]:
                kind = f"UNIQUE {kind}"

        indexes.append(
            IndexDef(
                kind=kind,
                name="" if key_name == "primary" else key_name,
                columns=entry["columns"],
            )
        )

    return indexes
