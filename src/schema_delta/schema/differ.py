"""Schema differ: declared vs. live table structure.

Compares one declared table against its live counterpart and plans the
DDL needed to bring the live table up to date.  Pure logic -- no I/O.

Rules:
- Missing columns are added; extra live columns are never dropped.
- Type changes are applied unless they would shrink a text or blob column
  within its own family (``text`` -> ``tinytext`` is suppressed).
- A single-quoted ``DEFAULT '...'`` literal that differs from the live
  default is applied with ``ALTER COLUMN ... SET DEFAULT``.
- Indexes match on their prefix-agnostic form, so a live index whose only
  difference is prefix lengths counts as present.

Usage:
    from schema_delta.schema.differ import diff_table

    changes = diff_table(declared, live)
    for change in changes:
        print(change.ddl)
"""

import logging

from schema_delta.schema.models import Change, ColumnDef, IndexDef, TableSchema

logger = logging.getLogger(__name__)

# Ordered by capacity, smallest first.
TEXT_FIELDS = ("tinytext", "text", "mediumtext", "longtext")
BLOB_FIELDS = ("tinyblob", "blob", "mediumblob", "longblob")


def is_capacity_downgrade(desired_type: str, live_type: str) -> bool:
    """True if ``desired_type`` is a smaller member of ``live_type``'s family.

    Examples:
        >>> is_capacity_downgrade("tinytext", "text")
        True
        >>> is_capacity_downgrade("text", "tinytext")
        False
        >>> is_capacity_downgrade("blob", "longtext")
        False
    """
    desired = desired_type.lower()
    live = live_type.lower()
    for family in (TEXT_FIELDS, BLOB_FIELDS):
        if desired in family and live in family:
            return family.index(desired) < family.index(live)
    return False


def _defaults_differ(desired: str, live: str | None) -> bool:
    """Compare defaults the way MySQL stores them.

    A NULL live default equals an empty string, and numeric values compare
    by value (DESCRIBE reports ``'0'`` on a ``decimal(10,2)`` column as
    ``0.00``).

    Examples:
        >>> _defaults_differ("0", "0.00")
        False
        >>> _defaults_differ("", None)
        False
        >>> _defaults_differ("draft", "publish")
        True
    """
    live_text = "" if live is None else live
    if desired == live_text:
        return False
    try:
        return float(desired) != float(live_text)
    except ValueError:
        return True


def diff_columns(table: str, desired: ColumnDef, live: ColumnDef) -> list[Change]:
    """Plan type and default changes for a column present on both sides."""
    changes: list[Change] = []
    report_key = f"{table}.{live.name}"

    if desired.type_token.lower() != live.type_token.lower():
        if is_capacity_downgrade(desired.type_token, live.type_token):
            logger.debug(
                f"Keeping {report_key} as {live.type_token}; "
                f"{desired.type_token} would reduce capacity"
            )
        else:
            changes.append(
                Change(
                    ddl=f"ALTER TABLE {table} CHANGE COLUMN `{live.name}` {desired.raw_clause}",
                    report_key=report_key,
                    report_message=(
                        f"Changed type of {report_key} from {live.type_token} "
                        f"to {desired.type_token}"
                    ),
                    table=table,
                )
            )

    if desired.default_literal is not None and _defaults_differ(
        desired.default_literal, live.default_literal
    ):
        live_default = live.default_literal or ""
        changes.append(
            Change(
                ddl=(
                    f"ALTER TABLE {table} ALTER COLUMN `{live.name}` "
                    f"SET DEFAULT '{desired.default_literal}'"
                ),
                report_key=report_key,
                report_message=(
                    f"Changed default value of {report_key} from "
                    f"{live_default} to {desired.default_literal}"
                ),
                table=table,
            )
        )

    return changes


def missing_indexes(desired: list[IndexDef], live: list[IndexDef]) -> list[IndexDef]:
    """Declared indexes with no live counterpart (prefix lengths ignored).

    Each live index satisfies at most one declared index.
    """
    remaining = list(desired)
    for live_index in live:
        for position, index in enumerate(remaining):
            if index.canonical_no_prefix == live_index.canonical_no_prefix:
                del remaining[position]
                break
    return remaining


def diff_table(desired: TableSchema, live: TableSchema) -> list[Change]:
    """Plan the DDL that brings an existing live table up to ``desired``.

    Args:
        desired: Declared table (from ``parse_create_table``).
        live: Introspected table; must exist (non-empty columns).

    Returns:
        Ordered list of ``Change``: per declared column either an
        ``ADD COLUMN`` or its ``CHANGE COLUMN``/``SET DEFAULT`` changes,
        then ``ADD`` for each missing index.
    """
    table = desired.name
    changes: list[Change] = []

    for column in desired.columns:
        live_column = live.get_column(column.name)
        if live_column is None:
            changes.append(
                Change(
                    ddl=f"ALTER TABLE {table} ADD COLUMN {column.raw_clause}",
                    report_key=f"{table}.{column.key}",
                    report_message=f"Added column {table}.{column.key}",
                    table=table,
                )
            )
            continue
        changes.extend(diff_columns(table, column, live_column))

    for index in missing_indexes(desired.indexes, live.indexes):
        changes.append(
            Change(
                ddl=f"ALTER TABLE {table} ADD {index.canonical}",
                report_key=f"{table} {index.canonical}",
                report_message=f"Added index {table} {index.canonical}",
                table=table,
            )
        )

    logger.debug(f"Planned {len(changes)} change(s) for {table}")
    return changes
