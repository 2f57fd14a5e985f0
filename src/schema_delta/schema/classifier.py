"""Statement classification for a batch of schema SQL.

Splits raw SQL into per-table ``CREATE TABLE`` statements,
``CREATE DATABASE`` statements and ``INSERT``/``UPDATE`` statements.
Statements of any other kind are kept aside as unclassified rather than
raising.

Usage:
    from schema_delta.schema.classifier import classify_queries, split_queries

    classified = classify_queries(split_queries(schema_sql))
    for table, create_sql in classified.create_tables.items():
        ...
"""

import logging
import re

from schema_delta.schema.models import ClassifiedQueries

logger = logging.getLogger(__name__)

# Tried in order; the first match decides the kind.
_CREATE_TABLE = re.compile(r"CREATE TABLE (?:IF NOT EXISTS )?(\S*)")
_CREATE_DATABASE = re.compile(r"CREATE DATABASE (\S*)")
_INSERT = re.compile(r"INSERT INTO (\S*)")
_UPDATE = re.compile(r"UPDATE (\S*)")


def split_queries(queries: str | list[str]) -> list[str]:
    """Split a ``;``-delimited string into statements.

    Lists are returned as-is (copied).  Empty fragments are discarded,
    whitespace-only fragments included.

    Example:
        >>> split_queries("CREATE DATABASE a;;INSERT INTO t VALUES (1);")
        ['CREATE DATABASE a', 'INSERT INTO t VALUES (1)']
    """
    if isinstance(queries, str):
        return [fragment for fragment in queries.split(";") if fragment.strip()]
    return list(queries)


def classify_queries(queries: list[str]) -> ClassifiedQueries:
    """Group statements by kind.

    Args:
        queries: Individual SQL statements.

    Returns:
        ``ClassifiedQueries`` with:

        - ``create_tables``: table name (backticks stripped) -> statement,
          in declaration order, last writer wins
        - ``create_databases``: in batch order
        - ``inserts``: ``INSERT INTO`` and ``UPDATE`` statements in batch order
        - ``unclassified``: everything else
    """
    classified = ClassifiedQueries()

    for query in queries:
        if match := _CREATE_TABLE.search(query):
            table = match.group(1).strip("`")
            if table in classified.create_tables:
                logger.debug(f"Replacing earlier CREATE TABLE for {table}")
            classified.create_tables[table] = query
        elif _CREATE_DATABASE.search(query):
            classified.create_databases.append(query)
        elif _INSERT.search(query) or _UPDATE.search(query):
            classified.inserts.append(query)
        else:
            logger.debug(f"Unclassified statement: {query.strip()[:60]}")
            classified.unclassified.append(query)

    return classified
