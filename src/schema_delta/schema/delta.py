"""Schema reconciliation entry point.

Brings a live MySQL schema in line with a batch of declared
``CREATE TABLE`` statements without dropping anything:

1. Classify the batch (``CREATE DATABASE``, ``CREATE TABLE``,
   ``INSERT``/``UPDATE``).
2. For each declared table, introspect the live table.  Missing tables
   get their ``CREATE TABLE`` statement verbatim; existing tables get the
   ``ALTER TABLE`` statements planned by the differ.
3. Order the statements (databases, then tables in declaration order,
   then inserts/updates), optionally execute them, and report.

Statements run one by one with no transaction around them; a failing
statement is recorded and the rest still run.  Wrap the call in an
external transaction if the backend supports transactional DDL.

Usage:
    from schema_delta.schema.delta import db_delta, DeltaEngine

    # Report only
    report = db_delta(backend, schema_sql, execute=False)

    # Full result with per-statement outcomes
    engine = DeltaEngine(backend, policy=StaticTablePolicy({"wp_users"}))
    result = engine.run(schema_sql)
    if not result.success:
        print(result.format_report())
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from schema_delta.adapters.base import SchemaBackend, TablePolicy
from schema_delta.schema.classifier import classify_queries, split_queries
from schema_delta.schema.differ import diff_table
from schema_delta.schema.introspector import SchemaIntrospector
from schema_delta.schema.models import Change, DeltaResult, StatementResult
from schema_delta.schema.parser import parse_create_table

logger = logging.getLogger(__name__)

# Batch values that stand for "the declared schema for this scope".
SENTINEL_SCOPES = frozenset({"", "all", "blog", "global", "ms_global"})

SchemaProvider = Callable[[str], str | list[str]]


@dataclass
class QueryFilters:
    """Optional callables that can rewrite the batch between stages.

    Attributes:
        queries: Applied to the split statement list.
        create_queries: Applied to the table name -> ``CREATE TABLE`` map.
        insert_queries: Applied to the ``INSERT``/``UPDATE`` list.
    """

    queries: Callable[[list[str]], list[str]] | None = None
    create_queries: Callable[[dict[str, str]], dict[str, str]] | None = None
    insert_queries: Callable[[list[str]], list[str]] | None = None


def execute_statements(backend: SchemaBackend, statements: list[str]) -> list[StatementResult]:
    """Run statements in order, recording each outcome.

    A failure does not stop the remaining statements and nothing is
    rolled back.

    Args:
        backend: Backend to run against.
        statements: SQL statements in execution order.

    Returns:
        One ``StatementResult`` per statement.
    """
    results: list[StatementResult] = []
    for sql in statements:
        try:
            backend.query(sql)
        except Exception as e:
            logger.warning(f"Statement failed: {sql.strip()}: {e}")
            results.append(StatementResult(sql=sql, success=False, error=str(e)))
            continue
        results.append(StatementResult(sql=sql, success=True))
    return results


class DeltaEngine:
    """Plans and applies schema changes against one backend.

    Args:
        backend: ``SchemaBackend`` used for introspection and execution.
        policy: Optional ``TablePolicy``; without one no table is global.
        schema_provider: Callable returning the declared schema for a
            sentinel scope (``""``, ``"all"``, ``"blog"``, ``"global"``,
            ``"ms_global"``).
        filters: Optional ``QueryFilters``.

    Example:
        engine = DeltaEngine(backend)
        result = engine.run(schema_sql, execute=False)
        for sql in result.statements:
            print(sql)
    """

    def __init__(
        self,
        backend: SchemaBackend,
        policy: TablePolicy | None = None,
        schema_provider: SchemaProvider | None = None,
        filters: QueryFilters | None = None,
    ) -> None:
        self._backend = backend
        self._policy = policy
        self._schema_provider = schema_provider
        self._filters = filters or QueryFilters()
        self._introspector = SchemaIntrospector(backend)

    def resolve_queries(self, queries: str | list[str]) -> str | list[str]:
        """Substitute the declared schema for a sentinel scope.

        Raises:
            ValueError: If ``queries`` is a sentinel and no schema provider
                is configured.
        """
        if not isinstance(queries, str) or queries not in SENTINEL_SCOPES:
            return queries
        if self._schema_provider is None:
            raise ValueError(
                f"Scope {queries!r} requires a schema provider; "
                f"pass schema_provider= or explicit SQL"
            )
        logger.debug(f"Loading declared schema for scope {queries!r}")
        return self._schema_provider(queries)

    def _is_skipped(self, table: str, global_tables: set[str]) -> bool:
        if table not in global_tables:
            return False
        return not self._policy.should_upgrade_global_tables()

    def run(self, queries: str | list[str] = "", execute: bool = True) -> DeltaResult:
        """Reconcile the live schema with ``queries``.

        Args:
            queries: ``;``-separated SQL, a list of statements, or a
                sentinel scope.
            execute: Run the statements; if False only plan and report.

        Returns:
            ``DeltaResult`` with the ordered statements, report-bearing
            changes, per-statement outcomes and dropped input.
        """
        statements = split_queries(self.resolve_queries(queries))
        if self._filters.queries is not None:
            statements = self._filters.queries(statements)

        classified = classify_queries(statements)
        create_tables = classified.create_tables
        if self._filters.create_queries is not None:
            create_tables = self._filters.create_queries(create_tables)
        inserts = classified.inserts
        if self._filters.insert_queries is not None:
            inserts = self._filters.insert_queries(inserts)

        result = DeltaResult(unclassified=classified.unclassified)
        result.statements.extend(classified.create_databases)

        global_tables = self._policy.list_global_tables() if self._policy else set()

        for table, create_sql in create_tables.items():
            if self._is_skipped(table, global_tables):
                logger.warning(f"Skipping global table {table}")
                result.skipped_tables.append(table)
                continue

            live = self._introspector.get_table(table)

            if not live.exists:
                logger.debug(f"Creating table {table}")
                result.statements.append(create_sql)
                result.changes.append(
                    Change(
                        ddl=create_sql,
                        report_key=table,
                        report_message=f"Created table {table}",
                        table=table,
                    )
                )
                continue

            parsed = parse_create_table(table, create_sql)
            for clause in parsed.unparseable:
                logger.debug(f"Ignoring unparseable clause in {table}: {clause}")
                result.unparseable.append((table, clause))

            changes = diff_table(parsed.table, live)
            result.statements.extend(change.ddl for change in changes)
            result.changes.extend(changes)

        result.statements.extend(inserts)

        logger.info(
            f"Planned {len(result.statements)} statement(s), "
            f"{len(result.changes)} schema change(s)"
        )

        if execute:
            result.results = execute_statements(self._backend, result.statements)
            result.executed = True
            if result.failed:
                logger.warning(f"{len(result.failed)} statement(s) failed")

        return result


def db_delta(
    backend: SchemaBackend,
    queries: str | list[str] = "",
    execute: bool = True,
    *,
    policy: TablePolicy | None = None,
    schema_provider: SchemaProvider | None = None,
    filters: QueryFilters | None = None,
) -> dict[str, str]:
    """Reconcile the live schema and return the change report.

    Args:
        backend: ``SchemaBackend`` to introspect and modify.
        queries: ``;``-separated SQL, a list of statements, or a sentinel
            scope resolved through ``schema_provider``.
        execute: Run the planned statements (default True).
        policy: Optional global-table policy.
        schema_provider: Resolves sentinel scopes to schema SQL.
        filters: Optional ``QueryFilters``.

    Returns:
        Dict mapping ``table``, ``table.column`` or ``table <index>`` to a
        human-readable message.

    Example:
        report = db_delta(backend, "CREATE TABLE t (\n  id int\n)", execute=False)
        # {"t": "Created table t"}  (when t does not exist yet)
    """
    engine = DeltaEngine(
        backend,
        policy=policy,
        schema_provider=schema_provider,
        filters=filters,
    )
    return engine.run(queries, execute=execute).report
