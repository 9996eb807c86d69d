"""
Driver implementation on top of SQLAlchemy's async engine.

Each call runs exactly one statement inside its own ``engine.begin()`` block,
so a successful write is committed before the result is returned.
"""

import re
from typing import Any, Dict, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from tablerepo.database.driver import MutationResult, StatementResult, expand_statement
from tablerepo.utils.logger import get_module_logger

logger = get_module_logger(__name__)

_INSERT = re.compile(r"^\s*INSERT\b", re.IGNORECASE)


class SQLAlchemyDriver:
    """
    Driver executing statement templates through an ``AsyncEngine``.

    Identifiers are quoted with the engine dialect's identifier preparer and
    values are sent as bound parameters. The engine is shared, not owned: the
    caller that created it disposes it.
    """

    def __init__(self, engine: AsyncEngine, returning_key: str = "id"):
        """
        Initialize driver with an async engine.

        Args:
            engine: Async engine to execute statements on
            returning_key: Column reported as ``insert_id`` on dialects whose
                DBAPI has no ``lastrowid`` (PostgreSQL); ignored elsewhere
        """
        self.engine = engine
        self.returning_key = returning_key
        self._preparer = engine.dialect.identifier_preparer
        self._insert_set = engine.dialect.name == "mysql"
        self._insert_returning = engine.dialect.name == "postgresql"

    def _quote(self, identifier: str) -> str:
        # text() treats ":name" as a bind marker, escape colons inside identifiers
        return self._preparer.quote_identifier(identifier).replace(":", "\\:")

    def compile(self, template: str, args: Sequence[Any] = ()) -> Tuple[str, Dict[str, Any]]:
        """
        Render a statement template into SQL text and bind parameters.

        Raises:
            ValueError: If the template and arguments do not line up
        """
        sql, params = expand_statement(template, args, self._quote, insert_set=self._insert_set)
        if self._insert_returning and _INSERT.match(template):
            sql = f"{sql.rstrip().rstrip(';')} RETURNING {self._quote(self.returning_key)}"
        return sql, params

    async def execute(self, template: str, args: Sequence[Any] = ()) -> StatementResult:
        """
        Execute one statement and return its rows or mutation summary.

        Args:
            template: Statement template with ``??``/``?`` placeholders
            args: Positional arguments for the placeholders

        Returns:
            List of row dicts for row-returning statements, otherwise a
            MutationResult with the affected row count and generated id

        Raises:
            ValueError: If the template and arguments do not line up
            SQLAlchemyError: If the database rejects the statement
        """
        sql, params = self.compile(template, args)
        returning = self._insert_returning and _INSERT.match(template) is not None

        async with self.engine.begin() as conn:
            result = await conn.execute(text(sql), params)

            if returning:
                row = result.first()
                logger.debug(f"Executed insert with RETURNING: {sql}")
                return MutationResult(
                    affected_rows=1 if row is not None else 0,
                    insert_id=row[0] if row is not None else None,
                )

            if result.returns_rows:
                rows = [dict(row) for row in result.mappings()]
                logger.debug(f"Fetched {len(rows)} row(s): {sql}")
                return rows

            logger.debug(f"Statement affected {result.rowcount} row(s): {sql}")
            return MutationResult(affected_rows=result.rowcount, insert_id=result.lastrowid)
