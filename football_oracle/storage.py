"""
Parameterized read/write access to the ledger database.

Statements are plain SQL with named parameters (``:address``). Blocking
driver calls run in a worker thread so the event loop keeps serving other
publications while a query is in progress.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .db import get_engine
from .errors import StorageReadError


class LedgerStorage:
    """Async facade over a SQLAlchemy engine."""

    def __init__(self, engine: Engine = None, database_url: str = None):
        self.engine = engine or get_engine(database_url)

    @staticmethod
    def _statement(sql: str, expanding: Iterable[str] = ()):
        statement = text(sql)
        names = list(expanding)
        if names:
            statement = statement.bindparams(*[bindparam(name, expanding=True) for name in names])
        return statement

    def _run_query(self, sql: str, params: Dict[str, Any], expanding: Iterable[str]) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            result = conn.execute(self._statement(sql, expanding), params)
            return [dict(row._mapping) for row in result]

    def _run_execute(self, sql: str, params: Dict[str, Any]) -> None:
        with self.engine.begin() as conn:
            conn.execute(self._statement(sql), params)

    async def query(
        self,
        sql: str,
        params: Optional[Dict[str, Any]] = None,
        expanding: Iterable[str] = (),
    ) -> List[Dict[str, Any]]:
        """
        Run a SELECT and return rows as dicts.

        Args:
            sql: SQL text with named parameters
            params: Parameter values
            expanding: Names of list parameters used in ``IN (:name)`` clauses

        Raises:
            StorageReadError: if the database call fails
        """
        try:
            return await asyncio.to_thread(self._run_query, sql, params or {}, tuple(expanding))
        except SQLAlchemyError as e:
            raise StorageReadError(f"query failed: {e}") from e

    async def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> None:
        """Run a write statement in its own transaction."""
        try:
            await asyncio.to_thread(self._run_execute, sql, params or {})
        except SQLAlchemyError as e:
            raise StorageReadError(f"statement failed: {e}") from e
