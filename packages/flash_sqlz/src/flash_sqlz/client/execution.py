from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar, overload

from flash_sqlz.exceptions import (
    ConfigurationError,
    ExecutionError,
    RollbackError,
    StatementKindError,
)
from flash_sqlz.info import BuilderState, RenderedStatement, StatementKind

from .construction import ClientConstruction

logger = logging.getLogger(__name__)

T = TypeVar("T")
Row = dict[str, Any]


def scan_row(columns: Sequence[str], values: Sequence[Any]) -> Row:
    """
    Pair a raw driver row with its column names.

    Binary values are decoded as UTF-8 text.

    Example:
        >>> scan_row(["id", "name"], (1, b"abc"))
        {'id': 1, 'name': 'abc'}
    """
    row: Row = {}
    for col, val in zip(columns, values):
        if isinstance(val, (bytes, bytearray, memoryview)):
            val = bytes(val).decode("utf-8", errors="replace")
        row[col] = val
    return row


class ClientExecution(ClientConstruction):
    """
    Terminal methods that render the statement and run it.

    Whatever happens, the client is cleared before these methods return or
    raise, so one statement never leaks into the next.
    """

    @overload
    def all(self, target: None = None) -> list[Row]: ...

    @overload
    def all(self, target: type[T]) -> list[T]: ...

    def all(self, target: Any = None) -> list[Any]:
        """
        Run a SELECT and return every row.

        Args:
            target: Optional type to materialize each row into (pydantic
                model, dataclass, ``TypedDict``...). Without it, rows are
                returned as dicts keyed by column name.

        Raises:
            StatementKindError: If the statement is not a SELECT.
            ExecutionError: If the query fails.
            MaterializationError: If the rows do not fit ``target``.

        Example:
            >>> client.table("people").select().where({"age >": 10}).all(Person)
            [Person(id=1, name='abc', age=20)]
        """
        try:
            if self.info.kind is not StatementKind.SELECT:
                msg = "not select statement, use do() for insert/update/delete"
                raise StatementKindError(msg)
            rendered = self._render_for_execution()
            result = self.executor.query(rendered.sql, rendered.args)
            self._state = BuilderState.EXECUTED
            rows = [scan_row(result.columns, values) for values in result.rows]
        finally:
            self.clear()

        if target is not None:
            return self.materializer.materialize(rows, list[target])
        return rows

    @overload
    def first(self, target: None = None) -> Row | None: ...

    @overload
    def first(self, target: type[T]) -> T | None: ...

    def first(self, target: Any = None) -> Any:
        """
        Run a SELECT limited to one row and return it, or ``None``.

        Example:
            >>> client.table("people").select().where({"name": "abc"}).first(Person)
            Person(id=1, name='abc', age=20)
        """
        self._configure()
        self.info.limit = 1
        rows = self.all()
        if not rows:
            return None
        if target is not None:
            return self.materializer.materialize(rows[0], target)
        return rows[0]

    def do(self) -> int:
        """
        Run an INSERT, UPDATE or DELETE and return the affected row count.

        Inside a transaction started with ``begin(auto_rollback=True)``, a
        failing statement rolls the transaction back before the error is
        raised.

        Raises:
            StatementKindError: If the statement is a SELECT. No SQL is sent.
            ExecutionError: If the statement fails.
            RollbackError: If the statement failed and so did the rollback.

        Example:
            >>> client.table("people").update({"age": 20}).where({"id": 1}).do()
            1
        """
        try:
            if self.info.kind is StatementKind.SELECT:
                msg = "should not select statement, use all() or first()"
                raise StatementKindError(msg)
            rendered = self._render_for_execution()
            in_transaction = self.executor.in_transaction
            try:
                affected = self.executor.execute(rendered.sql, rendered.args)
            except Exception as e:
                if not in_transaction:
                    raise
                raise self._transaction_failure(e) from e
            self._state = BuilderState.EXECUTED
            logger.debug("%d row(s) affected", affected)
            return affected
        finally:
            self.clear()

    def _render_for_execution(self) -> RenderedStatement:
        try:
            return self._render()
        except ConfigurationError as e:
            msg = f"format sql error: {e}"
            raise type(e)(msg) from e

    def _transaction_failure(self, error: Exception) -> ExecutionError:
        if self.auto_rollback:
            try:
                self.executor.rollback()
            except Exception as rollback_error:
                msg = f"exec error: {error}, and rollback err: {rollback_error}"
                logger.error(msg)
                return RollbackError(msg, error=error, rollback_error=rollback_error)
            logger.warning("Statement failed, transaction rolled back: %s", error)
        msg = f"rollback:{self.auto_rollback}, exec error: {error}"
        return ExecutionError(msg)
