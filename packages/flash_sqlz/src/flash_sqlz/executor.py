from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError

from .exceptions import ExecutionError, TransactionError

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine, RootTransaction

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Column names and raw driver rows returned by a query."""

    columns: list[str] = field(default_factory=list)
    rows: list[Sequence[Any]] = field(default_factory=list)


@runtime_checkable
class Executor(Protocol):
    """
    What a client needs from a database connection.

    ``sql`` always uses ``?`` placeholders; ``args`` is positional.
    """

    @property
    def in_transaction(self) -> bool: ...

    def query(self, sql: str, args: Sequence[Any]) -> QueryResult: ...

    def execute(self, sql: str, args: Sequence[Any]) -> int: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


def to_driver_sql(
    sql: str, args: Sequence[Any], paramstyle: str
) -> tuple[str, Sequence[Any] | dict[str, Any]]:
    """
    Translate ``?`` placeholders into the DB-API paramstyle of a driver.

    Examples:
        >>> to_driver_sql("SELECT * FROM `t` WHERE `a` = ?", [1], "format")
        ('SELECT * FROM `t` WHERE `a` = %s', (1,))
        >>> to_driver_sql("`a` = ? AND `b` = ?", [1, 2], "named")
        ('`a` = :p0 AND `b` = :p1', {'p0': 1, 'p1': 2})
    """
    params = tuple(args)
    if paramstyle == "qmark":
        return sql, params

    parts = sql.split("?")
    if len(parts) - 1 != len(params):
        msg = (
            f"placeholder count {len(parts) - 1} does not match "
            f"{len(params)} arguments"
        )
        raise ExecutionError(msg)

    if paramstyle in ("format", "pyformat"):
        # Drivers apply "%" formatting, so literal percent signs must be doubled.
        parts = [p.replace("%", "%%") for p in parts]
        return "%s".join(parts), params

    if paramstyle == "numeric":
        out = parts[0]
        for i, part in enumerate(parts[1:], start=1):
            out += f":{i}{part}"
        return out, params

    if paramstyle == "named":
        out = parts[0]
        named: dict[str, Any] = {}
        for i, part in enumerate(parts[1:]):
            out += f":p{i}{part}"
            named[f"p{i}"] = params[i]
        return out, named

    msg = f"Unsupported DB-API paramstyle: {paramstyle}"
    raise ExecutionError(msg)


class SQLAlchemyExecutor:
    """
    Executor backed by a synchronous SQLAlchemy ``Engine``.

    Outside a transaction every statement runs in its own
    ``engine.begin()`` block and is committed right away. After
    :meth:`begin`, queries and statements share one connection until
    :meth:`commit` or :meth:`rollback` releases it.

    Example:
        >>> engine = create_engine("sqlite://")
        >>> executor = SQLAlchemyExecutor(engine)
        >>> executor.execute("CREATE TABLE `t` (`a` INTEGER)", [])
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._conn: Connection | None = None
        self._tx: RootTransaction | None = None

    @property
    def in_transaction(self) -> bool:
        return self._tx is not None

    @property
    def paramstyle(self) -> str:
        return self.engine.dialect.paramstyle

    def query(self, sql: str, args: Sequence[Any]) -> QueryResult:
        driver_sql, params = to_driver_sql(sql, args, self.paramstyle)
        try:
            if self._conn is not None:
                return self._fetch(self._conn, driver_sql, params)
            with self.engine.connect() as conn:
                return self._fetch(conn, driver_sql, params)
        except SQLAlchemyError as e:
            msg = f"Database error while running query: {e}"
            raise ExecutionError(msg) from e

    def execute(self, sql: str, args: Sequence[Any]) -> int:
        driver_sql, params = to_driver_sql(sql, args, self.paramstyle)
        try:
            if self._conn is not None:
                return self._affected(self._conn, driver_sql, params)
            with self.engine.begin() as conn:
                return self._affected(conn, driver_sql, params)
        except SQLAlchemyError as e:
            msg = f"Database error while executing statement: {e}"
            raise ExecutionError(msg) from e

    def begin(self) -> None:
        if self._tx is not None:
            msg = "A transaction is already active"
            raise TransactionError(msg)
        conn = None
        try:
            conn = self.engine.connect()
            self._tx = conn.begin()
        except SQLAlchemyError as e:
            if conn is not None:
                conn.close()
            msg = f"Database error while starting transaction: {e}"
            raise ExecutionError(msg) from e
        self._conn = conn
        logger.debug("Transaction started")

    def commit(self) -> None:
        tx = self._require_transaction()
        try:
            tx.commit()
        except SQLAlchemyError as e:
            msg = f"Database error while committing: {e}"
            raise ExecutionError(msg) from e
        self._release()
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        tx = self._require_transaction()
        try:
            tx.rollback()
        except SQLAlchemyError as e:
            msg = f"Database error while rolling back: {e}"
            raise ExecutionError(msg) from e
        finally:
            self._release()
        logger.debug("Transaction rolled back")

    def close(self) -> None:
        try:
            if self._tx is not None:
                logger.warning("Closing with an open transaction; rolling back")
                self.rollback()
        finally:
            self.engine.dispose()

    def _fetch(
        self, conn: Connection, sql: str, params: Sequence[Any] | dict[str, Any]
    ) -> QueryResult:
        result = conn.exec_driver_sql(sql, params)
        columns = list(result.keys())
        rows = [tuple(row) for row in result.fetchall()]
        return QueryResult(columns=columns, rows=rows)

    def _affected(
        self, conn: Connection, sql: str, params: Sequence[Any] | dict[str, Any]
    ) -> int:
        result = conn.exec_driver_sql(sql, params)
        # Drivers report -1 when the count is unknown.
        return max(getattr(result, "rowcount", 0) or 0, 0)

    def _require_transaction(self) -> RootTransaction:
        if self._tx is None:
            msg = "No active transaction. Call begin() first."
            raise TransactionError(msg)
        return self._tx

    def _release(self) -> None:
        conn, self._conn, self._tx = self._conn, None, None
        if conn is not None:
            conn.close()
