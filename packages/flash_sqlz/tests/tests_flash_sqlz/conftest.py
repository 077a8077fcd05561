from collections.abc import Sequence
from typing import Any

import pytest
from flash_sqlz import DBClient, QueryResult
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

PEOPLE_DDL = (
    "CREATE TABLE `people` ("
    "`id` INTEGER PRIMARY KEY AUTOINCREMENT, "
    "`name` TEXT NOT NULL, "
    "`age` INTEGER NOT NULL DEFAULT 0, "
    "`avatar` BLOB)"
)


class RecordingExecutor:
    """
    In-memory executor that records every call and can be told to fail.
    """

    def __init__(
        self,
        columns: Sequence[str] = (),
        rows: Sequence[Sequence[Any]] = (),
        affected: int = 1,
    ):
        self.columns = list(columns)
        self.rows = [tuple(r) for r in rows]
        self.affected = affected
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.events: list[str] = []
        self.execute_error: Exception | None = None
        self.commit_error: Exception | None = None
        self.rollback_error: Exception | None = None
        self._active = False

    @property
    def in_transaction(self) -> bool:
        return self._active

    def query(self, sql: str, args: Sequence[Any]) -> QueryResult:
        self.calls.append(("query", sql, tuple(args)))
        return QueryResult(columns=list(self.columns), rows=list(self.rows))

    def execute(self, sql: str, args: Sequence[Any]) -> int:
        self.calls.append(("execute", sql, tuple(args)))
        if self.execute_error is not None:
            raise self.execute_error
        return self.affected

    def begin(self) -> None:
        self.events.append("begin")
        self._active = True

    def commit(self) -> None:
        self.events.append("commit")
        if self.commit_error is not None:
            raise self.commit_error
        self._active = False

    def rollback(self) -> None:
        self.events.append("rollback")
        self._active = False
        if self.rollback_error is not None:
            raise self.rollback_error

    def close(self) -> None:
        self.events.append("close")


@pytest.fixture
def executor():
    """A recording executor with no rows."""
    return RecordingExecutor()


@pytest.fixture
def fake_client(executor):
    """A client that never touches a real database."""
    return DBClient(executor)


@pytest.fixture
def engine():
    """
    In-memory SQLite engine. StaticPool keeps one connection alive so every
    checkout sees the same database.
    """
    eng = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with eng.begin() as conn:
        conn.exec_driver_sql(PEOPLE_DDL)
    yield eng
    eng.dispose()


@pytest.fixture
def client(engine):
    """A client bound to the in-memory ``people`` table."""
    return DBClient.from_engine(engine)


@pytest.fixture
def seeded_client(client):
    """The same client with three people inserted."""
    for name, age in (("abc", 10), ("bob", 25), ("cat", 40)):
        client.table("people").insert({"name": name, "age": age}).do()
    return client
