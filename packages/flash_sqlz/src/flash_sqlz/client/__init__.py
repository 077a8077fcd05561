from __future__ import annotations

from typing import TYPE_CHECKING

from flash_sqlz.config import SQLZSettings, sqlz_settings
from flash_sqlz.executor import SQLAlchemyExecutor

from .rendering import quote_identifier, render_statement
from .transaction import ClientTransaction

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from flash_sqlz.materializer import Materializer

__all__ = ["DBClient", "quote_identifier", "render_statement"]


class DBClient(ClientTransaction):
    """
    Fluent statement builder bound to one database executor.

    A client collects one statement at a time through chained calls, then
    runs it with a terminal method:
        - all()
        - first()
        - do()

    After a terminal method the client is empty again and ready for the
    next statement, whether the call succeeded or raised.

    Notes:
        - A client is not thread-safe. Give each thread its own client;
          clients created with ``from_engine`` may share one engine.
        - Table and column names are trusted input and are not checked
          against the schema.

    Examples:
        >>> client = DBClient.from_engine(create_engine("sqlite://"))
        >>> client.table("people").insert({"name": "abc", "age": 10}).do()
        1
        >>> client.table("people").select().where({"age >": 5}).first()
        {'id': 1, 'name': 'abc', 'age': 10}
    """

    @classmethod
    def from_engine(
        cls,
        engine: Engine,
        *,
        materializer: Materializer | None = None,
        settings: SQLZSettings | None = None,
    ) -> DBClient:
        """
        Wrap an existing SQLAlchemy engine.
        """
        settings = settings or sqlz_settings
        return cls(
            SQLAlchemyExecutor(engine),
            materializer=materializer,
            where_joiner=settings.where_joiner(),
        )
