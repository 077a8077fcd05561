from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from flash_sqlz.exceptions import (
    ConfigurationError,
    MissingPayloadError,
    MissingTableError,
    StatementKindError,
)
from flash_sqlz.info import (
    BuilderState,
    RenderedStatement,
    StatementInfo,
    StatementKind,
)
from flash_sqlz.payload import as_payload

from .base import ClientBase

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """
    Wrap a table or column name in backticks.

    Examples:
        >>> quote_identifier("age")
        '`age`'
        >>> quote_identifier("we`ird")
        '`we``ird`'
    """
    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def render_statement(info: StatementInfo, *, where_joiner: str = ",") -> RenderedStatement:
    """
    Render a statement descriptor into SQL with ``?`` placeholders.

    Args:
        info: The collected statement configuration.
        where_joiner: Text placed between WHERE fragments. The default ``","``
            reproduces the historical output, which is only valid SQL for a
            single filter; pass ``" AND "`` for conjunctive filters.

    Returns:
        The SQL text and its positional arguments, in placeholder order.

    Raises:
        MissingTableError: If no table was configured.
        StatementKindError: If no statement kind was chosen.
        MissingPayloadError: If INSERT/UPDATE has no data.
        UnsupportedPayloadError: If the data is not a mapping or tagged record.

    Examples:
        >>> render_statement(StatementInfo(table="t", kind=StatementKind.SELECT))
        RenderedStatement(sql='SELECT * FROM `t`', args=())
        >>> info = StatementInfo(
        ...     table="t", kind=StatementKind.DELETE, where={"age >": 10}
        ... )
        >>> render_statement(info)
        RenderedStatement(sql='DELETE FROM `t` WHERE `age` > ?', args=(10,))
    """
    if not info.table:
        msg = "table name empty"
        raise MissingTableError(msg)
    if info.kind is None:
        msg = "statement kind not set, call select/insert/update/delete first"
        raise StatementKindError(msg)
    if info.kind in (StatementKind.INSERT, StatementKind.UPDATE) and info.data is None:
        msg = "insert/update no data"
        raise MissingPayloadError(msg)

    table = quote_identifier(info.table)
    args: list[Any] = []

    if info.kind is StatementKind.SELECT:
        cols = "*"
        if info.columns:
            cols = ",".join(quote_identifier(c) for c in info.columns)
            if info.distinct:
                cols = f"DISTINCT {cols}"
        sql = f"SELECT {cols} FROM {table}"
        sql += _where_clause(info.where, args, where_joiner)
        sql += _order_by_clause(info.order_by)
        sql += _limit_clause(info.limit, info.offset)

    elif info.kind is StatementKind.UPDATE:
        assignments = []
        for col, val in as_payload(info.data).items():
            assignments.append(f"{quote_identifier(col)}=?")
            args.append(val)
        sql = f"UPDATE {table} SET {','.join(assignments)}"
        sql += _where_clause(info.where, args, where_joiner)

    elif info.kind is StatementKind.INSERT:
        cols_list = []
        for col, val in as_payload(info.data).items():
            cols_list.append(quote_identifier(col))
            args.append(val)
        placeholders = ",".join("?" * len(cols_list))
        sql = f"INSERT INTO {table} ({','.join(cols_list)}) VALUES ({placeholders})"

    else:
        sql = f"DELETE FROM {table}"
        sql += _where_clause(info.where, args, where_joiner)

    return RenderedStatement(sql=sql, args=tuple(args))


def _where_clause(where: Mapping[str, Any], args: list[Any], joiner: str) -> str:
    fragments = []
    for key, value in where.items():
        tokens = key.split()
        if not tokens:
            msg = "filter key is empty"
            raise ConfigurationError(msg)
        col = quote_identifier(tokens[0])
        op = tokens[1] if len(tokens) > 1 else "="

        if op.upper() == "IN":
            values = _in_values(key, value)
            if not values:
                logger.debug("Skipping empty IN filter %r", key)
                continue
            fragments.append(f"{col} IN ({','.join('?' * len(values))})")
            args.extend(values)
        else:
            fragments.append(f"{col} {op} ?")
            args.append(value)

    if not fragments:
        return ""
    if len(fragments) > 1 and joiner.strip() == ",":
        logger.warning(
            "Joining %d WHERE filters with ','; most engines reject this. "
            "Set SQLZ_WHERE_CONNECTIVE=AND to join them with AND.",
            len(fragments),
        )
    return f" WHERE {joiner.join(fragments)}"


def _in_values(key: str, value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(
        value, Iterable
    ):
        msg = f"IN filter {key!r} needs a sequence, got {type(value).__name__}"
        raise ConfigurationError(msg)
    return list(value)


def _order_by_clause(order_by: Mapping[str, bool]) -> str:
    if not order_by:
        return ""
    terms = [
        f"{quote_identifier(col)} {'ASC' if asc else 'DESC'}"
        for col, asc in order_by.items()
    ]
    return f" ORDER BY {','.join(terms)}"


def _limit_clause(limit: int, offset: int) -> str:
    if limit <= 0:
        return ""
    clause = f" LIMIT {limit:d}"
    if offset > 0:
        clause += f" OFFSET {offset:d}"
    return clause


class ClientRendering(ClientBase):
    """
    Turns the collected configuration into SQL.

    Rendering fills ``info.sql`` and ``info.args`` and moves the client to
    RENDERED. It never talks to the database.
    """

    def _render(self) -> RenderedStatement:
        rendered = render_statement(self.info, where_joiner=self.where_joiner)
        self.info.sql = rendered.sql
        self.info.args = list(rendered.args)
        self._state = BuilderState.RENDERED
        logger.debug("Rendered SQL: %s | args=%r", rendered.sql, rendered.args)
        return rendered

    def to_sql(self) -> RenderedStatement:
        """
        Render the statement being built without executing or clearing it.

        Example:
            >>> client.table("people").select(["name"]).limit(5).to_sql().sql
            'SELECT `name` FROM `people` LIMIT 5'
        """
        return render_statement(self.info, where_joiner=self.where_joiner)
