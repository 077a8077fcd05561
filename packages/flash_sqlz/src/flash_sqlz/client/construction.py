from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Self

from flash_sqlz.info import StatementKind

from .rendering import ClientRendering


class ClientConstruction(ClientRendering):
    """
    Fluent API for describing a statement.

    Every method records its part of the statement on the client and
    returns the client itself, so calls chain left to right. Nothing is
    validated here; missing pieces are reported when the statement is
    rendered.
    """

    def table(self, name: str) -> Self:
        """
        Set the target table.

        Example:
            >>> client.table("people").select().all()
            # SELECT * FROM `people`
        """
        self._configure()
        self.info.table = name
        return self

    def select(self, columns: Sequence[str] | None = None, distinct: bool = False) -> Self:
        """
        Make the statement a SELECT.

        Args:
            columns: Columns to project. Empty or ``None`` selects ``*``.
            distinct: Add DISTINCT. Only honoured with an explicit column list.

        Example:
            >>> client.table("people").select(["name"], distinct=True).all()
            # SELECT DISTINCT `name` FROM `people`
        """
        self._configure()
        self.info.kind = StatementKind.SELECT
        if columns:
            self.info.columns = list(columns)
            self.info.distinct = distinct
        else:
            self.info.distinct = False
        return self

    def insert(self, data: Any) -> Self:
        """
        Make the statement an INSERT of ``data``.

        ``data`` is a column -> value mapping, a tagged dataclass instance
        or pydantic model, or a :class:`~flash_sqlz.payload.Payload`.

        Example:
            >>> client.table("people").insert({"name": "abc", "age": 10}).do()
            # INSERT INTO `people` (`name`,`age`) VALUES (?,?)
        """
        self._configure()
        self.info.kind = StatementKind.INSERT
        self.info.data = data
        return self

    def update(self, data: Any) -> Self:
        """
        Make the statement an UPDATE setting the columns in ``data``.

        Example:
            >>> client.table("people").update({"age": 20}).where({"name": "abc"}).do()
            # UPDATE `people` SET `age`=? WHERE `name` = ?
        """
        self._configure()
        self.info.kind = StatementKind.UPDATE
        self.info.data = data
        return self

    def delete(self) -> Self:
        """
        Make the statement a DELETE.

        Example:
            >>> client.table("people").delete().where({"id IN": [1, 2]}).do()
            # DELETE FROM `people` WHERE `id` IN (?,?)
        """
        self._configure()
        self.info.kind = StatementKind.DELETE
        return self

    def where(self, filters: Mapping[str, Any]) -> Self:
        """
        Set the filters of the statement.

        Keys are a column name optionally followed by an operator
        (``"age >"``, ``"name LIKE"``, ``"id IN"``); the default operator
        is ``=``. ``IN`` takes a sequence, and an empty sequence drops that
        filter. A non-empty mapping replaces earlier filters; an empty one
        changes nothing.

        Example:
            >>> client.table("people").select().where({"age >=": 18}).all()
            # SELECT * FROM `people` WHERE `age` >= ?
        """
        self._configure()
        if filters:
            self.info.where = dict(filters)
        return self

    def limit(self, count: int) -> Self:
        """
        Cap the number of returned rows. ``0`` means no LIMIT clause.
        """
        self._configure()
        self.info.limit = int(count)
        return self

    def offset(self, count: int) -> Self:
        """
        Skip ``count`` rows. Only rendered together with a LIMIT.
        """
        self._configure()
        self.info.offset = int(count)
        return self

    def order_by(self, column: str, ascending: bool = True) -> Self:
        """
        Add a sort key. Repeated calls add further keys in call order.

        Example:
            >>> client.table("people").select().order_by("age", False).order_by("name").all()
            # SELECT * FROM `people` ORDER BY `age` DESC,`name` ASC
        """
        self._configure()
        self.info.order_by[column] = ascending
        return self
