from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class StatementKind(Enum):
    """The four statement shapes a client can build."""

    SELECT = auto()
    INSERT = auto()
    UPDATE = auto()
    DELETE = auto()


class BuilderState(Enum):
    """
    Lifecycle of a client's statement.

    IDLE -> CONFIGURING -> RENDERED -> EXECUTED -> IDLE. Leaving an execute
    call always returns to IDLE, whether the call succeeded or not.
    """

    IDLE = auto()
    CONFIGURING = auto()
    RENDERED = auto()
    EXECUTED = auto()


@dataclass
class StatementInfo:
    """
    Everything the fluent API has collected for one statement.

    Mappings keep insertion order, so identical configuration chains always
    render identical SQL.
    """

    table: str = ""
    kind: StatementKind | None = None
    data: Any = None
    where: dict[str, Any] = field(default_factory=dict)
    columns: list[str] = field(default_factory=list)
    distinct: bool = False
    limit: int = 0
    offset: int = 0
    order_by: dict[str, bool] = field(default_factory=dict)
    sql: str = ""
    args: list[Any] = field(default_factory=list)

    def is_empty(self) -> bool:
        return self == StatementInfo()


@dataclass(frozen=True)
class RenderedStatement:
    """SQL text with ``?`` placeholders and the matching positional arguments."""

    sql: str
    args: tuple[Any, ...] = ()
