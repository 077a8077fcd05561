from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .exceptions import UnsupportedPayloadError

PRIMARY_TAG = "db"
SECONDARY_TAG = "json"

Scalar = str | int | float | bool | None


class Payload(ABC):
    """
    Column data for an INSERT or UPDATE.

    Every variant produces ``(column, value)`` pairs in a stable order; the
    renderer pairs them with placeholders positionally.
    """

    @abstractmethod
    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield ``(column, value)`` pairs."""

    def columns(self) -> list[str]:
        return [col for col, _ in self.items()]

    def values(self) -> list[Any]:
        return [val for _, val in self.items()]


class FieldList(Payload):
    """
    A plain column -> value mapping. Values are bound as given.

    Example:
        >>> list(FieldList({"name": "abc", "age": 10}).items())
        [('name', 'abc'), ('age', 10)]
    """

    def __init__(self, fields: Mapping[str, Any]):
        self.fields = dict(fields)

    def items(self) -> Iterator[tuple[str, Any]]:
        yield from self.fields.items()

    def __repr__(self) -> str:
        return f"FieldList({self.fields!r})"


class TaggedRecord(Payload):
    """
    A dataclass instance or pydantic model whose fields name their columns.

    The column is read from the ``db`` tag, falling back to the ``json`` tag.
    Fields carrying neither are not written. Values are normalized with
    :func:`coerce_scalar`.

    Tags are declared as:
        - dataclass: ``field(metadata={"db": "user_id"})`` or :func:`column`
        - pydantic: ``Field(json_schema_extra={"db": "user_id"})``, or an
          alias, which acts as the field's JSON name.

    Example:
        >>> @dataclass
        ... class Person:
        ...     id: int = column("id")
        ...     name: str = column("name")
        ...     note: str = ""
        >>> list(TaggedRecord(Person(1, "abc")).items())
        [('id', 1), ('name', 'abc')]
    """

    def __init__(self, record: Any):
        if not is_tagged_record(record):
            msg = (
                "TaggedRecord needs a dataclass instance or pydantic model, "
                f"got {type(record).__name__}"
            )
            raise UnsupportedPayloadError(msg)
        self.record = record

    def items(self) -> Iterator[tuple[str, Any]]:
        for attr, key in self._tagged_fields():
            yield key, coerce_scalar(getattr(self.record, attr))

    def _tagged_fields(self) -> Iterator[tuple[str, str]]:
        if isinstance(self.record, BaseModel):
            for name, info in type(self.record).model_fields.items():
                extra = info.json_schema_extra
                key = None
                if isinstance(extra, dict):
                    key = extra.get(PRIMARY_TAG) or extra.get(SECONDARY_TAG)
                if not key:
                    key = info.serialization_alias or info.alias
                if key:
                    yield name, str(key)
            return

        for f in dataclasses.fields(self.record):
            key = f.metadata.get(PRIMARY_TAG) or f.metadata.get(SECONDARY_TAG)
            if key:
                yield f.name, key

    def __repr__(self) -> str:
        return f"TaggedRecord({self.record!r})"


def is_tagged_record(obj: Any) -> bool:
    if isinstance(obj, BaseModel):
        return True
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)


def as_payload(data: Any) -> Payload:
    """
    Wrap raw INSERT/UPDATE data in the matching payload variant.

    Raises:
        UnsupportedPayloadError: If ``data`` is not a mapping, a dataclass
            instance, a pydantic model or a ``Payload``.
    """
    if isinstance(data, Payload):
        return data
    if isinstance(data, Mapping):
        return FieldList(data)
    if is_tagged_record(data):
        return TaggedRecord(data)
    msg = f"data not mapping or tagged record: {type(data).__name__}"
    raise UnsupportedPayloadError(msg)


def coerce_scalar(value: Any) -> Scalar:
    """
    Normalize a record field to a driver-friendly scalar.

    ``None`` is kept so it binds as NULL. Unknown types fall back to ``str``.

    Examples:
        >>> coerce_scalar(True), coerce_scalar(7), coerce_scalar(1.5)
        (True, 7, 1.5)
        >>> coerce_scalar(Decimal("2.50"))
        '2.50'
    """
    if value is None:
        return None
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return bool(value)
    if isinstance(value, Enum):
        value = value.value
        if isinstance(value, bool):
            return bool(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, str):
        return str(value)
    return str(value)


def column(name: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field bound to a column.

    Example:
        >>> @dataclass
        ... class Person:
        ...     name: str = column("name", default="")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[PRIMARY_TAG] = name
    return dataclasses.field(metadata=metadata, **kwargs)
