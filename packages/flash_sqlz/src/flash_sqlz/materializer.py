from __future__ import annotations

from collections.abc import Hashable
from functools import lru_cache
from typing import Any, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from .exceptions import MaterializationError

T = TypeVar("T")


class Materializer(Protocol):
    """Turns scanned rows (or a single row) into a caller-chosen type."""

    def materialize(self, data: Any, target: Any) -> Any: ...


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


class PydanticMaterializer:
    """
    Materializer built on ``pydantic.TypeAdapter``.

    Validation runs in lax mode, so driver values such as ``"10"`` or
    ``Decimal("1.5")`` still populate ``int`` and ``float`` fields.
    Any type pydantic understands works as a target: models, dataclasses,
    ``TypedDict``s and ``list[...]`` of those.

    Example:
        >>> PydanticMaterializer().materialize({"id": "1"}, Person)
        Person(id=1)
    """

    def materialize(self, data: Any, target: type[T] | Any) -> T:
        if isinstance(target, Hashable):
            adapter = _adapter(target)
        else:
            adapter = TypeAdapter(target)
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            name = target.__name__ if isinstance(target, type) else repr(target)
            msg = f"make result error: cannot convert rows to {name}: {e}"
            raise MaterializationError(msg) from e
