"""Column descriptors and record field access for the grid engine."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

RecordT = TypeVar("RecordT")

# (record, field name) -> value, or None when the field is missing.
FieldGetter = Callable[[Any, str], Any]


def get_field(record: Any, name: str) -> Any:
    """Read a named field from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def stringify(value: Any) -> str:
    """Convert a raw field value to display text; None becomes empty."""
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class ColumnDescriptor(Generic[RecordT]):
    """
    Describes one presented attribute of a record.

    Attributes:
        key: Stable column identifier. Used as the fallback field name when
             no render function is supplied, and as the DataTable column key.
        header: Display label.
        render: Pure function producing the cell content for a record. May
                combine several fields or return rich markup.
        width: Optional sizing hint in terminal cells.
    """

    key: str
    header: str
    render: Callable[[RecordT], Any] | None = None
    width: int | None = None
