"""
Placeholder value model.

Nested input data is flattened once per run into a read-only mapping from
dot-path keys to tagged values: ``Scalar``, ``ArrayOfRecords`` or ``Nil``.
Objects never survive flattening; arrays are kept whole so the row expander
can work on the raw element list.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..utils.exceptions import DataFormatError


@dataclass(frozen=True)
class Scalar:
    """Single value with its canonical text and the decoded native value."""

    text: str
    native: Any = None

    kind = "scalar"


@dataclass(frozen=True)
class Nil:
    """JSON ``null``; substitutes as empty text."""

    kind = "nil"

    @property
    def text(self) -> str:
        return ""


NIL = Nil()

FieldValue = Union[Scalar, Nil]


@dataclass(frozen=True)
class ArrayOfRecords:
    """Ordered sequence of records (field name -> scalar)."""

    records: Tuple[Mapping[str, FieldValue], ...] = field(default_factory=tuple)

    kind = "array"

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Mapping[str, FieldValue]]:
        return iter(self.records)


PlaceholderValue = Union[Scalar, ArrayOfRecords, Nil]


def scalar_text(value: Any) -> str:
    """
    Canonical text form of a JSON scalar.

    Booleans render as ``true``/``false``, numbers as JSON number text and
    strings unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def make_field_value(value: Any) -> FieldValue:
    if value is None:
        return NIL
    return Scalar(scalar_text(value), value)


def is_truthy(value: Optional[PlaceholderValue]) -> bool:
    """
    Resolve a placeholder value to a boolean condition.

    True only for a scalar whose native value is ``True``, whose text
    case-insensitively equals ``true``, or whose text is the numeral ``1``.
    """
    if not isinstance(value, Scalar):
        return False
    if value.native is True:
        return True
    text = value.text.strip()
    return text.lower() == "true" or text == "1"


def _flatten_record(record: Mapping[str, Any], parent_key: str = "") -> Dict[str, FieldValue]:
    fields: Dict[str, FieldValue] = {}
    for key, value in record.items():
        name = f"{parent_key}.{key}" if parent_key else str(key)
        if isinstance(value, Mapping):
            fields.update(_flatten_record(value, name))
        else:
            fields[name] = make_field_value(value)
    return fields


def make_records(items: List[Any]) -> ArrayOfRecords:
    """
    Build an ``ArrayOfRecords`` from a raw JSON array.

    Object elements become records; nested objects inside an element are
    flattened to dotted field names. Scalar elements become a record with a
    single ``value`` field.
    """
    records = []
    for item in items:
        if isinstance(item, Mapping):
            records.append(_flatten_record(item))
        else:
            records.append({"value": make_field_value(item)})
    return ArrayOfRecords(tuple(records))


class FlattenedData(Mapping[str, PlaceholderValue]):
    """
    Read-only mapping from dot-path keys to placeholder values.

    Built once per run and shared by every resolver.
    """

    def __init__(self, items: Optional[Mapping[str, PlaceholderValue]] = None) -> None:
        self._items: Dict[str, PlaceholderValue] = dict(items or {})

    def __getitem__(self, key: str) -> PlaceholderValue:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FlattenedData):
            return self._items == other._items
        return NotImplemented

    def __repr__(self) -> str:
        return f"FlattenedData({self._items!r})"

    def scalars(self) -> Dict[str, Union[Scalar, Nil]]:
        """Single-value entries (``Nil`` included)."""
        return {k: v for k, v in self._items.items() if not isinstance(v, ArrayOfRecords)}

    def arrays(self) -> Dict[str, ArrayOfRecords]:
        return {k: v for k, v in self._items.items() if isinstance(v, ArrayOfRecords)}

    def get_text(self, key: str) -> Optional[str]:
        """Text of a single-value entry, or None for missing keys and arrays."""
        value = self._items.get(key)
        if value is None or isinstance(value, ArrayOfRecords):
            return None
        return value.text

    def is_truthy(self, key: str) -> bool:
        return is_truthy(self._items.get(key))


def flatten(data: Any, parent_key: str = "") -> FlattenedData:
    """
    Flatten nested data into dot-path keys.

    Args:
        data: Decoded data tree; the root must be an object
        parent_key: Prefix for every key

    Returns:
        FlattenedData

    Raises:
        DataFormatError: If the root is not an object
    """
    if not isinstance(data, Mapping):
        raise DataFormatError(
            f"Data root must be an object, got {type(data).__name__}",
            error_code="DATA_ROOT"
        )

    items: Dict[str, PlaceholderValue] = {}
    _flatten_into(items, data, parent_key)
    return FlattenedData(items)


def _flatten_into(items: Dict[str, PlaceholderValue], node: Mapping[str, Any], parent_key: str) -> None:
    for key, value in node.items():
        name = f"{parent_key}.{key}" if parent_key else str(key)
        if isinstance(value, Mapping):
            _flatten_into(items, value, name)
        elif isinstance(value, list):
            items[name] = make_records(value)
        elif value is None:
            items[name] = NIL
        else:
            items[name] = Scalar(scalar_text(value), value)
