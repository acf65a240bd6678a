"""
records/values.py - Nested argument/result values.

Argument lists, result values, error details and storage snapshots are
arbitrarily nested JSON-like data. They are modelled as a closed variant:

- ScalarValue: str, int, float, bool or None (a present null)
- ArrayValue: ordered items
- MapValue: ordered string-keyed entries

INVARIANT: a field that holds no value is Python None; a field that holds a
null holds ScalarValue(None).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple, Union

from ..errors import SerializationError


Scalar = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class ScalarValue:
    """Leaf value."""
    value: Scalar = None

    def __post_init__(self):
        if self.value is not None and not isinstance(self.value, (str, int, float, bool)):
            raise TypeError(f"Unsupported scalar type: {type(self.value).__name__}")


@dataclass(frozen=True)
class ArrayValue:
    """Ordered sequence of values."""
    items: Tuple["Value", ...] = ()

    def __iter__(self) -> Iterator["Value"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class MapValue:
    """Ordered mapping from string keys to values."""
    entries: Tuple[Tuple[str, "Value"], ...] = ()

    def __len__(self) -> int:
        return len(self.entries)


Value = Union[ScalarValue, ArrayValue, MapValue]


def from_native(obj: Any) -> Value:
    """
    Build a Value from JSON-like Python data.

    Raises:
        SerializationError: unsupported type or non-string map key
    """
    if is_value(obj):
        return obj
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return ScalarValue(obj)
    if isinstance(obj, (list, tuple)):
        return ArrayValue(tuple(from_native(item) for item in obj))
    if isinstance(obj, dict):
        entries = []
        for key, item in obj.items():
            if not isinstance(key, str):
                raise SerializationError(f"map key {key!r} is not a string")
            entries.append((key, from_native(item)))
        return MapValue(tuple(entries))
    raise SerializationError(f"unsupported value type {type(obj).__name__}")


def to_native(value: Value) -> Any:
    """Convert a Value back to plain Python data (dict/list/scalar)."""
    if isinstance(value, ScalarValue):
        return value.value
    if isinstance(value, ArrayValue):
        return [to_native(item) for item in value.items]
    if isinstance(value, MapValue):
        out: Dict[str, Any] = {}
        for key, item in value.entries:
            out[key] = to_native(item)
        return out
    raise TypeError(f"Not a Value: {type(value).__name__}")


def is_value(obj: Any) -> bool:
    return isinstance(obj, (ScalarValue, ArrayValue, MapValue))
