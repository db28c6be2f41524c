from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .errors import KindError


@dataclass
class IntValue:
    value: int = 0


@dataclass
class BytesValue:
    value: bytes = b""


@dataclass
class ListValue:
    items: list[Value] = field(default_factory=list)


@dataclass
class DictValue:
    entries: dict[str, Value] = field(default_factory=dict)


Value = Union[IntValue, BytesValue, ListValue, DictValue]

CONTAINER_TYPES = (ListValue, DictValue)

# Longest integer body, sign included, that the decoder accepts.
MAX_INT_DIGITS = 32
_INT_UPPER = 10**MAX_INT_DIGITS
_INT_LOWER = -(10 ** (MAX_INT_DIGITS - 1))


def is_container(value: Value) -> bool:
    return isinstance(value, CONTAINER_TYPES)


def int_fits(n: int) -> bool:
    return _INT_LOWER < n < _INT_UPPER


def kind_name(value: Value) -> str:
    if isinstance(value, IntValue):
        return "integer"
    if isinstance(value, BytesValue):
        return "byte string"
    if isinstance(value, ListValue):
        return "list"
    if isinstance(value, DictValue):
        return "dictionary"
    raise KindError(f"Not a value: {value!r}")


def a_kind(value: Value) -> str:
    name = kind_name(value)
    return f"an {name}" if name[0] in "aeiou" else f"a {name}"


def member_count(value: Value) -> int:
    if isinstance(value, ListValue):
        return len(value.items)
    if isinstance(value, DictValue):
        return len(value.entries)
    raise KindError(f"{kind_name(value)} is not a container")


def zero_value(value: Value) -> Value:
    """Return the zero of a primitive's kind (``0`` or ``b""``)."""
    if isinstance(value, IntValue):
        return IntValue(0)
    if isinstance(value, BytesValue):
        return BytesValue(b"")
    raise KindError(f"{kind_name(value)} has no zero value")


def check_key(key: object) -> str:
    if not isinstance(key, str):
        raise KindError(
            f"Dictionary keys must be text strings, got {type(key).__name__}"
        )
    return key


def validate_tree(value: Value) -> None:
    """Check the invariants of a whole tree, raising KindError on the first breach.

    Walks iteratively so that deeply nested trees do not hit the recursion limit.
    """
    stack: list[object] = [value]
    while stack:
        cur = stack.pop()
        if isinstance(cur, IntValue):
            if isinstance(cur.value, bool) or not isinstance(cur.value, int):
                raise KindError(f"Integer payload must be int, got {cur.value!r}")
            if not int_fits(cur.value):
                raise KindError(
                    f"Integer too big to save (over {MAX_INT_DIGITS} digits)"
                )
        elif isinstance(cur, BytesValue):
            if not isinstance(cur.value, bytes):
                raise KindError(
                    f"Byte string payload must be bytes, got {type(cur.value).__name__}"
                )
        elif isinstance(cur, ListValue):
            stack.extend(cur.items)
        elif isinstance(cur, DictValue):
            for key, child in cur.entries.items():
                check_key(key)
                stack.append(child)
        else:
            raise KindError(f"Not a value: {cur!r}")


def from_python(obj: Any) -> Value:
    """Build a Value from plain Python data.

    ``str`` is encoded as UTF-8; dictionary keys must already be ``str``.
    """
    if isinstance(obj, bool):
        raise KindError("Booleans cannot be encoded")
    if isinstance(obj, int):
        return IntValue(obj)
    if isinstance(obj, (bytes, bytearray)):
        return BytesValue(bytes(obj))
    if isinstance(obj, str):
        return BytesValue(obj.encode("utf-8"))
    if isinstance(obj, (list, tuple)):
        return ListValue([from_python(x) for x in obj])
    if isinstance(obj, dict):
        return DictValue({check_key(k): from_python(v) for k, v in obj.items()})
    raise KindError(f"Cannot encode {type(obj).__name__} values")


def to_python(value: Value) -> Any:
    if isinstance(value, IntValue):
        return value.value
    if isinstance(value, BytesValue):
        return value.value
    if isinstance(value, ListValue):
        return [to_python(x) for x in value.items]
    if isinstance(value, DictValue):
        return {k: to_python(v) for k, v in value.entries.items()}
    raise KindError(f"Not a value: {value!r}")
