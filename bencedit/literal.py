from __future__ import annotations

import json
from typing import Any

from .errors import LiteralError
from .model import (
    MAX_INT_DIGITS,
    BytesValue,
    DictValue,
    IntValue,
    ListValue,
    Value,
    int_fits,
)


class _Unrepresentable:
    def __init__(self, what: str) -> None:
        self.what = what


def _reject_float(text: str) -> _Unrepresentable:
    return _Unrepresentable(f"non-integer number {text}")


def _reject_constant(text: str) -> _Unrepresentable:
    return _Unrepresentable(text)


def _pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, val in pairs:
        if key in out:
            raise LiteralError(f"Duplicate key {key!r} in literal")
        out[key] = val
    return out


def _build(obj: Any, *, allow_empty_keys: bool) -> Value:
    if isinstance(obj, _Unrepresentable):
        raise LiteralError(
            f"Cannot represent {obj.what} in bencode", unrepresentable=True
        )
    if obj is None:
        raise LiteralError("Cannot represent null in bencode", unrepresentable=True)
    if isinstance(obj, bool):
        name = "true" if obj else "false"
        raise LiteralError(f"Cannot represent {name} in bencode", unrepresentable=True)
    if isinstance(obj, int):
        if not int_fits(obj):
            raise LiteralError(
                f"Integer has more than {MAX_INT_DIGITS} digits", unrepresentable=True
            )
        return IntValue(obj)
    if isinstance(obj, str):
        try:
            return BytesValue(obj.encode("utf-8"))
        except UnicodeEncodeError:
            raise LiteralError("String literal is not valid Unicode") from None
    if isinstance(obj, list):
        return ListValue([_build(x, allow_empty_keys=allow_empty_keys) for x in obj])
    if isinstance(obj, dict):
        entries: dict[str, Value] = {}
        for key, val in obj.items():
            if not key and not allow_empty_keys:
                raise LiteralError("Empty dictionary keys are not allowed")
            entries[key] = _build(val, allow_empty_keys=allow_empty_keys)
        return DictValue(entries)
    raise LiteralError(
        f"Cannot represent {type(obj).__name__} in bencode", unrepresentable=True
    )


def convert(text: str, *, allow_empty_keys: bool = True) -> Value:
    """Convert a JSON literal into a value tree.

    Objects become dictionaries, arrays lists, integral numbers integers and
    strings UTF-8 byte strings. ``null``, booleans and non-integral numbers
    have no bencode form and raise ``LiteralError(unrepresentable=True)``.
    """
    try:
        obj = json.loads(
            text,
            parse_float=_reject_float,
            parse_constant=_reject_constant,
            object_pairs_hook=_pairs,
            strict=False,
        )
    except json.JSONDecodeError as e:
        raise LiteralError(f"Invalid literal: {e.msg} at column {e.colno}") from None
    except LiteralError:
        raise
    except ValueError as e:
        raise LiteralError(f"Invalid literal: {e}") from None
    return _build(obj, allow_empty_keys=allow_empty_keys)
