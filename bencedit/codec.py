from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import DecodeError, KindError
from .model import (
    MAX_INT_DIGITS,
    BytesValue,
    DictValue,
    IntValue,
    ListValue,
    Value,
    check_key,
    int_fits,
)

_INT_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")
_LEN_RE = re.compile(rb"0|[1-9][0-9]*")

_DICT = ord("d")
_LIST = ord("l")
_INT = ord("i")
_END = ord("e")


@dataclass
class _Frame:
    container: ListValue | DictValue
    key: str | None = None


def _read_int(data: bytes, pos: int) -> tuple[IntValue, int]:
    end = data.find(b"e", pos + 1)
    if end < 0:
        raise DecodeError("Unterminated integer", pos)
    body = data[pos + 1 : end]
    if not body:
        raise DecodeError("Empty integer", pos)
    if len(body) > MAX_INT_DIGITS:
        raise DecodeError("Integer too big", pos)
    if not _INT_RE.fullmatch(body) or body == b"-0":
        text = body.decode("ascii", "replace")
        raise DecodeError(f"Invalid integer {text!r}", pos)
    return IntValue(int(body)), end + 1


def _read_bytes(data: bytes, pos: int) -> tuple[bytes, int]:
    colon = data.find(b":", pos)
    if colon < 0:
        raise DecodeError("Expected ':' after string length", pos)
    length = data[pos:colon]
    if not _LEN_RE.fullmatch(length):
        raise DecodeError("Invalid string length", pos)
    start = colon + 1
    stop = start + int(length)
    if stop > len(data):
        raise DecodeError("Unexpected end of data inside string", pos)
    return data[start:stop], stop


def decode(data: bytes) -> Value:
    """Decode one bencoded value; the whole input must be consumed."""
    if not data:
        raise DecodeError("Empty file")

    stack: list[_Frame] = []
    pos = 0
    size = len(data)

    while True:
        if pos >= size:
            raise DecodeError("Unexpected end of data", pos)
        c = data[pos]
        top = stack[-1] if stack else None

        if top is not None and c == _END:
            if top.key is not None:
                raise DecodeError(f"Missing value for key {top.key!r}", pos)
            stack.pop()
            pos += 1
            value: Value = top.container
        elif (
            top is not None
            and isinstance(top.container, DictValue)
            and top.key is None
        ):
            raw, pos_after = _read_bytes(data, pos)
            try:
                key = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise DecodeError("Dictionary key is not valid UTF-8", pos) from None
            if key in top.container.entries:
                raise DecodeError(f"Duplicate dictionary key {key!r}", pos)
            top.key = key
            pos = pos_after
            continue
        elif c == _DICT:
            stack.append(_Frame(DictValue()))
            pos += 1
            continue
        elif c == _LIST:
            stack.append(_Frame(ListValue()))
            pos += 1
            continue
        elif c == _INT:
            value, pos = _read_int(data, pos)
        elif 0x30 <= c <= 0x39:
            raw, pos = _read_bytes(data, pos)
            value = BytesValue(raw)
        else:
            raise DecodeError(f"Unexpected {chr(c)!r} token", pos)

        if not stack:
            if pos != size:
                raise DecodeError("Trailing data after root value", pos)
            return value

        parent = stack[-1]
        if isinstance(parent.container, ListValue):
            parent.container.items.append(value)
        else:
            assert parent.key is not None
            parent.container.entries[parent.key] = value
            parent.key = None


def _encode_str(raw: bytes) -> bytes:
    return b"%d:%s" % (len(raw), raw)


def encode(value: Value) -> bytes:
    """Encode a value tree; dictionary keys are emitted in sorted byte order."""
    out = bytearray()
    stack: list[Value | bytes] = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, bytes):
            out += item
        elif isinstance(item, IntValue):
            if isinstance(item.value, bool) or not isinstance(item.value, int):
                raise KindError(f"Integer payload must be int, got {item.value!r}")
            if not int_fits(item.value):
                raise KindError(
                    f"Integer too big to encode (over {MAX_INT_DIGITS} digits)"
                )
            out += b"i%de" % item.value
        elif isinstance(item, BytesValue):
            out += _encode_str(bytes(item.value))
        elif isinstance(item, ListValue):
            out += b"l"
            stack.append(b"e")
            stack.extend(reversed(item.items))
        elif isinstance(item, DictValue):
            out += b"d"
            stack.append(b"e")
            pairs = sorted(
                ((check_key(k).encode("utf-8"), v) for k, v in item.entries.items()),
                key=lambda kv: kv[0],
            )
            for raw_key, child in reversed(pairs):
                stack.append(child)
                stack.append(_encode_str(raw_key))
        else:
            raise KindError(f"Not a value: {item!r}")
    return bytes(out)
