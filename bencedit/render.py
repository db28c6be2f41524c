from __future__ import annotations

import json
from dataclasses import dataclass

from .model import (
    BytesValue,
    DictValue,
    IntValue,
    ListValue,
    Value,
    kind_name,
    member_count,
)

DEFAULT_MAX_DEPTH = 6
DEFAULT_MAX_LIST_ITEMS = 16
DEFAULT_MAX_BYTES = 64

EMPTY_DICT = "{}"
EMPTY_LIST = "[]"
ELLIPSIS = "…"
INDENT = "  "


@dataclass(frozen=True)
class Limits:
    max_depth: int = DEFAULT_MAX_DEPTH
    max_list_items: int = DEFAULT_MAX_LIST_ITEMS
    max_bytes: int = DEFAULT_MAX_BYTES


def _plural(n: int, word: str, many: str = "") -> str:
    if n == 1:
        return f"{n} {word}"
    return f"{n} {many or word + 's'}"


def format_bytes(raw: bytes, max_bytes: int) -> str:
    """Quote UTF-8 text, hex-dump anything else; cut after ``max_bytes`` bytes."""
    limit = max(0, max_bytes)
    hidden = len(raw) - limit if len(raw) > limit else 0
    head = raw[:limit] if hidden else raw
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        body = f"<hex {head.hex()}{ELLIPSIS if hidden else ''}>"
    else:
        # Back off to a character boundary; the partial character counts as hidden.
        text = head.decode("utf-8", errors="ignore")
        hidden = len(raw) - len(text.encode("utf-8"))
        body = json.dumps(text, ensure_ascii=False)
        if hidden:
            body = body[:-1] + ELLIPSIS + '"'
    if hidden:
        body += f" ({_plural(hidden, 'byte')} truncated)"
    return body


def format_key(key: str) -> str:
    return json.dumps(key, ensure_ascii=False)


def elided(value: Value) -> str:
    if isinstance(value, DictValue):
        count = _plural(member_count(value), "entry", "entries")
        return "{" + f"{ELLIPSIS} {count}" + "}"
    if isinstance(value, ListValue):
        return f"[{ELLIPSIS} {_plural(member_count(value), 'item')}]"
    raise TypeError(f"{kind_name(value)} cannot be elided")


def _more(hidden: int) -> str:
    return f"{ELLIPSIS} +{hidden} more"


def _lines(value: Value, depth: int, limits: Limits) -> list[str]:
    # depth is the number of containers above this value on its own branch
    if isinstance(value, IntValue):
        return [str(value.value)]
    if isinstance(value, BytesValue):
        return [format_bytes(value.value, limits.max_bytes)]

    if isinstance(value, DictValue):
        if not value.entries:
            return [EMPTY_DICT]
        if depth >= limits.max_depth:
            return [elided(value)]
        shown = max(0, limits.max_list_items)
        out = ["{"]
        for i, (key, child) in enumerate(value.entries.items()):
            if i >= shown:
                out.append(INDENT + _more(len(value.entries) - shown))
                break
            child_lines = _lines(child, depth + 1, limits)
            out.append(f"{INDENT}{format_key(key)}: {child_lines[0]}")
            out.extend(INDENT + ln for ln in child_lines[1:])
        out.append("}")
        return out

    if isinstance(value, ListValue):
        if not value.items:
            return [EMPTY_LIST]
        if depth >= limits.max_depth:
            return [elided(value)]
        shown = max(0, limits.max_list_items)
        out = ["["]
        for i, child in enumerate(value.items[:shown]):
            child_lines = _lines(child, depth + 1, limits)
            out.append(f"{INDENT}[{i}] {child_lines[0]}")
            out.extend(INDENT + ln for ln in child_lines[1:])
        if len(value.items) > shown:
            out.append(INDENT + _more(len(value.items) - shown))
        out.append("]")
        return out

    raise TypeError(f"Not a value: {value!r}")


def render(
    value: Value,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_list_items: int = DEFAULT_MAX_LIST_ITEMS,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> str:
    """Render a value tree as indented text without mutating it.

    Containers deeper than ``max_depth`` collapse to a placeholder naming
    their kind and size, lists and dictionaries show at most
    ``max_list_items`` members followed by ``… +N more``, and byte strings
    longer than ``max_bytes`` are cut with a ``(N bytes truncated)`` note.
    Empty containers always render as ``{}`` or ``[]``.
    """
    limits = Limits(
        max_depth=max_depth, max_list_items=max_list_items, max_bytes=max_bytes
    )
    return "\n".join(_lines(value, 0, limits))
