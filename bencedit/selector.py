from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .errors import SelectorError

_KEY_STOP = ".[]"


@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class Index:
    position: int


Segment = Union[Key, Index]
Selector = tuple[Segment, ...]

ROOT: Selector = ()


def parse_selector(text: str) -> Selector:
    """Parse ``.foo[1].bar`` style selectors into a tuple of segments.

    The empty string and a lone ``.`` both address the root. Parsing is purely
    syntactic; nothing is looked up.
    """
    if text in ("", "."):
        return ROOT

    segments: list[Segment] = []
    i = 0
    n = len(text)
    while i < n:
        c = text[i]
        if c == ".":
            start = i + 1
            end = start
            while end < n and text[end] not in _KEY_STOP:
                end += 1
            if end == start:
                raise SelectorError(f"Empty key at position {start} in {text!r}")
            segments.append(Key(text[start:end]))
            i = end
        elif c == "[":
            close = text.find("]", i + 1)
            if close < 0:
                raise SelectorError(f"Unbalanced '[' at position {i + 1} in {text!r}")
            body = text[i + 1 : close]
            if not body:
                raise SelectorError(f"Empty index at position {i + 1} in {text!r}")
            if not (body.isascii() and body.isdigit()):
                raise SelectorError(f"Index must be a non-negative integer: [{body}]")
            segments.append(Index(int(body)))
            i = close + 1
        elif c == "]":
            raise SelectorError(f"Unbalanced ']' at position {i + 1} in {text!r}")
        else:
            raise SelectorError(
                f"Unexpected {c!r} at position {i + 1} in {text!r} "
                "(segments start with '.' or '[')"
            )
    return tuple(segments)


def format_selector(path: Selector) -> str:
    if not path:
        return "."
    out: list[str] = []
    for seg in path:
        if isinstance(seg, Key):
            out.append(f".{seg.name}")
        else:
            out.append(f"[{seg.position}]")
    return "".join(out)
