from __future__ import annotations

from dataclasses import dataclass

from .errors import BoundsError, KindError, NotFoundError
from .model import DictValue, ListValue, Value, check_key, kind_name
from .selector import Index, Key, Selector, format_selector


@dataclass(frozen=True)
class Located:
    """The value at a selector plus the single step that reaches it.

    ``parent`` and ``step`` are ``None`` only for the root. Writes go through
    :meth:`replace` and :meth:`detach`; nodes never hold back-references.
    """

    target: Value
    path: Selector
    parent: ListValue | DictValue | None = None
    step: str | int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def replace(self, new: Value) -> None:
        if isinstance(self.parent, DictValue):
            assert isinstance(self.step, str)
            self.parent.entries[check_key(self.step)] = new
        elif isinstance(self.parent, ListValue):
            assert isinstance(self.step, int)
            self.parent.items[self.step] = new
        else:
            raise NotFoundError("The root value has no parent to write through")

    def detach(self) -> Value:
        if isinstance(self.parent, DictValue):
            assert isinstance(self.step, str)
            return self.parent.entries.pop(self.step)
        if isinstance(self.parent, ListValue):
            assert isinstance(self.step, int)
            return self.parent.items.pop(self.step)
        raise NotFoundError("Cannot remove the root value: it has no parent")


def resolve(root: Value, path: Selector) -> Located:
    current = root
    parent: ListValue | DictValue | None = None
    step: str | int | None = None

    for depth, seg in enumerate(path):
        where = format_selector(path[:depth])
        if isinstance(seg, Key):
            if not isinstance(current, DictValue):
                raise KindError(
                    f"Cannot look up key {seg.name!r}: {where} is not a dictionary "
                    f"({kind_name(current)})"
                )
            if seg.name not in current.entries:
                raise NotFoundError(f"Key {seg.name!r} not found at {where}")
            parent, step = current, seg.name
            current = current.entries[seg.name]
        elif isinstance(seg, Index):
            if not isinstance(current, ListValue):
                raise KindError(
                    f"Cannot take index {seg.position}: {where} is not a list "
                    f"({kind_name(current)})"
                )
            if seg.position >= len(current.items):
                raise BoundsError(
                    f"Index {seg.position} out of range at {where} "
                    f"(length {len(current.items)})"
                )
            parent, step = current, seg.position
            current = current.items[seg.position]

    return Located(target=current, path=path, parent=parent, step=step)
