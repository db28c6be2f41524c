"""bencedit: interactive and batch editor for bencoded files."""

from .codec import decode, encode
from .commands import CommandResult, execute, run_line
from .errors import (
    BoundsError,
    CommandSyntaxError,
    ConfirmationDeclined,
    DecodeError,
    EditError,
    KeyExistsError,
    KindError,
    LiteralError,
    NotFoundError,
    SelectorError,
)
from .literal import convert
from .model import BytesValue, DictValue, IntValue, ListValue, Value
from .render import render
from .resolve import Located, resolve
from .selector import Index, Key, parse_selector
from .session import Session

__all__ = [
    "decode",
    "encode",
    "CommandResult",
    "execute",
    "run_line",
    "BoundsError",
    "CommandSyntaxError",
    "ConfirmationDeclined",
    "DecodeError",
    "EditError",
    "KeyExistsError",
    "KindError",
    "LiteralError",
    "NotFoundError",
    "SelectorError",
    "convert",
    "BytesValue",
    "DictValue",
    "IntValue",
    "ListValue",
    "Value",
    "render",
    "Located",
    "resolve",
    "Index",
    "Key",
    "parse_selector",
    "Session",
]
