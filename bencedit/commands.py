"""Command parsing and the fixed set of editing commands.

Each handler validates everything it needs (selector syntax, literal
conversion, resolution) before touching the tree, so a failing command leaves
the session exactly as it was. Handlers that need a yes/no answer return a
result with ``needs_confirmation`` set instead of prompting; the caller asks
and re-runs the command with ``confirmed=True``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .errors import (
    BoundsError,
    CommandSyntaxError,
    KeyExistsError,
    KindError,
)
from .formats import CONFIRM_DISCARD_QUIT, CONFIRM_DISCARD_RELOAD, CONFIRM_OVERWRITE
from .literal import convert
from .model import (
    DictValue,
    ListValue,
    Value,
    a_kind,
    check_key,
    is_container,
    zero_value,
)
from .render import render
from .resolve import Located, resolve
from .selector import ROOT, Selector, format_selector, parse_selector
from .session import Session

_ESCAPES = {'"': '"', "\\": "\\", "n": "\n"}
_LIST_IDENTIFIER_RE = re.compile(r"-?[0-9]+")

ALIASES: dict[str, str] = {"q": "quit", "exit": "quit"}


@dataclass(frozen=True)
class CommandResult:
    output: str | None = None
    needs_confirmation: bool = False
    prompt: str = ""
    quit: bool = False
    wrote: Path | None = None


Handler = Callable[[Session, list[str], bool], CommandResult]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    min_args: int
    max_args: int
    usage: str
    summary: str
    mutating: bool
    handler: Handler


def split_args(buf: str) -> list[str]:
    """Split an argument buffer on whitespace, honouring quotes and escapes.

    ``"..."`` groups words, ``\\"`` is a literal quote, ``\\\\`` a literal
    backslash and ``\\n`` a newline.
    """
    args: list[str] = []
    cur: list[str] = []
    in_token = False
    quoted = False
    i = 0
    n = len(buf)
    while i < n:
        c = buf[i]
        if c == "\\":
            if i + 1 >= n:
                raise CommandSyntaxError("Trailing escape character")
            nxt = buf[i + 1]
            if nxt not in _ESCAPES:
                raise CommandSyntaxError(
                    f"Unknown escape character {nxt!r} at {i + 2}"
                )
            cur.append(_ESCAPES[nxt])
            in_token = True
            i += 2
            continue
        if c == '"':
            quoted = not quoted
            in_token = True
        elif c.isspace() and not quoted:
            if in_token:
                args.append("".join(cur))
                cur = []
                in_token = False
        else:
            cur.append(c)
            in_token = True
        i += 1

    if quoted:
        raise CommandSyntaxError("Reached end of line trying to match quote")
    if in_token:
        args.append("".join(cur))
    return args


def split_command(line: str) -> tuple[str, list[str]] | None:
    """Return ``(name, args)`` for a command line, or ``None`` if it is blank."""
    words = split_args(line.strip())
    if not words:
        return None
    return words[0].lower(), words[1:]


def canonical_name(name: str) -> str:
    name = name.lower()
    name = ALIASES.get(name, name)
    if name not in COMMANDS:
        raise CommandSyntaxError(f"Unknown command '{name}'")
    return name


def check_arity(spec: CommandSpec, args: list[str]) -> None:
    if spec.min_args <= len(args) <= spec.max_args:
        return
    raise CommandSyntaxError(f"Usage: {spec.usage}")


def _selector_arg(args: list[str], index: int = 0) -> Selector:
    return parse_selector(args[index]) if len(args) > index else ROOT


def _literal(session: Session, text: str) -> Value:
    return convert(text, allow_empty_keys=session.config.allow_empty_keys)


def _replace(session: Session, loc: Located, new: Value) -> None:
    if loc.is_root:
        session.root = new
    else:
        loc.replace(new)


def _show(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    loc = resolve(session.root, _selector_arg(args))
    return CommandResult(output=render(loc.target, **session.config.render_limits))


def _set(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    path = parse_selector(args[0])
    value = _literal(session, args[1])
    loc = resolve(session.root, path)
    _replace(session, loc, value)
    return CommandResult()


def _insert(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    path = parse_selector(args[0])
    identifier = args[1]
    value = _literal(session, args[2])
    target = resolve(session.root, path).target
    where = format_selector(path)

    if isinstance(target, DictValue):
        key = check_key(identifier)
        if not key and not session.config.allow_empty_keys:
            raise CommandSyntaxError("Empty dictionary keys are not allowed")
        if key in target.entries:
            raise KeyExistsError(
                f"Key {key!r} already exists at {where}; use set to replace it"
            )
        target.entries[key] = value
    elif isinstance(target, ListValue):
        if not _LIST_IDENTIFIER_RE.fullmatch(identifier):
            raise KindError(
                f"{where} is a list; the identifier must be an integer, "
                f"got {identifier!r}"
            )
        index = int(identifier)
        if not 0 <= index <= len(target.items):
            raise BoundsError(
                f"Index {index} out of range for insert at {where} "
                f"(length {len(target.items)})"
            )
        target.items.insert(index, value)
    else:
        raise KindError(f"Cannot insert into {where}: it is {a_kind(target)}")
    return CommandResult()


def _append(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    path = parse_selector(args[0])
    value = _literal(session, args[1])
    target = resolve(session.root, path).target
    if not isinstance(target, ListValue):
        raise KindError(
            f"Cannot append to {format_selector(path)}: "
            f"it is {a_kind(target)}, not a list"
        )
    target.items.append(value)
    return CommandResult()


def _remove(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    loc = resolve(session.root, parse_selector(args[0]))
    loc.detach()
    return CommandResult()


def _clear(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    loc = resolve(session.root, _selector_arg(args))
    target = loc.target
    if is_container(target):
        if isinstance(target, DictValue):
            target.entries.clear()
        elif isinstance(target, ListValue):
            target.items.clear()
    else:
        _replace(session, loc, zero_value(target))
    return CommandResult()


def _reload(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    if session.dirty and not confirmed:
        return CommandResult(
            needs_confirmation=True,
            prompt=CONFIRM_DISCARD_RELOAD.format(path=session.path),
        )
    session.reload()
    return CommandResult(output=f"Reloaded {session.path}")


def _save(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    path = session.save()
    return CommandResult(output=f"Wrote {path}", wrote=path)


def _same_file(a: Path, b: Path | None) -> bool:
    if b is None:
        return False
    return a.resolve() == b.resolve()


def _save_as(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    target = Path(args[0])
    if target.exists() and not _same_file(target, session.path) and not confirmed:
        return CommandResult(
            needs_confirmation=True,
            prompt=CONFIRM_OVERWRITE.format(path=target),
        )
    path = session.save_as(target)
    return CommandResult(output=f"Wrote {path}", wrote=path)


def _quit(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    if session.dirty and not confirmed:
        return CommandResult(needs_confirmation=True, prompt=CONFIRM_DISCARD_QUIT)
    return CommandResult(quit=True)


def _help(session: Session, args: list[str], confirmed: bool) -> CommandResult:
    width = max(len(spec.usage) for spec in COMMANDS.values())
    lines = [f"  {spec.usage:<{width}}  {spec.summary}" for spec in COMMANDS.values()]
    aliases = ", ".join(f"{a} -> {t}" for a, t in ALIASES.items())
    lines.append(f"Aliases: {aliases}")
    return CommandResult(output="\n".join(lines))


COMMANDS: dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec(
            "show", 0, 1, "show [selector]", "print the value at selector", False, _show
        ),
        CommandSpec(
            "set", 2, 2, "set <selector> <value>", "replace the value at selector",
            True, _set,
        ),
        CommandSpec(
            "insert", 3, 3, "insert <selector> <identifier> <value>",
            "insert into the dictionary or list at selector", True, _insert,
        ),
        CommandSpec(
            "append", 2, 2, "append <selector> <value>",
            "append to the list at selector", True, _append,
        ),
        CommandSpec(
            "remove", 1, 1, "remove <selector>",
            "delete the value at selector from its parent", True, _remove,
        ),
        CommandSpec(
            "clear", 0, 1, "clear [selector]",
            "empty a container or zero a primitive", True, _clear,
        ),
        CommandSpec(
            "reload", 0, 0, "reload", "discard changes and reload the file",
            False, _reload,
        ),
        CommandSpec("save", 0, 0, "save", "write to the original file", False, _save),
        CommandSpec(
            "save-as", 1, 1, "save-as <path>", "write to a new file", False, _save_as
        ),
        CommandSpec("quit", 0, 0, "quit", "end the session", False, _quit),
        CommandSpec("help", 0, 0, "help", "list commands", False, _help),
    )
}


def execute(
    session: Session, name: str, args: list[str], *, confirmed: bool = False
) -> CommandResult:
    """Run one command against ``session``.

    Raises an ``EditError`` subclass (or ``OSError`` from file access) on
    failure, in which case the tree and dirty flag are unchanged.
    """
    spec = COMMANDS[canonical_name(name)]
    check_arity(spec, args)
    result = spec.handler(session, args, confirmed)
    if spec.mutating and not result.needs_confirmation:
        session.dirty = True
    return result


def run_line(session: Session, line: str, *, confirmed: bool = False) -> CommandResult:
    parsed = split_command(line)
    if parsed is None:
        return CommandResult()
    name, args = parsed
    return execute(session, name, args, confirmed=confirmed)
