from __future__ import annotations

import copy
from pathlib import Path

import pytest

from bencedit.codec import decode, encode
from bencedit.commands import (
    ALIASES,
    COMMANDS,
    canonical_name,
    execute,
    run_line,
    split_args,
    split_command,
)
from bencedit.config import Config
from bencedit.errors import (
    BoundsError,
    CommandSyntaxError,
    KeyExistsError,
    KindError,
    LiteralError,
    NotFoundError,
    SelectorError,
)
from bencedit.model import BytesValue, DictValue, IntValue, ListValue, from_python
from bencedit.resolve import resolve
from bencedit.selector import parse_selector
from bencedit.session import Session


def _session(data: object, **cfg: object) -> Session:
    return Session(root=from_python(data), config=Config(**cfg))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def test_split_args_plain_words() -> None:
    assert split_args("set  .a   1") == ["set", ".a", "1"]


def test_split_args_quotes_and_escapes() -> None:
    assert split_args('set .a "{\\"k\\": 1}"') == ["set", ".a", '{"k": 1}']
    assert split_args('"two words" x') == ["two words", "x"]
    assert split_args('""') == [""]
    assert split_args("a\\\\b") == ["a\\b"]
    assert split_args('"line\\nbreak"') == ["line\nbreak"]


def test_split_args_errors() -> None:
    with pytest.raises(CommandSyntaxError, match="quote"):
        split_args('set .a "open')
    with pytest.raises(CommandSyntaxError, match="Trailing escape"):
        split_args("set .a \\")
    with pytest.raises(CommandSyntaxError, match="Unknown escape"):
        split_args("set .a \\q")


def test_split_command_lowercases_name() -> None:
    assert split_command("  SHOW .a ") == ("show", [".a"])
    assert split_command("   ") is None


def test_aliases_resolve_to_quit() -> None:
    for alias in ("q", "exit", "Q", "QUIT"):
        assert canonical_name(alias) == "quit"
    assert set(ALIASES.values()) <= set(COMMANDS)


def test_unknown_command() -> None:
    with pytest.raises(CommandSyntaxError, match="Unknown command 'frobnicate'"):
        run_line(_session({}), "frobnicate")


@pytest.mark.parametrize(
    "line", ["set .a", "insert .a b", "append", "remove", "show .a .b", "save x"]
)
def test_wrong_argument_counts(line: str) -> None:
    s = _session({"a": []})
    with pytest.raises(CommandSyntaxError, match="Usage"):
        run_line(s, line)
    assert s.dirty is False


# ---------------------------------------------------------------------------
# show
# ---------------------------------------------------------------------------


def test_show_root_and_selector() -> None:
    s = _session({"foo": [1, {"bar": 5}]})
    assert run_line(s, "show .foo[1].bar").output == "5"
    assert run_line(s, "show").output.startswith("{")  # type: ignore[union-attr]
    assert s.dirty is False


def test_show_uses_configured_limits() -> None:
    s = _session({"l": list(range(10))}, max_list_items=2)
    out = run_line(s, "show .l").output
    assert out is not None and "+8 more" in out


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------


def test_set_then_resolve_round_trip() -> None:
    s = _session({"a": {"b": [1, 2]}})
    run_line(s, 'set .a.b[1] "{\\"x\\": [\\"y\\"]}"')
    got = resolve(s.root, parse_selector(".a.b[1]")).target
    assert got == from_python({"x": [b"y"]})
    assert s.dirty is True


def test_set_root() -> None:
    s = _session({"a": 1})
    run_line(s, "set . [1,2]")
    assert s.root == from_python([1, 2])


def test_set_null_literal_fails_before_mutation() -> None:
    s = _session({"a": 1})
    before = copy.deepcopy(s.root)
    with pytest.raises(LiteralError) as exc:
        run_line(s, 'set . "{\\"a\\": null}"')
    assert exc.value.unrepresentable
    assert s.root == before
    assert s.dirty is False


def test_set_missing_target_is_not_found() -> None:
    s = _session({"a": 1})
    with pytest.raises(NotFoundError):
        run_line(s, "set .b 2")
    assert s.root == from_python({"a": 1})


# ---------------------------------------------------------------------------
# insert
# ---------------------------------------------------------------------------


def test_insert_into_dictionary() -> None:
    s = _session({"d": {}})
    run_line(s, 'insert .d key "\\"v\\""')
    assert s.root == from_python({"d": {"key": b"v"}})
    assert s.dirty is True


def test_insert_existing_key_fails() -> None:
    s = _session({"d": {"key": 1}})
    with pytest.raises(KeyExistsError):
        run_line(s, "insert .d key 2")
    assert s.root == from_python({"d": {"key": 1}})
    assert s.dirty is False


def test_insert_into_list_positions() -> None:
    s = _session({"l": [1, 3]})
    run_line(s, "insert .l 1 2")
    run_line(s, "insert .l 3 4")
    run_line(s, "insert .l 0 0")
    assert s.root == from_python({"l": [0, 1, 2, 3, 4]})


def test_insert_list_identifier_must_be_integer() -> None:
    s = _session({"l": [1]})
    with pytest.raises(KindError, match="integer"):
        run_line(s, "insert .l first 2")


@pytest.mark.parametrize("index", ["2", "-1"])
def test_insert_list_out_of_range(index: str) -> None:
    s = _session({"l": [1]})
    with pytest.raises(BoundsError):
        run_line(s, f"insert .l {index} 2")
    assert s.root == from_python({"l": [1]})


def test_insert_into_primitive_fails() -> None:
    s = _session({"n": 1})
    with pytest.raises(KindError, match="an integer"):
        run_line(s, "insert .n k 2")


def test_insert_empty_key_follows_policy() -> None:
    s = _session({})
    run_line(s, 'insert . "" 1')
    assert s.root == DictValue({"": IntValue(1)})

    strict = _session({}, allow_empty_keys=False)
    with pytest.raises(CommandSyntaxError, match="Empty dictionary keys"):
        run_line(strict, 'insert . "" 1')
    assert strict.dirty is False


# ---------------------------------------------------------------------------
# append / remove
# ---------------------------------------------------------------------------


def test_append_scenario() -> None:
    s = _session({"list": [1, 2]})
    run_line(s, 'append .list "7"')
    assert s.root == from_python({"list": [1, 2, 7]})
    assert s.dirty is True


def test_append_to_non_list_fails() -> None:
    s = _session({"d": {}})
    with pytest.raises(KindError, match="not a list"):
        run_line(s, "append .d 1")


def test_remove_dictionary_member_and_list_element() -> None:
    s = _session({"a": 1, "l": [1, 2, 3]})
    run_line(s, "remove .a")
    run_line(s, "remove .l[1]")
    assert s.root == from_python({"l": [1, 3]})
    assert s.dirty is True


def test_remove_out_of_bounds_leaves_tree_alone() -> None:
    s = _session({"list": [1, 2]})
    with pytest.raises(BoundsError):
        run_line(s, "remove .list[5]")
    assert s.root == from_python({"list": [1, 2]})
    assert s.dirty is False


def test_remove_root_fails() -> None:
    s = _session({"a": 1})
    with pytest.raises(NotFoundError):
        run_line(s, "remove .")
    assert s.dirty is False


def test_malformed_selector_is_syntax_error() -> None:
    s = _session({"a": 1})
    with pytest.raises(SelectorError):
        run_line(s, "remove a")


# ---------------------------------------------------------------------------
# clear
# ---------------------------------------------------------------------------


def test_clear_containers_keep_their_kind() -> None:
    s = _session({"d": {"x": 1}, "l": [1, 2]})
    run_line(s, "clear .d")
    run_line(s, "clear .l")
    assert s.root == DictValue({"d": DictValue(), "l": ListValue()})
    assert s.dirty is True


def test_clear_primitives_reset_to_zero() -> None:
    s = _session({"n": 42, "s": "text"})
    run_line(s, "clear .n")
    run_line(s, "clear .s")
    assert s.root == DictValue({"n": IntValue(0), "s": BytesValue(b"")})


def test_clear_root_defaults() -> None:
    s = _session({"a": 1})
    run_line(s, "clear")
    assert s.root == DictValue()

    prim = Session(root=IntValue(5))
    run_line(prim, "clear")
    assert prim.root == IntValue(0)


def test_dictionary_keys_stay_text_through_every_command() -> None:
    s = _session({"d": {}, "l": []})
    run_line(s, 'set .d "{\\"1\\": {\\"2\\": 3}}"')
    run_line(s, "insert .d 5 6")
    run_line(s, 'append .l "{\\"k\\": []}"')
    run_line(s, "insert .l 0 {}")
    stack = [s.root]
    while stack:
        cur = stack.pop()
        if isinstance(cur, DictValue):
            assert all(isinstance(k, str) for k in cur.entries)
            stack.extend(cur.entries.values())
        elif isinstance(cur, ListValue):
            stack.extend(cur.items)


# ---------------------------------------------------------------------------
# Session commands
# ---------------------------------------------------------------------------


def test_quit_needs_confirmation_only_when_dirty() -> None:
    s = _session({"a": 1})
    assert run_line(s, "q").quit is True

    run_line(s, "set .a 2")
    result = run_line(s, "exit")
    assert result.needs_confirmation is True
    assert result.quit is False
    assert run_line(s, "quit", confirmed=True).quit is True


def test_save_and_reload(tmp_path: Path) -> None:
    f = tmp_path / "a.torrent"
    f.write_bytes(b"d1:ai1ee")
    s = Session.load(f)

    run_line(s, "set .a 2")
    result = run_line(s, "reload")
    assert result.needs_confirmation is True
    assert s.root == from_python({"a": 2})

    run_line(s, "reload", confirmed=True)
    assert s.root == from_python({"a": 1})
    assert s.dirty is False

    run_line(s, "insert . b 3")
    result = run_line(s, "save")
    assert result.wrote == f
    assert s.dirty is False
    assert f.read_bytes() == b"d1:ai1e1:bi3ee"


def test_save_as_rebinds_path_and_confirms_overwrite(tmp_path: Path) -> None:
    src = tmp_path / "src.benc"
    src.write_bytes(encode(from_python({"a": 1})))
    other = tmp_path / "other.benc"
    other.write_bytes(b"i0e")
    s = Session.load(src)
    run_line(s, "set .a 5")

    result = run_line(s, f"save-as {other}")
    assert result.needs_confirmation is True
    assert other.read_bytes() == b"i0e"
    assert s.dirty is True

    run_line(s, f"save-as {other}", confirmed=True)
    assert decode(other.read_bytes()) == from_python({"a": 5})
    assert s.path == other
    assert s.dirty is False

    fresh = tmp_path / "new.benc"
    assert run_line(s, f'save-as "{fresh}"').needs_confirmation is False
    assert fresh.exists()


def test_save_without_path_fails() -> None:
    s = _session({"a": 1})
    with pytest.raises(NotFoundError):
        run_line(s, "save")
    with pytest.raises(NotFoundError):
        run_line(s, "reload")


def test_help_lists_commands() -> None:
    out = run_line(_session({}), "help").output
    assert out is not None
    for name in COMMANDS:
        assert name in out


def test_execute_rejects_unknown_names() -> None:
    with pytest.raises(CommandSyntaxError):
        execute(_session({}), "nope", [])


def test_set_overlong_integer_is_refused_and_file_stays_loadable(
    tmp_path: Path,
) -> None:
    f = tmp_path / "a.benc"
    f.write_bytes(b"d1:ai1ee")
    s = Session.load(f)
    with pytest.raises(LiteralError):
        run_line(s, "set .a " + "9" * 40)
    run_line(s, "set .a " + "9" * 32)
    run_line(s, "save")
    assert Session.load(f).root == DictValue({"a": IntValue(int("9" * 32))})
