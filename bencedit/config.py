from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .render import DEFAULT_MAX_BYTES, DEFAULT_MAX_DEPTH, DEFAULT_MAX_LIST_ITEMS

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # pyright: ignore[reportMissingImports]

CONFIG_FILENAMES: tuple[str, ...] = (".bencedit.toml", "bencedit.toml")
PYPROJECT_FILENAME = "pyproject.toml"

DEFAULT_INCLUDES: list[str] = [
    "**/*.torrent",
    "**/*.benc",
    "**/*.bencode",
]


@dataclass
class Config:
    # Pretty-printer bounds used by `show`.
    max_depth: int = DEFAULT_MAX_DEPTH
    max_list_items: int = DEFAULT_MAX_LIST_ITEMS
    max_bytes: int = DEFAULT_MAX_BYTES
    # Start from an empty dictionary when the interactive file does not exist.
    create_missing: bool = False
    # Whether "" is accepted as a dictionary key by literals and `insert`.
    allow_empty_keys: bool = True
    # Batch mode: answer "yes" to discard/overwrite confirmations instead of
    # failing the file.
    assume_yes: bool = False
    # Batch mode: patterns used when a directory is passed instead of a file.
    include: list[str] = field(default_factory=lambda: DEFAULT_INCLUDES.copy())
    exclude: list[str] = field(default_factory=list)
    respect_gitignore: bool = True

    @property
    def render_limits(self) -> dict[str, int]:
        return {
            "max_depth": self.max_depth,
            "max_list_items": self.max_list_items,
            "max_bytes": self.max_bytes,
        }


_LIMIT_FIELDS = ("max_depth", "max_list_items", "max_bytes")
_FLAG_FIELDS = ("create_missing", "allow_empty_keys", "assume_yes", "respect_gitignore")
_PATTERN_FIELDS = ("include", "exclude")


def _find_config_path(root: Path) -> Path | None:
    """Return the first config file in ``root``; dedicated files beat pyproject."""
    base = root.resolve()
    candidates = [base / name for name in (*CONFIG_FILENAMES, PYPROJECT_FILENAME)]
    return next((c for c in candidates if c.is_file()), None)


def _extract_section(data: Any, *, from_pyproject: bool) -> dict[str, Any]:
    # [bencedit] in a dedicated file, [tool.bencedit] anywhere.
    if not isinstance(data, dict):
        return {}
    tables = [data.get("tool", {})]
    if not from_pyproject:
        tables.insert(0, data)
    for table in tables:
        found = table.get("bencedit") if isinstance(table, dict) else None
        if isinstance(found, dict):
            return found
    return {}


def _non_negative_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        out = int(value)
    except (TypeError, ValueError):
        return default
    return out if out >= 0 else default


def load_config(root: Path) -> Config:
    """Read settings for a run started in ``root``.

    Missing files and unusable values fall back to the defaults.
    """
    cfg = Config()
    path = _find_config_path(root)
    if path is None:
        return cfg

    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    section = _extract_section(raw, from_pyproject=path.name == PYPROJECT_FILENAME)

    for name in _LIMIT_FIELDS:
        setattr(cfg, name, _non_negative_int(section.get(name), getattr(cfg, name)))
    for name in _FLAG_FIELDS:
        if name in section:
            setattr(cfg, name, bool(section[name]))
    for name in _PATTERN_FIELDS:
        patterns = section.get(name)
        if isinstance(patterns, list):
            setattr(cfg, name, [str(p) for p in patterns])
    return cfg
