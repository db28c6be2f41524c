from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import pathspec

IGNORE_FILENAME = ".benceditignore"
GITIGNORE_FILENAME = ".gitignore"

# Never descend into these, whatever the include patterns say.
DEFAULT_EXCLUDES = [
    "**/.git/**",
    "**/.hg/**",
    "**/.venv/**",
    "**/__pycache__/**",
]


def _spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def _ignore_file_patterns(directory: Path, names: Sequence[str]) -> list[str]:
    patterns: list[str] = []
    for name in names:
        f = directory / name
        if f.is_file():
            patterns.extend(
                f.read_text(encoding="utf-8", errors="replace").splitlines()
            )
    return patterns


@dataclass(frozen=True)
class BatchFilter:
    """Decides which files under a directory argument take part in a batch.

    Paths are tested relative to the directory. ``.benceditignore`` patterns
    come after ``.gitignore`` ones so its negations win.
    """

    ignored: pathspec.PathSpec
    included: pathspec.PathSpec
    excluded: pathspec.PathSpec

    @classmethod
    def for_directory(
        cls,
        directory: Path,
        include: list[str] | None,
        exclude: list[str] | None,
        respect_gitignore: bool = True,
    ) -> BatchFilter:
        names = [GITIGNORE_FILENAME] if respect_gitignore else []
        names.append(IGNORE_FILENAME)
        return cls(
            ignored=_spec(_ignore_file_patterns(directory, names)),
            included=_spec(include or ["**/*"]),
            excluded=_spec([*DEFAULT_EXCLUDES, *(exclude or [])]),
        )

    def accepts(self, rel: str) -> bool:
        if self.ignored.match_file(rel) or self.excluded.match_file(rel):
            return False
        return self.included.match_file(rel)


@dataclass(frozen=True)
class Discovery:
    files: list[Path]
    root: Path


def discover_files(
    root: Path,
    include: list[str] | None,
    exclude: list[str] | None,
    respect_gitignore: bool = True,
) -> Discovery:
    """List the bencoded files below ``root`` in sorted order."""
    root = root.resolve()
    filt = BatchFilter.for_directory(root, include, exclude, respect_gitignore)
    found = sorted(
        candidate
        for candidate in root.rglob("*")
        if candidate.is_file() and filt.accepts(candidate.relative_to(root).as_posix())
    )
    return Discovery(files=found, root=root)


def expand_batch_paths(
    paths: Sequence[Path],
    include: list[str] | None,
    exclude: list[str] | None,
    respect_gitignore: bool = True,
) -> list[Path]:
    """Replace directory arguments by the files discovered beneath them.

    Anything that is not a directory is kept as given, in order, so that
    missing files still reach the batch not-found policy.
    """
    expanded: list[Path] = []
    for arg in map(Path, paths):
        if not arg.is_dir():
            expanded.append(arg)
            continue
        expanded.extend(
            discover_files(arg, include, exclude, respect_gitignore).files
        )
    return expanded
