from __future__ import annotations

import argparse
import importlib.metadata as importlib_metadata
import sys
from pathlib import Path

from .batch import format_report, parse_transform, run_batch
from .config import load_config
from .discover import expand_batch_paths
from .errors import EditError
from .formats import MANY_FILES_WARNING, NO_TRANSFORMS_WARNING
from .interactive import run_interactive


def _bencedit_version() -> str:
    try:
        return importlib_metadata.version("bencedit")
    except importlib_metadata.PackageNotFoundError:
        return "0+unknown"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bencedit",
        description="Interactive and batch editor for bencoded files.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"bencedit {_bencedit_version()}",
    )
    p.add_argument(
        "-b",
        "--batch",
        action="store_true",
        help="Process several files through transforms",
    )
    p.add_argument(
        "-t",
        "--transform",
        action="append",
        default=None,
        metavar="TRANSFORM",
        help=(
            "An action to apply to files in batch mode, written like an "
            "interactive command (repeatable; applied in order)"
        ),
    )
    p.add_argument(
        "-S",
        "--skip-invalid",
        action="store_true",
        help="In batch mode, skip invalid files and files whose transforms fail",
    )
    p.add_argument(
        "-N",
        "--skip-not-found",
        action="store_true",
        help="In batch mode, skip non-existent files",
    )
    p.add_argument(
        "-y",
        "--yes",
        action="store_true",
        default=None,
        help=(
            "In batch mode, confirm discard/overwrite requests automatically "
            "(default: off via config 'assume_yes')"
        ),
    )
    p.add_argument(
        "files",
        type=Path,
        nargs="+",
        help="File to edit (interactive) or files/directories to process (batch)",
    )
    return p


def _print_top_level_help(parser: argparse.ArgumentParser) -> None:
    parser.print_help()
    print("")
    print("Quick start examples:")
    print("  bencedit file.torrent")
    print(r"""  bencedit -b -t 'set .comment "\"edited\""' a.torrent b.torrent""")
    print('  bencedit -b -N -S -t "remove .info.private" downloads/')


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    raw_argv = list(sys.argv[1:] if argv is None else argv)
    if not raw_argv:
        _print_top_level_help(parser)
        return

    args = parser.parse_args(raw_argv)
    cfg = load_config(Path.cwd())

    if not args.batch:
        for flag, given in (
            ("--transform", args.transform),
            ("--skip-invalid", args.skip_invalid),
            ("--skip-not-found", args.skip_not_found),
            ("--yes", args.yes),
        ):
            if given:
                parser.error(f"{flag} requires --batch")

        if len(args.files) > 1:
            print(MANY_FILES_WARNING, file=sys.stderr)
        code = run_interactive(args.files[0], cfg)
        if code:
            raise SystemExit(code)
        return

    try:
        transforms = [parse_transform(t) for t in args.transform or []]
    except EditError as e:
        parser.error(f"invalid transform: {e}")
    if not transforms:
        print(NO_TRANSFORMS_WARNING, file=sys.stderr)

    files = expand_batch_paths(
        args.files,
        include=cfg.include,
        exclude=cfg.exclude,
        respect_gitignore=cfg.respect_gitignore,
    )
    report = run_batch(
        files,
        transforms,
        skip_invalid=bool(args.skip_invalid),
        skip_not_found=bool(args.skip_not_found),
        config=cfg,
        assume_yes=args.yes,
    )
    print(format_report(report))
    if not report.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
