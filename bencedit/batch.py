from __future__ import annotations

import dataclasses
import sys
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Literal

from .commands import COMMANDS, canonical_name, check_arity, execute, split_command
from .config import Config
from .errors import CommandSyntaxError, ConfirmationDeclined, EditError
from .formats import BATCH_NEEDS_CONFIRMATION, EARLIER_SAVE_NOTE
from .session import Session

Status = Literal[
    "succeeded",
    "unchanged",
    "skipped-not-found",
    "skipped-invalid",
    "partially-applied",
    "failed",
]
STATUSES: tuple[Status, ...] = (
    "succeeded",
    "unchanged",
    "skipped-not-found",
    "skipped-invalid",
    "partially-applied",
    "failed",
)


@dataclass(frozen=True)
class Transform:
    text: str
    name: str
    args: list[str]


@dataclass(frozen=True)
class FileOutcome:
    path: Path
    status: Status
    message: str = ""
    # The exception behind a skipped-invalid or failed outcome, if any.
    error: Exception | None = field(default=None, compare=False, repr=False)


@dataclass
class BatchReport:
    outcomes: list[FileOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.aborted and all(o.status != "failed" for o in self.outcomes)

    def counts(self) -> dict[str, int]:
        c = Counter(o.status for o in self.outcomes)
        return {s: c.get(s, 0) for s in STATUSES}

    def by_path(self, path: Path) -> FileOutcome | None:
        for o in self.outcomes:
            if o.path == path:
                return o
        return None


def parse_transform(text: str) -> Transform:
    """Validate a transform up front: known command, right number of arguments."""
    parsed = split_command(text)
    if parsed is None:
        raise CommandSyntaxError("Empty transform")
    name, args = parsed
    name = canonical_name(name)
    check_arity(COMMANDS[name], args)
    return Transform(text=text, name=name, args=args)


class _Abort(Exception):
    pass


@dataclass
class _FileRun:
    wrote: bool = False
    discarded: bool = False


def _apply_transforms(
    session: Session,
    transforms: Sequence[Transform],
    run: _FileRun,
    *,
    assume_yes: bool,
    dest: IO[str],
) -> None:
    for i, t in enumerate(transforms, 1):
        try:
            result = execute(session, t.name, t.args)
            if result.needs_confirmation:
                if not assume_yes:
                    raise ConfirmationDeclined(
                        BATCH_NEEDS_CONFIRMATION.format(prompt=result.prompt)
                    )
                result = execute(session, t.name, t.args, confirmed=True)
        except EditError as e:
            e.add_context(f"transform {i} ({t.text})")
            raise
        if result.output:
            print(result.output, file=dest)
        if result.wrote is not None:
            run.wrote = True
        if result.quit:
            run.discarded = session.dirty
            break


def run_batch(
    files: Sequence[Path],
    transforms: Sequence[Transform],
    *,
    skip_invalid: bool = False,
    skip_not_found: bool = False,
    config: Config | None = None,
    assume_yes: bool | None = None,
    dest: IO[str] | None = None,
) -> BatchReport:
    """Apply ``transforms`` to each file in order, one file at a time.

    Each file gets a fresh session. Errors either become ``skipped-*``
    entries (when the matching skip flag is set) or mark the file ``failed``
    and stop the batch. A file is written back only if every transform
    succeeded and the tree is left dirty. A file saved by an explicit
    ``save`` transform before a later one failed is ``partially-applied``.
    """
    cfg = dataclasses.replace(config or Config(), create_missing=False)
    yes = cfg.assume_yes if assume_yes is None else assume_yes
    out = dest if dest is not None else sys.stdout
    report = BatchReport()

    def record(
        path: Path, status: Status, message: str = "", error: Exception | None = None
    ) -> None:
        report.outcomes.append(FileOutcome(path, status, message, error))

    try:
        for raw in files:
            path = Path(raw)
            try:
                session = Session.load(path, cfg)
            except FileNotFoundError as e:
                if skip_not_found:
                    record(path, "skipped-not-found", "file not found", e)
                    continue
                record(path, "failed", "file not found", e)
                raise _Abort() from None
            except EditError as e:
                if skip_invalid:
                    record(path, "skipped-invalid", str(e), e)
                    continue
                record(path, "failed", str(e), e)
                raise _Abort() from None
            except OSError as e:
                record(path, "failed", str(e), e)
                raise _Abort() from None

            run = _FileRun()
            try:
                _apply_transforms(session, transforms, run, assume_yes=yes, dest=out)
            except EditError as e:
                message = str(e)
                if run.wrote:
                    message += f"; {EARLIER_SAVE_NOTE}"
                if skip_invalid:
                    skipped: Status = (
                        "partially-applied" if run.wrote else "skipped-invalid"
                    )
                    record(path, skipped, message, e)
                    continue
                record(path, "failed", message, e)
                raise _Abort() from None
            except OSError as e:
                record(path, "failed", str(e), e)
                raise _Abort() from None

            if run.discarded:
                status: Status = "succeeded" if run.wrote else "unchanged"
                record(path, status, "unsaved changes discarded by quit")
                continue

            if session.dirty:
                try:
                    session.save()
                except (EditError, OSError) as e:
                    record(path, "failed", str(e), e)
                    raise _Abort() from None
                run.wrote = True

            record(path, "succeeded" if run.wrote else "unchanged")
    except _Abort:
        report.aborted = True

    return report


def format_report(report: BatchReport) -> str:
    lines: list[str] = []
    for o in report.outcomes:
        line = f"{o.status:>17}: {o.path}"
        if o.message:
            line += f" ({o.message})"
        lines.append(line)
    counts = ", ".join(f"{n} {s}" for s, n in report.counts().items() if n)
    lines.append("")
    lines.append("Batch Summary:")
    lines.append("──────────────")
    lines.append(f"{'Files':>12}: {len(report.outcomes)} processed")
    if counts:
        lines.append(f"{'Outcomes':>12}: {counts}")
    if report.aborted:
        lines.append(f"{'Aborted':>12}: yes (remaining files were not processed)")
    return "\n".join(lines)
