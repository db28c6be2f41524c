"""Interactive shell around the command engine.

Also provides the terminal confirmation prompt; the engine itself never
reads from the terminal.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import IO

from .commands import execute, split_command
from .config import Config
from .errors import ConfirmationDeclined, EditError
from .formats import PROMPT, UNSAVED_ON_EOF_WARNING
from .session import Session

Confirm = Callable[[str], bool]


def ask_yes_no(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        print()
        return False
    return answer.strip().lower() in ("y", "yes")


def process_line(
    session: Session,
    line: str,
    *,
    confirm: Confirm = ask_yes_no,
    dest: IO[str] | None = None,
) -> bool:
    """Process one input line.  Returns False when the session should end."""
    out = dest if dest is not None else sys.stdout
    try:
        parsed = split_command(line)
        if parsed is None:
            return True
        name, args = parsed
        result = execute(session, name, args)
        if result.needs_confirmation:
            if not confirm(result.prompt):
                raise ConfirmationDeclined(f"{name}: cancelled")
            result = execute(session, name, args, confirmed=True)
    except (EditError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return True
    except KeyboardInterrupt:
        # Ctrl-C inside a command or its confirmation cancels just that line.
        print(file=out)
        print("Error: command cancelled", file=sys.stderr)
        return True

    if result.output:
        print(result.output, file=out)
    return not result.quit


def run_interactive(
    path: Path,
    config: Config | None = None,
    *,
    confirm: Confirm = ask_yes_no,
    read_line: Callable[[str], str] = input,
    dest: IO[str] | None = None,
) -> int:
    """Run the prompt loop on ``path``; returns the process exit code."""
    out = dest if dest is not None else sys.stdout
    try:
        session = Session.load(path, config)
    except (EditError, OSError) as e:
        print(f"Error: {path}: {e}", file=sys.stderr)
        return 1

    if session.path is not None and session.path.exists():
        print(f"Loading {session.path}", file=out)
    else:
        print(f"New file {path}", file=out)

    while True:
        try:
            line = read_line(PROMPT)
        except EOFError:
            print(file=out)
            if session.dirty:
                print(UNSAVED_ON_EOF_WARNING, file=sys.stderr)
            break
        except KeyboardInterrupt:
            print(file=out)
            continue

        if not process_line(session, line, confirm=confirm, dest=out):
            break

    return 0
