"""Startup rotation of old log files.

    app.log    -> app.log.1
    app.log.1  -> app.log.2
    ...
    app.log.9  -> app.log.10   (former app.log.10 is deleted first)

Renames run oldest-first so nothing is clobbered. Runs once, before the
log file is opened, so it reports problems on stderr only.
"""

from __future__ import annotations

import sys
from pathlib import Path

MAX_BACKUPS = 10


def backup_path(directory: Path, base_name: str, index: int) -> Path:
    if index == 0:
        return directory / base_name
    return directory / f"{base_name}.{index}"


def rotate_logs(directory: str | Path, base_name: str, max_backups: int = MAX_BACKUPS) -> Path:
    """Shift existing log files one slot up and return the active log path.

    A failed rename is printed to stderr and otherwise ignored.
    """
    directory = Path(directory)
    for index in range(max_backups - 1, -1, -1):
        current = backup_path(directory, base_name, index)
        if not current.exists():
            continue
        older = backup_path(directory, base_name, index + 1)
        try:
            # Only the last slot should ever be occupied here.
            if older.exists():
                older.unlink()
            current.rename(older)
        except OSError:
            print(f"Error rolling over logfile {current}", file=sys.stderr)
    return backup_path(directory, base_name, 0)
