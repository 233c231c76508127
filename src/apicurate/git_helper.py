"""Git utilities for dating collection artifacts.

Index generation shows when each document was first added and last
updated; both dates come from the git history of the collection tree.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from email.utils import parsedate_to_datetime
from pathlib import Path


def git_log_date(path: Path, *options: str, cwd: Path | None = None) -> datetime | None:
    """Get the author date of a commit touching ``path``.

    Runs ``git log --format=%aD <options> -- <path>`` and parses the first
    line of output (an RFC 2822 date).

    Args:
        path: File to query, absolute or relative to ``cwd``.
        options: Extra ``git log`` options selecting the commit.
        cwd: Working directory for git (defaults to the current directory).

    Returns:
        Timezone-aware datetime, or None if the file is not tracked or git
        is not available.
    """
    try:
        result = subprocess.run(
            ["git", "log", "--format=%aD", *options, "--", str(path)],
            capture_output=True,
            text=True,
            check=False,
            cwd=cwd,
        )

        if result.returncode != 0 or not result.stdout.strip():
            # File not in git or git command failed
            return None

        # RFC 2822 format: "Wed, 15 Jan 2025 10:30:45 +0000"
        first_line = result.stdout.strip().splitlines()[0]
        return parsedate_to_datetime(first_line)
    except (subprocess.SubprocessError, ValueError, TypeError, OSError):
        # git not available or unparseable date
        return None


def date_added(path: Path, cwd: Path | None = None) -> datetime | None:
    """Date of the commit that added ``path``, following renames."""
    return git_log_date(path, "--follow", "--diff-filter=A", "-1", cwd=cwd)


def date_updated(path: Path, cwd: Path | None = None) -> datetime | None:
    """Date of the most recent commit touching ``path``."""
    return git_log_date(path, "-1", cwd=cwd)
