"""
Local git repository discovery and commit log reading.
"""

import glob
import os
from datetime import datetime
from pathlib import Path

from core.config import GIT_MARKER
from core.errors import SourceFetchError
from core.runner import CommandRunner
from models.invoice import CommitRecord, CommitWindow

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"%aI{FIELD_SEP}%s{RECORD_SEP}"


def is_git_repo(path: Path) -> bool:
    """A directory counts as a repository when it holds a .git marker. Unreadable paths do not."""
    try:
        return path.is_dir() and (path / GIT_MARKER).exists()
    except OSError as e:
        print(f"  Skipping {path}: {e}")
        return False


def resolve_repo_paths(patterns: list[str], verbose: bool = False) -> list[Path]:
    """
    Expand glob patterns into git repository directories.

    Matches are kept in pattern order; a directory matched by two
    overlapping patterns appears twice.
    """
    dirs = []

    for pattern in patterns:
        matches = sorted(glob.glob(os.path.expanduser(pattern)))
        if verbose and not matches:
            print(f"  No matches for pattern {pattern}")

        for match in matches:
            path = Path(match).absolute()
            if is_git_repo(path):
                dirs.append(path)
            elif verbose and os.path.isdir(path):
                print(f"  Skipping {path} (not a git repository)")

    return dirs


def find_project_directories(base_dir: Path, key: str) -> list[Path]:
    """Find git repositories directly under base_dir whose name contains `key` (case-insensitive)."""
    dirs = []
    try:
        entries = sorted(base_dir.iterdir())
    except OSError as e:
        print(f"Error reading project directories in {base_dir}: {e}")
        return dirs

    needle = key.lower()
    for entry in entries:
        if needle in entry.name.lower() and is_git_repo(entry):
            dirs.append(entry)

    return dirs


def build_log_command(window: CommitWindow) -> list[str]:
    return [
        "git",
        "log",
        "--all",
        f"--since={window.start.isoformat()}T00:00:00",
        f"--until={window.end.isoformat()}T23:59:59",
        f"--format={LOG_FORMAT}",
    ]


def parse_log_output(output: str, repo: str) -> list[CommitRecord]:
    """Parse `git log` output produced with LOG_FORMAT."""
    records = []
    for entry in output.split(RECORD_SEP):
        entry = entry.strip()
        if not entry or FIELD_SEP not in entry:
            continue
        date_str, message = entry.split(FIELD_SEP, 1)
        try:
            commit_date = datetime.fromisoformat(date_str)
        except ValueError:
            continue
        records.append(CommitRecord(message=message, date=commit_date, repo=repo))
    return records


async def read_commits(runner: CommandRunner, repo_dir: Path, window: CommitWindow) -> list[CommitRecord]:
    """
    Read commits inside the window from a local clone.

    Raises:
        SourceFetchError: git could not be run or exited non-zero
    """
    try:
        result = await runner.run(build_log_command(window), cwd=repo_dir)
    except OSError as e:
        raise SourceFetchError(str(repo_dir), f"could not run git: {e}") from e

    if not result.ok:
        reason = result.stderr.strip() or f"git log exited with {result.returncode}"
        raise SourceFetchError(str(repo_dir), reason)

    return parse_log_output(result.stdout, repo_dir.name)
