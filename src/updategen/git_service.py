# updategen/git_service.py
# updategen: Builds update and installation packages from a git working tree.
# Copyright (C) 2025 Dank A. Saurus

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY;
# without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Finds the files that changed in a git repository between two dates.
"""

import datetime
import subprocess
from pathlib import Path

from . import config
from .exceptions import DateError, RepositoryError
from .logger import log
from .utils import normalize_rel_path


def parse_date(value: str) -> datetime.datetime:
    """Parses 'YYYY-MM-DD' or a full ISO 8601 timestamp."""
    text = (value or "").strip()
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.datetime.combine(
            datetime.date.fromisoformat(text), datetime.time()
        )
    except ValueError as e:
        raise DateError(
            f"Invalid date format '{value}'. Use YYYY-MM-DD format"
        ) from e


def validate_dates(start_date: str, end_date: str) -> None:
    """Raises DateError unless both dates parse and start <= end."""
    start = parse_date(start_date)
    end = parse_date(end_date)
    # Mixed naive/aware inputs compare on their wall-clock values.
    if start.tzinfo is not None and end.tzinfo is None:
        start = start.replace(tzinfo=None)
    elif end.tzinfo is not None and start.tzinfo is None:
        end = end.replace(tzinfo=None)
    if start > end:
        raise DateError("Start date cannot be after end date")


class GitService:
    """Runs git in the project root and parses its line-oriented output."""

    def __init__(
        self,
        repo_root: str | Path,
        timeout: int = config.GIT_COMMAND_TIMEOUT,
    ):
        self.repo_root = Path(repo_root)
        self.timeout = timeout

    def get_changed_files(self, start_date: str, end_date: str) -> list[str]:
        """
        Lists files added, copied or modified between the last commit at or
        before start_date and the last commit at or before end_date.

        Deleted files are never reported. The result keeps git's order with
        duplicates removed.
        """
        validate_dates(start_date, end_date)
        self.ensure_git_repository()

        start_commit = self.get_commit_before_date(start_date)
        end_commit = self.get_commit_before_date(end_date)
        if not start_commit or not end_commit:
            raise RepositoryError("Unable to find commits for the specified dates")

        # Unquoted, NUL-separated names survive non-ASCII characters and newlines.
        output = self._run_git(
            [
                "-c",
                "core.quotepath=off",
                "diff",
                "--name-only",
                "-z",
                "--diff-filter=ACM",
                start_commit,
                end_commit,
            ]
        )

        files: list[str] = []
        seen: set[str] = set()
        for name in output.split("\0"):
            path = normalize_rel_path(name)
            if path and path not in seen:
                seen.add(path)
                files.append(path)

        log.info(
            "Git changed files retrieved: %d file(s) between %s (%s) and %s (%s)",
            len(files),
            start_date,
            start_commit[:12],
            end_date,
            end_commit[:12],
        )
        return files

    def ensure_git_repository(self) -> None:
        """Raises RepositoryError when repo_root is not inside a git work tree."""
        try:
            self._run_git(["rev-parse", "--git-dir"])
        except RepositoryError as e:
            raise RepositoryError(
                "Not a Git repository or Git is not installed",
                stderr=e.stderr,
                command=e.command,
            ) from e

    def get_commit_before_date(self, date: str) -> str | None:
        """Returns the hash of the newest commit on HEAD at or before date."""
        output = self._run_git(["rev-list", "-n", "1", f"--before={date}", "HEAD"])
        commit = output.strip()
        return commit or None

    def _run_git(self, args: list[str]) -> str:
        command = ["git", *args]
        try:
            proc = subprocess.run(
                command,
                cwd=str(self.repo_root),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode("utf-8", errors="replace")
            log.error("Git command timed out after %ss: %s", self.timeout, " ".join(command))
            raise RepositoryError(
                f"Git command timed out after {self.timeout} seconds",
                stderr=stderr,
                command=command,
            ) from e
        except OSError as e:
            log.error("Git command could not be started: %s (%s)", " ".join(command), e)
            raise RepositoryError(
                "Git command could not be started", stderr=str(e), command=command
            ) from e

        if proc.returncode != 0:
            log.error(
                "Git command failed (exit %d): %s: %s",
                proc.returncode,
                " ".join(command),
                proc.stderr.strip(),
            )
            raise RepositoryError(
                f"Git command failed with exit code {proc.returncode}",
                stderr=proc.stderr,
                command=command,
            )
        return proc.stdout
