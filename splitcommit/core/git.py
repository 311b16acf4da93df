"""Git operations module."""

import logging
import subprocess
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .changes import ChangeRecord, ChangeSet, ChangeStatus, get_skip_reason
from .exceptions import (
    CommitExecutionError,
    EnumerationError,
    GitError,
    PushError,
    StagingError,
)

logger = logging.getLogger(__name__)


@contextmanager
def commit_message_file(message: str, label: str) -> Iterator[Path]:
    """
    Write a commit message to a single-use temporary file.

    The name carries the label and the current time. The file is removed on
    every exit path.
    """
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        prefix=f"splitcommit-{label}-{time.time_ns()}-",
        suffix=".txt",
        delete=False,
    )
    path = Path(handle.name)
    try:
        with handle:
            handle.write(message)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass


class GitOperations:
    """Git operations handler bound to a repository directory."""

    def __init__(self, cwd: Path | None = None):
        self.cwd = cwd

    def _run(
        self, args: list[str], error_cls: type[GitError], action: str
    ) -> subprocess.CompletedProcess:
        cmd = ["git", *args]
        logger.debug("Executing git command: %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd, cwd=self.cwd, capture_output=True, text=True, check=True
            )
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise error_cls(f"Failed to {action}: {error_msg}") from e

    def is_git_repository(self) -> bool:
        """Check whether the working directory is inside a git repository."""
        try:
            self._run(["rev-parse", "--is-inside-work-tree"], GitError, "detect repository")
        except GitError:
            return False
        return True

    def current_branch(self) -> str:
        """Get the name of the current branch."""
        result = self._run(["branch", "--show-current"], GitError, "get current branch")
        return result.stdout.strip()

    def current_commit_hash(self) -> str:
        """Get the hash of HEAD."""
        result = self._run(["rev-parse", "HEAD"], GitError, "get commit hash")
        return result.stdout.strip()

    def stage_all(self) -> None:
        """Stage every change in the working tree, including untracked files."""
        self._run(["add", "-A"], StagingError, "stage all changes")

    def stage_files(self, files: list[str]) -> None:
        """Stage a list of files. Deleted paths are staged as removals."""
        if not files:
            return
        self._run(["add", "-A", "--", *files], StagingError, "stage files")

    def unstage_all(self) -> None:
        """Reset the index so nothing is staged."""
        self._run(["reset", "-q"], StagingError, "reset staged changes")

    def get_staged_paths(self) -> list[str]:
        """Get the paths currently staged, without diffs."""
        result = self._run(
            ["diff", "--cached", "--name-only", "-z"], EnumerationError, "get staged files"
        )
        return [path for path in result.stdout.split("\0") if path]

    def get_file_diff(self, path: str) -> str:
        """Get the staged diff of a single file."""
        result = self._run(["diff", "--cached", "--", path], GitError, f"get diff for {path}")
        return result.stdout.strip()

    def list_changes(self, include_unstaged: bool = False) -> ChangeSet:
        """
        Enumerate staged changes with their diffs and skip flags.

        Args:
            include_unstaged: Stage the whole working tree first, so the result
                covers every change instead of only what is already staged

        Returns:
            ChangeSet in git's enumeration order
        """
        if include_unstaged:
            try:
                self.stage_all()
            except StagingError as e:
                raise EnumerationError(str(e)) from e

        # -z keeps paths unquoted: "<code>\0<path>\0", renames and copies carry two paths
        result = self._run(
            ["diff", "--cached", "--name-status", "-z"], EnumerationError, "get staged changes"
        )

        records: list[ChangeRecord] = []
        fields = result.stdout.split("\0")
        index = 0
        while index < len(fields):
            code = fields[index]
            index += 1
            if not code:
                continue

            status = ChangeStatus.from_git_code(code)
            old_path = None
            if code[0] in ("R", "C"):
                if index + 1 >= len(fields):
                    raise EnumerationError(f"Failed to get staged changes: truncated entry {code}")
                if status == ChangeStatus.RENAMED:
                    old_path = fields[index]
                path = fields[index + 1]
                index += 2
            else:
                if index >= len(fields) or not fields[index]:
                    raise EnumerationError(f"Failed to get staged changes: truncated entry {code}")
                path = fields[index]
                index += 1

            records.append(self._build_record(path, status, old_path))

        return ChangeSet(records)

    def _build_record(
        self, path: str, status: ChangeStatus, old_path: str | None
    ) -> ChangeRecord:
        skip_reason = get_skip_reason(path, status, self.cwd)
        if skip_reason:
            return ChangeRecord(
                path=path,
                status=status,
                skipped=True,
                skip_reason=skip_reason,
                old_path=old_path,
            )

        try:
            diff = self.get_file_diff(path)
        except GitError:
            logger.warning("Could not read diff for %s", path)
            return ChangeRecord(
                path=path,
                status=status,
                skipped=True,
                skip_reason="Could not read diff",
                old_path=old_path,
            )

        return ChangeRecord(path=path, status=status, diff=diff, old_path=old_path)

    def create_commit(self, message: str, label: str = "commit") -> str:
        """
        Commit the staged changes with a verbatim, possibly multi-line message.

        Args:
            message: Full commit message
            label: Distinguishes the temporary message file, e.g. ``group-3``

        Returns:
            Hash of the new commit
        """
        with commit_message_file(message, label) as message_path:
            self._run(
                ["commit", "-F", str(message_path)], CommitExecutionError, "create commit"
            )
        result = self._run(
            ["rev-parse", "HEAD"], CommitExecutionError, "read hash of the new commit"
        )
        return result.stdout.strip()

    def has_origin_remote(self) -> bool:
        """Check whether a remote named origin is configured."""
        try:
            result = self._run(["remote"], GitError, "list remotes")
        except GitError:
            return False
        return "origin" in result.stdout.split()

    def add_origin_remote(self, url: str) -> None:
        """Register ``url`` as the origin remote."""
        self._run(["remote", "add", "origin", url], PushError, "add origin remote")

    def push(self, set_upstream: bool = True) -> None:
        """Push the current branch to origin."""
        branch = self.current_branch()
        args = ["push", "-u", "origin", branch] if set_upstream else ["push", "origin", branch]
        self._run(args, PushError, "push")
