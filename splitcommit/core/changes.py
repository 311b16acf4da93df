"""Change records and the skip policy applied before classification."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

MAX_FILE_SIZE_BYTES = 100_000  # Larger files are committed without AI analysis

MIGRATION_PATTERNS = [
    re.compile(r"(^|/)migrations?/", re.IGNORECASE),
    re.compile(r"\d{4}_\d{2}_\d{2}_"),
    re.compile(r"\d{10,}_"),
    re.compile(r"_migration\.(ts|js|sql|py)$", re.IGNORECASE),
]


class ChangeStatus(Enum):
    """Status of a changed path."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    UNKNOWN = "unknown"

    @classmethod
    def from_git_code(cls, code: str) -> "ChangeStatus":
        """Map a `git diff --name-status` code (e.g. ``M``, ``R100``) to a status."""
        letter = code[:1].upper()
        return {
            "A": cls.ADDED,
            "M": cls.MODIFIED,
            "T": cls.MODIFIED,
            "D": cls.DELETED,
            "R": cls.RENAMED,
            "C": cls.ADDED,
        }.get(letter, cls.UNKNOWN)


@dataclass(frozen=True)
class ChangeRecord:
    """A single changed path as seen by the classifier."""

    path: str
    status: ChangeStatus
    diff: str = ""
    skipped: bool = False
    skip_reason: str | None = None
    old_path: str | None = None  # For renamed files

    def classifier_diff(self) -> str:
        """Diff text to forward to the classifier, or a placeholder for skipped files."""
        if self.skipped:
            return f"[File skipped: {self.skip_reason}]"
        return self.diff


class ChangeSet:
    """Ordered collection of change records with unique paths."""

    def __init__(self, records: list[ChangeRecord] | None = None):
        self.records: list[ChangeRecord] = list(records or [])
        self._by_path: dict[str, ChangeRecord] = {}
        for record in self.records:
            if record.path in self._by_path:
                raise ValueError(f"Duplicate path in change set: {record.path}")
            self._by_path[record.path] = record

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    @property
    def paths(self) -> list[str]:
        return [record.path for record in self.records]

    @property
    def included(self) -> list[ChangeRecord]:
        """Records whose content is sent to the classifier."""
        return [record for record in self.records if not record.skipped]

    @property
    def skipped(self) -> list[ChangeRecord]:
        return [record for record in self.records if record.skipped]

    def get(self, path: str) -> ChangeRecord | None:
        return self._by_path.get(path)

    def subset(self, paths: list[str]) -> list[ChangeRecord]:
        """Records for the given paths, in the given order, ignoring unknown paths."""
        return [self._by_path[path] for path in paths if path in self._by_path]

    def stage_paths(self, paths: list[str]) -> list[str]:
        """Paths to hand to git when staging, including the source side of renames."""
        result: list[str] = []
        for record in self.subset(paths):
            if record.old_path and record.old_path not in result:
                result.append(record.old_path)
            if record.path not in result:
                result.append(record.path)
        return result


def is_migration_file(path: str) -> bool:
    """Check if a path looks like a database migration."""
    normalized = path.replace("\\", "/")
    return any(pattern.search(normalized) for pattern in MIGRATION_PATTERNS)


def format_bytes(size: int) -> str:
    """Format a byte count in human readable form."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def get_skip_reason(path: str, status: ChangeStatus, root: Path | None = None) -> str | None:
    """
    Decide whether a file's content should be withheld from the classifier.

    Args:
        path: Repository-relative path
        status: Status of the change
        root: Repository root used to stat the file (defaults to cwd)

    Returns:
        The skip reason, or None when the file should be analyzed
    """
    if status == ChangeStatus.DELETED:
        return "File deleted"

    if is_migration_file(path):
        return "Migration file"

    file_path = (root or Path.cwd()) / path
    try:
        size = file_path.stat().st_size
    except OSError:
        # Unreadable files are analyzed from their diff alone
        return None

    if size > MAX_FILE_SIZE_BYTES:
        return f"File too large ({format_bytes(size)})"

    return None
