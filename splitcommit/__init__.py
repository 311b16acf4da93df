"""splitcommit - split working-tree changes into ordered, AI-described git commits."""

from .cli.cli_handler import SplitCommit
from .core.changes import ChangeRecord, ChangeSet, ChangeStatus
from .core.exceptions import ClassificationError, GitError, SplitCommitError
from .core.git import GitOperations
from .core.grouping import Group, GroupingResult
from .core.orchestrator import CommitOrchestrator, CommitRecord, CommitResult
from .services.ai_service import AIService, Classifier

__version__ = "0.1.0"

__all__ = [
    "SplitCommit",
    "ChangeRecord",
    "ChangeSet",
    "ChangeStatus",
    "ClassificationError",
    "GitError",
    "SplitCommitError",
    "GitOperations",
    "Group",
    "GroupingResult",
    "CommitOrchestrator",
    "CommitRecord",
    "CommitResult",
    "AIService",
    "Classifier",
]
