"""Core modules for splitcommit.

This module contains the core functionality including:
- Git operations and change enumeration
- Group ordering and file coverage
- Sequential commit orchestration
- The single-commit feedback loop
"""

from .changes import ChangeRecord, ChangeSet, ChangeStatus
from .exceptions import (
    ClassificationError,
    CommitExecutionError,
    EnumerationError,
    GitError,
    SplitCommitError,
    StagingError,
)
from .feedback import FeedbackAction, FeedbackLoop
from .git import GitOperations
from .grouping import Group, GroupingResult, reconcile_uncovered_files, sort_groups_by_dependencies
from .orchestrator import CommitOrchestrator, CommitRecord, CommitResult, GroupDecision, GroupState

__all__ = [
    "ChangeRecord",
    "ChangeSet",
    "ChangeStatus",
    "ClassificationError",
    "CommitExecutionError",
    "EnumerationError",
    "GitError",
    "SplitCommitError",
    "StagingError",
    "FeedbackAction",
    "FeedbackLoop",
    "GitOperations",
    "Group",
    "GroupingResult",
    "reconcile_uncovered_files",
    "sort_groups_by_dependencies",
    "CommitOrchestrator",
    "CommitRecord",
    "CommitResult",
    "GroupDecision",
    "GroupState",
]
