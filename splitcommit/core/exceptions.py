"""Exception hierarchy for splitcommit."""


class SplitCommitError(Exception):
    """Base error for splitcommit."""

    pass


class GitError(SplitCommitError):
    """Git operation error."""

    pass


class EnumerationError(GitError):
    """Working-tree state could not be read."""

    pass


class StagingError(GitError):
    """Staging or unstaging files failed."""

    pass


class CommitExecutionError(GitError):
    """The commit command exited with a failure."""

    pass


class ClassificationError(SplitCommitError):
    """The classifier failed or returned a malformed result."""

    pass


class PushError(GitError):
    """Pushing commits to the remote failed."""

    pass
