"""snapgit exception hierarchy.

Every snapgit failure inherits from GitError so callers can tell repository
problems apart from programming errors with a single except clause.
"""


class GitError(Exception):
    """Base exception for all snapgit errors."""

    def __init__(self, message="", *, retryable=False):
        super().__init__(message)
        self.retryable = retryable


class BadObject(GitError):
    """An object is missing from the store, unreadable, or of another kind."""


class UnbornBranch(GitError):
    """The ref exists by name only and does not point at a commit yet."""


class NoChangesToCommit(GitError):
    """The working tree matches the parent commit's tree."""


class ObjectStoreCorrupted(GitError):
    """The parent commit named by the ref cannot be read back."""


class IOFailure(GitError):
    """Reading the working tree or writing an object failed."""


class RefUpdateFailure(GitError):
    """The commit object was written but the ref could not be advanced.

    The commit stays in the store, unreferenced; ``commit_sha`` names it so the
    ref update can be retried.
    """

    def __init__(self, message="", *, commit_sha=None):
        super().__init__(message, retryable=True)
        self.commit_sha = commit_sha


class LastChangeMarkerFailure(GitError):
    """The commit and ref update succeeded but the last-change marker did not."""

    def __init__(self, message="", *, commit_sha=None):
        super().__init__(message, retryable=True)
        self.commit_sha = commit_sha


class NotARepository(GitError):
    """No control directory (or no HEAD inside it) was found."""
