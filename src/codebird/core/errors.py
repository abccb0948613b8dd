"""Codebird error types."""

from pathlib import Path
from typing import List


class CodebirdError(Exception):
    """Base class for every recoverable Codebird error."""


class BranchAlreadyExists(CodebirdError):
    """Raised when creating a branch whose name is already taken."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Branch already exists: {name}")


class BranchNotFound(CodebirdError):
    """Raised when an operation names a branch that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Branch does not exist: {name}")


class NoFilesModified(CodebirdError):
    """Raised when a commit is requested with no modified files."""

    def __init__(self):
        super().__init__("No files modified to commit")


class MergeConflict(CodebirdError):
    """Raised when two branches share a change description.

    Attributes:
        current_branch: The branch being merged into.
        target_branch: The branch being merged from.
        files: Every tracked file; all of them need manual resolution.
    """

    def __init__(self, current_branch: str, target_branch: str, files: List[str]):
        self.current_branch = current_branch
        self.target_branch = target_branch
        self.files = list(files)
        super().__init__(
            f"Conflict merging {target_branch} into {current_branch}; "
            "merge cannot be completed automatically"
        )


class RepositoryNotInitialized(CodebirdError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Codebird not initialized in {path}")


class AlreadyInitialized(CodebirdError):
    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Repository already initialized in {path}")


class CorruptState(CodebirdError):
    """Raised when the persisted state file cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unreadable repository state {path}: {reason}")


class StorageError(CodebirdError):
    """Raised when the repository directory cannot be created or written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write repository at {path}: {reason}")
