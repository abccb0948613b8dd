"""Data models for Codebird."""

from .commit import Commit
from .state import DEFAULT_BRANCH, BranchStore, RepositoryState, TrackedFiles

__all__ = ["Commit", "BranchStore", "TrackedFiles", "RepositoryState", "DEFAULT_BRANCH"]
