"""Branch, tracked-file and repository state models."""

from typing import Dict, List, Tuple

from pydantic import BaseModel, Field, model_validator

from codebird.core.errors import BranchAlreadyExists, BranchNotFound
from codebird.models.commit import Commit

DEFAULT_BRANCH = "main"


class BranchStore(BaseModel):
    """Maps branch names to their commits, oldest first."""

    branches: Dict[str, List[Commit]] = {}
    current_branch: str = DEFAULT_BRANCH

    @model_validator(mode="after")
    def _ensure_current_branch(self) -> "BranchStore":
        if not self.branches:
            self.branches[self.current_branch] = []
        if self.current_branch not in self.branches:
            raise ValueError(
                f"current branch {self.current_branch!r} is not a known branch"
            )
        return self

    def has_branch(self, name: str) -> bool:
        return name in self.branches

    def branch_names(self) -> List[str]:
        return list(self.branches)

    def create_branch(self, name: str) -> None:
        """Add an empty branch without switching to it."""
        if name in self.branches:
            raise BranchAlreadyExists(name)
        self.branches[name] = []

    def switch_branch(self, name: str) -> None:
        if name not in self.branches:
            raise BranchNotFound(name)
        self.current_branch = name

    def append_commit(self, branch_name: str, commit: Commit) -> None:
        if branch_name not in self.branches:
            raise BranchNotFound(branch_name)
        self.branches[branch_name].append(commit)

    def commits_of(self, branch_name: str) -> Tuple[Commit, ...]:
        """Get a read-only view of a branch's commits."""
        if branch_name not in self.branches:
            raise BranchNotFound(branch_name)
        return tuple(self.branches[branch_name])


class TrackedFiles(BaseModel):
    """Registry of file names the repository knows about. Only grows."""

    files: List[str] = []

    def add(self, name: str) -> bool:
        """Register a file, returning False if it was already tracked."""
        if name in self.files:
            return False
        self.files.append(name)
        return True

    def __contains__(self, name: str) -> bool:
        return name in self.files

    def __len__(self) -> int:
        return len(self.files)


class RepositoryState(BaseModel):
    """Everything a repository persists between invocations."""

    store: BranchStore
    tracked: TrackedFiles = Field(default_factory=TrackedFiles)

    @classmethod
    def new(cls, default_branch: str = DEFAULT_BRANCH) -> "RepositoryState":
        return cls(
            store=BranchStore(current_branch=default_branch),
            tracked=TrackedFiles(),
        )
