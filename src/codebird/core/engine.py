"""Branch, commit and merge operations over an in-memory repository state."""

import logging
import threading
from typing import List, Sequence, Tuple

from codebird.core.conflicts import conflicting_changes, has_conflict
from codebird.core.errors import BranchNotFound, MergeConflict, NoFilesModified
from codebird.models.commit import Commit
from codebird.models.state import RepositoryState

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "Modified files: "
CHANGE_PREFIX = "Modified "


class RepositoryEngine:
    """Applies repository operations to a ``RepositoryState``.

    The engine owns no state of its own; callers pass the state in and are
    responsible for loading and saving it. Operations are serialized through
    a per-instance lock so a single engine can be shared between threads.
    """

    def __init__(self, state: RepositoryState):
        self.state = state
        self._lock = threading.RLock()

    @property
    def current_branch(self) -> str:
        return self.state.store.current_branch

    def add_file(self, name: str) -> bool:
        """Track a file. Adding an already tracked file is a no-op."""
        with self._lock:
            added = self.state.tracked.add(name)
        if added:
            logger.info("Tracking %s", name)
        return added

    def commit(self, modified_files: Sequence[str]) -> Commit:
        """Record a commit for ``modified_files`` on the current branch.

        ``modified_files`` is a sequence of file names; a bare string is
        rejected rather than split into characters.
        """
        if isinstance(modified_files, str):
            raise TypeError("modified_files must be a sequence of file names, not a str")
        files = list(modified_files)
        if not files:
            raise NoFilesModified()

        with self._lock:
            branch = self.current_branch
            commit = Commit.create(
                message=MESSAGE_PREFIX + " ".join(files),
                change_description=CHANGE_PREFIX + ", ".join(files),
                branch_name=branch,
            )
            self.state.store.append_commit(branch, commit)

        logger.info("Committed %s on %s", commit.short_id, branch)
        return commit

    def history(self) -> Tuple[Commit, ...]:
        with self._lock:
            return self.state.store.commits_of(self.current_branch)

    def status(self) -> str:
        with self._lock:
            return self.current_branch

    def branches(self) -> List[str]:
        with self._lock:
            return self.state.store.branch_names()

    def branch_counts(self) -> List[Tuple[str, int]]:
        """List ``(name, commit count)`` for every branch, in creation order."""
        with self._lock:
            return [
                (name, len(commits))
                for name, commits in self.state.store.branches.items()
            ]

    def tracked_files(self) -> List[str]:
        with self._lock:
            return list(self.state.tracked.files)

    def create_branch(self, name: str) -> None:
        with self._lock:
            self.state.store.create_branch(name)
        logger.info("Created branch %s", name)

    def switch_branch(self, name: str) -> None:
        with self._lock:
            self.state.store.switch_branch(name)
        logger.info("Switched to branch %s", name)

    def merge(self, target_branch: str) -> List[Commit]:
        """Merge ``target_branch`` into the current branch.

        Every commit of the target branch is appended, in order, to the
        current branch; the target branch itself is left untouched. If the
        two branches share any change description the merge is refused with
        ``MergeConflict`` and neither branch changes.

        Returns:
            The commits appended to the current branch.
        """
        with self._lock:
            store = self.state.store
            if not store.has_branch(target_branch):
                raise BranchNotFound(target_branch)

            current = store.current_branch
            logger.debug("Merging %s into %s", target_branch, current)

            changes_current = [c.change_description for c in store.commits_of(current)]
            incoming = store.commits_of(target_branch)
            changes_other = [c.change_description for c in incoming]

            if has_conflict(changes_current, changes_other):
                logger.warning(
                    "Merge of %s into %s aborted, shared changes: %s",
                    target_branch,
                    current,
                    conflicting_changes(changes_current, changes_other),
                )
                raise MergeConflict(current, target_branch, self.state.tracked.files)

            for commit in incoming:
                store.append_commit(current, commit)

        logger.info(
            "Merged %d commits from %s into %s", len(incoming), target_branch, current
        )
        return list(incoming)
