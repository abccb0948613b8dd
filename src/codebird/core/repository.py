"""Codebird repository persistence."""

import contextlib
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from pydantic import ValidationError

from codebird.core.engine import RepositoryEngine
from codebird.core.errors import (
    AlreadyInitialized,
    CorruptState,
    RepositoryNotInitialized,
    StorageError,
)
from codebird.models.commit import Commit
from codebird.models.state import DEFAULT_BRANCH, RepositoryState

logger = logging.getLogger(__name__)

REPO_DIR_NAME = ".cbird"
FORMAT_VERSION = "0.1.0"


class CodebirdRepository:
    """Loads repository state from ``.cbird/`` and saves it after each change."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self.cbird_dir = self.project_root / REPO_DIR_NAME
        self.config_file = self.cbird_dir / "config.json"
        self.state_file = self.cbird_dir / "state.json"

    def exists(self) -> bool:
        """Check if a Codebird repository exists."""
        return self.cbird_dir.is_dir() and self.config_file.exists()

    def init(self, default_branch: str = DEFAULT_BRANCH) -> None:
        """Initialize a new Codebird repository."""
        if self.exists():
            raise AlreadyInitialized(self.project_root)

        if self.cbird_dir.exists() and not self.cbird_dir.is_dir():
            raise StorageError(self.cbird_dir, "exists but is not a directory")

        try:
            self.cbird_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageError(self.cbird_dir, str(e)) from e

        config = {
            "version": FORMAT_VERSION,
            "created": datetime.now().isoformat(),
            "project_root": str(self.project_root),
            "default_branch": default_branch,
        }
        self._save_state(RepositoryState.new(default_branch))
        try:
            self.config_file.write_text(json.dumps(config, indent=2))
        except OSError as e:
            raise StorageError(self.config_file, str(e)) from e
        logger.info("Initialized repository in %s", self.cbird_dir)

    def load_config(self) -> dict:
        self._require_initialized()
        try:
            config = json.loads(self.config_file.read_bytes())
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError
            raise CorruptState(self.config_file, str(e)) from e
        if not isinstance(config, dict):
            raise CorruptState(self.config_file, "expected a JSON object")
        return config

    def add_file(self, name: str) -> bool:
        with self._engine(save=True) as engine:
            return engine.add_file(name)

    def commit(self, modified_files: List[str]) -> Commit:
        with self._engine(save=True) as engine:
            return engine.commit(modified_files)

    def create_branch(self, name: str) -> None:
        with self._engine(save=True) as engine:
            engine.create_branch(name)

    def switch_branch(self, name: str) -> None:
        with self._engine(save=True) as engine:
            engine.switch_branch(name)

    def merge(self, target_branch: str) -> List[Commit]:
        with self._engine(save=True) as engine:
            return engine.merge(target_branch)

    def history(self) -> Tuple[Commit, ...]:
        with self._engine() as engine:
            return engine.history()

    def status(self) -> str:
        with self._engine() as engine:
            return engine.status()

    def branches(self) -> List[Tuple[str, int]]:
        """List ``(name, commit count)`` for every branch."""
        with self._engine() as engine:
            return engine.branch_counts()

    def tracked_files(self) -> List[str]:
        with self._engine() as engine:
            return engine.tracked_files()

    def load_state(self) -> RepositoryState:
        """Load the persisted repository state."""
        self._require_initialized()
        if not self.state_file.exists():
            # Marker without state: nothing has been recorded yet
            default_branch = self.load_config().get("default_branch", DEFAULT_BRANCH)
            return RepositoryState.new(default_branch)

        try:
            state = RepositoryState.model_validate_json(self.state_file.read_bytes())
        except ValidationError as e:
            raise CorruptState(self.state_file, str(e)) from e

        logger.debug("Loaded state from %s", self.state_file)
        return state

    @contextlib.contextmanager
    def _engine(self, save: bool = False) -> Iterator[RepositoryEngine]:
        """Yield an engine over freshly loaded state, saving it on success."""
        engine = RepositoryEngine(self.load_state())
        yield engine
        if save:
            self._save_state(engine.state)

    def _save_state(self, state: RepositoryState) -> None:
        """Write the state file atomically."""
        data = json.dumps(state.model_dump(mode="json"), indent=2)
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.cbird_dir, prefix="state-", suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(self.cbird_dir, str(e)) from e
        try:
            with os.fdopen(fd, "w") as f:
                f.write(data)
            os.replace(tmp_path, self.state_file)
        except OSError as e:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise StorageError(self.state_file, str(e)) from e
        logger.debug("Saved state to %s", self.state_file)

    def _require_initialized(self) -> None:
        if not self.exists():
            raise RepositoryNotInitialized(self.project_root)


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Find the nearest directory at or above ``start`` holding a repository."""
    current_dir = Path(start or Path.cwd()).resolve()

    for parent in [current_dir] + list(current_dir.parents):
        if (parent / REPO_DIR_NAME / "config.json").exists():
            return parent

    return None
