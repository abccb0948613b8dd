"""Commit model for Codebird repositories."""

import hashlib
from datetime import datetime

from pydantic import BaseModel


class Commit(BaseModel):
    """Represents one change event recorded on a branch."""

    id: str
    message: str
    timestamp: datetime
    change_description: str
    branch_name: str

    model_config = {"frozen": True}

    @classmethod
    def create(
        cls, message: str, change_description: str, branch_name: str
    ) -> "Commit":
        """Build a commit stamped with the current time."""
        timestamp = datetime.now()
        return cls(
            id=cls.compute_id(timestamp, message),
            message=message,
            timestamp=timestamp,
            change_description=change_description,
            branch_name=branch_name,
        )

    @staticmethod
    def compute_id(timestamp: datetime, message: str) -> str:
        """Derive the commit id from its timestamp and message.

        Identical inputs always give the same id, so two commits with the
        same message in the same timestamp quantum collide.
        """
        digest = hashlib.sha1()
        digest.update(timestamp.isoformat().encode("utf-8"))
        digest.update(message.encode("utf-8"))
        return digest.hexdigest()

    @property
    def short_id(self) -> str:
        return self.id[:8]
