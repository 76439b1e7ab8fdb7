"""Base provider interface for remote snapshot storage."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class RemoteSnapshot:
    """A snapshot as stored remotely."""

    user_id: str
    data: dict
    updated_at: datetime


class SyncProvider(ABC):
    """Abstract base class for sync providers.

    A provider stores exactly one snapshot per user and knows nothing about
    its contents. Every failure is raised as SyncError.
    """

    @abstractmethod
    def push(self, user_id: str, snapshot: dict) -> datetime:
        """Store a snapshot for a user, replacing any previous one.

        Returns:
            Remote update time of the stored copy.

        Raises:
            SyncError: If the snapshot could not be stored.
        """
        pass

    @abstractmethod
    def pull(self, user_id: str) -> Optional[RemoteSnapshot]:
        """Fetch the user's snapshot.

        Returns:
            The stored snapshot, or None if the user has none.

        Raises:
            SyncError: If the remote copy could not be read.
        """
        pass

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        pass

    @abstractmethod
    def delete(self, user_id: str) -> None:
        """Remove the user's snapshot. Deleting a missing snapshot is not an error."""
        pass
