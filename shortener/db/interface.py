"""
Snapshot Storage Interface

This module defines the storage abstraction used by the persistence manager,
so the snapshot backend can be swapped without touching the link store or the
flush scheduling.

An adapter stores exactly one snapshot and overwrites it in full on every
write; there is no append or partial update.
"""

from abc import ABC, abstractmethod

from shortener.db.models import SnapshotDocument


class SnapshotAdapter(ABC):
    """
    Abstract base class for snapshot storage.

    To add a new backend:
    1. Create a new class inheriting from SnapshotAdapter
    2. Implement all abstract methods
    3. Update get_snapshot_adapter() to return the new adapter
    """

    @abstractmethod
    def read(self) -> SnapshotDocument:
        """
        Load the last written snapshot.

        Returns:
            The parsed snapshot

        Raises:
            SnapshotReadError: If the snapshot is missing, unreadable or invalid
        """
        pass

    @abstractmethod
    def write(self, document: SnapshotDocument) -> None:
        """
        Replace the stored snapshot with ``document``.

        Implementations must never leave a partially written snapshot in
        place of the previous good one.

        Raises:
            SnapshotWriteError: If the snapshot cannot be written
        """
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location of the snapshot, used in log messages."""
        pass
