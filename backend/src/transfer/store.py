"""
Storage collaborator for the transfer service.

The codec never touches storage; TransferService reads the current state
from a store, reconciles, and writes the result back.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from models.ride_history import RideHistoryEntry


class TransferStore(ABC):
    """Persistent home of a user's ride history and notes."""

    @abstractmethod
    def get_history(self) -> List[RideHistoryEntry]:
        """Return stored history, newest first."""

    @abstractmethod
    def save_history(self, entries: List[RideHistoryEntry]) -> None:
        """Replace stored history with entries (order preserved)."""

    @abstractmethod
    def delete_history_entry(self, entry_id: str) -> bool:
        """Remove one history entry; True if it existed."""

    @abstractmethod
    def get_notes(self) -> Dict[str, str]:
        """Return stored notes keyed by entity id."""

    @abstractmethod
    def save_notes(self, notes: Dict[str, str]) -> None:
        """Replace stored notes."""


class InMemoryStore(TransferStore):
    """Store kept in process memory."""

    def __init__(
        self,
        history: Optional[List[RideHistoryEntry]] = None,
        notes: Optional[Dict[str, str]] = None
    ):
        self._history = list(history or [])
        self._notes = dict(notes or {})

    def get_history(self) -> List[RideHistoryEntry]:
        return list(self._history)

    def save_history(self, entries: List[RideHistoryEntry]) -> None:
        self._history = list(entries)

    def delete_history_entry(self, entry_id: str) -> bool:
        remaining = [entry for entry in self._history if entry.id != entry_id]
        removed = len(remaining) < len(self._history)
        self._history = remaining
        return removed

    def get_notes(self) -> Dict[str, str]:
        return dict(self._notes)

    def save_notes(self, notes: Dict[str, str]) -> None:
        self._notes = dict(notes)
