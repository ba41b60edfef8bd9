"""
Ride Tracker - SQL Transfer Store
TransferStore backed by the ORM repositories, one session per operation.
"""

from contextlib import contextmanager
from typing import Dict, Generator, List, Optional

from sqlalchemy.orm import Session

from database.connection import DatabaseConnection, db
from database.repositories.history_repository import HistoryRepository
from database.repositories.notes_repository import NotesRepository
from models.ride_history import RideHistoryEntry
from transfer.store import TransferStore


class SqlTransferStore(TransferStore):
    """
    Persists history and notes through SQLAlchemy.

    Args:
        connection: DatabaseConnection to use (defaults to the global one)
    """

    def __init__(self, connection: Optional[DatabaseConnection] = None):
        self.connection = connection or db

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        with self.connection.get_session() as session:
            yield session

    def get_history(self) -> List[RideHistoryEntry]:
        with self._session() as session:
            return HistoryRepository(session).get_all()

    def save_history(self, entries: List[RideHistoryEntry]) -> None:
        with self._session() as session:
            HistoryRepository(session).replace_all(entries)

    def get_notes(self) -> Dict[str, str]:
        with self._session() as session:
            return NotesRepository(session).get_all()

    def save_notes(self, notes: Dict[str, str]) -> None:
        with self._session() as session:
            NotesRepository(session).replace_all(notes)

    def delete_history_entry(self, entry_id: str) -> bool:
        with self._session() as session:
            return HistoryRepository(session).delete_by_id(entry_id)
