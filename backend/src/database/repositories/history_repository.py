"""
Repository: Ride History
CRUD operations for RideHistoryRecord rows.
"""

from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select, delete

from models.orm_ride_history import RideHistoryRecord
from models.ride_history import RideHistoryEntry
from utils.logger import log_database_error


class HistoryRepository:
    """Repository for ride history rows, kept in list order via `position`."""

    def __init__(self, session: Session):
        self.session = session

    def get_all(self) -> List[RideHistoryEntry]:
        """Get all entries in list order."""
        stmt = select(RideHistoryRecord).order_by(RideHistoryRecord.position)
        return [RideHistoryEntry.from_row(row) for row in self.session.execute(stmt).scalars()]

    def replace_all(self, entries: List[RideHistoryEntry]) -> int:
        """
        Replace every stored entry, preserving the given order.

        Args:
            entries: Entries in display order (newest first)

        Returns:
            Number of rows written
        """
        try:
            self.session.execute(delete(RideHistoryRecord))
            self.session.add_all([
                _to_record(entry, position)
                for position, entry in enumerate(entries)
            ])
            self.session.flush()
            return len(entries)

        except Exception as e:
            log_database_error(e, "Failed to replace ride history")
            raise

    def delete_by_id(self, entry_id: str) -> bool:
        """
        Delete one entry.

        Returns:
            True if a row was deleted
        """
        result = self.session.execute(
            delete(RideHistoryRecord).where(RideHistoryRecord.entry_id == entry_id)
        )
        return result.rowcount > 0


def _to_record(entry: RideHistoryEntry, position: int) -> RideHistoryRecord:
    return RideHistoryRecord(
        entry_id=entry.id,
        ride_id=entry.ride_id,
        ride_name=entry.ride_name,
        park_name=entry.park_name,
        logged_at=entry.timestamp,
        expected_wait_minutes=entry.expected_wait_minutes,
        actual_wait_minutes=entry.actual_wait_minutes,
        queue_type=entry.queue_type.value,
        position=position
    )
