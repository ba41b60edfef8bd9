"""
SQLAlchemy ORM Model: RideHistoryRecord
Persisted ride history entries (one row per logged queue session).
"""

from sqlalchemy import Integer, String, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base
from datetime import datetime
from typing import Optional


class RideHistoryRecord(Base):
    """
    Ride history row.
    Ride and park names are denormalized snapshots taken when the entry was logged.
    """
    __tablename__ = "ride_history"

    # Primary Key (entry id, also the merge de-duplication key)
    entry_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # Ride snapshot
    ride_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Catalog entity id of the attraction"
    )
    ride_name: Mapped[str] = mapped_column(String(255), nullable=False)
    park_name: Mapped[str] = mapped_column(String(255), nullable=False, default='')

    # Queue session
    logged_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        comment="UTC queue end time"
    )
    expected_wait_minutes: Mapped[Optional[int]] = mapped_column(
        Integer,
        comment="Posted wait when the queue started"
    )
    actual_wait_minutes: Mapped[Optional[int]] = mapped_column(
        Integer,
        comment="Measured wait in whole minutes"
    )
    queue_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default='standby',
        comment="standby or lightningLane"
    )

    # Position in the user's list (0 = top)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index('idx_history_position', 'position'),
        Index('idx_history_logged_at', 'logged_at'),
        {'extend_existing': True}
    )

    def __repr__(self) -> str:
        return f"<RideHistoryRecord(entry_id={self.entry_id}, ride={self.ride_name}, time={self.logged_at})>"
