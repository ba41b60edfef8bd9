"""
Ride Tracker - Ride History Entry Model
One logged queue experience, captured when a queue session ends.
"""

import enum
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional


# Fixed namespace for deterministic entry ids (uuid5 over ride id + timestamp)
ENTRY_ID_NAMESPACE = uuid.UUID('6f1c2d3e-9a4b-5c6d-8e7f-0a1b2c3d4e5f')


class QueueType(enum.Enum):
    """Queue admission mechanism used for a ride."""
    STANDBY = "standby"
    LIGHTNING_LANE = "lightningLane"

    @property
    def display_name(self) -> str:
        return "Lightning Lane" if self is QueueType.LIGHTNING_LANE else "Standby"

    @property
    def short_name(self) -> str:
        return "LL" if self is QueueType.LIGHTNING_LANE else "SB"


def utc_now() -> datetime:
    """Current UTC wall-clock time, naive, truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def format_timestamp(value: datetime) -> str:
    """Serialize a naive UTC datetime as ISO-8601 with a Z suffix."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat() + 'Z'


def make_entry_id(ride_id: str, timestamp: datetime) -> str:
    """
    Derive a stable entry id from the ride and the second it was logged.

    The interop wire dialect carries no entry id, so the same derivation is
    used on creation and on decode; an exported entry keeps its id after a
    round trip through the web client.
    """
    return str(uuid.uuid5(ENTRY_ID_NAMESPACE, f"{ride_id}|{format_timestamp(timestamp)}"))


@dataclass(frozen=True)
class RideHistoryEntry:
    """
    Ride history entry.

    Attributes:
        id: Unique key used for merge de-duplication
        ride_id: Catalog entity id of the attraction
        ride_name: Ride name captured at creation time
        park_name: Park name captured at creation time
        timestamp: Queue end time (naive UTC)
        expected_wait_minutes: Posted wait at queue start
        actual_wait_minutes: Measured wait in whole minutes
        queue_type: Standby or Lightning Lane
    """
    id: str
    ride_id: str
    ride_name: str
    park_name: str
    timestamp: datetime
    expected_wait_minutes: Optional[int] = None
    actual_wait_minutes: Optional[int] = None
    queue_type: QueueType = QueueType.STANDBY

    @classmethod
    def create(
        cls,
        ride_id: str,
        ride_name: str,
        park_name: str,
        timestamp: Optional[datetime] = None,
        expected_wait_minutes: Optional[int] = None,
        actual_wait_minutes: Optional[int] = None,
        queue_type: QueueType = QueueType.STANDBY
    ) -> 'RideHistoryEntry':
        """
        Create a new entry with a derived id.

        Args:
            ride_id: Catalog entity id
            ride_name: Display name of the ride
            park_name: Display name of the park
            timestamp: Queue end time, defaults to now (UTC)
            expected_wait_minutes: Posted wait when the queue started
            actual_wait_minutes: Measured wait
            queue_type: Queue admission type

        Returns:
            RideHistoryEntry instance
        """
        if timestamp is None:
            timestamp = utc_now()
        elif timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
        timestamp = timestamp.replace(microsecond=0)

        return cls(
            id=make_entry_id(ride_id, timestamp),
            ride_id=ride_id,
            ride_name=ride_name,
            park_name=park_name,
            timestamp=timestamp,
            expected_wait_minutes=expected_wait_minutes,
            actual_wait_minutes=actual_wait_minutes,
            queue_type=queue_type
        )

    def with_id(self, entry_id: str) -> 'RideHistoryEntry':
        """Return a copy carrying a different id."""
        return replace(self, id=entry_id)

    @property
    def day_key(self) -> str:
        """Grouping key for the history list (YYYY-MM-DD)."""
        return self.timestamp.strftime('%Y-%m-%d')

    @property
    def is_today(self) -> bool:
        return self.timestamp.date() == utc_now().date()

    def to_dict(self) -> dict:
        """
        Convert entry to dictionary for API responses.

        Returns:
            Dictionary representation of the entry
        """
        return {
            "id": self.id,
            "ride_id": self.ride_id,
            "ride_name": self.ride_name,
            "park_name": self.park_name,
            "timestamp": format_timestamp(self.timestamp),
            "expected_wait_minutes": self.expected_wait_minutes,
            "actual_wait_minutes": self.actual_wait_minutes,
            "queue_type": self.queue_type.value
        }

    @classmethod
    def from_row(cls, row) -> 'RideHistoryEntry':
        """
        Create RideHistoryEntry instance from an ORM row.

        Args:
            row: RideHistoryRecord ORM object

        Returns:
            RideHistoryEntry instance
        """
        return cls(
            id=row.entry_id,
            ride_id=row.ride_id,
            ride_name=row.ride_name,
            park_name=row.park_name,
            timestamp=row.logged_at,
            expected_wait_minutes=row.expected_wait_minutes,
            actual_wait_minutes=row.actual_wait_minutes,
            queue_type=QueueType(row.queue_type)
        )
