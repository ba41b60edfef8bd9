"""
Ride Tracker - History Statistics Model
Summary figures shown above the ride history list.
"""

from dataclasses import dataclass
from typing import Iterable

from .ride_history import RideHistoryEntry


@dataclass(frozen=True)
class HistoryStats:
    """
    Aggregate figures over a user's ride history.

    Attributes:
        total_rides: Number of logged entries
        total_wait_minutes: Sum of measured waits (entries without one are skipped)
        average_wait_minutes: Whole-minute mean of measured waits, 0 when none
        unique_rides: Number of distinct ride ids
    """
    total_rides: int
    total_wait_minutes: int
    average_wait_minutes: int
    unique_rides: int

    @classmethod
    def from_entries(cls, entries: Iterable[RideHistoryEntry]) -> 'HistoryStats':
        entries = list(entries)
        waits = [e.actual_wait_minutes for e in entries if e.actual_wait_minutes is not None]
        total_wait = sum(waits)

        return cls(
            total_rides=len(entries),
            total_wait_minutes=total_wait,
            # Floor division, matching what the app displays
            average_wait_minutes=total_wait // len(waits) if waits else 0,
            unique_rides=len({e.ride_id for e in entries})
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "total_rides": self.total_rides,
            "total_wait_minutes": self.total_wait_minutes,
            "average_wait_minutes": self.average_wait_minutes,
            "unique_rides": self.unique_rides
        }
