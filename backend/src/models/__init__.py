# Ride Tracker - Models Package

# Import all ORM models to register them with SQLAlchemy's declarative base
# IMPORTANT: Use relative imports to avoid duplicate module loading issues
from .base import Base, create_session_factory
from .orm_ride_history import RideHistoryRecord
from .orm_note import EntityNote
from .ride_history import RideHistoryEntry, QueueType, make_entry_id
from .history_stats import HistoryStats

__all__ = [
    'Base',
    'create_session_factory',
    'RideHistoryRecord',
    'EntityNote',
    'RideHistoryEntry',
    'QueueType',
    'make_entry_id',
    'HistoryStats',
]
