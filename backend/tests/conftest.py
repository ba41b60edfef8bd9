"""
Ride Tracker Transfer - pytest Configuration and Fixtures

Provides shared test fixtures for:
- Sample history entries and notes
- In-memory and SQLite-backed stores
- Transfer service and Flask test client
"""

import pytest
from datetime import datetime

from models.ride_history import QueueType, RideHistoryEntry


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_entry():
    """
    Single history entry with every field populated.

    Returns:
        RideHistoryEntry for Space Mountain
    """
    return RideHistoryEntry.create(
        ride_id='b2260923-9315-40fd-9c6b-44dd811dbe64',
        ride_name='Space Mountain',
        park_name='Magic Kingdom',
        timestamp=datetime(2024, 6, 1, 14, 30, 0),
        expected_wait_minutes=60,
        actual_wait_minutes=48,
        queue_type=QueueType.STANDBY
    )


@pytest.fixture
def sample_history():
    """
    Three entries, newest first, covering both queue types and missing waits.

    Returns:
        List of RideHistoryEntry
    """
    return [
        RideHistoryEntry.create(
            ride_id='r-tron',
            ride_name='TRON Lightcycle / Run',
            park_name='Magic Kingdom',
            timestamp=datetime(2024, 6, 2, 18, 5, 0),
            expected_wait_minutes=None,
            actual_wait_minutes=12,
            queue_type=QueueType.LIGHTNING_LANE
        ),
        RideHistoryEntry.create(
            ride_id='r-haunted',
            ride_name='Haunted Mansion',
            park_name='Magic Kingdom',
            timestamp=datetime(2024, 6, 2, 11, 0, 0),
            expected_wait_minutes=35,
            actual_wait_minutes=None
        ),
        RideHistoryEntry.create(
            ride_id='r-matterhorn',
            ride_name='Matterhorn Bobsleds',
            park_name='Disneyland',
            timestamp=datetime(2024, 6, 1, 20, 0, 0),
            expected_wait_minutes=45,
            actual_wait_minutes=50
        ),
    ]


@pytest.fixture
def sample_notes():
    """
    Notes keyed by entity id.

    Returns:
        Dict of entity id to note text
    """
    return {
        'r-tron': 'Ride at night, the canopy lights up',
        'r-haunted': 'Single rider does not exist here',
        'r-matterhorn': 'Left side is smoother',
    }


# ============================================================================
# Store / Service Fixtures
# ============================================================================

@pytest.fixture
def memory_store():
    """Empty in-memory TransferStore."""
    from transfer.store import InMemoryStore
    return InMemoryStore()


@pytest.fixture
def transfer_service(memory_store):
    """TransferService over an empty in-memory store."""
    from transfer.transfer_service import TransferService
    return TransferService(memory_store)


@pytest.fixture
def sqlite_db():
    """
    Isolated in-memory SQLite database with tables created.

    Yields:
        DatabaseConnection
    """
    from database.connection import DatabaseConnection
    connection = DatabaseConnection('sqlite://')
    connection.get_engine()
    yield connection
    connection.close()


@pytest.fixture
def sql_store(sqlite_db):
    """SqlTransferStore backed by the isolated SQLite database."""
    from database.transfer_store import SqlTransferStore
    return SqlTransferStore(sqlite_db)


@pytest.fixture
def app(memory_store):
    """Flask app wired to the in-memory store."""
    from api.app import create_app
    flask_app = create_app(store=memory_store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()
