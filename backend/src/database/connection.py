"""
Ride Tracker - Database Connection Management
Provides the SQLAlchemy engine and ORM session management for the local store.
"""

from contextlib import contextmanager
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Generator, Optional

from utils.config import DATABASE_URL, config
from utils.logger import logger, log_database_error
from models.base import Base, create_session_factory


class DatabaseConnection:
    """
    Manages the local store engine and session factory.

    Features:
    - Any SQLAlchemy URL (SQLite file by default)
    - In-memory SQLite shares one connection so every session sees the same data
    - Tables created on first use
    """

    def __init__(self, url: str = DATABASE_URL):
        self.url = url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def get_engine(self) -> Engine:
        """
        Get or create the SQLAlchemy engine.

        Returns:
            SQLAlchemy Engine instance

        Raises:
            DatabaseConnectionError: If engine creation fails
        """
        if self._engine is None:
            try:
                if _is_memory_sqlite(self.url):
                    self._engine = create_engine(
                        self.url,
                        connect_args={"check_same_thread": False},
                        poolclass=StaticPool,
                    )
                elif self.url.startswith('sqlite'):
                    self._engine = create_engine(
                        self.url,
                        connect_args={"check_same_thread": False},
                    )
                else:
                    self._engine = create_engine(
                        self.url,
                        pool_pre_ping=True,  # Health check before use
                        hide_parameters=True,  # Prevent password from appearing in logs
                    )

                Base.metadata.create_all(self._engine)

                logger.info("Database engine initialized", extra={
                    "dialect": self._engine.dialect.name,
                    "environment": config.environment
                })

            except Exception as e:
                log_database_error(e, "Failed to create database engine")
                raise DatabaseConnectionError(f"Failed to create database engine: {e}")

        return self._engine

    def get_session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = create_session_factory(self.get_engine())
        return self._session_factory

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Context manager for ORM sessions.

        Sessions are committed on success or rolled back on error.

        Example:
            >>> with db.get_session() as session:
            ...     repo = HistoryRepository(session)
            ...     entries = repo.get_all()
        """
        session = self.get_session_factory()()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            log_database_error(e, "ORM transaction failed, rolled back")
            raise
        finally:
            session.close()

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1")).fetchone()
            return True
        except Exception as e:
            logger.error("Database connection test failed", extra={
                "error": str(e)
            })
            return False

    def close(self):
        """Dispose of the engine and its pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine closed")


class DatabaseConnectionError(Exception):
    """Raised when database connection fails."""
    pass


# Global database connection instance
db = DatabaseConnection()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Session context manager on the global connection."""
    with db.get_session() as session:
        yield session


def _is_memory_sqlite(url: str) -> bool:
    return url == 'sqlite://' or (url.startswith('sqlite') and ':memory:' in url)
