"""
SQLAlchemy ORM Base Configuration
Provides the declarative base and session factory for ORM models.

IMPORTANT: Engine is imported from database.connection to ensure single source of truth.
"""

from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


def create_session_factory(engine) -> sessionmaker:
    """
    Build a session factory bound to an engine.

    Usage:
        factory = create_session_factory(db.get_engine())
        session = factory()
        try:
            # Do work
            session.commit()
        except Exception as e:
            session.rollback()
            raise
        finally:
            session.close()

    Returns:
        sessionmaker bound to engine
    """
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Allow access to objects after commit
        autoflush=True,
        autocommit=False
    )
