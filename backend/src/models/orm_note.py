"""
SQLAlchemy ORM Model: EntityNote
Free-text notes keyed by catalog entity id.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from models.base import Base


class EntityNote(Base):
    """One user note per catalog entity."""
    __tablename__ = "entity_notes"

    entity_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    note_text: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<EntityNote(entity_id={self.entity_id}, chars={len(self.note_text or '')})>"
