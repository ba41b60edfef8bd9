"""
Repository: Entity Notes
Read and replace EntityNote rows.
"""

from typing import Dict
from sqlalchemy.orm import Session
from sqlalchemy import select, delete

from models.orm_note import EntityNote
from utils.logger import log_database_error


class NotesRepository:
    """Repository for per-entity notes."""

    def __init__(self, session: Session):
        self.session = session

    def get_all(self) -> Dict[str, str]:
        stmt = select(EntityNote).order_by(EntityNote.entity_id)
        return {note.entity_id: note.note_text for note in self.session.execute(stmt).scalars()}

    def replace_all(self, notes: Dict[str, str]) -> int:
        """
        Replace every stored note.

        Returns:
            Number of rows written
        """
        try:
            self.session.execute(delete(EntityNote))
            self.session.add_all([
                EntityNote(entity_id=entity_id, note_text=text)
                for entity_id, text in notes.items()
            ])
            self.session.flush()
            return len(notes)

        except Exception as e:
            log_database_error(e, "Failed to replace notes")
            raise
