"""
Transfer Service
Single entry point for export and import against a local store.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from models.history_stats import HistoryStats
from models.ride_history import RideHistoryEntry
from transfer import codec
from transfer.codec import DataKind
from transfer.format_detector import DataType, detect
from transfer.reconciler import ImportStrategy, reconcile_history, reconcile_notes
from transfer.store import TransferStore
from utils.config import TRANSFER_MAX_PAYLOAD_CHARS
from utils.logger import log_export, log_import_complete, log_import_failed


# User-facing failure reasons, surfaced verbatim by callers
UNRECOGNIZED_FORMAT = "Unrecognized data format"
FAILED_DECODE_HISTORY = "Failed to decode history data"
FAILED_DECODE_NOTES = "Failed to decode notes data"
FAILED_PARSE_JSON_HISTORY = "Failed to parse JSON history"
FAILED_PARSE_JSON_NOTES = "Failed to parse JSON notes"

_FAILURE_REASONS = {
    DataType.COMPRESSED_HISTORY: FAILED_DECODE_HISTORY,
    DataType.COMPRESSED_NOTES: FAILED_DECODE_NOTES,
    DataType.JSON_HISTORY: FAILED_PARSE_JSON_HISTORY,
    DataType.JSON_NOTES: FAILED_PARSE_JSON_NOTES,
}

_DECODERS = {
    DataType.COMPRESSED_HISTORY: (DataKind.HISTORY, codec.decode_history),
    DataType.COMPRESSED_NOTES: (DataKind.NOTES, codec.decode_notes),
    DataType.JSON_HISTORY: (DataKind.HISTORY, codec.decode_json_history),
    DataType.JSON_NOTES: (DataKind.NOTES, codec.decode_json_notes),
}


@dataclass(frozen=True)
class ImportResult:
    """Outcome of an import: a kind and record count, or a failure reason."""
    success: bool
    kind: Optional[DataKind] = None
    count: int = 0
    error: Optional[str] = None

    @classmethod
    def ok(cls, kind: DataKind, count: int) -> 'ImportResult':
        return cls(success=True, kind=kind, count=count)

    @classmethod
    def failed(cls, reason: str) -> 'ImportResult':
        return cls(success=False, error=reason)

    @property
    def message(self) -> str:
        """Confirmation or failure text for display."""
        if self.success:
            return f"Imported {self.count} {self.kind.label}"
        return self.error

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "kind": self.kind.value, "count": self.count}
        return {"success": False, "error": self.error}


class TransferService:
    """
    Export and import of ride history and notes.

    Every read-reconcile-save sequence runs under one lock, so concurrent
    imports against the same store cannot overwrite each other's result.
    """

    def __init__(self, store: TransferStore, max_payload_chars: int = TRANSFER_MAX_PAYLOAD_CHARS):
        """
        Initialize service with a storage collaborator.

        Args:
            store: Where history and notes are read from and persisted to
            max_payload_chars: Larger import text is rejected as unrecognized
        """
        self.store = store
        self.max_payload_chars = max_payload_chars
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_history(self) -> str:
        """Compressed DISNEY_H: export of stored history."""
        entries = self.store.get_history()
        payload = codec.encode_history(entries)
        log_export(DataKind.HISTORY.value, len(entries), len(payload))
        return payload

    def export_notes(self) -> str:
        """Compressed DISNEY_N: export of stored notes."""
        notes = self.store.get_notes()
        payload = codec.encode_notes(notes)
        log_export(DataKind.NOTES.value, len(notes), len(payload))
        return payload

    def export_history_json(self) -> str:
        return codec.export_history_json(self.store.get_history())

    def export_notes_json(self) -> str:
        return codec.export_notes_json(self.store.get_notes())

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    def import_any(
        self,
        text: str,
        strategy: Union[ImportStrategy, str] = ImportStrategy.MERGE
    ) -> ImportResult:
        """
        Detect, decode, reconcile and persist any supported payload.

        Never raises: every failure is reported through ImportResult.

        Args:
            text: Raw payload (compressed or legacy JSON)
            strategy: REPLACE or MERGE

        Returns:
            ImportResult with kind and decoded record count, or a failure reason
        """
        try:
            strategy = ImportStrategy.parse(strategy)
        except ValueError as e:
            log_import_failed(str(e), DataType.UNKNOWN.value, e)
            return ImportResult.failed(str(e))

        if isinstance(text, str) and len(text) > self.max_payload_chars:
            log_import_failed(UNRECOGNIZED_FORMAT, DataType.UNKNOWN.value)
            return ImportResult.failed(UNRECOGNIZED_FORMAT)

        data_type = detect(text)
        if data_type is DataType.UNKNOWN:
            log_import_failed(UNRECOGNIZED_FORMAT, data_type.value)
            return ImportResult.failed(UNRECOGNIZED_FORMAT)

        kind, decoder = _DECODERS[data_type]
        try:
            records = decoder(text)
        except Exception as e:
            # TransferError is the expected case; anything else is still reported, never raised
            reason = _FAILURE_REASONS[data_type]
            log_import_failed(reason, data_type.value, e)
            return ImportResult.failed(reason)

        try:
            total = self._apply(kind, records, strategy)
        except Exception as e:
            # Storage failures still must not escape to UI callers
            reason = f"Failed to save imported {kind.label}"
            log_import_failed(reason, data_type.value, e)
            return ImportResult.failed(reason)

        log_import_complete(kind.value, len(records), strategy.value, total)
        return ImportResult.ok(kind, len(records))

    def _apply(self, kind: DataKind, records, strategy: ImportStrategy) -> int:
        with self._lock:
            if kind is DataKind.HISTORY:
                history = reconcile_history(self.store.get_history(), records, strategy)
                self.store.save_history(history)
                return len(history)

            notes = reconcile_notes(self.store.get_notes(), records, strategy)
            self.store.save_notes(notes)
            return len(notes)

    # -------------------------------------------------------------------------
    # Local edits
    # -------------------------------------------------------------------------

    def add_history_entry(self, entry: RideHistoryEntry) -> None:
        """Record a finished queue session at the top of the history."""
        with self._lock:
            history = [e for e in self.store.get_history() if e.id != entry.id]
            self.store.save_history([entry] + history)

    def remove_history_entry(self, entry_id: str) -> bool:
        """
        Delete one history entry.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self.store.delete_history_entry(entry_id)

    def set_note(self, entity_id: str, text: Optional[str]) -> None:
        """Create, update or (with empty text) remove the note for an entity."""
        with self._lock:
            notes = self.store.get_notes()
            if text:
                notes[entity_id] = text
            else:
                notes.pop(entity_id, None)
            self.store.save_notes(notes)

    def get_history(self) -> List[RideHistoryEntry]:
        return self.store.get_history()

    def get_notes(self) -> Dict[str, str]:
        return self.store.get_notes()

    def history_stats(self) -> HistoryStats:
        """Totals, average wait and distinct rides over stored history."""
        return HistoryStats.from_entries(self.store.get_history())
