"""
Ride Tracker - Transfer Module
Compressed and legacy JSON exchange of ride history and notes.
"""

from transfer.errors import (
    TransferError,
    CompressionError,
    DecodeError,
    ParseError,
    SchemaError,
    UnrecognizedFormat
)
from transfer.format_detector import DataType, detect
from transfer.reconciler import ImportStrategy, reconcile, reconcile_history, reconcile_notes
from transfer.codec import DataKind, encode, decode_history, decode_notes
from transfer.store import TransferStore, InMemoryStore
from transfer.transfer_service import TransferService, ImportResult

__all__ = [
    # Errors
    "TransferError",
    "CompressionError",
    "DecodeError",
    "ParseError",
    "SchemaError",
    "UnrecognizedFormat",
    # Format detection
    "DataType",
    "detect",
    # Reconciliation
    "ImportStrategy",
    "reconcile",
    "reconcile_history",
    "reconcile_notes",
    # Codec
    "DataKind",
    "encode",
    "decode_history",
    "decode_notes",
    # Service
    "TransferStore",
    "InMemoryStore",
    "TransferService",
    "ImportResult",
]
