"""
Codec Facade
Encodes domain records to prefixed wire strings and decodes them back.

Wire format:
    DISNEY_H:<url-safe-base64(gzip(JSON array of compact history records))>
    DISNEY_N:<url-safe-base64(gzip(JSON array of {i, t} note pairs))>

Short prefixes H: / N: are accepted on decode. Unprefixed text is only ever
treated as legacy JSON (see decode_json_history / decode_json_notes).
"""

import enum
import json
from typing import Any, Dict, List, Union

from models.ride_history import RideHistoryEntry
from transfer import base64url, compression
from transfer.errors import ParseError, SchemaError, UnrecognizedFormat
from transfer.format_detector import (
    HISTORY_PREFIX,
    HISTORY_PREFIXES,
    NOTES_PREFIX,
    NOTES_PREFIXES,
    strip_prefix,
)
from transfer.record_mapper import (
    history_from_json_records,
    history_from_wire,
    history_to_json_records,
    history_to_wire,
    notes_from_wire,
    notes_to_wire,
)


class DataKind(enum.Enum):
    """Kind of data carried by a payload."""
    HISTORY = "history"
    NOTES = "notes"

    @property
    def label(self) -> str:
        """Human-readable plural used in import confirmations."""
        return "history entries" if self is DataKind.HISTORY else "notes"


# Matches JSON.stringify output so payloads are byte-identical to the web client
_WIRE_SEPARATORS = (',', ':')


def _dump_wire_json(payload: Any) -> bytes:
    return json.dumps(payload, separators=_WIRE_SEPARATORS, ensure_ascii=False).encode('utf-8')


def _load_json(data: Union[str, bytes]) -> Any:
    try:
        return json.loads(data)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"Invalid JSON: {e}")


def _pack(prefix: str, payload: Any) -> str:
    return prefix + base64url.encode(compression.compress(_dump_wire_json(payload)))


def _unpack(text: str, prefixes: tuple) -> Any:
    try:
        body = strip_prefix(text, prefixes)
    except ValueError as e:
        raise UnrecognizedFormat(str(e))
    return _load_json(compression.decompress(base64url.decode(body)))


# =============================================================================
# Compressed format
# =============================================================================

def encode_history(entries: List[RideHistoryEntry]) -> str:
    """Encode history entries as a DISNEY_H: wire string."""
    return _pack(HISTORY_PREFIX, history_to_wire(entries))


def encode_notes(notes: Dict[str, str]) -> str:
    """Encode notes as a DISNEY_N: wire string."""
    return _pack(NOTES_PREFIX, notes_to_wire(notes))


def encode(kind: DataKind, records) -> str:
    """
    Encode records of the given kind in the compressed interop format.

    Args:
        kind: DataKind.HISTORY (list of entries) or DataKind.NOTES (dict)
        records: Records to encode

    Returns:
        Prefixed wire string
    """
    if kind is DataKind.HISTORY:
        return encode_history(records)
    return encode_notes(records)


def decode_history(text: str) -> List[RideHistoryEntry]:
    """
    Decode a DISNEY_H: / H: wire string.

    Args:
        text: Wire string

    Returns:
        Decoded entries (incomplete records skipped)

    Raises:
        UnrecognizedFormat: Missing history prefix
        DecodeError: Body is not valid URL-safe base64
        CompressionError: Body is not a valid compressed stream
        ParseError: Decompressed body is not a JSON array
        SchemaError: Records were present but none were usable
    """
    payload = _unpack(text, HISTORY_PREFIXES)
    entries = history_from_wire(payload)
    if payload and not entries:
        raise SchemaError(f"None of {len(payload)} history records had the required fields")
    return entries


def decode_notes(text: str) -> Dict[str, str]:
    """
    Decode a DISNEY_N: / N: wire string.

    Raises:
        Same taxonomy as decode_history
    """
    payload = _unpack(text, NOTES_PREFIXES)
    notes = notes_from_wire(payload)
    if payload and not notes:
        raise SchemaError(f"None of {len(payload)} note records had the required fields")
    return notes


# =============================================================================
# Legacy JSON format
# =============================================================================

def decode_json_history(text: str) -> List[RideHistoryEntry]:
    """
    Decode a bare JSON array of full-key history records.

    Raises:
        ParseError: Text is not a JSON array
        SchemaError: Records were present but none were usable
    """
    payload = _load_json(text.strip())
    entries = history_from_json_records(payload)
    if payload and not entries:
        raise SchemaError(f"None of {len(payload)} JSON history records had the required fields")
    return entries


def decode_json_notes(text: str) -> Dict[str, str]:
    """
    Decode a bare JSON object of entity id to note text.

    Raises:
        ParseError: Text is not a JSON object
    """
    payload = _load_json(text.strip())
    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object of notes, got {type(payload).__name__}")
    return notes_from_wire(payload)


def export_history_json(entries: List[RideHistoryEntry]) -> str:
    """Pretty-printed legacy JSON export of history."""
    return json.dumps(history_to_json_records(entries), indent=2, ensure_ascii=False)


def export_notes_json(notes: Dict[str, str]) -> str:
    """Pretty-printed legacy JSON export of notes."""
    return json.dumps(dict(sorted(notes.items())), indent=2, ensure_ascii=False)
