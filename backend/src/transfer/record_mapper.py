"""
Record Mapper
Converts between domain records and their compact wire/JSON representations.

History dialects:
    DIALECT_A (legacy app):  {i: id, r: rideId, n, p, t, e, a: actual, q: 0|1}
    DIALECT_B (web interop): {i: rideId, n, p, t, e?, w?: actual, q?: "lightning"}

Exports are always written in EXPORT_DIALECT. Each incoming record is sniffed
on its own, so a batch mixing both dialects still decodes.

Notes:
    pairs (exported):  [{"i": entityId, "t": text}, ...]
    object (legacy):   {entityId: text, ...}
"""

import enum
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from models.ride_history import (
    QueueType,
    RideHistoryEntry,
    format_timestamp,
    make_entry_id,
)
from transfer.errors import ParseError
from utils.logger import logger, log_record_dropped


class WireDialect(enum.Enum):
    """Compact key schemes for history records."""
    DIALECT_A = "A"
    DIALECT_B = "B"


EXPORT_DIALECT = WireDialect.DIALECT_B

LIGHTNING_WIRE_VALUE = "lightning"

_FRACTION = re.compile(r"(?<=:\d{2})\.\d+")
_COMPACT_OFFSET = re.compile(r"([T ][\d:]+[+-]\d{2})(\d{2})$")


class RecordProblem(Exception):
    """A single record lacks a required field; the record is skipped."""
    pass


# =============================================================================
# Field extraction
# =============================================================================

def _get_str(record: Dict[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _get_int(record: Dict[str, Any], *keys: str) -> Optional[int]:
    """First integer value among keys; bools, floats with fractions and text are ignored."""
    for key in keys:
        value = record.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    return None


def _require_str(record: Dict[str, Any], key: str, label: str) -> str:
    value = _get_str(record, key)
    if value is None:
        raise RecordProblem(f"missing {label}")
    return value


def _require_timestamp(record: Dict[str, Any], key: str) -> datetime:
    timestamp = parse_timestamp(record.get(key))
    if timestamp is None:
        raise RecordProblem("missing or invalid timestamp")
    return timestamp


def _normalize_iso(value: str) -> str:
    """Rewrite JavaScript/RFC 3339 variants into a form fromisoformat accepts on every supported Python."""
    text = value.strip()
    if text[-1:] in ('Z', 'z'):
        text = text[:-1] + '+00:00'
    # Sub-second precision is discarded anyway
    text = _FRACTION.sub('', text)
    return _COMPACT_OFFSET.sub(r'\1:\2', text)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into a naive UTC datetime.

    Accepts fractional seconds of any precision, a Z suffix or a numeric
    offset (+05:00 or +0500).

    Args:
        value: Timestamp string

    Returns:
        Naive UTC datetime, or None if the value cannot be parsed or
        falls outside the representable range once converted to UTC
    """
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = datetime.fromisoformat(_normalize_iso(value))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None

    return parsed.replace(microsecond=0)


def _queue_type(value: Any) -> QueueType:
    if value == 1 and not isinstance(value, bool):
        return QueueType.LIGHTNING_LANE
    if value in (LIGHTNING_WIRE_VALUE, QueueType.LIGHTNING_LANE.value):
        return QueueType.LIGHTNING_LANE
    return QueueType.STANDBY


# =============================================================================
# History: compact wire dialects
# =============================================================================

def sniff_history_dialect(record: Dict[str, Any]) -> WireDialect:
    """Dialect A is the only scheme with a separate `r` ride id key."""
    if 'r' in record:
        return WireDialect.DIALECT_A
    return WireDialect.DIALECT_B


def _from_dialect_a(record: Dict[str, Any]) -> RideHistoryEntry:
    ride_id = _require_str(record, 'r', 'ride id')
    ride_name = _require_str(record, 'n', 'ride name')
    timestamp = _require_timestamp(record, 't')

    return RideHistoryEntry(
        id=_get_str(record, 'i') or make_entry_id(ride_id, timestamp),
        ride_id=ride_id,
        ride_name=ride_name,
        park_name=_get_str(record, 'p') or '',
        timestamp=timestamp,
        expected_wait_minutes=_get_int(record, 'e'),
        actual_wait_minutes=_get_int(record, 'a', 'w'),
        queue_type=_queue_type(record.get('q'))
    )


def _from_dialect_b(record: Dict[str, Any]) -> RideHistoryEntry:
    ride_id = _require_str(record, 'i', 'ride id')
    ride_name = _require_str(record, 'n', 'ride name')
    timestamp = _require_timestamp(record, 't')

    return RideHistoryEntry(
        id=make_entry_id(ride_id, timestamp),
        ride_id=ride_id,
        ride_name=ride_name,
        park_name=_get_str(record, 'p') or '',
        timestamp=timestamp,
        expected_wait_minutes=_get_int(record, 'e'),
        actual_wait_minutes=_get_int(record, 'w', 'a'),
        queue_type=_queue_type(record.get('q'))
    )


def _to_dialect_a(entry: RideHistoryEntry) -> Dict[str, Any]:
    record = {
        'i': entry.id,
        'r': entry.ride_id,
        'n': entry.ride_name,
        'p': entry.park_name,
        't': format_timestamp(entry.timestamp),
        'q': 1 if entry.queue_type is QueueType.LIGHTNING_LANE else 0,
    }
    if entry.expected_wait_minutes is not None:
        record['e'] = entry.expected_wait_minutes
    if entry.actual_wait_minutes is not None:
        record['a'] = entry.actual_wait_minutes
    return record


def _to_dialect_b(entry: RideHistoryEntry) -> Dict[str, Any]:
    record = {
        'i': entry.ride_id,
        'n': entry.ride_name,
        'p': entry.park_name,
        't': format_timestamp(entry.timestamp),
    }
    if entry.expected_wait_minutes is not None:
        record['e'] = entry.expected_wait_minutes
    if entry.actual_wait_minutes is not None:
        record['w'] = entry.actual_wait_minutes
    if entry.queue_type is QueueType.LIGHTNING_LANE:
        record['q'] = LIGHTNING_WIRE_VALUE
    return record


_HISTORY_DECODERS: Dict[WireDialect, Callable[[Dict[str, Any]], RideHistoryEntry]] = {
    WireDialect.DIALECT_A: _from_dialect_a,
    WireDialect.DIALECT_B: _from_dialect_b,
}

_HISTORY_ENCODERS: Dict[WireDialect, Callable[[RideHistoryEntry], Dict[str, Any]]] = {
    WireDialect.DIALECT_A: _to_dialect_a,
    WireDialect.DIALECT_B: _to_dialect_b,
}


def history_to_wire(
    entries: List[RideHistoryEntry],
    dialect: WireDialect = EXPORT_DIALECT
) -> List[Dict[str, Any]]:
    """
    Convert history entries to compact wire records.

    Args:
        entries: History entries
        dialect: Key scheme to write (web interop scheme unless told otherwise)

    Returns:
        List of compact record dicts
    """
    encoder = _HISTORY_ENCODERS[dialect]
    return [encoder(entry) for entry in entries]


def history_from_wire(records: List[Any]) -> List[RideHistoryEntry]:
    """
    Convert compact wire records to history entries.

    Records missing a ride id, ride name or valid timestamp are skipped, as
    are later records that repeat an earlier entry id.

    Args:
        records: Decoded JSON array

    Returns:
        List of RideHistoryEntry in source order
    """
    return _decode_each(
        records,
        kind='history',
        decode=lambda record: _HISTORY_DECODERS[sniff_history_dialect(record)](record)
    )


# =============================================================================
# History: legacy full-key JSON
# =============================================================================

def history_to_json_records(entries: List[RideHistoryEntry]) -> List[Dict[str, Any]]:
    """Convert entries to the legacy full-key JSON shape."""
    records = []
    for entry in entries:
        record = {
            'id': entry.id,
            'rideId': entry.ride_id,
            'rideName': entry.ride_name,
            'parkName': entry.park_name,
            'timestamp': format_timestamp(entry.timestamp),
            'queueType': entry.queue_type.value,
        }
        if entry.expected_wait_minutes is not None:
            record['expectedWaitMinutes'] = entry.expected_wait_minutes
        if entry.actual_wait_minutes is not None:
            record['actualWaitMinutes'] = entry.actual_wait_minutes
        records.append(record)
    return records


def _from_json_record(record: Dict[str, Any]) -> RideHistoryEntry:
    ride_id = _require_str(record, 'rideId', 'rideId')
    ride_name = _require_str(record, 'rideName', 'rideName')
    timestamp = _require_timestamp(record, 'timestamp')

    return RideHistoryEntry(
        id=_get_str(record, 'id') or make_entry_id(ride_id, timestamp),
        ride_id=ride_id,
        ride_name=ride_name,
        park_name=_get_str(record, 'parkName') or '',
        timestamp=timestamp,
        expected_wait_minutes=_get_int(record, 'expectedWaitMinutes'),
        actual_wait_minutes=_get_int(record, 'actualWaitMinutes'),
        queue_type=_queue_type(record.get('queueType'))
    )


def history_from_json_records(records: List[Any]) -> List[RideHistoryEntry]:
    """Convert legacy full-key JSON records, skipping incomplete ones."""
    return _decode_each(records, kind='json_history', decode=_from_json_record)


def _decode_each(
    records: List[Any],
    kind: str,
    decode: Callable[[Dict[str, Any]], RideHistoryEntry]
) -> List[RideHistoryEntry]:
    if not isinstance(records, list):
        raise ParseError(f"Expected a JSON array of records, got {type(records).__name__}")

    entries = []
    seen_ids = set()
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            log_record_dropped(kind, index, "record is not an object")
            continue
        try:
            entry = decode(record)
        except RecordProblem as e:
            log_record_dropped(kind, index, str(e))
            continue
        # Entry ids are unique within a batch; the first occurrence wins
        if entry.id in seen_ids:
            log_record_dropped(kind, index, f"duplicate entry id {entry.id}")
            continue
        seen_ids.add(entry.id)
        entries.append(entry)

    if len(entries) < len(records):
        logger.info(f"Decoded {len(entries)} of {len(records)} {kind} records")

    return entries


# =============================================================================
# Notes
# =============================================================================

def notes_to_wire(notes: Dict[str, str]) -> List[Dict[str, str]]:
    """Convert a notes map to array-of-pairs, ordered by entity id."""
    return [{'i': entity_id, 't': notes[entity_id]} for entity_id in sorted(notes)]


def notes_from_wire(payload: Any) -> Dict[str, str]:
    """
    Convert either notes shape to a notes map.

    An empty note text means "no note", so such entries are left out.

    Args:
        payload: Decoded JSON (array of pairs or object map)

    Returns:
        Dict of entity id to note text

    Raises:
        ParseError: If payload is neither an array nor an object
    """
    if isinstance(payload, list):
        return _notes_from_pairs(payload)
    if isinstance(payload, dict):
        return _notes_from_object(payload)
    raise ParseError(f"Expected notes array or object, got {type(payload).__name__}")


def _notes_from_pairs(pairs: List[Any]) -> Dict[str, str]:
    notes = {}
    for index, pair in enumerate(pairs):
        if not isinstance(pair, dict):
            log_record_dropped('notes', index, "pair is not an object")
            continue
        entity_id = pair.get('i')
        text = pair.get('t')
        if not isinstance(entity_id, str) or not entity_id or not isinstance(text, str):
            log_record_dropped('notes', index, "pair missing id or text")
            continue
        if not text:
            log_record_dropped('notes', index, f"note for {entity_id} is empty")
            continue
        notes[entity_id] = text
    return notes


def _notes_from_object(mapping: Dict[str, Any]) -> Dict[str, str]:
    notes = {}
    for index, (entity_id, text) in enumerate(mapping.items()):
        if not isinstance(text, str) or not text:
            log_record_dropped('notes', index, f"note for {entity_id} is empty or not text")
            continue
        notes[entity_id] = text
    return notes
