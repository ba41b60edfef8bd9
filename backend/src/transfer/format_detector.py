"""
Format Detector
Classifies raw import text before any decoding is attempted.
"""

import enum
import json
from typing import Any

HISTORY_PREFIX = "DISNEY_H:"
NOTES_PREFIX = "DISNEY_N:"
HISTORY_PREFIX_SHORT = "H:"
NOTES_PREFIX_SHORT = "N:"

HISTORY_PREFIXES = (HISTORY_PREFIX, HISTORY_PREFIX_SHORT)
NOTES_PREFIXES = (NOTES_PREFIX, NOTES_PREFIX_SHORT)

# Keys that mark a JSON object as a ride history entry
RIDE_KEYS = ('rideId', 'rideName')


class DataType(enum.Enum):
    """Payload categories recognized on import."""
    COMPRESSED_HISTORY = "compressed_history"
    COMPRESSED_NOTES = "compressed_notes"
    JSON_HISTORY = "json_history"
    JSON_NOTES = "json_notes"
    UNKNOWN = "unknown"


def detect(text: Any) -> DataType:
    """
    Classify import text into one of the DataType categories.

    Order of checks:
        1. History prefix (long or short form)
        2. Notes prefix (long or short form)
        3. JSON array of objects where any object carries rideId or rideName
        4. JSON object whose values are all strings
        5. Anything else is UNKNOWN

    Never raises; any parse failure falls through to UNKNOWN.

    Args:
        text: Raw text from clipboard, file or QR scan

    Returns:
        DataType
    """
    if not isinstance(text, str):
        return DataType.UNKNOWN

    trimmed = text.strip()

    if trimmed.startswith(HISTORY_PREFIXES):
        return DataType.COMPRESSED_HISTORY
    if trimmed.startswith(NOTES_PREFIXES):
        return DataType.COMPRESSED_NOTES

    try:
        parsed = json.loads(trimmed)
    except (ValueError, RecursionError):
        return DataType.UNKNOWN

    if is_history_array(parsed):
        return DataType.JSON_HISTORY
    if is_notes_object(parsed):
        return DataType.JSON_NOTES

    return DataType.UNKNOWN


def is_history_array(value: Any) -> bool:
    """True for a non-empty array of objects where at least one looks like a ride entry."""
    if not isinstance(value, list) or not value:
        return False
    if not all(isinstance(item, dict) for item in value):
        return False
    return any(key in item for item in value for key in RIDE_KEYS)


def is_notes_object(value: Any) -> bool:
    return isinstance(value, dict) and all(isinstance(v, str) for v in value.values())


def strip_prefix(text: str, prefixes: tuple) -> str:
    """
    Remove the first matching prefix from trimmed text.

    Raises:
        ValueError: If none of the prefixes match
    """
    trimmed = text.strip()
    for prefix in prefixes:
        if trimmed.startswith(prefix):
            return trimmed[len(prefix):]
    raise ValueError(f"Text does not start with any of {prefixes}")
