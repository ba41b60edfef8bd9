"""
Import Reconciler
Combines imported records with existing local state. Pure: inputs are
never mutated, a new collection is always returned.
"""

import enum
from typing import Dict, List, Mapping, Sequence, Tuple, Union

from models.ride_history import RideHistoryEntry, make_entry_id


class ImportStrategy(enum.Enum):
    """How imported data is combined with what is already stored."""
    REPLACE = "replace"
    MERGE = "merge"

    @classmethod
    def parse(cls, value: Union[str, 'ImportStrategy']) -> 'ImportStrategy':
        """
        Resolve a strategy from its name.

        Raises:
            ValueError: If value is not a known strategy
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown import strategy: {value!r} (expected 'merge' or 'replace')")


def _identity_keys(entry: RideHistoryEntry) -> Tuple[str, str]:
    """The stored id plus the id the interop dialect would derive for the same ride and second."""
    return entry.id, make_entry_id(entry.ride_id, entry.timestamp)


def reconcile_history(
    existing: Sequence[RideHistoryEntry],
    incoming: Sequence[RideHistoryEntry],
    strategy: ImportStrategy
) -> List[RideHistoryEntry]:
    """
    Apply imported history to existing history.

    REPLACE returns exactly the incoming entries. MERGE keeps every existing
    entry, appends incoming entries not yet present (the first occurrence
    wins) and sorts newest first. An entry counts as present when its id
    matches, or when it logs the same ride at the same second as a kept
    entry; ids are not carried by every dialect, so an entry exported and
    imported again may come back under its derived id.

    Args:
        existing: Entries currently stored
        incoming: Decoded entries
        strategy: REPLACE or MERGE

    Returns:
        New list of entries
    """
    if strategy is ImportStrategy.REPLACE:
        return list(incoming)

    seen = set()
    for entry in existing:
        seen.update(_identity_keys(entry))

    merged = list(existing)
    for entry in incoming:
        keys = _identity_keys(entry)
        if seen.intersection(keys):
            continue
        seen.update(keys)
        merged.append(entry)

    merged.sort(key=lambda entry: entry.timestamp, reverse=True)
    return merged


def reconcile_notes(
    existing: Mapping[str, str],
    incoming: Mapping[str, str],
    strategy: ImportStrategy
) -> Dict[str, str]:
    """
    Apply imported notes to existing notes.

    Unlike history, MERGE never overwrites: an incoming note is only added
    when no note exists for that entity.
    """
    if strategy is ImportStrategy.REPLACE:
        return dict(incoming)

    merged = dict(existing)
    for entity_id, text in incoming.items():
        if entity_id not in merged:
            merged[entity_id] = text
    return merged


def reconcile(existing, incoming, strategy: ImportStrategy):
    """
    Reconcile either kind of collection; mappings are notes, sequences are history.

    Raises:
        TypeError: If existing and incoming are not the same kind of collection
    """
    if isinstance(existing, Mapping) and isinstance(incoming, Mapping):
        return reconcile_notes(existing, incoming, strategy)
    if _is_record_sequence(existing) and _is_record_sequence(incoming):
        return reconcile_history(existing, incoming, strategy)
    raise TypeError(
        f"Cannot reconcile {type(existing).__name__} with {type(incoming).__name__}"
    )


def _is_record_sequence(value) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
