"""
Unit Tests: Transfer Service
import_any dispatch, failure reasons, persistence and local edits.
"""

import json
import threading
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from models.ride_history import QueueType, RideHistoryEntry, make_entry_id
from transfer import base64url, compression
from transfer.codec import DataKind, encode_history, encode_notes
from transfer.reconciler import ImportStrategy
from transfer.store import InMemoryStore
from transfer.transfer_service import (
    FAILED_DECODE_HISTORY,
    FAILED_DECODE_NOTES,
    FAILED_PARSE_JSON_HISTORY,
    FAILED_PARSE_JSON_NOTES,
    UNRECOGNIZED_FORMAT,
    ImportResult,
    TransferService,
)


class TestImportResult:
    """Tests for ImportResult."""

    def test_ok_message(self):
        result = ImportResult.ok(DataKind.HISTORY, 3)
        assert result.success
        assert result.message == "Imported 3 history entries"
        assert result.to_dict() == {"success": True, "kind": "history", "count": 3}

    def test_failed_message(self):
        result = ImportResult.failed(UNRECOGNIZED_FORMAT)
        assert not result.success
        assert result.message == "Unrecognized data format"
        assert result.to_dict() == {"success": False, "error": "Unrecognized data format"}


class TestImportAny:
    """Tests for TransferService.import_any."""

    def test_matterhorn_scenario(self, transfer_service):
        """Export one entry, import it with replace into an empty store."""
        original = RideHistoryEntry(
            id='u1',
            ride_id='r7',
            ride_name='Matterhorn',
            park_name='Disneyland',
            timestamp=datetime(2024, 6, 1, 20, 0, 0),
            expected_wait_minutes=45,
            actual_wait_minutes=50,
            queue_type=QueueType.STANDBY
        )
        payload = encode_history([original])

        result = transfer_service.import_any(payload, ImportStrategy.REPLACE)

        assert result == ImportResult.ok(DataKind.HISTORY, 1)
        stored = transfer_service.get_history()
        assert len(stored) == 1
        assert stored[0].id
        assert stored[0].id == make_entry_id('r7', original.timestamp)
        assert stored[0].with_id('u1') == original

    def test_compressed_notes(self, transfer_service, sample_notes):
        result = transfer_service.import_any(encode_notes(sample_notes), 'replace')

        assert result == ImportResult.ok(DataKind.NOTES, 3)
        assert transfer_service.get_notes() == sample_notes

    def test_json_history(self, transfer_service):
        text = '[{"rideId":"r1","rideName":"Space Mountain","parkName":"Magic Kingdom","timestamp":"2024-06-01T14:30:00Z"}]'

        result = transfer_service.import_any(text)

        assert result == ImportResult.ok(DataKind.HISTORY, 1)
        assert transfer_service.get_history()[0].ride_name == 'Space Mountain'

    def test_json_notes(self, transfer_service):
        result = transfer_service.import_any('{"r1":"great ride"}')

        assert result == ImportResult.ok(DataKind.NOTES, 1)
        assert transfer_service.get_notes() == {'r1': 'great ride'}

    @pytest.mark.parametrize("text,reason", [
        ("not json at all", UNRECOGNIZED_FORMAT),
        ("", UNRECOGNIZED_FORMAT),
        ("DISNEY_H:abc", FAILED_DECODE_HISTORY),
        ("H:%%%", FAILED_DECODE_HISTORY),
        ("DISNEY_N:abc", FAILED_DECODE_NOTES),
        ('[{"rideName":"Missing id and timestamp"}]', FAILED_PARSE_JSON_HISTORY),
    ])
    def test_failure_reasons(self, transfer_service, text, reason):
        result = transfer_service.import_any(text)

        assert not result.success
        assert result.error == reason
        assert result.count == 0

    def test_json_notes_failure_reason(self, transfer_service, monkeypatch):
        """A notes payload that detects as JSON but fails to decode reports the JSON notes reason."""
        from transfer import transfer_service as module
        from transfer.errors import ParseError
        from transfer.format_detector import DataType

        def broken(text):
            raise ParseError("boom")

        monkeypatch.setitem(module._DECODERS, DataType.JSON_NOTES, (DataKind.NOTES, broken))

        result = transfer_service.import_any('{"r1":"x"}')

        assert result.error == FAILED_PARSE_JSON_NOTES

    def test_corrupt_input_leaves_store_untouched(self, sample_history):
        store = InMemoryStore(history=sample_history)
        service = TransferService(store)

        result = service.import_any("DISNEY_H:" + "A" * 40, ImportStrategy.REPLACE)

        assert not result.success
        assert store.get_history() == sample_history

    def test_merge_history_is_idempotent(self, sample_history):
        service = TransferService(InMemoryStore(history=sample_history))

        result = service.import_any(encode_history(sample_history), ImportStrategy.MERGE)

        assert result.success
        assert service.get_history() == sample_history

    def test_merge_notes_keeps_existing(self):
        service = TransferService(InMemoryStore(notes={'a': 'old'}))

        service.import_any(encode_notes({'a': 'new', 'b': 'added'}), ImportStrategy.MERGE)

        assert service.get_notes() == {'a': 'old', 'b': 'added'}

    def test_replace_with_empty_history_clears(self, sample_history):
        service = TransferService(InMemoryStore(history=sample_history))

        result = service.import_any(encode_history([]), ImportStrategy.REPLACE)

        assert result == ImportResult.ok(DataKind.HISTORY, 0)
        assert service.get_history() == []

    def test_invalid_strategy_reported(self, transfer_service, sample_history):
        result = transfer_service.import_any(encode_history(sample_history), 'append')

        assert not result.success
        assert 'Unknown import strategy' in result.error

    def test_oversized_payload_rejected(self, memory_store):
        service = TransferService(memory_store, max_payload_chars=10)

        result = service.import_any('{"r1":"a long note"}')

        assert result.error == UNRECOGNIZED_FORMAT
        assert memory_store.get_notes() == {}

    def test_storage_failure_does_not_raise(self, sample_notes):
        store = MagicMock()
        store.get_notes.return_value = {}
        store.save_notes.side_effect = RuntimeError("disk full")
        service = TransferService(store)

        result = service.import_any(encode_notes(sample_notes))

        assert not result.success
        assert result.error == "Failed to save imported notes"

    def test_non_string_input_does_not_raise(self, transfer_service):
        result = transfer_service.import_any(None)
        assert result.error == UNRECOGNIZED_FORMAT

    def test_concurrent_merges_lose_nothing(self):
        """Parallel merge imports of disjoint batches all land in the store."""
        service = TransferService(InMemoryStore())
        batches = [
            [
                RideHistoryEntry.create(
                    ride_id=f'r{batch}-{i}', ride_name='Ride', park_name='Park',
                    timestamp=datetime(2024, 6, 1 + batch, 10, i, 0)
                )
                for i in range(20)
            ]
            for batch in range(8)
        ]
        payloads = [encode_history(batch) for batch in batches]

        threads = [
            threading.Thread(target=service.import_any, args=(payload, ImportStrategy.MERGE))
            for payload in payloads
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(service.get_history()) == 160


class TestExport:
    """Tests for export methods."""

    def test_export_history_roundtrip(self, sample_history):
        source = TransferService(InMemoryStore(history=sample_history))
        target = TransferService(InMemoryStore())

        target.import_any(source.export_history(), ImportStrategy.REPLACE)

        assert target.get_history() == sample_history

    def test_export_notes_roundtrip(self, sample_notes):
        source = TransferService(InMemoryStore(notes=sample_notes))
        target = TransferService(InMemoryStore())

        target.import_any(source.export_notes(), ImportStrategy.REPLACE)

        assert target.get_notes() == sample_notes

    def test_export_json_formats(self, sample_history, sample_notes):
        service = TransferService(InMemoryStore(history=sample_history, notes=sample_notes))
        target = TransferService(InMemoryStore())

        assert target.import_any(service.export_history_json()).count == 3
        assert target.import_any(service.export_notes_json()).count == 3
        assert target.get_history() == sample_history
        assert target.get_notes() == sample_notes

    def test_export_empty_json(self, transfer_service):
        assert transfer_service.export_history_json() == '[]'
        assert transfer_service.export_notes_json() == '{}'


class TestLocalEdits:
    """Tests for add/remove history and set_note."""

    def test_add_history_entry_goes_first(self, transfer_service, sample_history, sample_entry):
        transfer_service.store.save_history(sample_history)

        transfer_service.add_history_entry(sample_entry)

        assert transfer_service.get_history()[0] == sample_entry
        assert len(transfer_service.get_history()) == 4

    def test_remove_history_entry(self, transfer_service, sample_history):
        transfer_service.store.save_history(sample_history)

        assert transfer_service.remove_history_entry(sample_history[1].id) is True
        assert transfer_service.remove_history_entry('missing') is False
        assert [e.id for e in transfer_service.get_history()] == [sample_history[0].id, sample_history[2].id]

    def test_set_note_and_clear(self, transfer_service):
        transfer_service.set_note('r1', 'bring a poncho')
        assert transfer_service.get_notes() == {'r1': 'bring a poncho'}

        transfer_service.set_note('r1', '')
        assert transfer_service.get_notes() == {}

        transfer_service.set_note('r2', None)
        assert transfer_service.get_notes() == {}


def _wire(prefix, payload):
    body = compression.compress(json.dumps(payload).encode('utf-8'))
    return prefix + base64url.encode(body)


class TestImportEdgeRecords:
    """Records that are well-formed JSON but unusable, repeated or empty."""

    def test_out_of_range_timestamp_drops_only_that_record(self, transfer_service):
        text = _wire("DISNEY_H:", [
            {"i": "r1", "n": "Ride", "t": "0001-01-01T00:00:00+05:00"},
            {"i": "r7", "n": "Matterhorn", "t": "2024-06-01T20:00:00Z", "w": 50},
        ])

        result = transfer_service.import_any(text, ImportStrategy.REPLACE)

        assert result.success
        assert result.count == 1
        assert transfer_service.get_history()[0].ride_id == 'r7'

    def test_out_of_range_json_timestamp_is_a_failure_result(self, transfer_service):
        text = json.dumps([
            {"rideId": "r1", "rideName": "Ride", "timestamp": "9999-12-31T23:59:59-05:00"}
        ])

        result = transfer_service.import_any(text)

        assert not result.success
        assert result.error == FAILED_PARSE_JSON_HISTORY

    def test_unexpected_decoder_exception_is_reported(self, transfer_service, monkeypatch):
        from transfer import transfer_service as module
        from transfer.format_detector import DataType

        def broken(text):
            raise OverflowError("date value out of range")

        monkeypatch.setitem(module._DECODERS, DataType.COMPRESSED_HISTORY, (DataKind.HISTORY, broken))

        result = transfer_service.import_any("DISNEY_H:abc")

        assert result.error == FAILED_DECODE_HISTORY

    def test_repeated_record_replace_keeps_ids_unique(self, transfer_service):
        record = {"i": "r7", "n": "Matterhorn", "t": "2024-06-01T20:00:00Z", "w": 50}

        result = transfer_service.import_any(_wire("DISNEY_H:", [record, record]), ImportStrategy.REPLACE)

        history = transfer_service.get_history()
        assert result.count == 1
        assert len(history) == 1
        assert history[0].id == make_entry_id('r7', datetime(2024, 6, 1, 20, 0, 0))

    def test_empty_notes_not_counted_or_stored(self, transfer_service):
        text = _wire("DISNEY_N:", [{"i": "a", "t": "keep"}, {"i": "b", "t": ""}])

        result = transfer_service.import_any(text, ImportStrategy.REPLACE)

        assert result.count == 1
        assert transfer_service.get_notes() == {"a": "keep"}


class TestRoundTripMerge:
    """Importing your own export must not grow the store."""

    def test_export_then_merge_with_non_derived_id(self):
        entry = RideHistoryEntry(
            id='u1',
            ride_id='r7',
            ride_name='Matterhorn',
            park_name='Disneyland',
            timestamp=datetime(2024, 6, 1, 20, 0, 0),
            actual_wait_minutes=50
        )
        service = TransferService(InMemoryStore(history=[entry]))

        result = service.import_any(service.export_history(), ImportStrategy.MERGE)

        assert result.count == 1
        assert service.get_history() == [entry]

    def test_export_then_merge_sample_history(self, sample_history):
        service = TransferService(InMemoryStore(history=sample_history))

        service.import_any(service.export_history(), ImportStrategy.MERGE)

        assert service.get_history() == sample_history


class TestHistoryStats:
    """Tests for TransferService.history_stats."""

    def test_empty_history(self, transfer_service):
        stats = transfer_service.history_stats()

        assert stats.total_rides == 0
        assert stats.total_wait_minutes == 0
        assert stats.average_wait_minutes == 0
        assert stats.unique_rides == 0

    def test_sample_history(self, transfer_service, sample_history):
        transfer_service.store.save_history(sample_history)

        stats = transfer_service.history_stats()

        # Waits 12 and 50; the entry without a measured wait is left out
        assert stats.total_rides == 3
        assert stats.total_wait_minutes == 62
        assert stats.average_wait_minutes == 31
        assert stats.unique_rides == 3
