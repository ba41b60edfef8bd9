"""
Unit Tests: Transfer CLI
"""

import io
import json

import pytest

from scripts.transfer_cli import build_parser, main
from transfer.codec import encode_history, encode_notes
from transfer.transfer_service import UNRECOGNIZED_FORMAT


class TestParser:

    def test_import_defaults_to_merge(self):
        args = build_parser().parse_args(['import', 'backup.txt'])
        assert args.strategy == 'merge'

    def test_rejects_unknown_strategy(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['import', 'backup.txt', '--strategy', 'append'])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestExport:

    def test_export_history(self, capsys, transfer_service, memory_store, sample_history):
        memory_store.save_history(sample_history)

        assert main(['export', 'history'], service=transfer_service) == 0

        assert capsys.readouterr().out.strip() == encode_history(sample_history)

    def test_export_notes_json(self, capsys, transfer_service, memory_store, sample_notes):
        memory_store.save_notes(sample_notes)

        assert main(['export', 'notes', '--json'], service=transfer_service) == 0

        assert json.loads(capsys.readouterr().out) == sample_notes


class TestImport:

    def test_import_file(self, tmp_path, capsys, transfer_service, memory_store, sample_history):
        payload = tmp_path / 'backup.txt'
        payload.write_text(encode_history(sample_history), encoding='utf-8')

        assert main(['import', str(payload)], service=transfer_service) == 0

        assert capsys.readouterr().out.strip() == 'Imported 3 history entries'
        assert memory_store.get_history() == sample_history

    def test_import_stdin_replace(self, monkeypatch, capsys, transfer_service, memory_store, sample_notes):
        memory_store.save_notes({'old': 'note'})
        monkeypatch.setattr('sys.stdin', io.StringIO(encode_notes(sample_notes)))

        assert main(['import', '-', '--strategy', 'replace'], service=transfer_service) == 0

        assert memory_store.get_notes() == sample_notes
        assert 'Imported 3 notes' in capsys.readouterr().out

    def test_import_failure_exits_1(self, tmp_path, capsys, transfer_service):
        payload = tmp_path / 'junk.txt'
        payload.write_text('not a payload', encoding='utf-8')

        assert main(['import', str(payload)], service=transfer_service) == 1

        assert capsys.readouterr().err.strip() == f'Error: {UNRECOGNIZED_FORMAT}'

    def test_missing_file_exits_1(self, tmp_path, capsys, transfer_service):
        assert main(['import', str(tmp_path / 'missing.txt')], service=transfer_service) == 1

        assert 'cannot read' in capsys.readouterr().err


class TestDetect:

    def test_detect_file(self, tmp_path, capsys, transfer_service):
        payload = tmp_path / 'notes.json'
        payload.write_text('{"r1": "note"}', encoding='utf-8')

        assert main(['detect', str(payload)], service=transfer_service) == 0

        assert capsys.readouterr().out.strip() == 'json_notes'
