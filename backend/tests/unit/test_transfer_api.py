"""
Ride Tracker Transfer - Flask API Unit Tests

Tests Flask application:
- App creation and blueprint registration
- Root and health endpoints
- Export, import and detect endpoints
- Error handlers
"""

import json
from unittest.mock import MagicMock

import pytest

from api.app import create_app
from transfer.codec import encode_history, encode_notes
from transfer.transfer_service import FAILED_DECODE_HISTORY, UNRECOGNIZED_FORMAT


class TestCreateApp:
    """Test Flask app creation and configuration."""

    def test_returns_flask_instance(self, app):
        assert app.name == 'api.app'

    def test_configures_environment(self, app):
        assert 'ENV' in app.config
        assert 'SECRET_KEY' in app.config
        assert app.config['JSON_SORT_KEYS'] is False
        assert app.config['MAX_CONTENT_LENGTH'] > 0

    def test_registers_blueprints(self, app):
        assert 'health' in app.blueprints
        assert 'transfer' in app.blueprints
        assert 'history' in app.blueprints

    def test_attaches_transfer_service(self, app, memory_store):
        assert app.extensions['transfer_service'].store is memory_store


class TestRootAndHealth:

    def test_root_endpoint(self, client):
        response = client.get('/')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'running'
        assert data['endpoints']['import'] == '/api/transfer/import'

    def test_health_reports_store_counts(self, client, memory_store, sample_history):
        memory_store.save_history(sample_history)

        response = client.get('/api/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert data['checks']['store']['history_entries'] == 3

    def test_health_unavailable_when_store_fails(self):
        store = MagicMock()
        store.get_history.side_effect = RuntimeError("disk gone")
        client = create_app(store=store).test_client()

        response = client.get('/api/health')

        assert response.status_code == 503
        assert response.get_json()['status'] == 'unhealthy'


class TestExportEndpoints:

    def test_export_history_compressed(self, client, memory_store, sample_history):
        memory_store.save_history(sample_history)

        response = client.get('/api/transfer/history')

        assert response.status_code == 200
        data = response.get_json()
        assert data['kind'] == 'history'
        assert data['format'] == 'compressed'
        assert data['payload'] == encode_history(sample_history)

    def test_export_notes_json(self, client, memory_store, sample_notes):
        memory_store.save_notes(sample_notes)

        response = client.get('/api/transfer/notes?format=json')

        assert response.status_code == 200
        assert json.loads(response.get_json()['payload']) == sample_notes

    def test_export_empty_history(self, client):
        response = client.get('/api/transfer/history')

        assert response.get_json()['payload'].startswith('DISNEY_H:')

    def test_invalid_format_returns_400(self, client):
        response = client.get('/api/transfer/history?format=xml')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Bad Request'


class TestImportEndpoint:

    def test_import_history(self, client, memory_store, sample_history):
        response = client.post('/api/transfer/import', json={'text': encode_history(sample_history)})

        assert response.status_code == 200
        data = response.get_json()
        assert data == {
            'success': True,
            'kind': 'history',
            'count': 3,
            'message': 'Imported 3 history entries'
        }
        assert memory_store.get_history() == sample_history

    def test_import_notes_replace(self, client, memory_store, sample_notes):
        memory_store.save_notes({'old': 'gone after replace'})

        response = client.post('/api/transfer/import', json={
            'text': encode_notes(sample_notes),
            'strategy': 'replace'
        })

        assert response.status_code == 200
        assert memory_store.get_notes() == sample_notes

    def test_unrecognized_payload_returns_422(self, client):
        response = client.post('/api/transfer/import', json={'text': 'hello'})

        assert response.status_code == 422
        data = response.get_json()
        assert data['success'] is False
        assert data['error'] == UNRECOGNIZED_FORMAT
        assert data['message'] == UNRECOGNIZED_FORMAT

    def test_corrupt_payload_returns_422(self, client):
        response = client.post('/api/transfer/import', json={'text': 'H:%%%'})

        assert response.status_code == 422
        assert response.get_json()['error'] == FAILED_DECODE_HISTORY

    def test_invalid_strategy_returns_400(self, client):
        response = client.post('/api/transfer/import', json={'text': 'H:', 'strategy': 'append'})

        assert response.status_code == 400
        assert 'append' in response.get_json()['message']

    @pytest.mark.parametrize('body', [None, {}, {'text': 5}])
    def test_missing_text_returns_400(self, client, body):
        response = client.post('/api/transfer/import', json=body)

        assert response.status_code == 400


class TestDetectEndpoint:

    @pytest.mark.parametrize('text,expected', [
        ('DISNEY_H:abc', 'compressed_history'),
        ('N:abc', 'compressed_notes'),
        ('[{"rideId":"r1"}]', 'json_history'),
        ('{"r1":"note"}', 'json_notes'),
        ('42', 'unknown'),
    ])
    def test_detect(self, client, text, expected):
        response = client.post('/api/transfer/detect', json={'text': text})

        assert response.status_code == 200
        assert response.get_json() == {'data_type': expected}


class TestErrorHandlers:

    def test_404_returns_json(self, client):
        response = client.get('/api/nope')

        assert response.status_code == 404
        assert response.get_json()['error'] == 'Not Found'

    def test_405_returns_json(self, client):
        response = client.get('/api/transfer/import')

        assert response.status_code == 405
        assert response.get_json()['error'] == 'Method Not Allowed'


class TestHistoryStatsEndpoint:

    def test_stats_empty(self, client):
        response = client.get('/api/history/stats')

        assert response.status_code == 200
        assert response.get_json() == {
            'total_rides': 0,
            'total_wait_minutes': 0,
            'average_wait_minutes': 0,
            'unique_rides': 0
        }

    def test_stats_over_stored_history(self, client, memory_store, sample_history):
        memory_store.save_history(sample_history)

        data = client.get('/api/history/stats').get_json()

        assert data['total_rides'] == 3
        assert data['total_wait_minutes'] == 62
        assert data['average_wait_minutes'] == 31
        assert data['unique_rides'] == 3
