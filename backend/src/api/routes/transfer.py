"""
Ride Tracker Transfer - Transfer API Routes
============================================

GET  /transfer/history[?format=json]  → compressed (or legacy JSON) history export
GET  /transfer/notes[?format=json]    → compressed (or legacy JSON) notes export
POST /transfer/import                 → {"text", "strategy"} import into the store
POST /transfer/detect                 → {"text"} payload classification
"""

from flask import Blueprint, abort, current_app, jsonify, request

from transfer.format_detector import detect
from transfer.reconciler import ImportStrategy
from utils.config import TRANSFER_DEFAULT_STRATEGY
from utils.logger import logger

transfer_bp = Blueprint('transfer', __name__)

EXPORT_FORMATS = ('compressed', 'json')


def _service():
    return current_app.extensions['transfer_service']


def _export_format() -> str:
    export_format = request.args.get('format', 'compressed').lower()
    if export_format not in EXPORT_FORMATS:
        abort(400, description=f"Invalid format '{export_format}'. Must be one of: {', '.join(EXPORT_FORMATS)}")
    return export_format


def _request_text() -> str:
    body = request.get_json(silent=True)
    if not isinstance(body, dict) or not isinstance(body.get('text'), str):
        abort(400, description="Request body must be JSON with a 'text' string")
    return body['text']


@transfer_bp.route('/transfer/history', methods=['GET'])
def export_history():
    """
    Export ride history.

    Query Parameters:
        format (str): compressed (default) or json

    Returns:
        JSON {"kind": "history", "format", "payload"}
    """
    export_format = _export_format()
    service = _service()
    if export_format == 'json':
        payload = service.export_history_json()
    else:
        payload = service.export_history()

    return jsonify({"kind": "history", "format": export_format, "payload": payload}), 200


@transfer_bp.route('/transfer/notes', methods=['GET'])
def export_notes():
    """Export notes; same query parameters as history."""
    export_format = _export_format()
    service = _service()
    if export_format == 'json':
        payload = service.export_notes_json()
    else:
        payload = service.export_notes()

    return jsonify({"kind": "notes", "format": export_format, "payload": payload}), 200


@transfer_bp.route('/transfer/import', methods=['POST'])
def import_data():
    """
    Import any supported payload.

    Body:
        text (str): Wire string or legacy JSON
        strategy (str): merge (default from config) or replace

    Returns:
        200 {"success": true, "kind", "count", "message"}
        422 {"success": false, "error", "message"}
    """
    text = _request_text()
    body = request.get_json(silent=True)
    strategy_name = body.get('strategy') or TRANSFER_DEFAULT_STRATEGY

    try:
        strategy = ImportStrategy.parse(strategy_name)
    except ValueError as e:
        abort(400, description=str(e))

    result = _service().import_any(text, strategy)
    response = result.to_dict()
    response["message"] = result.message

    if not result.success:
        logger.info(f"Import rejected: {result.error}")
        return jsonify(response), 422
    return jsonify(response), 200


@transfer_bp.route('/transfer/detect', methods=['POST'])
def detect_format():
    """Classify a payload without importing it."""
    text = _request_text()
    return jsonify({"data_type": detect(text).value}), 200
