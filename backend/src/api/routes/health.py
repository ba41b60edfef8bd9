"""
Ride Tracker Transfer - Health Check Endpoint
Reports API status and whether the local store can be read.
"""

from flask import Blueprint, current_app, jsonify
from datetime import datetime, timezone

from utils.logger import logger

health_bp = Blueprint('health', __name__)


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Response:
        200 OK: Store readable
        503 Service Unavailable: Store read failed
    """
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + 'Z',
        "api_version": "1.0.0",
        "checks": {}
    }

    service = current_app.extensions['transfer_service']
    try:
        history_count = len(service.get_history())
        notes_count = len(service.get_notes())
        health_data["checks"]["store"] = {
            "status": "healthy",
            "history_entries": history_count,
            "notes": notes_count
        }
    except Exception as e:
        logger.error(f"Health check store read failed: {e}")
        health_data["status"] = "unhealthy"
        health_data["checks"]["store"] = {
            "status": "unhealthy",
            "message": str(e)
        }
        return jsonify(health_data), 503

    return jsonify(health_data), 200
