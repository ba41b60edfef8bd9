"""
Ride Tracker Transfer - History API Routes
Summary figures for the stored ride history.
"""

from flask import Blueprint, current_app, jsonify

history_bp = Blueprint('history', __name__)


@history_bp.route('/history/stats', methods=['GET'])
def history_stats():
    """
    History statistics.

    Returns:
        JSON {"total_rides", "total_wait_minutes", "average_wait_minutes", "unique_rides"}
    """
    stats = current_app.extensions['transfer_service'].history_stats()
    return jsonify(stats.to_dict()), 200
