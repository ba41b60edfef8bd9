"""
Ride Tracker Transfer - Flask API Application
Export/import endpoints used by the share sheet and the web companion.
"""

import time
from typing import Optional

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from utils.config import FLASK_ENV, FLASK_DEBUG, SECRET_KEY, TRANSFER_MAX_PAYLOAD_CHARS
from utils.logger import logger, log_api_request
from api.routes.health import health_bp
from api.routes.history import history_bp
from api.routes.transfer import transfer_bp
from api.middleware.error_handler import register_error_handlers
from transfer.store import TransferStore
from transfer.transfer_service import TransferService


def create_app(store: Optional[TransferStore] = None) -> Flask:
    """
    Create and configure Flask application.

    Args:
        store: Storage collaborator; defaults to the SQL store on DATABASE_URL

    Returns:
        Configured Flask app instance
    """
    app = Flask(__name__)

    # Configuration
    app.config['ENV'] = FLASK_ENV
    app.config['DEBUG'] = FLASK_DEBUG
    app.config['SECRET_KEY'] = SECRET_KEY
    app.config['JSON_SORT_KEYS'] = False  # Preserve JSON key order
    # Room for the JSON envelope around the largest accepted payload
    app.config['MAX_CONTENT_LENGTH'] = TRANSFER_MAX_PAYLOAD_CHARS * 4 + 1024

    # CORS configuration
    CORS(app, resources={
        r"/api/*": {
            "origins": "*",  # Configure for production
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type"]
        }
    })

    if store is None:
        from database.transfer_store import SqlTransferStore
        store = SqlTransferStore()
    app.extensions['transfer_service'] = TransferService(store)

    # Register blueprints
    app.register_blueprint(health_bp, url_prefix='/api')
    app.register_blueprint(history_bp, url_prefix='/api')
    app.register_blueprint(transfer_bp, url_prefix='/api')

    # Register error handlers
    register_error_handlers(app)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get('request_started')
        if started is not None:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            log_api_request(request.method, request.path, response.status_code, duration_ms)
        return response

    logger.info(f"Flask app created (env={FLASK_ENV}, debug={FLASK_DEBUG})")

    # Root endpoint
    @app.route('/')
    def index():
        """Root endpoint with API information."""
        return jsonify({
            "name": "Ride Tracker Transfer API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health": "/api/health",
                "history_stats": "/api/history/stats",
                "export_history": "/api/transfer/history",
                "export_notes": "/api/transfer/notes",
                "import": "/api/transfer/import",
                "detect": "/api/transfer/detect"
            }
        })

    return app


if __name__ == '__main__':
    # Development server
    app = create_app()
    app.run(
        host='0.0.0.0',
        port=5000,
        debug=FLASK_DEBUG
    )
