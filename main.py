"""
Tripilot – main application entry point

* Flask app + Socket.IO (threading mode, no eventlet/gevent required).
* REST routes live under `/travel`, Socket.IO events under the `/travel/ws`
  namespace. The assistant bridge and the browser share the same session.
"""

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

from tripilot.api.actions.session_manager import SessionManager
from tripilot.api.config import get_port, get_secret_key, get_websocket_config
from tripilot.routes import NAMESPACE
from tripilot.routes.travel import create_travel_blueprint
from tripilot.routes.websocket import register_websocket_handlers

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(session_manager=None, testing=False):
    """Build the Flask app, its Socket.IO server and the session registry.

    Args:
        session_manager: SessionManager to use; a fresh one is created if omitted
        testing: Enable Flask testing mode

    Returns:
        The Flask app. The Socket.IO server is in ``app.extensions["socketio"]``
        and the session manager in ``app.extensions["tripilot"]``.
    """
    app = Flask(__name__)
    app.secret_key = get_secret_key()
    app.config.update(
        TESTING=testing,
        SESSION_COOKIE_SECURE=False,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=86400,
    )

    # CORS for local dev / cross‑origin front‑end requests
    CORS(app, origins="*", supports_credentials=True)

    ws_config = get_websocket_config()
    socketio = SocketIO(
        app,
        cors_allowed_origins=ws_config["cors_allowed_origins"],
        async_mode="threading",
        ping_interval=ws_config["ping_interval"],
        ping_timeout=ws_config["ping_timeout"],
        logger=False,
        engineio_logger=False,
    )
    logger.info("Socket.IO initialised (async_mode=threading)")

    if session_manager is None:
        session_manager = SessionManager(start_cleanup=not testing)
    app.extensions["tripilot"] = session_manager

    app.register_blueprint(create_travel_blueprint(session_manager, socketio, NAMESPACE))
    register_websocket_handlers(socketio, session_manager, NAMESPACE)

    @app.route("/debug")
    def debug():
        """Simple JSON health endpoint."""
        return jsonify({
            "status": "ok",
            "socketio_initialized": True,
            "sessions": session_manager.get_stats(),
            "endpoints": {
                "state": "/travel/api/state",
                "actions": "/travel/api/actions",
                "websocket_namespace": NAMESPACE,
            },
        })

    return app


# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    app = create_app()
    port = get_port()
    logger.info("Starting Tripilot on http://localhost:%d", port)
    app.extensions["socketio"].run(app, host="0.0.0.0", port=port, debug=False,
                                   allow_unsafe_werkzeug=True)
