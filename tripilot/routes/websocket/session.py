# tripilot/routes/websocket/session.py
"""WebSocket handlers for assistant sessions and action calls."""

import logging
import secrets
import time

from .base import BaseWebSocketHandler
from .callback_helpers import push_view
from tripilot.api.config import get_assistant_config

logger = logging.getLogger(__name__)


class SessionHandler(BaseWebSocketHandler):
    """Handles assistant-facing WebSocket events."""

    def register_handlers(self):
        """Register assistant-related event handlers."""

        @self.socketio.on("start_session", namespace=self.namespace)
        def handle_start_session(data=None):
            """Hand the assistant bridge its instructions and action list."""
            planner = self.current_planner()
            if planner is None:
                return

            try:
                functions = planner.function_handler.get_function_definitions()
                assistant = get_assistant_config()

                self.emit_to_client(
                    "session_started",
                    {
                        "session_id": planner.session_id,
                        "status": "active",
                        "instructions": assistant["instructions"],
                        "greeting": assistant["greeting"],
                        "functions": functions,
                        "functions_registered": len(functions),
                        "context": planner.function_handler.get_context(),
                        "timestamp": time.time()
                    },
                )
                logger.info("✅ Session %s started with %d functions", planner.session_id, len(functions))

            except Exception as exc:
                self.handle_error(exc, "start_session")

        @self.socketio.on("invoke_action", namespace=self.namespace)
        def handle_invoke_action(data=None):
            """Run one assistant action and report the result.

            Expects ``{"call_id": ..., "name": ..., "arguments": {...}}``.
            """
            planner = self.current_planner()
            if planner is None:
                return

            data = data or {}
            call_id = data.get("call_id") or f"ws_{secrets.token_hex(6)}"
            name = data.get("name", "")
            self.log_event("invoke_action", {"call_id": call_id, "name": name})

            try:
                version = planner.store.version
                result = planner.function_handler.handle_function_call(
                    call_id, name, data.get("arguments")
                )
                self.emit_to_client("action_result", result)

                if planner.store.version != version:
                    push_view(self.socketio, planner, self.namespace)

            except Exception as exc:
                logger.exception("❌ Failed handling action call: %s", exc)
                self.emit_to_client("action_result", {
                    "success": False,
                    "error": "internal_error",
                    "message": str(exc),
                    "call_id": call_id,
                    "function": name
                })

        @self.socketio.on("get_context", namespace=self.namespace)
        def handle_get_context(data=None):
            """Send the assistant the current readable state."""
            planner = self.current_planner()
            if planner is None:
                return
            try:
                self.emit_to_client("context", {"context": planner.function_handler.get_context()})
            except Exception as exc:
                self.handle_error(exc, "get_context")

        @self.socketio.on("get_stats", namespace=self.namespace)
        def handle_get_stats(data=None):
            """Get session statistics for debugging."""
            planner = self.current_planner()
            if planner is None:
                return
            try:
                self.emit_to_client("stats", {
                    **planner.stats(),
                    "manager": self.session_manager.get_stats(),
                })
            except Exception as exc:
                self.handle_error(exc, "get_stats")
