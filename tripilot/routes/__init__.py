# tripilot/routes/__init__.py
"""HTTP and Socket.IO entry points for the trip planner."""

NAMESPACE = "/travel/ws"
