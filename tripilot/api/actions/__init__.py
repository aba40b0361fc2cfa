"""Assistant action gateway: declared actions, payload decoding and sessions."""

from .function_handler import FunctionHandler, FUNCTION_DEFINITIONS
from .session_manager import SessionManager, PlannerSession

__all__ = ['FunctionHandler', 'FUNCTION_DEFINITIONS', 'SessionManager', 'PlannerSession']
