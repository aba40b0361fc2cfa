# tripilot/api/errors.py
"""Exception types raised by the store, gateway and checkout layers."""


class TripilotError(Exception):
    """Base class for all Tripilot errors."""


class ActionError(TripilotError):
    """An assistant action could not be applied.

    ``kind`` is the machine-readable code sent back in the action result.
    """

    kind = "action_error"

    def __init__(self, message: str, action: str = ""):
        super().__init__(message)
        self.message = message
        self.action = action


class ParseError(ActionError):
    """A serialized payload could not be decoded into the expected shape."""

    kind = "parse_error"


class ValidationError(ActionError):
    """A required field is missing or a value is out of range."""

    kind = "validation_error"


class CheckoutError(TripilotError):
    """Illegal checkout transition (e.g. paying twice, cancelling after pay)."""


__all__ = ["TripilotError", "ActionError", "ParseError", "ValidationError", "CheckoutError"]
