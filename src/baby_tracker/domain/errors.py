"""Helpers for turning backend failures into user-facing messages."""

DEFAULT_ERROR_MESSAGE = "Something went wrong."


def error_message(error: object, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Return a single human-readable message for a failure."""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    if isinstance(error, str):
        return error or fallback
    if isinstance(error, BaseException):
        return str(error) or fallback
    return fallback


class NotAuthenticatedError(Exception):
    """Raised when an operation requires a signed-in user."""
