# errors.py
from fastapi import status


class ScoreboardError(Exception):
    """Base error. Carries a short user-facing message and an HTTP status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ScoreboardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class DuplicateIdentity(ScoreboardError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Username or email already exists"


class AuthenticationFailed(ScoreboardError):
    """Login failure. Same message for unknown usernames and wrong passwords."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class MissingCredential(ScoreboardError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"


class InvalidCredential(ScoreboardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class NotFoundOrUnauthorized(ScoreboardError):
    # One error for "does not exist" and "belongs to someone else".
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Score not found or unauthorized"


class BackendUnavailable(ScoreboardError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database error"


class InternalError(ScoreboardError):
    pass


# --- Internal errors, translated before they reach a response ---

class InvalidToken(Exception):
    """Token failed signature, format, claim or expiry checks."""


class HashingError(Exception):
    """The password hasher failed internally."""
