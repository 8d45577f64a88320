"""
Auth-specific errors.

Each error carries the HTTP status and the public message it maps to.
The message is deliberately generic — details (token ids, tenant keys)
belong in logs, never in client responses.
"""

from fastapi import status


class MissionControlError(Exception):
    """Base for errors that surface as `{ok: false, error: ...}` responses."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    public_message: str = "Bad request"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class Unauthenticated(MissionControlError):
    """No tenant identity where one is mandatory."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Authentication required"


class AuthorizationRequired(MissionControlError):
    """authRequired is set and the webhook caller presented no token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Authorization required"


class InvalidToken(MissionControlError):
    """Bearer token unknown or revoked — the two cases are indistinguishable."""

    status_code = status.HTTP_403_FORBIDDEN
    public_message = "Invalid token"


class RateLimitExceeded(MissionControlError):
    """Admission denied by the fixed-window limiter."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    public_message = "Rate limit exceeded"


class NotFound(MissionControlError):
    """Record missing, or owned by another tenant."""

    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class TokenNotFound(NotFound):
    public_message = "Token not found"


class InvalidEventBody(MissionControlError):
    """Webhook body is not a JSON object."""

    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid JSON body"


class EventIngestionFailed(MissionControlError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Event ingestion failed"


class EventNotFound(NotFound):
    public_message = "Event not found"
