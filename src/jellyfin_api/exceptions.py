"""Exception classes for the Jellyfin API client."""

from http import HTTPStatus
from typing import Optional


class JellyfinError(Exception):
    """Base exception for all Jellyfin API errors.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code when the error came from a response
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize Jellyfin error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code, if any
        """
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthorizationError(JellyfinError):
    """Credentials rejected by the server (HTTP 401) or no session present.

    Raised when a token or username/password is invalid, or when an
    operation that needs a session is called on an unauthenticated client.
    """

    pass


class NotFoundError(JellyfinError):
    """Requested resource not found (HTTP 404)."""

    pass


class BadRequestError(JellyfinError):
    """Server rejected the request parameters (HTTP 400)."""

    pass


class ServerError(JellyfinError):
    """Server failed to handle the request (HTTP 500).

    Also raised when a response is well-formed but violates what the
    server is expected to return, e.g. an unexpected ping body.
    """

    pass


class ParseError(JellyfinError):
    """Malformed JSON, header value, URL or response model."""

    pass


class RequestError(JellyfinError):
    """Transport-level failure (connection, TLS, timeout).

    Attributes:
        original: The underlying httpx exception
    """

    def __init__(self, message: str, original: Optional[Exception] = None):
        self.original = original
        super().__init__(message)


class UnhandledError(JellyfinError):
    """Any other client or server error status.

    The message carries the status text, e.g. ``"403 Forbidden"``.
    """

    pass


_STATUS_ERRORS = {
    HTTPStatus.UNAUTHORIZED: (AuthorizationError, "Authorization error"),
    HTTPStatus.NOT_FOUND: (NotFoundError, "Not found"),
    HTTPStatus.BAD_REQUEST: (BadRequestError, "Bad request"),
    HTTPStatus.INTERNAL_SERVER_ERROR: (ServerError, "Server error"),
}


def error_for_status(status_code: int, reason: str = "") -> Optional[JellyfinError]:
    """Map an HTTP status code to the matching Jellyfin error.

    Args:
        status_code: HTTP status code from the response
        reason: Reason phrase sent by the server (optional)

    Returns:
        A JellyfinError instance for 4xx/5xx statuses, None otherwise

    Example:
        >>> error_for_status(401)
        AuthorizationError('Authorization error')
        >>> str(error_for_status(403))
        '403 Forbidden'
        >>> error_for_status(204) is None
        True
    """
    if status_code < 400 or status_code >= 600:
        return None

    if status_code in _STATUS_ERRORS:
        error_class, message = _STATUS_ERRORS[status_code]
        return error_class(message, status_code=status_code)

    if not reason:
        try:
            reason = HTTPStatus(status_code).phrase
        except ValueError:
            reason = "Unknown Status"

    return UnhandledError(f"{status_code} {reason}", status_code=status_code)
