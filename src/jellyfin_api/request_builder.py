"""Builder for a single outgoing Jellyfin API request."""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional

import httpx

from .exceptions import ParseError, RequestError, error_for_status
from .models import ClientInfo

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "X-Emby-Authorization"
TOKEN_HEADER = "X-Emby-Token"

# Visible ASCII, space and tab. Anything else (CR/LF in particular) is rejected.
_HEADER_VALUE_RE = re.compile(r"^[\t\x20-\x7e]*$")
_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def _user_agent(version: str) -> str:
    return f"Python Jellyfin Library/{version}"


class JellyfinRequestBuilder:
    """Assemble one request and mediate its execution.

    Every request carries ``User-Agent`` and the client identification
    header from the moment the builder is created. Builder methods return
    the builder so calls can be chained:

        >>> response = await (
        ...     JellyfinRequestBuilder(http, "GET", url, client_info)
        ...     .with_auth(token)
        ...     .with_query({"Limit": "10"})
        ...     .send()
        ... )

    Attributes:
        method: HTTP method
        url: Fully resolved target URL
        headers: Headers sent with the request
        params: Query parameters (a single set per request)
        content: Encoded request body, if any
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        method: str,
        url: str,
        client_info: ClientInfo,
    ):
        self._http = http
        self.method = method.upper()
        self.url = url
        self.headers: Dict[str, str] = {}
        self.params: Dict[str, str] = {}
        self.content: Optional[bytes] = None

        self.with_header("User-Agent", _user_agent(client_info.version))
        self.with_header(AUTHORIZATION_HEADER, client_info.authorization_header())

    def with_json_body(self, value: Any) -> "JellyfinRequestBuilder":
        """Serialize ``value`` as the JSON request body.

        Raises:
            ParseError: If the value cannot be serialized
        """
        try:
            body = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Unable to serialize request body: {e}") from e

        self.content = body.encode("utf-8")
        return self.with_header("Content-Type", "application/json")

    def with_auth(self, token: str) -> "JellyfinRequestBuilder":
        """Attach the session token.

        Raises:
            ParseError: If the token is not a valid header value
        """
        return self.with_header(TOKEN_HEADER, token)

    def with_header(self, name: str, value: str) -> "JellyfinRequestBuilder":
        """Set a header, replacing any existing value for the same name.

        Header names are case-insensitive, so ``content-type`` replaces a
        previously set ``Content-Type``.

        Raises:
            ParseError: If the name or value contains invalid characters
        """
        if not _HEADER_NAME_RE.match(name):
            raise ParseError(f"Invalid header name: {name!r}")
        if not isinstance(value, str) or not _HEADER_VALUE_RE.match(value):
            raise ParseError(f"Invalid value for header {name}")

        for existing in list(self.headers):
            if existing.lower() == name.lower():
                del self.headers[existing]
        self.headers[name] = value
        return self

    def with_query(self, params: Mapping[str, Any]) -> "JellyfinRequestBuilder":
        """Use ``params`` as the query string, replacing any earlier set."""
        self.params = {key: str(value) for key, value in params.items()}
        return self

    async def send(self, stream: bool = False) -> httpx.Response:
        """Execute the request and check the response status.

        Args:
            stream: If True, the body is left unread so the caller can
                consume it incrementally (and must close the response)

        Returns:
            The raw httpx.Response for any non-error status

        Raises:
            RequestError: For transport failures
            AuthorizationError: For HTTP 401
            NotFoundError: For HTTP 404
            BadRequestError: For HTTP 400
            ServerError: For HTTP 500
            UnhandledError: For any other 4xx/5xx status
        """
        try:
            request = self._http.build_request(
                self.method,
                self.url,
                headers=self.headers,
                params=self.params or None,
                content=self.content,
            )
        except httpx.InvalidURL as e:
            raise ParseError(f"Invalid URL {self.url!r}: {e}") from e
        logger.debug(f"{request.method} {request.url}")

        try:
            response = await self._http.send(request, stream=stream)
        except httpx.HTTPError as e:
            raise RequestError(f"Request error: {e}", original=e) from e

        error = error_for_status(response.status_code, response.reason_phrase)
        if error is not None:
            if stream:
                await response.aclose()
            raise error

        return response
