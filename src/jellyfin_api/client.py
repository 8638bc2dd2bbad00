"""Async HTTP client for the Jellyfin media server API."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .config import JellyfinConfig
from .exceptions import (
    AuthorizationError,
    JellyfinError,
    NotFoundError,
    ParseError,
    ServerError,
)
from .models import (
    Audio,
    AuthResponse,
    ClientInfo,
    ImageType,
    Item,
    ItemsResponse,
    ItemType,
    LibraryItem,
    MusicAlbum,
    MusicAlbumItem,
    Session,
    UserInfo,
)
from .request_builder import JellyfinRequestBuilder

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PING_RESPONSE = '"Jellyfin Server"'
STREAM_CONTAINERS = "flac,mp3,ogg,wav"
ALBUM_LIMIT = 200

ExtraParams = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


def _parse_server_url(server_url: str) -> str:
    """Validate the server URL and return it without a trailing slash.

    Raises:
        ParseError: If the URL is malformed or not http/https
    """
    try:
        url = httpx.URL(server_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ParseError(f"Invalid server URL {server_url!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ParseError(f"Invalid server URL {server_url!r}: expected http(s)://host")

    return str(url).rstrip("/")


def _parse(response: httpx.Response, model: Type[ModelT]) -> ModelT:
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise ParseError(f"Malformed {model.__name__} response: {e}") from e


class JellyfinClient:
    """Async client for the Jellyfin HTTP API.

    Each method builds its own request, so one client can serve many
    concurrent calls. The session is an immutable value that is replaced,
    never modified, when the client re-authenticates.

    Attributes:
        http: Shared httpx.AsyncClient
        client_info: Identity sent in the X-Emby-Authorization header

    Example:
        >>> async with await JellyfinClient.with_password(
        ...     "https://jellyfin.example.com", "john", "secret"
        ... ) as client:
        ...     views = await client.get_views()
        ...     print([view.name for view in views.items])
    """

    def __init__(
        self,
        server_url: str,
        *,
        http: Optional[httpx.AsyncClient] = None,
        client_info: Optional[ClientInfo] = None,
        session: Optional[Session] = None,
        timeout: float = 30.0,
    ):
        """Initialize an unauthenticated (or pre-authenticated) client.

        Args:
            server_url: Base server URL, e.g. "https://jellyfin.example.com"
            http: Optional shared httpx.AsyncClient. If omitted, one is
                created and closed by ``aclose()``.
            client_info: Client identity. Defaults to ``ClientInfo.default()``.
            session: Already known session, attached without a network call
            timeout: Connect/write timeout in seconds for the owned client

        Raises:
            ParseError: If the URL is malformed or the host name is unavailable
        """
        self._base_url = _parse_server_url(server_url)
        self.client_info = client_info or ClientInfo.default()
        self._session = session

        self._owns_http = http is None
        if http is None:
            http = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    connect=timeout,
                    read=timeout * 2,  # large library pages
                    write=timeout,
                    pool=5.0,
                ),
                limits=httpx.Limits(
                    max_connections=100,
                    max_keepalive_connections=20,
                ),
                follow_redirects=True,
            )
        self.http = http

        logger.debug(f"Initialized Jellyfin client for {self._base_url}")

    @classmethod
    async def with_password(
        cls, server_url: str, username: str, password: str, **kwargs: Any
    ) -> "JellyfinClient":
        """Create a client and authenticate with username and password.

        Raises:
            AuthorizationError: If the credentials are rejected
            ParseError: If the URL or the response is malformed
            RequestError: For transport failures
        """
        client = cls(server_url, **kwargs)
        try:
            await client.authenticate_with_password(username, password)
        except JellyfinError:
            await client.aclose()
            raise
        return client

    @classmethod
    async def with_token(cls, server_url: str, token: str, **kwargs: Any) -> "JellyfinClient":
        """Create a client and authenticate with an existing access token.

        Raises:
            AuthorizationError: If the token is rejected
            ParseError: If the URL, the token or the response is malformed
            RequestError: For transport failures
        """
        client = cls(server_url, **kwargs)
        try:
            await client.authenticate_with_token(token)
        except JellyfinError:
            await client.aclose()
            raise
        return client

    @classmethod
    def with_session(cls, server_url: str, session: Session, **kwargs: Any) -> "JellyfinClient":
        """Create a client with a known session. No request is made."""
        return cls(server_url, session=session, **kwargs)

    @classmethod
    async def from_config(cls, config: JellyfinConfig, **kwargs: Any) -> "JellyfinClient":
        """Create a client from configuration, using the strongest credential given.

        Order: token + user id (no request), token, username + password,
        otherwise an unauthenticated client.
        """
        kwargs.setdefault("client_info", config.client_info())
        kwargs.setdefault("timeout", config.timeout)

        if config.token and config.user_id:
            return cls.with_session(
                config.url, Session(token=config.token, user_id=config.user_id), **kwargs
            )
        if config.token:
            return await cls.with_token(config.url, config.token, **kwargs)
        if config.username and config.password is not None:
            return await cls.with_password(config.url, config.username, config.password, **kwargs)
        return cls(config.url, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> Optional[Session]:
        """Current session, or None if not authenticated."""
        return self._session

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self.http.aclose()
            logger.debug("Closed Jellyfin client")

    async def __aenter__(self) -> "JellyfinClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _build_url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str) -> JellyfinRequestBuilder:
        builder = JellyfinRequestBuilder(self.http, method, self._build_url(path), self.client_info)
        if self._session is not None:
            builder.with_auth(self._session.token)
        return builder

    def _get(self, path: str) -> JellyfinRequestBuilder:
        return self._request("GET", path)

    def _post(self, path: str) -> JellyfinRequestBuilder:
        return self._request("POST", path)

    def _require_session(self) -> Session:
        if self._session is None:
            raise AuthorizationError("Not authenticated")
        return self._session

    async def authenticate_with_token(self, token: str) -> UserInfo:
        """Authenticate with an access token.

        Looks up the current user so the session carries the server's
        user id for that token.

        Args:
            token: Access token (API key or a token from a previous login)

        Returns:
            UserInfo of the authenticated user

        Raises:
            AuthorizationError: If the server rejects the token
            ParseError: If the token is not a valid header value or the
                identity response is malformed
        """
        response = await self._get("/Users/Me").with_auth(token).send()
        user_info = _parse(response, UserInfo)

        self._session = Session(token=token, user_id=user_info.id)
        logger.info(f"Authenticated as {user_info.name}")
        return user_info

    async def authenticate_with_password(self, username: str, password: str) -> AuthResponse:
        """Authenticate with username and password.

        Returns:
            AuthResponse with user info and access token

        Raises:
            AuthorizationError: If the credentials are rejected
            ParseError: If the response is malformed
        """
        builder = JellyfinRequestBuilder(
            self.http, "POST", self._build_url("/Users/AuthenticateByName"), self.client_info
        )
        response = await builder.with_json_body({"Username": username, "Pw": password}).send()
        auth_response = _parse(response, AuthResponse)

        self._session = Session(token=auth_response.access_token, user_id=auth_response.user.id)
        logger.info(f"Authenticated as {auth_response.user.name}")
        return auth_response

    async def ping(self) -> None:
        """Check that the server is reachable and is a Jellyfin server.

        Raises:
            ServerError: If the body is not exactly "Jellyfin Server" (quoted)
            RequestError: For transport failures
        """
        builder = JellyfinRequestBuilder(
            self.http, "GET", self._build_url("/System/Ping"), self.client_info
        )
        response = await builder.send()
        if response.text != PING_RESPONSE:
            raise ServerError(f"Unexpected ping response: {response.text[:64]!r}")

    async def get_items(
        self,
        parent_id: Optional[str] = None,
        item_types: Sequence[ItemType] = (),
        recursive: bool = False,
        limit: int = 100,
        extra_params: Optional[ExtraParams] = None,
    ) -> ItemsResponse[LibraryItem]:
        """List the current user's items.

        Extra parameters are applied after the built-in ones, so an extra
        ``Limit`` (or any other colliding key) overrides the built-in value.

        Args:
            parent_id: Only return children of this item/library
            item_types: Item kinds to include
            recursive: Search the whole subtree instead of direct children
            limit: Maximum number of items returned
            extra_params: Additional query parameters (mapping or pairs)

        Returns:
            ItemsResponse of tagged library items

        Raises:
            AuthorizationError: If not authenticated or the token is rejected
            ParseError: If an item has an unknown Type or is malformed
        """
        session = self._require_session()

        params: Dict[str, str] = {}
        if parent_id is not None:
            params["ParentId"] = parent_id
        if item_types:
            params["IncludeItemTypes"] = ",".join(ItemType(t).value for t in item_types)
        if recursive:
            params["Recursive"] = "True"
        params["Limit"] = str(limit)

        if extra_params:
            pairs = extra_params.items() if isinstance(extra_params, Mapping) else extra_params
            for key, value in pairs:
                params[key] = str(value)
        logger.debug(f"Item query params: {params}")

        response = await (
            self._get(f"/Users/{quote(session.user_id, safe='')}/Items").with_query(params).send()
        )
        return _parse(response, ItemsResponse[LibraryItem])

    async def get_artists(self, library_id: Optional[str] = None) -> ItemsResponse[Item]:
        """List artists, optionally limited to one library."""
        self._require_session()

        params = {}
        if library_id is not None:
            params["ParentId"] = library_id

        response = await self._get("/Artists").with_query(params).send()
        return _parse(response, ItemsResponse[Item])

    async def get_albums(self, artist_ids: Sequence[str]) -> List[MusicAlbum]:
        """List albums of the given artists (up to 200).

        Raises:
            ServerError: If the server returns anything other than albums
        """
        response = await self.get_items(
            item_types=[ItemType.MUSIC_ALBUM],
            recursive=True,
            limit=ALBUM_LIMIT,
            extra_params={"ArtistIds": ",".join(artist_ids)},
        )

        albums = []
        for item in response.items:
            if not isinstance(item, MusicAlbumItem):
                raise ServerError(f"Expected MusicAlbum, got {item.type} ({item.id})")
            albums.append(item)

        logger.debug(f"Retrieved {len(albums)} albums")
        return albums

    async def get_playlist_items(self, playlist_id: str) -> List[Audio]:
        """List the tracks of a playlist."""
        session = self._require_session()

        response = await (
            self._get(f"/Playlists/{quote(playlist_id, safe='')}/Items")
            .with_query({"UserId": session.user_id})
            .send()
        )
        return _parse(response, ItemsResponse[Audio]).items

    async def get_item_image(
        self,
        item_id: str,
        image_type: ImageType = ImageType.PRIMARY,
        max_size: Tuple[int, int] = (600, 600),
    ) -> Optional[bytes]:
        """Download an item image.

        Args:
            item_id: Item id
            image_type: Which image of the item
            max_size: (max width, max height) in pixels

        Returns:
            Image bytes, or None if the item has no such image (HTTP 404)
        """
        self._require_session()
        max_width, max_height = max_size
        path = f"/Items/{quote(item_id, safe='')}/Images/{ImageType(image_type).value}"

        try:
            response = await (
                self._get(path)
                .with_query({"maxWidth": max_width, "maxHeight": max_height})
                .send()
            )
        except NotFoundError:
            logger.debug(f"No {ImageType(image_type).value} image for item {item_id}")
            return None

        return response.content

    async def get_views(self) -> ItemsResponse[Item]:
        """List the current user's library views."""
        session = self._require_session()

        response = await self._get(f"/Users/{quote(session.user_id, safe='')}/Views").send()
        return _parse(response, ItemsResponse[Item])

    async def get_audio_stream(self, item_id: str) -> httpx.Response:
        """Open an audio stream for a track.

        The body is not read. Consume it with ``aiter_bytes()`` and close
        the response when done:

            >>> response = await client.get_audio_stream(track.id)
            >>> try:
            ...     async for chunk in response.aiter_bytes():
            ...         sink.write(chunk)
            ... finally:
            ...     await response.aclose()
        """
        session = self._require_session()

        return await (
            self._get(f"/Audio/{quote(item_id, safe='')}/universal")
            .with_query({"Container": STREAM_CONTAINERS, "UserId": session.user_id})
            .send(stream=True)
        )
