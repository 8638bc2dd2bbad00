"""Async client for the Jellyfin media server API."""

__version__ = "1.0.0"

from .client import JellyfinClient
from .config import JellyfinConfig
from .exceptions import (
    AuthorizationError,
    BadRequestError,
    JellyfinError,
    NotFoundError,
    ParseError,
    RequestError,
    ServerError,
    UnhandledError,
    error_for_status,
)
from .logger import setup_logging
from .models import (
    ArtistItem,
    Audio,
    AudioItem,
    AuthResponse,
    ClientInfo,
    ImageType,
    Item,
    ItemsResponse,
    ItemType,
    LibraryItem,
    MusicAlbum,
    MusicAlbumItem,
    MusicArtistItem,
    PlaylistItem,
    Session,
    UserInfo,
)
from .request_builder import JellyfinRequestBuilder

__all__ = [
    # Client
    "JellyfinClient",
    "JellyfinConfig",
    "JellyfinRequestBuilder",
    "setup_logging",
    # Models
    "Session",
    "ClientInfo",
    "UserInfo",
    "AuthResponse",
    "ItemsResponse",
    "Item",
    "ArtistItem",
    "MusicAlbum",
    "Audio",
    "LibraryItem",
    "MusicArtistItem",
    "AudioItem",
    "MusicAlbumItem",
    "PlaylistItem",
    "ItemType",
    "ImageType",
    # Exceptions
    "JellyfinError",
    "AuthorizationError",
    "NotFoundError",
    "BadRequestError",
    "ServerError",
    "ParseError",
    "RequestError",
    "UnhandledError",
    "error_for_status",
]
