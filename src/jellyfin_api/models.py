"""Data models for Jellyfin API integration.

Server entities are frozen pydantic models. Field names are snake_case in
Python and PascalCase on the wire (``server_id`` <-> ``ServerId``); fields
the server sends that are not modeled here are ignored.

Library items are a closed tagged union keyed on the wire field ``Type``:

    >>> from pydantic import TypeAdapter
    >>> item = TypeAdapter(LibraryItem).validate_python(
    ...     {"Type": "Playlist", "Name": "Road Trip", "Id": "p1"}
    ... )
    >>> type(item).__name__
    'PlaylistItem'
"""

import re
import socket
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal

from .exceptions import ParseError

TICKS_PER_SECOND = 10_000_000

# Jellyfin emits up to 7 fractional digits ("2001-01-01T00:00:00.0000000Z")
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


class ItemType(str, Enum):
    """Item kinds this client understands (values are the wire ``Type`` tag)."""

    MUSIC_ARTIST = "MusicArtist"
    AUDIO = "Audio"
    MUSIC_ALBUM = "MusicAlbum"
    PLAYLIST = "Playlist"


class ImageType(str, Enum):
    """Image kinds served by ``/Items/{id}/Images/{type}``."""

    PRIMARY = "Primary"
    ART = "Art"
    BACKDROP = "Backdrop"
    BANNER = "Banner"
    LOGO = "Logo"
    THUMB = "Thumb"


class JellyfinModel(BaseModel):
    """Base for all server entities: immutable, PascalCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Session(BaseModel):
    """Authenticated (token, user id) pair attached to every authorized call.

    Sessions are never modified in place; re-authenticating replaces the
    whole value. ``model_dump()`` / ``Session.model_validate()`` can be used
    by a host application to persist and restore a session.
    """

    model_config = ConfigDict(frozen=True)

    token: str
    user_id: str


class UserInfo(JellyfinModel):
    """Server-assigned user identity."""

    name: str
    server_id: str
    id: str


class AuthResponse(JellyfinModel):
    """Response body of ``POST /Users/AuthenticateByName``."""

    user: UserInfo
    access_token: str


class Item(JellyfinModel):
    """Generic item: artists, playlists and library views."""

    name: str
    id: str
    collection_type: Optional[str] = None


class ArtistItem(JellyfinModel):
    """Name/id reference to an artist."""

    name: str
    id: str


class _ReleaseBase(JellyfinModel):
    name: str
    id: str
    premiere_date: Optional[datetime] = None
    artists: List[str] = Field(default_factory=list)
    artist_items: List[ArtistItem] = Field(default_factory=list)
    album_artist: Optional[str] = None

    @field_validator("premiere_date", mode="before")
    @classmethod
    def trim_fraction_digits(cls, value):
        if isinstance(value, str):
            return _FRACTION_RE.sub(r"\1", value)
        return value

    @field_validator("premiere_date")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MusicAlbum(_ReleaseBase):
    """Album metadata."""


class Audio(_ReleaseBase):
    """Audio track metadata.

    Attributes:
        album: Album name (optional)
        album_id: Album id (optional)
        runtime_ticks: Duration in server ticks of 100 nanoseconds (optional)
    """

    album: Optional[str] = None
    album_id: Optional[str] = None
    runtime_ticks: Optional[int] = Field(default=None, alias="RunTimeTicks")

    @property
    def runtime_seconds(self) -> Optional[float]:
        """Duration in seconds, derived from ``runtime_ticks``."""
        if self.runtime_ticks is None:
            return None
        return self.runtime_ticks / TICKS_PER_SECOND


class MusicArtistItem(Item):
    type: Literal["MusicArtist"] = "MusicArtist"


class PlaylistItem(Item):
    type: Literal["Playlist"] = "Playlist"


class AudioItem(Audio):
    type: Literal["Audio"] = "Audio"


class MusicAlbumItem(MusicAlbum):
    type: Literal["MusicAlbum"] = "MusicAlbum"


LibraryItem = Annotated[
    Union[MusicArtistItem, AudioItem, MusicAlbumItem, PlaylistItem],
    Field(discriminator="type"),
]

T = TypeVar("T")


class ItemsResponse(JellyfinModel, Generic[T]):
    """Paged item list envelope.

    No pagination is done by the client; ``start_index`` and
    ``total_record_count`` tell the caller where this page sits.
    """

    items: List[T]
    total_record_count: int
    start_index: int = 0


def local_device_name() -> str:
    """Return the local host name used as the default device name.

    Raises:
        ParseError: If the host name cannot be determined
    """
    try:
        device = socket.gethostname()
    except OSError as e:
        raise ParseError(f"Unable to determine host name: {e}") from e
    if not device:
        raise ParseError("Unable to determine host name")
    return device


@dataclass(frozen=True)
class ClientInfo:
    """Identity of this client as sent in ``X-Emby-Authorization``.

    Attributes:
        client: Client application name
        device: Device name, usually the local host name
        device_id: Stable or random device identifier
        version: Client version string
    """

    client: str
    device: str
    device_id: str
    version: str

    @classmethod
    def default(cls, client: str = "jellyfin-python", version: Optional[str] = None) -> "ClientInfo":
        """Build client info for this host with a random device id.

        Raises:
            ParseError: If the local host name cannot be determined
        """
        if version is None:
            from . import __version__

            version = __version__

        return cls(client=client, device=local_device_name(), device_id=str(uuid.uuid4()), version=version)

    def authorization_header(self) -> str:
        """Render the header value.

        Example:
            >>> ClientInfo("jellyfin-python", "htpc", "abc", "1.0.0").authorization_header()
            'MediaBrowser Client=jellyfin-python,Device=htpc,DeviceId=abc,Version=1.0.0'
        """
        return (
            f"MediaBrowser Client={self.client},Device={self.device},"
            f"DeviceId={self.device_id},Version={self.version}"
        )
