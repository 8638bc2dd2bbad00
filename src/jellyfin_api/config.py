"""Configuration management for the Jellyfin client.

Configuration is read from environment variables. Nothing here touches the
network; ``JellyfinClient.from_config()`` turns a config into a client.
"""

import os
import uuid
import warnings
from dataclasses import dataclass, field
from typing import Optional

from .models import ClientInfo, local_device_name


@dataclass
class JellyfinConfig:
    """Configuration for connecting to a Jellyfin server.

    Attributes:
        url: Base server URL (e.g., "https://jellyfin.example.com")
        username: Jellyfin username (password authentication)
        password: Jellyfin password (password authentication)
        token: Access token or API key (token authentication)
        user_id: User id belonging to ``token``; with both set no login request is made
        client_name: Client name sent in X-Emby-Authorization
        device_name: Device name; the local host name is used when unset
        device_id: Device id, defaults to a random UUID
        version: Client version string
        timeout: Request timeout in seconds
    """

    url: str
    username: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None
    user_id: Optional[str] = None
    client_name: str = "jellyfin-python"
    device_name: Optional[str] = None
    device_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    version: Optional[str] = None
    timeout: float = 30.0

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.url or not self.url.startswith(("http://", "https://")):
            raise ValueError("url must be a valid HTTP/HTTPS URL")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

        if not self.url.startswith("https://"):
            warnings.warn(
                "Using HTTP instead of HTTPS for Jellyfin connection. "
                "Credentials will be transmitted insecurely.",
                UserWarning,
                stacklevel=2,
            )

    @classmethod
    def from_environment(cls) -> "JellyfinConfig":
        """Load configuration from environment variables.

        Reads JELLYFIN_URL (required), JELLYFIN_USERNAME, JELLYFIN_PASSWORD,
        JELLYFIN_TOKEN, JELLYFIN_USER_ID, JELLYFIN_CLIENT_NAME,
        JELLYFIN_DEVICE_NAME, JELLYFIN_DEVICE_ID and JELLYFIN_TIMEOUT.

        Raises:
            EnvironmentError: If required environment variables are missing
            ValueError: If a value is invalid
        """
        url = os.getenv("JELLYFIN_URL")
        if not url:
            raise EnvironmentError(
                "Required environment variables missing: JELLYFIN_URL\n"
                "Example: export JELLYFIN_URL='https://jellyfin.example.com'"
            )

        optional = {}
        for attr, var in (
            ("client_name", "JELLYFIN_CLIENT_NAME"),
            ("device_name", "JELLYFIN_DEVICE_NAME"),
            ("device_id", "JELLYFIN_DEVICE_ID"),
        ):
            value = os.getenv(var)
            if value:
                optional[attr] = value

        timeout = os.getenv("JELLYFIN_TIMEOUT")
        if timeout:
            try:
                optional["timeout"] = float(timeout)
            except ValueError as e:
                raise ValueError(f"JELLYFIN_TIMEOUT must be a number, got {timeout!r}") from e

        return cls(
            url=url,
            username=os.getenv("JELLYFIN_USERNAME"),
            password=os.getenv("JELLYFIN_PASSWORD"),
            token=os.getenv("JELLYFIN_TOKEN"),
            user_id=os.getenv("JELLYFIN_USER_ID"),
            **optional,
        )

    def client_info(self) -> ClientInfo:
        """Build the client identity sent with every request.

        Raises:
            ParseError: If no device name is configured and the host name
                could not be determined (set JELLYFIN_DEVICE_NAME)
        """
        version = self.version
        if version is None:
            from . import __version__

            version = __version__

        return ClientInfo(
            client=self.client_name,
            device=self.device_name or local_device_name(),
            device_id=self.device_id,
            version=version,
        )
