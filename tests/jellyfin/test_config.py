"""Unit tests for JellyfinConfig."""

import warnings

import pytest

from jellyfin_api.config import JellyfinConfig
from jellyfin_api.exceptions import ParseError

ENV_VARS = [
    "JELLYFIN_URL",
    "JELLYFIN_USERNAME",
    "JELLYFIN_PASSWORD",
    "JELLYFIN_TOKEN",
    "JELLYFIN_USER_ID",
    "JELLYFIN_CLIENT_NAME",
    "JELLYFIN_DEVICE_NAME",
    "JELLYFIN_DEVICE_ID",
    "JELLYFIN_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestValidation:
    @pytest.mark.parametrize("url", ["", "jellyfin.example.com", "ftp://jellyfin.example.com"])
    def test_invalid_url(self, url):
        with pytest.raises(ValueError, match="url must be"):
            JellyfinConfig(url=url)

    def test_non_positive_timeout(self):
        with pytest.raises(ValueError, match="timeout"):
            JellyfinConfig(url="https://jellyfin.example.com", timeout=0)

    def test_plain_http_warns(self):
        with pytest.warns(UserWarning, match="insecurely"):
            JellyfinConfig(url="http://jellyfin.local:8096")

    def test_https_does_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            JellyfinConfig(url="https://jellyfin.example.com")


class TestFromEnvironment:
    def test_missing_url(self):
        with pytest.raises(EnvironmentError, match="JELLYFIN_URL"):
            JellyfinConfig.from_environment()

    def test_reads_all_variables(self, monkeypatch):
        monkeypatch.setenv("JELLYFIN_URL", "https://jellyfin.example.com")
        monkeypatch.setenv("JELLYFIN_USERNAME", "alice")
        monkeypatch.setenv("JELLYFIN_PASSWORD", "secret")
        monkeypatch.setenv("JELLYFIN_TOKEN", "tok")
        monkeypatch.setenv("JELLYFIN_USER_ID", "user-42")
        monkeypatch.setenv("JELLYFIN_CLIENT_NAME", "my-player")
        monkeypatch.setenv("JELLYFIN_DEVICE_NAME", "living-room")
        monkeypatch.setenv("JELLYFIN_DEVICE_ID", "dev-1")
        monkeypatch.setenv("JELLYFIN_TIMEOUT", "12.5")

        config = JellyfinConfig.from_environment()

        assert config.url == "https://jellyfin.example.com"
        assert config.username == "alice"
        assert config.password == "secret"
        assert config.token == "tok"
        assert config.user_id == "user-42"
        assert config.client_name == "my-player"
        assert config.device_name == "living-room"
        assert config.device_id == "dev-1"
        assert config.timeout == 12.5

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("JELLYFIN_URL", "https://jellyfin.example.com")

        config = JellyfinConfig.from_environment()

        assert config.username is None
        assert config.token is None
        assert config.client_name == "jellyfin-python"
        assert config.device_name is None
        assert config.timeout == 30.0

    def test_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("JELLYFIN_URL", "https://jellyfin.example.com")
        monkeypatch.setenv("JELLYFIN_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="JELLYFIN_TIMEOUT"):
            JellyfinConfig.from_environment()


class TestClientInfo:
    def test_builds_client_info(self):
        config = JellyfinConfig(
            url="https://jellyfin.example.com",
            client_name="my-player",
            device_name="living-room",
            device_id="dev-1",
            version="2.0.0",
        )

        info = config.client_info()

        assert info.authorization_header() == (
            "MediaBrowser Client=my-player,Device=living-room,DeviceId=dev-1,Version=2.0.0"
        )

    def test_default_version(self):
        import jellyfin_api

        config = JellyfinConfig(url="https://jellyfin.example.com", device_name="box")

        assert config.client_info().version == jellyfin_api.__version__

    def test_device_name_defaults_to_host_name(self, mocker):
        mocker.patch("jellyfin_api.models.socket.gethostname", return_value="htpc")
        config = JellyfinConfig(url="https://jellyfin.example.com", device_id="dev-1")

        info = config.client_info()

        assert info.device == "htpc"
        assert info.device_id == "dev-1"

    def test_unknown_host_name_is_parse_error(self, mocker):
        mocker.patch("jellyfin_api.models.socket.gethostname", side_effect=OSError("no name"))
        config = JellyfinConfig(url="https://jellyfin.example.com")

        with pytest.raises(ParseError, match="host name"):
            config.client_info()

    def test_configured_device_name_skips_lookup(self, mocker):
        gethostname = mocker.patch("jellyfin_api.models.socket.gethostname")
        config = JellyfinConfig(url="https://jellyfin.example.com", device_name="box")

        assert config.client_info().device == "box"
        gethostname.assert_not_called()
