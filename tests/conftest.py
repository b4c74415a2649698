"""Test configuration and fixtures"""

import tempfile
from pathlib import Path

import pytest

from squeezecloud.core.config import Config, SoundCloudConfig
from squeezecloud.core.exceptions import RedirectMissing


class ManualClock:
    """Clock for TTL tests; advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCatalogClient:
    """
    Stand-in for CatalogClient that serves canned responses.

    Responses are keyed by resource path (get_json), absolute URL
    (get_json_url) or source URL (probe_redirect). A value that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, responses=None, urls=None, redirects=None):
        self.responses = dict(responses or {})
        self.urls = dict(urls or {})
        self.redirects = dict(redirects or {})
        self.calls = []
        self.closed = False

    @staticmethod
    def _serve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def get_json(self, resource, timeout=None):
        self.calls.append(("get_json", resource))
        return self._serve(self.responses.get(resource.path, []))

    async def get_json_url(self, url, requires_auth=False, timeout=None):
        self.calls.append(("get_json_url", url))
        return self._serve(self.urls.get(url, []))

    async def probe_redirect(self, url, timeout=None):
        self.calls.append(("probe_redirect", url))
        if url not in self.redirects:
            raise RedirectMissing(f"No Location header in response from {url}")
        return self._serve(self.redirects[url])

    async def close(self):
        self.closed = True

    def calls_to(self, path):
        return [
            resource for kind, resource in self.calls
            if kind == "get_json" and resource.path == path
        ]


def make_track(track_id=42, title="Song", username="bob", **extra):
    """Build a track object as the API returns it."""
    track = {
        "id": track_id,
        "kind": "track",
        "title": title,
        "duration": 215000,
        "user": {"id": 7, "username": username},
        "artwork_url": f"https://i1.sndcdn.com/artworks-{track_id}-large.jpg",
        "stream_url": f"https://api.soundcloud.com/tracks/{track_id}/stream",
        "download_url": f"https://api.soundcloud.com/tracks/{track_id}/download",
        "downloadable": False,
    }
    track.update(extra)
    return track


def make_user(user_id=7, username="alice", **extra):
    user = {
        "id": user_id,
        "kind": "user",
        "username": username,
        "full_name": "",
        "avatar_url": f"https://i1.sndcdn.com/avatars-{user_id}-large.jpg",
        "public_favorites_count": 12,
        "track_count": 3,
        "playlist_count": 0,
    }
    user.update(extra)
    return user


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def config():
    """Anonymous configuration with defaults"""
    return Config()


@pytest.fixture
def auth_config():
    """Configuration with an API key"""
    return Config(soundcloud=SoundCloudConfig(api_key="secret-token"))


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def fake_client():
    return FakeCatalogClient()


@pytest.fixture
def sample_track():
    """Sample track object"""
    return make_track()


@pytest.fixture(autouse=True)
def clean_squeezecloud_env(monkeypatch):
    """Keep developer credentials out of the tests"""
    for name in ("SQUEEZECLOUD_API_KEY", "SQUEEZECLOUD_CLIENT_ID", "SQUEEZECLOUD_PLAYMETHOD"):
        monkeypatch.delenv(name, raising=False)
