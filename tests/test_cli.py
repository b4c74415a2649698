"""Tests for the debugging CLI"""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from squeezecloud import __version__
from squeezecloud.cli import cli
from squeezecloud.service import SqueezeCloud

from tests.conftest import FakeCatalogClient, make_track


STREAM_URL = "https://api.soundcloud.com/tracks/42/stream"


@pytest.fixture(autouse=True)
def keep_root_logger(temp_dir, monkeypatch):
    """The CLI reconfigures and shuts down root logging on every run"""
    monkeypatch.chdir(temp_dir)
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def fake_service():
    """Patch the CLI to build services around a FakeCatalogClient"""
    client = FakeCatalogClient(
        responses={
            "tracks": [make_track(1, "One"), make_track(2, "Two")],
            "tracks/42": make_track(),
        },
        redirects={STREAM_URL: "https://cdn.test/42.mp3"},
    )

    def factory(config):
        return SqueezeCloud(config, client=client)

    with patch("squeezecloud.cli.SqueezeCloud", side_effect=factory):
        yield client


class TestCli:

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_menu(self):
        result = CliRunner().invoke(cli, ["menu"])
        assert result.exit_code == 0
        assert "Hottest tracks" in result.output
        assert "Set your SoundCloud API key" in result.output

    def test_browse(self, fake_service):
        result = CliRunner().invoke(cli, ["browse", "tracks", "--order", "hotness", "--limit", "10"])

        assert result.exit_code == 0
        assert "One" in result.output
        assert "<soundcloud://2>" in result.output
        assert "total 2" in result.output
        assert fake_service.calls_to("tracks")[0].param("order") == "hotness"

    def test_play(self, fake_service):
        result = CliRunner().invoke(cli, ["play", "soundcloud://42"])

        assert result.exit_code == 0
        assert "https://cdn.test/42.mp3" in result.output

    def test_play_failure(self, fake_service):
        fake_service.redirects.clear()
        result = CliRunner().invoke(cli, ["play", "soundcloud://42"])

        assert result.exit_code == 1
        assert "PLUGIN_SQUEEZECLOUD_STREAM_FAILED" in result.output

    def test_bad_config(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("soundcloud: [unclosed", encoding="utf-8")

        result = CliRunner().invoke(cli, ["--config", str(path), "menu"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output
