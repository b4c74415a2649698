"""Tests for configuration loading"""

import pytest

from squeezecloud.core.config import (
    DEFAULT_API_BASE,
    DEFAULT_CLIENT_ID,
    Config,
    load_config,
)
from squeezecloud.core.exceptions import ConfigError


def write_config(directory, content):
    path = directory / "config.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestDefaults:
    """Test behaviour without a config file"""

    def test_missing_default_file_gives_defaults(self, temp_dir, monkeypatch):
        """No config.yaml in the CWD means anonymous stream mode"""
        monkeypatch.chdir(temp_dir)
        config = load_config()

        assert config.soundcloud.api_key == ""
        assert config.soundcloud.playmethod == "stream"
        assert config.soundcloud.client_id == DEFAULT_CLIENT_ID
        assert config.soundcloud.api_base == DEFAULT_API_BASE
        assert not config.soundcloud.authenticated
        assert config.http.timeout == 15
        assert config.http.playback_timeout == 35
        assert config.cache.metadata_ttl == 86400
        assert config.paging.max_items == 500
        assert config.paging.max_items_per_call == 200
        assert config.logging.directory is None

    def test_missing_explicit_file_raises(self, temp_dir):
        """An explicitly given path must exist"""
        with pytest.raises(ConfigError):
            load_config(temp_dir / "nope.yaml")

    def test_default_total(self):
        """Total estimate is max_items plus the page size"""
        assert Config().paging.default_total(30) == 530


class TestFileParsing:
    """Test parsing of config.yaml"""

    def test_full_file(self, temp_dir):
        """All sections are read"""
        path = write_config(temp_dir, """
soundcloud:
  api_key: "  abc  "
  playmethod: download
  api_base: https://example.test/api
http:
  timeout: 5
  rate_limit: 2
cache:
  metadata_ttl: 60
paging:
  max_items: 100
  reset_friend_offset: false
logging:
  level: debug
""")
        config = load_config(path)

        assert config.soundcloud.api_key == "abc"
        assert config.soundcloud.authenticated
        assert config.soundcloud.playmethod == "download"
        assert config.soundcloud.api_base == "https://example.test/api/"
        assert config.http.timeout == 5
        assert config.http.rate_limit == 2
        assert config.cache.metadata_ttl == 60
        assert config.paging.max_items == 100
        assert config.paging.reset_friend_offset is False
        assert config.logging.level == "DEBUG"

    def test_empty_file(self, temp_dir):
        """An empty file gives defaults"""
        config = load_config(write_config(temp_dir, ""))
        assert config == Config()

    def test_invalid_yaml(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(write_config(temp_dir, "soundcloud: [unclosed"))

    def test_section_must_be_dict(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(write_config(temp_dir, "http: 5\n"))

    def test_unknown_playmethod(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(write_config(temp_dir, "soundcloud:\n  playmethod: radio\n"))

    def test_non_positive_timeout(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(write_config(temp_dir, "http:\n  timeout: 0\n"))

    def test_bad_log_level(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(write_config(temp_dir, "logging:\n  level: LOUD\n"))


class TestEnvironment:
    """Test environment overrides"""

    def test_env_overrides_file(self, temp_dir, monkeypatch):
        """SQUEEZECLOUD_* variables win over the file"""
        path = write_config(temp_dir, "soundcloud:\n  api_key: from-file\n")
        monkeypatch.setenv("SQUEEZECLOUD_API_KEY", "from-env")
        monkeypatch.setenv("SQUEEZECLOUD_PLAYMETHOD", "download")

        config = load_config(path)

        assert config.soundcloud.api_key == "from-env"
        assert config.soundcloud.playmethod == "download"

    def test_empty_client_id_falls_back(self, temp_dir, monkeypatch):
        monkeypatch.setenv("SQUEEZECLOUD_CLIENT_ID", "")
        monkeypatch.chdir(temp_dir)
        assert load_config().soundcloud.client_id == DEFAULT_CLIENT_ID
