"""
Configuration helpers read from the environment.
"""

from pathlib import Path
from unittest.mock import patch

from fancms.core import config


def test_data_root_follows_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATA_ROOT", str(tmp_path))
    assert config.get_data_root() == tmp_path


def test_relative_upload_dir_is_under_root(monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", "public/uploads")
    assert config.get_upload_dir(Path("/srv/site")) == Path("/srv/site/public/uploads")


def test_absolute_upload_dir_is_kept(monkeypatch, tmp_path):
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "media"))
    assert config.get_upload_dir(Path("/srv/site")) == tmp_path / "media"


def test_debug_flag(monkeypatch):
    monkeypatch.setenv("DEBUG", "false")
    assert config.debug_enabled() is False
    monkeypatch.setenv("DEBUG", "TRUE")
    assert config.debug_enabled() is True


def test_cors_origins_are_split():
    with patch.object(config, "CORS_ORIGINS", "http://a.test, http://b.test,,"):
        assert config.get_cors_origins() == ["http://a.test", "http://b.test"]


def test_defaults_are_valid():
    assert config.validate_config() == []


def test_invalid_limits_are_reported():
    with patch.object(config, "RATE_LIMIT_MAX_REQUESTS", 0), patch.object(config, "NEWS_PAGE_SIZE", 0):
        issues = config.validate_config()
    assert "RATE_LIMIT_MAX_REQUESTS must be >= 1" in issues
    assert "Page sizes must be >= 1" in issues
