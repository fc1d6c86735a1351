"""
Tests for the configuration singleton.
"""

import os

import pytest

from wyckoff_assistant.config import Config, get_config
from wyckoff_assistant.config.config import DEFAULT_MAX_BARS


class TestConfig:
    """Defaults, environment overrides and lifecycle."""

    def test_defaults(self):
        """Unset variables give the documented defaults."""
        config = get_config()
        assert config.generator.default_seed is None
        assert config.generator.max_bars == DEFAULT_MAX_BARS
        assert config.viz.port == 8765
        assert config.viz.open_browser is True
        assert config.log.level == "INFO"

    def test_singleton(self):
        """get_config returns one instance."""
        assert get_config() is get_config()

    def test_environment_overrides(self, monkeypatch):
        """Environment variables override every section."""
        monkeypatch.setenv("WYCKOFF_SEED", "7")
        monkeypatch.setenv("WYCKOFF_MAX_BARS", "300")
        monkeypatch.setenv("VIZ_PORT", "9000")
        monkeypatch.setenv("VIZ_OPEN_BROWSER", "false")
        monkeypatch.setenv("VIZ_CORS_ORIGINS", "http://a.test, http://b.test")
        config = get_config()
        assert config.generator.default_seed == 7
        assert config.generator.max_bars == 300
        assert config.viz.port == 9000
        assert config.viz.open_browser is False
        assert config.viz.cors_origins == ["http://a.test", "http://b.test"]

    def test_env_file(self, tmp_path):
        """A custom .env file is loaded."""
        env_file = tmp_path / "custom.env"
        env_file.write_text("LOG_LEVEL=DEBUG\n")
        try:
            assert get_config(str(env_file)).log.level == "DEBUG"
        finally:
            os.environ.pop("LOG_LEVEL", None)

    def test_reset_and_reload(self, monkeypatch):
        """reload re-reads the environment into a new instance."""
        first = get_config()
        monkeypatch.setenv("VIZ_HOST", "0.0.0.0")
        assert get_config().viz.host == "127.0.0.1"
        reloaded = first.reload()
        assert reloaded is not first
        assert reloaded.viz.host == "0.0.0.0"

    @pytest.mark.parametrize("name,value", [("WYCKOFF_SEED", "-1"), ("WYCKOFF_MAX_BARS", "0")])
    def test_invalid_values(self, monkeypatch, name, value):
        """Out-of-range values raise ValueError."""
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            Config()
        Config.reset()

    def test_summary(self):
        """summary_short reports an unseeded generator as random."""
        assert "seed: random" in get_config().summary_short()
