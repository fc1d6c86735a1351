"""
Pytest configuration for the Wyckoff assistant tests.
"""

import pytest

from wyckoff_assistant.config import Config
from wyckoff_assistant.utils.logger import setup_logger


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Fresh config singleton and log directory per test."""
    for name in ("WYCKOFF_SEED", "WYCKOFF_MAX_BARS", "VIZ_HOST", "VIZ_PORT",
                 "VIZ_OPEN_BROWSER", "VIZ_CORS_ORIGINS", "LOG_LEVEL", "LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    setup_logger(str(tmp_path / "logs"), "DEBUG")
    Config.reset()
    yield
    Config.reset()
