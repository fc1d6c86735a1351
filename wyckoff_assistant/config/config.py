"""
Configuration management for the Wyckoff assistant.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_MAX_BARS = 5000
DEFAULT_VIZ_PORT = 8765


@dataclass
class GeneratorConfig:
    """
    Synthetic generator settings.

    default_seed is applied by the API and CLI when a request carries no
    seed; None means every request draws fresh OS entropy.
    """
    default_seed: Optional[int] = None
    max_bars: int = DEFAULT_MAX_BARS

    def __post_init__(self):
        if self.default_seed is not None and self.default_seed < 0:
            raise ValueError(f"WYCKOFF_SEED must be non-negative, got {self.default_seed}")
        if self.max_bars <= 0:
            raise ValueError(f"WYCKOFF_MAX_BARS must be positive, got {self.max_bars}")


@dataclass
class VizConfig:
    """Chart server settings."""
    host: str = "127.0.0.1"
    port: int = DEFAULT_VIZ_PORT
    open_browser: bool = True
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ])


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = "logs"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables and provides
    typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        # Later files override earlier ones
        for env_name in [".env", env_file]:
            env_path = Path(env_name)
            if env_path.exists():
                load_dotenv(env_path, override=True)

        self.generator = self._load_generator_config()
        self.viz = self._load_viz_config()
        self.log = self._load_log_config()

        self._initialized = True

    def _load_generator_config(self) -> GeneratorConfig:
        seed_str = os.getenv("WYCKOFF_SEED", "").strip()
        return GeneratorConfig(
            default_seed=int(seed_str) if seed_str else None,
            max_bars=int(os.getenv("WYCKOFF_MAX_BARS", str(DEFAULT_MAX_BARS))),
        )

    def _load_viz_config(self) -> VizConfig:
        origins_str = os.getenv("VIZ_CORS_ORIGINS", "")
        origins = [o.strip() for o in origins_str.split(",") if o.strip()]
        config = VizConfig(
            host=os.getenv("VIZ_HOST", "127.0.0.1"),
            port=int(os.getenv("VIZ_PORT", str(DEFAULT_VIZ_PORT))),
            open_browser=_env_bool("VIZ_OPEN_BROWSER", "true"),
        )
        if origins:
            config.cors_origins = origins
        return config

    def _load_log_config(self) -> LogConfig:
        return LogConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            log_dir=os.getenv("LOG_DIR", "logs"),
        )

    def reload(self, env_file: str = ".env") -> 'Config':
        """Reload configuration from environment."""
        Config.reset()
        return Config(env_file)

    @classmethod
    def reset(cls):
        """Drop the process-wide instance (tests)."""
        if cls._instance is not None:
            cls._instance._initialized = False
        cls._instance = None

    def summary_short(self) -> str:
        seed = self.generator.default_seed
        return (
            f"Wyckoff Assistant | seed: {seed if seed is not None else 'random'} | "
            f"max bars: {self.generator.max_bars} | viz: {self.viz.host}:{self.viz.port}"
        )


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)
