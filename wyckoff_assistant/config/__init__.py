"""
Configuration management.
"""

from .config import (
    Config,
    get_config,
    GeneratorConfig,
    VizConfig,
    LogConfig,
)

__all__ = [
    "Config",
    "get_config",
    "GeneratorConfig",
    "VizConfig",
    "LogConfig",
]
