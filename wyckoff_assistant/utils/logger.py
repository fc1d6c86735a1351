"""
Logging system for the Wyckoff assistant.
Provides structured, human-readable logs with file and console output.

Library modules log through ``logging.getLogger(__name__)``; everything
under the ``wyckoff_assistant`` namespace propagates into the handlers
installed here.
"""

import copy
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "wyckoff_assistant"


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Console formatter that colours level name and message."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        # Work on a copy so the file handler still sees plain text
        record = copy.copy(record)
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        record.msg = f"{color}{record.getMessage()}{Colors.RESET}"
        record.args = None
        return super().format(record)


class AssistantLogger:
    """
    Central logging system.

    Features:
    - Console output with colors
    - Dated log file per day (assistant_YYYYMMDD.log)
    - Structured one-line records for generation calls
    """

    _instance: Optional['AssistantLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO"):
        if AssistantLogger._initialized:
            return

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.main_logger = self._create_logger(ROOT_LOGGER_NAME, log_level)

        AssistantLogger._initialized = True

    def _create_logger(self, name: str, level: str) -> logging.Logger:
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

        log_file = self.log_dir / f"assistant_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

        return logger

    def info(self, msg: str, *args, **kwargs):
        self.main_logger.info(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self.main_logger.debug(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.main_logger.error(msg, *args, **kwargs)

    def series(self, source: str, bars: int, seed: Optional[int] = None,
               kind: str = "archetype", **kwargs):
        """
        Log a generation call with structured format.

        Args:
            source: What was generated (archetype name or ticker)
            bars: Number of bars produced
            seed: Seed used (None = OS entropy)
            kind: Field name for source: "archetype" or "symbol"
            **kwargs: Additional fields (data_hash, annotations, ...)
        """
        parts = [
            "[SERIES]",
            f"{kind}={source}",
            f"bars={bars}",
            f"seed={seed if seed is not None else 'random'}",
        ]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")

        self.main_logger.info(" | ".join(parts))


# Global logger instance
_logger: Optional[AssistantLogger] = None


def _configured_log_settings(log_dir: Optional[str], log_level: Optional[str]) -> tuple[str, str]:
    """Fill unset arguments from LOG_DIR / LOG_LEVEL."""
    from ..config import get_config

    log_config = get_config().log
    return log_dir or log_config.log_dir, log_level or log_config.level


def get_logger(log_dir: Optional[str] = None, log_level: Optional[str] = None) -> AssistantLogger:
    """Get or create the global logger instance (defaults from config)."""
    global _logger
    if _logger is None:
        _logger = AssistantLogger(*_configured_log_settings(log_dir, log_level))
        _configure_third_party_loggers()
    return _logger


def setup_logger(log_dir: Optional[str] = None, log_level: Optional[str] = None) -> AssistantLogger:
    """Initialize the logger with custom settings (defaults from config)."""
    global _logger
    AssistantLogger._initialized = False
    AssistantLogger._instance = None
    _logger = AssistantLogger(*_configured_log_settings(log_dir, log_level))
    _configure_third_party_loggers()
    return _logger


def _configure_third_party_loggers():
    """Quieten uvicorn's per-request access log."""
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
