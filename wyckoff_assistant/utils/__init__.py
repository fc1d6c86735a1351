"""Shared utilities."""

from .logger import AssistantLogger, get_logger, setup_logger

__all__ = ["AssistantLogger", "get_logger", "setup_logger"]
