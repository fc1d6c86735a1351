"""
Chart Visualization Module.

Provides a FastAPI server serving generated Wyckoff charts and sample
pattern analysis as lightweight-charts payloads.

Usage:
    python wyckoff_cli.py serve --port 8765
"""

from .server import create_app, run_server
from .session import ChartSession, SessionClosedError

__all__ = ["create_app", "run_server", "ChartSession", "SessionClosedError"]
