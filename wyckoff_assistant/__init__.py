"""Wyckoff Trading Assistant back end: synthetic data, chart payloads and API."""

__version__ = "0.1.0"
