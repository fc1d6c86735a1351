"""
Renderer Registry for visualization.

Provides fail-loud rendering for chart markers.
If an annotation attribute is not mapped, an explicit error is raised.
"""

from .markers import (
    MarkerRenderer,
    UnsupportedMarkerError,
    render_markers,
    render_sample,
    render_series,
)

__all__ = [
    "MarkerRenderer",
    "UnsupportedMarkerError",
    "render_markers",
    "render_sample",
    "render_series",
]
