"""
Chart session.

Owns everything the chart page used to keep in page globals: the loaded
series or sample dataset, detected patterns, per-pattern visibility and
the confidence threshold. One session per consumer; nothing is shared.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from ..synthetic.generator import generate_series
from ..synthetic.sample_data import (
    DetectedPattern,
    PatternType,
    SampleDataset,
    analyze,
    generate_sample_data,
    pattern_annotations,
)
from ..synthetic.types import Annotation, Archetype, InvalidArgumentError, Series, VisibleRange
from .renderers.markers import render_sample, render_series

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 70
ZOOM_PADDING = 10


class SessionClosedError(RuntimeError):
    """Raised when a closed session is used."""


class PatternNotFoundError(KeyError):
    """Raised when a pattern id is not among the session's detected patterns."""


class ChartSession:
    """
    Chart state for one consumer.

    Usage:
        with ChartSession() as session:
            session.load_sample("AAPL", seed=7)
            session.set_visibility("spring", False)
            payload = session.chart_payload()
    """

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.series: Series | None = None
        self.dataset: SampleDataset | None = None
        self.patterns: list[DetectedPattern] = []
        self.visible_range: VisibleRange | None = None
        self.visibility: dict[PatternType, bool] = {t: True for t in PatternType}
        self.confidence_threshold: int = DEFAULT_CONFIDENCE_THRESHOLD
        self._closed = False
        logger.debug("Session %s opened", self.session_id)

    def __enter__(self) -> "ChartSession":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Session {self.session_id} is closed")

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------
    def load_archetype(
        self,
        archetype: Archetype | str | None,
        bar_count: int | None = None,
        seed: int | None = None,
    ) -> Series:
        """Replace the session contents with a generated archetype series."""
        self._ensure_open()
        series = generate_series(archetype, bar_count=bar_count, seed=seed)
        self.clear()
        self.series = series
        self.visible_range = series.visible_range
        return series

    def load_sample(
        self,
        symbol: str,
        timeframe: str = "1D",
        seed: int | None = None,
        end_time: datetime | None = None,
    ) -> SampleDataset:
        """Replace the session contents with a sample dataset and analyze it."""
        self._ensure_open()
        dataset = generate_sample_data(symbol, timeframe=timeframe, seed=seed, end_time=end_time)
        self.clear()
        self.dataset = dataset
        self.visible_range = VisibleRange(0, len(dataset.bars) - 1)
        self.analyze()
        return dataset

    def analyze(self) -> list[DetectedPattern]:
        self._ensure_open()
        if self.dataset is None:
            raise InvalidArgumentError("No sample dataset loaded; call load_sample() first")
        self.patterns = analyze(self.dataset)
        logger.info(
            "Session %s analyzed %s %s: %d patterns",
            self.session_id, self.dataset.symbol, self.dataset.timeframe, len(self.patterns),
        )
        return self.patterns

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------
    def set_visibility(self, pattern_type: PatternType | str, visible: bool) -> None:
        self._ensure_open()
        try:
            kind = PatternType(pattern_type)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown pattern type: {pattern_type}. Valid: {[t.value for t in PatternType]}"
            ) from None
        self.visibility[kind] = bool(visible)

    def set_confidence_threshold(self, value: int) -> None:
        self._ensure_open()
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 100:
            raise InvalidArgumentError(f"Confidence threshold must be within [0, 100], got {value!r}")
        self.confidence_threshold = value

    def visible_patterns(self) -> list[DetectedPattern]:
        """Patterns passing visibility and confidence filters, newest first."""
        self._ensure_open()
        shown = [
            p for p in self.patterns
            if self.visibility[p.type] and p.confidence >= self.confidence_threshold
        ]
        return sorted(shown, key=lambda p: p.start_time, reverse=True)

    def visible_markers(self) -> list[Annotation]:
        self._ensure_open()
        if self.series is not None:
            return list(self.series.annotations)
        annotations: list[Annotation] = []
        for pattern in self.visible_patterns():
            annotations.extend(pattern_annotations(pattern))
        return sorted(annotations, key=lambda a: a.bar_index)

    # -------------------------------------------------------------------------
    # Viewport
    # -------------------------------------------------------------------------
    def get_pattern(self, pattern_id: str) -> DetectedPattern:
        self._ensure_open()
        for pattern in self.patterns:
            if pattern.id == pattern_id:
                return pattern
        raise PatternNotFoundError(pattern_id)

    def zoom_to_pattern(self, pattern_id: str, padding: int = ZOOM_PADDING) -> VisibleRange:
        """Focus the viewport on a pattern with padding, clamped to the data."""
        pattern = self.get_pattern(pattern_id)
        last = len(self.dataset.bars) - 1
        self.visible_range = VisibleRange(
            max(0, pattern.start_index - padding),
            min(last, pattern.end_index + padding),
        )
        return self.visible_range

    def chart_payload(self) -> dict[str, Any]:
        self._ensure_open()
        if self.series is not None:
            return render_series(self.series)
        if self.dataset is not None:
            return render_sample(self.dataset, self.visible_markers(), self.visible_range)
        raise InvalidArgumentError("Nothing loaded")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        """Drop loaded data; filters are kept."""
        self._ensure_open()
        self.series = None
        self.dataset = None
        self.patterns = []
        self.visible_range = None

    def close(self) -> None:
        if self._closed:
            return
        self.series = None
        self.dataset = None
        self.patterns = []
        self.visible_range = None
        self._closed = True
        logger.debug("Session %s closed", self.session_id)
