"""
Marker Renderer Registry.

Maps annotation colours, positions and shapes to lightweight-charts values
and builds chart payloads for series and sample datasets.
Fails loud if an unmapped colour or shape is encountered.
"""

from typing import Any, Iterable, Sequence

from ...synthetic.sample_data import SampleDataset
from ...synthetic.types import Annotation, Bar, Color, MarkerShape, Position, Series, VisibleRange


class UnsupportedMarkerError(Exception):
    """Raised when an annotation attribute has no chart mapping."""

    def __init__(self, value: str, supported: list[str]):
        self.value = value
        self.supported = supported
        super().__init__(
            f"Visualizer does not support marker attribute '{value}'. "
            f"Supported: {supported}"
        )


# Volume bar colours follow candle direction
UP_VOLUME_COLOR = "rgba(38, 166, 154, 0.5)"
DOWN_VOLUME_COLOR = "rgba(239, 83, 80, 0.5)"


class MarkerRenderer:
    """
    Registry of supported marker mappings.

    Fail-loud: raises UnsupportedMarkerError for unknown values.
    """

    COLORS: dict[Color, str] = {
        Color.RED: "#F44336",
        Color.GREEN: "#4CAF50",
        Color.BLUE: "#2196F3",
        Color.ORANGE: "#FF9800",
        Color.PURPLE: "#8B5CF6",
        Color.AMBER: "#F59E0B",
    }

    POSITIONS: dict[Position, str] = {
        Position.ABOVE: "aboveBar",
        Position.BELOW: "belowBar",
    }

    SHAPES: dict[MarkerShape, str] = {
        MarkerShape.CIRCLE: "circle",
        MarkerShape.SQUARE: "square",
        MarkerShape.ARROW_UP: "arrowUp",
        MarkerShape.ARROW_DOWN: "arrowDown",
    }

    @staticmethod
    def _lookup(table: dict, key: Any) -> str:
        if key not in table:
            raise UnsupportedMarkerError(
                str(getattr(key, "value", key)),
                sorted(k.value for k in table),
            )
        return table[key]

    @classmethod
    def get_color(cls, color: Color) -> str:
        return cls._lookup(cls.COLORS, color)

    @classmethod
    def get_position(cls, position: Position) -> str:
        return cls._lookup(cls.POSITIONS, position)

    @classmethod
    def get_shape(cls, shape: MarkerShape) -> str:
        return cls._lookup(cls.SHAPES, shape)

    @classmethod
    def render(cls, annotation: Annotation, bars: Sequence[Bar]) -> dict[str, Any]:
        """
        Render one annotation as a lightweight-charts marker.

        Raises:
            ValueError: If the annotation points outside the bars
            UnsupportedMarkerError: If a colour/shape/position is unmapped
        """
        if not 0 <= annotation.bar_index < len(bars):
            raise ValueError(
                f"Annotation '{annotation.label}' at bar {annotation.bar_index} "
                f"is outside [0, {len(bars)})"
            )
        return {
            "time": bars[annotation.bar_index].chart_time,
            "position": cls.get_position(annotation.position),
            "color": cls.get_color(annotation.color),
            "shape": cls.get_shape(annotation.shape),
            "text": annotation.label,
        }


# =============================================================================
# Payload builders
# =============================================================================
def candles_to_chart_data(bars: Sequence[Bar]) -> list[dict[str, Any]]:
    return [
        {
            "time": b.chart_time,
            "open": b.open,
            "high": b.high,
            "low": b.low,
            "close": b.close,
            "volume": float(b.volume),
        }
        for b in bars
    ]


def volume_to_chart_data(bars: Sequence[Bar]) -> list[dict[str, Any]]:
    return [
        {
            "time": b.chart_time,
            "value": float(b.volume),
            "color": UP_VOLUME_COLOR if b.close >= b.open else DOWN_VOLUME_COLOR,
        }
        for b in bars
    ]


def render_markers(annotations: Iterable[Annotation], bars: Sequence[Bar]) -> list[dict[str, Any]]:
    """Render annotations, sorted by time (the chart library requires it)."""
    markers = [MarkerRenderer.render(a, bars) for a in annotations]
    # Stable sort keeps phase labels ahead of events on the same bar
    return sorted(markers, key=lambda m: m["time"])


def _visible_range_times(visible_range: VisibleRange, bars: Sequence[Bar]) -> dict[str, int]:
    return {
        "from": bars[visible_range.from_index].chart_time,
        "to": bars[visible_range.to_index].chart_time,
    }


def render_series(series: Series, annotations: Iterable[Annotation] | None = None) -> dict[str, Any]:
    """Chart payload for an archetype series."""
    return {
        "archetype": series.archetype.value,
        "bar_count": series.bar_count,
        "seed": series.seed,
        "data_hash": series.data_hash,
        "data": candles_to_chart_data(series.bars),
        "volume": volume_to_chart_data(series.bars),
        "markers": render_markers(
            series.annotations if annotations is None else annotations, series.bars
        ),
        "visible_range": _visible_range_times(series.visible_range, series.bars),
        "ranges": [
            {
                "start": r.start,
                "end": r.end,
                "support": r.support,
                "resistance": r.resistance,
            }
            for r in series.ranges
        ],
    }


def render_sample(
    dataset: SampleDataset,
    annotations: Iterable[Annotation],
    visible_range: VisibleRange | None = None,
) -> dict[str, Any]:
    """Chart payload for a sample dataset and the markers currently shown."""
    if visible_range is None:
        visible_range = VisibleRange(0, len(dataset.bars) - 1)
    return {
        "symbol": dataset.symbol,
        "timeframe": dataset.timeframe,
        "seed": dataset.seed,
        "data_hash": dataset.data_hash,
        "data": candles_to_chart_data(dataset.bars),
        "volume": volume_to_chart_data(dataset.bars),
        "markers": render_markers(annotations, dataset.bars),
        "visible_range": _visible_range_times(visible_range, dataset.bars),
    }
