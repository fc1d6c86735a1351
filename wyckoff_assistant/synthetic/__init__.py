"""
Synthetic Wyckoff data.

Procedurally generated OHLCV series annotated with Wyckoff event labels
at fixed (scaled) bar indices, plus the analyzer page's sample datasets.

Usage:
    from wyckoff_assistant.synthetic import generate_series

    series = generate_series("accumulation", bar_count=80, seed=42)
    df = series.to_dataframe()
"""

from .generator import generate_series, verify_series_hash
from .phases import (
    ARCHETYPE_SPECS,
    DEFAULT_ARCHETYPE,
    get_archetype_spec,
    resolve_archetype,
)
from .sample_data import (
    DetectedPattern,
    PatternType,
    SampleDataset,
    analyze,
    explain_pattern,
    generate_sample_data,
    trading_implications,
)
from .types import (
    Annotation,
    Archetype,
    Bar,
    Color,
    InvalidArgumentError,
    MarkerShape,
    Position,
    Series,
    TradingRange,
    VisibleRange,
)

__all__ = [
    "generate_series",
    "verify_series_hash",
    "ARCHETYPE_SPECS",
    "DEFAULT_ARCHETYPE",
    "get_archetype_spec",
    "resolve_archetype",
    "DetectedPattern",
    "PatternType",
    "SampleDataset",
    "analyze",
    "explain_pattern",
    "generate_sample_data",
    "trading_implications",
    "Annotation",
    "Archetype",
    "Bar",
    "Color",
    "InvalidArgumentError",
    "MarkerShape",
    "Position",
    "Series",
    "TradingRange",
    "VisibleRange",
]
