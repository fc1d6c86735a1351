"""
Synthetic series type definitions.

This module is the CANONICAL location for the generated data model:
bars, annotations, reference ranges and the Series container.
Everything here is immutable once produced.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from numbers import Integral
from enum import Enum
from typing import Any

import pandas as pd


HASH_LENGTH = 12  # SHA256 prefix length


class InvalidArgumentError(ValueError):
    """Raised when a generation request violates a precondition."""


# =============================================================================
# Enums
# =============================================================================
class Archetype(str, Enum):
    """Named Wyckoff pattern templates the generator can produce."""

    OVERVIEW = "overview"
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"
    SPRING = "spring"
    UPTHRUST = "upthrust"
    TRADING_RANGE = "trading-range"


class DriftPolicy(str, Enum):
    """How a phase moves the running price on non-event bars."""

    TREND_DOWN = "trend_down"
    TREND_UP = "trend_up"
    SIDEWAYS = "sideways"
    SHOCK_DOWN = "shock_down"
    SHOCK_UP = "shock_up"

    @property
    def direction(self) -> int:
        """+1 for rising policies, -1 for falling, 0 for sideways."""
        if self in (DriftPolicy.TREND_UP, DriftPolicy.SHOCK_UP):
            return 1
        if self in (DriftPolicy.TREND_DOWN, DriftPolicy.SHOCK_DOWN):
            return -1
        return 0

    @property
    def is_shock(self) -> bool:
        return self in (DriftPolicy.SHOCK_UP, DriftPolicy.SHOCK_DOWN)


class Position(str, Enum):
    """Vertical placement of an annotation relative to its bar."""

    ABOVE = "above"
    BELOW = "below"


class MarkerShape(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"
    ARROW_UP = "arrowUp"
    ARROW_DOWN = "arrowDown"


class Color(str, Enum):
    """Annotation palette (Material colours used by the chart page)."""

    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    ORANGE = "orange"
    PURPLE = "purple"
    AMBER = "amber"


# =============================================================================
# Records
# =============================================================================
@dataclass(frozen=True)
class Bar:
    """
    Single OHLCV bar.

    Invariant: low <= min(open, close) and high >= max(open, close),
    volume > 0. Checked on construction.
    """

    index: int
    open: float
    high: float
    low: float
    close: float
    volume: int
    time: int | None = None  # Unix seconds, sample datasets only

    def __post_init__(self) -> None:
        if self.high < max(self.open, self.close) or self.low > min(self.open, self.close):
            raise ValueError(
                f"Bar {self.index} violates OHLC bounds: "
                f"o={self.open} h={self.high} l={self.low} c={self.close}"
            )
        if self.volume <= 0:
            raise ValueError(f"Bar {self.index} has non-positive volume {self.volume}")

    @classmethod
    def bounded(
        cls,
        index: int,
        open_: float,
        high: float,
        low: float,
        close: float,
        volume: float,
        time: int | None = None,
    ) -> "Bar":
        """Build a bar, widening high/low so they contain open and close."""
        return cls(
            index=index,
            open=float(open_),
            high=float(max(high, open_, close)),
            low=float(min(low, open_, close)),
            close=float(close),
            volume=max(1, int(round(volume))),
            time=time,
        )

    @property
    def chart_time(self) -> int:
        """Time axis value: timestamp when present, else bar index."""
        return self.time if self.time is not None else self.index

    @property
    def is_up(self) -> bool:
        return self.close > self.open

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "time": self.chart_time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class Annotation:
    """Point-in-time label anchored to one bar."""

    bar_index: int
    position: Position
    label: str
    color: Color
    shape: MarkerShape = MarkerShape.CIRCLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "bar_index": self.bar_index,
            "position": self.position.value,
            "label": self.label,
            "color": self.color.value,
            "shape": self.shape.value,
        }


@dataclass(frozen=True)
class VisibleRange:
    """Inclusive bar range the chart should focus on."""

    from_index: int
    to_index: int

    def to_dict(self) -> dict[str, int]:
        return {"from": self.from_index, "to": self.to_index}


@dataclass(frozen=True)
class TradingRange:
    """Support/resistance references established by a phase."""

    start: int
    end: int  # exclusive
    support: float
    resistance: float

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end


@dataclass(frozen=True)
class Series:
    """
    Output of one generation call.

    Attributes:
        archetype: Archetype actually generated (after fallback)
        bars: Ordered bars, bars[i].index == i
        annotations: Ordered annotations (by bar index, phase labels first)
        visible_range: Suggested chart viewport
        seed: Seed used, None when drawn from OS entropy
        base_price: Starting price of the walk
        ranges: Reference ranges established during the walk
        data_hash: SHA256[:12] of the bar data for verification
    """

    archetype: Archetype
    bars: tuple[Bar, ...]
    annotations: tuple[Annotation, ...]
    visible_range: VisibleRange
    seed: int | None
    base_price: float
    ranges: tuple[TradingRange, ...] = field(default_factory=tuple)
    data_hash: str = ""

    @property
    def bar_count(self) -> int:
        return len(self.bars)

    def range_at(self, index: int) -> TradingRange | None:
        """Get the reference range in force at a bar index."""
        for trading_range in self.ranges:
            if trading_range.contains(index):
                return trading_range
        return None

    def annotations_labeled(self, label: str) -> list[Annotation]:
        return [a for a in self.annotations if a.label == label]

    def to_dataframe(self) -> pd.DataFrame:
        """Bars as a DataFrame with standard OHLCV column names."""
        return bars_to_dataframe(self.bars)

    def to_dict(self) -> dict[str, Any]:
        return {
            "archetype": self.archetype.value,
            "bar_count": self.bar_count,
            "seed": self.seed,
            "base_price": self.base_price,
            "bars": [bar.to_dict() for bar in self.bars],
            "annotations": [a.to_dict() for a in self.annotations],
            "visible_range": self.visible_range.to_dict(),
            "ranges": [
                {
                    "start": r.start,
                    "end": r.end,
                    "support": r.support,
                    "resistance": r.resistance,
                }
                for r in self.ranges
            ],
            "data_hash": self.data_hash,
        }


# =============================================================================
# Helpers
# =============================================================================
def bars_to_dataframe(bars: tuple[Bar, ...] | list[Bar]) -> pd.DataFrame:
    return pd.DataFrame({
        "index": [b.index for b in bars],
        "time": [b.chart_time for b in bars],
        "open": [b.open for b in bars],
        "high": [b.high for b in bars],
        "low": [b.low for b in bars],
        "close": [b.close for b in bars],
        "volume": [b.volume for b in bars],
    })


def compute_bars_hash(bars: tuple[Bar, ...] | list[Bar]) -> str:
    """Compute deterministic hash of bar data."""
    # CSV representation for determinism
    csv_data = bars_to_dataframe(bars).to_csv(index=False)
    return hashlib.sha256(csv_data.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def validate_seed(seed: int | None) -> int | None:
    """
    Check a random seed.

    Accepts None (fresh entropy) or any non-negative integral value,
    numpy integers included.

    Raises:
        InvalidArgumentError: Negative, boolean or non-integral seed
    """
    if seed is None:
        return None
    if isinstance(seed, bool) or not isinstance(seed, Integral) or seed < 0:
        raise InvalidArgumentError(f"seed must be a non-negative integer, got {seed!r}")
    return int(seed)
