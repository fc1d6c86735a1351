"""
Sample market data for the analyzer page.

Generates a year (or three, or four) of random-walk candles for a ticker
with four Wyckoff patterns scripted in at fixed fractions of the series,
each tagged with a fixed confidence. The "analysis" reads those windows
back and attaches canned explanations with a few computed metrics.

NO pattern recognition happens here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from .types import (
    Annotation,
    Bar,
    Color,
    InvalidArgumentError,
    MarkerShape,
    Position,
    bars_to_dataframe,
    compute_bars_hash,
    validate_seed,
)


# =============================================================================
# Constants
# =============================================================================
SYMBOL_BASE_PRICES: dict[str, float] = {
    "AAPL": 150.0,
    "MSFT": 300.0,
    "AMZN": 120.0,
    "GOOGL": 130.0,
    "TSLA": 200.0,
}
DEFAULT_BASE_PRICE = 100.0

SYMBOL_VOLATILITY: dict[str, float] = {"TSLA": 0.03}
DEFAULT_VOLATILITY = 0.015

SECONDS_PER_DAY = 86400

# timeframe -> (candle count, seconds per candle)
TIMEFRAMES: dict[str, tuple[int, int]] = {
    "1D": (365, SECONDS_PER_DAY),
    "1W": (156, 7 * SECONDS_PER_DAY),
    "1M": (52, 30 * SECONDS_PER_DAY),
}
DEFAULT_TIMEFRAME = "1D"

BASE_VOLUME = 1_000_000
SCRIPTED_EVENT_LENGTH = 3  # spring/upthrust windows span the event bar + 3


class PatternType(str, Enum):
    ACCUMULATION = "accumulation"
    DISTRIBUTION = "distribution"
    SPRING = "spring"
    UPTHRUST = "upthrust"


# pattern -> (start fraction, end fraction or None for a scripted event, confidence)
PATTERN_LAYOUT: dict[PatternType, tuple[float, float | None, int]] = {
    PatternType.ACCUMULATION: (0.2, 0.3, 85),
    PatternType.DISTRIBUTION: (0.5, 0.6, 78),
    PatternType.SPRING: (0.75, None, 92),
    PatternType.UPTHRUST: (0.9, None, 88),
}


# =============================================================================
# Result Dataclasses
# =============================================================================
@dataclass(frozen=True)
class PatternWindow:
    """Scripted pattern span, end inclusive."""

    type: PatternType
    start: int
    end: int
    confidence: int

    def contains(self, index: int) -> bool:
        return self.start <= index <= self.end


@dataclass(frozen=True)
class SampleDataset:
    """
    Container for a generated sample.

    Attributes:
        symbol: Ticker (upper case)
        timeframe: "1D", "1W" or "1M"
        bars: Candles with Unix-second timestamps
        patterns: Scripted pattern windows
        seed: Seed used, None when drawn from OS entropy
        data_hash: SHA256[:12] of the bar data
    """

    symbol: str
    timeframe: str
    bars: tuple[Bar, ...]
    patterns: tuple[PatternWindow, ...]
    seed: int | None
    base_price: float
    volatility: float
    data_hash: str = ""

    def to_dataframe(self) -> pd.DataFrame:
        return bars_to_dataframe(self.bars)

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "bars": [bar.to_dict() for bar in self.bars],
            "patterns": [
                {
                    "type": p.type.value,
                    "start": p.start,
                    "end": p.end,
                    "confidence": p.confidence,
                }
                for p in self.patterns
            ],
            "seed": self.seed,
            "data_hash": self.data_hash,
        }


@dataclass(frozen=True)
class PatternExplanation:
    summary: str
    volume_analysis: str
    price_action: str
    key_levels: str

    def to_dict(self) -> dict[str, str]:
        return {
            "summary": self.summary,
            "volume_analysis": self.volume_analysis,
            "price_action": self.price_action,
            "key_levels": self.key_levels,
        }


@dataclass(frozen=True)
class Implication:
    text: str
    warning: bool = False


@dataclass(frozen=True)
class DetectedPattern:
    """A pattern window read back from a dataset, ready for display."""

    id: str
    type: PatternType
    start_index: int
    end_index: int
    start_time: int
    end_time: int
    confidence: int
    explanation: PatternExplanation
    implications: tuple[Implication, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "confidence": self.confidence,
            "explanation": self.explanation.to_dict(),
            "implications": [
                {"text": i.text, "warning": i.warning} for i in self.implications
            ],
        }


# =============================================================================
# Generation
# =============================================================================
def _pattern_windows(n_bars: int) -> tuple[PatternWindow, ...]:
    windows = []
    for pattern_type, (start_frac, end_frac, confidence) in PATTERN_LAYOUT.items():
        start = int(n_bars * start_frac)
        end = int(n_bars * end_frac) if end_frac is not None else start + SCRIPTED_EVENT_LENGTH
        windows.append(PatternWindow(pattern_type, start, min(end, n_bars - 1), confidence))
    return tuple(windows)


def _scripted_change(
    rng: np.random.Generator,
    i: int,
    windows: dict[PatternType, PatternWindow],
    volatility: float,
) -> float:
    """Per-bar price change: random walk unless inside a pattern window."""
    acc = windows[PatternType.ACCUMULATION]
    dist = windows[PatternType.DISTRIBUTION]
    spring = windows[PatternType.SPRING]
    upthrust = windows[PatternType.UPTHRUST]

    if acc.contains(i):
        if i == acc.start:
            return -0.01  # prior decline into the range
        if i == acc.end:
            return 0.01
        return (rng.random() - 0.45) * volatility * 0.7
    if dist.contains(i):
        if i == dist.start:
            return 0.01
        if i == dist.end:
            return -0.01
        return (rng.random() - 0.55) * volatility * 0.7
    if spring.contains(i):
        if i == spring.start:
            return -0.03  # drop below support
        if i == spring.start + 1:
            return 0.04   # quick reversal
        return 0.01
    if upthrust.contains(i):
        if i == upthrust.start:
            return 0.03
        if i == upthrust.start + 1:
            return -0.04
        return -0.01
    return (rng.random() - 0.5) * volatility


def _volume_multiplier(
    rng: np.random.Generator,
    i: int,
    windows: dict[PatternType, PatternWindow],
    is_up: bool,
) -> float:
    if windows[PatternType.ACCUMULATION].contains(i):
        # Heavier volume on up days while smart money absorbs supply
        return 1.5 if is_up and rng.random() > 0.5 else 1.0
    if windows[PatternType.DISTRIBUTION].contains(i):
        return 1.5 if not is_up and rng.random() > 0.5 else 1.0
    if i == windows[PatternType.SPRING].start or i == windows[PatternType.UPTHRUST].start:
        return 2.0
    return 1.0


def _default_end_time() -> datetime:
    today = datetime.now(timezone.utc).date()
    return datetime.combine(today, time.min, tzinfo=timezone.utc)


def generate_sample_data(
    symbol: str,
    timeframe: str = DEFAULT_TIMEFRAME,
    seed: int | None = None,
    end_time: datetime | None = None,
) -> SampleDataset:
    """
    Generate a sample dataset for a ticker.

    Args:
        symbol: Ticker; AAPL, MSFT, AMZN, GOOGL and TSLA get their own base
            price, anything else starts at 100
        timeframe: "1D" (365 candles), "1W" (156) or "1M" (52)
        seed: Random seed for reproducibility
        end_time: Timestamp of the candle after the last one
            (default: today 00:00 UTC)

    Raises:
        InvalidArgumentError: Unknown timeframe, empty symbol or invalid seed
    """
    symbol = (symbol or "").strip().upper()
    if not symbol:
        raise InvalidArgumentError("symbol must not be empty")
    if timeframe not in TIMEFRAMES:
        raise InvalidArgumentError(f"Unknown timeframe: {timeframe}. Valid: {list(TIMEFRAMES.keys())}")
    seed = validate_seed(seed)

    n_bars, candle_seconds = TIMEFRAMES[timeframe]
    base_price = SYMBOL_BASE_PRICES.get(symbol, DEFAULT_BASE_PRICE)
    volatility = SYMBOL_VOLATILITY.get(symbol, DEFAULT_VOLATILITY)

    end = end_time or _default_end_time()
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    start = end - timedelta(seconds=n_bars * candle_seconds)
    start_ts = int(start.timestamp())

    rng = np.random.default_rng(seed)
    patterns = _pattern_windows(n_bars)
    windows = {p.type: p for p in patterns}

    bars: list[Bar] = []
    price = base_price
    for i in range(n_bars):
        price = price * (1 + _scripted_change(rng, i, windows, volatility))

        open_ = price
        high = open_ * (1 + rng.random() * volatility * 0.5)
        low = open_ * (1 - rng.random() * volatility * 0.5)
        close = (open_ + high + low) / 3 + (rng.random() - 0.5) * volatility * price

        volume = BASE_VOLUME * (0.5 + rng.random())
        volume *= _volume_multiplier(rng, i, windows, close > open_)

        bars.append(Bar.bounded(i, open_, high, low, close, volume, time=start_ts + i * candle_seconds))

    return SampleDataset(
        symbol=symbol,
        timeframe=timeframe,
        bars=tuple(bars),
        patterns=patterns,
        seed=seed,
        base_price=base_price,
        volatility=volatility,
        data_hash=compute_bars_hash(bars),
    )


# =============================================================================
# Explanations
# =============================================================================
def _coerce_pattern_type(pattern_type: PatternType | str) -> PatternType | None:
    if isinstance(pattern_type, PatternType):
        return pattern_type
    try:
        return PatternType(str(pattern_type).lower())
    except ValueError:
        return None


def explain_pattern(
    pattern_type: PatternType | str,
    bars: list[Bar] | tuple[Bar, ...],
) -> PatternExplanation:
    """
    Canned explanation for a pattern window with a few computed metrics.

    Unknown pattern types get a "not available" explanation.

    Raises:
        InvalidArgumentError: If bars is empty
    """
    if not bars:
        raise InvalidArgumentError("Cannot explain a pattern over zero bars")

    first, last = bars[0], bars[-1]
    price_change = (last.close - first.close) / first.close * 100
    avg_volume = sum(b.volume for b in bars) / len(bars)
    up_days = sum(1 for b in bars if b.close > b.open)
    down_days = sum(1 for b in bars if b.close < b.open)
    volume_ratio = first.volume / avg_volume

    kind = _coerce_pattern_type(pattern_type)
    if kind is PatternType.ACCUMULATION:
        volume_note = "higher volume on up days" if up_days > down_days else "decreasing volume on down days"
        return PatternExplanation(
            summary="Accumulation phase detected with institutional buying activity.",
            volume_analysis=f"Volume analysis shows {volume_note}, indicating accumulation by smart money.",
            price_action=(
                f"Price action shows sideways movement ({price_change:.2f}% net change) "
                "after a downtrend, typical of accumulation."
            ),
            key_levels="Support level established with multiple tests but no significant breakdowns.",
        )
    if kind is PatternType.DISTRIBUTION:
        volume_note = "higher volume on down days" if down_days > up_days else "decreasing volume on up days"
        return PatternExplanation(
            summary="Distribution phase detected with institutional selling activity.",
            volume_analysis=f"Volume analysis shows {volume_note}, indicating distribution by smart money.",
            price_action=(
                f"Price action shows sideways movement ({price_change:.2f}% net change) "
                "after an uptrend, typical of distribution."
            ),
            key_levels="Resistance level established with multiple tests but no significant breakouts.",
        )
    if kind is PatternType.SPRING:
        return PatternExplanation(
            summary="Spring pattern detected - false breakdown with strong reversal.",
            volume_analysis=(
                f"Volume spike on the spring day ({volume_ratio:.2f}x average volume) "
                "followed by sustained buying."
            ),
            price_action="Price briefly penetrated support level before quickly reversing, trapping sellers.",
            key_levels="Support level violated and then reclaimed, confirming the spring pattern.",
        )
    if kind is PatternType.UPTHRUST:
        return PatternExplanation(
            summary="Upthrust pattern detected - false breakout with strong reversal.",
            volume_analysis=(
                f"Volume spike on the upthrust day ({volume_ratio:.2f}x average volume) "
                "followed by sustained selling."
            ),
            price_action="Price briefly penetrated resistance level before quickly reversing, trapping buyers.",
            key_levels="Resistance level violated and then lost, confirming the upthrust pattern.",
        )
    return PatternExplanation(
        summary="Pattern analysis not available.",
        volume_analysis="Volume data not analyzed.",
        price_action="Price action not analyzed.",
        key_levels="Key levels not identified.",
    )


TRADING_IMPLICATIONS: dict[PatternType, tuple[Implication, ...]] = {
    PatternType.ACCUMULATION: (
        Implication("Look for a breakout above the trading range as confirmation of accumulation completion."),
        Implication("Consider long positions with stops below the trading range support."),
        Implication("Be cautious of false breakouts - confirm with volume expansion.", warning=True),
    ),
    PatternType.DISTRIBUTION: (
        Implication("Look for a breakdown below the trading range as confirmation of distribution completion."),
        Implication("Consider short positions with stops above the trading range resistance."),
        Implication("Be cautious of false breakdowns - confirm with volume expansion.", warning=True),
    ),
    PatternType.SPRING: (
        Implication("Consider long positions with stops below the spring low."),
        Implication("Look for a secondary test that holds above the spring low as confirmation."),
        Implication("Expect a markup phase to follow a successful spring."),
    ),
    PatternType.UPTHRUST: (
        Implication("Consider short positions with stops above the upthrust high."),
        Implication("Look for a secondary test that fails below the upthrust high as confirmation."),
        Implication("Expect a markdown phase to follow a successful upthrust."),
    ),
}

_NO_IMPLICATIONS = (
    Implication("No specific trading implications available for this pattern.", warning=True),
)


def trading_implications(pattern_type: PatternType | str) -> tuple[Implication, ...]:
    kind = _coerce_pattern_type(pattern_type)
    if kind is None:
        return _NO_IMPLICATIONS
    return TRADING_IMPLICATIONS[kind]


# =============================================================================
# Analysis / markers
# =============================================================================
def analyze(dataset: SampleDataset) -> list[DetectedPattern]:
    """Read the scripted pattern windows back as detected patterns."""
    detected = []
    for window in dataset.patterns:
        window_bars = dataset.bars[window.start:window.end + 1]
        detected.append(DetectedPattern(
            id=f"{window.type.value}-{window.start}",
            type=window.type,
            start_index=window.start,
            end_index=window.end,
            start_time=dataset.bars[window.start].chart_time,
            end_time=dataset.bars[window.end].chart_time,
            confidence=window.confidence,
            explanation=explain_pattern(window.type, window_bars),
            implications=trading_implications(window.type),
        ))
    return detected


def pattern_annotations(pattern: DetectedPattern) -> list[Annotation]:
    """Chart markers for one detected pattern."""
    if pattern.type is PatternType.ACCUMULATION:
        return [
            Annotation(pattern.start_index, Position.BELOW, "Accumulation Start", Color.GREEN, MarkerShape.SQUARE),
            Annotation(pattern.end_index, Position.BELOW, "Accumulation End", Color.GREEN, MarkerShape.SQUARE),
        ]
    if pattern.type is PatternType.DISTRIBUTION:
        return [
            Annotation(pattern.start_index, Position.ABOVE, "Distribution Start", Color.RED, MarkerShape.SQUARE),
            Annotation(pattern.end_index, Position.ABOVE, "Distribution End", Color.RED, MarkerShape.SQUARE),
        ]
    if pattern.type is PatternType.SPRING:
        return [Annotation(pattern.start_index, Position.BELOW, "Spring", Color.PURPLE, MarkerShape.ARROW_UP)]
    return [Annotation(pattern.start_index, Position.ABOVE, "Upthrust", Color.AMBER, MarkerShape.ARROW_DOWN)]
