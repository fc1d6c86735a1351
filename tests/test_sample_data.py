"""
Tests for the analyzer sample datasets.

Validates that:
1. Symbols and timeframes map to base price, volatility and candle count
2. Pattern windows sit at fixed fractions with fixed confidences
3. Bars keep OHLC bounds and carry evenly spaced timestamps
4. Explanations and implications return the canned texts with metrics
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from wyckoff_assistant.synthetic import InvalidArgumentError
from wyckoff_assistant.synthetic.sample_data import (
    PatternType,
    analyze,
    explain_pattern,
    generate_sample_data,
    pattern_annotations,
    trading_implications,
)
from wyckoff_assistant.synthetic.types import Bar, Position


END = datetime(2024, 6, 1, tzinfo=timezone.utc)


def make_bar(index, open_, close, volume=1000):
    return Bar.bounded(index, open_, max(open_, close), min(open_, close), close, volume)


class TestSampleGeneration:
    """generate_sample_data shapes."""

    @pytest.mark.parametrize("timeframe,count,step", [
        ("1D", 365, 86400),
        ("1W", 156, 7 * 86400),
        ("1M", 52, 30 * 86400),
    ])
    def test_timeframes(self, timeframe, count, step):
        """Each timeframe has its candle count and spacing."""
        dataset = generate_sample_data("AAPL", timeframe, seed=1, end_time=END)
        assert len(dataset.bars) == count
        times = [b.time for b in dataset.bars]
        assert all(b - a == step for a, b in zip(times, times[1:]))
        assert times[-1] == int(END.timestamp()) - step

    @pytest.mark.parametrize("symbol,price,volatility", [
        ("AAPL", 150.0, 0.015),
        ("msft", 300.0, 0.015),
        ("TSLA", 200.0, 0.03),
        ("XYZ", 100.0, 0.015),
    ])
    def test_symbol_parameters(self, symbol, price, volatility):
        """Known tickers get their base price and volatility."""
        dataset = generate_sample_data(symbol, seed=2, end_time=END)
        assert dataset.symbol == symbol.upper()
        assert dataset.base_price == price
        assert dataset.volatility == volatility
        assert dataset.bars[0].open == pytest.approx(price, rel=0.02)

    @pytest.mark.parametrize("timeframe", ["1D", "1W", "1M"])
    def test_bars_well_formed(self, timeframe):
        """OHLC bounds hold and prices stay positive."""
        for seed in range(5):
            dataset = generate_sample_data("TSLA", timeframe, seed=seed, end_time=END)
            for bar in dataset.bars:
                assert bar.high >= max(bar.open, bar.close)
                assert bar.low <= min(bar.open, bar.close)
                assert bar.volume > 0
                assert bar.low > 0

    def test_pattern_windows(self):
        """Pattern windows sit at fixed fractions with fixed confidences."""
        dataset = generate_sample_data("AAPL", seed=1, end_time=END)
        windows = {p.type: p for p in dataset.patterns}
        assert (windows[PatternType.ACCUMULATION].start, windows[PatternType.ACCUMULATION].end) == (73, 109)
        assert (windows[PatternType.SPRING].start, windows[PatternType.SPRING].end) == (273, 276)
        assert (windows[PatternType.UPTHRUST].start, windows[PatternType.UPTHRUST].end) == (328, 331)
        assert {t: w.confidence for t, w in windows.items()} == {
            PatternType.ACCUMULATION: 85,
            PatternType.DISTRIBUTION: 78,
            PatternType.SPRING: 92,
            PatternType.UPTHRUST: 88,
        }

    def test_windows_fit_every_timeframe(self):
        """Windows stay inside the series on every timeframe."""
        for timeframe in ("1D", "1W", "1M"):
            dataset = generate_sample_data("AAPL", timeframe, seed=1, end_time=END)
            for window in dataset.patterns:
                assert 0 <= window.start <= window.end < len(dataset.bars)

    def test_deterministic(self):
        """Seeds reproduce datasets exactly."""
        a = generate_sample_data("GOOGL", seed=8, end_time=END)
        b = generate_sample_data("GOOGL", seed=8, end_time=END)
        c = generate_sample_data("GOOGL", seed=9, end_time=END)
        assert a.data_hash == b.data_hash
        assert a.bars == b.bars
        assert a.data_hash != c.data_hash

    def test_numpy_integer_seed(self):
        """numpy integer seeds behave like the equal Python int."""
        a = generate_sample_data("AAPL", seed=np.int64(7), end_time=END)
        b = generate_sample_data("AAPL", seed=7, end_time=END)
        assert a.data_hash == b.data_hash
        assert a.seed == 7
        assert type(a.seed) is int

    @pytest.mark.parametrize("bad", [-1, True, 1.5, "7"])
    def test_invalid_seed_rejected(self, bad):
        """Negative, boolean and non-integral seeds are rejected."""
        with pytest.raises(InvalidArgumentError, match="seed"):
            generate_sample_data("AAPL", seed=bad, end_time=END)

    def test_unknown_timeframe_rejected(self):
        """Timeframes other than 1D/1W/1M are rejected."""
        with pytest.raises(InvalidArgumentError, match="timeframe"):
            generate_sample_data("AAPL", "4H")

    def test_empty_symbol_rejected(self):
        """Blank symbols are rejected."""
        with pytest.raises(InvalidArgumentError, match="symbol"):
            generate_sample_data("  ")

    def test_to_dataframe(self):
        """to_dataframe is time ordered with one row per candle."""
        df = generate_sample_data("AMZN", "1M", seed=3, end_time=END).to_dataframe()
        assert len(df) == 52
        assert df["time"].is_monotonic_increasing


class TestExplanations:
    """Canned explanation texts and computed metrics."""

    def test_accumulation_up_days(self):
        """Accumulation compares volume on up and down days."""
        bars = [make_bar(0, 100, 101), make_bar(1, 101, 102), make_bar(2, 102, 101)]
        explanation = explain_pattern(PatternType.ACCUMULATION, bars)
        assert "Accumulation phase" in explanation.summary
        assert "higher volume on up days" in explanation.volume_analysis
        assert "(0.00% net change)" in explanation.price_action

    def test_distribution_down_days(self):
        """Distribution reports heavier down-day volume."""
        bars = [make_bar(0, 100, 99), make_bar(1, 99, 98), make_bar(2, 98, 99)]
        explanation = explain_pattern("distribution", bars)
        assert "higher volume on down days" in explanation.volume_analysis
        assert "(0.00% net change)" in explanation.price_action

    def test_spring_volume_ratio(self):
        """Spring reports first-bar volume against the window average."""
        bars = [make_bar(0, 100, 97, volume=3000), make_bar(1, 97, 101, volume=1000),
                make_bar(2, 101, 102, volume=2000)]
        explanation = explain_pattern(PatternType.SPRING, bars)
        assert "(1.50x average volume)" in explanation.volume_analysis
        assert "trapping sellers" in explanation.price_action

    def test_upthrust(self):
        """Pattern names are matched case-insensitively."""
        bars = [make_bar(0, 100, 103)]
        explanation = explain_pattern("UPTHRUST", bars)
        assert "false breakout" in explanation.summary

    def test_unknown_pattern(self):
        """Unknown patterns get the fallback summary."""
        explanation = explain_pattern("wedge", [make_bar(0, 100, 101)])
        assert explanation.summary == "Pattern analysis not available."

    def test_empty_bars_rejected(self):
        """Explaining an empty window is an error."""
        with pytest.raises(InvalidArgumentError):
            explain_pattern(PatternType.SPRING, [])

    def test_implications(self):
        """Implications list per pattern, warnings flagged."""
        spring = trading_implications(PatternType.SPRING)
        assert len(spring) == 3
        assert "spring low" in spring[0].text
        accumulation = trading_implications("accumulation")
        assert accumulation[-1].warning is True
        unknown = trading_implications("wedge")
        assert len(unknown) == 1 and unknown[0].warning


class TestAnalyze:
    """analyze() reads back the windows."""

    def test_detected_patterns(self):
        """analyze returns the four windows with ids and times."""
        dataset = generate_sample_data("AAPL", seed=1, end_time=END)
        patterns = analyze(dataset)
        assert [p.id for p in patterns] == [
            "accumulation-73", "distribution-182", "spring-273", "upthrust-328",
        ]
        spring = patterns[2]
        assert spring.start_time == dataset.bars[273].time
        assert spring.end_time == dataset.bars[276].time
        assert spring.explanation.summary.startswith("Spring pattern detected")
        assert spring.to_dict()["type"] == "spring"

    def test_pattern_annotations(self):
        """Range patterns get start/end markers, shakeouts one marker."""
        patterns = {p.type: p for p in analyze(generate_sample_data("AAPL", seed=1, end_time=END))}
        accumulation = pattern_annotations(patterns[PatternType.ACCUMULATION])
        assert [a.label for a in accumulation] == ["Accumulation Start", "Accumulation End"]
        assert [a.bar_index for a in accumulation] == [73, 109]

        upthrust = pattern_annotations(patterns[PatternType.UPTHRUST])
        assert len(upthrust) == 1
        assert upthrust[0].position is Position.ABOVE
