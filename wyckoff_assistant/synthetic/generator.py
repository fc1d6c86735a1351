"""
Synthetic Wyckoff-phase OHLCV generation.

Turns (archetype, bar_count, seed) into a Series: bars plus annotations
describing the Wyckoff events of the archetype's schematic.

One parameterized walk drives every archetype. The archetype only
contributes its phase table (see phases.py):

    for each bar index:
        phase entry      -> establish support/resistance if the phase declares levels
        scripted event   -> event builder (spring, upthrust, test, SOS, ...)
        reversal pending -> reversal bar after a spring/upthrust
        otherwise        -> drift policy: price = price * (1 + perturbation)

All randomness comes from one numpy Generator seeded by the caller, so a
given seed reproduces the Series bit for bit.
"""

from __future__ import annotations

import logging
from numbers import Integral

import numpy as np

from .phases import (
    DEFAULT_ARCHETYPE,
    AnnotationSpec,
    EventKind,
    EventSpec,
    PhaseSpec,
    get_archetype_spec,
)
from .types import (
    Annotation,
    Archetype,
    Bar,
    Color,
    DriftPolicy,
    InvalidArgumentError,
    Position,
    Series,
    TradingRange,
    VisibleRange,
    compute_bars_hash,
    validate_seed,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants (named, not magic numbers)
# =============================================================================
BASE_VOLUME = 1000.0
PRICE_FLOOR_RATIO = 0.5     # price never drifts below 50% of the start price
OPEN_PAD = 0.01             # open sits within 1% of close on drift bars
WICK_PAD = 0.01             # high/low extend up to 1% past the body
SHOCK_WICK = (0.01, 0.025)  # climactic tail beyond the close on shock bars

# Volume multiplier range per scripted event
EVENT_VOLUME: dict[EventKind, tuple[float, float]] = {
    EventKind.SPRING: (0.5, 0.8),
    EventKind.SPRING_REVERSAL: (1.8, 2.4),
    EventKind.UPTHRUST: (0.5, 0.8),
    EventKind.UPTHRUST_REVERSAL: (1.8, 2.4),
    EventKind.TEST_SUPPORT: (1.2, 1.6),
    EventKind.TEST_RESISTANCE: (1.2, 1.6),
    EventKind.SIGN_OF_STRENGTH: (1.9, 2.3),
    EventKind.SIGN_OF_WEAKNESS: (1.9, 2.3),
    EventKind.PULLBACK: (1.2, 1.4),
    EventKind.RALLY: (1.2, 1.8),
}


# =============================================================================
# Argument validation
# =============================================================================
def _resolve_bar_count(bar_count: int | None, default: int) -> int:
    if bar_count is None:
        return default
    if isinstance(bar_count, bool) or not isinstance(bar_count, Integral):
        raise InvalidArgumentError(f"bar_count must be an integer, got {bar_count!r}")
    if bar_count <= 0:
        raise InvalidArgumentError(f"bar_count must be > 0, got {bar_count}")
    return int(bar_count)


# =============================================================================
# Bar builders
# =============================================================================
def _reflect_into_band(price: float, support: float, resistance: float) -> float:
    """Bounce a sideways price back inside [support, resistance]."""
    if price > resistance:
        price = resistance - (price - resistance)
    elif price < support:
        price = support + (support - price)
    return min(max(price, support), resistance)


def _drift_bar(
    rng: np.random.Generator,
    index: int,
    phase: PhaseSpec,
    price: float,
    levels: tuple[float, float] | None,
    floor: float,
) -> Bar:
    """
    Generic bar: close is the drifted price, open/high/low get padding.

    Shock bars open at the previous close and carry a long tail beyond the
    close in the direction of the shock.
    """
    direction = phase.drift.direction
    low_change, high_change = phase.change

    if phase.drift is DriftPolicy.SIDEWAYS:
        change = rng.uniform(low_change, high_change)
    else:
        change = direction * rng.uniform(low_change, high_change)

    close = max(price * (1 + change), floor)
    if phase.drift is DriftPolicy.SIDEWAYS and levels is not None:
        close = _reflect_into_band(close, *levels)

    if phase.drift.is_shock:
        open_ = price
        tail = rng.uniform(*SHOCK_WICK)
        if direction < 0:
            low = close * (1 - tail)
            high = open_ * (1 + rng.uniform(0, WICK_PAD / 2))
        else:
            high = close * (1 + tail)
            low = open_ * (1 - rng.uniform(0, WICK_PAD / 2))
    else:
        if direction == 0:
            open_ = close * (1 + rng.uniform(-OPEN_PAD / 2, OPEN_PAD / 2))
        else:
            # Trend bars open on the far side of the move
            open_ = close * (1 - direction * rng.uniform(0, OPEN_PAD))
        high = max(open_, close) * (1 + rng.uniform(0, WICK_PAD))
        low = min(open_, close) * (1 - rng.uniform(0, WICK_PAD))

    volume = BASE_VOLUME * rng.uniform(*phase.volume)
    return Bar.bounded(index, open_, high, low, close, volume)


def _event_bar(
    rng: np.random.Generator,
    index: int,
    kind: EventKind,
    price: float,
    levels: tuple[float, float] | None,
) -> Bar:
    """
    Scripted event bar.

    Reference-based events are placed relative to support/resistance of the
    enclosing range; pullback/rally events move off the previous close.
    """
    u = rng.uniform
    if kind.needs_levels:
        if levels is None:
            raise ValueError(f"Event {kind.value} at bar {index} has no support/resistance")
        support, resistance = levels

    if kind is EventKind.SPRING:
        # Shakeout 3-4% under support, closes back inside the range
        open_ = support * (1 + u(0.003, 0.008))
        low = support * (1 - u(0.03, 0.04))
        close = support * (1 + u(0.005, 0.012))
        high = max(open_, close) * (1 + u(0, 0.004))
    elif kind is EventKind.UPTHRUST:
        open_ = resistance * (1 - u(0.003, 0.008))
        high = resistance * (1 + u(0.03, 0.04))
        close = resistance * (1 - u(0.005, 0.012))
        low = min(open_, close) * (1 - u(0, 0.004))
    elif kind is EventKind.SPRING_REVERSAL:
        open_ = price * (1 + u(0, 0.003))
        close = support * (1 + u(0.012, 0.022))
        high = max(open_, close) * (1 + u(0, 0.005))
        low = min(open_, close) * (1 - u(0, 0.004))
    elif kind is EventKind.UPTHRUST_REVERSAL:
        open_ = price * (1 - u(0, 0.003))
        close = resistance * (1 - u(0.012, 0.022))
        low = min(open_, close) * (1 - u(0, 0.005))
        high = max(open_, close) * (1 + u(0, 0.004))
    elif kind is EventKind.TEST_SUPPORT:
        # Holds above support
        open_ = support * (1 + u(0.005, 0.01))
        low = support * (1 + u(0, 0.003))
        close = support * (1 + u(0.01, 0.02))
        high = max(open_, close) * (1 + u(0, 0.004))
    elif kind is EventKind.TEST_RESISTANCE:
        open_ = resistance * (1 - u(0.005, 0.01))
        high = resistance * (1 - u(0, 0.003))
        close = resistance * (1 - u(0.01, 0.02))
        low = min(open_, close) * (1 - u(0, 0.004))
    elif kind is EventKind.SIGN_OF_STRENGTH:
        open_ = price
        close = resistance * (1 + u(0.015, 0.025))
        high = max(open_, close) * (1 + u(0, 0.004))
        low = min(open_, close) * (1 - u(0, 0.004))
    elif kind is EventKind.SIGN_OF_WEAKNESS:
        open_ = price
        close = support * (1 - u(0.015, 0.025))
        low = min(open_, close) * (1 - u(0, 0.004))
        high = max(open_, close) * (1 + u(0, 0.004))
    elif kind is EventKind.PULLBACK:
        # Dip with a lower tail, buyers close it off the low
        open_ = price
        low = price * (1 - u(0.02, 0.03))
        close = price * (1 - u(0.005, 0.015))
        high = open_ * (1 + u(0, 0.003))
    elif kind is EventKind.RALLY:
        open_ = price
        high = price * (1 + u(0.02, 0.03))
        close = price * (1 + u(0.005, 0.015))
        low = open_ * (1 - u(0, 0.003))
    else:
        raise ValueError(f"Unhandled event kind: {kind}")

    volume = BASE_VOLUME * u(*EVENT_VOLUME[kind])
    return Bar.bounded(index, open_, high, low, close, volume)


# =============================================================================
# Annotations
# =============================================================================
def _annotation(index: int, spec: AnnotationSpec | EventSpec) -> Annotation:
    return Annotation(
        bar_index=index,
        position=spec.position,
        label=spec.label,
        color=spec.color,
        shape=spec.shape,
    )


def _phase_fallback_annotation(phases: list[PhaseSpec], bar_count: int) -> Annotation:
    """
    Label the middle bar with its phase name.

    Only used when every labelled phase collapsed (very small bar counts).
    """
    index = bar_count // 2
    phase = next(p for p in phases if p.contains(index))
    direction = phase.drift.direction
    if direction > 0:
        position, color = Position.ABOVE, Color.GREEN
    elif direction < 0:
        position, color = Position.BELOW, Color.RED
    else:
        position, color = Position.BELOW, Color.BLUE
    return Annotation(index, position, phase.name.replace("_", " ").title(), color)


# =============================================================================
# Main Generation Function
# =============================================================================
def generate_series(
    archetype: Archetype | str | None = DEFAULT_ARCHETYPE,
    bar_count: int | None = None,
    seed: int | None = None,
    base_price: float | None = None,
) -> Series:
    """
    Generate a synthetic Wyckoff series.

    Args:
        archetype: Archetype enum or name ("accumulation", "wyckoff-range", ...).
            Unknown names fall back to the overview archetype.
        bar_count: Number of bars (> 0). Defaults to the archetype's
            schematic length (overview=200, accumulation/distribution/
            trading-range=80, spring/upthrust=60).
        seed: Seed for reproducibility. None draws fresh entropy.
        base_price: Starting price (default: archetype's schematic price)

    Returns:
        Series with exactly bar_count bars and a non-empty annotation list

    Raises:
        InvalidArgumentError: Non-positive or non-integer bar_count, invalid
            seed or non-positive base_price.

    Example:
        >>> series = generate_series("accumulation", 80, seed=42)
        >>> [a.label for a in series.annotations_labeled("Spring")]
        ['Spring']
    """
    spec = get_archetype_spec(archetype)
    n_bars = _resolve_bar_count(bar_count, spec.default_bars)
    seed = validate_seed(seed)
    if base_price is not None and not base_price > 0:
        raise InvalidArgumentError(f"base_price must be > 0, got {base_price!r}")

    rng = np.random.default_rng(seed)
    start_price = float(base_price) if base_price is not None else spec.base_price
    floor = start_price * PRICE_FLOOR_RATIO
    phases = spec.resolve_phases(n_bars)

    bars: list[Bar] = []
    annotations: list[Annotation] = []
    ranges: list[TradingRange] = []

    price = start_price
    # (bar index, reversal kind, levels captured at the triggering event)
    pending: tuple[int, EventKind, tuple[float, float] | None] | None = None

    for phase in phases:
        if phase.length == 0:
            continue

        levels: tuple[float, float] | None = None
        if phase.levels is not None:
            levels = (price * phase.levels[0], price * phase.levels[1])
            ranges.append(TradingRange(phase.start, phase.end, levels[0], levels[1]))

        events = {event.at: event for event in phase.events}

        for i in range(phase.start, phase.end):
            if phase.annotation is not None and phase.annotation.at == i:
                annotations.append(_annotation(i, phase.annotation))

            reversal = pending if pending is not None and pending[0] == i else None
            pending = None

            event = events.get(i)
            if event is not None:
                bar = _event_bar(rng, i, event.kind, price, levels)
                annotations.append(_annotation(i, event))
                follow = event.kind.follow_through
                if follow is not None:
                    pending = (i + 1, follow, levels)
            elif reversal is not None:
                bar = _event_bar(rng, i, reversal[1], price, reversal[2])
            else:
                bar = _drift_bar(rng, i, phase, price, levels, floor)

            bars.append(bar)
            price = bar.close

    if not annotations:
        annotations.append(_phase_fallback_annotation(phases, n_bars))

    series = Series(
        archetype=spec.archetype,
        bars=tuple(bars),
        annotations=tuple(annotations),
        visible_range=VisibleRange(*spec.visible_range(n_bars)),
        seed=seed,
        base_price=start_price,
        ranges=tuple(ranges),
        data_hash=compute_bars_hash(bars),
    )
    logger.debug(
        "Generated %s series: bars=%d annotations=%d seed=%s hash=%s",
        series.archetype.value, n_bars, len(series.annotations), seed, series.data_hash,
    )
    return series


def verify_series_hash(series: Series) -> bool:
    """
    Verify that a series hash matches its recomputed hash.

    Used for integrity verification after serialization/deserialization.
    """
    return compute_bars_hash(series.bars) == series.data_hash
