"""
Archetype phase tables.

Each archetype is declared on its canonical schematic scale (the bar
indices of the textbook chart at its default bar count) as an ordered list
of PhaseSpecs. resolve_phases() rescales the table to any requested bar
count; for the default count the indices are returned unchanged.

Change ranges:
    trend/shock policies: (min, max) per-bar magnitude, sign from the policy
    sideways policy: signed (low, high) per-bar perturbation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from .types import Archetype, Color, DriftPolicy, MarkerShape, Position

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Scripted single-bar excursions that override the phase drift."""

    SPRING = "spring"
    SPRING_REVERSAL = "spring_reversal"
    UPTHRUST = "upthrust"
    UPTHRUST_REVERSAL = "upthrust_reversal"
    TEST_SUPPORT = "test_support"
    TEST_RESISTANCE = "test_resistance"
    SIGN_OF_STRENGTH = "sign_of_strength"
    SIGN_OF_WEAKNESS = "sign_of_weakness"
    PULLBACK = "pullback"
    RALLY = "rally"

    @property
    def needs_levels(self) -> bool:
        """Check if the event is scripted relative to support/resistance."""
        return self not in (EventKind.PULLBACK, EventKind.RALLY)

    @property
    def follow_through(self) -> "EventKind | None":
        """Reversal bar scripted immediately after this event, if any."""
        return _FOLLOW_THROUGH.get(self)


_FOLLOW_THROUGH = {
    EventKind.SPRING: EventKind.SPRING_REVERSAL,
    EventKind.UPTHRUST: EventKind.UPTHRUST_REVERSAL,
}


# =============================================================================
# Table records
# =============================================================================
@dataclass(frozen=True)
class AnnotationSpec:
    """Phase label placed at a schematic bar."""

    at: int
    label: str
    position: Position
    color: Color
    shape: MarkerShape = MarkerShape.CIRCLE


@dataclass(frozen=True)
class EventSpec:
    """Scripted event at a schematic bar, annotated with its label."""

    at: int
    kind: EventKind
    label: str
    position: Position
    color: Color
    shape: MarkerShape = MarkerShape.CIRCLE


@dataclass(frozen=True)
class PhaseSpec:
    """
    Contiguous bar range [start, end) sharing one drift policy.

    Attributes:
        name: Phase identifier (e.g., "selling_climax")
        start: First bar (inclusive)
        end: Last bar (exclusive)
        drift: Drift policy for non-event bars
        change: Per-bar price change range (see module docstring)
        volume: Volume multiplier range applied to the base volume
        levels: (support, resistance) factors of the entry price, or None
        annotation: Optional phase label
        events: Scripted events inside the phase
    """

    name: str
    start: int
    end: int
    drift: DriftPolicy
    change: tuple[float, float]
    volume: tuple[float, float]
    levels: tuple[float, float] | None = None
    annotation: AnnotationSpec | None = None
    events: tuple[EventSpec, ...] = ()

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end


@dataclass(frozen=True)
class ArchetypeSpec:
    """Declarative template for one archetype."""

    archetype: Archetype
    title: str
    default_bars: int
    base_price: float
    phases: tuple[PhaseSpec, ...]
    visible_from: int = 0  # schematic bar where the viewport starts

    def scale(self, schematic_index: int, bar_count: int) -> int:
        """Map a schematic index to a bar count, rounding half up."""
        return (2 * schematic_index * bar_count + self.default_bars) // (2 * self.default_bars)

    def resolve_phases(self, bar_count: int) -> list[PhaseSpec]:
        """
        Rescale the phase table to bar_count.

        Phases may become empty for small counts; their events and labels are
        dropped. Anchors are clamped into their resolved phase and colliding
        events keep the first declared one.
        """
        resolved: list[PhaseSpec] = []
        for phase in self.phases:
            start = self.scale(phase.start, bar_count)
            end = self.scale(phase.end, bar_count)

            annotation = None
            events: list[EventSpec] = []
            if end > start:
                if phase.annotation is not None:
                    annotation = replace(
                        phase.annotation,
                        at=_clamp(self.scale(phase.annotation.at, bar_count), start, end - 1),
                    )
                taken: set[int] = set()
                for event in phase.events:
                    at = _clamp(self.scale(event.at, bar_count), start, end - 1)
                    if at in taken:
                        continue
                    taken.add(at)
                    events.append(replace(event, at=at))

            resolved.append(replace(
                phase,
                start=start,
                end=end,
                annotation=annotation,
                events=tuple(sorted(events, key=lambda e: e.at)),
            ))
        return resolved

    def visible_range(self, bar_count: int) -> tuple[int, int]:
        start = min(self.scale(self.visible_from, bar_count), bar_count - 1)
        return start, bar_count - 1


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


# =============================================================================
# Archetype tables
# =============================================================================
_OVERVIEW = ArchetypeSpec(
    archetype=Archetype.OVERVIEW,
    title="Wyckoff Market Cycle Overview",
    default_bars=200,
    base_price=100.0,
    phases=(
        PhaseSpec(
            "markdown", 0, 41, DriftPolicy.TREND_DOWN, (0.003, 0.005), (1.2, 2.0),
            annotation=AnnotationSpec(25, "Markdown", Position.BELOW, Color.RED),
        ),
        PhaseSpec("markdown_acceleration", 41, 50, DriftPolicy.TREND_DOWN, (0.004, 0.007), (1.5, 2.5)),
        PhaseSpec(
            "accumulation", 50, 100, DriftPolicy.SIDEWAYS, (-0.002, 0.002), (0.7, 1.3),
            levels=(0.99, 1.02),
            annotation=AnnotationSpec(75, "Accumulation", Position.BELOW, Color.BLUE),
            events=(
                EventSpec(75, EventKind.SPRING, "Spring", Position.BELOW, Color.GREEN, MarkerShape.ARROW_UP),
            ),
        ),
        PhaseSpec(
            "markup", 100, 131, DriftPolicy.TREND_UP, (0.005, 0.008), (1.5, 2.3),
            annotation=AnnotationSpec(125, "Markup", Position.ABOVE, Color.GREEN),
        ),
        PhaseSpec("markup_acceleration", 131, 150, DriftPolicy.TREND_UP, (0.007, 0.011), (1.8, 2.8)),
        PhaseSpec(
            "distribution", 150, 200, DriftPolicy.SIDEWAYS, (-0.003, 0.003), (0.8, 1.5),
            levels=(0.98, 1.01),
            annotation=AnnotationSpec(175, "Distribution", Position.ABOVE, Color.ORANGE),
            events=(
                EventSpec(175, EventKind.UPTHRUST, "Upthrust", Position.ABOVE, Color.RED, MarkerShape.ARROW_DOWN),
            ),
        ),
    ),
)

_ACCUMULATION = ArchetypeSpec(
    archetype=Archetype.ACCUMULATION,
    title="Wyckoff Accumulation Phase Example",
    default_bars=80,
    base_price=150.0,
    phases=(
        PhaseSpec(
            "downtrend", 0, 20, DriftPolicy.TREND_DOWN, (0.01, 0.02), (1.0, 1.5),
            annotation=AnnotationSpec(10, "Downtrend", Position.ABOVE, Color.RED),
        ),
        PhaseSpec(
            "selling_climax", 20, 21, DriftPolicy.SHOCK_DOWN, (0.07, 0.09), (2.8, 3.2),
            annotation=AnnotationSpec(20, "Selling Climax", Position.BELOW, Color.RED, MarkerShape.SQUARE),
        ),
        PhaseSpec(
            "automatic_rally", 21, 26, DriftPolicy.TREND_UP, (0.01, 0.02), (1.0, 1.5),
            annotation=AnnotationSpec(23, "Automatic Rally", Position.ABOVE, Color.BLUE),
        ),
        PhaseSpec(
            "secondary_test", 26, 29, DriftPolicy.TREND_DOWN, (0.005, 0.015), (0.7, 1.2),
            annotation=AnnotationSpec(27, "Secondary Test", Position.BELOW, Color.ORANGE),
        ),
        PhaseSpec(
            "trading_range", 29, 60, DriftPolicy.SIDEWAYS, (-0.025, 0.025), (0.7, 1.3),
            levels=(0.98, 1.06),
            events=(
                EventSpec(45, EventKind.SPRING, "Spring", Position.BELOW, Color.GREEN, MarkerShape.ARROW_UP),
                EventSpec(56, EventKind.SIGN_OF_STRENGTH, "Sign of Strength", Position.ABOVE, Color.GREEN),
                EventSpec(58, EventKind.PULLBACK, "Last Point of Support", Position.BELOW, Color.BLUE),
            ),
        ),
        PhaseSpec(
            "markup", 60, 80, DriftPolicy.TREND_UP, (0.005, 0.015), (1.2, 2.0),
            annotation=AnnotationSpec(70, "Markup", Position.ABOVE, Color.GREEN),
        ),
    ),
)

_DISTRIBUTION = ArchetypeSpec(
    archetype=Archetype.DISTRIBUTION,
    title="Wyckoff Distribution Phase Example",
    default_bars=80,
    base_price=100.0,
    phases=(
        PhaseSpec(
            "uptrend", 0, 20, DriftPolicy.TREND_UP, (0.01, 0.02), (1.0, 1.5),
            annotation=AnnotationSpec(10, "Uptrend", Position.ABOVE, Color.GREEN),
        ),
        PhaseSpec(
            "buying_climax", 20, 21, DriftPolicy.SHOCK_UP, (0.07, 0.09), (2.8, 3.2),
            annotation=AnnotationSpec(20, "Buying Climax", Position.ABOVE, Color.GREEN, MarkerShape.SQUARE),
        ),
        PhaseSpec(
            "automatic_reaction", 21, 26, DriftPolicy.TREND_DOWN, (0.01, 0.02), (1.0, 1.5),
            annotation=AnnotationSpec(23, "Automatic Reaction", Position.BELOW, Color.RED),
        ),
        PhaseSpec(
            "secondary_test", 26, 29, DriftPolicy.TREND_UP, (0.005, 0.015), (0.7, 1.2),
            annotation=AnnotationSpec(27, "Secondary Test", Position.ABOVE, Color.ORANGE),
        ),
        PhaseSpec(
            "trading_range", 29, 60, DriftPolicy.SIDEWAYS, (-0.025, 0.025), (0.7, 1.3),
            levels=(0.94, 1.02),
            events=(
                EventSpec(45, EventKind.UPTHRUST, "Upthrust", Position.ABOVE, Color.RED, MarkerShape.ARROW_DOWN),
                EventSpec(56, EventKind.SIGN_OF_WEAKNESS, "Sign of Weakness", Position.BELOW, Color.RED),
                EventSpec(58, EventKind.RALLY, "Last Point of Supply", Position.ABOVE, Color.ORANGE),
            ),
        ),
        PhaseSpec(
            "markdown", 60, 80, DriftPolicy.TREND_DOWN, (0.005, 0.015), (1.2, 2.0),
            annotation=AnnotationSpec(70, "Markdown", Position.BELOW, Color.RED),
        ),
    ),
)

_SPRING = ArchetypeSpec(
    archetype=Archetype.SPRING,
    title="Wyckoff Spring Pattern Example",
    default_bars=60,
    base_price=120.0,
    visible_from=5,
    phases=(
        PhaseSpec("lead_in", 0, 10, DriftPolicy.TREND_DOWN, (0.005, 0.01), (1.0, 1.5)),
        PhaseSpec(
            "trading_range", 10, 40, DriftPolicy.SIDEWAYS, (-0.02, 0.02), (0.7, 1.3),
            levels=(0.98, 1.04),
            annotation=AnnotationSpec(15, "Trading Range", Position.BELOW, Color.BLUE),
            events=(
                EventSpec(30, EventKind.SPRING, "Spring", Position.BELOW, Color.GREEN, MarkerShape.ARROW_UP),
                EventSpec(38, EventKind.TEST_SUPPORT, "Secondary Test", Position.BELOW, Color.BLUE),
            ),
        ),
        PhaseSpec(
            "markup", 40, 60, DriftPolicy.TREND_UP, (0.005, 0.01), (1.0, 1.7),
            annotation=AnnotationSpec(50, "Markup Phase", Position.ABOVE, Color.GREEN),
        ),
    ),
)

_UPTHRUST = ArchetypeSpec(
    archetype=Archetype.UPTHRUST,
    title="Wyckoff Upthrust Pattern Example",
    default_bars=60,
    base_price=120.0,
    visible_from=5,
    phases=(
        PhaseSpec("lead_in", 0, 10, DriftPolicy.TREND_UP, (0.005, 0.01), (1.0, 1.5)),
        PhaseSpec(
            "trading_range", 10, 40, DriftPolicy.SIDEWAYS, (-0.02, 0.02), (0.7, 1.3),
            levels=(0.96, 1.02),
            annotation=AnnotationSpec(15, "Trading Range", Position.ABOVE, Color.BLUE),
            events=(
                EventSpec(30, EventKind.UPTHRUST, "Upthrust", Position.ABOVE, Color.RED, MarkerShape.ARROW_DOWN),
                EventSpec(38, EventKind.TEST_RESISTANCE, "Secondary Test", Position.ABOVE, Color.ORANGE),
            ),
        ),
        PhaseSpec(
            "markdown", 40, 60, DriftPolicy.TREND_DOWN, (0.005, 0.01), (1.0, 1.7),
            annotation=AnnotationSpec(50, "Markdown Phase", Position.BELOW, Color.RED),
        ),
    ),
)

_TRADING_RANGE = ArchetypeSpec(
    archetype=Archetype.TRADING_RANGE,
    title="Wyckoff Trading Range Example",
    default_bars=80,
    base_price=100.0,
    visible_from=10,
    phases=(
        PhaseSpec("prior_trend", 0, 20, DriftPolicy.TREND_DOWN, (0.01, 0.015), (1.0, 1.5)),
        PhaseSpec(
            "preliminary_support", 20, 25, DriftPolicy.TREND_DOWN, (0.002, 0.006), (1.0, 1.4),
            events=(
                EventSpec(20, EventKind.RALLY, "PS", Position.BELOW, Color.ORANGE),
            ),
        ),
        PhaseSpec(
            "selling_climax", 25, 26, DriftPolicy.SHOCK_DOWN, (0.05, 0.07), (2.8, 3.2),
            annotation=AnnotationSpec(25, "SC", Position.BELOW, Color.RED, MarkerShape.SQUARE),
        ),
        PhaseSpec(
            "automatic_rally", 26, 31, DriftPolicy.TREND_UP, (0.01, 0.015), (1.2, 1.7),
            annotation=AnnotationSpec(28, "AR", Position.ABOVE, Color.BLUE),
        ),
        PhaseSpec(
            "secondary_test", 31, 36, DriftPolicy.TREND_DOWN, (0.005, 0.01), (0.8, 1.2),
            annotation=AnnotationSpec(33, "ST", Position.BELOW, Color.ORANGE),
        ),
        PhaseSpec(
            "trading_range", 36, 70, DriftPolicy.SIDEWAYS, (-0.025, 0.025), (0.7, 1.3),
            levels=(0.97, 1.06),
            events=(
                EventSpec(50, EventKind.SPRING, "Spring", Position.BELOW, Color.GREEN, MarkerShape.ARROW_UP),
                EventSpec(55, EventKind.TEST_SUPPORT, "Test", Position.BELOW, Color.BLUE),
                EventSpec(60, EventKind.SIGN_OF_STRENGTH, "SOS", Position.ABOVE, Color.GREEN),
                EventSpec(65, EventKind.PULLBACK, "LPS", Position.BELOW, Color.BLUE),
            ),
        ),
        PhaseSpec(
            "markup", 70, 80, DriftPolicy.TREND_UP, (0.01, 0.015), (1.3, 2.0),
            annotation=AnnotationSpec(75, "Markup", Position.ABOVE, Color.GREEN),
        ),
    ),
)


ARCHETYPE_SPECS: dict[Archetype, ArchetypeSpec] = {
    spec.archetype: spec
    for spec in (_OVERVIEW, _ACCUMULATION, _DISTRIBUTION, _SPRING, _UPTHRUST, _TRADING_RANGE)
}

# Chart type names used by the web page
ARCHETYPE_ALIASES: dict[str, Archetype] = {
    "wyckoff-overview": Archetype.OVERVIEW,
    "wyckoff-range": Archetype.TRADING_RANGE,
    "range": Archetype.TRADING_RANGE,
}

DEFAULT_ARCHETYPE = Archetype.OVERVIEW


def resolve_archetype(value: Archetype | str | None) -> Archetype:
    """
    Normalize an archetype name.

    Unknown names fall back to the overview archetype; this is not an error.
    """
    if isinstance(value, Archetype):
        return value
    if value is None:
        return DEFAULT_ARCHETYPE

    key = str(value).strip().lower().replace("_", "-")
    if key in ARCHETYPE_ALIASES:
        return ARCHETYPE_ALIASES[key]
    try:
        return Archetype(key)
    except ValueError:
        logger.warning("Unknown archetype %r, falling back to %s", value, DEFAULT_ARCHETYPE.value)
        return DEFAULT_ARCHETYPE


def get_archetype_spec(value: Archetype | str | None) -> ArchetypeSpec:
    return ARCHETYPE_SPECS[resolve_archetype(value)]


# =============================================================================
# Table validation (fail loud at import)
# =============================================================================
def validate_archetype_spec(spec: ArchetypeSpec) -> None:
    """
    Check that a table covers [0, default_bars) exactly and that every
    event fits its phase.

    Raises:
        ValueError: On gaps, overlaps, misplaced anchors or events that need
            reference levels in a phase that does not establish them.
    """
    name = spec.archetype.value
    cursor = 0
    for phase in spec.phases:
        if phase.start != cursor:
            raise ValueError(f"{name}: phase '{phase.name}' starts at {phase.start}, expected {cursor}")
        if phase.end <= phase.start:
            raise ValueError(f"{name}: phase '{phase.name}' is empty")
        if phase.annotation is not None and not phase.contains(phase.annotation.at):
            raise ValueError(f"{name}: label '{phase.annotation.label}' outside phase '{phase.name}'")
        for event in phase.events:
            if not phase.contains(event.at):
                raise ValueError(f"{name}: event '{event.label}' outside phase '{phase.name}'")
            if event.kind.needs_levels and phase.levels is None:
                raise ValueError(
                    f"{name}: event '{event.label}' needs support/resistance "
                    f"but phase '{phase.name}' declares none"
                )
        cursor = phase.end
    if cursor != spec.default_bars:
        raise ValueError(f"{name}: phases end at {cursor}, expected {spec.default_bars}")


for _spec in ARCHETYPE_SPECS.values():
    validate_archetype_spec(_spec)
