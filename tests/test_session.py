"""
Tests for ChartSession.

Validates that:
1. Loading replaces the session contents
2. Visibility toggles and confidence threshold filter patterns/markers
3. zoom_to_pattern pads by 10 bars and clamps to the data
4. A closed session refuses every operation
"""

from datetime import datetime, timezone

import pytest

from wyckoff_assistant.synthetic import Archetype, InvalidArgumentError, PatternType
from wyckoff_assistant.viz.session import ChartSession, PatternNotFoundError, SessionClosedError


END = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def sample_session():
    session = ChartSession()
    session.load_sample("AAPL", seed=1, end_time=END)
    yield session
    session.close()


class TestLoading:
    """load_archetype, load_sample and analyze."""

    def test_load_archetype(self):
        """Loading an archetype exposes its series, range and markers."""
        with ChartSession() as session:
            series = session.load_archetype("accumulation", 80, seed=42)
            assert session.series is series
            assert session.visible_range == series.visible_range
            assert session.visible_markers() == list(series.annotations)
            assert session.chart_payload()["archetype"] == "accumulation"

    def test_load_sample_runs_analysis(self, sample_session):
        """Loading a sample runs analysis and shows every bar."""
        assert len(sample_session.patterns) == 4
        assert sample_session.series is None
        assert sample_session.visible_range.to_dict() == {"from": 0, "to": 364}

    def test_load_replaces_previous(self, sample_session):
        """A new load drops the previous dataset and patterns."""
        sample_session.load_archetype(Archetype.SPRING, seed=1)
        assert sample_session.dataset is None
        assert sample_session.patterns == []

    def test_analyze_without_sample(self):
        """analyze needs a loaded sample dataset."""
        with ChartSession() as session:
            with pytest.raises(InvalidArgumentError):
                session.analyze()

    def test_failed_load_keeps_contents(self, sample_session):
        """A rejected load leaves the current dataset in place."""
        with pytest.raises(InvalidArgumentError):
            sample_session.load_sample("AAPL", timeframe="4H")
        assert sample_session.dataset is not None


class TestFilters:
    """Visibility toggles and confidence threshold."""

    def test_all_visible_by_default(self, sample_session):
        """Every pattern and marker shows before any filter is set."""
        patterns = sample_session.visible_patterns()
        assert len(patterns) == 4
        # Newest first
        assert patterns[0].type is PatternType.UPTHRUST
        assert len(sample_session.visible_markers()) == 6

    def test_hide_pattern_type(self, sample_session):
        """Hidden pattern types drop their patterns and markers."""
        sample_session.set_visibility(PatternType.ACCUMULATION, False)
        sample_session.set_visibility("spring", False)
        types = {p.type for p in sample_session.visible_patterns()}
        assert types == {PatternType.DISTRIBUTION, PatternType.UPTHRUST}
        labels = [a.label for a in sample_session.visible_markers()]
        assert labels == ["Distribution Start", "Distribution End", "Upthrust"]

    def test_confidence_threshold(self, sample_session):
        """Patterns below the threshold are hidden."""
        sample_session.set_confidence_threshold(88)
        assert {p.confidence for p in sample_session.visible_patterns()} == {92, 88}
        sample_session.set_confidence_threshold(100)
        assert sample_session.visible_patterns() == []

    @pytest.mark.parametrize("bad", [-1, 101, "high", True])
    def test_invalid_threshold(self, sample_session, bad):
        """Thresholds outside 0-100 or non-numeric are rejected."""
        with pytest.raises(InvalidArgumentError):
            sample_session.set_confidence_threshold(bad)

    def test_unknown_pattern_type(self, sample_session):
        """Unknown pattern type names raise InvalidArgumentError."""
        with pytest.raises(InvalidArgumentError):
            sample_session.set_visibility("wedge", False)

    def test_filters_survive_reload(self, sample_session):
        """Visibility settings persist across sample loads."""
        sample_session.set_visibility(PatternType.SPRING, False)
        sample_session.load_sample("MSFT", seed=2, end_time=END)
        assert PatternType.SPRING not in {p.type for p in sample_session.visible_patterns()}

    def test_markers_in_payload(self, sample_session):
        """chart_payload markers honour the visibility filter."""
        sample_session.set_visibility(PatternType.SPRING, False)
        texts = [m["text"] for m in sample_session.chart_payload()["markers"]]
        assert "Spring" not in texts
        assert "Upthrust" in texts


class TestZoom:
    """zoom_to_pattern padding and clamping."""

    def test_zoom_pads_ten_bars(self, sample_session):
        """The zoomed range is the pattern span plus 10 bars each side."""
        visible = sample_session.zoom_to_pattern("spring-273")
        assert (visible.from_index, visible.to_index) == (263, 286)
        assert sample_session.visible_range == visible

    def test_zoom_clamps_to_data(self):
        """Padding never runs past the last bar."""
        with ChartSession() as session:
            session.load_sample("AAPL", "1M", seed=1, end_time=END)
            upthrust = next(p for p in session.patterns if p.type is PatternType.UPTHRUST)
            visible = session.zoom_to_pattern(upthrust.id)
            assert visible.to_index == 51

    def test_unknown_pattern(self, sample_session):
        """Zooming to a missing id raises PatternNotFoundError."""
        with pytest.raises(PatternNotFoundError):
            sample_session.zoom_to_pattern("spring-1")


class TestLifecycle:
    """close, clear and context manager use."""

    def test_context_manager_closes(self):
        """Leaving the with block closes the session."""
        with ChartSession() as session:
            session.load_archetype("spring", seed=1)
        assert session.closed
        assert session.series is None

    def test_closed_session_refuses_use(self):
        """Every operation on a closed session raises SessionClosedError."""
        session = ChartSession()
        session.close()
        with pytest.raises(SessionClosedError):
            session.load_archetype("spring")
        with pytest.raises(SessionClosedError):
            session.visible_markers()
        with pytest.raises(SessionClosedError):
            session.set_confidence_threshold(50)
        with pytest.raises(SessionClosedError):
            with session:
                pass

    def test_close_is_idempotent(self):
        """Closing twice is harmless."""
        session = ChartSession()
        session.close()
        session.close()
        assert session.closed

    def test_clear_keeps_session_open(self, sample_session):
        """clear empties the session without closing it."""
        sample_session.clear()
        assert sample_session.dataset is None
        assert not sample_session.closed
