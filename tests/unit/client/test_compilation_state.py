"""
Tests for CompilationStateTracker.
"""

from hotlink.client.compilation import CompilationStateTracker


class TestCompilationStateTracker:
    """Outstanding compilation counting."""

    def test_idle_by_default(self):
        """A new tracker reports no compilation in progress."""
        tracker = CompilationStateTracker()

        assert tracker.compiling is False
        assert tracker.outstanding == 0

    def test_started_then_finished(self):
        """Compiling is true between started and finished."""
        tracker = CompilationStateTracker()

        tracker.started("a")
        assert tracker.compiling is True

        tracker.finished("a")
        assert tracker.compiling is False

    def test_overlapping_compilations(self):
        """Compiling stays true until every started compilation finishes."""
        tracker = CompilationStateTracker()

        tracker.started(1)
        tracker.started(2)
        tracker.finished(1)

        assert tracker.compiling is True
        assert tracker.outstanding == 1

        tracker.finished(2)

        assert tracker.compiling is False

    def test_unmatched_finished_floors_at_zero(self):
        """A finished without a started never drives the count negative."""
        tracker = CompilationStateTracker()

        tracker.finished("orphan")
        tracker.finished("orphan")

        assert tracker.outstanding == 0
        assert tracker.compiling is False

        tracker.started("next")
        assert tracker.compiling is True

    def test_reset(self):
        tracker = CompilationStateTracker()
        tracker.started("a")
        tracker.started("b")

        tracker.reset()

        assert tracker.compiling is False
