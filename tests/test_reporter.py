"""Unit tests for the error reporter."""
from parley.config import ERROR_TIMEOUT_MS
from parley.session import ErrorReporter, VirtualScheduler


class TestErrorReporter:
    """Tests for single-error visibility and auto-clear."""

    def test_report_then_expire(self):
        """Test that an error clears itself after the timeout."""
        scheduler = VirtualScheduler()
        reporter = ErrorReporter(scheduler)
        reporter.report("boom")

        assert reporter.current == "boom"
        scheduler.advance(ERROR_TIMEOUT_MS - 1)
        assert reporter.current == "boom"
        scheduler.advance(1)
        assert reporter.current is None

    def test_second_report_restarts_countdown(self):
        """Test that B replaces A and clears 5s after the second report."""
        scheduler = VirtualScheduler()
        reporter = ErrorReporter(scheduler)
        reporter.report("A")
        scheduler.advance(3000)
        reporter.report("B")

        assert reporter.current == "B"
        scheduler.advance(2000)
        assert reporter.current == "B"
        scheduler.advance(2999)
        assert reporter.current == "B"
        scheduler.advance(1)
        assert reporter.current is None
        assert scheduler.pending == 0

    def test_clear_cancels_timer(self):
        """Test that clear hides the error and stops the countdown."""
        scheduler = VirtualScheduler()
        reporter = ErrorReporter(scheduler)
        seen = []
        reporter.subscribe(seen.append)
        reporter.report("boom")
        reporter.clear()

        assert reporter.current is None
        assert scheduler.pending == 0
        assert seen == ["boom", None]

    def test_clear_without_error_is_silent(self):
        """Test that clearing nothing does not notify."""
        reporter = ErrorReporter(VirtualScheduler())
        seen = []
        reporter.subscribe(seen.append)
        reporter.clear()

        assert seen == []

    def test_unsubscribe(self):
        """Test that a removed listener is not called."""
        reporter = ErrorReporter(VirtualScheduler())
        seen = []
        unsubscribe = reporter.subscribe(seen.append)
        unsubscribe()
        reporter.report("boom")

        assert seen == []

    def test_custom_timeout(self):
        """Test a non-default timeout."""
        scheduler = VirtualScheduler()
        reporter = ErrorReporter(scheduler, timeout_ms=100)
        reporter.report("boom")
        scheduler.advance(100)

        assert reporter.current is None
