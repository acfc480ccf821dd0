import time

from limits.storage import MemoryStorage

from app.core.rate_tracker import TRACKED_CEILING, LimitsRateTracker, RateTracker


class TestLimitsRateTracker:
    """Test the moving-window counter over limits storage."""

    def test_defaults_to_memory_storage(self):
        """The default URI keeps counters in process memory."""
        assert isinstance(LimitsRateTracker().storage, MemoryStorage)

    def test_counts_hits_per_key(self):
        """Each key has its own counter."""
        tracker = LimitsRateTracker()
        tracker.record("1:property", 3600)
        tracker.record("1:property", 3600)
        tracker.record("1:booking", 3600)

        assert tracker.usage("1:property", 3600)[0] == 2
        assert tracker.usage("1:booking", 3600)[0] == 1
        assert tracker.usage("2:property", 3600)[0] == 0

    def test_usage_does_not_record(self):
        """Reading the window leaves the count unchanged."""
        tracker = LimitsRateTracker()
        tracker.usage("k", 60)
        tracker.usage("k", 60)
        assert tracker.usage("k", 60)[0] == 0

    def test_retry_after_is_within_window(self):
        """The wait is bounded by the window length."""
        tracker = LimitsRateTracker()
        tracker.record("k", 3600)

        _, retry_after = tracker.usage("k", 3600)

        assert 3590 <= retry_after <= 3600

    def test_old_hits_leave_the_window(self):
        """Hits older than the window are forgotten."""
        tracker = LimitsRateTracker()
        tracker.record("k", 1)
        tracker.record("k", 1)

        time.sleep(1.1)

        assert tracker.usage("k", 1)[0] == 0

    def test_count_survives_many_hits(self):
        """Counting is not capped by a per-user limit."""
        tracker = LimitsRateTracker()
        for _ in range(25):
            tracker.record("k", 3600)
        assert tracker.usage("k", 3600)[0] == 25
        assert TRACKED_CEILING > 25

    def test_reset(self):
        """reset() clears every counter."""
        tracker = LimitsRateTracker()
        tracker.record("k", 60)
        tracker.reset()
        assert tracker.usage("k", 60)[0] == 0

    def test_instances_do_not_share_memory(self):
        """Each memory-backed tracker owns its storage."""
        first, second = LimitsRateTracker(), LimitsRateTracker()
        first.record("k", 60)
        assert second.usage("k", 60)[0] == 0

    def test_satisfies_protocol(self):
        """The tracker is usable wherever a RateTracker is expected."""
        tracker: RateTracker = LimitsRateTracker()
        tracker.record("k", 1)
        assert tracker.usage("k", 1)[0] == 1
