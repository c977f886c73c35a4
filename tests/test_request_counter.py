"""Tests for the thread-safe request counters."""

import threading

from rejector.app.services.request_counter import CounterSnapshot, RequestCounter


class TestCounterSnapshot:
    """Tests for success rate computation."""

    def test_success_rate_with_no_requests(self):
        """An idle service reports a perfect success rate."""
        assert CounterSnapshot(total=0, success=0, errors=0).success_rate == 100.0

    def test_success_rate_is_percentage(self):
        """Test rate is success over total as a percentage."""
        snapshot = CounterSnapshot(total=3, success=2, errors=1)
        assert round(snapshot.success_rate, 2) == 66.67


class TestRequestCounter:
    """Tests for RequestCounter."""

    def test_sequence_numbers_start_at_one(self):
        counter = RequestCounter()
        assert counter.next_request() == 1
        assert counter.next_request() == 2

    def test_snapshot_reflects_outcomes(self):
        counter = RequestCounter()
        for _ in range(3):
            counter.next_request()
        counter.record_success()
        counter.record_success()
        counter.record_error()

        assert counter.snapshot() == CounterSnapshot(total=3, success=2, errors=1)

    def test_concurrent_requests_get_unique_ids(self):
        """Test concurrent callers never share a sequence number."""
        counter = RequestCounter()
        results = []
        results_lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            ids = [counter.next_request() for _ in range(500)]
            with results_lock:
                results.extend(ids)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 4000
        assert set(results) == set(range(1, 4001))
        assert counter.snapshot().total == 4000
