"""Tests for the rejection service."""

from unittest.mock import Mock, patch

import pytest

from rejector.app.exceptions import InvalidStateError, NotReadyError
from rejector.app.models import ServiceStats
from rejector.app.services.message_store import MessageStore
from rejector.app.services.messages import REJECTION_REASONS
from rejector.app.services.rejection_service import RejectionService
from rejector.app.services.request_counter import RequestCounter


@pytest.fixture
def store():
    store = MessageStore()
    store.initialize()
    return store


@pytest.fixture
def service(store):
    return RejectionService(store, RequestCounter())


class TestGetRandomRejection:
    """Tests for rejection generation."""

    def test_ids_are_sequential(self, service):
        ids = [service.get_random_rejection().id for _ in range(5)]
        assert ids == [1, 2, 3, 4, 5]

    def test_record_fields(self, service):
        record = service.get_random_rejection()

        assert record.reason in REJECTION_REASONS
        assert len(record.request_id) == 8
        assert record.timestamp.microsecond == 0

    def test_given_request_id_is_used(self, service):
        record = service.get_random_rejection(request_id="deadbeef")
        assert record.request_id == "deadbeef"

    def test_success_is_counted(self, service):
        service.get_random_rejection()
        service.get_random_rejection()

        snapshot = service.counter.snapshot()
        assert (snapshot.total, snapshot.success, snapshot.errors) == (2, 2, 0)

    def test_not_ready_counts_one_error(self):
        """Test an uninitialized store is reported once as an error."""
        service = RejectionService(MessageStore(), RequestCounter())

        with pytest.raises(NotReadyError):
            service.get_random_rejection()

        snapshot = service.counter.snapshot()
        assert (snapshot.total, snapshot.success, snapshot.errors) == (1, 0, 1)

    def test_blank_message_is_invalid_state(self):
        store = Mock(spec=MessageStore)
        store.is_ready.return_value = True
        store.pick.return_value = "  "
        service = RejectionService(store, RequestCounter())

        with pytest.raises(InvalidStateError):
            service.get_random_rejection()

        assert service.counter.snapshot().errors == 1

    def test_periodic_metrics_logging(self, store):
        service = RejectionService(store, RequestCounter(), metrics_log_interval=3)

        with patch.object(service, "log_service_metrics") as log_metrics:
            for _ in range(7):
                service.get_random_rejection()

        assert log_metrics.call_count == 2

    def test_metrics_logging_failure_does_not_fail_request(self, store):
        service = RejectionService(store, RequestCounter(), metrics_log_interval=1)

        with patch.object(service, "log_service_metrics", side_effect=RuntimeError("boom")):
            record = service.get_random_rejection()

        assert record.id == 1
        assert service.counter.snapshot().success == 1


class TestServiceStatistics:
    """Tests for statistics and health evaluation."""

    def test_statistics_before_any_request(self, service):
        stats = service.get_service_statistics()

        assert stats.total_requests == 0
        assert stats.success_rate == 100.0
        assert stats.cache_size == 100
        assert stats.cache_initialized is True
        assert stats.degraded is False

    def test_success_rate_is_rounded(self, store):
        counter = RequestCounter()
        service = RejectionService(store, counter)
        for _ in range(3):
            counter.next_request()
        counter.record_success()
        counter.record_success()
        counter.record_error()

        assert service.get_service_statistics().success_rate == 66.67

    def test_statistics_failure_returns_baseline(self, store):
        counter = Mock(spec=RequestCounter)
        counter.snapshot.side_effect = RuntimeError("boom")
        service = RejectionService(store, counter)

        stats = service.get_service_statistics()

        assert stats == ServiceStats.baseline()
        assert stats.degraded is True

    def test_healthy_when_ready(self, service):
        assert service.is_service_healthy() is True

    def test_unhealthy_when_not_ready(self):
        service = RejectionService(MessageStore(), RequestCounter())
        assert service.is_service_healthy() is False

    def test_low_success_rate_needs_enough_requests(self, store):
        """Test the success rate only matters after more than ten requests."""
        service = RejectionService(store, RequestCounter())
        few = ServiceStats(10, 0, 10, 0.0, 100, True)
        many = ServiceStats(11, 5, 6, 45.45, 100, True)
        borderline = ServiceStats(20, 10, 10, 50.0, 100, True)

        assert service.is_service_healthy(few) is True
        assert service.is_service_healthy(many) is False
        assert service.is_service_healthy(borderline) is True

    def test_degraded_stats_are_unhealthy(self, service):
        assert service.is_service_healthy(ServiceStats.baseline()) is False
