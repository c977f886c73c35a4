"""Business service producing rejection responses and service statistics."""

from typing import Optional

from rejector.app.core.logging import get_logger
from rejector.app.models import RejectionRecord, ServiceStats
from rejector.app.services.message_store import MessageStore
from rejector.app.services.request_counter import RequestCounter
from rejector.app.exceptions import InvalidStateError, NotReadyError

logger = get_logger(__name__)

# Health fails below this success rate once enough requests were seen
MIN_HEALTHY_SUCCESS_RATE = 50.0
MIN_REQUESTS_FOR_SUCCESS_RATE = 10


class RejectionService:
    """Orchestrates rejection generation with request tracking.

    The store and counter are injected so one instance owns the metrics
    for the lifetime of the application.
    """

    def __init__(
        self,
        store: MessageStore,
        counter: RequestCounter,
        metrics_log_interval: int = 100,
    ):
        self._store = store
        self._counter = counter
        self._metrics_log_interval = metrics_log_interval

    @property
    def counter(self) -> RequestCounter:
        return self._counter

    @property
    def store(self) -> MessageStore:
        return self._store

    def get_random_rejection(self, request_id: Optional[str] = None) -> RejectionRecord:
        """Generate a rejection with a fresh sequence id.

        Args:
            request_id: Tracking token to attach; generated when omitted

        Raises:
            NotReadyError: If the message store is not initialized
            InvalidStateError: If the store returned an empty message
        """
        sequence_id = self._counter.next_request()
        logger.info(f"Processing rejection request #{sequence_id}")

        try:
            if not self._store.is_ready():
                raise NotReadyError()

            reason = self._store.pick()
            if not reason or not reason.strip():
                raise InvalidStateError()

            if request_id:
                record = RejectionRecord(id=sequence_id, reason=reason, request_id=request_id)
            else:
                record = RejectionRecord(id=sequence_id, reason=reason)
        except Exception as e:
            self._counter.record_error()
            logger.error(f"Failed to process rejection request #{sequence_id}: {e}")
            raise

        self._counter.record_success()
        logger.info(
            f"Successfully generated rejection response for request #{sequence_id}: "
            f"requestId={record.request_id}, reasonLength={len(record.reason)}"
        )

        if sequence_id % self._metrics_log_interval == 0:
            try:
                self.log_service_metrics()
            except Exception as e:
                logger.warning(f"Failed to log service metrics: {e}", exc_info=True)

        return record

    def get_service_statistics(self) -> ServiceStats:
        """Compute service statistics; never raises."""
        try:
            snapshot = self._counter.snapshot()
            return ServiceStats(
                total_requests=snapshot.total,
                successful_requests=snapshot.success,
                error_requests=snapshot.errors,
                success_rate=round(snapshot.success_rate, 2),
                cache_size=self._store.size(),
                cache_initialized=self._store.is_ready(),
            )
        except Exception as e:
            logger.error(f"Failed to get service statistics: {e}", exc_info=True)
            return ServiceStats.baseline()

    def is_service_healthy(self, stats: Optional[ServiceStats] = None) -> bool:
        """Check the store is ready and the success rate is acceptable."""
        stats = stats or self.get_service_statistics()
        if stats.degraded or not stats.cache_initialized:
            logger.warning("Service health check failed - cache not initialized")
            return False
        if stats.cache_size <= 0:
            logger.warning(f"Service health check failed - invalid cache size: {stats.cache_size}")
            return False
        if (
            stats.success_rate < MIN_HEALTHY_SUCCESS_RATE
            and stats.total_requests > MIN_REQUESTS_FOR_SUCCESS_RATE
        ):
            logger.warning(f"Service health check failed - low success rate: {stats.success_rate}%")
            return False
        return True

    def log_service_metrics(self) -> None:
        snapshot = self._counter.snapshot()
        logger.info(
            f"Service Metrics - Total: {snapshot.total}, Success: {snapshot.success}, "
            f"Errors: {snapshot.errors}, Success Rate: {snapshot.success_rate:.2f}%, "
            f"Cache Size: {self._store.size()}"
        )
