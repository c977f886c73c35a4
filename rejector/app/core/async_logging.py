"""Async logging support so request handlers never block on log I/O.

Log records are queued in memory and written by a background thread to the
handlers configured through ``logging.config.dictConfig``.
"""

import atexit
import logging
import queue
import threading
import time
from typing import Iterable, List, Optional


class AsyncLogHandler(logging.Handler):
    """Queue-backed handler that hands records to a background processor.

    Attributes:
        log_queue: Thread-safe queue for log records
        targets: Handlers that eventually write the records
    """

    def __init__(
        self,
        targets: Iterable[logging.Handler],
        max_queue_size: int = 10000,
    ):
        super().__init__()
        self.log_queue: queue.Queue[logging.LogRecord] = queue.Queue(
            maxsize=max_queue_size
        )
        self.targets: List[logging.Handler] = list(targets)
        self._shutdown = False

    def emit(self, record: logging.LogRecord) -> None:
        """Queue a log record for async processing.

        If the queue is full, the record is dropped to avoid blocking.
        """
        if self._shutdown:
            return
        try:
            # Render the message now so arguments are not mutated before
            # the background thread formats the record.
            record.msg = record.getMessage()
            record.args = None
            self.log_queue.put_nowait(record)
        except queue.Full:
            pass
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        """Wait for queue to empty (best effort)."""
        deadline = time.monotonic() + 1.0
        while not self.log_queue.empty() and time.monotonic() < deadline:
            time.sleep(0.01)

    def shutdown(self) -> None:
        self._shutdown = True


class BackgroundLogProcessor:
    """Drains an AsyncLogHandler's queue in a daemon thread.

    Attributes:
        handler: The AsyncLogHandler to read from
        flush_interval: Seconds between explicit flushes
        batch_size: Maximum records to process per iteration
    """

    def __init__(
        self,
        handler: AsyncLogHandler,
        flush_interval: float = 1.0,
        batch_size: int = 100,
    ):
        self.handler = handler
        self.flush_interval = flush_interval
        self.batch_size = batch_size
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the background processing thread."""
        self._thread = threading.Thread(
            target=self._process_loop, name="log-processor", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the processor to stop and wait for completion."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None

    def _process_loop(self) -> None:
        last_flush = time.monotonic()

        while not self._stop.is_set():
            batch: List[logging.LogRecord] = []
            for _ in range(self.batch_size):
                try:
                    batch.append(self.handler.log_queue.get_nowait())
                except queue.Empty:
                    break

            for record in batch:
                self._emit_to_targets(record)

            if time.monotonic() - last_flush > self.flush_interval:
                self._flush_targets()
                last_flush = time.monotonic()

            if not batch:
                self._stop.wait(0.005)

        self._drain_and_flush()

    def _emit_to_targets(self, record: logging.LogRecord) -> None:
        for target in self.handler.targets:
            if record.levelno < target.level:
                continue
            try:
                target.handle(record)
            except Exception:
                target.handleError(record)

    def _flush_targets(self) -> None:
        for target in self.handler.targets:
            try:
                target.flush()
            except Exception:
                pass

    def _drain_and_flush(self) -> None:
        """Drain remaining queue and flush all targets on shutdown."""
        while True:
            try:
                record = self.handler.log_queue.get_nowait()
            except queue.Empty:
                break
            self._emit_to_targets(record)
        self._flush_targets()


# Processors started by setup_async_logging, stopped on shutdown
_processors: List[BackgroundLogProcessor] = []


def setup_async_logging(
    logger_names: Iterable[Optional[str]] = (None,),
    max_queue_size: int = 10000,
    filters: Iterable[logging.Filter] = (),
) -> List[AsyncLogHandler]:
    """Move the handlers of the given loggers behind a queue.

    Args:
        logger_names: Logger names to convert (None is the root logger)
        max_queue_size: Records kept in memory before new ones are dropped
        filters: Filters applied on the calling thread, before queueing

    Returns:
        The installed async handlers.
    """
    installed: List[AsyncLogHandler] = []
    for name in logger_names:
        target_logger = logging.getLogger(name)
        targets = [
            h for h in target_logger.handlers if not isinstance(h, AsyncLogHandler)
        ]
        if not targets:
            continue

        async_handler = AsyncLogHandler(targets, max_queue_size=max_queue_size)
        for log_filter in filters:
            async_handler.addFilter(log_filter)
        processor = BackgroundLogProcessor(async_handler)
        processor.start()
        _processors.append(processor)

        for handler in targets:
            target_logger.removeHandler(handler)
        target_logger.addHandler(async_handler)
        installed.append(async_handler)

    return installed


def shutdown_async_logging() -> None:
    """Stop every background processor, writing out queued records."""
    while _processors:
        processor = _processors.pop()
        processor.handler.shutdown()
        processor.stop()


atexit.register(shutdown_async_logging)
