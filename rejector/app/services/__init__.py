"""Services package for the rejection service.

This package provides:
- The read-only message store and its random selector
- Thread-safe request counters
- The rejection orchestrator and its health statistics
- Periodic performance monitoring
"""

from rejector.app.services.message_store import MessageStore
from rejector.app.services.performance_monitor import PerformanceMonitor
from rejector.app.services.rejection_service import RejectionService
from rejector.app.services.request_counter import CounterSnapshot, RequestCounter

__all__ = [
    "CounterSnapshot",
    "MessageStore",
    "PerformanceMonitor",
    "RejectionService",
    "RequestCounter",
]
