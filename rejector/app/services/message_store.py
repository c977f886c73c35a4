"""In-memory store of rejection reasons.

The store is loaded once at startup and is read-only afterwards, so request
handlers share it without locking.
"""

import random
import secrets
from typing import Callable, Iterable, Optional, Tuple

from rejector.app.core.logging import get_logger
from rejector.app.exceptions import NotReadyError, StoreInitializationError
from rejector.app.services.messages import REJECTION_REASONS

logger = get_logger(__name__)

EXPECTED_SIZE = 100
MAX_MESSAGE_LENGTH = 200

# Rough per-string overhead used for the memory estimate
_STRING_OVERHEAD_BYTES = 49

MessageLoader = Callable[[], Iterable[str]]


def load_builtin_messages() -> Iterable[str]:
    return REJECTION_REASONS


class MessageStore:
    """Immutable, fixed-size collection of rejection messages.

    Usage:
        store = MessageStore()
        store.initialize()
        reason = store.pick()
    """

    def __init__(
        self,
        loader: MessageLoader = load_builtin_messages,
        expected_size: int = EXPECTED_SIZE,
        random_source: Optional[random.Random] = None,
    ):
        """Initialize an empty store.

        Args:
            loader: Callable returning the messages to load
            expected_size: Number of messages the loader must produce
            random_source: Random source for pick (defaults to the OS CSPRNG)
        """
        self._loader = loader
        self._expected_size = expected_size
        self._random = random_source or secrets.SystemRandom()
        self._messages: Tuple[str, ...] = ()
        self._ready = False

    def initialize(self) -> None:
        """Load the message set.

        Raises:
            StoreInitializationError: If loading fails or the loaded set is
                not exactly the expected size of valid messages.
        """
        if self._ready:
            return

        logger.info("Starting rejection reasons cache initialization...")
        try:
            messages = tuple(self._loader())
        except Exception as e:
            logger.error(f"Failed to initialize rejection reasons cache: {e}")
            raise StoreInitializationError("Cache initialization failed") from e

        if len(messages) != self._expected_size:
            raise StoreInitializationError(
                f"Expected {self._expected_size} rejection reasons, loaded {len(messages)}"
            )
        for index, message in enumerate(messages):
            if not isinstance(message, str) or not message.strip():
                raise StoreInitializationError(f"Rejection reason #{index} is empty")
            if len(message) > MAX_MESSAGE_LENGTH:
                raise StoreInitializationError(
                    f"Rejection reason #{index} exceeds {MAX_MESSAGE_LENGTH} characters"
                )

        self._messages = messages
        self._ready = True
        logger.info(f"Successfully initialized {len(messages)} rejection reasons in cache")
        logger.debug(
            f"Cache initialization completed with {self.estimate_memory_usage()} "
            "bytes estimated memory usage"
        )

    def is_ready(self) -> bool:
        return self._ready

    def size(self) -> int:
        """Return the fixed cardinality of the store."""
        return self._expected_size

    def pick(self, random_source: Optional[random.Random] = None) -> str:
        """Return a uniformly random message.

        Args:
            random_source: Overrides the store's random source for this call

        Raises:
            NotReadyError: If the store has not been initialized
        """
        if not self._ready:
            logger.error("Attempted to access uninitialized rejection cache")
            raise NotReadyError("Rejection cache not initialized")

        rng = random_source or self._random
        index = rng.randrange(len(self._messages))
        reason = self._messages[index]

        logger.debug(
            f"Retrieved rejection reason at index {index}: "
            f"'{reason[:50] + '...' if len(reason) > 50 else reason}'"
        )
        return reason

    def estimate_memory_usage(self) -> int:
        """Estimate the bytes held by the messages (UTF-8 payload plus overhead)."""
        return sum(
            len(message.encode("utf-8")) + _STRING_OVERHEAD_BYTES
            for message in self._messages
        )
