import asyncio
import time
from typing import Callable, Optional

from ...config import RATE_LIMIT_INTERVAL_SECONDS
from ...utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Enforces a minimum spacing between outbound provider requests.

    The wait and the update of the last-request instant happen under one
    lock, so concurrent callers queue up and each one measures its wait
    from the previous caller's acquisition. A caller cancelled while
    waiting leaves the last-request instant untouched.
    """

    def __init__(
        self,
        min_interval: float = RATE_LIMIT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self.min_interval = min_interval
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_request_time: Optional[float] = None

    @property
    def last_request_time(self) -> Optional[float]:
        return self._last_request_time

    async def acquire(self) -> None:
        async with self._lock:
            if self._last_request_time is not None:
                elapsed = self._clock() - self._last_request_time
                remaining = self.min_interval - elapsed
                if remaining > 0:
                    logger.debug(f"Rate limited, waiting {remaining:.3f}s")
                    await asyncio.sleep(remaining)
            self._last_request_time = self._clock()

    def reset(self) -> None:
        self._last_request_time = None
