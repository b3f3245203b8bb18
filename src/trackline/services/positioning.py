"""Position provider fed by the operator's client."""

import asyncio
import time
from typing import Callable, List, Optional, Tuple

from trackline.core.exceptions import PositionError
from trackline.core.logger import log_call, log_info, log_result
from trackline.models.location import PositionOptions, PositionSample


class ReportedPositionProvider:
    """Answers position requests with fixes reported by the operator's device.

    A request is served from the last fix if it is not older than
    `max_cached_age_ms`, otherwise it waits up to `timeout_ms` for the next
    report. The client learns about a waiting request from `pending`.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Monotonic clock in seconds
        """
        self._clock = clock
        self._latest: Optional[Tuple[float, PositionSample]] = None
        self._waiters: List[asyncio.Future] = []

    @property
    def pending(self) -> bool:
        """True while some request waits for a fix."""
        return any(not w.done() for w in self._waiters)

    @property
    def latest(self) -> Optional[PositionSample]:
        return self._latest[1] if self._latest else None

    def report(self, sample: PositionSample) -> int:
        """Stores a fix and resolves all waiting requests.

        Returns:
            Number of requests answered
        """
        self._latest = (self._clock(), sample)
        answered = 0
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(sample)
                answered += 1
        self._waiters = []
        log_info(f"position reported ({answered} request(s) answered)")
        return answered

    def report_error(self, message: str) -> int:
        """Fails all waiting requests with the client's error message.

        Returns:
            Number of requests failed
        """
        failed = 0
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_exception(PositionError(message))
                failed += 1
        self._waiters = []
        log_info(f"position error reported: {message} ({failed} request(s) failed)")
        return failed

    async def get_current_position(self, options: PositionOptions) -> PositionSample:
        """Returns a fix fresh enough for the options.

        Raises:
            PositionError: On timeout or when the client reports an error
        """
        log_call("ReportedPositionProvider", "get_current_position", timeout_ms=options.timeout_ms)

        if self._latest is not None:
            reported_at, sample = self._latest
            age_ms = (self._clock() - reported_at) * 1000
            if options.max_cached_age_ms > 0 and age_ms <= options.max_cached_age_ms:
                log_result("ReportedPositionProvider", "get_current_position", "cached fix")
                return sample

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            sample = await asyncio.wait_for(waiter, timeout=options.timeout_ms / 1000)
        except asyncio.TimeoutError:
            raise PositionError("Timeout expired")
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

        log_result("ReportedPositionProvider", "get_current_position", "fresh fix")
        return sample
