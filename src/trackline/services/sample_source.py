"""One-shot and repeating position queries."""

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol

from trackline.core.exceptions import CapabilityUnavailable, PositionError
from trackline.core.logger import log_call, log_result
from trackline.models.location import PositionOptions, PositionSample


class PositionProvider(Protocol):
    """Positioning capability."""

    async def get_current_position(self, options: PositionOptions) -> PositionSample:
        """Returns a fix or raises PositionError."""
        ...


class Clock(Protocol):
    async def sleep(self, seconds: float) -> None:
        ...


class AsyncioClock:
    """Clock backed by the running event loop."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class CancellationToken:
    """Cancellation flag shared by one acquisition cycle."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass(frozen=True)
class Acquisition:
    """Result of one periodic position request."""

    sample: Optional[PositionSample] = None
    error: Optional[PositionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SampleSource:
    """Wraps a position provider; holds no state besides its options."""

    def __init__(
        self,
        provider: Optional[PositionProvider],
        options: Optional[PositionOptions] = None,
    ):
        """
        Args:
            provider: Positioning capability (None = not available)
            options: Options passed with every request
        """
        self.provider = provider
        self.options = options or PositionOptions()

    @property
    def available(self) -> bool:
        return self.provider is not None

    async def acquire(self) -> PositionSample:
        """Requests a single position.

        Returns:
            The reported sample

        Raises:
            CapabilityUnavailable: If there is no provider
            PositionError: If the provider fails
        """
        if self.provider is None:
            raise CapabilityUnavailable()

        log_call("SampleSource", "acquire", high_accuracy=self.options.high_accuracy, timeout_ms=self.options.timeout_ms)
        sample = await self.provider.get_current_position(self.options)
        log_result("SampleSource", "acquire", f"{sample.latitude:.6f}, {sample.longitude:.6f}")
        return sample

    async def repeat(
        self,
        period: float,
        token: CancellationToken,
        clock: Optional[Clock] = None,
    ) -> AsyncIterator[Acquisition]:
        """Requests a position every `period` seconds until the token is cancelled.

        Failures are yielded as values so one bad tick does not end the cycle.
        """
        clock = clock or AsyncioClock()
        while not token.cancelled:
            await clock.sleep(period)
            if token.cancelled:
                return
            try:
                sample = await self.acquire()
            except PositionError as e:
                yield Acquisition(error=e)
                continue
            yield Acquisition(sample=sample)
