"""Live tracking: start/stop state machine and periodic sample emission."""

import asyncio
from typing import Optional

from trackline.core.exceptions import (
    CapabilityUnavailable,
    NotAuthorized,
    PermissionDenied,
    PositionError,
    StoreWriteFailure,
    TracklineError,
    TransientAcquisitionFailure,
)
from trackline.core.logger import log_call, log_error, log_info, log_result, log_warning
from trackline.models.location import LocationRecord, NewLocation, PositionSample
from trackline.models.tracking import TrackingState, TrackingStatus
from trackline.services.identity import IdentityProvider
from trackline.services.sample_source import CancellationToken, Clock, SampleSource
from trackline.services.store import LocationStore

DEFAULT_PERIOD = 60.0


class TrackingController:
    """Turns start/stop intent and position results into stored records.

    State changes only through `start`, `stop` and the acquisition cycle.
    At most one repeating cycle is active at a time; each cycle owns a
    cancellation token that is checked before every emit.
    """

    def __init__(
        self,
        source: SampleSource,
        store: LocationStore,
        identity: IdentityProvider,
        period: float = DEFAULT_PERIOD,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            source: Position queries
            store: Store the records are appended to
            identity: Source of the signed-in operator id
            period: Seconds between periodic position requests
            clock: Sleep provider for the cycle (default asyncio)
        """
        self.source = source
        self.store = store
        self.identity = identity
        self.period = period
        self.clock = clock

        self._state = TrackingState.IDLE
        self._error: Optional[str] = None
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def status(self) -> TrackingStatus:
        return TrackingStatus(state=self._state, error=self._error)

    @property
    def cycle_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def check_can_start(self) -> str:
        """Checks the preconditions of `start`.

        Returns:
            The signed-in operator id

        Raises:
            NotAuthorized: If no operator is signed in
            CapabilityUnavailable: If there is no positioning capability
        """
        operator = self.identity.current_operator()
        if not operator:
            failure = NotAuthorized()
            self._error = str(failure)
            log_warning(str(failure))
            raise failure

        if not self.source.available:
            failure = CapabilityUnavailable()
            self._error = str(failure)
            log_warning(str(failure))
            raise failure

        return operator

    async def start(self) -> TrackingStatus:
        """Requests a first position and starts the periodic cycle on success.

        Raises:
            NotAuthorized: If no operator is signed in (state unchanged)
            CapabilityUnavailable: If there is no positioning capability
        """
        log_call("TrackingController", "start", state=self._state.value)
        self.check_can_start()

        if self._state in (TrackingState.REQUESTING_PERMISSION, TrackingState.TRACKING):
            log_info("tracking already active")
            return self.status

        token = CancellationToken()
        self._token = token
        self._state = TrackingState.REQUESTING_PERMISSION
        self._error = None

        try:
            sample = await self.source.acquire()
        except PositionError as e:
            if token.cancelled:
                return self.status
            self._token = None
            self._state = TrackingState.IDLE
            self._surface(PermissionDenied.from_position_error(e))
            return self.status
        except Exception as e:
            if token.cancelled:
                return self.status
            self._token = None
            self._state = TrackingState.ERROR
            self._error = f"Unexpected geolocation failure: {e}"
            log_error(self._error)
            return self.status

        if token.cancelled:
            return self.status

        self._state = TrackingState.TRACKING
        await self.emit(sample, token)

        if token.cancelled:
            return self.status

        self._task = asyncio.create_task(self._run_cycle(token))
        log_result("TrackingController", "start", self._state.value)
        return self.status

    def stop(self) -> None:
        """Cancels the cycle and returns to Idle. Idempotent, never raises."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None

        if self._state != TrackingState.IDLE:
            log_info("tracking stopped")
        self._state = TrackingState.IDLE
        self._error = None

    async def shutdown(self) -> None:
        """Stops tracking and waits for the cycle task to finish."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def dismiss_error(self) -> None:
        self._error = None

    async def emit(
        self, sample: PositionSample, token: Optional[CancellationToken] = None
    ) -> Optional[LocationRecord]:
        """Appends a record built from the sample.

        A failed append is surfaced and the sample is dropped; the next tick
        carries on.

        Returns:
            The stored record, or None when nothing was stored
        """
        if token is not None and token.cancelled:
            return None

        operator = self.identity.current_operator()
        if not operator:
            log_error("Cannot save location: operator not authenticated.")
            return None

        new = NewLocation.from_sample(sample, tracker_id=operator)
        try:
            record = await self.store.append(new)
        except Exception as e:
            log_error(f"Error saving location: {e}")
            # A stop during the append leaves Idle without an error
            if token is None or not token.cancelled:
                self._surface(StoreWriteFailure("Failed to save location data."))
            return None

        log_info(f"location saved: {record.latitude:.6f}, {record.longitude:.6f}")
        return record

    async def _run_cycle(self, token: CancellationToken) -> None:
        try:
            async for result in self.source.repeat(self.period, token, self.clock):
                if token.cancelled:
                    break
                if not result.ok:
                    self._surface(TransientAcquisitionFailure.from_position_error(result.error))
                    continue
                await self.emit(result.sample, token)
        except Exception as e:
            if token.cancelled:
                return
            token.cancel()
            self._token = None
            self._state = TrackingState.ERROR
            self._error = f"Tracking stopped after an unexpected failure: {e}"
            log_error(self._error)

    def _surface(self, failure: TracklineError) -> None:
        self._error = str(failure)
        log_warning(self._error)
