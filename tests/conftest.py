"""Shared fixtures and fakes for the Trackline test suite."""

import asyncio
import threading
from datetime import datetime, timezone
from typing import List, Optional

import pytest

from trackline.core.exceptions import StoreWriteFailure
from trackline.models.history import HistorySnapshot
from trackline.models.location import LocationRecord, NewLocation, PositionSample
from trackline.services.store import JsonLocationStore

UTC = timezone.utc


async def settle(rounds: int = 10) -> None:
    """Lets pending tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_until(predicate, timeout: float = 3.0) -> bool:
    """Polls the predicate while worker threads finish their part."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


def make_record(
    record_id: str,
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    latitude: float = 50.0,
    longitude: float = 14.0,
) -> LocationRecord:
    return LocationRecord(
        id=record_id,
        timestamp=datetime(year, month, day, hour, minute, tzinfo=UTC),
        latitude=latitude,
        longitude=longitude,
        tracker_id="operator",
    )


class FakeClock:
    """Clock whose sleeps end only when the test advances it."""

    def __init__(self):
        self.sleeps: List[float] = []
        self._pending: List[asyncio.Future] = []

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self.sleeps.append(seconds)
        self._pending.append(future)
        await future

    @property
    def waiting(self) -> int:
        return sum(1 for f in self._pending if not f.done())

    async def advance(self) -> None:
        pending, self._pending = self._pending, []
        for future in pending:
            if not future.done():
                future.set_result(None)
        await settle()


class FakeProvider:
    """Position provider answering from a scripted list of results."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.default = PositionSample(latitude=50.08, longitude=14.43, accuracy=12.0)

    async def get_current_position(self, options) -> PositionSample:
        self.calls += 1
        result = self.results.pop(0) if self.results else self.default
        if isinstance(result, BaseException):
            raise result
        return result


class BlockingProvider:
    """Position provider that answers only when released."""

    def __init__(self):
        self.calls = 0
        self.future: Optional[asyncio.Future] = None

    async def get_current_position(self, options) -> PositionSample:
        self.calls += 1
        self.future = asyncio.get_running_loop().create_future()
        return await self.future

    def release(self, sample: PositionSample) -> None:
        self.future.set_result(sample)


class FakeStore:
    """Store recording appends; can be told to fail or to hold appends."""

    def __init__(self):
        self.appended: List[NewLocation] = []
        self.fail = False
        self.gate: Optional[asyncio.Future] = None

    def hold(self) -> None:
        self.gate = asyncio.get_running_loop().create_future()

    def release(self) -> None:
        gate, self.gate = self.gate, None
        gate.set_result(None)

    async def append(self, new: NewLocation) -> LocationRecord:
        if self.gate is not None:
            await self.gate
        if isinstance(self.fail, BaseException):
            raise self.fail
        if self.fail:
            raise StoreWriteFailure("disk full")
        self.appended.append(new)
        return LocationRecord(
            id=str(len(self.appended)),
            timestamp=datetime.now(UTC),
            latitude=new.latitude,
            longitude=new.longitude,
            tracker_id=new.tracker_id,
            accuracy=new.accuracy,
            altitude=new.altitude,
        )


class GatedWriteStore(JsonLocationStore):
    """JSON store whose file writes wait until the gate is open."""

    def __init__(self, path):
        super().__init__(path)
        self.gate = threading.Event()
        self.gate.set()

    def _write(self, records) -> None:
        self.gate.wait(timeout=5)
        super()._write(records)


class FakeIdentity:
    def __init__(self, operator: Optional[str] = "austin"):
        self.operator = operator

    def current_operator(self) -> Optional[str]:
        return self.operator


class RecordingSurface:
    """Map surface recording every call."""

    def __init__(self):
        self.calls: List[tuple] = []
        self._handle = 0

    def _next(self) -> int:
        self._handle += 1
        return self._handle

    def draw_path(self, points):
        handle = self._next()
        self.calls.append(("draw_path", list(points), handle))
        return handle

    def draw_marker(self, point, label):
        handle = self._next()
        self.calls.append(("draw_marker", point, label, handle))
        return handle

    def remove_layer(self, handle):
        self.calls.append(("remove_layer", handle))

    def fit_bounds(self, handle):
        self.calls.append(("fit_bounds", handle))

    def reset_view(self, center, zoom):
        self.calls.append(("reset_view", center, zoom))

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def june_history() -> HistorySnapshot:
    return HistorySnapshot.from_records([
        make_record("a", 2024, 5, 31, 23, 30),
        make_record("b", 2024, 6, 1, 0, 45),
        make_record("c", 2024, 6, 1, 8, 0),
        make_record("d", 2024, 6, 1, 19, 0),
        make_record("e", 2024, 6, 1, 20, 30),
        make_record("f", 2024, 6, 1, 21, 0),
        make_record("g", 2024, 6, 1, 23, 0),
        make_record("h", 2024, 6, 2, 1, 0),
    ])


@pytest.fixture
def json_store(tmp_path):
    return JsonLocationStore(tmp_path / "tracked_locations.json")


