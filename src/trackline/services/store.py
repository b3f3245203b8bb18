"""Location store with ordered snapshot subscriptions."""

import asyncio
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from trackline.core.exceptions import StoreSubscriptionFailure, StoreWriteFailure
from trackline.core.logger import log_call, log_error, log_info, log_result
from trackline.models.history import HistorySnapshot
from trackline.models.location import GPSCoordinates, LocationRecord, NewLocation

SnapshotCallback = Callable[[HistorySnapshot], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """Handle of a standing subscription."""

    def __init__(self, release: Callable[["Subscription"], None]):
        self._release = release
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._release(self)


class LocationStore(Protocol):
    """Store capability."""

    async def append(self, new: NewLocation) -> LocationRecord:
        ...

    def subscribe_ordered(
        self,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
        order_by: str = "timestamp",
        descending: bool = False,
    ) -> Subscription:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _log_unawaited_failure(commit: asyncio.Future) -> None:
    # The appending caller may have been cancelled; its commit still reports
    if commit.cancelled():
        return
    error = commit.exception()
    if error is not None:
        log_error(f"Store write failed: {error}")


class JsonLocationStore:
    """Location store persisted as a JSON list of records.

    The store assigns record ids and receipt timestamps. Every subscriber
    gets the full ordered snapshot right away and after every append.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            path: JSON file (None = in-memory only)
            now: Source of receipt timestamps
        """
        self.path = path
        self._now = now
        self._records: Optional[List[LocationRecord]] = None
        self._subscribers: List[tuple] = []
        self._write_lock = asyncio.Lock()

    def load(self) -> List[LocationRecord]:
        """Loads records from the file.

        Raises:
            StoreSubscriptionFailure: If the file cannot be read or parsed
        """
        if self._records is not None:
            return self._records

        records: List[LocationRecord] = []
        if self.path and self.path.exists():
            log_call("LocationStore", "load", path=str(self.path))
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if not isinstance(data, list):
                    raise StoreSubscriptionFailure("Expected a list of records in the store file")
                records = [LocationRecord.from_dict(item) for item in data]
            except json.JSONDecodeError as e:
                raise StoreSubscriptionFailure(f"Invalid JSON format: {e}")
            except (KeyError, TypeError, ValueError) as e:
                raise StoreSubscriptionFailure(f"Invalid record in store file: {e}")
            except OSError as e:
                raise StoreSubscriptionFailure(f"Error reading file: {e}")
            log_result("LocationStore", "load", f"{len(records)} records")

        self._records = records
        return records

    def snapshot(self) -> HistorySnapshot:
        return HistorySnapshot.from_records(self.load())

    async def append(self, new: NewLocation) -> LocationRecord:
        """Stores a new record.

        Once started, a commit runs to the end even if the caller is
        cancelled: the file, the in-memory records and the subscribers stay
        in step.

        Raises:
            StoreWriteFailure: If the record is invalid or cannot be persisted
        """
        log_call("LocationStore", "append", lat=new.latitude, lng=new.longitude, tracker=new.tracker_id)

        if not GPSCoordinates(latitude=new.latitude, longitude=new.longitude).is_valid:
            raise StoreWriteFailure(f"Coordinates out of range: {new.latitude}, {new.longitude}")
        if new.accuracy is not None and new.accuracy < 0:
            raise StoreWriteFailure(f"Negative accuracy: {new.accuracy}")

        commit = asyncio.ensure_future(self._commit(new))
        commit.add_done_callback(_log_unawaited_failure)
        return await asyncio.shield(commit)

    async def _commit(self, new: NewLocation) -> LocationRecord:
        async with self._write_lock:
            try:
                records = self.load()
            except StoreSubscriptionFailure as e:
                raise StoreWriteFailure(str(e))

            timestamp = self._now()
            if records and timestamp < records[-1].timestamp:
                # Receipt order wins over a clock step backwards
                timestamp = records[-1].timestamp

            record = LocationRecord(
                id=uuid.uuid4().hex,
                timestamp=timestamp,
                latitude=new.latitude,
                longitude=new.longitude,
                tracker_id=new.tracker_id,
                accuracy=new.accuracy,
                altitude=new.altitude,
            )

            updated = records + [record]
            if self.path:
                try:
                    await asyncio.to_thread(self._write, updated)
                except OSError as e:
                    raise StoreWriteFailure(f"Error writing store file: {e}")

            self._records = updated

        log_result("LocationStore", "append", record.id)
        self._publish()
        return record

    def _write(self, records: List[LocationRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in records], f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def subscribe_ordered(
        self,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
        order_by: str = "timestamp",
        descending: bool = False,
    ) -> Subscription:
        """Opens a standing subscription to all records ordered by timestamp.

        Args:
            on_snapshot: Called with every full snapshot
            on_error: Called when the store cannot deliver
            order_by: Ordering key, only "timestamp" is supported
            descending: Only ascending order is supported

        Raises:
            ValueError: For an unsupported ordering
        """
        if order_by != "timestamp" or descending:
            raise ValueError(f"Unsupported ordering: {order_by} {'desc' if descending else 'asc'}")

        log_call("LocationStore", "subscribe_ordered", order_by=order_by)
        subscription = Subscription(self._release)
        entry = (subscription, on_snapshot, on_error)
        self._subscribers.append(entry)

        try:
            snapshot = self.snapshot()
        except StoreSubscriptionFailure as e:
            log_error(f"Store subscription failed: {e}")
            if on_error:
                on_error(e)
            return subscription

        self._deliver(entry, snapshot)
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _release(self, subscription: Subscription) -> None:
        self._subscribers = [s for s in self._subscribers if s[0] is not subscription]
        log_info(f"store subscription released ({len(self._subscribers)} left)")

    def _publish(self) -> None:
        snapshot = self.snapshot()
        for entry in list(self._subscribers):
            self._deliver(entry, snapshot)

    def _deliver(self, entry: tuple, snapshot: HistorySnapshot) -> None:
        subscription, on_snapshot, on_error = entry
        if not subscription.active:
            return
        try:
            on_snapshot(snapshot)
        except Exception as e:
            # Subscriber errors never reach the appending caller
            log_error(f"Snapshot subscriber failed: {e}")
            if on_error:
                on_error(e)
