"""Model for the ordered location history."""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from trackline.models.location import LocationRecord


@dataclass(frozen=True)
class HistorySnapshot:
    """Full ordered set of records as delivered by the store.

    Ascending by timestamp, unique by id. Replaced wholesale on every push,
    never patched.
    """

    records: Tuple[LocationRecord, ...] = ()

    @classmethod
    def from_records(cls, records: Iterable[LocationRecord]) -> "HistorySnapshot":
        """Builds a snapshot, dropping repeated ids and keeping timestamp order."""
        seen = set()
        unique = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        # Stable sort keeps delivery order for equal timestamps
        unique.sort(key=lambda r: r.timestamp)
        return cls(records=tuple(unique))

    @property
    def latest(self) -> Optional[LocationRecord]:
        return self.records[-1] if self.records else None

    def path_length_km(self) -> float:
        """Length of the path through all records in order."""
        total = 0.0
        for before, after in zip(self.records, self.records[1:]):
            total += before.coordinates.distance_to(after.coordinates)
        return total

    def to_list(self) -> list:
        return [r.to_dict() for r in self.records]

    def __iter__(self) -> Iterator[LocationRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)
