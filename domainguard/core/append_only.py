"""Append-Only Log - immutable history of behavioral events.

Invariants:
    - append() is the only write operation; there is no update or remove
    - Each append yields a new frozen record with a fresh Identifier and a
      timestamp taken from the injected Clock
    - Length grows by exactly 1 per append; earlier records are never replaced
    - records() is lazy, finite and restartable: it is bounded by the length at
      the moment it was taken and every iteration starts from the first record

Design Decisions:
    - Records and their events are frozen dataclasses
    - The log stores records in a private list; readers only ever get
      RecordSequence views or single records
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Iterator, TypeVar, overload

from domainguard.core.clock import Clock
from domainguard.core.domain_types import IdGenerator, Identifier, random_identifier

E = TypeVar("E")


@dataclass(frozen=True)
class AppendOnlyRecord(Generic[E]):
    """Immutable once created. Creation is its only lifecycle event."""
    record_id: Identifier
    recorded_at: datetime
    event: E


class RecordSequence(Generic[E]):
    """Read-only window over the first `length` records of a log."""

    __slots__ = ("_records", "_length")

    def __init__(self, records: list[AppendOnlyRecord[E]], length: int):
        self._records = records
        self._length = length

    def __iter__(self) -> Iterator[AppendOnlyRecord[E]]:
        for index in range(self._length):
            yield self._records[index]

    def __len__(self) -> int:
        return self._length

    @overload
    def __getitem__(self, index: int) -> AppendOnlyRecord[E]: ...
    @overload
    def __getitem__(self, index: slice) -> list[AppendOnlyRecord[E]]: ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._records[i] for i in range(*index.indices(self._length))]
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("record index out of range")
        return self._records[index]

    def __repr__(self) -> str:
        return f"<RecordSequence length={self._length}>"


class AppendOnlyLog(Generic[E]):
    """Monotonic log. Reads are idempotent, appends are not."""

    def __init__(self, clock: Clock, new_id: IdGenerator = random_identifier):
        self._clock = clock
        self._new_id = new_id
        self._records: list[AppendOnlyRecord[E]] = []

    def append(self, event: E) -> AppendOnlyRecord[E]:
        record = AppendOnlyRecord(
            record_id=self._new_id(),
            recorded_at=self._clock.now(),
            event=event,
        )
        self._records.append(record)
        return record

    def records(self) -> RecordSequence[E]:
        return RecordSequence(self._records, len(self._records))

    def latest(self) -> AppendOnlyRecord[E] | None:
        return self._records[-1] if self._records else None

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<AppendOnlyLog length={len(self._records)}>"
