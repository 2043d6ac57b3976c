"""AvailabilityLedger: mutable (resource, period) capacity state.

Provides read-only lookups for the slot search and a single commit entry
point for the allocator. Status is always derived from remaining/total and
is never stored.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Iterator

from capacity_scheduling.errors import (
    AllocationInvariantViolation,
    InvalidInputError,
)
from capacity_scheduling.types import Resource


class BookingStatus(str, Enum):
    AVAILABLE = "available"
    PARTIALLY_BOOKED = "partially_booked"
    FULLY_BOOKED = "fully_booked"


def derive_status(
    remaining_area: int,
    total_area: int,
    remaining_minutes: int,
    total_minutes: int,
) -> BookingStatus:
    """Status rule shared by every ledger entry."""
    if remaining_area == 0 or remaining_minutes == 0:
        return BookingStatus.FULLY_BOOKED
    if remaining_area < total_area or remaining_minutes < total_minutes:
        return BookingStatus.PARTIALLY_BOOKED
    return BookingStatus.AVAILABLE


@dataclass(eq=False)
class LedgerEntry:
    """Capacity state of one resource for one period.

    remaining_area / remaining_minutes default to the totals. After the entry
    joins a ledger, mutate it only through AvailabilityLedger.commit and
    AvailabilityLedger.mark_exclusive.
    """

    entry_id: int
    resource_id: int
    period: date
    total_area: int
    total_minutes: int
    remaining_area: int | None = None
    remaining_minutes: int | None = None
    exclusive_holder: int | None = None

    def __post_init__(self) -> None:
        if self.remaining_area is None:
            self.remaining_area = self.total_area
        if self.remaining_minutes is None:
            self.remaining_minutes = self.total_minutes

    @property
    def status(self) -> BookingStatus:
        return derive_status(
            self.remaining_area,  # type: ignore[arg-type]
            self.total_area,
            self.remaining_minutes,  # type: ignore[arg-type]
            self.total_minutes,
        )

    @property
    def has_bookings(self) -> bool:
        """Whether any workload has consumed minutes from this entry."""
        return self.remaining_minutes != self.total_minutes

    def problems(self) -> list[str]:
        """Bounds violations for this entry (empty = valid)."""
        errors: list[str] = []
        label = f"entry {self.entry_id}"
        if self.total_area < 0 or self.total_minutes < 0:
            errors.append(f"{label}: totals must be non-negative")
        if not 0 <= self.remaining_area <= self.total_area:  # type: ignore[operator]
            errors.append(
                f"{label}: remaining_area {self.remaining_area} outside "
                f"[0, {self.total_area}]"
            )
        if not 0 <= self.remaining_minutes <= self.total_minutes:  # type: ignore[operator]
            errors.append(
                f"{label}: remaining_minutes {self.remaining_minutes} outside "
                f"[0, {self.total_minutes}]"
            )
        return errors


class AvailabilityLedger:
    """Owned mapping of (resource_id, period) -> LedgerEntry.

    Entries for a resource are kept sorted by period so that lookups from an
    earliest date are a bisect plus a slice.
    """

    def __init__(self, entries: Iterable[LedgerEntry]) -> None:
        self._by_key: dict[tuple[int, date], LedgerEntry] = {}
        self._by_resource: dict[int, list[LedgerEntry]] = {}
        self._periods: dict[int, list[date]] = {}

        errors: list[str] = []
        seen_ids: set[int] = set()
        for entry in entries:
            key = (entry.resource_id, entry.period)
            if entry.entry_id in seen_ids:
                errors.append(f"duplicate entry id {entry.entry_id}")
                continue
            if key in self._by_key:
                errors.append(
                    f"duplicate period {entry.period.isoformat()} for "
                    f"resource {entry.resource_id}"
                )
                continue
            errors.extend(entry.problems())
            seen_ids.add(entry.entry_id)
            self._by_key[key] = entry
            self._by_resource.setdefault(entry.resource_id, []).append(entry)

        if errors:
            raise InvalidInputError("availability", errors)

        for resource_id, resource_entries in self._by_resource.items():
            resource_entries.sort(key=lambda e: e.period)
            self._periods[resource_id] = [e.period for e in resource_entries]

    @classmethod
    def from_resources(
        cls,
        resources: Iterable[Resource],
        start: date,
        end: date,
        weekdays: Iterable[int] | None = None,
    ) -> AvailabilityLedger:
        """Materialise one fresh entry per resource per day in [start, end).

        Each entry takes the resource's area ceiling and nominal minutes.
        weekdays restricts materialisation to those weekday numbers
        (Monday=0); None means every day. Entry ids are assigned
        sequentially in (resource_id, period) order starting at 1.
        """
        allowed = set(weekdays) if weekdays is not None else None
        entries: list[LedgerEntry] = []
        next_id = 1
        for resource in sorted(resources, key=lambda r: r.resource_id):
            day = start
            while day < end:
                if allowed is None or day.weekday() in allowed:
                    entries.append(
                        LedgerEntry(
                            entry_id=next_id,
                            resource_id=resource.resource_id,
                            period=day,
                            total_area=resource.max_area,
                            total_minutes=resource.minutes_per_period,
                        )
                    )
                    next_id += 1
                day += timedelta(days=1)
        return cls(entries)

    def __iter__(self) -> Iterator[LedgerEntry]:
        for resource_id in sorted(self._by_resource):
            yield from self._by_resource[resource_id]

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, entry: object) -> bool:
        if not isinstance(entry, LedgerEntry):
            return False
        return self._by_key.get((entry.resource_id, entry.period)) is entry

    def get(self, resource_id: int, period: date) -> LedgerEntry | None:
        return self._by_key.get((resource_id, period))

    def entries_for(
        self, resource_id: int, on_or_after: date
    ) -> tuple[LedgerEntry, ...]:
        """Date-ordered entries of one resource starting at on_or_after."""
        entries = self._by_resource.get(resource_id)
        if not entries:
            return ()
        idx = bisect.bisect_left(self._periods[resource_id], on_or_after)
        return tuple(entries[idx:])

    def remaining_minutes(self, resource_id: int) -> int:
        """Summed remaining minutes across the whole ledger of a resource."""
        return sum(
            e.remaining_minutes  # type: ignore[misc]
            for e in self._by_resource.get(resource_id, ())
        )

    def commit(self, entry: LedgerEntry, area: int, minutes: int) -> None:
        """Consume area and minutes from one entry. The only write path."""
        if entry not in self:
            raise AllocationInvariantViolation(
                f"Entry {entry.entry_id} is not owned by this ledger"
            )
        if area < 0 or minutes < 0:
            raise AllocationInvariantViolation(
                f"Negative consumption on entry {entry.entry_id}: "
                f"area={area}, minutes={minutes}"
            )
        new_area = entry.remaining_area - area  # type: ignore[operator]
        new_minutes = entry.remaining_minutes - minutes  # type: ignore[operator]
        if new_area < 0 or new_minutes < 0:
            raise AllocationInvariantViolation(
                f"Commit would overdraw entry {entry.entry_id}: "
                f"remaining area {entry.remaining_area} - {area}, "
                f"remaining minutes {entry.remaining_minutes} - {minutes}"
            )
        entry.remaining_area = new_area
        entry.remaining_minutes = new_minutes

    def mark_exclusive(self, entry: LedgerEntry, workload_id: int) -> None:
        """Record that an exclusive workload holds this entry."""
        if entry not in self:
            raise AllocationInvariantViolation(
                f"Entry {entry.entry_id} is not owned by this ledger",
                workload_id,
            )
        entry.exclusive_holder = workload_id
