"""Shared types: Workload, Resource, Booking and ScheduleResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Workload:
    """A unit of work needing time, footprint area and lift capacity.

    Dependencies are stored as an ordered tuple of workload ids with
    duplicates removed; any iterable is accepted at construction.
    """

    workload_id: int
    group_id: int
    duration_minutes: int
    area_required: int
    effective_weight: int
    is_exclusive: bool
    expected_start: date
    dependencies: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "dependencies", tuple(dict.fromkeys(self.dependencies))
        )


@dataclass(frozen=True)
class Resource:
    """Static capability ceiling of an allocatable resource."""

    resource_id: int
    max_area: int
    max_lift_weight: int
    minutes_per_period: int

    def can_lift(self, workload: Workload) -> bool:
        """Resource-level weight gate."""
        return self.max_lift_weight >= workload.effective_weight


@dataclass(frozen=True)
class Booking:
    """One ledger entry touched by one workload's allocation."""

    entry_id: int
    period: date
    resource_id: int
    booked_area: int
    booked_minutes: int


@dataclass(frozen=True)
class ScheduleResult:
    """Immutable record of a committed workload allocation.

    Invariants:
        - bookings is non-empty and ordered by period
        - start == bookings[0].period, end == bookings[-1].period
        - sum(b.booked_minutes for b in bookings) == workload duration
    """

    workload_id: int
    start: date
    end: date
    bookings: tuple[Booking, ...]

    @property
    def resource_id(self) -> int:
        """Resource hosting the workload (a workload never spans resources)."""
        return self.bookings[0].resource_id

    @property
    def booked_minutes(self) -> int:
        return sum(b.booked_minutes for b in self.bookings)

    @property
    def span_days(self) -> int:
        """Calendar days between first and last touched period, inclusive."""
        return (self.end - self.start).days + 1
