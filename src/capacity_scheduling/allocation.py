"""Allocator: commit a confirmed block to the ledger.

Each touched entry gives up the workload's full footprint area for that
period (whole-period reservation) and as many minutes as are still owed.
"""

from __future__ import annotations

import logging

from capacity_scheduling.errors import AllocationInvariantViolation
from capacity_scheduling.ledger import AvailabilityLedger, LedgerEntry
from capacity_scheduling.search import rejection_reason
from capacity_scheduling.types import Booking, Resource, ScheduleResult, Workload

logger = logging.getLogger(__name__)


def _check_block(
    workload: Workload,
    resource: Resource,
    block: tuple[LedgerEntry, ...] | list[LedgerEntry],
) -> None:
    """Re-run the search predicate before any mutation."""
    if not block:
        raise AllocationInvariantViolation(
            f"Empty block for workload {workload.workload_id}",
            workload.workload_id,
        )
    if not resource.can_lift(workload):
        raise AllocationInvariantViolation(
            f"Resource {resource.resource_id} cannot lift workload "
            f"{workload.workload_id} ({resource.max_lift_weight} < "
            f"{workload.effective_weight})",
            workload.workload_id,
        )
    for entry in block:
        if entry.resource_id != resource.resource_id:
            raise AllocationInvariantViolation(
                f"Entry {entry.entry_id} belongs to resource "
                f"{entry.resource_id}, not {resource.resource_id}",
                workload.workload_id,
            )
        reason = rejection_reason(entry, workload)
        if reason is not None:
            raise AllocationInvariantViolation(
                f"Entry {entry.entry_id} on {entry.period.isoformat()} "
                f"rejected at commit ({reason}) for workload "
                f"{workload.workload_id} on resource {resource.resource_id}",
                workload.workload_id,
            )


def commit_block(
    ledger: AvailabilityLedger,
    workload: Workload,
    resource: Resource,
    block: tuple[LedgerEntry, ...] | list[LedgerEntry],
) -> ScheduleResult:
    """Commit workload onto block. Mutates the ledger, returns the result.

    Raises AllocationInvariantViolation if the block fails re-validation or
    runs out of minutes before the duration is covered. Validation happens
    for the whole block before the first commit, so a rejected block leaves
    the ledger untouched.
    """
    _check_block(workload, resource, block)

    available = sum(e.remaining_minutes for e in block)  # type: ignore[misc]
    if available < workload.duration_minutes:
        raise AllocationInvariantViolation(
            f"Block allocation for workload {workload.workload_id} did not "
            f"provide full duration. "
            f"{workload.duration_minutes - available} minutes remaining.",
            workload.workload_id,
        )

    still_needed = workload.duration_minutes
    bookings: list[Booking] = []

    for entry in block:
        if still_needed <= 0:
            break
        take = min(still_needed, entry.remaining_minutes)  # type: ignore[type-var]

        ledger.commit(entry, workload.area_required, take)
        if workload.is_exclusive:
            ledger.mark_exclusive(entry, workload.workload_id)

        bookings.append(
            Booking(
                entry_id=entry.entry_id,
                period=entry.period,
                resource_id=entry.resource_id,
                booked_area=workload.area_required,
                booked_minutes=take,
            )
        )
        still_needed -= take

    if still_needed > 0:
        # Unreachable given the aggregate check above
        raise AllocationInvariantViolation(
            f"Block allocation for workload {workload.workload_id} did not "
            f"provide full duration. {still_needed} minutes remaining.",
            workload.workload_id,
        )

    result = ScheduleResult(
        workload_id=workload.workload_id,
        start=bookings[0].period,
        end=bookings[-1].period,
        bookings=tuple(bookings),
    )
    logger.debug(
        "Committed workload %s on resource %s: %s..%s (%d bookings)",
        workload.workload_id, resource.resource_id,
        result.start, result.end, len(bookings),
    )
    return result
