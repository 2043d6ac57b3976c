"""SlotFinder: read-only search for a feasible block of ledger entries.

find_block returns the block (empty when infeasible); walk is the raising
variant that reports why the last candidate entry was rejected.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from enum import Enum

from capacity_scheduling.errors import InfeasibleError
from capacity_scheduling.ledger import AvailabilityLedger, BookingStatus, LedgerEntry
from capacity_scheduling.types import Resource, Workload

logger = logging.getLogger(__name__)

# Rejection reasons reported through InfeasibleError.reason
FULLY_BOOKED = "fully_booked"
AREA = "area"
EXCLUSIVE = "exclusive"
GAP = "gap"
HORIZON = "horizon"
LIFT_WEIGHT = "lift_weight"


class SlotSearch(str, Enum):
    """Block discovery mode.

    LENIENT skips infeasible periods and keeps scanning; the block need not
    be calendar-contiguous. CONTIGUOUS additionally requires consecutive
    days and restarts the window at any gap.
    """

    LENIENT = "lenient"
    CONTIGUOUS = "contiguous"


def rejection_reason(entry: LedgerEntry, workload: Workload) -> str | None:
    """Why entry cannot host any part of workload, or None if it can."""
    if entry.status is BookingStatus.FULLY_BOOKED:
        return FULLY_BOOKED
    if entry.remaining_area < workload.area_required:  # type: ignore[operator]
        return AREA
    if entry.exclusive_holder is not None:
        return EXCLUSIVE
    if workload.is_exclusive and entry.has_bookings:
        return EXCLUSIVE
    return None


def walk(
    ledger: AvailabilityLedger,
    workload: Workload,
    resource: Resource,
    earliest: date,
    mode: SlotSearch = SlotSearch.LENIENT,
) -> tuple[LedgerEntry, ...]:
    """Read-only: find the earliest feasible block. Does NOT mutate the ledger.

    Raises InfeasibleError if the resource cannot lift the workload or the
    entry stream is exhausted before the duration is covered.
    """
    required = workload.duration_minutes

    if not resource.can_lift(workload):
        raise InfeasibleError(
            workload_id=workload.workload_id,
            resource_id=resource.resource_id,
            minutes_remaining=required,
            minutes_requested=required,
            reason=LIFT_WEIGHT,
        )

    block: list[LedgerEntry] = []
    accumulated = 0
    last_reason = HORIZON

    for entry in ledger.entries_for(resource.resource_id, earliest):
        reason = rejection_reason(entry, workload)
        if reason is not None:
            block.clear()
            accumulated = 0
            last_reason = reason
            continue

        if (
            mode is SlotSearch.CONTIGUOUS
            and block
            and entry.period != block[-1].period + timedelta(days=1)
        ):
            # Restart the window at this entry
            block.clear()
            accumulated = 0
            last_reason = GAP

        block.append(entry)
        accumulated += entry.remaining_minutes  # type: ignore[operator]

        if accumulated >= required:
            return tuple(block)

    logger.debug(
        "Workload %s does not fit on resource %s from %s (%s)",
        workload.workload_id, resource.resource_id, earliest, last_reason,
    )
    raise InfeasibleError(
        workload_id=workload.workload_id,
        resource_id=resource.resource_id,
        minutes_remaining=required - accumulated,
        minutes_requested=required,
        reason=last_reason,
    )


def find_block(
    ledger: AvailabilityLedger,
    workload: Workload,
    resource: Resource,
    earliest: date,
    mode: SlotSearch = SlotSearch.LENIENT,
) -> tuple[LedgerEntry, ...]:
    """Like walk, but returns an empty tuple when the resource is infeasible."""
    try:
        return walk(ledger, workload, resource, earliest, mode)
    except InfeasibleError:
        return ()
