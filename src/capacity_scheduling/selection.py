"""ResourceSelector: candidate ordering and fit-policy choice.

Both policies are tagged strategies: an enum value plus a dispatch table of
plain functions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Callable, Sequence

from capacity_scheduling.ledger import AvailabilityLedger, LedgerEntry
from capacity_scheduling.types import Resource, Workload


class ResourceOrder(str, Enum):
    BY_ID = "by_id"
    LEAST_LOADED = "least_loaded"


class FitPolicy(str, Enum):
    """How to choose among resources that can all host a workload.

    FIRST_FEASIBLE commits on the first candidate in resource order without
    searching the rest. The other policies search every candidate first.
    """

    FIRST_FEASIBLE = "first_feasible"
    EARLIEST_FIT = "earliest_fit"
    BEST_FIT_AREA = "best_fit_area"
    BEST_FIT_LIFT = "best_fit_lift"


@dataclass(frozen=True)
class Candidate:
    """A feasible (resource, block) pair found by the slot search."""

    rank: int
    resource: Resource
    block: tuple[LedgerEntry, ...]

    @property
    def start(self) -> date:
        return self.block[0].period

    def spare_area(self, workload: Workload) -> int:
        """Area left on the tightest entry of the block after committing."""
        return min(e.remaining_area for e in self.block) - workload.area_required


def _by_id(
    resources: Sequence[Resource], ledger: AvailabilityLedger
) -> list[Resource]:
    return sorted(resources, key=lambda r: r.resource_id)


def _least_loaded(
    resources: Sequence[Resource], ledger: AvailabilityLedger
) -> list[Resource]:
    return sorted(
        resources,
        key=lambda r: (-ledger.remaining_minutes(r.resource_id), r.resource_id),
    )


_ORDERINGS: dict[
    ResourceOrder,
    Callable[[Sequence[Resource], AvailabilityLedger], list[Resource]],
] = {
    ResourceOrder.BY_ID: _by_id,
    ResourceOrder.LEAST_LOADED: _least_loaded,
}


def order_resources(
    resources: Sequence[Resource],
    ledger: AvailabilityLedger,
    order: ResourceOrder = ResourceOrder.BY_ID,
) -> list[Resource]:
    """Order candidate resources for the next workload.

    BY_ID: ascending resource id. LEAST_LOADED: descending summed remaining
    minutes, ties broken by ascending id. Load is read from the ledger at
    call time, so the order reflects every commit made so far.
    """
    return _ORDERINGS[order](resources, ledger)


_FIT_KEYS: dict[FitPolicy, Callable[[Candidate, Workload], tuple]] = {
    FitPolicy.FIRST_FEASIBLE: lambda c, w: (c.rank,),
    FitPolicy.EARLIEST_FIT: lambda c, w: (c.start, c.rank),
    FitPolicy.BEST_FIT_AREA: lambda c, w: (c.spare_area(w), c.rank),
    FitPolicy.BEST_FIT_LIFT: lambda c, w: (c.resource.max_lift_weight, c.rank),
}


def choose_candidate(
    policy: FitPolicy,
    candidates: Sequence[Candidate],
    workload: Workload,
) -> Candidate | None:
    """Pick the winning candidate; ties fall back to resource order."""
    if not candidates:
        return None
    return min(candidates, key=lambda c: _FIT_KEYS[policy](c, workload))
