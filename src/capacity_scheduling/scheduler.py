"""Scheduler: dependency-aware greedy composition of the primitives.

A run moves through VALIDATING -> ORDERING -> ALLOCATING -> DONE, or ends in
FAILED as soon as any stage raises. Structural problems surface before any
resource is searched; an unplaceable workload aborts the whole batch and no
partial result list is returned.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Iterable

from capacity_scheduling.allocation import commit_block
from capacity_scheduling.errors import (
    AllocationInvariantViolation,
    InfeasibleError,
    InvalidInputError,
    ResourceUnschedulableError,
)
from capacity_scheduling.ledger import AvailabilityLedger, LedgerEntry
from capacity_scheduling.options import SchedulingOptions
from capacity_scheduling.ordering import WorkloadGroup, arrange_workloads
from capacity_scheduling.schema import validate_resources, validate_workloads
from capacity_scheduling.search import walk
from capacity_scheduling.selection import (
    Candidate,
    FitPolicy,
    choose_candidate,
    order_resources,
)
from capacity_scheduling.types import Resource, ScheduleResult, Workload

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    ORDERING = "ordering"
    ALLOCATING = "allocating"
    DONE = "done"
    FAILED = "failed"


class Scheduler:
    """Runs one batch of workloads against a capacity ledger.

    The ledger passed to run() is owned by the scheduler for the duration of
    the run and is mutated in place; it stays available as ``self.ledger``
    afterwards.
    """

    def __init__(self, options: SchedulingOptions | None = None) -> None:
        self.options = options if options is not None else SchedulingOptions()
        self.state = SchedulerState.IDLE
        self.ledger: AvailabilityLedger | None = None
        self.groups: list[WorkloadGroup] = []
        self.results: list[ScheduleResult] = []
        self.current_workload: Workload | None = None
        self._resources: list[Resource] = []
        self._recorded: dict[int, ScheduleResult] = {}

    def run(
        self,
        workloads: Iterable[Workload] | None,
        resources: Iterable[Resource] | None,
        availability: AvailabilityLedger | Iterable[LedgerEntry] | None,
    ) -> list[ScheduleResult]:
        """Schedule every workload, or raise a SchedulingError.

        Returns ScheduleResults in processing order: ascending group id,
        then topological order within the group.
        """
        self.results = []
        self._recorded = {}
        self.current_workload = None
        try:
            workload_list = self._validate(workloads, resources, availability)

            self.state = SchedulerState.ORDERING
            self.groups = arrange_workloads(
                workload_list, strict=self.options.strict_dependency_mode
            )

            self.state = SchedulerState.ALLOCATING
            logger.info(
                "Scheduling %d workloads in %d groups on %d resources",
                len(workload_list), len(self.groups), len(self._resources),
            )
            for group in self.groups:
                for workload in group.workloads:
                    self.current_workload = workload
                    result = self._place(workload)
                    self._recorded[workload.workload_id] = result
                    self.results.append(result)
            self.current_workload = None
        except Exception:
            self.state = SchedulerState.FAILED
            raise

        self.state = SchedulerState.DONE
        logger.info("Scheduled %d workloads", len(self.results))
        return list(self.results)

    def _validate(
        self,
        workloads: Iterable[Workload] | None,
        resources: Iterable[Resource] | None,
        availability: AvailabilityLedger | Iterable[LedgerEntry] | None,
    ) -> list[Workload]:
        self.state = SchedulerState.VALIDATING
        if workloads is None:
            raise InvalidInputError("workloads", "a workload collection is required")
        if resources is None:
            raise InvalidInputError("resources", "a resource collection is required")
        if availability is None:
            raise InvalidInputError(
                "availability", "an availability collection is required"
            )

        workload_list = list(workloads)
        self._resources = list(resources)

        errors = validate_workloads(workload_list)
        if errors:
            raise InvalidInputError("workloads", errors)
        errors = validate_resources(self._resources)
        if errors:
            raise InvalidInputError("resources", errors)

        if isinstance(availability, AvailabilityLedger):
            self.ledger = availability
        else:
            self.ledger = AvailabilityLedger(availability)
        return workload_list

    def earliest_start(self, workload: Workload) -> date:
        """Expected start pushed to the latest end of the recorded dependencies.

        Dependency pushes are day-granular: a dependent may start on the
        period its last dependency ends.
        """
        earliest = workload.expected_start
        for dep_id in workload.dependencies:
            dep_result = self._recorded.get(dep_id)
            if dep_result is None:
                if self.options.strict_dependency_mode:
                    raise AllocationInvariantViolation(
                        f"Workload {workload.workload_id} depends on {dep_id} "
                        f"which is not scheduled yet",
                        workload.workload_id,
                    )
                logger.warning(
                    "Workload %s: dependency %s has no schedule; ignored for "
                    "earliest start",
                    workload.workload_id, dep_id,
                )
                continue
            if dep_result.end > earliest:
                earliest = dep_result.end
        return earliest

    def _place(self, workload: Workload) -> ScheduleResult:
        ledger: AvailabilityLedger = self.ledger  # type: ignore[assignment]
        earliest = self.earliest_start(workload)
        candidates = order_resources(
            self._resources, ledger, self.options.resource_order
        )
        policy = self.options.fit_policy
        mode = self.options.slot_search
        last_failure: InfeasibleError | None = None
        feasible: list[Candidate] = []

        for rank, resource in enumerate(candidates):
            try:
                block = walk(ledger, workload, resource, earliest, mode)
            except InfeasibleError as e:
                last_failure = e
                continue
            if policy is FitPolicy.FIRST_FEASIBLE:
                return commit_block(ledger, workload, resource, block)
            feasible.append(Candidate(rank, resource, block))

        chosen = choose_candidate(policy, feasible, workload)
        if chosen is not None:
            return commit_block(ledger, workload, chosen.resource, chosen.block)

        raise ResourceUnschedulableError(
            workload.workload_id, workload.group_id, earliest, last_failure
        )


def schedule_all(
    workloads: Iterable[Workload] | None,
    resources: Iterable[Resource] | None,
    availability: AvailabilityLedger | Iterable[LedgerEntry] | None,
    options: SchedulingOptions | None = None,
) -> list[ScheduleResult]:
    """Batch entry point: schedule all workloads or raise a SchedulingError.

    The availability entries are mutated in place by the run.
    """
    return Scheduler(options).run(workloads, resources, availability)
