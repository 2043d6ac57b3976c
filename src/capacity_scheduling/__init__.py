"""capacity-scheduling: Dependency-aware greedy allocation of workloads onto capacity ledgers."""

from capacity_scheduling.allocation import commit_block
from capacity_scheduling.errors import (
    AllocationInvariantViolation,
    CycleDetectedError,
    DependencyNotFoundError,
    DependencyOrderError,
    InfeasibleError,
    InvalidInputError,
    ResourceUnschedulableError,
    RunStage,
    SchedulingError,
)
from capacity_scheduling.ledger import AvailabilityLedger, BookingStatus, LedgerEntry
from capacity_scheduling.loaders import Scenario, load_scenario_json, scenario_from_dict
from capacity_scheduling.options import SchedulingOptions
from capacity_scheduling.ordering import WorkloadGroup, arrange_workloads
from capacity_scheduling.scheduler import Scheduler, SchedulerState, schedule_all
from capacity_scheduling.search import SlotSearch, find_block, walk
from capacity_scheduling.selection import FitPolicy, ResourceOrder, order_resources
from capacity_scheduling.types import Booking, Resource, ScheduleResult, Workload

__all__ = [
    "AllocationInvariantViolation",
    "AvailabilityLedger",
    "Booking",
    "BookingStatus",
    "CycleDetectedError",
    "DependencyNotFoundError",
    "DependencyOrderError",
    "FitPolicy",
    "InfeasibleError",
    "InvalidInputError",
    "LedgerEntry",
    "Resource",
    "ResourceOrder",
    "ResourceUnschedulableError",
    "RunStage",
    "Scenario",
    "ScheduleResult",
    "Scheduler",
    "SchedulerState",
    "SchedulingError",
    "SchedulingOptions",
    "SlotSearch",
    "Workload",
    "WorkloadGroup",
    "arrange_workloads",
    "commit_block",
    "find_block",
    "load_scenario_json",
    "order_resources",
    "scenario_from_dict",
    "schedule_all",
    "walk",
]
