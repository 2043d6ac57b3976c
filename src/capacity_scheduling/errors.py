"""Error taxonomy for a scheduling run.

Every error raised by the scheduler derives from SchedulingError and carries
the run stage that produced it, so callers can report failures without
parsing messages.
"""

from __future__ import annotations

from datetime import date
from enum import Enum


class RunStage(str, Enum):
    """Stage of a scheduling run that raised an error."""

    VALIDATION = "validation"
    ORDERING = "ordering"
    ALLOCATION = "allocation"


class SchedulingError(Exception):
    """Base class for all scheduling failures."""

    stage: RunStage = RunStage.ALLOCATION

    def __init__(
        self,
        message: str,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, object]:
        """Plain representation for reports and logs."""
        return {
            "stage": self.stage.value,
            "error": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }


class InvalidInputError(SchedulingError, ValueError):
    """Raised when run inputs are missing or malformed."""

    stage = RunStage.VALIDATION

    def __init__(self, field_name: str, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.field_name = field_name
        self.problems = list(problems)
        super().__init__(
            f"Invalid {field_name}: " + "; ".join(self.problems),
            {"field": field_name, "problems": list(self.problems)},
        )


class DependencyNotFoundError(SchedulingError):
    """A workload references a dependency id that exists nowhere."""

    stage = RunStage.ORDERING

    def __init__(self, workload_id: int, dependency_id: int) -> None:
        self.workload_id = workload_id
        self.dependency_id = dependency_id
        super().__init__(
            f"Workload {workload_id} depends on missing workload id "
            f"{dependency_id}",
            {"workload_id": workload_id, "dependency_id": dependency_id},
        )


class CycleDetectedError(SchedulingError):
    """A group's dependency subgraph cannot be fully ordered."""

    stage = RunStage.ORDERING

    def __init__(self, group_id: int, workload_ids: list[int]) -> None:
        self.group_id = group_id
        self.workload_ids = sorted(workload_ids)
        ids = ", ".join(str(w) for w in self.workload_ids)
        super().__init__(
            f"Cycle detected in group {group_id}. "
            f"Involved workload ids: {ids}",
            {"group_id": group_id, "workload_ids": list(self.workload_ids)},
        )


class DependencyOrderError(SchedulingError):
    """A cross-group dependency lives in a group scheduled after its dependent."""

    stage = RunStage.ORDERING

    def __init__(
        self,
        workload_id: int,
        dependency_id: int,
        workload_group: int,
        dependency_group: int,
    ) -> None:
        self.workload_id = workload_id
        self.dependency_id = dependency_id
        self.workload_group = workload_group
        self.dependency_group = dependency_group
        super().__init__(
            f"Workload {workload_id} (group {workload_group}) depends on "
            f"{dependency_id} (group {dependency_group}), which is scheduled "
            f"later",
            {
                "workload_id": workload_id,
                "dependency_id": dependency_id,
                "workload_group": workload_group,
                "dependency_group": dependency_group,
            },
        )


class InfeasibleError(SchedulingError):
    """Raised when a workload cannot be placed on one particular resource."""

    stage = RunStage.ALLOCATION

    def __init__(
        self,
        workload_id: int,
        resource_id: int,
        minutes_remaining: int,
        minutes_requested: int,
        reason: str,
    ) -> None:
        self.workload_id = workload_id
        self.resource_id = resource_id
        self.minutes_remaining = minutes_remaining
        self.minutes_requested = minutes_requested
        self.reason = reason
        super().__init__(
            f"Infeasible: workload {workload_id} on resource {resource_id}: "
            f"{minutes_remaining}/{minutes_requested} minutes uncovered "
            f"(reason: {reason})",
            {
                "workload_id": workload_id,
                "resource_id": resource_id,
                "minutes_remaining": minutes_remaining,
                "minutes_requested": minutes_requested,
                "reason": reason,
            },
        )


class ResourceUnschedulableError(SchedulingError):
    """No candidate resource can host a workload; the whole run fails."""

    stage = RunStage.ALLOCATION

    def __init__(
        self,
        workload_id: int,
        group_id: int,
        earliest: date,
        last_failure: InfeasibleError | None = None,
    ) -> None:
        self.workload_id = workload_id
        self.group_id = group_id
        self.earliest = earliest
        self.last_failure = last_failure
        message = (
            f"Unable to schedule workload {workload_id} (group {group_id}) "
            f"starting on/after {earliest.isoformat()}."
        )
        if last_failure is not None:
            message += f" Last error: {last_failure.message}"
        super().__init__(
            message,
            {
                "workload_id": workload_id,
                "group_id": group_id,
                "earliest": earliest.isoformat(),
                "last_reason": (
                    last_failure.reason if last_failure is not None else None
                ),
            },
        )


class AllocationInvariantViolation(SchedulingError):
    """Commit-time consistency check failed after search confirmed a block."""

    stage = RunStage.ALLOCATION

    def __init__(self, message: str, workload_id: int | None = None) -> None:
        self.workload_id = workload_id
        super().__init__(message, {"workload_id": workload_id})
