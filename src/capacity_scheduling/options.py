"""SchedulingOptions: the immutable configuration of a scheduling run."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from capacity_scheduling.errors import InvalidInputError
from capacity_scheduling.search import SlotSearch
from capacity_scheduling.selection import FitPolicy, ResourceOrder

# Option names as they appear in legacy scenario files
_ALIASES = {
    "EnableParallelExecution": "enable_parallel_execution",
    "StrictDependencyMode": "strict_dependency_mode",
    "PreferLeastLoadedResource": "prefer_least_loaded_resource",
    "FitPolicy": "fit_policy",
    "SlotSearch": "slot_search",
}

_FLAGS = (
    "enable_parallel_execution",
    "strict_dependency_mode",
    "prefer_least_loaded_resource",
)


@dataclass(frozen=True)
class SchedulingOptions:
    """Run configuration. Immutable.

    enable_parallel_execution is reserved: a workload occupies exactly one
    resource at a time, so True is rejected here rather than ignored.
    """

    enable_parallel_execution: bool = False
    strict_dependency_mode: bool = True
    prefer_least_loaded_resource: bool = False
    fit_policy: FitPolicy = FitPolicy.FIRST_FEASIBLE
    slot_search: SlotSearch = SlotSearch.LENIENT

    def __post_init__(self) -> None:
        problems = [
            f"{name} must be a boolean, got {getattr(self, name)!r}"
            for name in _FLAGS
            if not isinstance(getattr(self, name), bool)
        ]
        if problems:
            raise InvalidInputError("options", problems)
        if self.enable_parallel_execution:
            raise InvalidInputError(
                "options",
                "enable_parallel_execution is not supported: a workload "
                "occupies a single resource and periods are committed "
                "sequentially",
            )
        try:
            object.__setattr__(self, "fit_policy", FitPolicy(self.fit_policy))
            object.__setattr__(self, "slot_search", SlotSearch(self.slot_search))
        except ValueError as e:
            raise InvalidInputError("options", str(e)) from e

    @property
    def resource_order(self) -> ResourceOrder:
        if self.prefer_least_loaded_resource:
            return ResourceOrder.LEAST_LOADED
        return ResourceOrder.BY_ID

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> SchedulingOptions:
        """Build options from a mapping of snake_case or legacy names.

        Unknown keys are rejected.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        unknown: list[str] = []
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                unknown.append(key)
                continue
            kwargs[name] = value
        if unknown:
            raise InvalidInputError(
                "options", [f"unknown option {k!r}" for k in sorted(unknown)]
            )
        return cls(**kwargs)
