"""DependencyGraphOrderer: grouping and per-group topological order.

Workloads live in a flat arena addressed by index; dependency edges are id
pairs resolved through an id -> index map. Kahn's algorithm runs per group
over intra-group edges only. Among equally ready workloads the lowest
workload id goes first, so the order does not depend on input order.
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Iterable

from capacity_scheduling.errors import (
    CycleDetectedError,
    DependencyNotFoundError,
    DependencyOrderError,
    InvalidInputError,
)
from capacity_scheduling.types import Workload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkloadGroup:
    """One group's workloads in scheduling order."""

    group_id: int
    workloads: tuple[Workload, ...]

    @property
    def workload_ids(self) -> tuple[int, ...]:
        return tuple(w.workload_id for w in self.workloads)


def arrange_workloads(
    workloads: Iterable[Workload],
    strict: bool = True,
) -> list[WorkloadGroup]:
    """Group workloads by ascending group id, each group topologically sorted.

    strict=True: missing references, later-group dependencies and cycles
    raise. strict=False: they are logged as warnings; missing and later-group
    references are left out of the ordering, and each cycle is broken by
    releasing its lowest-id member first.

    Raises:
        InvalidInputError: workloads is None or holds duplicate ids.
        DependencyNotFoundError: a dependency id is absent globally.
        DependencyOrderError: a dependency lives in a later group.
        CycleDetectedError: a group cannot be fully ordered.
    """
    if workloads is None:
        raise InvalidInputError("workloads", "a workload collection is required")

    arena = list(workloads)
    index: dict[int, int] = {}
    duplicates: list[str] = []
    for i, w in enumerate(arena):
        if w.workload_id in index:
            duplicates.append(f"duplicate workload id {w.workload_id}")
        index[w.workload_id] = i
    if duplicates:
        raise InvalidInputError("workloads", duplicates)

    _check_references(arena, index, strict)

    members: dict[int, list[int]] = {}
    for i, w in enumerate(arena):
        members.setdefault(w.group_id, []).append(i)

    return [
        WorkloadGroup(
            group_id=group_id,
            workloads=tuple(
                arena[i]
                for i in _topological_order(
                    group_id, members[group_id], arena, index, strict
                )
            ),
        )
        for group_id in sorted(members)
    ]


def _check_references(
    arena: list[Workload], index: dict[int, int], strict: bool
) -> None:
    for w in arena:
        for dep_id in w.dependencies:
            if dep_id not in index:
                if strict:
                    raise DependencyNotFoundError(w.workload_id, dep_id)
                logger.warning(
                    "Workload %s depends on missing workload id %s; ignored",
                    w.workload_id, dep_id,
                )
                continue
            dep_group = arena[index[dep_id]].group_id
            if dep_group > w.group_id:
                if strict:
                    raise DependencyOrderError(
                        w.workload_id, dep_id, w.group_id, dep_group
                    )
                logger.warning(
                    "Workload %s (group %s) depends on %s in later group %s; "
                    "ignored",
                    w.workload_id, w.group_id, dep_id, dep_group,
                )


def _topological_order(
    group_id: int,
    group: list[int],
    arena: list[Workload],
    index: dict[int, int],
    strict: bool,
) -> list[int]:
    """Kahn's algorithm over one group's arena indices.

    In lenient mode a stall releases the lowest-id workload that sits on a
    cycle, dropping its unresolved in-edges, and the sort carries on. Its
    dependents, cycle members or not, still come after it.
    """
    in_group = set(group)
    in_degree = {i: 0 for i in group}
    adjacency: dict[int, list[int]] = {i: [] for i in group}

    # Edge dependency -> dependent, intra-group only
    for i in group:
        for dep_id in arena[i].dependencies:
            dep = index.get(dep_id)
            if dep is None or dep not in in_group:
                continue
            adjacency[dep].append(i)
            in_degree[i] += 1

    ready = [(arena[i].workload_id, i) for i in group if in_degree[i] == 0]
    heapq.heapify(ready)
    ordered: list[int] = []

    while len(ordered) < len(group):
        if not ready:
            blocked = sorted(
                (arena[i].workload_id, i) for i in group if in_degree[i] > 0
            )
            if strict:
                raise CycleDetectedError(group_id, [wid for wid, _ in blocked])
            wid, i = next(
                (wid, i) for wid, i in blocked
                if _on_cycle(i, adjacency, in_degree)
            )
            logger.warning(
                "Cycle detected in group %s; releasing workload %s ahead of "
                "%d unscheduled dependencies",
                group_id, wid, in_degree[i],
            )
            in_degree[i] = 0
            heapq.heappush(ready, (wid, i))

        _, i = heapq.heappop(ready)
        ordered.append(i)
        for succ in adjacency[i]:
            # Zero means already ready, placed or released
            if in_degree[succ] == 0:
                continue
            in_degree[succ] -= 1
            if in_degree[succ] == 0:
                heapq.heappush(ready, (arena[succ].workload_id, succ))

    return ordered


def _on_cycle(
    start: int, adjacency: dict[int, list[int]], in_degree: dict[int, int]
) -> bool:
    """Whether start can reach itself through still-blocked workloads."""
    stack = [start]
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        for succ in adjacency[node]:
            if succ == start:
                return True
            if in_degree[succ] > 0 and succ not in seen:
                seen.add(succ)
                stack.append(succ)
    return False
