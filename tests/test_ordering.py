"""Tests for arrange_workloads: grouping and per-group topological order."""

from __future__ import annotations

import pytest

from capacity_scheduling.errors import (
    CycleDetectedError,
    DependencyNotFoundError,
    DependencyOrderError,
    InvalidInputError,
    RunStage,
)
from capacity_scheduling.ordering import WorkloadGroup, arrange_workloads
from conftest import make_workload


def _ids(groups: list[WorkloadGroup]) -> list[tuple[int, tuple[int, ...]]]:
    return [(g.group_id, g.workload_ids) for g in groups]


class TestGrouping:
    def test_groups_ascending(self):
        workloads = [
            make_workload(1, group_id=3),
            make_workload(2, group_id=1),
            make_workload(3, group_id=2),
        ]
        assert _ids(arrange_workloads(workloads)) == [
            (1, (2,)), (2, (3,)), (3, (1,)),
        ]

    def test_empty(self):
        assert arrange_workloads([]) == []

    def test_none_rejected(self):
        with pytest.raises(InvalidInputError):
            arrange_workloads(None)

    def test_duplicate_ids(self):
        with pytest.raises(InvalidInputError, match="duplicate workload id 7"):
            arrange_workloads([make_workload(7), make_workload(7)])


class TestTopologicalOrder:
    def test_chain(self):
        workloads = [
            make_workload(3, deps=[2]),
            make_workload(2, deps=[1]),
            make_workload(1),
        ]
        assert _ids(arrange_workloads(workloads)) == [(1, (1, 2, 3))]

    def test_ties_broken_by_id(self):
        """Independent workloads come out in ascending id, not input order."""
        workloads = [make_workload(9), make_workload(4), make_workload(6)]
        assert arrange_workloads(workloads)[0].workload_ids == (4, 6, 9)

    def test_ready_set_reconsidered_after_each_pop(self):
        # 5 becomes ready once 1 is placed and beats 8
        workloads = [
            make_workload(1),
            make_workload(8),
            make_workload(5, deps=[1]),
        ]
        assert arrange_workloads(workloads)[0].workload_ids == (1, 5, 8)

    def test_diamond(self):
        workloads = [
            make_workload(4, deps=[2, 3]),
            make_workload(3, deps=[1]),
            make_workload(2, deps=[1]),
            make_workload(1),
        ]
        assert arrange_workloads(workloads)[0].workload_ids == (1, 2, 3, 4)

    def test_duplicate_dependency_counted_once(self):
        workloads = [make_workload(2, deps=[1, 1]), make_workload(1)]
        assert arrange_workloads(workloads)[0].workload_ids == (1, 2)

    def test_cross_group_edge_does_not_affect_intra_order(self):
        workloads = [
            make_workload(1, group_id=1),
            make_workload(3, group_id=2, deps=[1]),
            make_workload(2, group_id=2),
        ]
        assert _ids(arrange_workloads(workloads)) == [(1, (1,)), (2, (2, 3))]

    def test_input_order_irrelevant(self):
        workloads = [
            make_workload(1),
            make_workload(2, deps=[1]),
            make_workload(3),
            make_workload(4, deps=[3, 2]),
        ]
        forward = _ids(arrange_workloads(workloads))
        backward = _ids(arrange_workloads(list(reversed(workloads))))
        assert forward == backward


class TestStrictErrors:
    def test_missing_dependency(self):
        with pytest.raises(DependencyNotFoundError) as exc_info:
            arrange_workloads([make_workload(5, deps=[99])])
        assert exc_info.value.workload_id == 5
        assert exc_info.value.dependency_id == 99
        assert exc_info.value.stage is RunStage.ORDERING

    def test_self_dependency_is_a_cycle(self):
        with pytest.raises(CycleDetectedError) as exc_info:
            arrange_workloads([make_workload(1, deps=[1])])
        assert exc_info.value.workload_ids == [1]

    def test_cycle_reports_blocked_ids(self):
        workloads = [
            make_workload(1),
            make_workload(4, deps=[3]),
            make_workload(3, deps=[4]),
            make_workload(6, deps=[3]),
        ]
        with pytest.raises(CycleDetectedError) as exc_info:
            arrange_workloads(workloads)
        err = exc_info.value
        assert err.group_id == 1
        # 6 is blocked downstream of the cycle
        assert err.workload_ids == [3, 4, 6]
        assert "Involved workload ids: 3, 4, 6" in str(err)

    def test_later_group_dependency(self):
        workloads = [
            make_workload(1, group_id=1, deps=[2]),
            make_workload(2, group_id=2),
        ]
        with pytest.raises(DependencyOrderError) as exc_info:
            arrange_workloads(workloads)
        assert exc_info.value.workload_group == 1
        assert exc_info.value.dependency_group == 2


class TestLenient:
    def test_missing_dependency_warned(self, caplog):
        with caplog.at_level("WARNING", logger="capacity_scheduling.ordering"):
            groups = arrange_workloads([make_workload(5, deps=[99])], strict=False)
        assert groups[0].workload_ids == (5,)
        assert "missing workload id 99" in caplog.text

    def test_cycle_broken_at_lowest_member(self, caplog):
        workloads = [
            make_workload(9),
            make_workload(4, deps=[3]),
            make_workload(3, deps=[4]),
        ]
        with caplog.at_level("WARNING", logger="capacity_scheduling.ordering"):
            groups = arrange_workloads(workloads, strict=False)
        assert groups[0].workload_ids == (9, 3, 4)
        assert "Cycle detected in group 1; releasing workload 3" in caplog.text

    def test_dependents_of_cycle_stay_after_it(self, caplog):
        # 1 only waits on the cycle; it must not be released ahead of 4
        workloads = [
            make_workload(1, deps=[4]),
            make_workload(3, deps=[4]),
            make_workload(4, deps=[3]),
        ]
        with caplog.at_level("WARNING", logger="capacity_scheduling.ordering"):
            groups = arrange_workloads(workloads, strict=False)
        assert groups[0].workload_ids == (3, 4, 1)
        assert "releasing workload 3" in caplog.text
        assert "releasing workload 1" not in caplog.text

    def test_self_dependency_released(self):
        workloads = [make_workload(2, deps=[2]), make_workload(5, deps=[2])]
        groups = arrange_workloads(workloads, strict=False)
        assert groups[0].workload_ids == (2, 5)

    def test_two_cycles_released_one_at_a_time(self):
        workloads = [
            make_workload(1, deps=[2]),
            make_workload(2, deps=[1]),
            make_workload(5, deps=[6, 2]),
            make_workload(6, deps=[5]),
        ]
        groups = arrange_workloads(workloads, strict=False)
        assert groups[0].workload_ids == (1, 2, 5, 6)

    def test_later_group_dependency_warned(self, caplog):
        workloads = [
            make_workload(1, group_id=1, deps=[2]),
            make_workload(2, group_id=2),
        ]
        with caplog.at_level("WARNING", logger="capacity_scheduling.ordering"):
            groups = arrange_workloads(workloads, strict=False)
        assert _ids(groups) == [(1, (1,)), (2, (2,))]
        assert "later group" in caplog.text
