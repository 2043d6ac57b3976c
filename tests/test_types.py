"""Tests for Workload, Resource, Booking and ScheduleResult."""

from __future__ import annotations

import pytest

from capacity_scheduling.types import Booking, ScheduleResult
from conftest import day_date, make_resource, make_workload


class TestWorkload:
    def test_dependencies_deduplicated_in_order(self):
        w = make_workload(1, deps=[3, 2, 3, 1, 2])
        assert w.dependencies == (3, 2, 1)

    def test_dependencies_from_any_iterable(self):
        w = make_workload(1, deps={4})
        assert w.dependencies == (4,)

    def test_frozen(self):
        w = make_workload(1)
        with pytest.raises(AttributeError):
            w.duration_minutes = 10

    def test_hashable(self):
        assert len({make_workload(1), make_workload(1)}) == 1


class TestResource:
    @pytest.mark.parametrize(
        "weight, expected", [(49, True), (50, True), (51, False)]
    )
    def test_can_lift(self, weight, expected):
        assert make_resource(1, lift=50).can_lift(make_workload(1, weight=weight)) \
            is expected


class TestScheduleResult:
    def _result(self):
        return ScheduleResult(
            workload_id=1,
            start=day_date("mon"),
            end=day_date("wed"),
            bookings=(
                Booking(1, day_date("mon"), 2, 100, 720),
                Booking(3, day_date("wed"), 2, 100, 80),
            ),
        )

    def test_resource_id(self):
        assert self._result().resource_id == 2

    def test_booked_minutes(self):
        assert self._result().booked_minutes == 800

    def test_span_days_counts_calendar_days(self):
        assert self._result().span_days == 3

    def test_frozen(self):
        with pytest.raises(AttributeError):
            self._result().end = day_date("fri")
