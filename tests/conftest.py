"""Shared test fixtures and data loading for capacity-scheduling.

All test data lives in data/fixtures/ as JSON files.  This module loads
that data and exposes helper functions + pytest fixtures for the tests.

Reference week: Mon 2025-01-06 through Sun 2025-01-12.
"""

from __future__ import annotations

import json
from datetime import date, timedelta
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
FIXTURES_DIR = Path(__file__).resolve().parent.parent / "data" / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"


# ---------------------------------------------------------------------------
# Data loaders
# ---------------------------------------------------------------------------
def _load_json(path: Path):
    with open(path) as f:
        return json.load(f)


_reference = _load_json(FIXTURES_DIR / "reference.json")


# ---------------------------------------------------------------------------
# Reference constants derived from reference.json
# ---------------------------------------------------------------------------
EPOCH = date.fromisoformat(_reference["epoch"])

# Day lookup:  DAYS["mon"] → {"date": date(...), "weekday": 0}
DAYS: dict[str, dict] = {}
for _d in _reference["days"]:
    DAYS[_d["name"]] = {
        "date": date.fromisoformat(_d["date"]),
        "weekday": _d["weekday"],
    }


# ---------------------------------------------------------------------------
# Convenience helpers (importable by test modules)
# ---------------------------------------------------------------------------
def day_date(day: str) -> date:
    """Date object for a named day."""
    return DAYS[day]["date"]


def nth_day(n: int) -> date:
    """EPOCH + n days."""
    return EPOCH + timedelta(days=n)


def make_workload(workload_id: int, group_id: int = 1, *,
                  duration: int = 60, area: int = 100, weight: int = 10,
                  exclusive: bool = False, start: str | date = "mon",
                  deps=()):
    """Workload with test-friendly defaults.  start may be a day name."""
    from capacity_scheduling.types import Workload

    expected = day_date(start) if isinstance(start, str) else start
    return Workload(
        workload_id=workload_id,
        group_id=group_id,
        duration_minutes=duration,
        area_required=area,
        effective_weight=weight,
        is_exclusive=exclusive,
        expected_start=expected,
        dependencies=tuple(deps),
    )


def make_resource(resource_id: int, *, area: int = 500, lift: int = 50,
                  minutes: int = 720):
    from capacity_scheduling.types import Resource

    return Resource(resource_id, area, lift, minutes)


def make_entry(entry_id: int, resource_id: int, day: str | date, *,
               area: int = 500, minutes: int = 720,
               remaining_area: int | None = None,
               remaining_minutes: int | None = None):
    from capacity_scheduling.ledger import LedgerEntry

    period = day_date(day) if isinstance(day, str) else day
    return LedgerEntry(
        entry_id=entry_id,
        resource_id=resource_id,
        period=period,
        total_area=area,
        total_minutes=minutes,
        remaining_area=remaining_area,
        remaining_minutes=remaining_minutes,
    )


def make_ledger(resource_ids=(1,), days=("mon", "tue", "wed", "thu", "fri"),
                *, area: int = 500, minutes: int = 720):
    """Fresh ledger with one entry per resource per named day.

    Entry ids are sequential in (resource, day) order starting at 1.
    """
    from capacity_scheduling.ledger import AvailabilityLedger

    entries = []
    next_id = 1
    for rid in resource_ids:
        for day in days:
            entries.append(make_entry(next_id, rid, day,
                                      area=area, minutes=minutes))
            next_id += 1
    return AvailabilityLedger(entries)


# ---------------------------------------------------------------------------
# Scenario loader
# ---------------------------------------------------------------------------
def load_scenarios(name: str):
    """Load a scenario file from data/fixtures/scenarios/{name}.json."""
    return _load_json(SCENARIOS_DIR / f"{name}.json")


def build_scenario(spec: dict):
    """Scenario object from the "scenario" block of a fixture case."""
    from capacity_scheduling.loaders import scenario_from_dict

    return scenario_from_dict(spec["scenario"], name=spec.get("id", "scenario"))


def booking_rows(result) -> list[list]:
    """ScheduleResult bookings as fixture rows [entry, date, resource, area, minutes]."""
    return [
        [b.entry_id, b.period.isoformat(), b.resource_id, b.booked_area,
         b.booked_minutes]
        for b in result.bookings
    ]


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def epoch() -> date:
    return EPOCH


@pytest.fixture
def week_ledger():
    """Single resource 1, Mon-Fri, 500 area and 720 minutes per day."""
    return make_ledger()


@pytest.fixture
def two_resource_ledger():
    """Resources 1 and 2, Mon-Fri.  Entries 1-5 on resource 1, 6-10 on 2."""
    return make_ledger(resource_ids=(1, 2))


@pytest.fixture
def resource():
    return make_resource(1)
