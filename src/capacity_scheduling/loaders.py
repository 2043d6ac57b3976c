"""Data loading utilities for scheduling scenarios."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from capacity_scheduling.errors import InvalidInputError
from capacity_scheduling.ledger import AvailabilityLedger, LedgerEntry
from capacity_scheduling.options import SchedulingOptions
from capacity_scheduling.schema import validate_scenario
from capacity_scheduling.types import Resource, Workload


@dataclass
class Scenario:
    """Inputs of one scheduling run, as read from a scenario document."""

    workloads: list[Workload]
    resources: list[Resource]
    ledger: AvailabilityLedger
    options: SchedulingOptions = field(default_factory=SchedulingOptions)


def scenario_from_dict(data: dict, name: str = "scenario") -> Scenario:
    """Build a Scenario from a parsed scenario document.

    The document has the format:
    {
        "options": { "prefer_least_loaded_resource": true, ... },
        "resources": [ {"id": 1, "max_area": 650, "max_lift_weight": 50,
                        "minutes_per_period": 720}, ... ],
        "availability": [ {"id": 1, "resource_id": 1, "date": "2025-01-06",
                           "total_area": 650, "total_minutes": 720}, ... ],
        "workloads": [ {"id": 1, "group_id": 1, "duration_minutes": 480,
                        "area_required": 300, "effective_weight": 10,
                        "is_exclusive": false,
                        "expected_start": "2025-01-06",
                        "dependencies": []}, ... ]
    }

    "availability" may be replaced by a "horizon" object
    ({"start": ..., "end": ..., "weekdays": [0, 1, 2, 3, 4]}) to materialise
    one entry per resource per working day.

    Raises InvalidInputError if validation fails.
    """
    errors = validate_scenario(data)
    if errors:
        raise InvalidInputError(name, errors)

    workloads = [
        Workload(
            workload_id=rec["id"],
            group_id=rec["group_id"],
            duration_minutes=rec["duration_minutes"],
            area_required=rec["area_required"],
            effective_weight=rec["effective_weight"],
            is_exclusive=rec.get("is_exclusive", False),
            expected_start=date.fromisoformat(rec["expected_start"]),
            dependencies=tuple(rec.get("dependencies", ())),
        )
        for rec in data["workloads"]
    ]

    resources = [
        Resource(
            resource_id=rec["id"],
            max_area=rec["max_area"],
            max_lift_weight=rec["max_lift_weight"],
            minutes_per_period=rec["minutes_per_period"],
        )
        for rec in data["resources"]
    ]

    if "availability" in data:
        ledger = AvailabilityLedger(
            LedgerEntry(
                entry_id=rec["id"],
                resource_id=rec["resource_id"],
                period=date.fromisoformat(rec["date"]),
                total_area=rec["total_area"],
                total_minutes=rec["total_minutes"],
                remaining_area=rec.get("remaining_area"),
                remaining_minutes=rec.get("remaining_minutes"),
            )
            for rec in data["availability"]
        )
    else:
        horizon = data["horizon"]
        ledger = AvailabilityLedger.from_resources(
            resources,
            date.fromisoformat(horizon["start"]),
            date.fromisoformat(horizon["end"]),
            horizon.get("weekdays"),
        )

    options = SchedulingOptions.from_mapping(data.get("options"))
    return Scenario(workloads, resources, ledger, options)


def load_scenario_json(path: str | Path) -> Scenario:
    """Load a Scenario from a JSON file.

    Raises InvalidInputError if validation fails.
    """
    path = Path(path)
    with open(path) as f:
        data = json.load(f)
    return scenario_from_dict(data, name=path.name)
