"""Input validation for workloads, resources and scenario documents."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from capacity_scheduling.types import Resource, Workload


def validate_workloads(workloads: Iterable[Workload]) -> list[str]:
    """Validate workloads. Returns list of error messages (empty = valid).

    Checks:
    - Workload ids are unique
    - Duration is positive
    - Area and weight are non-negative
    - expected_start is a date (not a datetime)
    """
    errors: list[str] = []
    seen: set[int] = set()

    for w in workloads:
        label = f"Workload {w.workload_id}"
        if w.workload_id in seen:
            errors.append(f"{label}: duplicate id")
        seen.add(w.workload_id)

        if w.duration_minutes <= 0:
            errors.append(
                f"{label}: duration_minutes must be positive, "
                f"got {w.duration_minutes}"
            )
        if w.area_required < 0:
            errors.append(
                f"{label}: area_required must be non-negative, "
                f"got {w.area_required}"
            )
        if w.effective_weight < 0:
            errors.append(
                f"{label}: effective_weight must be non-negative, "
                f"got {w.effective_weight}"
            )
        if isinstance(w.expected_start, datetime) or not isinstance(
            w.expected_start, date
        ):
            errors.append(
                f"{label}: expected_start must be a date, "
                f"got {w.expected_start!r}"
            )

    return errors


def validate_resources(resources: Iterable[Resource]) -> list[str]:
    """Validate resources. Returns list of error messages (empty = valid)."""
    errors: list[str] = []
    seen: set[int] = set()

    for r in resources:
        label = f"Resource {r.resource_id}"
        if r.resource_id in seen:
            errors.append(f"{label}: duplicate id")
        seen.add(r.resource_id)

        for name in ("max_area", "max_lift_weight", "minutes_per_period"):
            value = getattr(r, name)
            if value < 0:
                errors.append(f"{label}: {name} must be non-negative, got {value}")

    return errors


_WORKLOAD_KEYS = (
    "id", "group_id", "duration_minutes", "area_required", "effective_weight",
    "expected_start",
)
_RESOURCE_KEYS = ("id", "max_area", "max_lift_weight", "minutes_per_period")
_ENTRY_KEYS = ("id", "resource_id", "date", "total_area", "total_minutes")
_ENTRY_OPTIONAL_KEYS = ("remaining_area", "remaining_minutes")


def _check_date(value: Any, where: str, errors: list[str]) -> None:
    try:
        date.fromisoformat(value)
    except (ValueError, TypeError):
        errors.append(f"{where}: invalid date {value!r}")


def _check_records(
    records: Any,
    section: str,
    required: tuple[str, ...],
    errors: list[str],
    dates: tuple[str, ...] = (),
) -> list[tuple[int, dict]]:
    if not isinstance(records, list):
        errors.append(f"'{section}' must be a list")
        return []
    valid: list[tuple[int, dict]] = []
    for i, rec in enumerate(records):
        if not isinstance(rec, dict):
            errors.append(f"{section}[{i}]: expected an object, got {rec!r}")
            continue
        missing = [k for k in required if k not in rec]
        if missing:
            errors.append(f"{section}[{i}]: missing {', '.join(missing)}")
            continue
        for k in required:
            if k in dates:
                _check_date(rec[k], f"{section}[{i}]", errors)
            elif not isinstance(rec[k], int) or isinstance(rec[k], bool):
                errors.append(f"{section}[{i}]: '{k}' must be an integer")
        valid.append((i, rec))
    return valid


def validate_scenario(data: dict) -> list[str]:
    """Validate a scenario document. Returns list of error messages.

    Checks:
    - 'workloads' and 'resources' are lists of objects with integer fields
    - Exactly one of 'availability' or 'horizon' is given
    - Date strings parse as ISO dates
    - 'dependencies' is a list of integers
    - Optional 'remaining_area' / 'remaining_minutes' are integers or null

    Option values are checked by SchedulingOptions itself.
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        return [f"scenario must be an object, got {type(data).__name__}"]

    for section in ("workloads", "resources"):
        if section not in data:
            errors.append(f"missing '{section}'")

    for i, rec in _check_records(
        data.get("workloads", []), "workloads", _WORKLOAD_KEYS, errors,
        dates=("expected_start",),
    ):
        deps = rec.get("dependencies", [])
        if not isinstance(deps, list) or not all(
            isinstance(d, int) and not isinstance(d, bool) for d in deps
        ):
            errors.append(
                f"workloads[{i}]: 'dependencies' must be a list of integers"
            )
        if "is_exclusive" in rec and not isinstance(rec["is_exclusive"], bool):
            errors.append(f"workloads[{i}]: 'is_exclusive' must be boolean")

    _check_records(data.get("resources", []), "resources",
                   _RESOURCE_KEYS, errors)

    has_availability = "availability" in data
    has_horizon = "horizon" in data
    if has_availability == has_horizon:
        errors.append("exactly one of 'availability' or 'horizon' is required")
    elif has_availability:
        for i, rec in _check_records(data["availability"], "availability",
                                     _ENTRY_KEYS, errors, dates=("date",)):
            for key in _ENTRY_OPTIONAL_KEYS:
                value = rec.get(key)
                if value is not None and (
                    not isinstance(value, int) or isinstance(value, bool)
                ):
                    errors.append(
                        f"availability[{i}]: '{key}' must be an integer or null"
                    )
    else:
        horizon = data["horizon"]
        if not isinstance(horizon, dict):
            errors.append("'horizon' must be an object")
        else:
            for key in ("start", "end"):
                if key not in horizon:
                    errors.append(f"horizon: missing '{key}'")
                else:
                    _check_date(horizon[key], "horizon", errors)
            weekdays = horizon.get("weekdays")
            if weekdays is not None and (
                not isinstance(weekdays, list)
                or any(not isinstance(d, int) or d < 0 or d > 6 for d in weekdays)
            ):
                errors.append("horizon: 'weekdays' must be integers 0-6")

    if "options" in data and not isinstance(data["options"], dict):
        errors.append("'options' must be an object")

    return errors
