"""
Progress & Status Engine
========================

Pure functions that turn child snapshots into derived indicators:

- average_progress: tasks -> phase progress (simple mean)
- weighted_progress: phases -> project progress (weighted mean)
- classify_status: phase/task health from dates + progress
- classify_project_status: project health (no not_started state)

Nothing here touches the database, the clock or the logger. Callers load
the rows, pass them in, and persist whatever comes back.

Usage:
    from app.services.progress import weighted_progress, classify_project_status

    progress = weighted_progress(project.phases)
    status = classify_project_status(project.start_date, project.end_date, progress, now)
"""

import enum
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence


# Policy constants: at_risk when more than 80% of the window has elapsed
# but less than 80% of the work is done.
AT_RISK_TIME_RATIO = 0.8
AT_RISK_PROGRESS = 80
COMPLETE_PROGRESS = 100


class HealthStatus(str, enum.Enum):
    """Derived health of a timed entity"""
    NOT_STARTED = "not_started"
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    DELAYED = "delayed"


@dataclass(frozen=True)
class ProgressRecord:
    progress: int


@dataclass(frozen=True)
class WeightedProgressRecord:
    progress: int
    weight: float


@dataclass(frozen=True)
class ProgressStats:
    total_phases: int
    completed_phases: int
    in_progress_phases: int
    not_started_phases: int
    overall_progress: int


@dataclass(frozen=True)
class TaskStats:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    review_tasks: int
    backlog_tasks: int


def _field(item: Any, name: str) -> Any:
    # ORM rows and dataclasses expose attributes, plain payloads are dicts
    if isinstance(item, Mapping):
        return item[name]
    return getattr(item, name)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 always going up (80.5 -> 81)."""
    return int(math.floor(value + 0.5))


def average_progress(items: Iterable[Any]) -> int:
    """Mean progress of a set of work items. Empty set -> 0."""
    values = [_field(item, "progress") for item in items]
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def weighted_progress(items: Iterable[Any]) -> int:
    """
    Weighted mean progress: round(sum(progress * weight) / sum(weight)).

    Returns 0 for an empty set or when every weight is zero. Only the final
    quotient is rounded.
    """
    total_weight = 0.0
    weighted_sum = 0.0
    for item in items:
        weight = _field(item, "weight")
        total_weight += weight
        weighted_sum += _field(item, "progress") * weight

    if total_weight == 0:
        return 0
    return round_half_up(weighted_sum / total_weight)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _time_ratio(start: datetime, due: datetime, now: datetime) -> float:
    elapsed = (now - start).total_seconds()
    window = (due - start).total_seconds()
    if window == 0:
        # Zero-length window: anything elapsed is "infinitely late",
        # nothing elapsed compares false against every threshold.
        if elapsed == 0:
            return math.nan
        return math.copysign(math.inf, elapsed)
    return elapsed / window


def _is_at_risk(start: datetime, due: datetime, progress: int, now: datetime) -> bool:
    return _time_ratio(start, due, now) > AT_RISK_TIME_RATIO and progress < AT_RISK_PROGRESS


def classify_status(
    start_date: Optional[datetime],
    due_date: Optional[datetime],
    progress: int,
    now: datetime,
) -> HealthStatus:
    """
    Classify a phase or task. First matching rule wins:

    1. no start date                              -> not_started
    2. past due date and progress < 100           -> delayed
    3. now before start date                      -> not_started
    4. has due date, >80% elapsed, progress < 80  -> at_risk
    5. otherwise                                  -> on_track

    Entities without a due date are never at_risk or delayed. Inconsistent
    dates (due before start) are not corrected.
    """
    if start_date is None:
        return HealthStatus.NOT_STARTED

    now = _as_naive_utc(now)
    start = _as_naive_utc(start_date)
    due = _as_naive_utc(due_date) if due_date is not None else None

    if due is not None and now > due and progress < COMPLETE_PROGRESS:
        return HealthStatus.DELAYED

    if now < start:
        return HealthStatus.NOT_STARTED

    if due is not None and _is_at_risk(start, due, progress, now):
        return HealthStatus.AT_RISK

    return HealthStatus.ON_TRACK


def classify_project_status(
    start_date: datetime,
    end_date: Optional[datetime],
    progress: int,
    now: datetime,
) -> HealthStatus:
    """Project variant of classify_status: a project is always considered started."""
    now = _as_naive_utc(now)
    start = _as_naive_utc(start_date)
    end = _as_naive_utc(end_date) if end_date is not None else None

    if end is not None and now > end and progress < COMPLETE_PROGRESS:
        return HealthStatus.DELAYED

    if end is not None and _is_at_risk(start, end, progress, now):
        return HealthStatus.AT_RISK

    return HealthStatus.ON_TRACK


def progress_stats(phases: Sequence[Any]) -> ProgressStats:
    """Phase completion counts plus overall weighted progress for dashboards"""
    values = [_field(phase, "progress") for phase in phases]
    return ProgressStats(
        total_phases=len(values),
        completed_phases=sum(1 for p in values if p == COMPLETE_PROGRESS),
        in_progress_phases=sum(1 for p in values if 0 < p < COMPLETE_PROGRESS),
        not_started_phases=sum(1 for p in values if p == 0),
        overall_progress=weighted_progress(phases),
    )


def task_stats(tasks: Sequence[Any]) -> TaskStats:
    """Task counts per kanban column"""
    statuses = [_status_value(_field(task, "status")) for task in tasks]
    return TaskStats(
        total_tasks=len(statuses),
        completed_tasks=statuses.count("done"),
        in_progress_tasks=statuses.count("in_progress"),
        review_tasks=statuses.count("review"),
        backlog_tasks=statuses.count("backlog"),
    )


def _status_value(status: Any) -> str:
    # Accept both TaskStatus members and raw strings
    return status.value if isinstance(status, enum.Enum) else str(status)


__all__ = [
    "AT_RISK_TIME_RATIO",
    "AT_RISK_PROGRESS",
    "HealthStatus",
    "ProgressRecord",
    "WeightedProgressRecord",
    "ProgressStats",
    "TaskStats",
    "round_half_up",
    "average_progress",
    "weighted_progress",
    "classify_status",
    "classify_project_status",
    "progress_stats",
    "task_stats",
]
