"""Visible date windows and bar placement for the timeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable

from planner.domain.entities import TaskEntity
from planner.domain.enums import ViewMode

DAY = timedelta(days=1)
WEEK = timedelta(days=7)


@dataclass(frozen=True)
class ViewWindow:
    """The period on screen and the buckets it is laid out in.

    ``start``/``end`` are the calendar bounds of the period. Month and year
    views are laid out in whole Monday-started weeks, so the first and last
    bucket may reach outside those bounds; ``grid_start``/``grid_end`` cover
    the buckets themselves.
    """

    start: date
    end: date
    subdivisions: tuple[date, ...]
    unit_days: int

    @property
    def grid_start(self) -> date:
        return self.subdivisions[0]

    @property
    def grid_end(self) -> date:
        return self.subdivisions[-1] + timedelta(days=self.unit_days - 1)

    @property
    def total_days(self) -> int:
        return len(self.subdivisions) * self.unit_days

    def __len__(self) -> int:
        return len(self.subdivisions)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class BarGeometry:
    offset_fraction: float
    width_fraction: float


def start_of_week(day: date) -> date:
    return day - timedelta(days=day.weekday())


def end_of_week(day: date) -> date:
    return start_of_week(day) + timedelta(days=6)


def window_for(reference: date, view_mode: ViewMode | str) -> ViewWindow:
    mode = ViewMode(view_mode)
    if isinstance(reference, datetime):
        reference = reference.date()

    if mode is ViewMode.WEEK:
        start = start_of_week(reference)
        days = tuple(start + timedelta(days=offset) for offset in range(7))
        return ViewWindow(start=start, end=days[-1], subdivisions=days, unit_days=1)

    if mode is ViewMode.MONTH:
        start = reference.replace(day=1)
        end = start.replace(day=_days_in_month(start.year, start.month))
    else:
        start = date(reference.year, 1, 1)
        end = date(reference.year, 12, 31)
    return ViewWindow(start=start, end=end, subdivisions=_weeks_between(start, end), unit_days=7)


def advance(reference: date, view_mode: ViewMode | str, direction: int) -> date:
    """Move ``reference`` one view unit forwards (``direction > 0``) or backwards."""
    step = 1 if direction > 0 else -1
    mode = ViewMode(view_mode)
    if mode is ViewMode.WEEK:
        return reference + WEEK * step
    if mode is ViewMode.MONTH:
        return _add_months(reference, step)
    return _add_months(reference, 12 * step)


def task_span(task: TaskEntity) -> tuple[date, date] | None:
    """Calendar dates a task covers, or ``None`` when it has nothing to place."""
    start = _as_date(task.start_datetime) or task.due_date
    if start is None:
        return None
    end = _as_date(task.end_datetime) or task.due_date
    if end is None or end < start:
        end = start
    return start, end


def intersects(span: tuple[date, date], window: ViewWindow) -> bool:
    start, end = span
    return start <= window.end and end >= window.start


def tasks_in_window(tasks: Iterable[TaskEntity], window: ViewWindow) -> list[TaskEntity]:
    result = []
    for task in tasks:
        span = task_span(task)
        if span is not None and intersects(span, window):
            result.append(task)
    return result


def bar_geometry(span: tuple[date, date], window: ViewWindow) -> BarGeometry:
    """Offset and width of a bar as fractions of the grid, clipped to it."""
    total = window.total_days
    start = max(span[0], window.grid_start)
    end = min(span[1], window.grid_end)
    if end < start:
        # Entirely outside the grid: collapse onto the nearest edge.
        edge = 0.0 if span[1] < window.grid_start else 1.0
        return BarGeometry(offset_fraction=edge, width_fraction=0.0)
    offset = (start - window.grid_start).days / total
    width = ((end - start).days + 1) / total
    return BarGeometry(offset_fraction=_clamp(offset), width_fraction=_clamp(width))


def _weeks_between(start: date, end: date) -> tuple[date, ...]:
    weeks = []
    current = start_of_week(start)
    while current <= end:
        weeks.append(current)
        current += WEEK
    return tuple(weeks)


def _as_date(value: datetime | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def _add_months(base: date, months: int) -> date:
    year = base.year + (base.month - 1 + months) // 12
    month = (base.month - 1 + months) % 12 + 1
    day = min(base.day, _days_in_month(year, month))
    return date(year, month, day)


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        next_month = date(year + 1, 1, 1)
    else:
        next_month = date(year, month + 1, 1)
    return (next_month - timedelta(days=1)).day
