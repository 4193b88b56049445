from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date

from planner.domain.entities import CategoryEntity, TaskEntity
from planner.domain.enums import ViewMode
from planner.domain.filters import TaskFilters
from planner.timeline.ranges import (
    BarGeometry,
    ViewWindow,
    advance,
    bar_geometry,
    intersects,
    task_span,
    window_for,
)

from .task_service import TaskService

DEFAULT_BAR_COLOR = "#666"


@dataclass(frozen=True)
class TimelineState:
    reference: date
    view_mode: ViewMode = ViewMode.WEEK

    @property
    def window(self) -> ViewWindow:
        return window_for(self.reference, self.view_mode)

    def next(self) -> "TimelineState":
        return replace(self, reference=advance(self.reference, self.view_mode, 1))

    def previous(self) -> "TimelineState":
        return replace(self, reference=advance(self.reference, self.view_mode, -1))

    def today(self, today: date | None = None) -> "TimelineState":
        return replace(self, reference=today or date.today())

    def with_mode(self, view_mode: ViewMode | str) -> "TimelineState":
        return replace(self, view_mode=ViewMode(view_mode))

    def title(self) -> str:
        if self.view_mode is ViewMode.MONTH:
            return self.reference.strftime("%B %Y")
        if self.view_mode is ViewMode.YEAR:
            return self.reference.strftime("%Y")
        window = self.window
        return f"{window.start.strftime('%b %d')} - {window.end.strftime('%b %d, %Y')}"


@dataclass(frozen=True)
class BarLayout:
    task: TaskEntity
    row: int
    start: date
    end: date
    geometry: BarGeometry
    color: str
    label: str
    is_multi_day: bool


@dataclass(frozen=True)
class ColumnHeader:
    day: date
    label: str
    sub_label: str
    is_today: bool


@dataclass(frozen=True)
class TimelineLayout:
    state: TimelineState
    window: ViewWindow
    headers: list[ColumnHeader]
    bars: list[BarLayout] = field(default_factory=list)
    categories: list[CategoryEntity] = field(default_factory=list)


class TimelineService:
    def __init__(self, tasks: TaskService) -> None:
        self._tasks = tasks

    def layout(
        self,
        state: TimelineState,
        today: date | None = None,
        filters: TaskFilters | None = None,
    ) -> TimelineLayout:
        today = today or date.today()
        window = state.window
        categories = self._tasks.list_categories()
        colors = {category.id: category.color for category in categories}

        bars = []
        for task in self._tasks.list_tasks(filters):
            span = task_span(task)
            if span is None or not intersects(span, window):
                continue
            geometry = bar_geometry(span, window)
            bars.append(BarLayout(
                task=task,
                row=0,
                start=span[0],
                end=span[1],
                geometry=geometry,
                color=colors.get(task.category_id) or DEFAULT_BAR_COLOR,
                label=_bar_label(task, span),
                is_multi_day=span[1] > span[0],
            ))

        bars.sort(key=lambda bar: (bar.start, bar.end, bar.task.id or 0))
        bars = [replace(bar, row=row) for row, bar in enumerate(bars)]
        return TimelineLayout(
            state=state,
            window=window,
            headers=_headers(window, state.view_mode, today),
            bars=bars,
            categories=categories,
        )


def _bar_label(task: TaskEntity, span: tuple[date, date]) -> str:
    start, end = span
    if start == end:
        return task.title
    return f"{task.title} ({start.strftime('%b %d')} - {end.strftime('%b %d')})"


def _headers(window: ViewWindow, view_mode: ViewMode, today: date) -> list[ColumnHeader]:
    headers = []
    for bucket in window.subdivisions:
        if view_mode is ViewMode.WEEK:
            headers.append(ColumnHeader(
                day=bucket,
                label=bucket.strftime("%a"),
                sub_label=bucket.strftime("%d"),
                is_today=bucket == today,
            ))
            continue
        week_number = bucket.isocalendar()[1]
        headers.append(ColumnHeader(
            day=bucket,
            label=bucket.strftime("%b %d"),
            sub_label=f"W{week_number}" if view_mode is ViewMode.YEAR else f"Week {week_number}",
            is_today=0 <= (today - bucket).days < window.unit_days,
        ))
    return headers
