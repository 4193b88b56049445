"""Move/resize gestures on timeline bars.

A :class:`GestureController` is either idle or armed with exactly one
:class:`Gesture`. Pointer motion only produces feedback; the store is written
once, when the gesture ends, and never when it is cancelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Protocol

from planner.domain.entities import TaskEntity
from planner.domain.enums import GestureKind, TaskType
from planner.domain.errors import StoreError

from .feedback import FeedbackDescriptor, FeedbackThrottle, feedback_for
from .mapping import TimelineGrid
from .ranges import task_span

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    def update_task(self, task_id: int, data: dict) -> TaskEntity: ...


@dataclass
class Gesture:
    task: TaskEntity
    kind: GestureKind
    origin_start: date
    origin_end: date
    pointer_origin_x: float
    proposed: date | None = None

    @property
    def duration_days(self) -> int:
        return (self.origin_end - self.origin_start).days


@dataclass(frozen=True)
class CommitResult:
    task_id: int
    start: date
    end: date
    task: TaskEntity | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_bounds(gesture: Gesture, proposed: date) -> tuple[date, date]:
    """New (start, end) dates for ``gesture`` if released on ``proposed``.

    Moving shifts both edges by the same number of days. Each resize moves
    only its own edge and stops at the opposite one.
    """
    if gesture.kind is GestureKind.MOVE:
        delta = proposed - gesture.origin_start
        return gesture.origin_start + delta, gesture.origin_end + delta
    if gesture.kind is GestureKind.RESIZE_START:
        return min(proposed, gesture.origin_end), gesture.origin_end
    return gesture.origin_start, max(proposed, gesture.origin_start)


def schedule_payload(task: TaskEntity, start: date, end: date) -> dict:
    """Partial update moving ``task`` to the given dates, keeping its times of day."""
    start_dt = datetime.combine(start, _start_time_of(task))
    end_dt = datetime.combine(end, _end_time_of(task))
    if end_dt < start_dt:
        end_dt = start_dt
    return {
        "start_datetime": start_dt,
        "end_datetime": end_dt,
        "task_type": TaskType.TIMERANGE.value,
    }


class GestureController:
    def __init__(self, store: TaskStore, throttle: FeedbackThrottle[FeedbackDescriptor] | None = None) -> None:
        self._store = store
        self._throttle = throttle if throttle is not None else FeedbackThrottle()
        self.grid: TimelineGrid | None = None
        self.gesture: Gesture | None = None

    @property
    def is_armed(self) -> bool:
        return self.gesture is not None

    def set_grid(self, grid: TimelineGrid) -> None:
        self.grid = grid

    def begin(self, task: TaskEntity, kind: GestureKind | str, pointer_x: float) -> bool:
        if self.gesture is not None:
            logger.debug("Ignoring %s on task %s: a gesture is already active", kind, task.id)
            return False
        if self.grid is None or task.id is None:
            return False
        span = task_span(task)
        if span is None:
            logger.debug("Task %s has no dates to drag", task.id)
            return False

        self.gesture = Gesture(
            task=task,
            kind=GestureKind(kind),
            origin_start=span[0],
            origin_end=span[1],
            pointer_origin_x=pointer_x,
        )
        self._throttle.reset()
        return True

    def update(self, pointer_x: float) -> FeedbackDescriptor | None:
        gesture = self.gesture
        if gesture is None or self.grid is None:
            return None
        gesture.proposed = self.grid.date_at(pointer_x)
        start, end = resolve_bounds(gesture, gesture.proposed)
        descriptor = feedback_for(self.grid, gesture.task.id, gesture.kind, pointer_x, start, end)
        return self._throttle.submit(descriptor)

    def flush_feedback(self) -> FeedbackDescriptor | None:
        if self.gesture is None:
            return None
        return self._throttle.flush()

    def end(self, pointer_x: float) -> CommitResult | None:
        gesture = self.gesture
        if gesture is None or self.grid is None:
            return None

        try:
            proposed = self.grid.date_at(pointer_x)
            start, end = resolve_bounds(gesture, proposed)
            task_id = gesture.task.id
            payload = schedule_payload(gesture.task, start, end)
            try:
                updated = self._store.update_task(task_id, payload)
            except StoreError as exc:
                logger.warning("Could not save %s of task %s: %s", gesture.kind, task_id, exc)
                return CommitResult(task_id=task_id, start=start, end=end, error=str(exc))
            logger.info("Task %s %s -> %s..%s", task_id, gesture.kind, start, end)
            return CommitResult(task_id=task_id, start=start, end=end, task=updated)
        finally:
            self._reset()

    def cancel(self) -> bool:
        if self.gesture is None:
            return False
        logger.debug("Cancelled %s on task %s", self.gesture.kind, self.gesture.task.id)
        self._reset()
        return True

    def _reset(self) -> None:
        self.gesture = None
        self._throttle.reset()


def _start_time_of(task: TaskEntity) -> time:
    if task.start_datetime is not None:
        return task.start_datetime.time()
    return _parse_clock(task.start_time) or time.min


def _end_time_of(task: TaskEntity) -> time:
    if task.end_datetime is not None:
        return task.end_datetime.time()
    return _parse_clock(task.end_time) or _start_time_of(task)


def _parse_clock(value: str | None) -> time | None:
    if not value:
        return None
    hours, minutes = value.split(":")[:2]
    return time(int(hours), int(minutes))
