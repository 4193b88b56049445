from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Generic, TypeVar

from planner.domain.enums import GestureKind

from .mapping import TimelineGrid
from .ranges import BarGeometry, bar_geometry

T = TypeVar("T")


@dataclass(frozen=True)
class FeedbackDescriptor:
    """What the view should draw while a gesture is in progress."""

    task_id: int
    kind: GestureKind
    highlight_index: int
    proposed_start: date
    proposed_end: date
    preview: BarGeometry
    ghost_x: float


def feedback_for(
    grid: TimelineGrid,
    task_id: int,
    kind: GestureKind,
    pointer_x: float,
    proposed_start: date,
    proposed_end: date,
) -> FeedbackDescriptor:
    return FeedbackDescriptor(
        task_id=task_id,
        kind=kind,
        highlight_index=grid.index_at(pointer_x),
        proposed_start=proposed_start,
        proposed_end=proposed_end,
        preview=bar_geometry((proposed_start, proposed_end), grid.window),
        ghost_x=min(max(pointer_x, 0.0), grid.drawable_width),
    )


class FeedbackThrottle(Generic[T]):
    """Rate-limits feedback; a suppressed item waits in ``pending`` until flushed.

    Only the newest suppressed item is kept.
    """

    def __init__(self, interval_ms: int = 50, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = max(interval_ms, 0) / 1000
        self._clock = clock
        self._last: float | None = None
        self._pending: T | None = None

    @property
    def pending(self) -> T | None:
        return self._pending

    def submit(self, item: T) -> T | None:
        now = self._clock()
        if self._last is None or now - self._last >= self.interval:
            self._last = now
            self._pending = None
            return item
        self._pending = item
        return None

    def flush(self) -> T | None:
        item = self._pending
        self._pending = None
        if item is not None:
            self._last = self._clock()
        return item

    def reset(self) -> None:
        self._last = None
        self._pending = None
