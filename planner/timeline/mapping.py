"""Pixel <-> calendar conversion for the timeline's drawable area."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from planner.domain.enums import ViewMode

from .ranges import ViewWindow

# Cell boundaries computed as offset * width land a hair below the exact
# multiple often enough to matter.
_BOUNDARY_EPSILON = 1e-9


def subdivision_days(view_mode: ViewMode | str) -> int:
    return 1 if ViewMode(view_mode) is ViewMode.WEEK else 7


def pixel_to_date_index(pixel_x: float, drawable_width: float, subdivision_count: int) -> int:
    if subdivision_count <= 0:
        raise ValueError("subdivision_count must be positive")
    if drawable_width <= 0:
        return 0
    index = math.floor(pixel_x * subdivision_count / drawable_width + _BOUNDARY_EPSILON)
    return min(max(index, 0), subdivision_count - 1)


def index_to_date(index: int, window_start: date, view_mode: ViewMode | str) -> date:
    return window_start + timedelta(days=index * subdivision_days(view_mode))


def date_to_index(day: date, window: ViewWindow) -> int:
    """Bucket holding ``day``, clamped to the grid."""
    index = (day - window.grid_start).days // window.unit_days
    return min(max(index, 0), len(window) - 1)


def index_to_pixel(index: int, drawable_width: float, subdivision_count: int) -> float:
    return index * drawable_width / subdivision_count


@dataclass(frozen=True)
class TimelineGrid:
    """A window laid out over a drawable area of a given pixel width."""

    window: ViewWindow
    view_mode: ViewMode
    drawable_width: float

    @property
    def count(self) -> int:
        return len(self.window)

    @property
    def cell_width(self) -> float:
        return self.drawable_width / self.count

    def index_at(self, pixel_x: float) -> int:
        return pixel_to_date_index(pixel_x, self.drawable_width, self.count)

    def date_at(self, pixel_x: float) -> date:
        return index_to_date(self.index_at(pixel_x), self.window.grid_start, self.view_mode)

    def x_for_index(self, index: int) -> float:
        return index_to_pixel(index, self.drawable_width, self.count)

    def x_for_fraction(self, fraction: float) -> float:
        return fraction * self.drawable_width
