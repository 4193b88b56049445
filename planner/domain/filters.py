from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TaskFilters:
    filter_key: str = "all"
    category_id: int | None = None
    search: str | None = None
