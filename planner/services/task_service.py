from __future__ import annotations

import logging
import re
from datetime import date, datetime
from enum import StrEnum

from planner.domain.entities import CategoryEntity, TaskEntity
from planner.domain.enums import Priority, RecurringPattern, TaskStatus, TaskType
from planner.domain.errors import TaskNotFoundError, TaskValidationError
from planner.domain.filters import TaskFilters
from planner.infra.repository import CategoryRepository, TaskRepository

logger = logging.getLogger(__name__)

ALLOWED_FIELDS = {
    "title",
    "description",
    "category_id",
    "priority",
    "status",
    "task_type",
    "due_date",
    "start_time",
    "end_time",
    "start_datetime",
    "end_datetime",
    "is_recurring",
    "recurring_pattern",
    "reminder_days",
    "reminder_time",
    "snooze_until",
}

ENUM_FIELDS: dict[str, type[StrEnum]] = {
    "priority": Priority,
    "status": TaskStatus,
    "task_type": TaskType,
    "recurring_pattern": RecurringPattern,
}

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")

CREATE_DEFAULTS = {
    "description": "",
    "priority": Priority.MEDIUM.value,
    "status": TaskStatus.PENDING.value,
    "task_type": TaskType.SINGLE.value,
    "is_recurring": False,
    "reminder_days": 3,
    "reminder_time": "09:00",
}


class TaskService:
    def __init__(self, repo: TaskRepository, categories: CategoryRepository | None = None) -> None:
        self._repo = repo
        self._categories = categories

    def list_tasks(self, filters: TaskFilters | None = None) -> list[TaskEntity]:
        return self._repo.list_tasks(filters or TaskFilters())

    def list_categories(self) -> list[CategoryEntity]:
        if self._categories is None:
            return []
        return self._categories.list_categories()

    def get_task(self, task_id: int) -> TaskEntity:
        task = self._repo.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def create_task(self, data: dict) -> TaskEntity:
        normalized = {**CREATE_DEFAULTS, **self._normalize_data(data, creating=True)}
        if normalized.get("category_id") is None:
            normalized["category_id"] = self._default_category_id()
        self._check_range(normalized)
        task = self._repo.create_task(normalized)
        logger.info("Created task %s (%s)", task.id, task.title)
        return task

    def update_task(self, task_id: int, data: dict) -> TaskEntity:
        normalized = self._normalize_data(data, creating=False)
        if not normalized:
            raise TaskValidationError("No fields to update")
        if "start_datetime" in normalized or "end_datetime" in normalized:
            current = self.get_task(task_id)
            self._check_range({
                "start_datetime": normalized.get("start_datetime", current.start_datetime),
                "end_datetime": normalized.get("end_datetime", current.end_datetime),
            })
        task = self._repo.update_task(task_id, normalized)
        if task is None:
            raise TaskNotFoundError(task_id)
        logger.info("Updated task %s fields=%s", task_id, sorted(normalized))
        return task

    def delete_task(self, task_id: int) -> None:
        if not self._repo.delete_task(task_id):
            raise TaskNotFoundError(task_id)
        logger.info("Deleted task %s", task_id)

    def toggle_status(self, task_id: int) -> TaskEntity:
        task = self.get_task(task_id)
        if task.status == TaskStatus.COMPLETED:
            new_status = TaskStatus.PENDING
        else:
            new_status = TaskStatus.COMPLETED
        return self.update_task(task_id, {"status": new_status})

    def snooze_task(self, task_id: int, until: datetime | str) -> TaskEntity:
        if until is None or until == "":
            raise TaskValidationError("snooze_until is required")
        return self.update_task(task_id, {"snooze_until": until})

    def _default_category_id(self) -> int | None:
        categories = self.list_categories()
        return categories[0].id if categories else None

    def _normalize_data(self, data: dict, creating: bool) -> dict:
        errors: list[str] = []
        normalized: dict = {}

        for key, value in data.items():
            if key not in ALLOWED_FIELDS:
                continue
            try:
                normalized[key] = self._coerce(key, value)
            except (TypeError, ValueError) as exc:
                errors.append(f"{key}: {exc}")

        title = normalized.get("title")
        if creating and not title:
            errors.append("title: must not be empty")
        elif "title" in normalized and not title:
            errors.append("title: must not be empty")

        category_id = normalized.get("category_id")
        if category_id is not None and self._categories is not None:
            if self._categories.get_category(category_id) is None:
                errors.append(f"category_id: unknown category {category_id}")

        if errors:
            raise TaskValidationError(errors)
        return normalized

    @staticmethod
    def _coerce(key: str, value):
        if key in ENUM_FIELDS:
            if value is None or value == "":
                if key == "recurring_pattern":
                    return None
                raise ValueError("must not be empty")
            enum_cls = ENUM_FIELDS[key]
            try:
                return enum_cls(value).value
            except ValueError:
                allowed = ", ".join(member.value for member in enum_cls)
                raise ValueError(f"must be one of {allowed}") from None
        if key == "title":
            return str(value or "").strip()
        if key == "description":
            return str(value or "").strip()
        if key == "category_id":
            return None if value in (None, "") else int(value)
        if key == "due_date":
            return _parse_date(value)
        if key in {"start_datetime", "end_datetime", "snooze_until"}:
            return _parse_datetime(value)
        if key in {"start_time", "end_time"}:
            return _parse_time(value)
        if key == "reminder_time":
            parsed = _parse_time(value)
            if parsed is None:
                raise ValueError("must not be empty")
            return parsed
        if key == "reminder_days":
            days = int(value)
            if not 0 <= days <= 30:
                raise ValueError("must be between 0 and 30")
            return days
        if key == "is_recurring":
            if isinstance(value, str):
                return value.strip().lower() in {"1", "true", "yes"}
            return bool(value)
        return value

    @staticmethod
    def _check_range(data: dict) -> None:
        start = data.get("start_datetime")
        end = data.get("end_datetime")
        if start is not None and end is not None and end < start:
            raise TaskValidationError("end_datetime: must not be before start_datetime")


def _parse_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def _parse_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    text = str(value).strip().replace("Z", "+00:00")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed


def _parse_time(value) -> str | None:
    if value is None or value == "":
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    text = str(value).strip()
    if not TIME_PATTERN.match(text):
        raise ValueError("must use HH:MM format")
    hours, minutes = text.split(":")
    return f"{int(hours):02d}:{minutes}"
