from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskType(StrEnum):
    SINGLE = "single"
    TIMERANGE = "timerange"


class RecurringPattern(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class NotificationType(StrEnum):
    INFO = "info"
    REMINDER = "reminder"
    WARNING = "warning"
    SUCCESS = "success"


class ViewMode(StrEnum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class GestureKind(StrEnum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"
