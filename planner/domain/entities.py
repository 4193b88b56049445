from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .enums import NotificationType, Priority, RecurringPattern, TaskStatus, TaskType


@dataclass(frozen=True)
class TaskEntity:
    id: int | None
    user_id: int
    title: str
    description: str
    category_id: int | None
    priority: Priority
    status: TaskStatus
    task_type: TaskType
    due_date: Optional[date]
    start_time: str | None
    end_time: str | None
    start_datetime: Optional[datetime]
    end_datetime: Optional[datetime]
    is_recurring: bool
    recurring_pattern: RecurringPattern | None
    reminder_days: int
    reminder_time: str
    snooze_until: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class CategoryEntity:
    id: int | None
    user_id: int
    name: str
    color: str
    icon: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class NotificationEntity:
    id: int | None
    user_id: int
    task_id: int | None
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime
