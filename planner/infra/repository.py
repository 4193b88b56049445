from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from planner.config import SETTINGS
from planner.domain.entities import CategoryEntity, NotificationEntity, TaskEntity
from planner.domain.enums import NotificationType, Priority, RecurringPattern, TaskStatus, TaskType
from planner.domain.errors import StoreUnavailableError
from planner.domain.filters import TaskFilters

from .db import SessionLocal
from .models import CategoryModel, NotificationModel, TaskModel

STATUS_COMPLETED = TaskStatus.COMPLETED.value


def _to_task_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        user_id=model.user_id,
        title=model.title,
        description=model.description or "",
        category_id=model.category_id,
        priority=Priority(model.priority),
        status=TaskStatus(model.status),
        task_type=TaskType(model.task_type),
        due_date=model.due_date,
        start_time=model.start_time or None,
        end_time=model.end_time or None,
        start_datetime=model.start_datetime,
        end_datetime=model.end_datetime,
        is_recurring=bool(model.is_recurring),
        recurring_pattern=RecurringPattern(model.recurring_pattern) if model.recurring_pattern else None,
        reminder_days=model.reminder_days,
        reminder_time=model.reminder_time,
        snooze_until=model.snooze_until,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_category_entity(model: CategoryModel) -> CategoryEntity:
    return CategoryEntity(
        id=model.id,
        user_id=model.user_id,
        name=model.name,
        color=model.color,
        icon=model.icon,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _to_notification_entity(model: NotificationModel) -> NotificationEntity:
    return NotificationEntity(
        id=model.id,
        user_id=model.user_id,
        task_id=model.task_id,
        title=model.title,
        message=model.message,
        type=NotificationType(model.type),
        is_read=bool(model.is_read),
        created_at=model.created_at,
    )


def _apply_filters(stmt, filters: TaskFilters, today: date) -> object:
    day_start = datetime.combine(today, time.min)
    day_end = datetime.combine(today, time.max)

    if filters.filter_key == "pending":
        stmt = stmt.where(TaskModel.status == TaskStatus.PENDING.value)
    elif filters.filter_key == "in_progress":
        stmt = stmt.where(TaskModel.status == TaskStatus.IN_PROGRESS.value)
    elif filters.filter_key == "completed":
        stmt = stmt.where(TaskModel.status == STATUS_COMPLETED)
    elif filters.filter_key == "overdue":
        stmt = stmt.where(
            TaskModel.status != STATUS_COMPLETED,
            or_(
                TaskModel.due_date < today,
                and_(TaskModel.due_date.is_(None), TaskModel.end_datetime < day_start),
            ),
        )
    elif filters.filter_key == "upcoming":
        horizon = today + timedelta(days=7)
        horizon_end = datetime.combine(horizon, time.max)
        stmt = stmt.where(
            TaskModel.status != STATUS_COMPLETED,
            or_(
                TaskModel.due_date.between(today, horizon),
                TaskModel.start_datetime.between(day_start, horizon_end),
            ),
        )
    elif filters.filter_key == "today":
        stmt = stmt.where(
            or_(
                TaskModel.due_date == today,
                and_(TaskModel.start_datetime <= day_end, TaskModel.end_datetime >= day_start),
            )
        )

    if filters.category_id is not None:
        stmt = stmt.where(TaskModel.category_id == filters.category_id)

    if filters.search:
        pattern = f"%{filters.search}%"
        stmt = stmt.where(
            or_(
                TaskModel.title.ilike(pattern),
                TaskModel.description.ilike(pattern),
            )
        )

    return stmt


class _UserScopedRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal, user_id: int | None = None) -> None:
        self._session_factory = session_factory
        self.user_id = SETTINGS.demo_user_id if user_id is None else user_id

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc


class TaskRepository(_UserScopedRepository):
    def list_tasks(self, filters: TaskFilters, today: date | None = None) -> list[TaskEntity]:
        with self._session() as session:
            stmt = select(TaskModel).where(TaskModel.user_id == self.user_id)
            stmt = _apply_filters(stmt, filters, today or date.today())
            stmt = stmt.order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
            return [_to_task_entity(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: int) -> Optional[TaskEntity]:
        with self._session() as session:
            task = self._owned(session, task_id)
            return _to_task_entity(task) if task else None

    def create_task(self, data: dict) -> TaskEntity:
        with self._session() as session:
            task = TaskModel(user_id=self.user_id, **data)
            session.add(task)
            session.commit()
            session.refresh(task)
            return _to_task_entity(task)

    def update_task(self, task_id: int, data: dict) -> Optional[TaskEntity]:
        with self._session() as session:
            task = self._owned(session, task_id)
            if not task:
                return None
            for key, value in data.items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_task_entity(task)

    def delete_task(self, task_id: int) -> bool:
        with self._session() as session:
            task = self._owned(session, task_id)
            if not task:
                return False
            session.delete(task)
            session.commit()
            return True

    def count_for_category(self, category_id: int) -> int:
        with self._session() as session:
            return session.scalar(
                select(func.count())
                .select_from(TaskModel)
                .where(TaskModel.user_id == self.user_id, TaskModel.category_id == category_id)
            ) or 0

    def get_category_stats(self, category_id: int) -> dict[str, int]:
        def _count_when(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        with self._session() as session:
            row = session.execute(
                select(
                    func.count().label("total_tasks"),
                    _count_when(TaskModel.status == STATUS_COMPLETED).label("completed_tasks"),
                    _count_when(TaskModel.status == TaskStatus.PENDING.value).label("pending_tasks"),
                    _count_when(TaskModel.status == TaskStatus.IN_PROGRESS.value).label("in_progress_tasks"),
                    _count_when(TaskModel.priority == Priority.HIGH.value).label("high_priority_tasks"),
                    _count_when(TaskModel.priority == Priority.MEDIUM.value).label("medium_priority_tasks"),
                    _count_when(TaskModel.priority == Priority.LOW.value).label("low_priority_tasks"),
                ).where(TaskModel.user_id == self.user_id, TaskModel.category_id == category_id)
            ).one()
            return {key: int(value or 0) for key, value in row._mapping.items()}

    def _owned(self, session: Session, task_id: int) -> TaskModel | None:
        task = session.get(TaskModel, task_id)
        if task is None or task.user_id != self.user_id:
            return None
        return task


class CategoryRepository(_UserScopedRepository):
    def list_categories(self) -> list[CategoryEntity]:
        with self._session() as session:
            stmt = (
                select(CategoryModel)
                .where(CategoryModel.user_id == self.user_id)
                .order_by(CategoryModel.id.asc())
            )
            return [_to_category_entity(category) for category in session.scalars(stmt)]

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        with self._session() as session:
            category = self._owned(session, category_id)
            return _to_category_entity(category) if category else None

    def find_by_name(self, name: str) -> Optional[CategoryEntity]:
        with self._session() as session:
            category = session.scalar(
                select(CategoryModel).where(
                    CategoryModel.user_id == self.user_id,
                    CategoryModel.name == name,
                )
            )
            return _to_category_entity(category) if category else None

    def create_category(self, data: dict) -> CategoryEntity:
        with self._session() as session:
            category = CategoryModel(user_id=self.user_id, **data)
            session.add(category)
            session.commit()
            session.refresh(category)
            return _to_category_entity(category)

    def update_category(self, category_id: int, data: dict) -> Optional[CategoryEntity]:
        with self._session() as session:
            category = self._owned(session, category_id)
            if not category:
                return None
            for key, value in data.items():
                setattr(category, key, value)
            session.commit()
            session.refresh(category)
            return _to_category_entity(category)

    def delete_category(self, category_id: int) -> bool:
        with self._session() as session:
            category = self._owned(session, category_id)
            if not category:
                return False
            session.delete(category)
            session.commit()
            return True

    def _owned(self, session: Session, category_id: int) -> CategoryModel | None:
        category = session.get(CategoryModel, category_id)
        if category is None or category.user_id != self.user_id:
            return None
        return category


class NotificationRepository(_UserScopedRepository):
    def list_notifications(self, type_: str | None = None) -> list[NotificationEntity]:
        with self._session() as session:
            stmt = select(NotificationModel).where(NotificationModel.user_id == self.user_id)
            if type_:
                stmt = stmt.where(NotificationModel.type == type_)
            stmt = stmt.order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            return [_to_notification_entity(item) for item in session.scalars(stmt)]

    def unread_count(self) -> int:
        with self._session() as session:
            return session.scalar(
                select(func.count())
                .select_from(NotificationModel)
                .where(NotificationModel.user_id == self.user_id, NotificationModel.is_read.is_(False))
            ) or 0

    def create_notification(self, data: dict) -> NotificationEntity:
        with self._session() as session:
            notification = NotificationModel(user_id=self.user_id, **data)
            session.add(notification)
            session.commit()
            session.refresh(notification)
            return _to_notification_entity(notification)

    def mark_read(self, notification_id: int) -> bool:
        with self._session() as session:
            result = session.execute(
                update(NotificationModel)
                .where(NotificationModel.id == notification_id, NotificationModel.user_id == self.user_id)
                .values(is_read=True)
            )
            session.commit()
            return result.rowcount > 0

    def mark_all_read(self) -> int:
        with self._session() as session:
            result = session.execute(
                update(NotificationModel)
                .where(NotificationModel.user_id == self.user_id)
                .values(is_read=True)
            )
            session.commit()
            return result.rowcount

    def delete_notification(self, notification_id: int) -> bool:
        with self._session() as session:
            notification = session.get(NotificationModel, notification_id)
            if notification is None or notification.user_id != self.user_id:
                return False
            session.delete(notification)
            session.commit()
            return True
