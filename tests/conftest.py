from __future__ import annotations

import os
from dataclasses import replace
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from planner.domain.entities import TaskEntity
from planner.domain.enums import Priority, TaskStatus, TaskType
from planner.infra import models  # noqa: F401
from planner.infra.db import Base


def build_task(**overrides) -> TaskEntity:
    now = datetime(2025, 1, 1, 12, 0)
    task = TaskEntity(
        id=1,
        user_id=1,
        title="Task",
        description="",
        category_id=1,
        priority=Priority.MEDIUM,
        status=TaskStatus.PENDING,
        task_type=TaskType.TIMERANGE,
        due_date=None,
        start_time=None,
        end_time=None,
        start_datetime=None,
        end_datetime=None,
        is_recurring=False,
        recurring_pattern=None,
        reminder_days=3,
        reminder_time="09:00",
        snooze_until=None,
        created_at=now,
        updated_at=now,
    )
    return replace(task, **overrides)


def ranged_task(start: date, end: date | None, **overrides) -> TaskEntity:
    return build_task(
        start_datetime=datetime.combine(start, datetime.min.time()),
        end_datetime=datetime.combine(end, datetime.min.time()) if end else None,
        **overrides,
    )


@pytest.fixture
def make_task():
    return build_task


@pytest.fixture
def make_ranged_task():
    return ranged_task


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture(scope="session")
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])
