from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from planner.domain.enums import NotificationType, TaskStatus
from planner.domain.errors import StoreUnavailableError
from planner.domain.filters import TaskFilters
from planner.infra.repository import CategoryRepository, NotificationRepository, TaskRepository
from planner.infra.seed import DEFAULT_CATEGORIES, DEMO_TASKS, seed_defaults

TODAY = date(2025, 4, 10)


@pytest.fixture
def seeded(session_factory):
    assert seed_defaults(session_factory, user_id=1)
    return session_factory


@pytest.fixture
def tasks(seeded) -> TaskRepository:
    return TaskRepository(seeded, user_id=1)


@pytest.fixture
def categories(seeded) -> CategoryRepository:
    return CategoryRepository(seeded, user_id=1)


def _titles(items) -> set[str]:
    return {item.title for item in items}


def test_seed_runs_once(seeded, tasks: TaskRepository, categories: CategoryRepository) -> None:
    assert not seed_defaults(seeded, user_id=1)

    assert len(categories.list_categories()) == len(DEFAULT_CATEGORIES)
    assert len(tasks.list_tasks(TaskFilters(), today=TODAY)) == len(DEMO_TASKS)


def test_seeded_single_tasks_get_default_times(tasks: TaskRepository) -> None:
    dentist = next(t for t in tasks.list_tasks(TaskFilters(search="Dentist")))

    assert dentist.due_date == date(2025, 4, 12)
    assert (dentist.start_time, dentist.end_time) == ("09:00", "10:00")


def test_records_are_scoped_to_their_owner(seeded, tasks: TaskRepository) -> None:
    task = tasks.list_tasks(TaskFilters())[0]
    stranger = TaskRepository(seeded, user_id=2)

    assert stranger.list_tasks(TaskFilters()) == []
    assert stranger.get_task(task.id) is None
    assert stranger.update_task(task.id, {"title": "Hijacked"}) is None
    assert not stranger.delete_task(task.id)
    assert tasks.get_task(task.id).title == task.title


def test_update_only_touches_given_fields(tasks: TaskRepository) -> None:
    task = next(t for t in tasks.list_tasks(TaskFilters(search="React Conference")))

    updated = tasks.update_task(task.id, {
        "start_datetime": datetime(2025, 4, 16, 9, 0),
        "end_datetime": datetime(2025, 4, 18, 17, 0),
    })

    assert updated.start_datetime == datetime(2025, 4, 16, 9, 0)
    assert updated.end_datetime == datetime(2025, 4, 18, 17, 0)
    assert updated.title == task.title
    assert updated.priority == task.priority
    assert updated.category_id == task.category_id


def test_create_and_delete_task(tasks: TaskRepository, categories: CategoryRepository) -> None:
    category = categories.find_by_name("Home")
    created = tasks.create_task({
        "title": "Paint fence",
        "category_id": category.id,
        "task_type": "timerange",
        "start_datetime": datetime(2025, 6, 1, 10, 0),
        "end_datetime": datetime(2025, 6, 2, 16, 0),
    })

    assert created.id is not None
    assert created.status is TaskStatus.PENDING
    assert tasks.delete_task(created.id)
    assert tasks.get_task(created.id) is None


@pytest.mark.parametrize(
    ("filter_key", "expected"),
    [
        ("overdue", {"Team Sprint Planning", "Code Review Session"}),
        ("today", {"Quarterly Budget Review"}),
        ("in_progress", {"Code Review Session"}),
        (
            "upcoming",
            {"Quarterly Budget Review", "Dentist Appointment", "Book Club Meeting", "React Conference Preparation"},
        ),
    ],
)
def test_named_filters(tasks: TaskRepository, filter_key: str, expected: set[str]) -> None:
    assert _titles(tasks.list_tasks(TaskFilters(filter_key=filter_key), today=TODAY)) == expected


def test_completed_tasks_are_never_overdue(tasks: TaskRepository) -> None:
    sprint = next(t for t in tasks.list_tasks(TaskFilters(search="Sprint")))
    tasks.update_task(sprint.id, {"status": TaskStatus.COMPLETED.value})

    overdue = tasks.list_tasks(TaskFilters(filter_key="overdue"), today=TODAY)
    completed = tasks.list_tasks(TaskFilters(filter_key="completed"), today=TODAY)

    assert _titles(overdue) == {"Code Review Session"}
    assert _titles(completed) == {"Team Sprint Planning"}


def test_search_matches_title_and_description(tasks: TaskRepository) -> None:
    found = tasks.list_tasks(TaskFilters(search="VACATION"))

    assert _titles(found) == {"Summer Vacation Planning", "Vacation in Italy"}


def test_category_filter_and_stats(tasks: TaskRepository, categories: CategoryRepository) -> None:
    work = categories.find_by_name("Work")

    assert len(tasks.list_tasks(TaskFilters(category_id=work.id))) == 4
    assert tasks.count_for_category(work.id) == 4
    assert tasks.get_category_stats(work.id) == {
        "total_tasks": 4,
        "completed_tasks": 0,
        "pending_tasks": 3,
        "in_progress_tasks": 1,
        "high_priority_tasks": 2,
        "medium_priority_tasks": 2,
        "low_priority_tasks": 0,
    }


def test_notifications_lifecycle(seeded) -> None:
    repo = NotificationRepository(seeded, user_id=1)
    first = repo.create_notification({"title": "Heads up", "message": "Budget review today", "type": "reminder"})
    repo.create_notification({"title": "Done", "message": "Saved", "type": "success"})

    assert repo.unread_count() == 2
    assert [n.title for n in repo.list_notifications("reminder")] == ["Heads up"]
    assert first.type is NotificationType.REMINDER

    assert repo.mark_read(first.id)
    assert repo.unread_count() == 1
    assert repo.mark_all_read() == 2
    assert repo.unread_count() == 0

    assert repo.delete_notification(first.id)
    assert not repo.delete_notification(first.id)
    assert not NotificationRepository(seeded, user_id=2).mark_read(999)


def test_database_errors_become_store_unavailable() -> None:
    engine = create_engine("sqlite://")
    repo = TaskRepository(sessionmaker(bind=engine), user_id=1)

    with pytest.raises(StoreUnavailableError):
        repo.list_tasks(TaskFilters())
    engine.dispose()
