from __future__ import annotations

import pytest

from planner.domain.errors import (
    CategoryInUseError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    TaskValidationError,
)
from planner.infra.repository import CategoryRepository, TaskRepository
from planner.infra.seed import seed_defaults
from planner.services.category_service import CategoryService


@pytest.fixture
def service(session_factory) -> CategoryService:
    seed_defaults(session_factory, user_id=1)
    return CategoryService(
        CategoryRepository(session_factory, user_id=1),
        TaskRepository(session_factory, user_id=1),
    )


def test_create_uses_default_color_and_icon(service: CategoryService) -> None:
    category = service.create_category({"name": "  Garden "})

    assert category.name == "Garden"
    assert category.color == "#666"
    assert category.icon == "📋"


def test_create_rejects_duplicate_name(service: CategoryService) -> None:
    with pytest.raises(DuplicateCategoryError, match="Category already exists"):
        service.create_category({"name": "Work"})


def test_create_rejects_bad_color(service: CategoryService) -> None:
    with pytest.raises(TaskValidationError):
        service.create_category({"name": "Garden", "color": "green"})


def test_rename_to_existing_name_is_rejected(service: CategoryService) -> None:
    home = next(c for c in service.list_categories() if c.name == "Home")

    with pytest.raises(DuplicateCategoryError):
        service.update_category(home.id, {"name": "Work"})
    assert service.update_category(home.id, {"name": "House"}).name == "House"


def test_category_with_tasks_cannot_be_deleted(service: CategoryService) -> None:
    work = next(c for c in service.list_categories() if c.name == "Work")

    with pytest.raises(CategoryInUseError) as exc_info:
        service.delete_category(work.id)
    assert exc_info.value.task_count == 4


def test_empty_category_can_be_deleted(service: CategoryService) -> None:
    shopping = next(c for c in service.list_categories() if c.name == "Shopping")

    service.delete_category(shopping.id)

    with pytest.raises(CategoryNotFoundError):
        service.get_category(shopping.id)
    with pytest.raises(CategoryNotFoundError):
        service.delete_category(shopping.id)


def test_stats_require_an_existing_category(service: CategoryService) -> None:
    finance = next(c for c in service.list_categories() if c.name == "Finance")

    stats = service.category_stats(finance.id)

    assert stats["total_tasks"] == 2
    assert stats["high_priority_tasks"] == 2
    with pytest.raises(CategoryNotFoundError):
        service.category_stats(9999)
