from __future__ import annotations

import logging
import re

from planner.domain.entities import CategoryEntity
from planner.domain.errors import (
    CategoryInUseError,
    CategoryNotFoundError,
    DuplicateCategoryError,
    TaskValidationError,
)
from planner.infra.repository import CategoryRepository, TaskRepository

logger = logging.getLogger(__name__)

COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
DEFAULT_COLOR = "#666"
DEFAULT_ICON = "📋"


class CategoryService:
    def __init__(self, repo: CategoryRepository, tasks: TaskRepository) -> None:
        self._repo = repo
        self._tasks = tasks

    def list_categories(self) -> list[CategoryEntity]:
        return self._repo.list_categories()

    def get_category(self, category_id: int) -> CategoryEntity:
        category = self._repo.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    def create_category(self, data: dict) -> CategoryEntity:
        normalized = self._normalize_data(data)
        name = normalized.get("name")
        if not name:
            raise TaskValidationError("name: must not be empty")
        if self._repo.find_by_name(name) is not None:
            raise DuplicateCategoryError(name)
        normalized.setdefault("color", DEFAULT_COLOR)
        normalized.setdefault("icon", DEFAULT_ICON)
        category = self._repo.create_category(normalized)
        logger.info("Created category %s (%s)", category.id, category.name)
        return category

    def update_category(self, category_id: int, data: dict) -> CategoryEntity:
        normalized = self._normalize_data(data)
        if not normalized:
            raise TaskValidationError("No fields to update")
        if "name" in normalized:
            if not normalized["name"]:
                raise TaskValidationError("name: must not be empty")
            existing = self._repo.find_by_name(normalized["name"])
            if existing is not None and existing.id != category_id:
                raise DuplicateCategoryError(normalized["name"])
        category = self._repo.update_category(category_id, normalized)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    def delete_category(self, category_id: int) -> None:
        task_count = self._tasks.count_for_category(category_id)
        if task_count:
            raise CategoryInUseError(category_id, task_count)
        if not self._repo.delete_category(category_id):
            raise CategoryNotFoundError(category_id)
        logger.info("Deleted category %s", category_id)

    def category_stats(self, category_id: int) -> dict[str, int]:
        self.get_category(category_id)
        return self._tasks.get_category_stats(category_id)

    @staticmethod
    def _normalize_data(data: dict) -> dict:
        normalized = {}
        if "name" in data:
            normalized["name"] = str(data["name"] or "").strip()
        if data.get("color"):
            color = str(data["color"]).strip()
            if not COLOR_PATTERN.match(color):
                raise TaskValidationError("color: must be a hex colour like #2196F3")
            normalized["color"] = color
        if data.get("icon"):
            normalized["icon"] = str(data["icon"]).strip()
        return normalized
