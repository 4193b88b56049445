"""Failures raised by the task store."""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for every store failure the UI can report."""


class StoreUnavailableError(StoreError):
    """Raised when the database cannot be reached or rejects a statement."""


class NotFoundError(StoreError):
    """Raised when a record does not exist for the current user."""


class TaskNotFoundError(NotFoundError):
    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category not found: {category_id}")
        self.category_id = category_id


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: int) -> None:
        super().__init__(f"Notification not found: {notification_id}")
        self.notification_id = notification_id


class TaskValidationError(StoreError, ValueError):
    """Raised when task or category input fails validation."""

    def __init__(self, errors: list[str] | str) -> None:
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class DuplicateCategoryError(TaskValidationError):
    def __init__(self, name: str) -> None:
        super().__init__("Category already exists")
        self.name = name


class CategoryInUseError(TaskValidationError):
    def __init__(self, category_id: int, task_count: int) -> None:
        super().__init__(
            "Cannot delete category that has tasks. Please reassign or delete the tasks first."
        )
        self.category_id = category_id
        self.task_count = task_count
