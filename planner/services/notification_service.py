from __future__ import annotations

from planner.domain.entities import NotificationEntity
from planner.domain.enums import NotificationType
from planner.domain.errors import NotificationNotFoundError, TaskValidationError
from planner.infra.repository import NotificationRepository


class NotificationService:
    def __init__(self, repo: NotificationRepository) -> None:
        self._repo = repo

    def list_notifications(self, type_: NotificationType | str | None = None) -> list[NotificationEntity]:
        return self._repo.list_notifications(NotificationType(type_).value if type_ else None)

    def unread_count(self) -> int:
        return self._repo.unread_count()

    def create_notification(
        self,
        title: str,
        message: str,
        type_: NotificationType | str = NotificationType.INFO,
        task_id: int | None = None,
    ) -> NotificationEntity:
        if not title or not message:
            raise TaskValidationError("title and message are required")
        try:
            type_value = NotificationType(type_).value
        except ValueError:
            raise TaskValidationError(f"type: unknown notification type {type_}") from None
        return self._repo.create_notification({
            "title": title,
            "message": message,
            "type": type_value,
            "task_id": task_id,
        })

    def mark_read(self, notification_id: int) -> None:
        if not self._repo.mark_read(notification_id):
            raise NotificationNotFoundError(notification_id)

    def mark_all_read(self) -> int:
        return self._repo.mark_all_read()

    def delete_notification(self, notification_id: int) -> None:
        if not self._repo.delete_notification(notification_id):
            raise NotificationNotFoundError(notification_id)
