from __future__ import annotations

import logging
from datetime import date

from PySide6.QtCore import Qt
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QFrame,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from planner.config import SETTINGS
from planner.domain.enums import ViewMode
from planner.domain.errors import StoreError
from planner.domain.filters import TaskFilters
from planner.infra.repository import CategoryRepository, NotificationRepository, TaskRepository
from planner.services.category_service import CategoryService
from planner.services.notification_service import NotificationService
from planner.services.task_service import TaskService
from planner.services.timeline_service import TimelineService, TimelineState
from planner.timeline.feedback import FeedbackThrottle
from planner.timeline.gestures import CommitResult, GestureController

from .dialogs import TaskDialog
from .timeline_view import TimelineWidget

logger = logging.getLogger(__name__)

VIEW_OPTIONS = [
    ("Week", ViewMode.WEEK),
    ("Month", ViewMode.MONTH),
    ("Year", ViewMode.YEAR),
]


class MainWindow(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Planner")
        self.resize(1280, 760)

        task_repo = TaskRepository()
        category_repo = CategoryRepository()
        self.service = TaskService(task_repo, category_repo)
        self.categories = CategoryService(category_repo, task_repo)
        self.filters = TaskFilters()
        self.notifications = NotificationService(NotificationRepository())
        self.timeline_service = TimelineService(self.service)

        self.state = TimelineState(reference=date.today(), view_mode=ViewMode(SETTINGS.default_view_mode))

        self.controller = GestureController(
            self.service,
            FeedbackThrottle(SETTINGS.feedback_throttle_ms),
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)
        layout.addWidget(self._build_header())

        self.timeline = TimelineWidget(self.controller, SETTINGS.feedback_throttle_ms)
        self.timeline.gesture_finished.connect(self.on_gesture_finished)
        self.timeline.date_activated.connect(self.new_task)
        self.timeline.toggle_status_requested.connect(self.toggle_status)
        self.timeline.delete_requested.connect(self.delete_task)

        scroll = QScrollArea()
        scroll.setObjectName("TimelineScroll")
        scroll.setWidgetResizable(True)
        scroll.setWidget(self.timeline)
        layout.addWidget(scroll, 1)

        self.refresh()

        QShortcut(QKeySequence("Ctrl+N"), self, self.new_task)
        QShortcut(QKeySequence("Ctrl+Left"), self, self.previous_period)
        QShortcut(QKeySequence("Ctrl+Right"), self, self.next_period)
        QShortcut(QKeySequence("Ctrl+T"), self, self.go_today)

    def _build_header(self) -> QWidget:
        frame = QFrame()
        frame.setObjectName("ActionBar")
        row = QHBoxLayout(frame)
        row.setContentsMargins(12, 10, 12, 10)
        row.setSpacing(8)

        previous_button = QPushButton("◀")
        previous_button.setProperty("variant", "ghost")
        previous_button.clicked.connect(self.previous_period)

        today_button = QPushButton("Today")
        today_button.setProperty("variant", "secondary")
        today_button.clicked.connect(self.go_today)

        next_button = QPushButton("▶")
        next_button.setProperty("variant", "ghost")
        next_button.clicked.connect(self.next_period)

        self.title_label = QLabel("")
        self.title_label.setProperty("class", "panel-title")

        self.stats_label = QLabel("")
        self.stats_label.setProperty("class", "stats-badge")

        row.addWidget(previous_button)
        row.addWidget(today_button)
        row.addWidget(next_button)
        row.addWidget(self.title_label)
        row.addStretch()
        row.addWidget(self.stats_label)

        self.view_group = QButtonGroup(self)
        self.view_group.setExclusive(True)
        for label, mode in VIEW_OPTIONS:
            button = QPushButton(label)
            button.setCheckable(True)
            button.setProperty("variant", "secondary")
            button.setChecked(mode is self.state.view_mode)
            button.clicked.connect(lambda _checked=False, value=mode: self.set_view_mode(value))
            self.view_group.addButton(button)
            row.addWidget(button)

        self.category_select = QComboBox()
        self.category_select.setObjectName("CategoryFilter")
        self._load_category_filter()
        self.category_select.currentIndexChanged.connect(self.on_category_changed)
        row.addWidget(self.category_select)

        add_button = QPushButton("New task")
        add_button.clicked.connect(lambda: self.new_task())
        row.addWidget(add_button)
        return frame

    def _load_category_filter(self) -> None:
        self.category_select.addItem("All categories", None)
        try:
            categories = self.categories.list_categories()
        except StoreError as exc:
            logger.warning("Could not load categories: %s", exc)
            return
        for category in categories:
            self.category_select.addItem(f"{category.icon} {category.name}", category.id)

    def on_category_changed(self, _index: int) -> None:
        self.filters = TaskFilters(category_id=self.category_select.currentData())
        self.refresh()

    def refresh(self) -> None:
        try:
            layout = self.timeline_service.layout(self.state, filters=self.filters)
        except StoreError as exc:
            logger.error("Could not load timeline: %s", exc)
            QMessageBox.warning(self, "Planner", f"Could not load tasks: {exc}")
            return
        self.title_label.setText(self.state.title())
        self.stats_label.setText(self._stats_text(len(layout.bars)))
        self.timeline.set_layout(layout)

    def _stats_text(self, visible: int) -> str:
        text = f"{visible} tasks in view"
        try:
            if self.filters.category_id is not None:
                stats = self.categories.category_stats(self.filters.category_id)
                text += f" | {stats['completed_tasks']}/{stats['total_tasks']} done in category"
            unread = self.notifications.unread_count()
        except StoreError as exc:
            logger.warning("Could not load stats: %s", exc)
            return text
        if unread:
            text += f" | {unread} unread"
        return text

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode is self.state.view_mode:
            return
        self.state = self.state.with_mode(mode)
        self.refresh()

    def previous_period(self) -> None:
        self.state = self.state.previous()
        self.refresh()

    def next_period(self) -> None:
        self.state = self.state.next()
        self.refresh()

    def go_today(self) -> None:
        self.state = self.state.today()
        self.refresh()

    def on_gesture_finished(self, result: CommitResult) -> None:
        if not result.ok:
            QMessageBox.warning(self, "Planner", f"Could not reschedule the task: {result.error}")
        self.refresh()

    def new_task(self, day: date | None = None) -> None:
        try:
            categories = self.service.list_categories()
        except StoreError as exc:
            QMessageBox.warning(self, "Planner", str(exc))
            return
        dialog = TaskDialog(categories, day, self)
        if dialog.exec() != TaskDialog.Accepted:
            return
        try:
            self.service.create_task(dialog.task_data())
        except StoreError as exc:
            QMessageBox.warning(self, "Planner", f"Error adding task: {exc}")
            return
        self.refresh()

    def toggle_status(self, task_id: int) -> None:
        try:
            self.service.toggle_status(task_id)
        except StoreError as exc:
            QMessageBox.warning(self, "Planner", str(exc))
        self.refresh()

    def delete_task(self, task_id: int) -> None:
        confirm = QMessageBox.question(
            self,
            "Delete task",
            "Are you sure you want to delete this task?",
            QMessageBox.Yes | QMessageBox.No,
        )
        if confirm != QMessageBox.Yes:
            return
        try:
            self.service.delete_task(task_id)
        except StoreError as exc:
            QMessageBox.warning(self, "Planner", str(exc))
        self.refresh()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key_Escape and self.controller.is_armed:
            self.controller.cancel()
            self.timeline.update()
            return
        super().keyPressEvent(event)
