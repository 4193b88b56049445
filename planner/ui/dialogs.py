from __future__ import annotations

from datetime import date, datetime, time

from PySide6.QtCore import QDate, QTime
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLineEdit,
    QMessageBox,
    QTextEdit,
    QTimeEdit,
    QVBoxLayout,
)

from planner.domain.entities import CategoryEntity
from planner.domain.enums import Priority, RecurringPattern, TaskType

PRIORITY_OPTIONS = [
    ("Low", Priority.LOW.value),
    ("Medium", Priority.MEDIUM.value),
    ("High", Priority.HIGH.value),
]

RECURRENCE_OPTIONS = [
    ("Daily", RecurringPattern.DAILY.value),
    ("Weekly", RecurringPattern.WEEKLY.value),
    ("Monthly", RecurringPattern.MONTHLY.value),
]


class TaskDialog(QDialog):
    def __init__(self, categories: list[CategoryEntity], day: date | None = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("New task")
        self.setObjectName("TaskDialog")
        self.setMinimumWidth(420)

        day = day or date.today()
        qdate = QDate(day.year, day.month, day.day)

        self.title_input = QLineEdit()
        self.title_input.setPlaceholderText("Task title")

        self.description_input = QTextEdit()
        self.description_input.setFixedHeight(80)

        self.category_select = QComboBox()
        for category in categories:
            self.category_select.addItem(f"{category.icon} {category.name}", category.id)

        self.priority_select = QComboBox()
        for label, value in PRIORITY_OPTIONS:
            self.priority_select.addItem(label, value)
        self.priority_select.setCurrentIndex(1)

        self.start_date = QDateEdit(qdate)
        self.start_date.setCalendarPopup(True)
        self.start_date.setDisplayFormat("dd.MM.yyyy")
        self.end_date = QDateEdit(qdate)
        self.end_date.setCalendarPopup(True)
        self.end_date.setDisplayFormat("dd.MM.yyyy")

        self.start_time = QTimeEdit(QTime(9, 0))
        self.start_time.setDisplayFormat("HH:mm")
        self.end_time = QTimeEdit(QTime(10, 0))
        self.end_time.setDisplayFormat("HH:mm")

        self.recurring_check = QCheckBox("Repeats")
        self.recurrence_select = QComboBox()
        for label, value in RECURRENCE_OPTIONS:
            self.recurrence_select.addItem(label, value)
        self.recurrence_select.setEnabled(False)
        self.recurring_check.toggled.connect(self.recurrence_select.setEnabled)

        form = QFormLayout()
        form.addRow("Title", self.title_input)
        form.addRow("Description", self.description_input)
        form.addRow("Category", self.category_select)
        form.addRow("Priority", self.priority_select)
        form.addRow("Start date", self.start_date)
        form.addRow("End date", self.end_date)
        form.addRow("Start time", self.start_time)
        form.addRow("End time", self.end_time)
        form.addRow(self.recurring_check, self.recurrence_select)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._accept)
        buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.addLayout(form)
        layout.addWidget(buttons)

    def _accept(self) -> None:
        if not self.title_input.text().strip():
            QMessageBox.warning(self, "New task", "Please enter a task title")
            return
        if self.end_date.date() < self.start_date.date():
            QMessageBox.warning(self, "New task", "End date must not be before the start date")
            return
        self.accept()

    def task_data(self) -> dict:
        start_day = self.start_date.date().toPython()
        end_day = self.end_date.date().toPython()
        start_clock: time = self.start_time.time().toPython()
        end_clock: time = self.end_time.time().toPython()
        start_dt = datetime.combine(start_day, start_clock)
        end_dt = datetime.combine(end_day, end_clock)
        recurring = self.recurring_check.isChecked()
        if end_dt < start_dt:
            end_dt = start_dt
        return {
            "title": self.title_input.text().strip(),
            "description": self.description_input.toPlainText().strip(),
            "category_id": self.category_select.currentData(),
            "priority": self.priority_select.currentData(),
            "task_type": TaskType.TIMERANGE.value,
            "start_datetime": start_dt,
            "end_datetime": end_dt,
            "start_time": start_clock.strftime("%H:%M"),
            "end_time": end_clock.strftime("%H:%M"),
            "is_recurring": recurring,
            "recurring_pattern": self.recurrence_select.currentData() if recurring else None,
        }
