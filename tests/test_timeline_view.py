from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QKeyEvent, QMouseEvent

from planner.domain.enums import GestureKind, TaskType, ViewMode
from planner.services.timeline_service import TimelineService, TimelineState
from planner.timeline.feedback import FeedbackThrottle
from planner.timeline.gestures import GestureController
from planner.ui.timeline_view import LIST_WIDTH, TimelineWidget, zone_at


class StubTasks:
    def __init__(self, tasks) -> None:
        self.tasks = list(tasks)

    def list_tasks(self, filters=None):
        return self.tasks

    def list_categories(self):
        return []


class RecordingStore:
    def __init__(self, task) -> None:
        self.task = task
        self.calls: list[tuple[int, dict]] = []

    def update_task(self, task_id: int, data: dict):
        self.calls.append((task_id, data))
        return replace(
            self.task,
            start_datetime=data["start_datetime"],
            end_datetime=data["end_datetime"],
            task_type=TaskType(data["task_type"]),
        )


class FrozenClock:
    def __call__(self) -> float:
        return 0.0


def _mouse(kind: QEvent.Type, x: float, y: float) -> QMouseEvent:
    pos = QPointF(x, y)
    if kind == QEvent.MouseMove:
        return QMouseEvent(kind, pos, pos, Qt.NoButton, Qt.LeftButton, Qt.NoModifier)
    if kind == QEvent.MouseButtonRelease:
        return QMouseEvent(kind, pos, pos, Qt.LeftButton, Qt.NoButton, Qt.NoModifier)
    return QMouseEvent(kind, pos, pos, Qt.LeftButton, Qt.LeftButton, Qt.NoModifier)


def _build(task, state: TimelineState, width: int = 900, throttle=None, interval_ms: int = 0):
    store = RecordingStore(task)
    controller = GestureController(store, throttle or FeedbackThrottle(0))
    widget = TimelineWidget(controller, interval_ms)
    widget.resize(width, 400)
    widget.set_layout(TimelineService(StubTasks([task])).layout(state, today=state.reference))
    return widget, store


def _bar_center(widget: TimelineWidget) -> QPointF:
    return widget._bar_rect(widget._layout.bars[0]).center()


def _drag(widget: TimelineWidget, start: QPointF, end_x: float, end_y: float | None = None) -> None:
    end_y = start.y() if end_y is None else end_y
    widget.mousePressEvent(_mouse(QEvent.MouseButtonPress, start.x(), start.y()))
    widget.mouseMoveEvent(_mouse(QEvent.MouseMove, end_x, end_y))
    widget.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, end_x, end_y))


def test_handle_zones_shrink_with_the_bar() -> None:
    assert zone_at(0, 100, 3) is GestureKind.RESIZE_START
    assert zone_at(0, 100, 50) is GestureKind.MOVE
    assert zone_at(0, 100, 97) is GestureKind.RESIZE_END
    assert zone_at(0, 4, 2) is GestureKind.MOVE


def test_short_bar_in_year_view_offers_every_gesture(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 9), date(2025, 4, 10))
    widget, _ = _build(task, TimelineState(date(2025, 4, 1), ViewMode.YEAR), width=1256)
    rect = widget._bar_rect(widget._layout.bars[0])
    assert rect.width() < 12

    kinds = set()
    x = rect.left() - 1
    while x <= rect.right() + 1:
        hit = widget._hit_test(QPointF(x, rect.center().y()))
        if hit is not None:
            kinds.add(hit[1])
        x += 0.25

    assert kinds == {GestureKind.RESIZE_START, GestureKind.MOVE, GestureKind.RESIZE_END}


def test_short_bar_in_year_view_can_be_dragged(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 9), date(2025, 4, 10))
    widget, store = _build(task, TimelineState(date(2025, 4, 1), ViewMode.YEAR), width=1256)
    center = _bar_center(widget)
    target_x = center.x() + 40
    expected_start = widget.controller.grid.date_at(target_x - LIST_WIDTH)

    _drag(widget, center, target_x)

    assert len(store.calls) == 1
    _, payload = store.calls[0]
    assert payload["start_datetime"].date() == expected_start
    assert (payload["end_datetime"].date() - payload["start_datetime"].date()).days == 1


def test_release_over_task_list_does_not_write(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))
    finished = []
    widget.gesture_finished.connect(finished.append)

    _drag(widget, _bar_center(widget), 100)

    assert store.calls == []
    assert finished == []
    assert not widget.controller.is_armed


def test_release_below_the_widget_does_not_write(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))

    _drag(widget, _bar_center(widget), 700, end_y=widget.height() + 50)

    assert store.calls == []
    assert not widget.controller.is_armed


def test_release_past_the_last_day_is_clamped(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))
    finished = []
    widget.gesture_finished.connect(finished.append)

    _drag(widget, _bar_center(widget), widget.width() - 1)

    assert len(store.calls) == 1
    assert (finished[0].start, finished[0].end) == (date(2025, 4, 20), date(2025, 4, 21))


def test_click_without_drag_does_not_write(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))
    center = _bar_center(widget)

    widget.mousePressEvent(_mouse(QEvent.MouseButtonPress, center.x(), center.y()))
    widget.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, center.x(), center.y()))

    assert store.calls == []
    assert not widget.controller.is_armed


def test_escape_cancels_the_gesture(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))
    center = _bar_center(widget)

    widget.mousePressEvent(_mouse(QEvent.MouseButtonPress, center.x(), center.y()))
    widget.mouseMoveEvent(_mouse(QEvent.MouseMove, center.x() + 150, center.y()))
    widget.keyPressEvent(QKeyEvent(QEvent.KeyPress, Qt.Key_Escape, Qt.NoModifier))
    widget.mouseReleaseEvent(_mouse(QEvent.MouseButtonRelease, center.x() + 150, center.y()))

    assert store.calls == []
    assert not widget.controller.is_armed


def test_hiding_the_widget_cancels_the_gesture(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, store = _build(task, TimelineState(date(2025, 4, 14)))
    widget.show()
    center = _bar_center(widget)

    widget.mousePressEvent(_mouse(QEvent.MouseButtonPress, center.x(), center.y()))
    widget.mouseMoveEvent(_mouse(QEvent.MouseMove, center.x() + 150, center.y()))
    assert widget.controller.is_armed
    widget.hide()

    assert not widget.controller.is_armed
    assert store.calls == []


def test_suppressed_feedback_is_flushed_by_the_timer(qapp, make_ranged_task) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    throttle = FeedbackThrottle(1000, clock=FrozenClock())
    widget, _ = _build(task, TimelineState(date(2025, 4, 14)), throttle=throttle, interval_ms=1000)
    center = _bar_center(widget)

    widget.mousePressEvent(_mouse(QEvent.MouseButtonPress, center.x(), center.y()))
    widget.mouseMoveEvent(_mouse(QEvent.MouseMove, LIST_WIDTH + 350, center.y()))
    assert widget._feedback.highlight_index == 3

    widget.mouseMoveEvent(_mouse(QEvent.MouseMove, LIST_WIDTH + 650, center.y()))
    assert widget._feedback.highlight_index == 3
    assert widget._flush_timer.isActive()

    widget._flush_feedback()
    assert widget._feedback.highlight_index == 6
    widget.controller.cancel()


@pytest.mark.parametrize("mode", [ViewMode.MONTH, ViewMode.YEAR])
def test_grid_follows_the_view_mode(qapp, make_ranged_task, mode: ViewMode) -> None:
    task = make_ranged_task(date(2025, 4, 16), date(2025, 4, 17))
    widget, _ = _build(task, TimelineState(date(2025, 4, 14), mode))

    assert widget.controller.grid.view_mode is mode
    assert widget.controller.grid.count == len(widget._layout.window.subdivisions)
