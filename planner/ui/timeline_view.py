from __future__ import annotations

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QColor, QFont, QPainter, QPen
from PySide6.QtWidgets import QApplication, QMenu, QSizePolicy, QWidget

from planner.domain.enums import GestureKind, TaskStatus
from planner.services.timeline_service import BarLayout, TimelineLayout
from planner.timeline.feedback import FeedbackDescriptor
from planner.timeline.gestures import GestureController
from planner.timeline.mapping import TimelineGrid

LIST_WIDTH = 200
HEADER_HEIGHT = 60
ROW_HEIGHT = 40
BAR_HEIGHT = 32
HANDLE_WIDTH = 6
MIN_MOVE_ZONE = 2

GRID_COLOR = QColor("#2A3548")
HEADER_BG = QColor("#1B2230")
TODAY_BG = QColor("#2563EB")
HIGHLIGHT_BG = QColor("#4CAF50")
TEXT_COLOR = QColor("#E6EDF3")


def _position_x(event) -> float:
    return event.position().x() if hasattr(event, "position") else float(event.pos().x())


def _position(event) -> QPointF:
    return event.position() if hasattr(event, "position") else QPointF(event.pos())


def handle_width(bar_width: float) -> float:
    """Width of each resize handle; narrow bars keep a grab zone in the middle."""
    return max(min(HANDLE_WIDTH, (bar_width - MIN_MOVE_ZONE) / 2, bar_width / 4), 0.0)


def zone_at(left: float, width: float, x: float) -> GestureKind:
    handle = handle_width(width)
    if x < left + handle:
        return GestureKind.RESIZE_START
    if x > left + width - handle:
        return GestureKind.RESIZE_END
    return GestureKind.MOVE


class TimelineWidget(QWidget):
    """Gantt-style timeline. Bars can be dragged and resized by their edges."""

    gesture_finished = Signal(object)
    date_activated = Signal(object)
    toggle_status_requested = Signal(int)
    delete_requested = Signal(int)

    def __init__(self, controller: GestureController, feedback_interval_ms: int = 50, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._layout: TimelineLayout | None = None
        self._feedback: FeedbackDescriptor | None = None
        self._press_x = 0.0
        self._dragging = False

        self._flush_timer = QTimer(self)
        self._flush_timer.setSingleShot(True)
        self._flush_timer.setInterval(max(feedback_interval_ms, 1))
        self._flush_timer.timeout.connect(self._flush_feedback)

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMinimumSize(900, HEADER_HEIGHT + ROW_HEIGHT * 4)

    @property
    def drawable_width(self) -> float:
        return max(float(self.width() - LIST_WIDTH), 1.0)

    def set_layout(self, layout: TimelineLayout) -> None:
        self.controller.cancel()
        self._feedback = None
        self._layout = layout
        self.setMinimumHeight(HEADER_HEIGHT + ROW_HEIGHT * max(len(layout.bars), 4))
        self._sync_grid()
        self.update()

    def _sync_grid(self) -> None:
        if not self._layout:
            return
        self.controller.set_grid(TimelineGrid(
            window=self._layout.window,
            view_mode=self._layout.state.view_mode,
            drawable_width=self.drawable_width,
        ))

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._sync_grid()

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._discard_gesture()
        super().hideEvent(event)

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key_Escape and self.controller.is_armed:
            self._discard_gesture()
            return
        super().keyPressEvent(event)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.LeftButton or not self._layout:
            super().mousePressEvent(event)
            return
        hit = self._hit_test(_position(event))
        if hit is None:
            return
        bar, kind = hit
        if self.controller.begin(bar.task, kind, _position_x(event) - LIST_WIDTH):
            self._press_x = _position_x(event)
            self._dragging = False
            self.setCursor(Qt.SizeHorCursor if kind is not GestureKind.MOVE else Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if not self.controller.is_armed:
            self._update_hover_cursor(_position(event))
            return
        x = _position_x(event)
        if not self._dragging:
            if abs(x - self._press_x) < QApplication.startDragDistance():
                return
            self._dragging = True
        descriptor = self.controller.update(x - LIST_WIDTH)
        if descriptor is not None:
            self._apply_feedback(descriptor)
        elif not self._flush_timer.isActive():
            self._flush_timer.start()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if not self.controller.is_armed:
            super().mouseReleaseEvent(event)
            return
        self._flush_timer.stop()
        self.unsetCursor()
        self._feedback = None
        pos = _position(event)
        # clicks and drops off the grid leave the task untouched
        if not self._dragging or pos.x() < LIST_WIDTH or not QRectF(self.rect()).contains(pos):
            self.controller.cancel()
            self.update()
            return
        result = self.controller.end(pos.x() - LIST_WIDTH)
        self.update()
        if result is not None:
            self.gesture_finished.emit(result)

    def mouseDoubleClickEvent(self, event) -> None:  # type: ignore[override]
        if not self._layout:
            return
        pos = _position(event)
        if pos.y() > HEADER_HEIGHT or pos.x() < LIST_WIDTH:
            return
        grid = self.controller.grid
        if grid is not None:
            self.date_activated.emit(grid.date_at(pos.x() - LIST_WIDTH))

    def contextMenuEvent(self, event) -> None:  # type: ignore[override]
        if self.controller.is_armed:
            return
        hit = self._hit_test(QPointF(event.pos()))
        if hit is None:
            return
        task = hit[0].task
        menu = QMenu(self)
        done = task.status == TaskStatus.COMPLETED
        toggle_action = menu.addAction("Mark pending" if done else "Mark completed")
        delete_action = menu.addAction("Delete")
        chosen = menu.exec(event.globalPos())
        if chosen is toggle_action:
            self.toggle_status_requested.emit(task.id)
        elif chosen is delete_action:
            self.delete_requested.emit(task.id)

    def _discard_gesture(self) -> None:
        self._flush_timer.stop()
        if self.controller.cancel():
            self.unsetCursor()
            self._feedback = None
            self.update()

    def _flush_feedback(self) -> None:
        descriptor = self.controller.flush_feedback()
        if descriptor is not None:
            self._apply_feedback(descriptor)

    def _apply_feedback(self, descriptor: FeedbackDescriptor) -> None:
        self._feedback = descriptor
        self.update()

    def _bar_rect(self, bar: BarLayout) -> QRectF:
        width = self.drawable_width
        left = LIST_WIDTH + bar.geometry.offset_fraction * width
        bar_width = max(bar.geometry.width_fraction * width, 4.0)
        top = HEADER_HEIGHT + bar.row * ROW_HEIGHT + (ROW_HEIGHT - BAR_HEIGHT) / 2
        return QRectF(left, top, bar_width, BAR_HEIGHT)

    def _hit_test(self, pos: QPointF) -> tuple[BarLayout, GestureKind] | None:
        if not self._layout:
            return None
        for bar in self._layout.bars:
            rect = self._bar_rect(bar)
            pad = handle_width(rect.width()) / 2
            if not rect.adjusted(-pad, 0, pad, 0).contains(pos):
                continue
            return bar, zone_at(rect.left(), rect.width(), pos.x())
        return None

    def _update_hover_cursor(self, pos: QPointF) -> None:
        hit = self._hit_test(pos)
        if hit is None:
            self.unsetCursor()
        elif hit[1] is GestureKind.MOVE:
            self.setCursor(Qt.OpenHandCursor)
        else:
            self.setCursor(Qt.SizeHorCursor)

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.fillRect(self.rect(), QColor("#111827"))
        if not self._layout:
            painter.end()
            return
        self._paint_headers(painter)
        self._paint_rows(painter)
        self._paint_feedback(painter)
        painter.end()

    def _paint_headers(self, painter: QPainter) -> None:
        layout = self._layout
        grid = self.controller.grid
        if grid is None:
            return
        painter.fillRect(QRectF(0, 0, LIST_WIDTH, HEADER_HEIGHT), HEADER_BG)
        painter.setPen(TEXT_COLOR)
        bold = QFont(painter.font())
        bold.setBold(True)
        painter.setFont(bold)
        painter.drawText(QRectF(0, 0, LIST_WIDTH, HEADER_HEIGHT), Qt.AlignCenter, "Tasks")

        highlight = self._feedback.highlight_index if self._feedback else None
        for index, header in enumerate(layout.headers):
            left = LIST_WIDTH + grid.x_for_index(index)
            cell = QRectF(left, 0, grid.cell_width, HEADER_HEIGHT)
            if index == highlight:
                background = HIGHLIGHT_BG
            elif header.is_today:
                background = TODAY_BG
            else:
                background = HEADER_BG
            painter.fillRect(cell, background)
            painter.setPen(QPen(GRID_COLOR))
            painter.drawLine(cell.topRight(), QPointF(cell.right(), self.height()))
            painter.setPen(TEXT_COLOR)
            if grid.cell_width >= 28:
                painter.drawText(cell.adjusted(0, 6, 0, -HEADER_HEIGHT / 2), Qt.AlignCenter, header.label)
                painter.drawText(cell.adjusted(0, HEADER_HEIGHT / 2, 0, -6), Qt.AlignCenter, header.sub_label)
        painter.setPen(QPen(GRID_COLOR))
        painter.drawLine(QPointF(0, HEADER_HEIGHT), QPointF(self.width(), HEADER_HEIGHT))
        painter.drawLine(QPointF(LIST_WIDTH, 0), QPointF(LIST_WIDTH, self.height()))

    def _paint_rows(self, painter: QPainter) -> None:
        regular = QFont(painter.font())
        regular.setBold(False)
        painter.setFont(regular)
        dragged_id = self.controller.gesture.task.id if self.controller.gesture else None
        for bar in self._layout.bars:
            row_top = HEADER_HEIGHT + bar.row * ROW_HEIGHT
            painter.setPen(QPen(GRID_COLOR))
            painter.drawLine(QPointF(0, row_top + ROW_HEIGHT), QPointF(self.width(), row_top + ROW_HEIGHT))
            painter.setPen(TEXT_COLOR)
            title_rect = QRectF(12, row_top, LIST_WIDTH - 24, ROW_HEIGHT)
            title = painter.fontMetrics().elidedText(bar.task.title, Qt.ElideRight, int(title_rect.width()))
            painter.drawText(title_rect, Qt.AlignVCenter | Qt.AlignLeft, title)

            rect = self._bar_rect(bar)
            color = QColor(bar.color)
            if bar.task.status == TaskStatus.COMPLETED or bar.task.id == dragged_id:
                color.setAlphaF(0.55)
            painter.setPen(Qt.NoPen)
            painter.setBrush(color)
            painter.drawRoundedRect(rect, 4, 4)
            painter.setBrush(QColor(255, 255, 255, 90))
            painter.drawRect(QRectF(rect.left(), rect.top() + 2, 3, rect.height() - 4))
            painter.drawRect(QRectF(rect.right() - 3, rect.top() + 2, 3, rect.height() - 4))
            painter.setPen(QColor("#FFFFFF"))
            text = bar.label if bar.is_multi_day else bar.task.title
            text = painter.fontMetrics().elidedText(text, Qt.ElideRight, int(max(rect.width() - 12, 0)))
            painter.drawText(rect.adjusted(8, 0, -8, 0), Qt.AlignVCenter | Qt.AlignLeft, text)

    def _paint_feedback(self, painter: QPainter) -> None:
        feedback = self._feedback
        if feedback is None or not self.controller.is_armed:
            return
        bar = next((item for item in self._layout.bars if item.task.id == feedback.task_id), None)
        if bar is None:
            return
        width = self.drawable_width
        top = HEADER_HEIGHT + bar.row * ROW_HEIGHT + (ROW_HEIGHT - BAR_HEIGHT) / 2
        ghost = QRectF(
            LIST_WIDTH + feedback.preview.offset_fraction * width,
            top,
            max(feedback.preview.width_fraction * width, 4.0),
            BAR_HEIGHT,
        )
        pen = QPen(QColor("#FFFFFF"))
        pen.setStyle(Qt.DashLine)
        painter.setPen(pen)
        color = QColor(bar.color)
        color.setAlphaF(0.8)
        painter.setBrush(color)
        painter.drawRoundedRect(ghost, 4, 4)
        painter.setPen(QColor("#FFFFFF"))
        span = f"{feedback.proposed_start.strftime('%b %d')} - {feedback.proposed_end.strftime('%b %d')}"
        painter.drawText(ghost.adjusted(8, 0, -8, 0), Qt.AlignVCenter | Qt.AlignLeft, span)
