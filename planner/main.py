from __future__ import annotations

import logging
import sys
from pathlib import Path

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from planner.config import PROJECT_ROOT, SETTINGS
from planner.infra.db import init_db
from planner.infra.logging import setup_logging
from planner.infra.seed import seed_defaults
from planner.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


# Dark theme shared with the painted timeline (see planner.ui.timeline_view).
PALETTE_COLORS = {
    QPalette.Window: "#0F172A",
    QPalette.WindowText: "#E6EDF3",
    QPalette.Base: "#111827",
    QPalette.AlternateBase: "#1B2230",
    QPalette.Text: "#E6EDF3",
    QPalette.Button: "#202A3B",
    QPalette.ButtonText: "#E6EDF3",
    QPalette.ToolTipBase: "#1B2230",
    QPalette.ToolTipText: "#E6EDF3",
    QPalette.Highlight: "#2563EB",
    QPalette.HighlightedText: "#FFFFFF",
}


def _apply_dark_palette(app: QApplication) -> None:
    palette = QPalette()
    for role, color in PALETTE_COLORS.items():
        palette.setColor(role, QColor(color))
    app.setPalette(palette)


def _find_qss_path() -> Path | None:
    candidates = [
        Path(__file__).resolve().parent / "ui" / "styles.qss",
        PROJECT_ROOT / "planner" / "ui" / "styles.qss",
    ]
    meipass = getattr(sys, "_MEIPASS", None)
    if meipass:
        candidates.append(Path(meipass) / "planner" / "ui" / "styles.qss")

    for path in candidates:
        if path.exists():
            return path
    return None


def load_styles(app: QApplication) -> None:
    qss_path = _find_qss_path()
    if not qss_path:
        return
    app.setStyleSheet(qss_path.read_text(encoding="utf-8"))


def main() -> None:
    setup_logging()
    try:
        init_db()
        if SETTINGS.seed_demo_data:
            seed_defaults()
    except Exception as exc:  # noqa: BLE001
        logger.error("Database startup failed", exc_info=True)
        app = QApplication(sys.argv)
        QMessageBox.critical(None, "DB error", str(exc))
        return

    app = QApplication(sys.argv)
    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_dark_palette(app)
    app.setFont(QFont("Segoe UI", 10))
    load_styles(app)

    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
