from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from planner.config import PROJECT_ROOT, SETTINGS

LOG_FILE_NAME = "planner.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# chatty third-party loggers kept at WARNING whatever LOG_LEVEL says
QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration")


def setup_logging(log_dir: Path | None = None) -> Path:
    """Send logs to the console and a rotating file; returns the file path.

    ``TIMELINE_LOG_LEVEL`` lets gesture and layout logging (``planner.timeline``)
    run more verbosely than the rest of the app.
    """
    log_dir = log_dir or PROJECT_ROOT / SETTINGS.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers: list[logging.Handler] = [
        RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=SETTINGS.log_level, handlers=handlers)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if SETTINGS.timeline_log_level:
        logging.getLogger("planner.timeline").setLevel(SETTINGS.timeline_log_level)

    logging.getLogger(__name__).info("Logging to %s", log_file)
    return log_file
