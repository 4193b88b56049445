from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from planner.domain.enums import ViewMode


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def _first_existing(name: str) -> Path | None:
    for base in (Path.cwd(), PROJECT_ROOT):
        path = base / name
        if path.exists():
            return path
    return None


def load_env() -> None:
    """Load ``.env`` and then ``.env.<APP_ENV>``, the latter winning."""
    base_env = _first_existing(".env")
    if base_env:
        load_dotenv(base_env)
    env_specific = _first_existing(f".env.{os.getenv('APP_ENV', 'development')}")
    if env_specific:
        load_dotenv(env_specific, override=True)


def _env_str(name: str, default: str) -> str:
    return os.getenv(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _env_view_mode() -> str:
    raw = _env_str("TIMELINE_VIEW", ViewMode.WEEK.value).lower()
    try:
        return ViewMode(raw).value
    except ValueError:
        allowed = ", ".join(mode.value for mode in ViewMode)
        raise RuntimeError(f"TIMELINE_VIEW must be one of {allowed}, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str = "INFO"
    log_dir: str = "logs"
    timeline_log_level: str | None = None
    demo_user_id: int = 1
    default_view_mode: str = ViewMode.WEEK.value
    feedback_throttle_ms: int = 50
    seed_demo_data: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=_env_str("DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'planner.db'}"),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            log_dir=_env_str("LOG_DIR", "logs"),
            timeline_log_level=os.getenv("TIMELINE_LOG_LEVEL", "").strip().upper() or None,
            demo_user_id=_env_int("DEMO_USER_ID", 1),
            default_view_mode=_env_view_mode(),
            feedback_throttle_ms=max(_env_int("TIMELINE_FEEDBACK_MS", 50), 0),
            seed_demo_data=_env_flag("SEED_DEMO_DATA", True),
        )


load_env()

SETTINGS = Settings.from_env()
