from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from planner.config import SETTINGS

from .db import SessionLocal
from .models import CategoryModel, TaskModel, UserModel

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Work", "#2196F3", "💼"),
    ("Personal", "#4CAF50", "👤"),
    ("Health", "#FF5722", "🏥"),
    ("Finance", "#FF9800", "💰"),
    ("Family", "#9C27B0", "👨‍👩‍👧‍👦"),
    ("Hobbies", "#607D8B", "🎨"),
    ("Shopping", "#795548", "🛒"),
    ("Travel", "#00BCD4", "✈️"),
    ("Home", "#8BC34A", "🏠"),
    ("Appointments", "#E91E63", "📅"),
    ("Education", "#3F51B5", "📚"),
    ("Entertainment", "#FFC107", "🎮"),
]

# (title, description, category name, priority, status, due date, start, end, recurring pattern)
DEMO_TASKS = [
    ("Quarterly Budget Review", "Review Q2 budget and adjust forecasts", "Finance", "high", "pending",
     date(2025, 4, 10), None, None, None),
    ("Team Sprint Planning", "Plan next sprint with development team", "Work", "high", "pending",
     date(2025, 4, 8), None, None, None),
    ("Dentist Appointment", "Regular dental checkup", "Health", "medium", "pending",
     date(2025, 4, 12), None, None, None),
    ("Code Review Session", "Review pull requests for team", "Work", "medium", "in-progress",
     None, datetime(2025, 4, 7, 10, 0), datetime(2025, 4, 7, 12, 0), None),
    ("React Conference Preparation", "Prepare presentation and materials", "Work", "high", "pending",
     None, datetime(2025, 4, 15, 9, 0), datetime(2025, 4, 17, 17, 0), None),
    ("Home Renovation Planning", "Kitchen renovation planning and execution", "Home", "medium", "pending",
     None, datetime(2025, 4, 20, 8, 0), datetime(2025, 5, 18, 18, 0), None),
    ("Book Club Meeting", "Monthly book club discussion", "Entertainment", "low", "pending",
     date(2025, 4, 15), None, None, "monthly"),
    ("Summer Vacation Planning", "Plan and book summer vacation", "Travel", "medium", "pending",
     None, datetime(2025, 5, 1, 9, 0), datetime(2025, 5, 30, 17, 0), None),
    ("Team Building Event", "Annual company team building", "Work", "medium", "pending",
     None, datetime(2025, 5, 15, 9, 0), datetime(2025, 5, 16, 17, 0), None),
    ("Tax Filing Deadline", "Complete and submit tax returns", "Finance", "high", "pending",
     date(2025, 5, 15), None, None, None),
    ("Swimming Lessons", "Kids swimming lessons", "Family", "medium", "pending",
     None, datetime(2025, 7, 5, 15, 0), datetime(2025, 7, 5, 16, 0), "weekly"),
    ("Vacation in Italy", "Family summer vacation", "Travel", "medium", "pending",
     None, datetime(2025, 7, 10, 8, 0), datetime(2025, 7, 20, 22, 0), None),
]


def seed_defaults(session_factory: sessionmaker = SessionLocal, user_id: int | None = None) -> bool:
    """Insert the demo user, default categories and demo tasks into an empty store.

    Returns ``True`` when anything was inserted.
    """
    user_id = SETTINGS.demo_user_id if user_id is None else user_id
    with session_factory() as session:
        if session.get(UserModel, user_id) is None:
            session.add(UserModel(
                id=user_id,
                username="demo",
                email="demo@todoplanner.com",
                password_hash="demo123",
            ))
            session.flush()

        existing = session.scalar(
            select(func.count()).select_from(CategoryModel).where(CategoryModel.user_id == user_id)
        ) or 0
        if existing:
            session.commit()
            return False

        categories = {}
        for name, color, icon in DEFAULT_CATEGORIES:
            category = CategoryModel(user_id=user_id, name=name, color=color, icon=icon)
            session.add(category)
            categories[name] = category
        session.flush()

        for title, description, category, priority, status, due, start, end, pattern in DEMO_TASKS:
            session.add(TaskModel(
                user_id=user_id,
                title=title,
                description=description,
                category_id=categories[category].id,
                priority=priority,
                status=status,
                task_type="single" if due else "timerange",
                due_date=due,
                start_time="09:00" if due else None,
                end_time="10:00" if due else None,
                start_datetime=start,
                end_datetime=end,
                is_recurring=pattern is not None,
                recurring_pattern=pattern,
            ))
        session.commit()

    logger.info("Seeded %s categories and %s demo tasks", len(DEFAULT_CATEGORIES), len(DEMO_TASKS))
    return True
