from typing import Any, Dict

from sqlalchemy import select

from . import db
from .errors import ValidationError

THEMES = ("light", "dark")


def get_settings() -> db.UserSettings:
    """The single settings row, created with defaults on first access."""
    with db.session_scope() as session:
        settings = session.scalars(select(db.UserSettings).limit(1)).first()
        if settings is None:
            settings = db.UserSettings(daily_goal_minutes=60, daily_sentence_goal=10, theme="light")
            session.add(settings)
    return settings


def update_settings(values: Dict[str, Any]) -> db.UserSettings:
    """Apply the provided keys; anything not given keeps its current value."""
    updates: Dict[str, Any] = {}
    for key in ("daily_goal_minutes", "daily_sentence_goal"):
        if values.get(key) is not None:
            try:
                number = int(values[key])
            except (TypeError, ValueError):
                raise ValidationError(f"{key} must be a whole number")
            if number < 1:
                raise ValidationError(f"{key} must be positive")
            updates[key] = number
    if values.get("theme") is not None:
        if values["theme"] not in THEMES:
            raise ValidationError(f"theme must be one of: {', '.join(THEMES)}")
        updates["theme"] = values["theme"]

    current = get_settings()
    with db.session_scope() as session:
        settings = session.get(db.UserSettings, current.id)
        for key, value in updates.items():
            setattr(settings, key, value)
    return settings
