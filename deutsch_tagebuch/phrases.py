from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select

from . import db
from .clock import Clock, SystemClock
from .errors import DuplicateError, NotFoundError, ValidationError
from .structured import phrase_to_dict

# Shipped with the app, always listed before the user's own phrases
BUILT_IN_PHRASES: tuple[Dict[str, Any], ...] = (
    {"english": "I agree with you up to a point.", "german": "Ich stimme dir bis zu einem gewissen Punkt zu.", "builtin": True},
    {"english": "That depends on...", "german": "Das kommt darauf an...", "builtin": True},
    {"english": "In my opinion...", "german": "Meiner Meinung nach...", "builtin": True},
    {"english": "I am not sure if...", "german": "Ich bin mir nicht sicher, ob...", "builtin": True},
    {"english": "Can you please explain that?", "german": "Kannst du das bitte erklären?", "builtin": True},
    {"english": "On the one hand... on the other hand...", "german": "Einerseits... andererseits...", "builtin": True},
    {"english": "It makes no difference to me.", "german": "Das ist mir egal.", "builtin": True},
    {"english": "I would like to suggest that...", "german": "Ich möchte vorschlagen, dass...", "builtin": True},
)


def list_phrases() -> Dict[str, Any]:
    """Built-in phrases followed by custom ones, newest custom phrase first."""
    with db.session_scope() as session:
        custom = list(session.scalars(
            select(db.CustomPhrase).order_by(db.CustomPhrase.created_at.desc(), db.CustomPhrase.id.desc())
        ))
    phrases = [dict(p) for p in BUILT_IN_PHRASES] + [phrase_to_dict(p) for p in custom]
    return {
        "phrases": phrases,
        "count": {"total": len(phrases), "builtin": len(BUILT_IN_PHRASES), "custom": len(custom)},
    }


def add_phrase(english: Any, german: Any, clock: Optional[Clock] = None) -> db.CustomPhrase:
    if not english or not german:
        raise ValidationError("Both English and German text are required")
    if not isinstance(english, str) or not isinstance(german, str):
        raise ValidationError("English and German text must be strings")
    english, german = english.strip(), german.strip()
    if not english or not german:
        raise ValidationError("English and German text cannot be empty")

    with db.session_scope() as session:
        existing = session.scalars(select(db.CustomPhrase).where(or_(
            func.lower(db.CustomPhrase.english) == english.lower(),
            func.lower(db.CustomPhrase.german) == german.lower(),
        ))).first()
    if existing is not None:
        raise DuplicateError("This phrase already exists", existing)

    with db.session_scope() as session:
        phrase = db.CustomPhrase(
            english=english,
            german=german,
            created_at=(clock or SystemClock()).now(),
            times_reviewed=0,
        )
        session.add(phrase)
    return phrase


def delete_phrase(phrase_id: int) -> None:
    with db.session_scope() as session:
        phrase = session.get(db.CustomPhrase, phrase_id)
        if phrase is None:
            raise NotFoundError("Custom phrase not found")
        session.delete(phrase)


def review_phrase(phrase_id: int) -> db.CustomPhrase:
    table = db.CustomPhrase.__table__
    with db.session_scope() as session:
        result = session.execute(
            table.update().where(table.c.id == phrase_id).values(times_reviewed=table.c.times_reviewed + 1)
        )
        if result.rowcount == 0:
            raise NotFoundError("Custom phrase not found")
        phrase = session.get(db.CustomPhrase, phrase_id, populate_existing=True)
    return phrase


def all_custom_phrases() -> List[db.CustomPhrase]:
    with db.session_scope() as session:
        return list(session.scalars(select(db.CustomPhrase).order_by(db.CustomPhrase.created_at.asc())))
