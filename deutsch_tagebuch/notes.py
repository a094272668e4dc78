from typing import Any, List, Optional

from sqlalchemy import select

from . import db
from .clock import Clock, SystemClock
from .errors import NotFoundError, ValidationError

SORT_ORDERS = {
    "az": db.Note.title.asc(),
    "za": db.Note.title.desc(),
    "oldest": db.Note.created_at.asc(),
    "newest": db.Note.created_at.desc(),
}


def _clean(title: Any, content: Any) -> tuple[str, str]:
    if not isinstance(title, str) or not isinstance(content, str) or not title.strip() or not content.strip():
        raise ValidationError("Both title and content are required")
    return title.strip(), content.strip()


def list_notes(sort: str = "newest") -> List[db.Note]:
    order = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
    with db.session_scope() as session:
        return list(session.scalars(select(db.Note).order_by(order, db.Note.id.desc())))


def get_note(note_id: int) -> db.Note:
    with db.session_scope() as session:
        note = session.get(db.Note, note_id)
    if note is None:
        raise NotFoundError("Note not found")
    return note


def create_note(title: Any, content: Any, clock: Optional[Clock] = None) -> db.Note:
    title, content = _clean(title, content)
    now = (clock or SystemClock()).now()
    note = db.Note(title=title, content=content, created_at=now, updated_at=now)
    with db.session_scope() as session:
        session.add(note)
    return note


def update_note(note_id: int, title: Any, content: Any, clock: Optional[Clock] = None) -> db.Note:
    title, content = _clean(title, content)
    with db.session_scope() as session:
        note = session.get(db.Note, note_id)
        if note is None:
            raise NotFoundError("Note not found")
        note.title = title
        note.content = content
        note.updated_at = (clock or SystemClock()).now()
    return note


def delete_note(note_id: int) -> None:
    with db.session_scope() as session:
        note = session.get(db.Note, note_id)
        if note is None:
            raise NotFoundError("Note not found")
        session.delete(note)
