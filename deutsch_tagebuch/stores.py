"""
Persistence contracts used by the extraction and progress engine, and
their SQLite implementations.

Both check-then-act paths (word lookup then insert-or-increment, day
lookup then upsert) are single INSERT ... ON CONFLICT DO UPDATE
statements, so concurrent writers cannot double-insert a word or drop
one side of a daily aggregate.
"""

import datetime
from typing import Any, List, Optional, Protocol, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from . import db
from .errors import DuplicateError, PersistenceError
from .structured import ProgressDelta


class VocabularyStore(Protocol):
    def find_by_word(self, word: str) -> Optional[db.VocabularyWord]: ...

    def insert(self, word: str, seen_at: datetime.datetime) -> db.VocabularyWord: ...

    def increment_frequency(self, word_id: int, reviewed_at: datetime.datetime) -> None: ...

    def record_occurrence(self, word: str, seen_at: datetime.datetime) -> Tuple[db.VocabularyWord, bool]: ...


class ProgressStore(Protocol):
    def get_by_date(self, date: datetime.date) -> Optional[db.DailyProgress]: ...

    def upsert(self, date: datetime.date, delta: ProgressDelta) -> db.DailyProgress: ...

    def list_range(self, start: datetime.date, end: datetime.date) -> List[db.DailyProgress]: ...

    def active_dates(self) -> Set[datetime.date]: ...


def word_key(word: str) -> str:
    return word.strip().lower()


def _to_date(value: Any) -> datetime.date:
    # SQLite date() yields ISO strings
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(value)


class SqlVocabularyStore:
    def find_by_word(self, word: str) -> Optional[db.VocabularyWord]:
        with db.session_scope() as session:
            return session.scalars(
                select(db.VocabularyWord).where(db.VocabularyWord.word_key == word_key(word))
            ).first()

    def insert(self, word: str, seen_at: datetime.datetime) -> db.VocabularyWord:
        """Insert a brand-new word. Raises DuplicateError if any casing of it exists."""
        row = db.VocabularyWord(
            word=word.strip(),
            word_key=word_key(word),
            first_seen=seen_at,
            frequency=1,
            last_reviewed=seen_at,
        )
        try:
            with db.session_scope() as session:
                session.add(row)
        except PersistenceError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateError(f"Word already exists: {word}", self.find_by_word(word)) from e
            raise
        return row

    def increment_frequency(self, word_id: int, reviewed_at: datetime.datetime) -> None:
        table = db.VocabularyWord.__table__
        with db.session_scope() as session:
            session.execute(
                table.update()
                .where(table.c.id == word_id)
                .values(frequency=table.c.frequency + 1, last_reviewed=reviewed_at)
            )

    def record_occurrence(self, word: str, seen_at: datetime.datetime) -> Tuple[db.VocabularyWord, bool]:
        """Insert the word, or bump frequency and last_reviewed if it exists.

        Returns (row, created). A freshly inserted row is the only way to
        come back with frequency 1, because updates always increment.
        """
        table = db.VocabularyWord.__table__
        stmt = sqlite_insert(table).values(
            word=word.strip(),
            word_key=word_key(word),
            first_seen=seen_at,
            frequency=1,
            last_reviewed=seen_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.word_key],
            set_={
                "frequency": table.c.frequency + 1,
                "last_reviewed": stmt.excluded.last_reviewed,
            },
        ).returning(table.c.id, table.c.frequency)
        with db.session_scope() as session:
            row_id, frequency = session.execute(stmt).one()
            row = session.get(db.VocabularyWord, row_id, populate_existing=True)
        return row, frequency == 1


class SqlProgressStore:
    def get_by_date(self, date: datetime.date) -> Optional[db.DailyProgress]:
        with db.session_scope() as session:
            return session.scalars(
                select(db.DailyProgress).where(db.DailyProgress.date == date)
            ).first()

    def upsert(self, date: datetime.date, delta: ProgressDelta) -> db.DailyProgress:
        table = db.DailyProgress.__table__
        stmt = sqlite_insert(table).values(
            date=date,
            words_learned=delta.words_learned,
            entries_written=delta.entries_written,
            minutes_practiced=delta.minutes_practiced,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.date],
            set_={
                "words_learned": table.c.words_learned + stmt.excluded.words_learned,
                "entries_written": table.c.entries_written + stmt.excluded.entries_written,
                "minutes_practiced": table.c.minutes_practiced + stmt.excluded.minutes_practiced,
            },
        ).returning(table.c.id)
        with db.session_scope() as session:
            row_id = session.execute(stmt).scalar_one()
            row = session.get(db.DailyProgress, row_id, populate_existing=True)
        return row

    def list_range(self, start: datetime.date, end: datetime.date) -> List[db.DailyProgress]:
        with db.session_scope() as session:
            return list(session.scalars(
                select(db.DailyProgress)
                .where(db.DailyProgress.date >= start, db.DailyProgress.date <= end)
                .order_by(db.DailyProgress.date.asc())
            ))

    def active_dates(self) -> Set[datetime.date]:
        """Days with at least one journal entry, from the daily rows and the entries themselves."""
        with db.session_scope() as session:
            progress_dates = session.scalars(
                select(db.DailyProgress.date).where(db.DailyProgress.entries_written > 0)
            ).all()
            entry_dates = session.scalars(select(func.date(db.JournalEntry.created_at)).distinct()).all()
        dates = set(progress_dates)
        dates.update(_to_date(d) for d in entry_dates if d)
        return dates
