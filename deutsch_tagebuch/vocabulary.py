import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select

from . import db
from .clock import Clock, SystemClock
from .errors import DuplicateError, NotFoundError, PersistenceError, ValidationError
from .stores import SqlVocabularyStore, VocabularyStore, word_key
from .text import is_candidate_word, tokenize

logger = logging.getLogger(__name__)


class VocabularyExtractor:
    """Mine German text for vocabulary.

    Every qualifying token is one occurrence: unseen words are inserted
    with frequency 1, known words (compared case-insensitively) get their
    frequency incremented and last_reviewed set to now. Only the newly
    inserted words are returned, in the order they appeared.
    """

    def __init__(self, store: Optional[VocabularyStore] = None, clock: Optional[Clock] = None) -> None:
        self.store: VocabularyStore = store or SqlVocabularyStore()
        self.clock: Clock = clock or SystemClock()

    def extract(self, german_text: Any, now: Optional[datetime.datetime] = None) -> List[db.VocabularyWord]:
        """`now` stamps first_seen/last_reviewed; defaults to the clock."""
        new_words: List[db.VocabularyWord] = []
        now = now or self.clock.now()

        for token in tokenize(german_text):
            clean = token.strip()
            if not is_candidate_word(clean):
                continue
            try:
                row, created = self.store.record_occurrence(clean, now)
            except PersistenceError as e:
                # One bad word must not cost the rest of the entry
                logger.warning("Error processing word %r: %s", clean, e)
                continue
            if created:
                new_words.append(row)

        return new_words


SORT_ORDERS = {
    "az": db.VocabularyWord.word.asc(),
    "za": db.VocabularyWord.word.desc(),
    "frequency": db.VocabularyWord.frequency.desc(),
    "newest": db.VocabularyWord.first_seen.desc(),
}


def list_words(sort: str = "newest", search: Optional[str] = None) -> List[db.VocabularyWord]:
    """All vocabulary, optionally filtered by a substring of the word."""
    stmt = select(db.VocabularyWord)
    if search:
        stmt = stmt.where(db.VocabularyWord.word_key.contains(search.strip().lower(), autoescape=True))
    stmt = stmt.order_by(SORT_ORDERS.get(sort, SORT_ORDERS["newest"]), db.VocabularyWord.id.desc())
    with db.session_scope() as session:
        return list(session.scalars(stmt))


def get_word(word_id: int) -> db.VocabularyWord:
    with db.session_scope() as session:
        row = session.get(db.VocabularyWord, word_id)
    if row is None:
        raise NotFoundError("Vocabulary word not found")
    return row


def add_word(word: Any, store: Optional[VocabularyStore] = None, clock: Optional[Clock] = None) -> db.VocabularyWord:
    """Manually add a word. Raises DuplicateError if it exists in any casing."""
    if not isinstance(word, str) or not word.strip():
        raise ValidationError("Valid word is required")
    store = store or SqlVocabularyStore()
    existing = store.find_by_word(word)
    if existing is not None:
        raise DuplicateError("Word already exists in vocabulary", existing)
    return store.insert(word.strip(), (clock or SystemClock()).now())


def delete_word(word_id: int) -> None:
    with db.session_scope() as session:
        row = session.get(db.VocabularyWord, word_id)
        if row is None:
            raise NotFoundError("Vocabulary word not found")
        session.delete(row)


def mark_reviewed(word_id: int, clock: Optional[Clock] = None) -> db.VocabularyWord:
    """Set last_reviewed to now without touching frequency."""
    with db.session_scope() as session:
        row = session.get(db.VocabularyWord, word_id)
        if row is None:
            raise NotFoundError("Vocabulary word not found")
        row.last_reviewed = (clock or SystemClock()).now()
    return row


def find_word(word: str) -> Optional[db.VocabularyWord]:
    with db.session_scope() as session:
        return session.scalars(
            select(db.VocabularyWord).where(db.VocabularyWord.word_key == word_key(word))
        ).first()


def get_vocabulary_stats(clock: Optional[Clock] = None) -> Dict[str, int]:
    """Totals for the vocabulary page.

    averagePerWeek divides the total by the number of weeks since the
    first word was seen, with a minimum of one week.
    """
    now = (clock or SystemClock()).now()
    week_start = datetime.datetime.combine(now.date() - datetime.timedelta(days=7), datetime.time.min)
    month_start = datetime.datetime.combine(now.date() - datetime.timedelta(days=30), datetime.time.min)

    with db.session_scope() as session:
        total = session.scalar(select(func.count(db.VocabularyWord.id))) or 0
        this_week = session.scalar(
            select(func.count(db.VocabularyWord.id)).where(db.VocabularyWord.first_seen >= week_start)
        ) or 0
        this_month = session.scalar(
            select(func.count(db.VocabularyWord.id)).where(db.VocabularyWord.first_seen >= month_start)
        ) or 0
        earliest = session.scalar(select(func.min(db.VocabularyWord.first_seen)))

    average = 0
    if total and earliest is not None:
        weeks = max(1.0, (now - earliest).total_seconds() / (7 * 24 * 3600))
        average = round(total / weeks)

    return {
        "total": total,
        "thisWeek": this_week,
        "thisMonth": this_month,
        "averagePerWeek": average,
    }
