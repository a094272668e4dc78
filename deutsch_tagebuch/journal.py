import datetime
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, or_, select

from . import db
from .clock import Clock, SystemClock
from .errors import NotFoundError, PersistenceError, ValidationError
from .progress import ProgressAggregator
from .structured import entry_to_dict, word_to_dict
from .text import count_words
from .vocabulary import VocabularyExtractor

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "newest": db.JournalEntry.created_at.desc(),
    "oldest": db.JournalEntry.created_at.asc(),
    "longest": db.JournalEntry.word_count.desc(),
    "shortest": db.JournalEntry.word_count.asc(),
}
SEARCH_LIMIT = 50


@dataclass
class SavedEntry:
    """A stored entry plus the vocabulary it introduced."""
    entry: db.JournalEntry
    new_words: List[db.VocabularyWord] = field(default_factory=list)


@dataclass
class EntryPage:
    entries: List[db.JournalEntry]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


def _minutes(value: Any) -> int:
    """Session duration in whole minutes; absent means 0."""
    if value is None or value == "":
        return 0
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("session_duration must be a whole number of minutes")
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError("session_duration must be a whole number of minutes")
    if minutes < 0:
        raise ValidationError("session_duration cannot be negative")
    return minutes


class JournalService:
    def __init__(
        self,
        extractor: Optional[VocabularyExtractor] = None,
        aggregator: Optional[ProgressAggregator] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.clock: Clock = clock or SystemClock()
        self.extractor = extractor or VocabularyExtractor(clock=self.clock)
        self.aggregator = aggregator or ProgressAggregator(clock=self.clock)

    def create_entry(
        self,
        english_text: Any,
        german_text: Any,
        session_duration: Any = None,
        created_at: Optional[datetime.datetime] = None,
    ) -> SavedEntry:
        """Store an entry, mine its German text and add it to the day's progress.

        `created_at` is only supplied when replaying a backup; live entries
        are stamped with the server clock and counted towards today.
        """
        if not english_text or not german_text:
            raise ValidationError("Both English and German text are required")
        english_text = _require_text(english_text, "English text must be a non-empty string")
        german_text = _require_text(german_text, "German text must be a non-empty string")
        minutes = _minutes(session_duration)
        stamp = created_at or self.clock.now()

        entry = db.JournalEntry(
            english_text=english_text,
            german_text=german_text,
            word_count=count_words(german_text),
            session_duration=minutes,
            created_at=stamp,
        )
        with db.session_scope() as session:
            session.add(entry)

        new_words = self.extractor.extract(german_text, now=stamp)
        day = stamp.date() if created_at else None
        try:
            self.aggregator.record_session(day, words_learned=len(new_words), minutes_practiced=minutes)
        except PersistenceError:
            # An entry the day's stats never counted must not stay behind
            logger.error("Progress update failed, discarding journal entry %s", entry.id)
            self._discard(entry.id)
            raise

        logger.info("Saved journal entry %s with %d new words", entry.id, len(new_words))
        return SavedEntry(entry=entry, new_words=new_words)

    def _discard(self, entry_id: int) -> None:
        with db.session_scope() as session:
            session.execute(delete(db.JournalEntry).where(db.JournalEntry.id == entry_id))

    def get_entry(self, entry_id: int) -> db.JournalEntry:
        with db.session_scope() as session:
            entry = session.get(db.JournalEntry, entry_id)
        if entry is None:
            raise NotFoundError("Journal entry not found")
        return entry

    def list_entries(self, page: int = 1, limit: int = 20, sort: str = "newest") -> EntryPage:
        page = max(1, page)
        limit = max(1, limit)
        order = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
        with db.session_scope() as session:
            entries = list(session.scalars(
                select(db.JournalEntry).order_by(order, db.JournalEntry.id.desc())
                .limit(limit).offset((page - 1) * limit)
            ))
            total = session.scalar(select(func.count(db.JournalEntry.id))) or 0
        return EntryPage(entries=entries, page=page, limit=limit, total=total)

    def update_entry(self, entry_id: int, english_text: Any = None, german_text: Any = None) -> SavedEntry:
        """Edit an entry. Changed German text is mined again; daily progress is left alone."""
        with db.session_scope() as session:
            entry = session.get(db.JournalEntry, entry_id)
            if entry is None:
                raise NotFoundError("Journal entry not found")
            german_changed = bool(german_text) and german_text != entry.german_text
            if english_text:
                entry.english_text = _require_text(english_text, "English text must be a non-empty string")
            if german_text:
                entry.german_text = _require_text(german_text, "German text must be a non-empty string")
                entry.word_count = count_words(entry.german_text)

        new_words: List[db.VocabularyWord] = []
        if german_changed:
            new_words = self.extractor.extract(entry.german_text)
        return SavedEntry(entry=entry, new_words=new_words)

    def delete_entry(self, entry_id: int) -> None:
        with db.session_scope() as session:
            entry = session.get(db.JournalEntry, entry_id)
            if entry is None:
                raise NotFoundError("Journal entry not found")
            session.delete(entry)

    def search(
        self,
        q: Optional[str] = None,
        start_date: Optional[datetime.date] = None,
        end_date: Optional[datetime.date] = None,
    ) -> List[db.JournalEntry]:
        """Entries containing `q` in either language, within an optional date range."""
        if not q and not start_date and not end_date:
            raise ValidationError("Search query or date range required")
        stmt = select(db.JournalEntry)
        if q:
            stmt = stmt.where(or_(
                db.JournalEntry.english_text.icontains(q, autoescape=True),
                db.JournalEntry.german_text.icontains(q, autoescape=True),
            ))
        if start_date:
            stmt = stmt.where(db.JournalEntry.created_at >= datetime.datetime.combine(start_date, datetime.time.min))
        if end_date:
            stmt = stmt.where(db.JournalEntry.created_at < datetime.datetime.combine(
                end_date + datetime.timedelta(days=1), datetime.time.min))
        stmt = stmt.order_by(db.JournalEntry.created_at.desc()).limit(SEARCH_LIMIT)
        with db.session_scope() as session:
            return list(session.scalars(stmt))


def summarize(saved: SavedEntry) -> Dict[str, Any]:
    data = entry_to_dict(saved.entry)
    data["new_words"] = [word_to_dict(w) for w in saved.new_words]
    return data
