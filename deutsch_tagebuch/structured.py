import datetime
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from . import db


@dataclass(frozen=True)
class ProgressDelta:
    """Amounts added to one day's progress row."""
    words_learned: int = 0
    entries_written: int = 0
    minutes_practiced: int = 0


@dataclass
class DailyProgressRow:
    date: datetime.date
    words_learned: int = 0
    entries_written: int = 0
    minutes_practiced: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


@dataclass(frozen=True)
class StreakResult:
    current: int
    longest: int
    last_active: Optional[datetime.date]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "longest": self.longest,
            "lastEntry": self.last_active.isoformat() if self.last_active else None,
        }


@dataclass
class ChartData:
    labels: List[str] = field(default_factory=list)
    words: List[int] = field(default_factory=list)
    entries: List[int] = field(default_factory=list)
    minutes: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "labels": self.labels,
            "datasets": {"words": self.words, "entries": self.entries, "minutes": self.minutes},
        }


@dataclass
class ImportStats:
    journal_entries: int = 0
    vocabulary: int = 0
    custom_phrases: int = 0
    notes: int = 0
    new_words: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "imported": {
                "journalEntries": self.journal_entries,
                "vocabulary": self.vocabulary,
                "customPhrases": self.custom_phrases,
                "notes": self.notes,
            },
            "newWords": self.new_words,
        }
        if self.errors:
            data["errors"] = self.errors
        return data


def _iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def word_to_dict(word: db.VocabularyWord) -> Dict[str, Any]:
    return {
        "id": word.id,
        "word": word.word,
        "first_seen": _iso(word.first_seen),
        "frequency": word.frequency,
        "last_reviewed": _iso(word.last_reviewed),
    }


def entry_to_dict(entry: db.JournalEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "english_text": entry.english_text,
        "german_text": entry.german_text,
        "word_count": entry.word_count,
        "session_duration": entry.session_duration,
        "created_at": _iso(entry.created_at),
    }


def phrase_to_dict(phrase: db.CustomPhrase) -> Dict[str, Any]:
    return {
        "id": phrase.id,
        "english": phrase.english,
        "german": phrase.german,
        "created_at": _iso(phrase.created_at),
        "times_reviewed": phrase.times_reviewed,
        "builtin": False,
    }


def note_to_dict(note: db.Note) -> Dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "created_at": _iso(note.created_at),
        "updated_at": _iso(note.updated_at),
    }


def settings_to_dict(settings: db.UserSettings) -> Dict[str, Any]:
    return {
        "daily_goal_minutes": settings.daily_goal_minutes,
        "daily_sentence_goal": settings.daily_sentence_goal,
        "theme": settings.theme,
    }
