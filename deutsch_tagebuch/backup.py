"""
Export, import and wipe of all user data.

Imports never write vocabulary counters or daily progress rows directly.
Journal entries are replayed one at a time through the same
JournalService used for live entries, so imported data obeys the same
deduplication and aggregation rules. The exported progressStats are
informational and are rebuilt by the replay.
"""

import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from . import db
from .clock import Clock, SystemClock
from .errors import TagebuchError, ValidationError
from .journal import JournalService
from .settings import get_settings, update_settings
from .stores import word_key
from .structured import (
    ImportStats, entry_to_dict, note_to_dict, phrase_to_dict, settings_to_dict, word_to_dict,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
CLEAR_CONFIRMATION = "DELETE_ALL_DATA"
IMPORT_MODES = ("merge", "replace")


def _parse_datetime(value: Any) -> Optional[datetime.datetime]:
    """ISO timestamps to naive server-local datetimes; None for missing or bad values."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def export_data(clock: Optional[Clock] = None) -> Dict[str, Any]:
    with db.session_scope() as session:
        entries = list(session.scalars(select(db.JournalEntry).order_by(db.JournalEntry.created_at)))
        words = list(session.scalars(select(db.VocabularyWord).order_by(db.VocabularyWord.first_seen)))
        phrases = list(session.scalars(select(db.CustomPhrase).order_by(db.CustomPhrase.created_at)))
        notes = list(session.scalars(select(db.Note).order_by(db.Note.created_at)))
        progress = list(session.scalars(select(db.DailyProgress).order_by(db.DailyProgress.date)))
    settings = get_settings()

    progress_stats = [{
        "date": row.date.isoformat(),
        "words_learned": row.words_learned,
        "entries_written": row.entries_written,
        "minutes_practiced": row.minutes_practiced,
    } for row in progress]

    return {
        "version": EXPORT_VERSION,
        "exportDate": (clock or SystemClock()).now().isoformat(),
        "data": {
            "journalEntries": [entry_to_dict(e) for e in entries],
            "vocabulary": [word_to_dict(w) for w in words],
            "customPhrases": [phrase_to_dict(p) for p in phrases],
            "notes": [note_to_dict(n) for n in notes],
            "settings": settings_to_dict(settings),
            "progressStats": progress_stats,
        },
        "metadata": {
            "totalEntries": len(entries),
            "totalVocabulary": len(words),
            "totalCustomPhrases": len(phrases),
            "totalNotes": len(notes),
            "totalProgressDays": len(progress_stats),
        },
    }


def clear_all_data() -> None:
    with db.session_scope() as session:
        for model in (db.JournalEntry, db.VocabularyWord, db.CustomPhrase, db.Note, db.DailyProgress):
            session.execute(delete(model))
    logger.info("All user data cleared")


def clear_data(confirm: Any) -> None:
    if confirm != CLEAR_CONFIRMATION:
        raise ValidationError(f'Confirmation required. Send {{ "confirm": "{CLEAR_CONFIRMATION}" }}')
    clear_all_data()


def _entry_exists(created_at: datetime.datetime, german_text: str) -> bool:
    with db.session_scope() as session:
        return session.scalars(
            select(db.JournalEntry.id)
            .where(db.JournalEntry.created_at == created_at, db.JournalEntry.german_text == german_text)
        ).first() is not None


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _restore_word_history(
    session: Session,
    key: str,
    first_seen: Optional[datetime.datetime],
    last_reviewed: Optional[datetime.datetime],
) -> None:
    """Carry a backed-up word's dates over to the row the replay produced."""
    row = session.scalars(select(db.VocabularyWord).where(db.VocabularyWord.word_key == key)).first()
    if row is None:
        return
    if first_seen is not None and first_seen < row.first_seen:
        row.first_seen = first_seen
    if last_reviewed is not None and (row.last_reviewed is None or last_reviewed > row.last_reviewed):
        row.last_reviewed = last_reviewed


def _list(section: Dict[str, Any], key: str) -> List[Any]:
    items = section.get(key)
    return items if isinstance(items, list) else []


def import_data(payload: Any, mode: str = "merge", service: Optional[JournalService] = None) -> ImportStats:
    """
    Load a backup produced by `export_data`.

    merge   keeps existing data; entries already present (same timestamp
            and German text) are skipped, as are identical phrases and
            notes.
    replace wipes everything first.

    Bad items are skipped and reported in `errors`; the rest still load.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise ValidationError("Invalid import data format")
    if mode not in IMPORT_MODES:
        raise ValidationError(f"mode must be one of: {', '.join(IMPORT_MODES)}")
    section: Dict[str, Any] = payload["data"]
    service = service or JournalService()
    stats = ImportStats()

    if mode == "replace":
        clear_all_data()

    # Journal entries first: replaying them rebuilds vocabulary and daily progress
    entries = [e for e in _list(section, "journalEntries") if isinstance(e, dict)]
    entries.sort(key=lambda e: str(e.get("created_at") or ""))
    for item in entries:
        created_at = _parse_datetime(item.get("created_at")) or service.clock.now()
        german = item.get("german_text")
        if mode == "merge" and isinstance(german, str) and _entry_exists(created_at, german):
            continue
        try:
            saved = service.create_entry(
                item.get("english_text"), german, item.get("session_duration"), created_at=created_at,
            )
        except TagebuchError as e:
            stats.errors.append(f"Journal entry error: {e}")
            continue
        stats.journal_entries += 1
        stats.new_words += len(saved.new_words)

    # Words the replay did not produce, e.g. ones added by hand. Words it did
    # produce get their backed-up first_seen/last_reviewed back.
    table = db.VocabularyWord.__table__
    for item in _list(section, "vocabulary"):
        word = item.get("word") if isinstance(item, dict) else None
        if not isinstance(word, str) or not word.strip():
            stats.errors.append("Vocabulary error: missing word")
            continue
        first_seen = _parse_datetime(item.get("first_seen"))
        last_reviewed = _parse_datetime(item.get("last_reviewed"))
        stmt = sqlite_insert(table).values(
            word=word.strip(),
            word_key=word_key(word),
            first_seen=first_seen or service.clock.now(),
            frequency=max(1, _int(item.get("frequency"), 1)),
            last_reviewed=last_reviewed,
        ).on_conflict_do_nothing(index_elements=[table.c.word_key])
        try:
            with db.session_scope() as session:
                inserted = session.execute(stmt).rowcount
                if not inserted:
                    _restore_word_history(session, word_key(word), first_seen, last_reviewed)
        except TagebuchError as e:
            stats.errors.append(f"Vocabulary error: {e}")
            continue
        stats.vocabulary += inserted

    for item in _list(section, "customPhrases"):
        if not isinstance(item, dict) or not item.get("english") or not item.get("german"):
            stats.errors.append("Phrase error: english and german are required")
            continue
        english, german = str(item["english"]).strip(), str(item["german"]).strip()
        try:
            with db.session_scope() as session:
                added = False
                exists = session.scalars(select(db.CustomPhrase.id).where(
                    db.CustomPhrase.english == english, db.CustomPhrase.german == german,
                )).first()
                if exists is None:
                    session.add(db.CustomPhrase(
                        english=english,
                        german=german,
                        created_at=_parse_datetime(item.get("created_at")) or service.clock.now(),
                        times_reviewed=max(0, _int(item.get("times_reviewed"), 0)),
                    ))
                    added = True
        except TagebuchError as e:
            stats.errors.append(f"Phrase error: {e}")
            continue
        stats.custom_phrases += int(added)

    for item in _list(section, "notes"):
        if not isinstance(item, dict) or not item.get("title") or not item.get("content"):
            stats.errors.append("Note error: title and content are required")
            continue
        title, content = str(item["title"]).strip(), str(item["content"]).strip()
        created = _parse_datetime(item.get("created_at")) or service.clock.now()
        try:
            with db.session_scope() as session:
                added = False
                exists = session.scalars(select(db.Note.id).where(
                    db.Note.title == title, db.Note.content == content, db.Note.created_at == created,
                )).first()
                if exists is None:
                    session.add(db.Note(
                        title=title,
                        content=content,
                        created_at=created,
                        updated_at=_parse_datetime(item.get("updated_at")) or created,
                    ))
                    added = True
        except TagebuchError as e:
            stats.errors.append(f"Note error: {e}")
            continue
        stats.notes += int(added)

    settings = section.get("settings")
    if isinstance(settings, dict) and settings:
        try:
            update_settings(settings)
        except ValidationError as e:
            stats.errors.append(f"Settings error: {e}")

    logger.info(
        "Import finished (%s): %d entries, %d words, %d phrases, %d notes, %d errors",
        mode, stats.journal_entries, stats.vocabulary, stats.custom_phrases, stats.notes, len(stats.errors),
    )
    return stats
