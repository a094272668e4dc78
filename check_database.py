#!/usr/bin/env python3
"""
Script to examine the contents of the journal database: vocabulary,
entries, daily progress and the current streak.
"""

import sys
import os

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from deutsch_tagebuch import db
from deutsch_tagebuch.errors import TagebuchError
from deutsch_tagebuch.progress import ProgressAggregator


def check_database_contents() -> None:
    """Print a summary of what is stored."""
    print("🔍 Examining DeutschTagebuch Database Contents")
    print("=" * 60)

    session = db.get_session()

    try:
        vocab_items: list[db.VocabularyWord] = session.query(db.VocabularyWord).order_by(db.VocabularyWord.id).all()
        print(f"\n📚 VOCABULARY ({len(vocab_items)} words):")
        for i, word in enumerate(vocab_items[-10:], 1):  # Show last 10
            print(f"  {i:2d}. {word.word} | seen {word.frequency}x | first seen {word.first_seen:%Y-%m-%d}")
        if len(vocab_items) > 10:
            print(f"     ... and {len(vocab_items) - 10} more words")

        top_words = session.query(db.VocabularyWord).order_by(db.VocabularyWord.frequency.desc()).limit(5).all()
        if top_words:
            print("   Most frequent:")
            for word in top_words:
                print(f"     - {word.word} ({word.frequency})")

        entries: list[db.JournalEntry] = session.query(db.JournalEntry).order_by(db.JournalEntry.created_at).all()
        print(f"\n📝 JOURNAL ENTRIES ({len(entries)} entries):")
        for entry in entries[-5:]:
            preview = entry.german_text if len(entry.german_text) <= 60 else entry.german_text[:57] + "..."
            print(f"  #{entry.id:<4} {entry.created_at:%Y-%m-%d %H:%M} | {entry.word_count} words | {preview}")

        progress: list[db.DailyProgress] = session.query(db.DailyProgress).order_by(db.DailyProgress.date).all()
        print(f"\n📈 DAILY PROGRESS ({len(progress)} days):")
        for row in progress[-7:]:
            print(f"  {row.date.isoformat()} | words {row.words_learned} | "
                  f"entries {row.entries_written} | minutes {row.minutes_practiced}")

        phrase_count = session.query(db.CustomPhrase).count()
        note_count = session.query(db.Note).count()
    except Exception as e:
        print(f"❌ Error examining database: {e}")
        return
    finally:
        session.close()

    try:
        streak = ProgressAggregator().streak()
    except TagebuchError as e:
        print(f"❌ Could not compute streak: {e}")
        return

    print(f"\n📊 SUMMARY:")
    print(f"     Vocabulary: {len(vocab_items)}")
    print(f"     Entries: {len(entries)}")
    print(f"     Custom phrases: {phrase_count}, notes: {note_count}")
    print(f"     Streak: {streak.current} day(s), longest {streak.longest}")


if __name__ == "__main__":
    # Check if database exists
    if not os.path.exists(db.DB_PATH):
        print(f"❌ Database file '{db.DB_PATH}' not found!")
        print("   Set DT_DB or run this from the directory that holds the database.")
        sys.exit(1)

    check_database_contents()
