from typing import Any, Dict, List

from sqlalchemy import or_, select

from . import db
from .errors import ValidationError
from .structured import word_to_dict
from .text import extract_sentences_with_term

RESULT_LIMIT = 50


def search_all(q: Any) -> Dict[str, Any]:
    """Search vocabulary and journal text for `q`.

    Journal hits are broken down to the individual sentences that
    contain the term, German sentences first for each entry.
    """
    if not isinstance(q, str) or not q.strip():
        raise ValidationError("Search query is required")
    term = q.strip()

    with db.session_scope() as session:
        words = list(session.scalars(
            select(db.VocabularyWord)
            .where(db.VocabularyWord.word_key.contains(term.lower(), autoescape=True))
            .order_by(db.VocabularyWord.frequency.desc())
            .limit(RESULT_LIMIT)
        ))
        entries = list(session.scalars(
            select(db.JournalEntry)
            .where(or_(
                db.JournalEntry.english_text.icontains(term, autoescape=True),
                db.JournalEntry.german_text.icontains(term, autoescape=True),
            ))
            .order_by(db.JournalEntry.created_at.desc())
            .limit(RESULT_LIMIT)
        ))

    sentences: List[Dict[str, Any]] = []
    for entry in entries:
        date = entry.created_at.isoformat() if entry.created_at else None
        for sentence in extract_sentences_with_term(entry.german_text, term):
            sentences.append({"id": str(entry.id), "sentence": sentence, "language": "german",
                              "date": date, "entry_id": entry.id})
        for sentence in extract_sentences_with_term(entry.english_text, term):
            sentences.append({"id": f"{entry.id}-en", "sentence": sentence, "language": "english",
                              "date": date, "entry_id": entry.id})

    return {
        "vocabulary": [word_to_dict(w) for w in words],
        "journal_sentences": sentences,
        "counts": {"vocabulary": len(words), "journal_sentences": len(sentences)},
    }
