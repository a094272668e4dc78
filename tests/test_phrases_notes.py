import datetime
from typing import Any

import pytest

from deutsch_tagebuch import notes, phrases
from deutsch_tagebuch.clock import FixedClock
from deutsch_tagebuch.errors import DuplicateError, NotFoundError, ValidationError


def test_builtin_phrases_listed_first(temp_db: Any, clock: FixedClock) -> None:
    phrases.add_phrase("See you soon", "Bis bald", clock)
    result = phrases.list_phrases()
    assert result["count"] == {"total": 9, "builtin": 8, "custom": 1}
    assert all(p["builtin"] for p in result["phrases"][:8])
    assert result["phrases"][-1]["german"] == "Bis bald"
    assert result["phrases"][-1]["builtin"] is False


def test_add_phrase_trims_and_rejects_duplicates(temp_db: Any, clock: FixedClock) -> None:
    phrase = phrases.add_phrase("  See you soon ", " Bis bald ", clock)
    assert (phrase.english, phrase.german) == ("See you soon", "Bis bald")
    assert phrase.times_reviewed == 0

    with pytest.raises(DuplicateError) as excinfo:
        phrases.add_phrase("Something else", "BIS BALD", clock)
    assert excinfo.value.existing.id == phrase.id


@pytest.mark.parametrize("english,german", [("", "Hallo"), ("Hello", None), ("  ", "  "), (1, "Hallo")])
def test_add_phrase_validation(temp_db: Any, english: Any, german: Any) -> None:
    with pytest.raises(ValidationError):
        phrases.add_phrase(english, german)


def test_review_phrase_counts(temp_db: Any, clock: FixedClock) -> None:
    phrase = phrases.add_phrase("Thank you", "Danke", clock)
    phrases.review_phrase(phrase.id)
    assert phrases.review_phrase(phrase.id).times_reviewed == 2

    with pytest.raises(NotFoundError):
        phrases.review_phrase(999)


def test_delete_phrase(temp_db: Any, clock: FixedClock) -> None:
    phrase = phrases.add_phrase("Thank you", "Danke", clock)
    phrases.delete_phrase(phrase.id)
    assert phrases.all_custom_phrases() == []
    with pytest.raises(NotFoundError):
        phrases.delete_phrase(phrase.id)


def test_note_lifecycle(temp_db: Any, clock: FixedClock) -> None:
    note = notes.create_note(" Akkusativ ", "durch, für, gegen, ohne, um", clock)
    assert note.title == "Akkusativ"
    assert note.created_at == note.updated_at == clock.now()

    clock.advance(hours=1)
    updated = notes.update_note(note.id, "Akkusativ", "durch, für, gegen, ohne, um, bis", clock)
    assert updated.content.endswith("bis")
    assert updated.updated_at == clock.now()
    assert updated.created_at == clock.now() - datetime.timedelta(hours=1)

    notes.delete_note(note.id)
    with pytest.raises(NotFoundError):
        notes.get_note(note.id)


def test_note_validation(temp_db: Any, clock: FixedClock) -> None:
    with pytest.raises(ValidationError):
        notes.create_note("Title", "   ", clock)
    with pytest.raises(NotFoundError):
        notes.update_note(42, "Title", "Content", clock)


def test_note_sorting(temp_db: Any, clock: FixedClock) -> None:
    notes.create_note("Beta", "b", clock)
    clock.advance(minutes=1)
    notes.create_note("Alpha", "a", clock)

    assert [n.title for n in notes.list_notes("az")] == ["Alpha", "Beta"]
    assert [n.title for n in notes.list_notes("oldest")] == ["Beta", "Alpha"]
    assert [n.title for n in notes.list_notes()] == ["Alpha", "Beta"]
