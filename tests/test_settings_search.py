from typing import Any

import pytest

from deutsch_tagebuch import settings
from deutsch_tagebuch.clock import FixedClock
from deutsch_tagebuch.errors import ValidationError
from deutsch_tagebuch.journal import JournalService
from deutsch_tagebuch.search import search_all
from deutsch_tagebuch.structured import settings_to_dict


def test_settings_defaults(temp_db: Any) -> None:
    assert settings_to_dict(settings.get_settings()) == {
        "daily_goal_minutes": 60, "daily_sentence_goal": 10, "theme": "light",
    }
    # Only one row is ever created
    assert settings.get_settings().id == settings.get_settings().id


def test_update_settings_partial(temp_db: Any) -> None:
    settings.update_settings({"theme": "dark"})
    updated = settings.update_settings({"daily_goal_minutes": "45"})
    assert (updated.theme, updated.daily_goal_minutes, updated.daily_sentence_goal) == ("dark", 45, 10)


@pytest.mark.parametrize("values", [
    {"theme": "solarized"},
    {"daily_goal_minutes": 0},
    {"daily_sentence_goal": "many"},
])
def test_update_settings_validation(temp_db: Any, values: dict) -> None:
    with pytest.raises(ValidationError):
        settings.update_settings(values)
    assert settings.get_settings().theme == "light"


def test_search_all(temp_db: Any, clock: FixedClock) -> None:
    saved = JournalService(clock=clock).create_entry(
        "I go to the park today. The weather is nice.",
        "Ich gehe heute in den Park. Das Wetter ist schön.",
    )
    result = search_all("park")
    entry_id = saved.entry.id

    assert [w["word"] for w in result["vocabulary"]] == ["Park"]
    assert result["journal_sentences"] == [
        {"id": str(entry_id), "sentence": "Ich gehe heute in den Park.", "language": "german",
         "date": clock.now().isoformat(), "entry_id": entry_id},
        {"id": f"{entry_id}-en", "sentence": "I go to the park today.", "language": "english",
         "date": clock.now().isoformat(), "entry_id": entry_id},
    ]
    assert result["counts"] == {"vocabulary": 1, "journal_sentences": 2}


def test_search_requires_query(temp_db: Any) -> None:
    with pytest.raises(ValidationError):
        search_all("  ")
    with pytest.raises(ValidationError):
        search_all(None)
