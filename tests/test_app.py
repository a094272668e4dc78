"""
Tests for the DeutschTagebuch Flask API
Requests go through the Flask test client against a temporary database
"""

import os
from types import SimpleNamespace
from typing import Any, Generator

import pytest

os.environ["TEST_MODE"] = "1"

import app as app_module  # noqa: E402
from deutsch_tagebuch.translation import Translator  # noqa: E402


@pytest.fixture
def client(temp_db: Any) -> Generator[Any, None, None]:
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as client:
        yield client


def post_entry(client: Any, english: str = "I have a garden.", german: str = "Ich habe einen Garten.",
               minutes: Any = 10) -> Any:
    return client.post("/api/journal/entry", json={
        "english_text": english, "german_text": german, "session_duration": minutes,
    })


def test_create_entry(client: Any) -> None:
    response = post_entry(client)
    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["data"]["word_count"] == 4
    assert sorted(w["word"] for w in body["data"]["new_words"]) == ["Garten", "habe"]


def test_create_entry_validation(client: Any) -> None:
    response = client.post("/api/journal/entry", json={"english_text": "Only English"})
    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": "Both English and German text are required"}


def test_entry_not_found(client: Any) -> None:
    assert client.get("/api/journal/entry/999").status_code == 404
    assert client.delete("/api/journal/entry/999").status_code == 404


def test_entries_list_and_update(client: Any) -> None:
    entry_id = post_entry(client).get_json()["data"]["id"]
    post_entry(client, "Hello", "Hallo zusammen")

    body = client.get("/api/journal/entries?limit=1").get_json()
    assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

    response = client.put(f"/api/journal/entry/{entry_id}", json={"german_text": "Ich habe einen Garten mit Blumen."})
    assert response.status_code == 200
    assert [w["word"] for w in response.get_json()["data"]["new_words"]] == ["Blumen"]


def test_journal_search(client: Any) -> None:
    post_entry(client)
    body = client.get("/api/journal/search?q=garten").get_json()
    assert body["count"] == 1
    assert client.get("/api/journal/search").status_code == 400
    assert client.get("/api/journal/search?startDate=yesterday").status_code == 400


def test_vocabulary_endpoints(client: Any) -> None:
    post_entry(client)
    body = client.get("/api/vocabulary?sort=az").get_json()
    assert [w["word"] for w in body["data"]] == ["Garten", "habe"]

    response = client.post("/api/vocabulary", json={"word": "GARTEN"})
    assert response.status_code == 409
    assert response.get_json()["data"]["word"] == "Garten"

    response = client.post("/api/vocabulary", json={"word": "Bibliothek"})
    assert response.status_code == 201
    word_id = response.get_json()["data"]["id"]

    assert client.put(f"/api/vocabulary/{word_id}/review").status_code == 200
    assert client.delete(f"/api/vocabulary/{word_id}").status_code == 200
    assert client.delete(f"/api/vocabulary/{word_id}").status_code == 404
    assert client.get("/api/vocabulary/stats").get_json()["data"]["total"] == 2


def test_progress_endpoints(client: Any) -> None:
    post_entry(client, minutes=10)
    post_entry(client, "Hello", "Hallo zusammen", minutes=15)

    history = client.get("/api/progress/history").get_json()["data"]
    assert len(history) == 7
    assert history[-1]["entries_written"] == 2
    assert history[-1]["minutes_practiced"] == 25
    assert history[-1]["words_learned"] == 4

    assert client.get("/api/progress/history?days=0").status_code == 400

    streak = client.get("/api/progress/streak").get_json()["data"]
    assert streak["current"] == 1
    assert streak["longest"] == 1

    chart = client.get("/api/progress/chart-data?days=3").get_json()["data"]
    assert len(chart["labels"]) == 3
    assert chart["datasets"]["entries"][-1] == 2

    stats = client.get("/api/progress/stats").get_json()["data"]
    assert stats["entries"]["total"] == 2
    assert stats["time"]["total"] == 25
    assert client.get("/api/progress/active-days").get_json()["data"]["activeDays"] == 1


def test_phrases_and_notes(client: Any) -> None:
    response = client.post("/api/phrases", json={"english": "See you", "german": "Bis dann"})
    assert response.status_code == 201
    assert client.post("/api/phrases", json={"english": "See you", "german": "Tschüss"}).status_code == 409
    assert client.get("/api/phrases").get_json()["count"]["custom"] == 1

    response = client.post("/api/notes", json={"title": "Dativ", "content": "mit, nach, bei"})
    assert response.status_code == 201
    note_id = response.get_json()["data"]["id"]
    assert client.put(f"/api/notes/{note_id}", json={"title": "Dativ", "content": ""}).status_code == 400
    assert client.get(f"/api/notes/{note_id}").get_json()["data"]["title"] == "Dativ"


def test_search_and_settings(client: Any) -> None:
    post_entry(client)
    body = client.get("/api/search?q=Garten").get_json()["data"]
    assert body["counts"]["vocabulary"] == 1
    assert client.get("/api/search").status_code == 400

    assert client.get("/api/settings").get_json()["data"]["theme"] == "light"
    assert client.put("/api/settings", json={"theme": "dark"}).get_json()["data"]["theme"] == "dark"
    assert client.put("/api/settings", json={"theme": "neon"}).status_code == 400


def test_export_import_clear(client: Any) -> None:
    post_entry(client)
    response = client.get("/api/data/export")
    assert response.status_code == 200
    assert "attachment; filename=deutschtagebuch-backup-" in response.headers["Content-Disposition"]
    exported = response.get_json()

    assert client.delete("/api/data/clear", json={}).status_code == 400
    assert client.delete("/api/data/clear", json={"confirm": "DELETE_ALL_DATA"}).status_code == 200
    assert client.get("/api/vocabulary").get_json()["count"] == 0

    response = client.post("/api/data/import", json={"data": exported, "mode": "replace"})
    assert response.status_code == 200
    assert response.get_json()["stats"]["imported"]["journalEntries"] == 1
    assert client.get("/api/vocabulary").get_json()["count"] == 2

    assert client.post("/api/data/import", json={"data": "nope"}).status_code == 400


def test_translate(client: Any, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_module, "translator", None)
    assert client.post("/api/translate", json={"text": "Hello"}).status_code == 503

    def create(**kwargs: Any) -> Any:
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="Hallo"))])

    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    monkeypatch.setattr(app_module, "translator", Translator(fake_client, "test-model"))

    response = client.post("/api/translate", json={"text": "Hello"})
    assert response.status_code == 200
    assert response.get_json()["data"] == {"translation": "Hallo", "target": "German"}
    assert client.post("/api/translate", json={"text": ""}).status_code == 400
    assert client.get("/ai_status").get_json()["translation_enabled"] is True
