#!/usr/bin/env python3
"""
DeutschTagebuch - Flask JSON API
Journal entries, vocabulary mining, progress statistics, phrases, notes,
search, settings, backups and translation.
"""

import os
import sys
import json
import logging
import argparse
import datetime
from typing import Any, Optional, Tuple

from flask import Flask, Response, jsonify, request

# Check for test mode
TEST_MODE = os.environ.get("TEST_MODE", "0") == "1"
# Check for debug mode
DEBUG = os.environ.get("DEBUG", "0") == "1"

logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("deutsch_tagebuch.app")

# Add the current directory to the path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from deutsch_tagebuch import db, notes, phrases, settings as user_settings, vocabulary
from deutsch_tagebuch.backup import clear_data, export_data, import_data
from deutsch_tagebuch.clock import SystemClock
from deutsch_tagebuch.errors import (
    DuplicateError, NotFoundError, PersistenceError, TagebuchError, TranslationError, ValidationError,
)
from deutsch_tagebuch.journal import JournalService, summarize
from deutsch_tagebuch.search import search_all
from deutsch_tagebuch.structured import entry_to_dict, note_to_dict, phrase_to_dict, settings_to_dict, word_to_dict
from deutsch_tagebuch.translation import Translator, create_translator

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "deutsch-tagebuch-dev")

clock = SystemClock()
journal_service = JournalService(clock=clock)
aggregator = journal_service.aggregator

# Global translation client, None until configured
translator: Optional[Translator] = None


def init_translation(api_key: Optional[str] = None,
                     base_url: Optional[str] = None,
                     model_name: Optional[str] = None) -> None:
    """Initialize the translation client."""
    global translator
    if TEST_MODE:
        return
    translator = create_translator(api_key=api_key, base_url=base_url, model_name=model_name)


init_translation()


def ok(data: Any = None, status: int = 200, **extra: Any) -> Tuple[Response, int]:
    payload = {"success": True}
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status


def fail(message: str, status: int, **extra: Any) -> Tuple[Response, int]:
    payload = {"success": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def parse_date(value: Optional[str], name: str) -> Optional[datetime.date]:
    if not value:
        return None
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


@app.errorhandler(ValidationError)
def handle_validation_error(e: ValidationError) -> Any:
    return fail(str(e), 400)


@app.errorhandler(NotFoundError)
def handle_not_found(e: NotFoundError) -> Any:
    return fail(str(e), 404)


@app.errorhandler(DuplicateError)
def handle_duplicate(e: DuplicateError) -> Any:
    existing = e.existing
    data = None
    if isinstance(existing, db.VocabularyWord):
        data = word_to_dict(existing)
    elif isinstance(existing, db.CustomPhrase):
        data = phrase_to_dict(existing)
    return fail(str(e), 409, data=data)


@app.errorhandler(TranslationError)
def handle_translation_error(e: TranslationError) -> Any:
    logger.error("Translation failed: %s", e)
    return fail(str(e), 502)


@app.errorhandler(PersistenceError)
def handle_persistence_error(e: PersistenceError) -> Any:
    logger.error("Database error on %s %s: %s", request.method, request.path, e)
    return fail("Database error", 500)


@app.before_request
def initialize_app() -> None:
    """Initialize the database if needed."""
    if not hasattr(app, '_database_initialized'):
        try:
            if not db.is_db_initialized():
                db.init_db()
                logger.info("Database initialized on startup")
        except Exception as e:
            logger.error("Database startup check failed: %s", e)
        setattr(app, "_database_initialized", True)


# ── Journal ──────────────────────────────────────────────────────────

@app.route('/api/journal/entries')
def list_entries() -> Any:
    page = journal_service.list_entries(
        page=request.args.get("page", 1, type=int),
        limit=request.args.get("limit", 20, type=int),
        sort=request.args.get("sort", "newest"),
    )
    return ok(
        [entry_to_dict(e) for e in page.entries],
        pagination={"page": page.page, "limit": page.limit, "total": page.total, "pages": page.pages},
    )


@app.route('/api/journal/entry/<int:entry_id>')
def get_entry(entry_id: int) -> Any:
    return ok(entry_to_dict(journal_service.get_entry(entry_id)))


@app.route('/api/journal/entry', methods=['POST'])
def create_entry() -> Any:
    body = json_body()
    saved = journal_service.create_entry(
        body.get("english_text"), body.get("german_text"), body.get("session_duration"),
    )
    return ok(summarize(saved), 201)


@app.route('/api/journal/entry/<int:entry_id>', methods=['PUT'])
def update_entry(entry_id: int) -> Any:
    body = json_body()
    saved = journal_service.update_entry(entry_id, body.get("english_text"), body.get("german_text"))
    return ok(summarize(saved))


@app.route('/api/journal/entry/<int:entry_id>', methods=['DELETE'])
def delete_entry(entry_id: int) -> Any:
    journal_service.delete_entry(entry_id)
    return ok(message="Journal entry deleted successfully")


@app.route('/api/journal/search')
def search_entries() -> Any:
    results = journal_service.search(
        q=request.args.get("q"),
        start_date=parse_date(request.args.get("startDate"), "startDate"),
        end_date=parse_date(request.args.get("endDate"), "endDate"),
    )
    return ok([entry_to_dict(e) for e in results], count=len(results))


# ── Vocabulary ───────────────────────────────────────────────────────

@app.route('/api/vocabulary')
def list_vocabulary() -> Any:
    words = vocabulary.list_words(sort=request.args.get("sort", "newest"), search=request.args.get("search"))
    return ok([word_to_dict(w) for w in words], count=len(words))


@app.route('/api/vocabulary/stats')
def vocabulary_stats() -> Any:
    return ok(vocabulary.get_vocabulary_stats(clock))


@app.route('/api/vocabulary', methods=['POST'])
def add_vocabulary_word() -> Any:
    row = vocabulary.add_word(json_body().get("word"), clock=clock)
    return ok(word_to_dict(row), 201)


@app.route('/api/vocabulary/<int:word_id>', methods=['DELETE'])
def delete_vocabulary_word(word_id: int) -> Any:
    vocabulary.delete_word(word_id)
    return ok(message="Vocabulary word deleted successfully")


@app.route('/api/vocabulary/<int:word_id>/review', methods=['PUT'])
def review_vocabulary_word(word_id: int) -> Any:
    row = vocabulary.mark_reviewed(word_id, clock)
    return ok(word_to_dict(row), message="Word marked as reviewed")


# ── Progress ─────────────────────────────────────────────────────────

@app.route('/api/progress/stats')
def progress_stats() -> Any:
    return ok(aggregator.overall_stats())


@app.route('/api/progress/streak')
def progress_streak() -> Any:
    return ok(aggregator.streak().to_dict())


@app.route('/api/progress/history')
def progress_history() -> Any:
    days = request.args.get("days", 7, type=int)
    return ok([row.to_dict() for row in aggregator.history(days)])


@app.route('/api/progress/chart-data')
def progress_chart_data() -> Any:
    days = request.args.get("days", 7, type=int)
    return ok(aggregator.chart_data(days).to_dict())


@app.route('/api/progress/active-days')
def progress_active_days() -> Any:
    return ok(aggregator.active_days())


# ── Phrases ──────────────────────────────────────────────────────────

@app.route('/api/phrases')
def list_phrases() -> Any:
    result = phrases.list_phrases()
    return ok(result["phrases"], count=result["count"])


@app.route('/api/phrases', methods=['POST'])
def add_phrase() -> Any:
    body = json_body()
    phrase = phrases.add_phrase(body.get("english"), body.get("german"), clock)
    return ok(phrase_to_dict(phrase), 201)


@app.route('/api/phrases/<int:phrase_id>', methods=['DELETE'])
def delete_phrase(phrase_id: int) -> Any:
    phrases.delete_phrase(phrase_id)
    return ok(message="Custom phrase deleted successfully")


@app.route('/api/phrases/<int:phrase_id>/review', methods=['PUT'])
def review_phrase(phrase_id: int) -> Any:
    phrase = phrases.review_phrase(phrase_id)
    return ok(phrase_to_dict(phrase), message="Phrase review count updated")


# ── Notes ────────────────────────────────────────────────────────────

@app.route('/api/notes')
def list_notes() -> Any:
    rows = notes.list_notes(request.args.get("sort", "newest"))
    return ok([note_to_dict(n) for n in rows], count=len(rows))


@app.route('/api/notes/<int:note_id>')
def get_note(note_id: int) -> Any:
    return ok(note_to_dict(notes.get_note(note_id)))


@app.route('/api/notes', methods=['POST'])
def create_note() -> Any:
    body = json_body()
    return ok(note_to_dict(notes.create_note(body.get("title"), body.get("content"), clock)), 201)


@app.route('/api/notes/<int:note_id>', methods=['PUT'])
def update_note(note_id: int) -> Any:
    body = json_body()
    return ok(note_to_dict(notes.update_note(note_id, body.get("title"), body.get("content"), clock)))


@app.route('/api/notes/<int:note_id>', methods=['DELETE'])
def delete_note(note_id: int) -> Any:
    notes.delete_note(note_id)
    return ok(message="Note deleted successfully")


# ── Search / settings / data ─────────────────────────────────────────

@app.route('/api/search')
def unified_search() -> Any:
    return ok(search_all(request.args.get("q")))


@app.route('/api/settings')
def get_settings() -> Any:
    return ok(settings_to_dict(user_settings.get_settings()))


@app.route('/api/settings', methods=['PUT'])
def update_settings() -> Any:
    return ok(settings_to_dict(user_settings.update_settings(json_body())))


@app.route('/api/data/export')
def export_backup() -> Any:
    data = export_data(clock)
    filename = f"deutschtagebuch-backup-{clock.today().isoformat()}.json"
    return Response(
        json.dumps(data, ensure_ascii=False, indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.route('/api/data/import', methods=['POST'])
def import_backup() -> Any:
    body = json_body()
    stats = import_data(body.get("data"), mode=body.get("mode") or "merge", service=journal_service)
    return ok(message="Data imported successfully", stats=stats.to_dict())


@app.route('/api/data/clear', methods=['DELETE'])
def clear_backup() -> Any:
    clear_data(json_body().get("confirm"))
    return ok(message="All data cleared successfully")


# ── Translation ──────────────────────────────────────────────────────

@app.route('/api/translate', methods=['POST'])
def translate() -> Any:
    if translator is None:
        return fail("Translation is not configured", 503)
    body = json_body()
    target = body.get("target") or "German"
    text = translator.translate(body.get("text"), target)
    return ok({"translation": text, "target": target})


@app.route('/ai_status')
def ai_status() -> Any:
    return jsonify({"translation_enabled": translator is not None,
                    "model": translator.model_name if translator else None})


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='DeutschTagebuch Web App')
    parser.add_argument('--host', default='127.0.0.1', help='Host IP to bind to (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=5000, help='Port to bind to (default: 5000)')
    parser.add_argument('--db', help='SQLite database path (default: $DT_DB or deutsch_tagebuch.db)')
    parser.add_argument('--openai-key', help='OpenAI API Key')
    parser.add_argument('--openrouter-key', help='OpenRouter API Key (overrides OpenAI key)')
    parser.add_argument('--model', help='Translation model name')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    if args.debug:
        DEBUG = True
        logging.getLogger().setLevel(logging.DEBUG)

    if args.db:
        db.use_database(args.db)

    if args.openai_key or args.openrouter_key or args.model:
        api_key = args.openrouter_key or args.openai_key
        base_url = "https://openrouter.ai/api/v1" if args.openrouter_key else None
        init_translation(api_key=api_key, base_url=base_url, model_name=args.model)

    # Initialize database
    try:
        if not db.is_db_initialized():
            db.init_db()
            logger.info("Database initialized")
    except TagebuchError as e:
        logger.error("Database initialization failed: %s", e)

    logger.info("Starting server on http://%s:%s", args.host, args.port)
    app.run(debug=DEBUG, host=args.host, port=args.port)
