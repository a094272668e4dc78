import json
from typing import Any, Optional

import llm  # type: ignore

from . import db

hookimpl = llm.hookimpl  # type: ignore


@hookimpl  # type: ignore[misc]
def register_commands(cli: Any) -> None:
    import click

    from .backup import export_data, import_data
    from .errors import DuplicateError, TagebuchError
    from .journal import JournalService
    from .progress import ProgressAggregator
    from .translation import create_translator
    from .vocabulary import add_word, list_words

    @cli.command("de-init-db")  # type: ignore[misc]
    def init_db() -> None:
        """Initialize the journal database."""
        db.init_db()
        click.echo("Database initialized.")

    @cli.command("de-add-entry")  # type: ignore[misc]
    @click.argument("english")
    @click.argument("german")
    @click.option("--minutes", default=0, type=int, help="Minutes spent writing the entry")
    def add_entry(english: str, german: str, minutes: int) -> None:
        """Save a journal entry and extract vocabulary from the German text."""
        try:
            saved = JournalService().create_entry(english, german, minutes)
        except TagebuchError as e:
            raise click.ClickException(str(e))
        click.echo(f"Entry #{saved.entry.id} saved ({saved.entry.word_count} words).")
        if saved.new_words:
            click.echo(f"{len(saved.new_words)} new words: " + ", ".join(w.word for w in saved.new_words))
        else:
            click.echo("No new words.")

    @cli.command("de-add-word")  # type: ignore[misc]
    @click.argument("word")
    def add_vocabulary_word(word: str) -> None:
        """Add a vocabulary word by hand."""
        try:
            row = add_word(word)
        except DuplicateError:
            click.echo(f"Word '{word}' already exists (skipped).")
            return
        except TagebuchError as e:
            raise click.ClickException(str(e))
        click.echo(f"Word '{row.word}' added.")

    @cli.command("de-vocab")  # type: ignore[misc]
    @click.option("--sort", default="newest", type=click.Choice(["newest", "az", "za", "frequency"]))
    @click.option("--search", default=None, help="Only words containing this text")
    @click.option("--limit", default=20, type=int, help="Maximum number of words to show")
    def show_vocabulary(sort: str, search: Optional[str], limit: int) -> None:
        """List vocabulary words."""
        words = list_words(sort=sort, search=search)
        if not words:
            click.echo("No vocabulary yet.")
            return
        for w in words[:limit]:
            click.echo(f"{w.word:<24} x{w.frequency:<4} first seen {w.first_seen:%Y-%m-%d}")
        if len(words) > limit:
            click.echo(f"... and {len(words) - limit} more")

    @cli.command("de-progress")  # type: ignore[misc]
    @click.option("--days", default=7, type=int, help="Number of days to show")
    def show_progress(days: int) -> None:
        """Show daily progress and the current streak."""
        aggregator = ProgressAggregator()
        try:
            history = aggregator.history(days)
        except TagebuchError as e:
            raise click.ClickException(str(e))
        for row in history:
            click.echo(
                f"{row.date.isoformat()}  words {row.words_learned:>3}  "
                f"entries {row.entries_written:>2}  minutes {row.minutes_practiced:>3}"
            )
        streak = aggregator.streak()
        click.echo(f"Streak: {streak.current} day(s), longest {streak.longest}")

    @cli.command("de-export")  # type: ignore[misc]
    @click.argument("path", type=click.Path(dir_okay=False, writable=True))
    def export_backup(path: str) -> None:
        """Write all data to a JSON backup file."""
        data = export_data()
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        click.echo(f"Exported {data['metadata']['totalEntries']} entries to {path}.")

    @cli.command("de-import")  # type: ignore[misc]
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    @click.option("--mode", default="merge", type=click.Choice(["merge", "replace"]))
    def import_backup(path: str, mode: str) -> None:
        """Load a JSON backup, replaying its journal entries."""
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
        try:
            stats = import_data(payload, mode=mode)
        except TagebuchError as e:
            raise click.ClickException(str(e))
        click.echo(
            f"Imported {stats.journal_entries} entries ({stats.new_words} new words), "
            f"{stats.vocabulary} extra words, {stats.custom_phrases} phrases, {stats.notes} notes."
        )
        for error in stats.errors:
            click.echo(f"  ! {error}")

    @cli.command("de-translate")  # type: ignore[misc]
    @click.argument("text")
    @click.option("--to", "target", default="German", type=click.Choice(["German", "English"]))
    @click.option("--model", default=None, help="Chat model used for translation")
    def translate(text: str, target: str, model: Optional[str]) -> None:
        """Translate text between English and German."""
        translator = create_translator(model_name=model)
        if translator is None:
            raise click.ClickException("Translation requires OPENAI_API_KEY to be set.")
        try:
            click.echo(translator.translate(text, target))
        except TagebuchError as e:
            raise click.ClickException(str(e))
