import json
from typing import Any

import click
from click.testing import CliRunner

from deutsch_tagebuch import plugin


def make_cli() -> click.Group:
    @click.group()
    def cli() -> None:
        pass

    plugin.register_commands(cli)
    return cli


def test_commands_registered() -> None:
    cli = make_cli()
    for name in ("de-init-db", "de-add-entry", "de-add-word", "de-vocab",
                 "de-progress", "de-export", "de-import", "de-translate"):
        assert name in cli.commands


def test_add_entry_and_vocab(temp_db: Any) -> None:
    cli = make_cli()
    runner = CliRunner()

    result = runner.invoke(cli, ["de-add-entry", "I have a garden", "Ich habe einen Garten", "--minutes", "5"])
    assert result.exit_code == 0, result.output
    assert "2 new words" in result.output

    result = runner.invoke(cli, ["de-add-word", "garten"])
    assert result.exit_code == 0
    assert "already exists" in result.output

    result = runner.invoke(cli, ["de-vocab", "--sort", "az"])
    assert result.exit_code == 0
    assert "Garten" in result.output


def test_add_entry_validation_error(temp_db: Any) -> None:
    result = CliRunner().invoke(make_cli(), ["de-add-entry", "", "Hallo"])
    assert result.exit_code != 0
    assert "required" in result.output


def test_progress_command(temp_db: Any) -> None:
    cli = make_cli()
    runner = CliRunner()
    runner.invoke(cli, ["de-add-entry", "Hello", "Hallo zusammen", "--minutes", "12"])

    result = runner.invoke(cli, ["de-progress", "--days", "3"])
    assert result.exit_code == 0
    assert len([line for line in result.output.splitlines() if "entries" in line]) == 3
    assert "Streak: 1 day(s)" in result.output

    result = runner.invoke(cli, ["de-progress", "--days", "0"])
    assert result.exit_code != 0


def test_export_then_import(temp_db: Any, tmp_path: Any) -> None:
    cli = make_cli()
    runner = CliRunner()
    runner.invoke(cli, ["de-add-entry", "Hello", "Hallo zusammen"])
    backup = tmp_path / "backup.json"

    result = runner.invoke(cli, ["de-export", str(backup)])
    assert result.exit_code == 0
    assert json.loads(backup.read_text(encoding="utf-8"))["metadata"]["totalEntries"] == 1

    result = runner.invoke(cli, ["de-import", str(backup), "--mode", "replace"])
    assert result.exit_code == 0, result.output
    assert "Imported 1 entries (2 new words)" in result.output


def test_translate_without_key(monkeypatch: Any) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    result = CliRunner().invoke(make_cli(), ["de-translate", "Hello"])
    assert result.exit_code != 0
    assert "OPENAI_API_KEY" in result.output
