#!/usr/bin/env python3
"""Import a DeutschTagebuch JSON backup into the database.

Journal entries are replayed through the normal save path, so vocabulary
and daily progress are rebuilt from them.

Usage: python import_journal.py BACKUP.json [--mode merge|replace] [--db path]
"""
import sys, os, json, argparse, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from deutsch_tagebuch import db
from deutsch_tagebuch.backup import IMPORT_MODES, import_data
from deutsch_tagebuch.errors import TagebuchError


def main() -> None:
    parser = argparse.ArgumentParser(description="Import a DeutschTagebuch backup")
    parser.add_argument("backup", help="Path to the exported JSON file")
    parser.add_argument("--mode", choices=IMPORT_MODES, default="merge")
    parser.add_argument("--db", help="SQLite database path (default: $DT_DB or deutsch_tagebuch.db)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not os.path.exists(args.backup):
        print(f"❌ Backup not found: {args.backup}"); sys.exit(1)

    if args.db:
        db.use_database(args.db)
    db.init_db()

    with open(args.backup, encoding="utf-8") as f:
        payload = json.load(f)

    try:
        stats = import_data(payload, mode=args.mode)
    except TagebuchError as e:
        print(f"❌ Import failed: {e}"); sys.exit(1)

    print(f"\n📊 Imported {stats.journal_entries} entries ({stats.new_words} new words), "
          f"{stats.vocabulary} extra words, {stats.custom_phrases} phrases, {stats.notes} notes")
    for error in stats.errors:
        print(f"   ⚠️  {error}")


if __name__ == "__main__":
    main()
