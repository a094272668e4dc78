from __future__ import annotations
from sqlalchemy import create_engine, Date, Integer, String, DateTime, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session, Mapped, mapped_column
import datetime
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from .errors import PersistenceError

DEBUG_MODE = os.getenv("DEBUG", "0") == "1"


class Base(DeclarativeBase):
    pass


DB_PATH: str = os.environ.get("DT_DB", "deutsch_tagebuch.db")
DB_TIMEOUT: float = float(os.environ.get("DT_DB_TIMEOUT", "30"))


def make_engine(path: str) -> Engine:
    """Create a SQLite engine with a busy timeout so concurrent writers wait instead of failing."""
    return create_engine(f"sqlite:///{path}", connect_args={"timeout": DB_TIMEOUT})


engine = make_engine(DB_PATH)
# Prevent attribute expiration on commit so returned objects remain accessible
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


class VocabularyWord(Base):
    __tablename__ = "vocabulary"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    word: Mapped[str] = mapped_column(String, nullable=False)  # surface form as first observed
    word_key: Mapped[str] = mapped_column(String, nullable=False, unique=True)  # lowercased word
    first_seen: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    frequency: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_reviewed: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, nullable=True)


class DailyProgress(Base):
    __tablename__ = "progress_stats"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, unique=True)
    words_learned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    entries_written: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    minutes_practiced: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class JournalEntry(Base):
    __tablename__ = "journal_entries"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    english_text: Mapped[str] = mapped_column(Text, nullable=False)
    german_text: Mapped[str] = mapped_column(Text, nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    session_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # minutes
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=datetime.datetime.now)


class CustomPhrase(Base):
    __tablename__ = "custom_phrases"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    english: Mapped[str] = mapped_column(Text, nullable=False)
    german: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=datetime.datetime.now)
    times_reviewed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Note(Base):
    __tablename__ = "notes"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=datetime.datetime.now)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=datetime.datetime.now)


class UserSettings(Base):
    __tablename__ = "user_settings"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    daily_goal_minutes: Mapped[int] = mapped_column(Integer, default=60)
    daily_sentence_goal: Mapped[int] = mapped_column(Integer, default=10)
    theme: Mapped[str] = mapped_column(String, default="light")


def is_db_initialized() -> bool:
    """Check if the database is already initialized by checking if tables exist."""
    inspector = inspect(engine)
    table_names = inspector.get_table_names()

    required_tables = {'vocabulary', 'progress_stats', 'journal_entries', 'custom_phrases', 'notes', 'user_settings'}
    return required_tables.issubset(set(table_names))


def init_db() -> None:
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=engine)


def use_database(path: str) -> None:
    """Point the module at a different SQLite file (used by the CLI flags)."""
    global engine, SessionLocal, DB_PATH
    DB_PATH = path
    engine = make_engine(path)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_session() -> Session:
    return SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that commits on success, rolls back on error and always closes.

    Database errors are re-raised as PersistenceError.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceError(str(e)) from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
