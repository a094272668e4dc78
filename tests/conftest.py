import datetime
import os
import tempfile
from typing import Generator

import pytest
from sqlalchemy.orm import sessionmaker

from deutsch_tagebuch import db
from deutsch_tagebuch.clock import FixedClock


@pytest.fixture(scope="function")
def temp_db() -> Generator[str, None, None]:
    """Setup transient SQLite DB for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    old_engine, old_session = db.engine, db.SessionLocal
    db.engine = db.make_engine(path)
    db.SessionLocal = sessionmaker(bind=db.engine, expire_on_commit=False)
    db.Base.metadata.create_all(bind=db.engine)
    yield path
    db.engine.dispose()
    db.engine, db.SessionLocal = old_engine, old_session
    os.unlink(path)


@pytest.fixture
def clock() -> FixedClock:
    # A Friday
    return FixedClock(datetime.datetime(2024, 3, 15, 10, 0))
