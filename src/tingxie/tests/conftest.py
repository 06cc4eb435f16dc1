"""Test configuration."""
import os
from datetime import datetime, timedelta, UTC
from typing import Callable, Generator

import pytest
from faker import Faker
from sqlalchemy.orm import Session

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

# Import after environment setup
from tingxie.models import models  # noqa: F401  registers tables
from tingxie.models.base import Base, SessionLocal, engine
from tingxie.models.word import WordRecord, create_word_record

fake = Faker()

NOW = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """A fixed point in time for deterministic scheduling."""
    return NOW


@pytest.fixture
def make_word(now: datetime) -> Callable[..., WordRecord]:
    """Factory for word records; keyword arguments override fields."""
    def _make(text: str = None, group_title: str = "Unit 1", **changes) -> WordRecord:
        record = create_word_record(text or fake.unique.word(), group_title, now - timedelta(days=30))
        return record.copy(**changes) if changes else record
    return _make


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
