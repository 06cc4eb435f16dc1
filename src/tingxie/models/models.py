"""Database models for the word store."""
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    String,
)

from tingxie.config import DEFAULT_EASE_FACTOR, DEFAULT_GROUP_TITLE
from tingxie.models.base import Base
from tingxie.models.word import WordRecord, to_utc


class TimestampMixin:
    """Mixin for adding created_at and updated_at timestamps."""

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


def _aware(value):
    # SQLite hands back naive datetimes even for timezone=True columns
    return to_utc(value) if value is not None else None


class Word(Base, TimestampMixin):
    """Stored word with its scheduling state."""

    __tablename__ = "words"

    pk = Column(Integer, primary_key=True, autoincrement=True)  # keeps insertion order
    id = Column(String, unique=True, nullable=False, index=True)
    text = Column(String, nullable=False)
    group_title = Column(String, nullable=False, default=DEFAULT_GROUP_TITLE, index=True)
    added_at = Column(DateTime(timezone=True), nullable=False)
    last_reviewed = Column(DateTime(timezone=True), nullable=True)
    next_review = Column(DateTime(timezone=True), nullable=False)
    streak = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False, default=DEFAULT_EASE_FACTOR)
    interval = Column(Integer, nullable=False, default=0)  # in days
    total_attempts = Column(Integer, nullable=False, default=0)
    total_wrong = Column(Integer, nullable=False, default=0)
    last_wrong_at = Column(DateTime(timezone=True), nullable=True)

    def to_record(self) -> WordRecord:
        """Convert the row to a validated WordRecord."""
        return WordRecord(
            id=self.id,
            text=self.text,
            group_title=self.group_title or DEFAULT_GROUP_TITLE,
            added_at=_aware(self.added_at),
            last_reviewed=_aware(self.last_reviewed),
            next_review=_aware(self.next_review),
            streak=self.streak,
            ease_factor=self.ease_factor,
            interval=self.interval,
            total_attempts=self.total_attempts or 0,
            total_wrong=self.total_wrong or 0,
            last_wrong_at=_aware(self.last_wrong_at),
        ).validate()

    def update_from_record(self, record: WordRecord) -> None:
        """Copy every field of ``record`` onto the row."""
        self.id = record.id
        self.text = record.text
        self.group_title = record.group_title
        self.added_at = record.added_at
        self.last_reviewed = record.last_reviewed
        self.next_review = record.next_review
        self.streak = record.streak
        self.ease_factor = record.ease_factor
        self.interval = record.interval
        self.total_attempts = record.total_attempts
        self.total_wrong = record.total_wrong
        self.last_wrong_at = record.last_wrong_at

    @classmethod
    def from_record(cls, record: WordRecord) -> "Word":
        word = cls()
        word.update_from_record(record)
        return word


class Preferences(Base, TimestampMixin):
    """Single row of stored overrides for the environment settings.

    A NULL column means the value comes from the environment.
    """

    __tablename__ = "preferences"

    id = Column(Integer, primary_key=True)
    order = Column(String, nullable=True)
    max_review_batch_size = Column(Integer, nullable=True)
    interval_seconds = Column(Integer, nullable=True)
    auto_repeat = Column(Integer, nullable=True)
    silence_threshold_ms = Column(Integer, nullable=True)
    last_reminder_time = Column(DateTime(timezone=True), nullable=True)
