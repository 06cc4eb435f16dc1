"""Service for managing stored words."""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from tingxie import monitoring
from tingxie.errors import GroupNotFoundError
from tingxie.models.models import Word
from tingxie.models.word import WordRecord, create_word_record

logger = logging.getLogger(__name__)


def _clean_texts(texts: Iterable[str]) -> List[str]:
    """Strip blanks and drop repeated entries, keeping first occurrence."""
    seen = set()
    cleaned = []
    for text in texts:
        text = (text or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        cleaned.append(text)
    return cleaned


class WordService:
    """Service for managing stored words."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _get_row(self, word_id: str) -> Optional[Word]:
        return self.db.query(Word).filter(Word.id == word_id).first()

    def get_word(self, word_id: str) -> Optional[WordRecord]:
        """Get a word by its ID."""
        row = self._get_row(word_id)
        return row.to_record() if row else None

    def load_words(self) -> List[WordRecord]:
        """Get every stored word in insertion order."""
        return [row.to_record() for row in self.db.query(Word).order_by(Word.pk).all()]

    def get_word_count(self) -> int:
        """Get the count of stored words."""
        return self.db.query(Word).count()

    def group_titles(self) -> List[str]:
        """Get distinct group titles in the order they were first stored."""
        titles = []
        for (title,) in self.db.query(Word.group_title).order_by(Word.pk).all():
            if title not in titles:
                titles.append(title)
        return titles

    def save_words(self, records: Iterable[WordRecord]) -> None:
        """Insert or update records by id."""
        count = 0
        for record in records:
            record.validate()
            row = self._get_row(record.id)
            if row:
                row.update_from_record(record)
            else:
                self.db.add(Word.from_record(record))
            count += 1
        self.db.commit()
        logger.debug("Saved %d words", count)

    def replace_all(self, records: Iterable[WordRecord]) -> None:
        """Replace the whole collection, e.g. when restoring a backup."""
        records = [record.validate() for record in records]
        self.db.query(Word).delete()
        self.db.add_all(Word.from_record(record) for record in records)
        self.db.commit()
        logger.info("Replaced word collection with %d words", len(records))

    def add_group(self, texts: Iterable[str], title: str, now: datetime) -> List[WordRecord]:
        """Create fresh, immediately due words under ``title``."""
        records = [create_word_record(text, title, now) for text in _clean_texts(texts)]
        self.db.add_all(Word.from_record(record) for record in records)
        self.db.commit()

        monitoring.words_added.inc(len(records))
        logger.info("Added %d words to group %s", len(records), title)
        return records

    def edit_group(
        self, old_title: str, texts: Iterable[str], new_title: str, now: datetime
    ) -> List[WordRecord]:
        """Rewrite a group's word list.

        Texts already in the group keep their scheduling state and move to
        ``new_title``. New texts become fresh words. Words no longer listed
        are deleted.
        """
        old_rows = (
            self.db.query(Word)
            .filter(Word.group_title == old_title)
            .order_by(Word.pk)
            .all()
        )
        if not old_rows:
            raise GroupNotFoundError(old_title)

        by_text = {}
        for row in old_rows:
            by_text.setdefault(row.text, row)

        kept_ids = set()
        merged: List[WordRecord] = []
        for text in _clean_texts(texts):
            row = by_text.get(text)
            if row:
                record = row.to_record().copy(group_title=new_title)
                row.update_from_record(record)
                kept_ids.add(row.id)
            else:
                record = create_word_record(text, new_title, now)
                self.db.add(Word.from_record(record))
                monitoring.words_added.inc()
            merged.append(record)

        removed = 0
        for row in old_rows:
            if row.id not in kept_ids:
                self.db.delete(row)
                removed += 1

        self.db.commit()
        logger.info(
            "Edited group %s -> %s: %d words, %d removed",
            old_title,
            new_title,
            len(merged),
            removed,
        )
        return merged

    def delete_word(self, word_id: str) -> bool:
        """Delete a word."""
        row = self._get_row(word_id)
        if not row:
            return False

        self.db.delete(row)
        self.db.commit()
        logger.info("Deleted word %s (%s)", word_id, row.text)
        return True

    def delete_group(self, title: str) -> int:
        """Delete every word of a group and return how many were removed."""
        removed = self.db.query(Word).filter(Word.group_title == title).delete()
        self.db.commit()
        logger.info("Deleted group %s (%d words)", title, removed)
        return removed
