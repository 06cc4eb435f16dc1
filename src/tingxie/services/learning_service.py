"""Learning service for running practice sessions against the word store."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from tingxie.config import DictationSettings, settings as app_settings
from tingxie.errors import WordNotFoundError
from tingxie.models.session_models import (
    CorrectionSheet,
    Outcome,
    SelectionMode,
    SessionSelection,
    WordStatus,
)
from tingxie.models.word import WordRecord
from tingxie.services.backup_service import apply_settings_overrides
from tingxie.services.preference_service import PreferenceService
from tingxie.services.review_scheduler import apply_outcomes, override_status
from tingxie.services.session_selector import SessionSelector, group_words
from tingxie.services.word_service import WordService

logger = logging.getLogger(__name__)


@dataclass
class GroupStats:
    """Per-group counters shown on the dashboard."""
    title: str
    total: int
    due: int
    mastered: int


@dataclass
class DashboardStats:
    """Collection-wide counters."""
    total: int = 0
    due: int = 0
    mastered: int = 0
    with_errors: int = 0
    groups: List[GroupStats] = field(default_factory=list)


class LearningService:
    """Service for selecting sessions and recording their results."""

    def __init__(
        self,
        db: Session,
        settings: Optional[DictationSettings] = None,
        selector: Optional[SessionSelector] = None,
    ):
        """Initialize the service with a database session."""
        self.db = db
        self.word_service = WordService(db)
        self.preference_service = PreferenceService(db)
        self.settings = settings or self.preference_service.dictation_settings(app_settings.dictation)
        self.selector = selector or SessionSelector(self.settings)

    def start_session(
        self,
        mode: SelectionMode,
        now: datetime,
        group_title: Optional[str] = None,
        only_errors: bool = False,
    ) -> SessionSelection:
        """Choose the words for a new session.

        Check ``nothing_to_review`` on the result before presenting anything.
        """
        words = self.word_service.load_words()
        logger.info("Choosing %s session from %d words", mode.value, len(words))
        return self.selector.build_session(
            words, mode, now, group_title=group_title, only_errors=only_errors
        )

    def open_correction(self, presented: Sequence[WordRecord]) -> CorrectionSheet:
        """Start the correction pass for the words actually presented."""
        return CorrectionSheet(presented)

    def finish_session(
        self,
        outcomes: Iterable[Union[Outcome, Tuple[str, bool]]],
        now: datetime,
    ) -> List[WordRecord]:
        """Apply a session's outcomes and persist the changed words."""
        words = self.word_service.load_words()
        updated = apply_outcomes(words, outcomes, now)
        pairs = [(old, new) for old, new in zip(words, updated) if new is not old]
        changed = [new for _, new in pairs]
        self.word_service.save_words(changed)

        wrong = sum(1 for old, new in pairs if new.total_wrong > old.total_wrong)
        logger.info(
            "Session finished: %d words graded, %d correct, %d wrong",
            len(changed),
            len(changed) - wrong,
            wrong,
        )
        return changed

    def update_word_status(self, word_id: str, status: WordStatus, now: datetime) -> WordRecord:
        """Manually mark a word as mastered or as needing review."""
        record = self.word_service.get_word(word_id)
        if not record:
            raise WordNotFoundError(word_id)

        updated = override_status(record, status, now)
        self.word_service.save_words([updated])
        return updated

    def restore_backup(self, words: Sequence[WordRecord], overrides: Dict[str, Any]) -> DictationSettings:
        """Replace the collection and store the backup's settings.

        The settings are checked before anything is written, so a backup with
        bad settings leaves the store as it was.
        """
        imported = apply_settings_overrides(self.settings, overrides)
        self.word_service.replace_all(words)
        if overrides:
            self.preference_service.save_dictation_settings(imported, overrides.keys())

        self.settings = imported
        self.selector.settings = imported
        logger.info("Restored %d words from backup", len(words))
        return imported

    def dashboard(self, now: datetime) -> DashboardStats:
        """Counters for the whole collection and for each group."""
        words = self.word_service.load_words()
        stats = DashboardStats(
            total=len(words),
            due=sum(1 for word in words if word.is_due(now)),
            mastered=sum(1 for word in words if word.is_mastered),
            with_errors=sum(1 for word in words if word.total_wrong > 0),
        )
        for title, members in group_words(words).items():
            stats.groups.append(
                GroupStats(
                    title=title,
                    total=len(members),
                    due=sum(1 for word in members if word.is_due(now)),
                    mastered=sum(1 for word in members if word.is_mastered),
                )
            )
        return stats
