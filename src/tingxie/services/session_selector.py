"""Session selection: which words to practice and in what order."""
import logging
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from tingxie import monitoring
from tingxie.config import DEFAULT_MAX_REVIEW_BATCH_SIZE, DictationSettings
from tingxie.errors import GroupNotFoundError, MissingGroupTitleError
from tingxie.models.session_models import PlaybackOrder, SelectionMode, SessionSelection
from tingxie.models.word import WordRecord

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
WRONG_WEIGHT = 2


def smart_review_score(word: WordRecord, now: datetime) -> float:
    """Urgency of a word with an error history; higher comes first.

    More mistakes and a longer time since the last one both raise the score.
    """
    days_since_wrong = (now - word.last_wrong_at) / ONE_DAY if word.last_wrong_at else 0.0
    return word.total_wrong * WRONG_WEIGHT + days_since_wrong


def group_words(words: Sequence[WordRecord]) -> Dict[str, List[WordRecord]]:
    """Group words by title, newest group first."""
    groups: Dict[str, List[WordRecord]] = {}
    for word in words:
        groups.setdefault(word.group_title, []).append(word)
    ordered = sorted(groups.items(), key=lambda item: item[1][0].added_at, reverse=True)
    return dict(ordered)


class SessionSelector:
    """Builds the ordered word list for one practice session."""

    def __init__(self, settings: DictationSettings, rng: Optional[random.Random] = None):
        self.settings = settings
        self.rng = rng or random.Random()

    @property
    def batch_size(self) -> int:
        size = self.settings.max_review_batch_size
        return size if size > 0 else DEFAULT_MAX_REVIEW_BATCH_SIZE

    def select_due(self, words: Sequence[WordRecord], now: datetime) -> List[WordRecord]:
        """Every due word across all groups."""
        return [word for word in words if word.is_due(now)]

    def select_smart(self, words: Sequence[WordRecord], now: datetime) -> List[WordRecord]:
        """The highest-scoring words that have ever been answered wrong."""
        candidates = [word for word in words if word.total_wrong > 0]
        # sorted() is stable with reverse=True, so ties keep input order
        ranked = sorted(candidates, key=lambda word: smart_review_score(word, now), reverse=True)
        return ranked[:self.batch_size]

    def select_group(
        self,
        words: Sequence[WordRecord],
        group_title: str,
        now: datetime,
        only_errors: bool = False,
    ) -> List[WordRecord]:
        """Words of one group; with ``only_errors``, just its due words."""
        members = [word for word in words if word.group_title == group_title]
        if not members:
            raise GroupNotFoundError(group_title)
        if only_errors:
            return [word for word in members if word.is_due(now)]
        return members

    def apply_order(
        self, words: Sequence[WordRecord], order: Optional[PlaybackOrder] = None
    ) -> List[WordRecord]:
        """Arrange selected words for presentation."""
        order = order or self.settings.order
        queue = list(words)
        if order is PlaybackOrder.REVERSE:
            queue.reverse()
        elif order is PlaybackOrder.SHUFFLE:
            self.rng.shuffle(queue)
        return queue

    def build_session(
        self,
        words: Sequence[WordRecord],
        mode: SelectionMode,
        now: datetime,
        group_title: Optional[str] = None,
        only_errors: bool = False,
    ) -> SessionSelection:
        """Select and order words for a session.

        An empty result means there is nothing to review; the caller should
        say so instead of starting a session. An unknown group raises
        GroupNotFoundError.
        """
        if mode is SelectionMode.DUE:
            selected = self.select_due(words, now)
        elif mode is SelectionMode.SMART:
            selected = self.select_smart(words, now)
        elif mode is SelectionMode.GROUP:
            if not group_title:
                raise MissingGroupTitleError("A group title is required for group sessions")
            selected = self.select_group(words, group_title, now, only_errors)
        else:
            raise ValueError(f"Unknown selection mode: {mode!r}")

        selection = SessionSelection(
            mode=mode,
            words=self.apply_order(selected),
            group_title=group_title if mode is SelectionMode.GROUP else None,
            only_errors=only_errors if mode is SelectionMode.GROUP else False,
        )

        monitoring.sessions_built.labels(mode=mode.value).inc()
        if selection.nothing_to_review:
            monitoring.empty_sessions.labels(mode=mode.value).inc()
            logger.info("Nothing to review for %s session", mode.value)
        else:
            logger.info(
                "Selected %d words for %s session (order: %s)",
                len(selection),
                mode.value,
                self.settings.order.value,
            )
        return selection
