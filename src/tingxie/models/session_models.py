"""Models for practice sessions and their results."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging

from tingxie.errors import WordNotFoundError


logger = logging.getLogger(__name__)


class PlaybackOrder(Enum):
    """Order in which a session's words are read out."""
    SEQUENTIAL = "SEQUENTIAL"
    REVERSE = "REVERSE"
    SHUFFLE = "SHUFFLE"


class SelectionMode(Enum):
    """Policies for choosing a session's words."""
    DUE = "due"  # Every due word across all groups
    SMART = "smart"  # Words with an error history, ranked
    GROUP = "group"  # One group, optionally only its due words


class WordStatus(Enum):
    """Targets for a manual status override."""
    REVIEW = "REVIEW"
    MASTERED = "MASTERED"


@dataclass
class Outcome:
    """Final correctness result for one presented word."""
    word_id: str
    is_correct: bool


@dataclass
class SessionSelection:
    """Ordered words chosen for one practice session."""
    mode: SelectionMode
    words: List = field(default_factory=list)  # List[WordRecord]
    group_title: Optional[str] = None
    only_errors: bool = False

    @property
    def nothing_to_review(self) -> bool:
        """True when the caller must not start a session."""
        return not self.words

    def __len__(self) -> int:
        return len(self.words)

    def __bool__(self) -> bool:
        return bool(self.words)

    def __iter__(self):
        return iter(self.words)


class CorrectionSheet:
    """Collects the learner's right/wrong marks after a session.

    Every presented word starts out marked correct. Marking a word again
    replaces the earlier mark, so each word yields exactly one outcome.
    """

    def __init__(self, words: List):
        self.word_ids: List[str] = []
        self.results: Dict[str, bool] = {}
        for word in words:
            if word.id in self.results:
                continue
            self.word_ids.append(word.id)
            self.results[word.id] = True

    def _check(self, word_id: str) -> None:
        if word_id not in self.results:
            raise WordNotFoundError(word_id)

    def mark(self, word_id: str, correct: bool) -> None:
        """Record the learner's mark for a word."""
        self._check(word_id)
        self.results[word_id] = correct

    def toggle(self, word_id: str) -> bool:
        """Flip a word's mark and return the new value."""
        self._check(word_id)
        self.results[word_id] = not self.results[word_id]
        return self.results[word_id]

    def is_correct(self, word_id: str) -> bool:
        self._check(word_id)
        return self.results[word_id]

    @property
    def correct_count(self) -> int:
        return sum(1 for value in self.results.values() if value)

    @property
    def wrong_count(self) -> int:
        return len(self.results) - self.correct_count

    def outcomes(self) -> List[Outcome]:
        """One outcome per presented word, in presentation order."""
        logger.debug(
            "Correction finished: %d correct, %d wrong", self.correct_count, self.wrong_count
        )
        return [Outcome(word_id, self.results[word_id]) for word_id in self.word_ids]
