"""Review scheduling rules for dictation outcomes.

A correct answer is treated as mastery: the streak jumps to at least 10 and
the word is pushed out by 14 days, or by 30% more once its interval already
exceeds that. A wrong answer makes the word due again immediately. This is
intentionally steeper than SM-2's gradual growth.
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Tuple, Union

from tingxie import monitoring
from tingxie.config import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR
from tingxie.models.session_models import Outcome, WordStatus
from tingxie.models.word import WordRecord

logger = logging.getLogger(__name__)

CORRECT_STREAK = 10
MASTERY_INTERVAL_DAYS = 14
INTERVAL_GROWTH = 1.3
EASE_STEP_UP = 0.1
EASE_STEP_DOWN = 0.2
OVERRIDE_MASTERED_STREAK = 10
OVERRIDE_MASTERED_DAYS = 30


def round_half_up(value: float) -> int:
    """Round .5 upwards, unlike the built-in round()."""
    return math.floor(value + 0.5)


def next_interval(interval: int) -> int:
    """Interval in days after a correct answer."""
    if interval > MASTERY_INTERVAL_DAYS:
        return round_half_up(interval * INTERVAL_GROWTH)
    return MASTERY_INTERVAL_DAYS


def apply_outcome(record: WordRecord, is_correct: bool, now: datetime) -> WordRecord:
    """Return the record's next scheduling state. ``record`` is not modified."""
    if is_correct:
        interval = next_interval(record.interval)
        updated = record.copy(
            streak=max(record.streak + 1, CORRECT_STREAK),
            interval=interval,
            ease_factor=max(MIN_EASE_FACTOR, record.ease_factor + EASE_STEP_UP),
            next_review=now + timedelta(days=interval),
        )
    else:
        # Interval 0 means due now, not "now plus zero days" rounded later
        updated = record.copy(
            streak=0,
            interval=0,
            ease_factor=max(MIN_EASE_FACTOR, record.ease_factor - EASE_STEP_DOWN),
            next_review=now,
            total_wrong=record.total_wrong + 1,
            last_wrong_at=now,
        )

    updated.total_attempts = record.total_attempts + 1
    updated.last_reviewed = now

    monitoring.outcomes_applied.labels(result="correct" if is_correct else "wrong").inc()
    logger.debug(
        "Word %s (%s): %s, interval %d -> %d days",
        record.id,
        record.text,
        "correct" if is_correct else "wrong",
        record.interval,
        updated.interval,
    )
    return updated


def _collect_results(
    results: Iterable[Union[Outcome, Tuple[str, bool]]],
) -> Dict[str, bool]:
    final: Dict[str, bool] = {}
    for result in results:
        if isinstance(result, Outcome):
            word_id, is_correct = result.word_id, result.is_correct
        else:
            word_id, is_correct = result
        final[word_id] = bool(is_correct)  # last write wins
    return final


def apply_outcomes(
    words: Iterable[WordRecord],
    results: Iterable[Union[Outcome, Tuple[str, bool]]],
    now: datetime,
) -> List[WordRecord]:
    """Fold a session's outcomes into a word collection.

    Each word with a result is scheduled exactly once, using the last result
    reported for it. Other words are returned as they are, in input order.
    """
    pending = _collect_results(results)
    updated: List[WordRecord] = []
    for word in words:
        if word.id in pending:
            updated.append(apply_outcome(word, pending.pop(word.id), now))
        else:
            updated.append(word)

    if pending:
        logger.warning("Ignoring outcomes for unknown words: %s", ", ".join(sorted(pending)))
    return updated


def override_status(record: WordRecord, status: WordStatus, now: datetime) -> WordRecord:
    """Set a word's status by hand, ignoring its history."""
    if status is WordStatus.MASTERED:
        updated = record.copy(
            streak=OVERRIDE_MASTERED_STREAK,
            interval=OVERRIDE_MASTERED_DAYS,
            next_review=now + timedelta(days=OVERRIDE_MASTERED_DAYS),
            last_reviewed=now,
        )
    elif status is WordStatus.REVIEW:
        updated = record.copy(
            streak=0,
            interval=0,
            next_review=now,
            ease_factor=DEFAULT_EASE_FACTOR,
        )
    else:
        raise ValueError(f"Unknown word status: {status!r}")

    monitoring.status_overrides.labels(status=status.value).inc()
    logger.info("Word %s (%s) marked %s", record.id, record.text, status.value)
    return updated
