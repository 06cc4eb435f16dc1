"""Tests for learning service."""
import random
from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from tingxie.config import DictationSettings
from tingxie.errors import BackupFormatError, GroupNotFoundError, WordNotFoundError
from tingxie.models.session_models import PlaybackOrder, SelectionMode, WordStatus
from tingxie.services.learning_service import LearningService
from tingxie.services.session_selector import SessionSelector


@pytest.fixture
def settings() -> DictationSettings:
    return DictationSettings(order=PlaybackOrder.SEQUENTIAL, max_review_batch_size=10)


@pytest.fixture
def learning_service(db: Session, settings: DictationSettings) -> LearningService:
    """Create a learning service instance."""
    return LearningService(db, settings)


def test_full_session_cycle(learning_service: LearningService, now) -> None:
    """Select, correct and grade a session, then check the store."""
    apple, banana, cherry = learning_service.word_service.add_group(
        ["apple", "banana", "cherry"], "Fruit", now
    )

    selection = learning_service.start_session(SelectionMode.DUE, now)
    assert [word.text for word in selection] == ["apple", "banana", "cherry"]

    sheet = learning_service.open_correction(selection.words)
    sheet.mark(banana.id, False)
    changed = learning_service.finish_session(sheet.outcomes(), now)

    assert len(changed) == 3
    stored = {word.id: word for word in learning_service.word_service.load_words()}
    assert stored[apple.id].interval == 14
    assert stored[apple.id].next_review == now + timedelta(days=14)
    assert stored[banana.id].total_wrong == 1
    assert stored[banana.id].is_due(now)

    # Only the missed word comes back
    again = learning_service.start_session(SelectionMode.DUE, now + timedelta(minutes=1))
    assert [word.id for word in again] == [banana.id]


def test_partial_session_grades_only_presented(learning_service: LearningService, now) -> None:
    """Words the session never reached stay untouched."""
    words = learning_service.word_service.add_group(["a", "b", "c"], "Letters", now)

    sheet = learning_service.open_correction(words[:2])
    changed = learning_service.finish_session(sheet.outcomes(), now)

    assert {word.id for word in changed} == {words[0].id, words[1].id}
    assert learning_service.word_service.get_word(words[2].id).total_attempts == 0


def test_smart_session_after_errors(learning_service: LearningService, now) -> None:
    words = learning_service.word_service.add_group(["a", "b", "c"], "Letters", now)
    assert learning_service.start_session(SelectionMode.SMART, now).nothing_to_review

    learning_service.finish_session(
        [(words[0].id, False), (words[1].id, True), (words[2].id, False)], now
    )
    learning_service.finish_session([(words[2].id, False)], now + timedelta(days=1))

    selection = learning_service.start_session(SelectionMode.SMART, now + timedelta(days=2))

    assert [word.id for word in selection] == [words[2].id, words[0].id]


def test_group_session_only_errors(learning_service: LearningService, now) -> None:
    """Error-only review of a group with nothing due is an empty selection."""
    words = learning_service.word_service.add_group(["a", "b"], "Letters", now)
    learning_service.finish_session([(word.id, True) for word in words], now)

    selection = learning_service.start_session(
        SelectionMode.GROUP, now, group_title="Letters", only_errors=True
    )

    assert selection.nothing_to_review


def test_group_session_unknown_group(learning_service: LearningService, now) -> None:
    with pytest.raises(GroupNotFoundError):
        learning_service.start_session(SelectionMode.GROUP, now, group_title="Missing")


def test_shuffled_session(db: Session, now) -> None:
    settings = DictationSettings(order=PlaybackOrder.SHUFFLE)
    service = LearningService(db, settings, SessionSelector(settings, rng=random.Random(3)))
    words = service.word_service.add_group([str(n) for n in range(10)], "Numbers", now)

    selection = service.start_session(SelectionMode.GROUP, now, group_title="Numbers")

    assert sorted(word.id for word in selection) == sorted(word.id for word in words)


def test_update_word_status(learning_service: LearningService, now) -> None:
    (word,) = learning_service.word_service.add_group(["apple"], "Fruit", now)

    mastered = learning_service.update_word_status(word.id, WordStatus.MASTERED, now)
    assert mastered.is_mastered
    assert learning_service.word_service.get_word(word.id).interval == 30

    reset = learning_service.update_word_status(word.id, WordStatus.REVIEW, now)
    assert reset.is_due(now)
    assert learning_service.word_service.get_word(word.id).streak == 0


def test_update_unknown_word(learning_service: LearningService, now) -> None:
    with pytest.raises(WordNotFoundError):
        learning_service.update_word_status("missing", WordStatus.MASTERED, now)


def test_restore_backup_stores_settings(db: Session, learning_service: LearningService, make_word, now) -> None:
    words = [make_word(), make_word()]

    imported = learning_service.restore_backup(words, {"order": "REVERSE", "max_review_batch_size": 1})

    assert imported.order is PlaybackOrder.REVERSE
    assert learning_service.selector.settings is imported
    assert [word.id for word in learning_service.word_service.load_words()] == [word.id for word in words]
    assert LearningService(db).settings.max_review_batch_size == 1


def test_restore_backup_bad_settings_keeps_store(learning_service: LearningService, make_word, now) -> None:
    (kept,) = learning_service.word_service.add_group(["apple"], "Fruit", now)

    with pytest.raises(BackupFormatError):
        learning_service.restore_backup([make_word()], {"order": "RANDOM"})

    assert [word.id for word in learning_service.word_service.load_words()] == [kept.id]


def test_dashboard(learning_service: LearningService, now) -> None:
    fruit = learning_service.word_service.add_group(["apple", "banana"], "Fruit", now)
    learning_service.word_service.add_group(["carrot"], "Veg", now + timedelta(seconds=1))
    learning_service.finish_session([(fruit[0].id, True), (fruit[1].id, False)], now)

    stats = learning_service.dashboard(now)

    assert stats.total == 3
    assert stats.due == 1  # carrot is not due until a second later
    assert stats.mastered == 1
    assert stats.with_errors == 1
    assert [group.title for group in stats.groups] == ["Veg", "Fruit"]
    assert stats.groups[1].total == 2
    assert stats.groups[1].due == 1
    assert stats.groups[1].mastered == 1


if __name__ == "__main__":
    pytest.main([__file__])
