"""Tests for stored preferences."""
from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from tingxie.config import DictationSettings
from tingxie.models.session_models import PlaybackOrder
from tingxie.services.preference_service import PreferenceService


@pytest.fixture
def preference_service(db: Session) -> PreferenceService:
    """Create a preference service instance."""
    return PreferenceService(db)


@pytest.fixture
def base() -> DictationSettings:
    return DictationSettings(order=PlaybackOrder.SEQUENTIAL, max_review_batch_size=10, voice="Mei-Jia")


def test_no_overrides_keeps_base(preference_service: PreferenceService, base) -> None:
    assert preference_service.get_overrides() == {}
    assert preference_service.dictation_settings(base) is base


def test_saved_settings_survive_a_new_session(db: Session, preference_service: PreferenceService, base) -> None:
    updated = DictationSettings(order=PlaybackOrder.SHUFFLE, max_review_batch_size=4)
    preference_service.save_dictation_settings(updated, ["order", "max_review_batch_size"])

    loaded = PreferenceService(db).dictation_settings(base)

    assert loaded.order is PlaybackOrder.SHUFFLE
    assert loaded.max_review_batch_size == 4
    assert loaded.voice == "Mei-Jia"
    assert preference_service.get_overrides() == {"order": "SHUFFLE", "max_review_batch_size": 4}


def test_last_reminder_time(preference_service: PreferenceService, now) -> None:
    assert preference_service.last_reminder_time() is None

    preference_service.update_last_reminder_time(now - timedelta(minutes=5))

    assert preference_service.last_reminder_time() == now - timedelta(minutes=5)


if __name__ == "__main__":
    pytest.main([__file__])
