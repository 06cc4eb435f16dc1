"""Tests for backup export and import."""
import json
from datetime import timedelta

import pytest

from tingxie.config import DictationSettings
from tingxie.errors import BackupFormatError, InvalidWordRecordError
from tingxie.models.session_models import PlaybackOrder
from tingxie.services.backup_service import (
    apply_settings_overrides,
    dump_backup,
    export_backup,
    load_backup,
)


@pytest.fixture
def settings() -> DictationSettings:
    return DictationSettings(
        order=PlaybackOrder.REVERSE,
        max_review_batch_size=5,
        voice="Ting-Ting",
        interval_seconds=7,
        auto_repeat=2,
        silence_threshold_ms=300,
    )


def test_export_backup(make_word, settings, now) -> None:
    """Backups carry words and settings, minus the voice."""
    words = [make_word(), make_word(total_attempts=2, total_wrong=1, last_wrong_at=now)]

    data = export_backup(words, settings, now)

    assert data["version"] == 1
    assert data["exportDate"] == now.isoformat()
    assert data["words"] == [word.to_dict() for word in words]
    assert data["settings"] == {
        "order": "REVERSE",
        "maxReviewBatchSize": 5,
        "intervalSeconds": 7,
        "autoRepeat": 2,
        "silenceThreshold": 300,
    }
    assert "voice" not in data["settings"]


def test_dump_and_load_backup(tmp_path, make_word, settings, now) -> None:
    words = [make_word(text="苹果"), make_word(streak=10, interval=14, next_review=now + timedelta(days=14))]
    path = dump_backup(tmp_path / "backup.json", words, settings, now)

    loaded, overrides = load_backup(path)

    assert loaded == words
    assert overrides["order"] == "REVERSE"
    assert overrides["max_review_batch_size"] == 5
    assert "苹果" in path.read_text(encoding="utf-8")


def test_load_backup_from_web_app_export() -> None:
    """Older exports without statistics or a group still load."""
    data = {
        "version": 1,
        "words": [
            {
                "id": "abc",
                "text": "苹果",
                "addedAt": 1714550400000,
                "lastReviewed": None,
                "nextReview": 1714550400000,
                "streak": 0,
                "easeFactor": 2.5,
                "interval": 0,
            }
        ],
        "settings": {"voice": "ignored", "order": "SHUFFLE"},
    }

    words, overrides = load_backup(data)

    assert words[0].total_wrong == 0
    assert overrides == {"order": "SHUFFLE"}


def test_load_backup_rejects_bad_word() -> None:
    with pytest.raises(InvalidWordRecordError):
        load_backup({"words": [{"id": "x", "text": "y"}]})


def test_load_backup_rejects_invalid_json(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(BackupFormatError):
        load_backup(path)


def test_load_backup_missing_file(tmp_path) -> None:
    with pytest.raises(BackupFormatError):
        load_backup(tmp_path / "missing.json")


def test_load_backup_rejects_invalid_utf8(tmp_path) -> None:
    path = tmp_path / "latin1.json"
    path.write_bytes('{"words": [], "note": "café"}'.encode("latin-1"))

    with pytest.raises(BackupFormatError):
        load_backup(path)


def test_load_backup_rejects_duplicate_ids(make_word) -> None:
    word = make_word()
    data = {"words": [word.to_dict(), word.copy(text="other").to_dict()]}

    with pytest.raises(BackupFormatError, match=word.id):
        load_backup(data)


@pytest.mark.parametrize("data", [[], {"words": {}}, {"words": [], "settings": []}])
def test_load_backup_rejects_bad_shape(tmp_path, data) -> None:
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    with pytest.raises(BackupFormatError):
        load_backup(path)


def test_apply_settings_overrides(settings) -> None:
    updated = apply_settings_overrides(settings, {"order": "shuffle", "max_review_batch_size": 20})

    assert updated.order is PlaybackOrder.SHUFFLE
    assert updated.max_review_batch_size == 20
    assert updated.voice == "Ting-Ting"
    assert settings.order is PlaybackOrder.REVERSE


@pytest.mark.parametrize("overrides", [{"order": "RANDOM"}, {"max_review_batch_size": 0}])
def test_apply_invalid_settings_overrides(settings, overrides) -> None:
    with pytest.raises(BackupFormatError):
        apply_settings_overrides(settings, overrides)


if __name__ == "__main__":
    pytest.main([__file__])
