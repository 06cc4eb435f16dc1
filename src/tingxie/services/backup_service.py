"""Backup export and import for the word collection and settings."""
import json
import logging
from dataclasses import asdict, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from tingxie.config import DictationSettings
from tingxie.errors import BackupFormatError
from tingxie.models.session_models import PlaybackOrder
from tingxie.models.word import WordRecord

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

# DictationSettings field -> backup key
SETTINGS_KEYS = {
    "order": "order",
    "max_review_batch_size": "maxReviewBatchSize",
    "interval_seconds": "intervalSeconds",
    "auto_repeat": "autoRepeat",
    "silence_threshold_ms": "silenceThreshold",
}


def export_backup(
    words: Iterable[WordRecord], settings: DictationSettings, now: datetime
) -> Dict[str, Any]:
    """Build a backup document. The voice setting is device specific and left out."""
    values = asdict(settings)
    exported_settings = {}
    for name, key in SETTINGS_KEYS.items():
        value = values[name]
        exported_settings[key] = value.value if isinstance(value, PlaybackOrder) else value

    return {
        "version": BACKUP_VERSION,
        "exportDate": now.isoformat(),
        "words": [word.to_dict() for word in words],
        "settings": exported_settings,
    }


def dump_backup(
    path: Union[str, Path], words: Iterable[WordRecord], settings: DictationSettings, now: datetime
) -> Path:
    """Write a backup file and return its path."""
    path = Path(path)
    data = export_backup(words, settings, now)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Exported %d words to %s", len(data["words"]), path)
    return path


def load_backup(source: Union[str, Path, Dict[str, Any]]) -> Tuple[List[WordRecord], Dict[str, Any]]:
    """Read a backup and return its words and settings overrides.

    Every word goes through WordRecord.from_dict, so a malformed entry fails
    the whole import instead of being stored half-filled.
    """
    if isinstance(source, dict):
        data = source
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackupFormatError(f"Cannot read backup {source}: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Backup is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise BackupFormatError("Backup must be a JSON object")

    raw_words = data.get("words", [])
    if not isinstance(raw_words, list):
        raise BackupFormatError("Backup 'words' must be a list")
    words = [WordRecord.from_dict(item) for item in raw_words]

    seen = set()
    for word in words:
        if word.id in seen:
            raise BackupFormatError(f"Backup contains word {word.id} more than once")
        seen.add(word.id)

    raw_settings = data.get("settings")
    if raw_settings is None:
        raw_settings = {}
    if not isinstance(raw_settings, dict):
        raise BackupFormatError("Backup 'settings' must be an object")
    overrides = {
        name: raw_settings[key] for name, key in SETTINGS_KEYS.items() if key in raw_settings
    }

    logger.info("Loaded backup with %d words", len(words))
    return words, overrides


def apply_settings_overrides(settings: DictationSettings, overrides: Dict[str, Any]) -> DictationSettings:
    """Return new settings with imported values applied and validated."""
    changes = dict(overrides)
    if "order" in changes:
        try:
            changes["order"] = PlaybackOrder(str(changes["order"]).upper())
        except ValueError as e:
            raise BackupFormatError(f"Unknown playback order: {changes['order']!r}") from e

    updated = replace(settings, **changes)
    try:
        updated.validate()
    except ValueError as e:
        raise BackupFormatError(f"Invalid settings in backup: {e}") from e
    return updated
