"""Service for stored preferences: imported settings and reminder state."""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from tingxie.config import DictationSettings
from tingxie.models.models import Preferences
from tingxie.models.session_models import PlaybackOrder
from tingxie.models.word import to_utc
from tingxie.services.backup_service import SETTINGS_KEYS, apply_settings_overrides

logger = logging.getLogger(__name__)

PREFERENCES_ID = 1


class PreferenceService:
    """Service for reading and updating the preferences row."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def get_preferences(self) -> Preferences:
        """Get the preferences row, creating it on first use."""
        prefs = self.db.query(Preferences).filter(Preferences.id == PREFERENCES_ID).first()
        if not prefs:
            prefs = Preferences(id=PREFERENCES_ID)
            self.db.add(prefs)
            self.db.commit()
        return prefs

    def get_overrides(self) -> Dict[str, Any]:
        """Stored dictation settings, keyed by DictationSettings field."""
        prefs = self.get_preferences()
        values = {name: getattr(prefs, name) for name in SETTINGS_KEYS}
        return {name: value for name, value in values.items() if value is not None}

    def dictation_settings(self, base: DictationSettings) -> DictationSettings:
        """Apply the stored overrides on top of ``base``."""
        overrides = self.get_overrides()
        if not overrides:
            return base
        return apply_settings_overrides(base, overrides)

    def save_dictation_settings(self, updated: DictationSettings, names: Iterable[str]) -> None:
        """Store the given fields of ``updated`` as overrides."""
        prefs = self.get_preferences()
        log_message = "Preferences updated: ["
        for name in names:
            value = getattr(updated, name)
            if isinstance(value, PlaybackOrder):
                value = value.value
            setattr(prefs, name, value)
            log_message += f" {name}: {value},"
        log_message += "]"

        self.db.commit()
        logger.info(log_message)

    def last_reminder_time(self) -> Optional[datetime]:
        value = self.get_preferences().last_reminder_time
        return to_utc(value) if value is not None else None

    def update_last_reminder_time(self, now: datetime) -> None:
        """Remember when the last reminder went out."""
        prefs = self.get_preferences()
        prefs.last_reminder_time = now
        self.db.commit()
