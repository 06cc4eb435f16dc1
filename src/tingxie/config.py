"""Configuration settings for tingxie."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from tingxie.models.session_models import PlaybackOrder

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)

# Group label for words stored without one
DEFAULT_GROUP_TITLE = os.getenv("DEFAULT_GROUP_TITLE", "默认词库")

# Scheduling constants
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MASTERED_STREAK = 3  # streak above this counts as mastered
DEFAULT_MAX_REVIEW_BATCH_SIZE = 10


@dataclass
class StorageSettings:
    """Word store settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///tingxie.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class DictationSettings:
    """Session settings.

    Only ``order`` and ``max_review_batch_size`` affect session selection.
    The remaining fields are handed through to the playback front end.
    """
    order: PlaybackOrder = PlaybackOrder(os.getenv("PLAYBACK_ORDER", "SEQUENTIAL").upper())
    max_review_batch_size: int = int(os.getenv("MAX_REVIEW_BATCH_SIZE", str(DEFAULT_MAX_REVIEW_BATCH_SIZE)))
    voice: str = os.getenv("VOICE", "")
    interval_seconds: int = int(os.getenv("INTERVAL_SECONDS", "5"))
    auto_repeat: int = int(os.getenv("AUTO_REPEAT", "1"))
    silence_threshold_ms: int = int(os.getenv("SILENCE_THRESHOLD_MS", "500"))

    def validate(self) -> None:
        """Validate dictation settings and raise ValueError if invalid."""
        if not isinstance(self.order, PlaybackOrder):
            raise ValueError(f"Unknown playback order: {self.order!r}")

        if self.max_review_batch_size < 1:
            raise ValueError("MAX_REVIEW_BATCH_SIZE must be positive")

        if self.interval_seconds < 1:
            raise ValueError("INTERVAL_SECONDS must be positive")

        if self.auto_repeat < 1:
            raise ValueError("AUTO_REPEAT must be positive")

        if self.silence_threshold_ms < 0:
            raise ValueError("SILENCE_THRESHOLD_MS cannot be negative")


@dataclass
class NotificationSettings:
    """Review reminder settings."""
    reminder_throttle_minutes: int = int(os.getenv("REMINDER_THROTTLE_MINUTES", "60"))
    preview_words: int = int(os.getenv("REMINDER_PREVIEW_WORDS", "5"))


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_dictation_settings() -> DictationSettings:
    """Get dictation settings."""
    return DictationSettings()


def get_notification_settings() -> NotificationSettings:
    """Get notification settings."""
    return NotificationSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    storage: StorageSettings = field(default_factory=get_storage_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    dictation: DictationSettings = field(default_factory=get_dictation_settings)
    notification: NotificationSettings = field(default_factory=get_notification_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.storage.url:
            raise ValueError("DATABASE_URL is required")

        self.dictation.validate()

        if self.notification.reminder_throttle_minutes < 0:
            raise ValueError("REMINDER_THROTTLE_MINUTES cannot be negative")


# Create global settings instance
settings = Settings()
settings.validate()
