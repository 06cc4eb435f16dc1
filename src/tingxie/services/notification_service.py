"""Service for deciding when to remind the learner about due words."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from tingxie.config import NotificationSettings, settings as app_settings
from tingxie.models.word import WordRecord

logger = logging.getLogger(__name__)


class ReminderService:
    """Decides whether a review reminder is due and what it says.

    Delivering the reminder is left to the caller.
    """

    def __init__(self, settings: Optional[NotificationSettings] = None):
        """Initialize the service with notification settings."""
        self.settings = settings or app_settings.notification

    @property
    def throttle(self) -> timedelta:
        return timedelta(minutes=self.settings.reminder_throttle_minutes)

    def get_due_words(self, words: Sequence[WordRecord], now: datetime) -> List[WordRecord]:
        """Get words that are due for review."""
        return [word for word in words if word.is_due(now)]

    def should_send_reminder(
        self,
        words: Sequence[WordRecord],
        now: datetime,
        last_sent_at: Optional[datetime] = None,
    ) -> bool:
        """Check if a reminder should be sent."""
        if last_sent_at is not None and now - last_sent_at < self.throttle:
            logger.debug("Reminder throttled, last sent at %s", last_sent_at)
            return False

        due_count = len(self.get_due_words(words, now))
        if not due_count:
            logger.debug("No words due, skipping reminder")
            return False

        logger.info("Reminder due for %d words", due_count)
        return True

    def get_reminder_message(self, words: Sequence[WordRecord], now: datetime) -> Optional[str]:
        """Generate a review reminder message, or None if nothing is due."""
        due_words = self.get_due_words(words, now)
        if not due_words:
            return None

        preview = self.settings.preview_words
        message = (
            f"⏰ Time for Review!\n\n"
            f"You have {len(due_words)} words to review:\n"
        )
        for word in due_words[:preview]:
            message += f"• {word.text}\n"

        if len(due_words) > preview:
            message += f"... and {len(due_words) - preview} more\n"

        return message
