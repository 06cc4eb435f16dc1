"""Word record used by the scheduler and session selector."""
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any, Dict, Optional
import math
import uuid

from tingxie.config import DEFAULT_EASE_FACTOR, DEFAULT_GROUP_TITLE, MASTERED_STREAK, MIN_EASE_FACTOR
from tingxie.errors import InvalidWordRecordError

_REQUIRED_FIELDS = ("id", "text", "addedAt", "nextReview", "streak", "easeFactor", "interval")


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def from_millis(value: float) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def to_millis(value: datetime) -> int:
    return int(round(to_utc(value).timestamp() * 1000))


def _parse_timestamp(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, bool):
        raise InvalidWordRecordError(f"{key} must be a timestamp, got {value!r}")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidWordRecordError(f"{key} must be a finite timestamp, got {value!r}")
        return from_millis(value)
    if isinstance(value, str):
        try:
            return to_utc(datetime.fromisoformat(value))
        except ValueError:
            pass
    raise InvalidWordRecordError(f"{key} must be a timestamp, got {value!r}")


def _parse_optional_timestamp(key: str, value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return _parse_timestamp(key, value)


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidWordRecordError(f"{key} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidWordRecordError(f"{key} must be finite, got {value!r}")
    if value != int(value):
        raise InvalidWordRecordError(f"{key} must be a whole number, got {value!r}")
    return int(value)


def _parse_float(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidWordRecordError(f"{key} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidWordRecordError(f"{key} must be finite, got {value!r}")
    return float(value)


@dataclass
class WordRecord:
    """One vocabulary entry and its scheduling state."""
    id: str
    text: str
    group_title: str
    added_at: datetime
    last_reviewed: Optional[datetime]
    next_review: datetime
    streak: int
    ease_factor: float
    interval: int  # days
    total_attempts: int = 0
    total_wrong: int = 0
    last_wrong_at: Optional[datetime] = None

    @property
    def is_mastered(self) -> bool:
        return self.streak > MASTERED_STREAK

    @property
    def is_new(self) -> bool:
        return self.streak == 0 and self.last_reviewed is None

    def is_due(self, now: datetime) -> bool:
        """Check whether the word may be presented at ``now``."""
        return self.next_review <= now

    def validate(self) -> "WordRecord":
        """Raise InvalidWordRecordError if the record breaks an invariant."""
        if not self.id:
            raise InvalidWordRecordError("Word id is required")
        if not math.isfinite(self.ease_factor) or self.ease_factor < MIN_EASE_FACTOR:
            raise InvalidWordRecordError(
                f"Word {self.id}: ease factor {self.ease_factor} is below {MIN_EASE_FACTOR}"
            )
        if self.streak < 0:
            raise InvalidWordRecordError(f"Word {self.id}: streak cannot be negative")
        if self.interval < 0:
            raise InvalidWordRecordError(f"Word {self.id}: interval cannot be negative")
        if not self.total_attempts >= self.total_wrong >= 0:
            raise InvalidWordRecordError(
                f"Word {self.id}: expected total_attempts >= total_wrong >= 0, "
                f"got {self.total_attempts} and {self.total_wrong}"
            )
        return self

    def copy(self, **changes: Any) -> "WordRecord":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WordRecord":
        """Build a record from its stored camelCase form.

        Records saved before error statistics existed lack ``totalAttempts``,
        ``totalWrong`` and ``lastWrongAt``; those default to zero/None. A record
        missing any scheduling field is rejected rather than guessed at.
        """
        if not isinstance(data, dict):
            raise InvalidWordRecordError(f"Word record must be an object, got {type(data).__name__}")

        missing = [key for key in _REQUIRED_FIELDS if data.get(key) is None]
        if missing:
            raise InvalidWordRecordError(
                f"Word record {data.get('id', '?')} is missing {', '.join(missing)}"
            )

        record = cls(
            id=str(data["id"]),
            text=str(data["text"]),
            group_title=data.get("groupTitle") or DEFAULT_GROUP_TITLE,
            added_at=_parse_timestamp("addedAt", data["addedAt"]),
            last_reviewed=_parse_optional_timestamp("lastReviewed", data.get("lastReviewed")),
            next_review=_parse_timestamp("nextReview", data["nextReview"]),
            streak=_parse_int("streak", data["streak"]),
            ease_factor=_parse_float("easeFactor", data["easeFactor"]),
            interval=_parse_int("interval", data["interval"]),
            total_attempts=_parse_int("totalAttempts", data.get("totalAttempts") or 0),
            total_wrong=_parse_int("totalWrong", data.get("totalWrong") or 0),
            last_wrong_at=_parse_optional_timestamp("lastWrongAt", data.get("lastWrongAt")),
        )
        return record.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase form with millisecond timestamps."""
        return {
            "id": self.id,
            "text": self.text,
            "groupTitle": self.group_title,
            "addedAt": to_millis(self.added_at),
            "lastReviewed": to_millis(self.last_reviewed) if self.last_reviewed else None,
            "nextReview": to_millis(self.next_review),
            "streak": self.streak,
            "easeFactor": self.ease_factor,
            "interval": self.interval,
            "totalAttempts": self.total_attempts,
            "totalWrong": self.total_wrong,
            "lastWrongAt": to_millis(self.last_wrong_at) if self.last_wrong_at else None,
        }


def create_word_record(text: str, group_title: Optional[str], now: datetime) -> WordRecord:
    """Create a fresh record that is due immediately."""
    return WordRecord(
        id=uuid.uuid4().hex,
        text=text,
        group_title=group_title or DEFAULT_GROUP_TITLE,
        added_at=now,
        last_reviewed=None,
        next_review=now,
        streak=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        total_attempts=0,
        total_wrong=0,
        last_wrong_at=None,
    )
