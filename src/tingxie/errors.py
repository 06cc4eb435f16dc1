"""Exceptions raised by tingxie."""


class TingxieError(Exception):
    """Base exception for tingxie errors."""


class InvalidWordRecordError(TingxieError, ValueError):
    """Raised when a word record is malformed or breaks an invariant."""


class GroupNotFoundError(TingxieError, LookupError):
    """Raised when no word carries the requested group title."""

    def __init__(self, group_title: str):
        self.group_title = group_title
        super().__init__(f"Group {group_title!r} not found")


class WordNotFoundError(TingxieError, LookupError):
    """Raised when a word id is not known."""

    def __init__(self, word_id: str):
        self.word_id = word_id
        super().__init__(f"Word {word_id} not found")


class BackupFormatError(TingxieError, ValueError):
    """Raised when a backup file cannot be read."""


class MissingGroupTitleError(TingxieError, ValueError):
    """Raised when a group session is requested without a group title."""
