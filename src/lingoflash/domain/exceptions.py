"""Exception hierarchy shared by every layer."""


class LingoFlashError(Exception):
    """Base class for errors the interface layer reports to the user."""


class InvalidReviewStateError(LingoFlashError, ValueError):
    """A review state violates its numeric invariants."""


class CardNotFoundError(LingoFlashError, KeyError):
    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"No card with id '{self.card_id}' in the library"


class SessionCompleteError(LingoFlashError):
    """Raised when a rating arrives after the last card of a session."""


class LibraryCorruptError(LingoFlashError):
    """The persisted library could not be parsed."""
