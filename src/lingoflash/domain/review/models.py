"""
Domain models for vocabulary cards and their review state.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Literal

from lingoflash.domain.constants import MIN_EASE
from lingoflash.domain.exceptions import InvalidReviewStateError

SourceType = Literal["News", "Comedy", "YouTube", "Movie", "General"]


class Rating(str, Enum):
    """Recall quality reported by the learner, in increasing order."""

    AGAIN = "again"  # Total lapse
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


@dataclass(frozen=True)
class ReviewState:
    """
    Scheduling record for a single card.

    Attributes:
        next_review_due: UTC instant at which the card becomes reviewable again.
        interval_days: Current scheduling interval (0 means due immediately).
        repetition_count: Consecutive successful reviews since the last lapse.
        easiness_factor: Interval growth multiplier, never below 1.3.
    """

    next_review_due: datetime
    interval_days: int
    repetition_count: int
    easiness_factor: float

    def __post_init__(self):
        if self.interval_days < 0:
            raise InvalidReviewStateError(f"interval_days must be >= 0, got {self.interval_days}")
        if self.repetition_count < 0:
            raise InvalidReviewStateError(
                f"repetition_count must be >= 0, got {self.repetition_count}"
            )
        if self.easiness_factor < MIN_EASE:
            raise InvalidReviewStateError(
                f"easiness_factor must be >= {MIN_EASE}, got {self.easiness_factor}"
            )


@dataclass(frozen=True)
class Meaning:
    part_of_speech: str
    english: str
    chinese: str = ""


@dataclass(frozen=True)
class Example:
    sentence: str
    translation: str
    source_type: SourceType = "General"
    source_context: str | None = None  # e.g. "Friends - Season 2"


@dataclass(frozen=True)
class Flashcard:
    """
    A vocabulary card in the learner's library.

    Content fields are supplied by external collaborators (text generation,
    manual entry). Only `review_state` changes over the card's lifetime, and
    it is always replaced wholesale via `with_review_state`.
    """

    id: str
    word: str
    pronunciation_ipa: str | None = None
    meanings: list[Meaning] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    review_state: ReviewState | None = None

    def with_review_state(self, state: ReviewState) -> "Flashcard":
        return replace(self, review_state=state)
