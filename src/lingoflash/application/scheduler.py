"""
Rating-driven review scheduler.

Computes the next review state for a card from its current state and a
learner rating, using the two-parameter ease adjustment:

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

This is a pure computation module with no I/O. The only ambient input is
the current time, which callers may pass explicitly.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from fractions import Fraction

from lingoflash.domain.constants import (
    EASE_BONUS,
    EASE_LINEAR_PENALTY,
    EASE_QUADRATIC_PENALTY,
    FIRST_INTERVAL,
    HARD_INTERVAL_FACTOR,
    INITIAL_EASE,
    LATEST_DUE,
    MAX_QUALITY,
    MIN_EASE,
    MIN_HARD_INTERVAL,
    SECOND_INTERVAL,
)
from lingoflash.domain.review.models import Rating, ReviewState

logger = logging.getLogger(__name__)

QUALITY_BY_RATING = {
    Rating.HARD: 3,
    Rating.GOOD: 4,
    Rating.EASY: 5,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(now: datetime | None = None) -> datetime:
    """
    Normalize a reference time to an aware UTC datetime.

    None means the current time. Naive values are taken to be UTC already.
    """
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def initialize_review_state(now: datetime | None = None) -> ReviewState:
    """Neutral starting state for a card that just entered the library."""
    return ReviewState(
        next_review_due=ensure_utc(now),
        interval_days=0,
        repetition_count=0,
        easiness_factor=INITIAL_EASE,
    )


def parse_rating(value: Rating | str) -> Rating:
    """
    Coerce user input ("Good", "easy", Rating.HARD) into a Rating.

    Raises:
        ValueError: If the value is not one of again/hard/good/easy.
    """
    if isinstance(value, Rating):
        return value
    try:
        return Rating(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(r.value for r in Rating)
        raise ValueError(f"Unknown rating '{value}'. Expected one of: {choices}") from None


def adjust_ease(easiness_factor: float, quality: int) -> float:
    """
    Apply the ease adjustment for a successful review and clamp to the floor.

    q=5 adds 0.1, q=4 leaves ease unchanged, q=3 subtracts 0.14.
    """
    gap = MAX_QUALITY - quality
    updated = easiness_factor + (
        EASE_BONUS - gap * (EASE_LINEAR_PENALTY + gap * EASE_QUADRATIC_PENALTY)
    )
    return max(MIN_EASE, updated)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _grow_interval(previous: int, ease: float) -> int:
    try:
        return _round_half_up(previous * ease)
    except OverflowError:
        # Beyond float range: exact integer arithmetic
        return math.floor(previous * Fraction(ease) + Fraction(1, 2))


def _shrink_hard(interval: int) -> int:
    try:
        return math.floor(interval * HARD_INTERVAL_FACTOR)
    except OverflowError:
        return math.floor(interval * Fraction(HARD_INTERVAL_FACTOR))


def _due_after(now: datetime, days: int) -> datetime:
    try:
        return now + timedelta(days=days)
    except OverflowError:
        return LATEST_DUE


def calculate_next_review(
    current: ReviewState | None,
    rating: Rating | str,
    now: datetime | None = None,
) -> ReviewState:
    """
    Compute a card's new review state after a rating.

    Args:
        current: The card's current state. None is treated as a freshly
            initialized state.
        rating: The learner's rating for this encounter.
        now: Time of the rating; defaults to the current UTC time.
            Naive values are read as UTC.

    Returns:
        A new ReviewState. The input state is never modified. Intervals
        past the calendar limit keep their exact length but fall due at
        LATEST_DUE.
    """
    rating = parse_rating(rating)
    now = ensure_utc(now)
    state = current or initialize_review_state(now)

    interval = state.interval_days
    repetition = state.repetition_count
    ease = state.easiness_factor

    if rating is Rating.AGAIN:
        # Lapse: due immediately, ease untouched
        repetition = 0
        interval = 0
    else:
        ease = adjust_ease(ease, QUALITY_BY_RATING[rating])
        repetition += 1

        if repetition == 1:
            interval = FIRST_INTERVAL
        elif repetition == 2:
            interval = SECOND_INTERVAL
        else:
            interval = _grow_interval(interval, ease)

        # Hard answers are shrunk on top of the lower ease
        if rating is Rating.HARD and interval > 1:
            interval = max(MIN_HARD_INTERVAL, _shrink_hard(interval))

    logger.debug(
        f"{rating.value}: interval {state.interval_days}->{interval}d, "
        f"rep {state.repetition_count}->{repetition}, ease {state.easiness_factor:.2f}->{ease:.2f}"
    )

    return ReviewState(
        next_review_due=_due_after(now, interval),
        interval_days=interval,
        repetition_count=repetition,
        easiness_factor=ease,
    )
