"""
Library statistics for the learner dashboard.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from lingoflash.application.scheduler import ensure_utc
from lingoflash.application.session_builder import is_due
from lingoflash.domain.review.models import Flashcard, ReviewState

SECONDS_PER_DAY = 86400


@dataclass
class LibraryStats:
    """Headline counters for a library."""

    total: int
    due: int
    learned: int  # Cards that have graduated to a non-zero interval


def compute_library_stats(cards: Sequence[Flashcard], now: datetime) -> LibraryStats:
    now = ensure_utc(now)
    return LibraryStats(
        total=len(cards),
        due=sum(1 for card in cards if is_due(card, now)),
        learned=sum(
            1 for card in cards if card.review_state and card.review_state.interval_days > 0
        ),
    )


def next_review_label(state: ReviewState | None, now: datetime) -> str:
    """
    Human-readable time until the next review.

    Partial days round up, so a card due in 3 hours is "Due in 1 day".
    """
    if state is None:
        return "New"

    remaining = (state.next_review_due - ensure_utc(now)).total_seconds()
    if remaining <= 0:
        return "Review Now"

    days = math.ceil(remaining / SECONDS_PER_DAY)
    return f"Due in {days} day{'s' if days > 1 else ''}"
