"""
Session builder for review and practice sessions.

Builds card sequences from the library by:
1. Filtering for due cards (no review state, or next review in the past)
2. Ordering due reviews so the most overdue cards surface first
3. Drawing bounded practice batches, backfilled with not-yet-due cards

Selection is read-only: it never modifies a card or its review state.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from lingoflash.application.scheduler import ensure_utc
from lingoflash.domain.constants import (
    EMPTY_LIBRARY_MESSAGE,
    NOTHING_DUE_MESSAGE,
    PRACTICE_BATCH_CAP,
    PRACTICE_POOL_FLOOR,
)
from lingoflash.domain.review.models import Flashcard

logger = logging.getLogger(__name__)

# Sort key for cards without review state: more overdue than any real date
NEVER_REVIEWED = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class SessionSelection:
    """Result of a selection. An empty selection carries a user-facing message."""

    cards: list[Flashcard] = field(default_factory=list)
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)


def is_due(card: Flashcard, now: datetime) -> bool:
    """
    A card is due if it was never reviewed or its next review has passed.
    A naive `now` is read as UTC.
    """
    return card.review_state is None or card.review_state.next_review_due <= ensure_utc(now)


def select_due(library: Sequence[Flashcard], now: datetime | None = None) -> SessionSelection:
    """
    Select every due card, most overdue first.

    Cards without review state sort before all others. Ties keep their
    library order.

    Returns:
        SessionSelection; empty with NOTHING_DUE_MESSAGE if nothing is due.
    """
    now = ensure_utc(now)
    due_cards = [card for card in library if is_due(card, now)]

    if not due_cards:
        logger.debug(f"No due cards among {len(library)}")
        return SessionSelection(message=NOTHING_DUE_MESSAGE)

    due_cards.sort(key=_due_sort_key)
    logger.debug(f"Selected {len(due_cards)}/{len(library)} due cards")
    return SessionSelection(cards=due_cards)


def _due_sort_key(card: Flashcard) -> datetime:
    if card.review_state is None:
        return NEVER_REVIEWED
    return card.review_state.next_review_due


def select_practice_batch(
    library: Sequence[Flashcard],
    now: datetime | None = None,
    floor: int = PRACTICE_POOL_FLOOR,
    cap: int = PRACTICE_BATCH_CAP,
    rng: random.Random | None = None,
) -> SessionSelection:
    """
    Draw a random, bounded batch of cards for a drill (e.g. dictation).

    Args:
        library: All cards in the library.
        now: Reference time for the due test.
        floor: Minimum pool size before backfilling with not-yet-due cards.
        cap: Maximum number of cards in the batch.
        rng: Source of randomness; pass a seeded Random for reproducible draws.

    Returns:
        SessionSelection with up to `cap` cards; empty with
        EMPTY_LIBRARY_MESSAGE only when the library itself is empty.
    """
    if not library:
        return SessionSelection(message=EMPTY_LIBRARY_MESSAGE)

    now = ensure_utc(now)
    rng = rng or random.Random()

    pool = [card for card in library if is_due(card, now)]
    if len(pool) < floor:
        for card in library:
            if len(pool) >= floor:
                break
            if not is_due(card, now):
                pool.append(card)

    batch = rng.sample(pool, min(cap, len(pool)))
    logger.debug(f"Practice batch: {len(batch)} drawn from pool of {len(pool)}")
    return SessionSelection(cards=batch)
