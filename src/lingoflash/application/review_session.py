"""
Due-review session.

Walks an ordered deck of due cards, feeding each rating through the
scheduler and writing the result back to both the library and the
session's working deck before moving on.
"""

import logging
from datetime import datetime

from lingoflash.application.scheduler import calculate_next_review
from lingoflash.application.session_builder import SessionSelection, select_due
from lingoflash.domain.exceptions import SessionCompleteError
from lingoflash.domain.review.models import Flashcard, Rating, ReviewState
from lingoflash.domain.review.ports import LibraryRepository

logger = logging.getLogger(__name__)


class ReviewSession:
    def __init__(self, repository: LibraryRepository, cards: list[Flashcard]):
        self._repo = repository
        self.deck = list(cards)
        self.position = 0

    @classmethod
    def start(
        cls, repository: LibraryRepository, now: datetime | None = None
    ) -> tuple["ReviewSession | None", SessionSelection]:
        """
        Open a session over every due card in the library.

        Returns:
            (session, selection). The session is None when nothing is due;
            the selection then carries the message to show the learner.
        """
        selection = select_due(repository.read(), now)
        if selection.is_empty:
            return None, selection
        logger.info(f"Starting review session with {len(selection)} card(s)")
        return cls(repository, selection.cards), selection

    @property
    def is_complete(self) -> bool:
        return self.position >= len(self.deck)

    @property
    def remaining(self) -> int:
        return max(0, len(self.deck) - self.position)

    @property
    def current(self) -> Flashcard | None:
        if self.is_complete:
            return None
        return self.deck[self.position]

    def rate(self, rating: Rating | str, now: datetime | None = None) -> ReviewState:
        """
        Rate the current card, persist its new state and advance.

        Raises:
            SessionCompleteError: If every card has already been rated.
        """
        card = self.current
        if card is None:
            raise SessionCompleteError("Review session is already complete")

        state = calculate_next_review(card.review_state, rating, now)
        updated = card.with_review_state(state)

        self._repo.write(updated)
        self.deck[self.position] = updated
        self.position += 1

        if self.is_complete:
            logger.info(f"Review session complete ({len(self.deck)} card(s))")
        return state
