"""
Library Service: Application layer orchestrator.

Coordinates the card library (through the LibraryRepository port) with the
scheduler: adding and removing cards, searching, and committing ratings.
"""

import logging
import re
from collections.abc import Iterable
from datetime import datetime

from lingoflash.application.id_service import generate_card_id
from lingoflash.application.scheduler import calculate_next_review, initialize_review_state
from lingoflash.domain.exceptions import CardNotFoundError
from lingoflash.domain.review.models import Flashcard, Rating
from lingoflash.domain.review.ports import LibraryRepository

logger = logging.getLogger(__name__)

_WORD_SEPARATORS = re.compile(r"[\n,]+")


def parse_word_list(text: str) -> list[str]:
    """Split free-form input ("apple, banana\\ncherry") into trimmed words."""
    return [w.strip() for w in _WORD_SEPARATORS.split(text) if w.strip()]


class LibraryService:
    """
    Application service for managing the learner's card library.

    Follows Dependency Inversion: depends on the LibraryRepository
    abstraction, not a concrete storage adapter.
    """

    def __init__(self, repository: LibraryRepository):
        self._repo = repository

    def list_cards(self) -> list[Flashcard]:
        return self._repo.read()

    def get(self, card_id: str) -> Flashcard:
        for card in self._repo.read():
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    def add_cards(self, cards: Iterable[Flashcard], now: datetime | None = None) -> list[Flashcard]:
        """
        Add cards whose word is not already in the library.

        Words are compared case-insensitively against the library and within
        the batch. Cards without review state get a fresh initial state.

        Returns:
            The cards that were actually added.
        """
        existing = {card.word.lower() for card in self._repo.read()}
        added: list[Flashcard] = []

        for card in cards:
            key = card.word.lower()
            if key in existing:
                logger.debug(f"Skipping duplicate word '{card.word}'")
                continue
            existing.add(key)
            if card.review_state is None:
                card = card.with_review_state(initialize_review_state(now))
            added.append(card)

        if added:
            self._repo.add(added)
            logger.info(f"Added {len(added)} card(s) to the library")
        return added

    def add_words(self, words: Iterable[str], now: datetime | None = None) -> list[Flashcard]:
        """Create blank cards for the given words and add them."""
        cards = [Flashcard(id=generate_card_id(), word=word.strip()) for word in words if word.strip()]
        return self.add_cards(cards, now=now)

    def ensure_review_states(self, now: datetime | None = None) -> int:
        """
        Give every card without review state (imported, or whose stored state
        was unreadable) the initial state. Returns the number of cards fixed.
        """
        fixed = [
            card.with_review_state(initialize_review_state(now))
            for card in self._repo.read()
            if card.review_state is None
        ]
        if fixed:
            self._repo.write_many(fixed)
            logger.info(f"Initialized review state for {len(fixed)} card(s)")
        return len(fixed)

    def remove(self, card_id: str) -> bool:
        removed = self._repo.remove(card_id)
        if removed:
            logger.info(f"Removed card {card_id}")
        return removed

    def search(self, term: str) -> list[Flashcard]:
        """
        Find cards whose word or English meaning contains `term`
        (case-insensitive), or whose Chinese meaning contains it.
        """
        cards = self._repo.read()
        if not term:
            return cards

        needle = term.lower()
        return [
            card
            for card in cards
            if needle in card.word.lower()
            or any(needle in m.english.lower() or term in m.chinese for m in card.meanings)
        ]

    def rate(self, card_id: str, rating: Rating | str, now: datetime | None = None) -> Flashcard:
        """
        Apply a rating to a card and persist the replaced card.

        Raises:
            CardNotFoundError: If the card is not in the library.
            ValueError: If the rating is not recognised.
        """
        card = self.get(card_id)
        updated = card.with_review_state(calculate_next_review(card.review_state, rating, now))
        self._repo.write(updated)
        return updated
