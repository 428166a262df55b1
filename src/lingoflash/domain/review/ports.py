"""
Ports (interfaces) for library storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Flashcard


class LibraryRepository(ABC):
    """
    Port for reading and writing the learner's card library.

    Implementations:
        - JsonLibraryRepository: Stores the library as a JSON file on disk.
    """

    @abstractmethod
    def read(self) -> list[Flashcard]:
        """
        Return every card in library order (newest first).
        """
        pass

    @abstractmethod
    def write(self, card: Flashcard) -> None:
        """
        Replace the stored card that has the same ID.

        Raises:
            CardNotFoundError: If no card with that ID exists.
        """
        pass

    @abstractmethod
    def write_many(self, cards: list[Flashcard]) -> None:
        """
        Replace several stored cards in one operation.

        Raises:
            CardNotFoundError: If any card ID is not in the library. Nothing
                is written in that case.
        """
        pass

    @abstractmethod
    def add(self, cards: list[Flashcard]) -> None:
        """
        Prepend new cards to the library, preserving their given order.
        """
        pass

    @abstractmethod
    def remove(self, card_id: str) -> bool:
        """
        Delete a card. Returns False if it did not exist.
        """
        pass
