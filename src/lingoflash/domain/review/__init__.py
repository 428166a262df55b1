# Domain Review Package
from .models import Example, Flashcard, Meaning, Rating, ReviewState
from .ports import LibraryRepository

__all__ = ["Example", "Flashcard", "Meaning", "Rating", "ReviewState", "LibraryRepository"]
