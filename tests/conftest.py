from datetime import datetime, timedelta, timezone

import pytest

from lingoflash.domain.review.models import Flashcard, Meaning, ReviewState
from lingoflash.infrastructure.adapters.json_library import JsonLibraryRepository

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_card(
    card_id: str,
    word: str | None = None,
    due_in_days: float | None = 0,
    interval: int = 0,
    repetition: int = 0,
    ease: float = 2.5,
    now: datetime = NOW,
) -> Flashcard:
    """Build a card whose next review is `due_in_days` from `now` (None = never reviewed)."""
    state = None
    if due_in_days is not None:
        state = ReviewState(
            next_review_due=now + timedelta(days=due_in_days),
            interval_days=interval,
            repetition_count=repetition,
            easiness_factor=ease,
        )
    return Flashcard(
        id=card_id,
        word=word or card_id,
        meanings=[Meaning(part_of_speech="noun", english=f"meaning of {word or card_id}")],
        review_state=state,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def library_path(tmp_path):
    return tmp_path / "library.json"


@pytest.fixture
def repo(library_path):
    return JsonLibraryRepository(library_path)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/library
    monkeypatch.setenv("HOME", str(home))
    for var in ("LINGOFLASH_LIBRARY_PATH", "LINGOFLASH_SEED", "LINGOFLASH_PRACTICE_CAP"):
        monkeypatch.delenv(var, raising=False)
    return home
