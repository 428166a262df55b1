from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from lingoflash.application.library_service import LibraryService, parse_word_list
from lingoflash.domain.exceptions import CardNotFoundError
from lingoflash.domain.review.models import Flashcard, Meaning, Rating
from tests.conftest import make_card


@pytest.fixture
def service(repo):
    return LibraryService(repo)


# --- parse_word_list ---


def test_parse_word_list_splits_commas_and_newlines():
    assert parse_word_list("apple, banana\ncherry,,\n  \n date ") == [
        "apple",
        "banana",
        "cherry",
        "date",
    ]


def test_parse_word_list_empty():
    assert parse_word_list(" , \n") == []


# --- add ---


def test_add_words_initializes_review_state(service, now):
    added = service.add_words(["serendipity"], now=now)

    assert len(added) == 1
    card = service.list_cards()[0]
    assert card.word == "serendipity"
    assert card.id.startswith("card-")
    assert card.review_state is not None
    assert card.review_state.next_review_due == now
    assert card.review_state.interval_days == 0
    assert card.review_state.easiness_factor == 2.5


def test_add_skips_duplicates_case_insensitively(service, now):
    service.add_words(["Apple"], now=now)
    added = service.add_words(["apple", "APPLE", "banana", "Banana"], now=now)

    assert [c.word for c in added] == ["banana"]
    assert sorted(c.word for c in service.list_cards()) == ["Apple", "banana"]


def test_new_cards_are_prepended(service, now):
    service.add_words(["first"], now=now)
    service.add_words(["second", "third"], now=now)
    assert [c.word for c in service.list_cards()] == ["second", "third", "first"]


def test_add_cards_keeps_existing_review_state(service, now):
    card = make_card("c1", word="kept", due_in_days=4, interval=4, repetition=2)
    service.add_cards([card], now=now)
    stored = service.get("c1")
    assert stored.review_state == card.review_state


def test_add_nothing_does_not_write():
    repo = MagicMock()
    repo.read.return_value = [make_card("a", word="apple")]
    LibraryService(repo).add_words(["apple"])
    repo.add.assert_not_called()


# --- remove / get ---


def test_remove(service, now):
    added = service.add_words(["gone"], now=now)
    assert service.remove(added[0].id) is True
    assert service.list_cards() == []
    assert service.remove(added[0].id) is False


def test_get_unknown_card_raises(service):
    with pytest.raises(CardNotFoundError):
        service.get("missing")


# --- search ---


def test_search_matches_word_and_meanings(service, repo, now):
    repo.add(
        [
            Flashcard(
                id="1",
                word="ephemeral",
                meanings=[Meaning("adjective", "lasting a very short time", "短暂的")],
            ),
            Flashcard(id="2", word="Resilient", meanings=[Meaning("adjective", "tough", "坚韧的")]),
        ]
    )

    assert [c.id for c in service.search("EPHEM")] == ["1"]
    assert [c.id for c in service.search("short")] == ["1"]
    assert [c.id for c in service.search("坚韧")] == ["2"]
    assert [c.id for c in service.search("resil")] == ["2"]
    assert len(service.search("")) == 2
    assert service.search("zzz") == []


# --- rate ---


def test_rate_persists_new_state(service, now):
    card = service.add_words(["persist"], now=now)[0]

    updated = service.rate(card.id, Rating.GOOD, now=now)

    assert updated.review_state.interval_days == 1
    stored = service.get(card.id)
    assert stored.review_state == updated.review_state
    assert stored.review_state.next_review_due == now + timedelta(days=1)


def test_rate_unknown_card(service):
    with pytest.raises(CardNotFoundError):
        service.rate("missing", "good")


def test_rate_invalid_rating_leaves_card_untouched(service, now):
    card = service.add_words(["steady"], now=now)[0]
    with pytest.raises(ValueError):
        service.rate(card.id, "brilliant", now=now)
    assert service.get(card.id).review_state == card.review_state


# --- ensure_review_states ---


def test_ensure_review_states_fills_missing(service, repo, now):
    repo.add([make_card("a", due_in_days=None), make_card("b", due_in_days=3)])

    fixed = service.ensure_review_states(now)

    assert fixed == 1
    a = service.get("a")
    assert a.review_state.next_review_due == now
    assert service.get("b").review_state.interval_days == 0
    assert service.ensure_review_states(now) == 0


def test_ensure_review_states_saves_once(now):
    repo = MagicMock()
    repo.read.return_value = [
        make_card("a", due_in_days=None),
        make_card("b", due_in_days=3),
        make_card("c", due_in_days=None),
    ]

    assert LibraryService(repo).ensure_review_states(now) == 2

    repo.write.assert_not_called()
    repo.write_many.assert_called_once()
    (written,) = repo.write_many.call_args.args
    assert [c.id for c in written] == ["a", "c"]
    assert all(c.review_state.next_review_due == now for c in written)


def test_ensure_review_states_without_gaps_does_not_write(now):
    repo = MagicMock()
    repo.read.return_value = [make_card("b", due_in_days=3)]
    assert LibraryService(repo).ensure_review_states(now) == 0
    repo.write_many.assert_not_called()
