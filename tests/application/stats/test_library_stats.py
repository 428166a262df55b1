from datetime import timedelta

from lingoflash.application.stats import compute_library_stats, next_review_label
from lingoflash.domain.review.models import ReviewState
from tests.conftest import make_card


def test_compute_library_stats(now):
    cards = [
        make_card("new", due_in_days=None),
        make_card("due", due_in_days=-1, interval=0),
        make_card("learned_due", due_in_days=-1, interval=6, repetition=2),
        make_card("learned_later", due_in_days=6, interval=6, repetition=2),
    ]
    stats = compute_library_stats(cards, now)
    assert stats.total == 4
    assert stats.due == 3
    assert stats.learned == 2


def test_compute_library_stats_empty(now):
    stats = compute_library_stats([], now)
    assert (stats.total, stats.due, stats.learned) == (0, 0, 0)


def _state(due):
    return ReviewState(next_review_due=due, interval_days=1, repetition_count=1, easiness_factor=2.5)


def test_next_review_label_new(now):
    assert next_review_label(None, now) == "New"


def test_next_review_label_due(now):
    assert next_review_label(_state(now), now) == "Review Now"
    assert next_review_label(_state(now - timedelta(days=2)), now) == "Review Now"


def test_next_review_label_rounds_partial_days_up(now):
    assert next_review_label(_state(now + timedelta(hours=3)), now) == "Due in 1 day"
    assert next_review_label(_state(now + timedelta(days=1, hours=1)), now) == "Due in 2 days"
    assert next_review_label(_state(now + timedelta(days=15)), now) == "Due in 15 days"


def test_naive_now_is_read_as_utc(now):
    naive = now.replace(tzinfo=None)
    card = make_card("soon", due_in_days=2, interval=2, repetition=1)
    assert next_review_label(card.review_state, naive) == "Due in 2 days"
    assert compute_library_stats([card], naive).due == 0
