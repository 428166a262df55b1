# Application Package
from .scheduler import calculate_next_review, initialize_review_state
from .session_builder import SessionSelection, select_due, select_practice_batch

__all__ = [
    "initialize_review_state",
    "calculate_next_review",
    "SessionSelection",
    "select_due",
    "select_practice_batch",
]
