"""Centralized constants for the LingoFlash scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

from datetime import datetime, timezone

# ---------- Review state ----------
INITIAL_EASE = 2.5
MIN_EASE = 1.3

# ---------- Intervals (days) ----------
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
HARD_INTERVAL_FACTOR = 0.8
MIN_HARD_INTERVAL = 1

# Latest representable review date; longer intervals are due at this instant
LATEST_DUE = datetime.max.replace(tzinfo=timezone.utc)

# ---------- Ease adjustment ----------
MAX_QUALITY = 5
EASE_BONUS = 0.1
EASE_LINEAR_PENALTY = 0.08
EASE_QUADRATIC_PENALTY = 0.02

# ---------- Practice batches ----------
PRACTICE_POOL_FLOOR = 10
PRACTICE_BATCH_CAP = 10

# ---------- User-facing messages ----------
NOTHING_DUE_MESSAGE = "No cards due for review!"
EMPTY_LIBRARY_MESSAGE = "Add some words to your library first!"
