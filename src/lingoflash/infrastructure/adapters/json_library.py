"""
JSON Library Repository: Infrastructure adapter for a file-backed library.

Implements LibraryRepository on top of a single JSON file holding a list of
cards in the LingoFlash export layout:

    [{"id": ..., "word": ..., "meanings": [...], "examples": [...],
      "reviewData": {"nextReviewDate": <epoch ms>, "interval": 6,
                     "repetition": 2, "easeFactor": 2.5}}]
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from lingoflash.domain.constants import LATEST_DUE
from lingoflash.domain.exceptions import (
    CardNotFoundError,
    InvalidReviewStateError,
    LibraryCorruptError,
)
from lingoflash.domain.review.models import Example, Flashcard, Meaning, ReviewState
from lingoflash.domain.review.ports import LibraryRepository

logger = logging.getLogger(__name__)

# Last whole millisecond that still fits in a datetime
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MAX_EPOCH_MS = (LATEST_DUE - _EPOCH) // timedelta(milliseconds=1)


# ---------------------------------------------------------------------------
# Record <-> domain conversion
# ---------------------------------------------------------------------------


def review_state_from_record(data: Any) -> ReviewState | None:
    """
    Parse a `reviewData` record. Missing or malformed records yield None so
    the card is handled as never reviewed.
    """
    if not data:
        return None
    try:
        due_ms = data["nextReviewDate"]
        if due_ms > MAX_EPOCH_MS:
            due = LATEST_DUE
        else:
            due = datetime.fromtimestamp(due_ms / 1000, tz=timezone.utc)
        return ReviewState(
            next_review_due=due,
            interval_days=int(data["interval"]),
            repetition_count=int(data["repetition"]),
            easiness_factor=float(data["easeFactor"]),
        )
    except (KeyError, TypeError, ValueError, OverflowError, OSError, InvalidReviewStateError) as e:
        logger.warning(f"Ignoring malformed reviewData {data!r}: {e}")
        return None


def review_state_to_record(state: ReviewState) -> dict[str, Any]:
    return {
        "nextReviewDate": min(MAX_EPOCH_MS, int(round(state.next_review_due.timestamp() * 1000))),
        "interval": state.interval_days,
        "repetition": state.repetition_count,
        "easeFactor": state.easiness_factor,
    }


def _meanings_from_record(raw: Any) -> list[Meaning]:
    if not raw:
        return []
    # Legacy layout: a single {english, chinese} object
    if isinstance(raw, dict):
        raw = [{"partOfSpeech": "general", **raw}]
    return [
        Meaning(
            part_of_speech=m.get("partOfSpeech", "general"),
            english=m.get("english", ""),
            chinese=m.get("chinese", ""),
        )
        for m in raw
        if isinstance(m, dict)
    ]


def card_from_record(data: dict[str, Any]) -> Flashcard:
    return Flashcard(
        id=str(data["id"]),
        word=str(data["word"]),
        pronunciation_ipa=data.get("pronunciation_ipa"),
        meanings=_meanings_from_record(data.get("meanings")),
        examples=[
            Example(
                sentence=e.get("sentence", ""),
                translation=e.get("translation", ""),
                source_type=e.get("source_type", "General"),
                source_context=e.get("source_context"),
            )
            for e in data.get("examples") or []
            if isinstance(e, dict)
        ],
        review_state=review_state_from_record(data.get("reviewData")),
    )


def card_to_record(card: Flashcard) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": card.id,
        "word": card.word,
        "meanings": [
            {"partOfSpeech": m.part_of_speech, "english": m.english, "chinese": m.chinese}
            for m in card.meanings
        ],
        "examples": [
            {
                "sentence": e.sentence,
                "translation": e.translation,
                "source_type": e.source_type,
                **({"source_context": e.source_context} if e.source_context else {}),
            }
            for e in card.examples
        ],
    }
    if card.pronunciation_ipa:
        record["pronunciation_ipa"] = card.pronunciation_ipa
    if card.review_state is not None:
        record["reviewData"] = review_state_to_record(card.review_state)
    return record


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class JsonLibraryRepository(LibraryRepository):
    """
    Stores the library as a JSON list on disk.

    Every mutation rewrites the whole file through a temporary file and
    os.replace, so readers only ever see a complete library. Records that
    cannot be parsed as cards are skipped by read() but written back
    unchanged, in place, on every mutation.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> list[tuple[Flashcard | None, Any]]:
        """Parse the file into (card, raw record) pairs; card is None for unreadable records."""
        if not self.path.exists():
            return []

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise LibraryCorruptError(f"Could not parse library {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise LibraryCorruptError(f"Library {self.path} must contain a JSON list")

        entries: list[tuple[Flashcard | None, Any]] = []
        for record in raw:
            try:
                entries.append((card_from_record(record), record))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed card record {record!r}: {e}")
                entries.append((None, record))
        return entries

    def read(self) -> list[Flashcard]:
        cards = [card for card, _ in self._load() if card is not None]
        logger.debug(f"Loaded {len(cards)} card(s) from {self.path}")
        return cards

    def write(self, card: Flashcard) -> None:
        self.write_many([card])

    def write_many(self, cards: list[Flashcard]) -> None:
        updates = {card.id: card for card in cards}
        entries = self._load()
        found: set[str] = set()

        for i, (existing, _) in enumerate(entries):
            if existing is not None and existing.id in updates:
                entries[i] = (updates[existing.id], None)
                found.add(existing.id)

        for card_id in updates:
            if card_id not in found:
                raise CardNotFoundError(card_id)
        self._save(entries)

    def add(self, cards: list[Flashcard]) -> None:
        self._save([(card, None) for card in cards] + self._load())

    def remove(self, card_id: str) -> bool:
        entries = self._load()
        kept = [(c, raw) for c, raw in entries if c is None or c.id != card_id]
        if len(kept) == len(entries):
            return False
        self._save(kept)
        return True

    def replace_all(self, cards: list[Flashcard]) -> None:
        """Atomically replace the stored cards. Unreadable records are kept."""
        unreadable = [(None, raw) for card, raw in self._load() if card is None]
        self._save([(card, None) for card in cards] + unreadable)

    def _save(self, entries: list[tuple[Flashcard | None, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        records = [card_to_record(card) if card is not None else raw for card, raw in entries]
        payload = json.dumps(records, ensure_ascii=False, indent=2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(records)} record(s) to {self.path}")
