import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from lingoflash.application.config import resolve_config
from lingoflash.application.library_service import LibraryService
from lingoflash.consts import VERSION
from lingoflash.domain.exceptions import CardNotFoundError, LingoFlashError
from lingoflash.domain.review.models import Flashcard, Rating, ReviewState

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("lingoflash.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"LingoFlash Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("LingoFlash Server shutting down...")


app = FastAPI(
    title="LingoFlash Server",
    description="Spaced-repetition scheduling API for the LingoFlash library.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ReviewStateModel(BaseModel):
    next_review_due: datetime
    interval_days: int
    repetition_count: int
    easiness_factor: float


class CardModel(BaseModel):
    id: str
    word: str
    pronunciation_ipa: str | None = None
    meanings: list[dict[str, str]] = []
    review_state: ReviewStateModel | None = None


class SessionResponse(BaseModel):
    empty: bool
    message: str | None = None
    cards: list[CardModel]


class StatsResponse(BaseModel):
    total: int
    due: int
    learned: int


class AddCardsRequest(BaseModel):
    words: list[str]


class AddCardsResponse(BaseModel):
    added: list[CardModel]
    skipped: int


class ReviewRequest(BaseModel):
    rating: Rating


def _state_model(state: ReviewState | None) -> ReviewStateModel | None:
    if state is None:
        return None
    return ReviewStateModel(
        next_review_due=state.next_review_due,
        interval_days=state.interval_days,
        repetition_count=state.repetition_count,
        easiness_factor=state.easiness_factor,
    )


def _card_model(card: Flashcard) -> CardModel:
    return CardModel(
        id=card.id,
        word=card.word,
        pronunciation_ipa=card.pronunciation_ipa,
        meanings=[
            {"part_of_speech": m.part_of_speech, "english": m.english, "chinese": m.chinese}
            for m in card.meanings
        ],
        review_state=_state_model(card.review_state),
    )


def _service() -> LibraryService:
    from lingoflash.application.factory import get_library_service

    return get_library_service(resolve_config())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/stats", response_model=StatsResponse)
def get_stats():
    from lingoflash.application.scheduler import utc_now
    from lingoflash.application.stats import compute_library_stats

    try:
        stats = compute_library_stats(_service().list_cards(), utc_now())
    except LingoFlashError as e:
        logger.error(f"Stats failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return StatsResponse(total=stats.total, due=stats.due, learned=stats.learned)


@app.get("/cards", response_model=list[CardModel])
def list_cards(search: str | None = None):
    try:
        cards = _service().search(search or "")
    except LingoFlashError as e:
        logger.error(f"Listing cards failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return [_card_model(c) for c in cards]


@app.post("/cards", response_model=AddCardsResponse)
def add_cards(req: AddCardsRequest):
    """Add words to the library. Words already present are skipped."""
    from lingoflash.application.library_service import parse_word_list

    words = [w for chunk in req.words for w in parse_word_list(chunk)]
    try:
        added = _service().add_words(words)
    except LingoFlashError as e:
        logger.error(f"Adding cards failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return AddCardsResponse(added=[_card_model(c) for c in added], skipped=len(words) - len(added))


@app.delete("/cards/{card_id}")
def delete_card(card_id: str):
    try:
        removed = _service().remove(card_id)
    except LingoFlashError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    if not removed:
        raise HTTPException(status_code=404, detail=f"No card with id '{card_id}'")
    return {"ok": True}


@app.post("/cards/{card_id}/review", response_model=CardModel)
def review_card(card_id: str, req: ReviewRequest):
    """
    Apply a rating to a card and return it with its new review state.
    """
    try:
        card = _service().rate(card_id, req.rating)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except LingoFlashError as e:
        logger.error(f"Review failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e
    return _card_model(card)


@app.get("/session/due", response_model=SessionResponse)
def due_session():
    """Cards due for review, most overdue first."""
    from lingoflash.application.session_builder import select_due

    try:
        selection = select_due(_service().list_cards())
    except LingoFlashError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return SessionResponse(
        empty=selection.is_empty,
        message=selection.message,
        cards=[_card_model(c) for c in selection.cards],
    )


@app.get("/session/practice", response_model=SessionResponse)
def practice_session(seed: int | None = None):
    """A random practice batch: due cards first, topped up with the rest."""
    from lingoflash.application.factory import get_rng
    from lingoflash.application.session_builder import select_practice_batch

    config = resolve_config({"seed": seed})
    try:
        cards = _service().list_cards()
    except LingoFlashError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    selection = select_practice_batch(
        cards,
        floor=config.practice_floor,
        cap=config.practice_cap,
        rng=get_rng(config),
    )
    return SessionResponse(
        empty=selection.is_empty,
        message=selection.message,
        cards=[_card_model(c) for c in selection.cards],
    )
