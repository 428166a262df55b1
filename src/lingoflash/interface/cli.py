"""LingoFlash CLI: library management, review sessions and practice drills."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from lingoflash.application.config import AppConfig, resolve_config
from lingoflash.domain.exceptions import LingoFlashError
from lingoflash.domain.review.models import Flashcard, Rating

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="lingoflash: Spaced-repetition vocabulary trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage lingoflash configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

RATING_COLORS = {
    Rating.AGAIN: "red",
    Rating.HARD: "yellow",
    Rating.GOOD: "blue",
    Rating.EASY: "green",
}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    library: Annotated[
        Path | None, typer.Option("--library", "-l", help="Path to the library JSON file.")
    ] = None,
):
    """Global settings for lingoflash."""
    ctx.ensure_object(dict)
    ctx.obj["library_path"] = library
    ctx.obj["verbose"] = verbose or None


def _config(ctx: typer.Context, **overrides) -> AppConfig:
    obj = ctx.obj or {}
    try:
        config = resolve_config(
            {"library_path": obj.get("library_path"), "verbose": obj.get("verbose"), **overrides}
        )
    except ValidationError as e:
        _fail(e)
    _set_log_level(config.verbose)
    return config


def _set_log_level(verbose: int) -> None:
    if verbose >= 2:
        logging.getLogger().setLevel(logging.DEBUG)
    elif verbose == 1:
        logging.getLogger().setLevel(logging.INFO)
    else:
        logging.getLogger().setLevel(logging.WARNING)


def _fail(error: Exception) -> None:
    typer.secho(f"Error: {error}", fg="red", err=True)
    raise typer.Exit(1)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _describe(card: Flashcard, now: datetime) -> str:
    from lingoflash.application.stats import next_review_label

    meaning = card.meanings[0].english if card.meanings else ""
    label = next_review_label(card.review_state, now)
    text = f"{card.id}  {card.word}"
    if meaning:
        text += f" - {meaning}"
    return f"{text}  [{label}]"


# ---------------------------------------------------------------------------
# Library commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    words: Annotated[
        list[str],
        typer.Argument(help="Words to add. Comma-separated lists are split."),
    ],
):
    """[bold green]Add[/bold green] words to the library (duplicates are skipped)."""
    from lingoflash.application.factory import get_library_service
    from lingoflash.application.library_service import parse_word_list

    parsed = [w for chunk in words for w in parse_word_list(chunk)]
    if not parsed:
        typer.secho("No words given.", fg="yellow")
        raise typer.Exit(2)

    try:
        service = get_library_service(_config(ctx))
        added = service.add_words(parsed)
    except LingoFlashError as e:
        _fail(e)

    skipped = len(parsed) - len(added)
    typer.secho(f"Added {len(added)} card(s).", fg="green")
    if skipped:
        typer.secho(f"Skipped {skipped} duplicate(s).", fg="yellow")


@app.command("list")
def list_cards(
    ctx: typer.Context,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Filter by word or meaning.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards in the library with their next review time."""
    from lingoflash.application.factory import get_library_service
    from lingoflash.infrastructure.adapters.json_library import card_to_record

    try:
        cards = get_library_service(_config(ctx)).search(search or "")
    except LingoFlashError as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps([card_to_record(c) for c in cards], ensure_ascii=False, indent=2))
        return

    if not cards:
        typer.secho("Library is empty." if not search else "No matching cards.", fg="yellow")
        return

    now = _now()
    for card in cards:
        typer.echo(_describe(card, now))


@app.command()
def remove(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID of the card to delete.")],
):
    """Delete a card and its review history."""
    from lingoflash.application.factory import get_library_service

    try:
        removed = get_library_service(_config(ctx)).remove(card_id)
    except LingoFlashError as e:
        _fail(e)

    if not removed:
        typer.secho(f"No card with id '{card_id}'.", fg="red")
        raise typer.Exit(1)
    typer.secho(f"Removed {card_id}.", fg="green")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show library totals: cards, due for review, learned."""
    from dataclasses import asdict

    from lingoflash.application.factory import get_library_service
    from lingoflash.application.stats import compute_library_stats

    try:
        cards = get_library_service(_config(ctx)).list_cards()
    except LingoFlashError as e:
        _fail(e)

    result = compute_library_stats(cards, _now())
    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    typer.echo(f"Total: {result.total}  Due: {result.due}  Learned: {result.learned}")


# ---------------------------------------------------------------------------
# Review commands
# ---------------------------------------------------------------------------


@app.command()
def due(ctx: typer.Context):
    """Show cards due for review, most overdue first."""
    from lingoflash.application.factory import get_library_service
    from lingoflash.application.session_builder import select_due

    try:
        cards = get_library_service(_config(ctx)).list_cards()
    except LingoFlashError as e:
        _fail(e)

    now = _now()
    selection = select_due(cards, now)
    if selection.is_empty:
        typer.secho(selection.message, fg="yellow")
        return

    typer.echo(f"Due cards: {len(selection)}")
    for card in selection.cards:
        typer.echo(_describe(card, now))


@app.command()
def review(ctx: typer.Context):
    """Run an interactive review session over every due card."""
    from lingoflash.application.factory import get_library_repository, get_library_service
    from lingoflash.application.review_session import ReviewSession

    config = _config(ctx)
    try:
        get_library_service(config)
        session, selection = ReviewSession.start(get_library_repository(config))
    except LingoFlashError as e:
        _fail(e)

    if session is None:
        typer.secho(selection.message, fg="yellow")
        return

    choices = "/".join(r.value for r in Rating)
    total = len(session.deck)
    while not session.is_complete:
        card = session.current
        typer.secho(f"\n[{session.position + 1}/{total}] {card.word}", bold=True)
        if card.pronunciation_ipa:
            typer.echo(f"  /{card.pronunciation_ipa}/")
        typer.prompt("Press Enter to reveal", default="", show_default=False)
        for meaning in card.meanings:
            typer.echo(f"  ({meaning.part_of_speech}) {meaning.english}  {meaning.chinese}")
        for example in card.examples:
            typer.echo(f"  • {example.sentence}")

        while True:
            answer = typer.prompt(f"Rate [{choices}]")
            try:
                state = session.rate(answer)
                break
            except LingoFlashError as e:
                _fail(e)
            except ValueError as e:
                typer.secho(str(e), fg="red")

        rating = Rating(answer.strip().lower())
        typer.secho(
            f"  Next review in {state.interval_days} day(s).", fg=RATING_COLORS[rating]
        )

    typer.secho("\nReview Session Complete! Great job.", fg="green")


@app.command()
def rate(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID of the card being rated.")],
    rating: Annotated[str, typer.Argument(help="again, hard, good or easy.")],
):
    """Record a single rating for one card."""
    from lingoflash.application.factory import get_library_service

    try:
        card = get_library_service(_config(ctx)).rate(card_id, rating)
    except (LingoFlashError, ValueError) as e:
        _fail(e)

    state = card.review_state
    typer.echo(
        f"{card.word}: interval {state.interval_days}d, repetition {state.repetition_count}, "
        f"ease {state.easiness_factor:.2f}, due {state.next_review_due.isoformat()}"
    )


@app.command()
def practice(
    ctx: typer.Context,
    seed: Annotated[int | None, typer.Option(help="Seed for a reproducible draw.")] = None,
    size: Annotated[
        int | None,
        typer.Option(
            min=1,
            help="Maximum cards in the batch. Sizes above the pool floor raise the floor to match.",
        ),
    ] = None,
):
    """Draw a random practice batch (due cards first, topped up with others)."""
    from lingoflash.application.factory import get_library_service, get_rng
    from lingoflash.application.session_builder import select_practice_batch

    config = _config(ctx, seed=seed, practice_cap=size)
    try:
        cards = get_library_service(config).list_cards()
    except LingoFlashError as e:
        _fail(e)

    selection = select_practice_batch(
        cards,
        floor=max(config.practice_floor, size or 0),
        cap=config.practice_cap,
        rng=get_rng(config),
    )
    if selection.is_empty:
        typer.secho(selection.message, fg="yellow")
        return

    for i, card in enumerate(selection.cards, start=1):
        typer.echo(f"{i:>2}. {card.word}")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    ctx: typer.Context,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP API."""
    import uvicorn

    config = _config(ctx, port=port, host=host)
    uvicorn.run("lingoflash.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
