"""RecallForge CLI - Main application entry point.

Thin adapter over the study package: every command loads the project
configuration, opens the SQLite card repository and calls into the core.

Commands
--------
    add        Add a flashcard
    review     Rate a card and schedule its next review
    due        List cards due for review
    retention  Retention report (exponential or piecewise-linear curve)
    mastery    Mastery per topic
    stats      Learning statistics
"""

from __future__ import annotations

import json
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import typer
from rich.markup import escape
from rich.table import Table

from recallforge.cli.console import ErrorRenderer, get_console, set_verbose_mode, tip
from recallforge.core.config import Config, load_config
from recallforge.core.exceptions import RecallForgeError
from recallforge.core.logging import configure_logging, get_logger
from recallforge.storage.sqlite import SQLiteCardRepository
from recallforge.study.due_check import get_due_notification
from recallforge.study.mastery import card_mastery, classify_card, mastery_by_topic
from recallforge.study.models import Rating, utc_now
from recallforge.study.retention import RetentionStrategy, build_retention_report
from recallforge.study.service import ReviewService
from recallforge.study.stats import StatsAggregator

logger = get_logger(__name__)

ProjectOption = typer.Option(
    None, "--project", "-p", help="Project directory (defaults to cwd)"
)
JsonOption = typer.Option(False, "--json", help="Output as JSON")

app = typer.Typer(
    name="recallforge",
    help="Spaced repetition scheduling, retention and mastery tracking",
    no_args_is_help=True,
)


def _open_project(project: Optional[Path]) -> Tuple[Config, SQLiteCardRepository]:
    """Load configuration and open the card database for a project."""
    config = load_config(base_path=project or Path.cwd())
    configure_logging(level=config.logging.level, log_file=config.log_path)
    return config, SQLiteCardRepository(config.database_path)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def _format_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "-"


def safe_command(func: Callable[..., Any]) -> Callable[..., Any]:
    """Render RecallForgeError as an error panel and exit with code 1."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except RecallForgeError as e:
            logger.debug("Command failed", command=func.__name__, error=e.error_code)
            ErrorRenderer.render(e)
            raise typer.Exit(code=1)

    return wrapper


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", help="Show tracebacks on errors"
    ),
) -> None:
    """RecallForge - spaced repetition for the command line."""
    set_verbose_mode(verbose)


@app.command("version")
def version_command() -> None:
    """Show version and exit."""
    from recallforge import __version__

    typer.echo(f"RecallForge {__version__}")


@app.command("add")
@safe_command
def add_command(
    front: str = typer.Argument(..., help="Question or term"),
    back: str = typer.Argument(..., help="Answer or definition"),
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Topic ID"),
    project: Optional[Path] = ProjectOption,
) -> None:
    """Add a flashcard (due immediately)."""
    config, repository = _open_project(project)
    card = ReviewService(repository, config).add_card(front, back, topic_id=topic)
    get_console().print(f"[green]Added card[/green] [cyan]{card.card_id}[/cyan]")


@app.command("review")
@safe_command
def review_command(
    card_id: str = typer.Argument(..., help="Card to review"),
    rating: int = typer.Argument(..., help="Recall quality 0-5 (5 = perfect)"),
    difficulty: bool = typer.Option(
        False,
        "--difficulty",
        "-d",
        help="Read RATING as difficulty 1-5 (1 = very easy)",
    ),
    project: Optional[Path] = ProjectOption,
) -> None:
    """Rate a card and schedule its next review."""
    config, repository = _open_project(project)
    quality = Rating.from_difficulty(rating) if difficulty else Rating.parse(rating)

    service = ReviewService(repository, config)
    card = service.review(card_id, quality)
    service.finish()

    state = card.state
    console = get_console()
    recalled = quality.is_success_at(config.scheduler.success_threshold)
    style = "green" if recalled else "red"
    console.print(
        f"[{style}]{quality.name.replace('_', ' ').title()}[/{style}] "
        f"({'recalled' if recalled else 'missed'}) [cyan]{card.card_id}[/cyan]"
    )
    console.print(
        f"  Next review in {state.interval_days} day(s) "
        f"({_format_date(state.next_review_date)}), "
        f"EF {state.easiness_factor:.2f}, repetitions {state.repetition_count}"
    )


@app.command("due")
@safe_command
def due_command(
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Topic ID"),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=0, help="Maximum cards to show"
    ),
    json_output: bool = JsonOption,
    project: Optional[Path] = ProjectOption,
) -> None:
    """List cards due for review."""
    config, repository = _open_project(project)
    cards = ReviewService(repository, config).due_cards(topic_id=topic, limit=limit)

    if json_output:
        _echo_json(
            {
                "due": [
                    {
                        "card_id": card.card_id,
                        "front": card.front,
                        "topic_id": card.topic_id,
                        "next_review_date": card.state.next_review_date.isoformat(),
                    }
                    for card in cards
                ],
                "total": len(cards),
            }
        )
        return

    console = get_console()
    if not cards:
        console.print("[green]No cards due[/green]")
        return

    table = Table(title="Due Cards")
    table.add_column("ID", style="cyan")
    table.add_column("Front")
    table.add_column("Topic")
    table.add_column("Due", justify="right")
    for card in cards:
        table.add_row(
            card.card_id,
            escape(card.front),
            escape(card.topic_id or "-"),
            _format_date(card.state.next_review_date),
        )
    console.print(table)
    console.print(f"[dim]{get_due_notification(len(cards))}[/dim]")


@app.command("retention")
@safe_command
def retention_command(
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Forgetting curve: exponential or piecewise-linear",
    ),
    topic: Optional[str] = typer.Option(None, "--topic", "-t", help="Topic ID"),
    json_output: bool = JsonOption,
    project: Optional[Path] = ProjectOption,
) -> None:
    """Show estimated retention and the cards most at risk."""
    config, repository = _open_project(project)
    resolved = RetentionStrategy.parse(strategy or config.retention.strategy)
    report = build_retention_report(
        repository.list_cards(topic),
        utc_now(),
        resolved,
        focus_count=config.retention.focus_count,
    )

    if json_output:
        _echo_json(report.to_dict())
        return

    console = get_console()
    if not report.items:
        console.print("[yellow]No cards yet[/yellow]")
        tip("Add one with `recallforge add FRONT BACK`")
        return

    console.print(
        f"Average retention [bold]{report.average_retention:.0%}[/bold] "
        f"({resolved.value}, {len(report.items)} cards)"
    )
    for topic_id, value in report.retention_by_topic.items():
        console.print(f"  {escape(topic_id)}: {value:.0%}")

    table = Table(title="Focus Cards")
    table.add_column("ID", style="cyan")
    table.add_column("Front")
    table.add_column("Retention", justify="right")
    table.add_column("Days Since Review", justify="right")
    for item in report.focus_cards:
        days = "-" if item.days_since_review is None else str(item.days_since_review)
        table.add_row(item.card_id, escape(item.front), f"{item.retention:.0%}", days)
    console.print(table)


@app.command("mastery")
@safe_command
def mastery_command(
    json_output: bool = JsonOption,
    project: Optional[Path] = ProjectOption,
) -> None:
    """Show mastery per topic."""
    config, repository = _open_project(project)
    cards = repository.list_cards()
    topics = mastery_by_topic(cards, config=config.mastery)

    if json_output:
        _echo_json(
            {
                "topics": [
                    {
                        "topic_id": topic.topic_id,
                        "mastery": round(topic.mastery_score, 4),
                        "card_count": topic.card_count,
                    }
                    for topic in topics
                ],
                "cards": [
                    {
                        "card_id": card.card_id,
                        "mastery": round(card_mastery(card.state, config.mastery), 4),
                        "status": classify_card(card.state).value,
                    }
                    for card in cards
                ],
            }
        )
        return

    console = get_console()
    if not topics:
        console.print("[yellow]No tagged cards yet[/yellow]")
        tip("Tag cards with `recallforge add FRONT BACK --topic NAME`")
        return

    table = Table(title="Topic Mastery")
    table.add_column("Topic", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Mastery", justify="right")
    for topic in topics:
        table.add_row(
            escape(topic.topic_id), str(topic.card_count), f"{topic.mastery_score:.0%}"
        )
    console.print(table)


@app.command("stats")
@safe_command
def stats_command(
    json_output: bool = JsonOption,
    project: Optional[Path] = ProjectOption,
) -> None:
    """Show learning statistics."""
    config, repository = _open_project(project)
    stats = StatsAggregator(config).collect(repository.list_cards(), utc_now())

    if json_output:
        _echo_json(stats.to_dict())
        return

    table = Table(title="Learning Statistics", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total cards", str(stats.total_cards))
    table.add_row("Due now", str(stats.due_cards))
    table.add_row("New", str(stats.new_cards))
    table.add_row("Learning", str(stats.learning_cards))
    table.add_row("Mastered", str(stats.mastered_cards))
    table.add_row("Struggling", str(stats.struggling_cards))
    table.add_row("Average EF", f"{stats.average_easiness:.2f}")
    table.add_row("Average retention", f"{stats.average_retention:.0%}")
    table.add_row("Average mastery", f"{stats.average_mastery:.0%}")
    table.add_row("Learning efficiency", f"{stats.learning_efficiency:.0%}")
    table.add_row("Recommended daily reviews", str(stats.recommended_daily_reviews))
    get_console().print(table)


def cli_main() -> None:
    """Entry point for console_scripts."""
    app()


if __name__ == "__main__":
    cli_main()
