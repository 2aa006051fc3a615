"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, NoReturn, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.file_source import FileParticipantSource
from ..adapters.pattern_translator import HttpPatternTranslator
from ..config import AppConfig, get_default_config_path
from ..domain.bounds import availability_bounds
from ..domain.exceptions import SessionFinderError
from ..domain.models import OverlapSlot
from ..domain.priority_resolver import resolve
from ..domain.range_algebra import total_minutes
from ..domain.time_primitives import parse_date
from ..services.session_finder import SessionFinderService

app = typer.Typer(
    name="sessionfinder",
    help="Find campaign session times that work for the most players",
    add_completion=False,
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Availability resolution and overlap ranking for tabletop campaigns."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load(config_file: Optional[Path]) -> Tuple[AppConfig, FileParticipantSource]:
    config = AppConfig.load_from_yaml(config_file or get_default_config_path())
    source = FileParticipantSource(config.get_participants_path())
    return config, source


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


def _weekday(date: str) -> str:
    return parse_date(date).format("dddd")


def _slot_table(title: str, slots: List[OverlapSlot], source: FileParticipantSource) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Free", justify="right")
    table.add_column("Participants", style="dim")

    for slot in slots:
        table.add_row(
            slot.date,
            _weekday(slot.date),
            f"{slot.start} – {slot.end}",
            f"{slot.available_count}/{slot.total_participants}",
            ", ".join(source.display_name(pid) for pid in slot.available_participant_ids),
        )

    return table


@app.command()
def find(
    config_file: ConfigOption = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Override start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Override end date (YYYY-MM-DD)")] = None,
):
    """
    Show the slots where everyone is free and where the most people are free.

    Examples:

        sessionfinder find
        sessionfinder find --start 2024-11-25 --end 2024-12-01
    """
    try:
        config, source = _load(config_file)
        window = config.campaign.to_window(start_date=start, end_date=end)
        service = SessionFinderService(participant_source=source, window=window)
        result = asyncio.run(service.find_overlap())
    except (FileNotFoundError, ValueError, SessionFinderError) as e:
        _fail(e)

    console.print(
        f"\n[bold cyan]Campaign window[/bold cyan] {window.start_date} – {window.end_date}, "
        f"{window.earliest_time} – {window.latest_time} ({config.timezone})\n"
    )

    if not result.perfect_slots and not result.best_slots:
        console.print("[yellow]⚠ Nobody has declared availability inside this window.[/yellow]\n")
        return

    if result.perfect_slots:
        console.print(_slot_table("Everyone available", result.perfect_slots, source))
    else:
        console.print("[yellow]No time works for everyone.[/yellow]")

    console.print()
    console.print(_slot_table("Most available", result.best_slots, source))
    console.print()


@app.command()
def sessions(
    config_file: ConfigOption = None,
    length: Annotated[Optional[int], typer.Option("--length", "-l", help="Session length in minutes")] = None,
    min_participants: Annotated[
        Optional[int],
        typer.Option("--min-participants", "-m", help="Minimum players free for the whole session"),
    ] = None,
):
    """
    List start times with enough consecutive shared availability for a session.
    """
    try:
        config, source = _load(config_file)
        session_minutes = length if length is not None else config.campaign.session_length_minutes
        service = SessionFinderService(participant_source=source, window=config.campaign.to_window())
        candidates = asyncio.run(
            service.find_sessions(session_minutes=session_minutes, min_participants=min_participants)
        )
    except (FileNotFoundError, ValueError, SessionFinderError) as e:
        _fail(e)

    if not candidates:
        console.print(f"\n[yellow]⚠ No {session_minutes}-minute session fits.[/yellow]\n")
        return

    table = Table(title=f"{session_minutes}-minute sessions", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Players", style="dim")

    for candidate in candidates:
        table.add_row(
            candidate.date,
            _weekday(candidate.date),
            f"{candidate.start} – {candidate.end}",
            ", ".join(source.display_name(pid) for pid in candidate.participant_ids),
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def effective(
    participant_id: Annotated[str, typer.Argument(help="Participant id from the participants file")],
    config_file: ConfigOption = None,
):
    """
    Show one participant's resolved availability for the campaign window.
    """
    try:
        config, source = _load(config_file)
        participant = source.find_participant(participant_id)
        if participant is None:
            raise ValueError(f"Unknown participant: '{participant_id}'")
        ranges = resolve(participant, config.campaign.to_window())
    except (FileNotFoundError, ValueError, SessionFinderError) as e:
        _fail(e)

    name = source.display_name(participant.participant_id)
    if not ranges:
        console.print(f"\n[yellow]{name} has no availability in this window.[/yellow]\n")
        return

    table = Table(title=f"Effective availability: {name}", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Day")
    table.add_column("Time")

    for time_range in ranges:
        table.add_row(time_range.date, _weekday(time_range.date), f"{time_range.start} – {time_range.end}")

    console.print()
    console.print(table)
    console.print(f"[dim]Total: {total_minutes(ranges) // 60}h {total_minutes(ranges) % 60:02d}m[/dim]\n")


@app.command()
def bounds(
    participant_id: Annotated[str, typer.Argument(help="Participant id, usually the game master")],
    config_file: ConfigOption = None,
):
    """
    Show the earliest and latest times a participant has declared as available.
    """
    try:
        _, source = _load(config_file)
        participant = source.find_participant(participant_id)
        if participant is None:
            raise ValueError(f"Unknown participant: '{participant_id}'")
    except (FileNotFoundError, ValueError, SessionFinderError) as e:
        _fail(e)

    result = availability_bounds(participant.available_patterns, participant.manual_additions)
    name = source.display_name(participant.participant_id)

    if result.is_empty:
        console.print(f"\n[yellow]{name} has not declared any availability.[/yellow]\n")
        return

    console.print(f"\n[bold]{name}[/bold] is usually available {result.earliest} – {result.latest}\n")


@app.command()
def parse_text(
    text: Annotated[str, typer.Argument(help="Free-text availability, e.g. 'weeknights after 7pm'")],
    config_file: ConfigOption = None,
    timezone: Annotated[Optional[str], typer.Option("--timezone", "-t", help="Timezone of the text")] = None,
):
    """
    Translate free text into weekly patterns via the configured translator.
    """
    try:
        config = AppConfig.load_from_yaml(config_file or get_default_config_path())
        if config.translator is None:
            raise ValueError("No translator configured. Add a 'translator' section to the config file.")

        translator = HttpPatternTranslator(
            url=config.translator.url,
            api_key=config.translator.api_key,
            timeout_seconds=config.translator.timeout_seconds,
        )
        patterns = translator.translate(text, timezone or config.timezone)
    except (FileNotFoundError, ValueError, SessionFinderError) as e:
        _fail(e)

    if not patterns:
        console.print("\n[yellow]The translator found no weekly patterns in that text.[/yellow]\n")
        return

    day_names = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    table = Table(title="Weekly patterns", show_header=True, header_style="bold cyan")
    table.add_column("Day", style="bold yellow")
    table.add_column("Time")
    table.add_column("Type")

    for pattern in patterns:
        table.add_row(day_names[pattern.day_of_week], f"{pattern.start} – {pattern.end}", pattern.polarity.value)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]sessionfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
