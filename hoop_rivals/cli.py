"""CLI entrypoint using Typer.

This module defines the command-line interface for the Hoop Rivals stats
engine. Commands are organized into subcommand groups for database, match,
stats and challenge operations.

Example:
    $ hoop-rivals --help
    $ hoop-rivals matches add match.json
    $ hoop-rivals stats record quarters.json
    $ hoop-rivals stats report user-42 --json
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hoop_rivals import __version__
from hoop_rivals.config import get_settings
from hoop_rivals.logging import setup_logging
from hoop_rivals.types import HoopRivalsError

# Initialize console for rich output
console = Console()

# Create main app
app = typer.Typer(
    name="hoop-rivals",
    help="Hoop Rivals stats engine CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Create subcommand groups
db_app = typer.Typer(
    name="db",
    help="Database setup and integrity commands",
    no_args_is_help=True,
)
matches_app = typer.Typer(
    name="matches",
    help="Match creation and listing commands",
    no_args_is_help=True,
)
stats_app = typer.Typer(
    name="stats",
    help="Stat recording and report commands",
    no_args_is_help=True,
)
challenge_app = typer.Typer(
    name="challenge",
    help="Free throw challenge commands",
    no_args_is_help=True,
)

# Register subcommand groups
app.add_typer(db_app, name="db")
app.add_typer(matches_app, name="matches")
app.add_typer(stats_app, name="stats")
app.add_typer(challenge_app, name="challenge")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]hoop-rivals[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Hoop Rivals stats engine CLI.

    Record matches and stat lines, build performance reports and rank free
    throw challenges among friends.
    """
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(
        level=log_level, log_dir=settings.log_dir_obj, sql_echo=settings.sql_echo
    )


def _fail(exc: HoopRivalsError) -> None:
    """Print a rejected operation and exit with status 1."""
    console.print(f"[red]Error: {escape(str(exc))}[/red]")
    errors = getattr(exc, "errors", [])
    if len(errors) > 1:
        for detail in errors:
            console.print(f"  - {escape(detail)}")
    raise typer.Exit(1)


def _read_payload(path: Path) -> str:
    if not path.exists():
        console.print(f"[red]Error: file not found: {path}[/red]")
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _parse_date(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        console.print(f"[red]Error: invalid date {value!r}, expected YYYY-MM-DD[/red]")
        raise typer.Exit(1) from None


# =============================================================================
# Database Commands
# =============================================================================


@db_app.command("init")
def db_init() -> None:
    """Create all database tables."""
    from hoop_rivals.data import init_db

    settings = get_settings()
    settings.ensure_directories()
    created = init_db()
    if created:
        console.print(
            f"[green]Created {len(created)} tables[/green] in {settings.db_path}"
        )
    else:
        console.print(f"[green]Database ready:[/green] {settings.db_path}")


@db_app.command("status")
def db_status() -> None:
    """Show connection settings and row counts for each table."""
    from sqlalchemy import func, select

    from hoop_rivals.data import (
        Challenge,
        Match,
        MatchStat,
        Player,
        QuarterStat,
        inspect_database,
        session_scope,
    )

    settings = get_settings()
    if not settings.db_path_obj.exists():
        console.print(
            Panel(
                f"[bold]Database:[/bold] {settings.db_path}\n"
                "[yellow]Database not found. Run 'db init' first.[/yellow]",
                title="Database Status",
            )
        )
        return

    info = inspect_database()
    lines = [
        f"[bold]Database:[/bold] {settings.db_path}",
        f"[bold]Foreign keys:[/bold] {'on' if info.foreign_keys else '[red]off[/red]'}",
        f"[bold]Journal mode:[/bold] {info.journal_mode}",
    ]
    if info.missing_tables:
        lines.append(
            f"[yellow]Missing tables: {', '.join(info.missing_tables)}. "
            "Run 'db init' first.[/yellow]"
        )
    console.print(Panel("\n".join(lines), title="Database Status"))
    if info.missing_tables:
        return

    table = Table(title="Row Counts")
    table.add_column("Entity", style="cyan")
    table.add_column("Count", justify="right")

    with session_scope() as session:
        for label, model in (
            ("Players", Player),
            ("Matches", Match),
            ("Quarter stat rows", QuarterStat),
            ("Game stat rows", MatchStat),
            ("Challenges", Challenge),
        ):
            count = session.scalar(select(func.count()).select_from(model)) or 0
            table.add_row(label, str(count))

    console.print(table)


@db_app.command("check")
def db_check(
    match_id: Annotated[int, typer.Argument(help="Match to validate")],
) -> None:
    """Validate the stored data of one match."""
    from hoop_rivals.data import DataValidator, init_db, session_scope

    init_db()
    with session_scope() as session:
        result = DataValidator().validate_match(session, match_id)

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
    if not result.valid:
        for error in result.errors:
            console.print(f"[red]Error:[/red] {escape(error)}")
        raise typer.Exit(1)
    console.print(f"[green]Match {match_id} is consistent[/green]")


# =============================================================================
# Match Commands
# =============================================================================


@matches_app.command("add")
def matches_add(
    payload: Annotated[Path, typer.Argument(help="JSON file describing the match")],
) -> None:
    """Create a match from a JSON payload."""
    from hoop_rivals.data import MatchStore, init_db, parse_new_match, session_scope

    text = _read_payload(payload)
    init_db()
    try:
        new_match = parse_new_match(text)
        with session_scope() as session:
            match_id = MatchStore(session).create_match(new_match)
    except HoopRivalsError as exc:
        _fail(exc)
        return

    console.print(f"[green]Created match {match_id}[/green]")


@matches_app.command("edit")
def matches_edit(
    match_id: Annotated[int, typer.Argument(help="Match to edit")],
    player_id: Annotated[str, typer.Argument(help="Player who took part")],
    on: Annotated[str, typer.Option("--date", "-d", help="New date (YYYY-MM-DD)")],
    arena_id: Annotated[
        int | None,
        typer.Option("--arena", "-a", help="New arena; omit to clear"),
    ] = None,
) -> None:
    """Change the date and arena of a match."""
    from hoop_rivals.data import MatchStore, init_db, session_scope

    when = _parse_date(on)
    init_db()
    try:
        with session_scope() as session:
            MatchStore(session).update_match(match_id, player_id, when, arena_id)
    except HoopRivalsError as exc:
        _fail(exc)
        return

    console.print(f"[green]Updated match {match_id}[/green]")


@matches_app.command("delete")
def matches_delete(
    match_id: Annotated[int, typer.Argument(help="Match to delete")],
    player_id: Annotated[str, typer.Argument(help="Player who took part")],
) -> None:
    """Delete a match with all its stat rows."""
    from hoop_rivals.data import MatchStore, init_db, session_scope

    init_db()
    try:
        with session_scope() as session:
            MatchStore(session).delete_match(match_id, player_id)
    except HoopRivalsError as exc:
        _fail(exc)
        return

    console.print(f"[green]Deleted match {match_id}[/green]")


@matches_app.command("list")
def matches_list(
    player_id: Annotated[str, typer.Argument(help="Player whose matches to list")],
) -> None:
    """List a player's matches with scores and results."""
    from hoop_rivals.data import MatchStore, init_db, session_scope
    from hoop_rivals.stats import outcome_for, team_scores

    init_db()
    with session_scope() as session:
        matches = MatchStore(session).list_matches(player_id)

    if not matches:
        console.print(f"[yellow]No matches found for {player_id}[/yellow]")
        return

    table = Table(title=f"Matches for {player_id}")
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Type", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Score", justify="center")
    table.add_column("Result")

    for match in matches:
        scores = " - ".join(str(s) for s in team_scores(match).values())
        outcome = outcome_for(match, player_id, report_ties=True)
        color = {"WIN": "green", "LOSS": "red"}.get(outcome.value, "yellow")
        table.add_row(
            str(match.match_id),
            str(match.match_date or ""),
            match.match_type.value,
            f"{match.team_size}v{match.team_size}",
            scores,
            f"[{color}]{outcome.value}[/{color}]",
        )
    console.print(table)


# =============================================================================
# Stats Commands
# =============================================================================


@stats_app.command("record")
def stats_record(
    payload: Annotated[Path, typer.Argument(help="JSON stats submission")],
    update: Annotated[
        bool,
        typer.Option(
            "--update",
            "-u",
            help="Correct previously recorded rows instead of creating them",
        ),
    ] = False,
) -> None:
    """Record (or correct) stat rows for a match."""
    from hoop_rivals.data import (
        MatchStore,
        init_db,
        parse_stats_submission,
        session_scope,
    )

    text = _read_payload(payload)
    init_db()
    try:
        submission = parse_stats_submission(text)
        with session_scope() as session:
            written = MatchStore(session).record_stats(submission, replace=update)
    except HoopRivalsError as exc:
        _fail(exc)
        return

    verb = "Updated" if update else "Recorded"
    console.print(
        f"[green]{verb} {written} stat rows for match {submission.match_id}[/green]"
    )


@stats_app.command("report")
def stats_report(
    player_id: Annotated[str, typer.Argument(help="Player to report on")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the report as JSON"),
    ] = False,
) -> None:
    """Show a player's overall and grouped performance stats."""
    from hoop_rivals.data import MatchStore, init_db, session_scope
    from hoop_rivals.stats import load_stats_report

    init_db()
    try:
        with session_scope() as session:
            report = load_stats_report(MatchStore(session), player_id)
    except HoopRivalsError as exc:
        _fail(exc)
        return

    if as_json:
        typer.echo(report.to_json(indent=2))
        return

    _display_stats_table("Overall", {"All matches": report.overall_stats})
    for team_size, by_duration in report.quarters_stats_by_team_size.items():
        _display_stats_table(
            f"Quarters {team_size}v{team_size}",
            {f"{minutes} min quarters": s for minutes, s in by_duration.items()},
        )
    for team_size, by_target in report.points_stats_by_team_size_and_max.items():
        _display_stats_table(
            f"Points {team_size}v{team_size}",
            {f"First to {target}": s for target, s in by_target.items()},
        )


def _display_stats_table(title: str, rows: dict) -> None:
    """Display aggregated stats groups as a table."""
    table = Table(title=title)
    table.add_column("Group", style="cyan")
    table.add_column("GP", justify="right")
    table.add_column("W", justify="right")
    table.add_column("PPG", justify="right")
    table.add_column("RPG", justify="right")
    table.add_column("APG", justify="right")
    table.add_column("BPG", justify="right")
    table.add_column("FG%", justify="right")
    table.add_column("3P%", justify="right")
    table.add_column("FT%", justify="right")
    table.add_column("Norm PPG", justify="right")

    for label, stats in rows.items():
        norm = "-" if stats.points_per_norm is None else f"{stats.points_per_norm:.1f}"
        table.add_row(
            label,
            str(stats.total_games),
            str(stats.total_wins),
            f"{stats.ppg:.1f}",
            f"{stats.rpg:.1f}",
            f"{stats.apg:.1f}",
            f"{stats.bpg:.1f}",
            f"{stats.fg_percentage:.1f}",
            f"{stats.three_pt_percentage:.1f}",
            f"{stats.ft_percentage:.1f}",
            norm,
        )
    console.print(table)


# =============================================================================
# Challenge Commands
# =============================================================================


@challenge_app.command("add")
def challenge_add(
    player_id: Annotated[str, typer.Argument(help="Player who took the challenge")],
    made: Annotated[int, typer.Argument(help="Free throws made")],
    attempted: Annotated[int, typer.Argument(help="Free throws attempted")],
    on: Annotated[
        str | None,
        typer.Option("--date", "-d", help="Challenge date (YYYY-MM-DD)"),
    ] = None,
    challenge_id: Annotated[
        int | None,
        typer.Option("--id", help="Correct an existing challenge"),
    ] = None,
) -> None:
    """Record or correct a free throw challenge and show its badge."""
    from hoop_rivals.data import MatchStore, init_db, session_scope

    when = _parse_date(on)
    init_db()
    try:
        with session_scope() as session:
            tier = MatchStore(session).upsert_challenge(
                player_id,
                made,
                attempted,
                challenge_date=when,
                challenge_id=challenge_id,
            )
    except HoopRivalsError as exc:
        _fail(exc)
        return

    label = tier.name.replace("_", " ").title()
    console.print(
        f"[green]{made}/{attempted}[/green] -> badge tier {int(tier)} ({label})"
    )


@challenge_app.command("summary")
def challenge_summary(
    player_id: Annotated[str, typer.Argument(help="Player to summarize")],
) -> None:
    """Show a player's lifetime free throw challenge record."""
    from hoop_rivals.data import MatchStore, init_db, session_scope
    from hoop_rivals.stats import summarize_challenges

    init_db()
    with session_scope() as session:
        challenges = MatchStore(session).list_challenges(player_id)[player_id]
        summary = summarize_challenges(challenges, averaged=True)

    console.print(
        Panel(
            f"[bold]Challenges:[/bold] {summary.all_time_total_challenges}\n"
            f"[bold]Shots:[/bold] {summary.all_time_shots_made}/"
            f"{summary.all_time_shots_taken}\n"
            f"[bold]Average efficiency:[/bold] {summary.all_time_efficiency:.1%}\n"
            f"[bold]Badges:[/bold] 1st {summary.first_place} | "
            f"2nd {summary.second_place} | 3rd {summary.third_place} | "
            f"worst {summary.worst_badges}",
            title=f"Free Throw Challenges: {player_id}",
        )
    )


@challenge_app.command("leaderboard")
def challenge_leaderboard(
    friend_ids: Annotated[list[str], typer.Argument(help="Friends to rank")],
) -> None:
    """Rank friends by their free throw challenge record."""
    from hoop_rivals.data import MatchStore, init_db, session_scope
    from hoop_rivals.stats import friends_leaderboard

    init_db()
    with session_scope() as session:
        store = MatchStore(session)
        entries = friends_leaderboard(
            store.list_challenges(friend_ids),
            friend_ids,
            nicknames=store.nicknames(friend_ids),
        )

    table = Table(title="Free Throw Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("1st", justify="right")
    table.add_column("2nd", justify="right")
    table.add_column("3rd", justify="right")
    table.add_column("Worst", justify="right")
    table.add_column("FT%", justify="right")

    for rank, entry in enumerate(entries, start=1):
        s = entry.summary
        table.add_row(
            str(rank),
            entry.nickname or entry.user_id,
            str(s.first_place),
            str(s.second_place),
            str(s.third_place),
            str(s.worst_badges),
            f"{s.all_time_efficiency:.1%}",
        )
    console.print(table)


if __name__ == "__main__":
    app()
