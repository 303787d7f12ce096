"""CLI interface for prayerlog."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from prayerlog.app import PrayerJournal, open_journal
from prayerlog.catalog import (
    CHAPLET_INFO,
    DAYS_PER_PHASE,
    FIFTY_FOUR_DAY_TOTAL,
    NOVENA_INFO,
    ChapletType,
    Mystery,
    NovenaType,
    cycle_info,
    mystery_for_weekday,
)
from prayerlog.config import PrayerlogConfig, load_config, merge_cli_overrides
from prayerlog.novenas.models import NOVENA_LENGTH, ActiveNovena, DayRejected
from prayerlog.sessions.models import (
    Chaplet,
    DailyRosary,
    FiftyFourDayNovena,
    JournalPatch,
    Mood,
    PrayerSession,
    SessionKind,
)
from prayerlog.shared.clock import calendar_day, utc_now

app = typer.Typer(
    name="prayerlog",
    help="Track rosaries, chaplets and novenas with a prayer journal.",
)
pray_app = typer.Typer(help="Start a prayer session.")
novena_app = typer.Typer(help="Start and follow nine-day novenas.")
rosary_novena_app = typer.Typer(help="Follow the 54-day rosary novena.")
app.add_typer(pray_app, name="pray")
app.add_typer(novena_app, name="novena")
app.add_typer(rosary_novena_app, name="rosary-novena")

console = Console()


class _State:
    """Options collected by the top-level callback."""

    config: PrayerlogConfig = PrayerlogConfig()
    data_dir: Path | None = None


_state = _State()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from prayerlog import __version__

        console.print(f"prayerlog {__version__}")
        raise typer.Exit()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a prayerlog TOML config file."),
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option("--data-dir", "-d", help="Directory holding the prayer data."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Prayerlog - a prayer journal for the terminal."""
    config = load_config(config_path)
    config = merge_cli_overrides(
        config,
        data_dir=data_dir,
        log_level="DEBUG" if verbose else None,
    )
    _configure_logging(config.logging.level)
    _state.config = config
    _state.data_dir = data_dir


# ── Helpers ──────────────────────────────────────────────────────


def _open() -> PrayerJournal:
    return open_journal(_state.config, _state.data_dir)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _warn_if_unsaved(journal: PrayerJournal) -> None:
    if not journal.last_write_ok:
        console.print(
            "[yellow]Warning:[/yellow] changes could not be saved to disk "
            "and will be lost when this command exits."
        )


def _journal_patch(
    intention: str | None = None,
    reflection: str | None = None,
    mood: Mood | None = None,
    gratitudes: list[str] | None = None,
    insights: str | None = None,
    tags: list[str] | None = None,
) -> JournalPatch | None:
    """Build a patch from the options that were actually passed."""
    fields = {
        "intention": intention,
        "reflection": reflection,
        "mood": mood,
        "gratitudes": gratitudes or None,
        "insights": insights,
        "tags": tags or None,
    }
    provided = {k: v for k, v in fields.items() if v is not None}
    if not provided:
        return None
    try:
        return JournalPatch(**provided)
    except ValidationError as exc:
        first = exc.errors()[0]
        _fail(f"invalid journal entry ({first['loc'][0]}): {first['msg']}")


def _describe(session: PrayerSession) -> str:
    kind = session.kind
    if isinstance(kind, DailyRosary):
        return f"{kind.mystery} Mysteries"
    if isinstance(kind, FiftyFourDayNovena):
        return f"54-day novena, day {kind.day}" if kind.day else "54-day novena"
    if isinstance(kind, Chaplet):
        return CHAPLET_INFO[kind.chaplet].name
    return f"{NOVENA_INFO[kind.novena].name}, day {kind.day}"


def _session_table(sessions: list[PrayerSession], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Date")
    table.add_column("Prayer")
    table.add_column("Done")
    table.add_column("Intention")
    table.add_column("Id", style="dim")
    for s in sessions:
        table.add_row(
            s.date.isoformat(),
            _describe(s),
            "yes" if s.completed else "no",
            s.intention or "",
            s.id,
        )
    return table


def _start(kind: SessionKind, patch: JournalPatch | None, done: bool, duration: int | None) -> None:
    journal = _open()
    if done:
        session = journal.sessions.record_completed(kind, duration=duration, journal=patch)
        console.print(f"Recorded {_describe(session)}: {session.id}")
        console.print(f"Current streak: {journal.sessions.streak.current_streak} day(s)")
    else:
        session = journal.sessions.create(kind, metadata=patch)
        console.print(f"Started {_describe(session)}: {session.id}")
    _warn_if_unsaved(journal)


# ── Shared option types ──────────────────────────────────────────

IntentionOpt = Annotated[Optional[str], typer.Option("--intention", "-i", help="Prayer intention.")]
ReflectionOpt = Annotated[Optional[str], typer.Option("--reflection", "-r", help="Reflection.")]
MoodOpt = Annotated[Optional[Mood], typer.Option("--mood", "-m", help="How the prayer felt.")]
GratitudeOpt = Annotated[
    Optional[list[str]],
    typer.Option("--gratitude", "-g", help="Something you are grateful for (repeatable, max 5)."),
]
InsightsOpt = Annotated[Optional[str], typer.Option("--insights", help="Insights received.")]
TagOpt = Annotated[
    Optional[list[str]],
    typer.Option("--tag", "-t", help="Tag for the entry (repeatable, max 5)."),
]
DurationOpt = Annotated[
    Optional[int], typer.Option("--duration", min=0, help="Minutes spent in prayer.")
]
DoneOpt = Annotated[bool, typer.Option("--done", help="Record the session as completed now.")]


# ── Sessions ─────────────────────────────────────────────────────


@pray_app.command("rosary")
def pray_rosary(
    mystery: Annotated[
        Optional[Mystery],
        typer.Option("--mystery", help="Mysteries to pray. Defaults to today's."),
    ] = None,
    intention: IntentionOpt = None,
    mood: MoodOpt = None,
    done: DoneOpt = False,
    duration: DurationOpt = None,
) -> None:
    """Start a daily rosary."""
    chosen = mystery or mystery_for_weekday(calendar_day(utc_now()))
    _start(DailyRosary(mystery=chosen), _journal_patch(intention, mood=mood), done, duration)


@pray_app.command("chaplet")
def pray_chaplet(
    chaplet: Annotated[ChapletType, typer.Argument(help="Chaplet to pray.")],
    intention: IntentionOpt = None,
    mood: MoodOpt = None,
    done: DoneOpt = False,
    duration: DurationOpt = None,
) -> None:
    """Start a chaplet."""
    if done and duration is None:
        duration = CHAPLET_INFO[chaplet].estimated_duration
    _start(Chaplet(chaplet=chaplet), _journal_patch(intention, mood=mood), done, duration)


@pray_app.command("fifty-four")
def pray_fifty_four(
    day: Annotated[
        Optional[int],
        typer.Argument(min=1, max=54, help="Day of the 54-day novena. Defaults to the next one."),
    ] = None,
    intention: IntentionOpt = None,
    mood: MoodOpt = None,
    done: DoneOpt = False,
    duration: DurationOpt = None,
) -> None:
    """Pray a day of the 54-day rosary novena.

    With --done the day is also marked on the 54-day tracker.
    """
    journal = _open()
    tracker = journal.rosary_novena
    chosen = day if day is not None else tracker.current_day()
    info = cycle_info(chosen)
    console.print(f"Day {chosen}: {info.phase} phase, cycle {info.cycle}, {info.mystery} Mysteries")
    kind = FiftyFourDayNovena(mystery=info.mystery, day=chosen)
    patch = _journal_patch(intention, mood=mood)
    if done:
        session = journal.sessions.record_completed(kind, duration=duration, journal=patch)
        progress = tracker.mark_day(chosen)
        console.print(f"Recorded {_describe(session)}: {session.id}")
        console.print(f"54-day novena: {progress.percent_complete}% complete")
        console.print(f"Current streak: {journal.sessions.streak.current_streak} day(s)")
    else:
        session = journal.sessions.create(kind, metadata=patch)
        console.print(f"Started {_describe(session)}: {session.id}")
    _warn_if_unsaved(journal)


@app.command()
def complete(
    session_id: Annotated[str, typer.Argument(help="Session to complete.")],
    duration: DurationOpt = None,
    intention: IntentionOpt = None,
    reflection: ReflectionOpt = None,
    mood: MoodOpt = None,
    gratitude: GratitudeOpt = None,
    insights: InsightsOpt = None,
    tag: TagOpt = None,
) -> None:
    """Mark a session completed, optionally with journal entries."""
    patch = _journal_patch(intention, reflection, mood, gratitude, insights, tag)
    journal = _open()
    session = journal.sessions.complete(session_id, duration=duration, journal=patch)
    if session is None:
        _fail(f"no session with id {session_id}")
    console.print(f"Completed {_describe(session)} (version {session.version})")
    console.print(f"Current streak: {journal.sessions.streak.current_streak} day(s)")
    _warn_if_unsaved(journal)


@app.command("journal")
def journal_entry(
    session_id: Annotated[str, typer.Argument(help="Session to annotate.")],
    intention: IntentionOpt = None,
    reflection: ReflectionOpt = None,
    mood: MoodOpt = None,
    gratitude: GratitudeOpt = None,
    insights: InsightsOpt = None,
    tag: TagOpt = None,
) -> None:
    """Add or change journal entries on a session."""
    patch = _journal_patch(intention, reflection, mood, gratitude, insights, tag)
    if patch is None:
        _fail("nothing to update; pass at least one journal option")
    journal = _open()
    session = journal.sessions.update_journal(session_id, patch)
    if session is None:
        _fail(f"no session with id {session_id}")
    console.print(f"Updated journal for {_describe(session)} (version {session.version})")
    _warn_if_unsaved(journal)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Text to look for in journal entries.")],
) -> None:
    """Search journal entries, newest first."""
    results = _open().sessions.search(query)
    if not results:
        console.print("No matching sessions.")
        return
    console.print(_session_table(results, f"{len(results)} match(es)"))


@app.command()
def recent(
    days: Annotated[
        Optional[int],
        typer.Option("--days", min=0, help="Window size in days. Defaults to the config."),
    ] = None,
) -> None:
    """List sessions from the last few days, newest first."""
    window = days if days is not None else _state.config.history.recent_days
    results = _open().sessions.recent(window)
    if not results:
        console.print(f"No sessions in the last {window} day(s).")
        return
    console.print(_session_table(results, f"Last {window} day(s)"))


@app.command()
def streak() -> None:
    """Show the current and longest streak."""
    journal = _open()
    state = journal.sessions.streak
    console.print(f"Current streak: {state.current_streak} day(s)")
    console.print(f"Longest streak: {state.longest_streak} day(s)")
    console.print(f"Days prayed: {state.total_prayers}")
    if state.last_prayer_date:
        console.print(f"Last prayer: {state.last_prayer_date.isoformat()}")
    if not journal.sessions.has_prayed_today():
        console.print("[yellow]You have not prayed today yet.[/yellow]")


@app.command()
def stats() -> None:
    """Summarize completed sessions."""
    journal = _open()
    summary = journal.sessions.statistics()
    console.print(f"Completed sessions: {summary.total_sessions}")
    if summary.average_duration is not None:
        console.print(f"Average duration: {summary.average_duration} min")
    console.print(
        f"Streak: {summary.current_streak} current, {summary.longest_streak} longest"
    )

    if summary.type_counts:
        table = Table(title="By prayer")
        table.add_column("Type")
        table.add_column("Count", justify="right")
        for kind, count in sorted(summary.type_counts.items()):
            table.add_row(str(kind), str(count))
        console.print(table)

    if summary.mystery_counts:
        table = Table(title="By mystery")
        table.add_column("Mystery")
        table.add_column("Count", justify="right")
        for mystery, count in sorted(summary.mystery_counts.items()):
            table.add_row(str(mystery), str(count))
        console.print(table)

    novenas = journal.novenas.stats()
    console.print(
        f"Novenas: {novenas.total_started} started, {novenas.total_completed} completed, "
        f"{novenas.current_active} active"
    )


# ── Novenas ──────────────────────────────────────────────────────


def _novena_progress(journal: PrayerJournal, novena: ActiveNovena) -> str:
    if novena.is_completed:
        return "completed"
    next_day = journal.novenas.next_available_day(novena)
    done = f"{len(novena.completed_days)}/{NOVENA_LENGTH} days"
    if next_day is None:
        return f"{done}, next day opens tomorrow"
    return f"{done}, day {next_day} available"


@novena_app.command("start")
def novena_start(
    kind: Annotated[NovenaType, typer.Argument(help="Novena to begin.")],
    intention: IntentionOpt = None,
) -> None:
    """Begin a nine-day novena today."""
    journal = _open()
    novena = journal.novenas.start_novena(kind, intention=intention)
    console.print(f"Started {NOVENA_INFO[kind].name}: {novena.id}")
    _warn_if_unsaved(journal)


@novena_app.command("complete")
def novena_complete(
    novena_id: Annotated[str, typer.Argument(help="Active novena id.")],
    day: Annotated[int, typer.Argument(help="Day to mark as prayed.")],
    intention: IntentionOpt = None,
    reflection: ReflectionOpt = None,
    mood: MoodOpt = None,
    gratitude: GratitudeOpt = None,
    insights: InsightsOpt = None,
    tag: TagOpt = None,
) -> None:
    """Mark one day of a novena as prayed."""
    patch = _journal_patch(intention, reflection, mood, gratitude, insights, tag)
    journal = _open()
    result = journal.novenas.complete_day(novena_id, day, journal=patch)
    if result is None:
        _fail(f"no novena with id {novena_id}")
    if isinstance(result, DayRejected):
        _fail(result.reason)
    name = NOVENA_INFO[result.novena.kind].name
    console.print(f"{name}: day {day} prayed ({_novena_progress(journal, result.novena)})")
    if result.novena.is_completed:
        console.print("[green]Novena completed.[/green]")
    _warn_if_unsaved(journal)


@novena_app.command("status")
def novena_status(
    novena_id: Annotated[str, typer.Argument(help="Active novena id.")],
) -> None:
    """Show progress of one novena."""
    journal = _open()
    novena = journal.novenas.get(novena_id)
    if novena is None:
        _fail(f"no novena with id {novena_id}")
    info = NOVENA_INFO[novena.kind]
    console.print(f"[bold]{info.name}[/bold] ({info.patron})")
    console.print(f"Started: {novena.start_date.date().isoformat()}")
    if novena.intention:
        console.print(f"Intention: {novena.intention}")
    days = ", ".join(str(d) for d in sorted(novena.completed_days)) or "none"
    console.print(f"Days prayed: {days}")
    console.print(f"Progress: {_novena_progress(journal, novena)}")


@novena_app.command("list")
def novena_list(
    active: Annotated[bool, typer.Option("--active", help="Hide completed novenas.")] = False,
) -> None:
    """List novenas."""
    journal = _open()
    novenas = journal.novenas.list(include_completed=not active)
    if not novenas:
        console.print("No novenas.")
        return
    table = Table(title="Novenas")
    table.add_column("Novena")
    table.add_column("Started")
    table.add_column("Progress")
    table.add_column("Id", style="dim")
    for novena in novenas:
        table.add_row(
            NOVENA_INFO[novena.kind].name,
            novena.start_date.date().isoformat(),
            _novena_progress(journal, novena),
            novena.id,
        )
    console.print(table)


@novena_app.command("remove")
def novena_remove(
    novena_id: Annotated[str, typer.Argument(help="Novena to delete.")],
) -> None:
    """Delete a novena and all of its recorded days."""
    journal = _open()
    if not journal.novenas.remove_novena(novena_id):
        _fail(f"no novena with id {novena_id}")
    console.print(f"Removed novena {novena_id}")
    _warn_if_unsaved(journal)


@novena_app.command("cleanup")
def novena_cleanup(
    older_than: Annotated[
        Optional[int],
        typer.Option("--older-than", min=0, help="Age in days. Defaults to the config."),
    ] = None,
) -> None:
    """Forget completed novenas started long ago. Their sessions are kept."""
    days = older_than if older_than is not None else _state.config.novena.cleanup_after_days
    journal = _open()
    dropped = journal.novenas.cleanup_completed(days)
    console.print(f"Removed {dropped} completed novena(s)")
    _warn_if_unsaved(journal)


@novena_app.command("catalog")
def novena_catalog() -> None:
    """List the novenas that can be started."""
    table = Table(title="Nine-day novenas")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Feast")
    table.add_column("Minutes", justify="right")
    for kind, info in NOVENA_INFO.items():
        table.add_row(str(kind), info.name, info.feast_day, str(info.estimated_duration))
    console.print(table)


# ── 54-day rosary novena ─────────────────────────────────────────


@rosary_novena_app.command("start")
def rosary_novena_start(
    intention: IntentionOpt = None,
    restart: Annotated[
        bool, typer.Option("--restart", help="Discard progress and begin again.")
    ] = False,
) -> None:
    """Begin the 54-day rosary novena today."""
    journal = _open()
    tracker = journal.rosary_novena
    if tracker.progress.completed_days and not restart:
        _fail(
            f"a 54-day novena is already under way ({tracker.percent_complete()}% complete); "
            "pass --restart to begin again"
        )
    tracker.start(intention)
    console.print("Started the 54-day rosary novena. Day 1 is a petition day.")
    _warn_if_unsaved(journal)


@rosary_novena_app.command("toggle")
def rosary_novena_toggle(
    day: Annotated[int, typer.Argument(min=1, max=54, help="Day to mark or unmark.")],
) -> None:
    """Mark a day as prayed, or unmark it if it already is."""
    journal = _open()
    tracker = journal.rosary_novena
    state = "prayed" if tracker.toggle_day(day) else "not prayed"
    console.print(f"Day {day} marked {state} ({tracker.percent_complete()}% complete)")
    _warn_if_unsaved(journal)


@rosary_novena_app.command("status")
def rosary_novena_status() -> None:
    """Show progress through the 54-day rosary novena."""
    progress = _open().rosary_novena.progress
    if not progress.is_started:
        console.print("No 54-day novena in progress.")
        return
    console.print(f"Started: {progress.start_date.date().isoformat()}")
    if progress.intention:
        console.print(f"Intention: {progress.intention}")
    console.print(
        f"Progress: {len(progress.completed_days)}/{FIFTY_FOUR_DAY_TOTAL} days, "
        f"{progress.percent_complete}% complete"
    )
    console.print(f"Petition: {progress.petition_days_done}/{DAYS_PER_PHASE} days")
    console.print(f"Thanksgiving: {progress.thanksgiving_days_done}/{DAYS_PER_PHASE} days")
    if progress.is_completed:
        console.print("[green]54-day novena completed.[/green]")
        return
    info = cycle_info(progress.current_day)
    console.print(
        f"Next: day {progress.current_day}, {info.phase} phase, cycle {info.cycle}, "
        f"{info.mystery} Mysteries"
    )


@rosary_novena_app.command("clear")
def rosary_novena_clear() -> None:
    """Forget all 54-day novena progress. Recorded sessions are kept."""
    journal = _open()
    journal.rosary_novena.clear()
    console.print("Cleared the 54-day novena tracker.")
    _warn_if_unsaved(journal)


if __name__ == "__main__":
    app()
