"""Session statistics commands."""

from datetime import datetime, timedelta

import typer
from rich.prompt import Confirm

from focusguard.ui.console import get_console
from focusguard.ui.formatters import (
    format_dict_table,
    format_info,
    format_output,
    format_success,
)
from focusguard.utils.exit_codes import ERROR_INVALID_ARGS

from .decorators import AppError, command_wrapper
from .deps import get_history

console = get_console()
app = typer.Typer(help="Focus statistics")

OUTPUT_FORMATS = ("table", "json", "yaml")


def _check_output(output: str) -> None:
    if output not in OUTPUT_FORMATS:
        raise AppError(
            f"Invalid output format '{output}'. Use one of: {', '.join(OUTPUT_FORMATS)}",
            exit_code=ERROR_INVALID_ARGS,
        )


@app.command("show")
@command_wrapper
def show_stats(
    days: int | None = typer.Option(None, "--days", "-d", min=1, help="Last N days"),
    week: bool = typer.Option(False, "--week", help="Last 7 days"),
    month: bool = typer.Option(False, "--month", help="Since this day last month"),
    output: str = typer.Option("table", "--output", "-o", help="Output format (table/json/yaml)"),
) -> None:
    """Show session counts for a period (default: last 7 days)."""
    _check_output(output)
    history = get_history()
    now = datetime.now().astimezone()

    if month:
        label = "last month"
        stats = history.monthly_stats(now)
    elif days is not None and not week:
        label = f"last {days} days"
        stats = history.aggregate(now - timedelta(days=days), now + timedelta(microseconds=1))
    else:
        label = "last 7 days"
        stats = history.weekly_stats(now)

    data = {"period": label, **stats.to_dict()}
    if output != "table":
        format_output(data, output)
        return

    console.print(f"\n[bold]Focus statistics ({label})[/bold]\n")
    console.print(f"Total sessions: {stats.total}")
    console.print(f"Completed:      [green]{stats.completed}[/green]")
    console.print(f"Failed:         [red]{stats.failed}[/red]")
    if stats.in_progress:
        console.print(f"In progress:    {stats.in_progress}")
    console.print(f"Completion:     {stats.completion_rate}%")


@app.command("daily")
@command_wrapper
def show_daily(
    days: int = typer.Option(7, "--days", "-d", min=1, help="Number of days to show"),
    output: str = typer.Option("table", "--output", "-o", help="Output format (table/json/yaml)"),
) -> None:
    """Show how many sessions were started each day."""
    _check_output(output)
    counts = get_history().session_count_by_day(days, datetime.now().astimezone())
    rows = [{"date": day.isoformat(), "sessions": count} for day, count in counts]
    if output == "table":
        format_dict_table(rows, title=f"Sessions per day (last {days} days)")
    else:
        format_output(rows, output)


@app.command("clear")
@command_wrapper
def clear_history(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete all recorded sessions."""
    if not yes and not Confirm.ask("Delete the whole session history?", default=False):
        format_info("Cancelled")
        return
    get_history().clear()
    format_success("Session history cleared")
