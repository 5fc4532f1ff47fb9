"""Main entry point for focusguard."""

import typer
from rich.console import Console

from focusguard import __version__
from focusguard.commands import config, stats, timer

app = typer.Typer(
    name="focusguard",
    help="Pomodoro focus timer that blocks distracting apps",
    no_args_is_help=True,
)

console = Console()

app.add_typer(timer.app, name="timer", help="Run focus and break sessions")
app.add_typer(stats.app, name="stats", help="Focus statistics")
app.add_typer(config.app, name="config", help="Timer settings")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]focusguard[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
