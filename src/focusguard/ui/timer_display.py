"""Terminal rendering surface for live timer snapshots."""

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from focusguard.models.runtime import LiveSnapshot, format_clock, progress_fraction
from focusguard.models.session import SessionKind
from focusguard.services.publisher import LiveStatePublisher

_HEADERS = {
    SessionKind.FOCUS: ("🍅", "cyan"),
    SessionKind.SHORT_BREAK: ("☕", "green"),
    SessionKind.LONG_BREAK: ("🌴", "magenta"),
}

BAR_WIDTH = 40


def render_snapshot(snapshot: LiveSnapshot, footer: str | None = None) -> Panel:
    """Build the timer panel for a snapshot."""
    emoji, color = _HEADERS[snapshot.session_kind]
    remaining = snapshot.remaining_time

    if snapshot.session_kind is SessionKind.FOCUS and remaining < 60:
        timer_color = "red"
    elif snapshot.session_kind is SessionKind.FOCUS and remaining < 300:
        timer_color = "yellow"
    else:
        timer_color = color

    components = [
        Text(f"{emoji}  {snapshot.session_kind.display_name}", style=f"bold {color}", justify="center"),
        Text(""),
        Text(format_clock(remaining), style=f"bold {timer_color}", justify="center"),
        Text(""),
    ]

    fraction = progress_fraction(remaining, snapshot.total_time)
    filled = int(BAR_WIDTH * fraction)
    bar = "▓" * filled + "░" * (BAR_WIDTH - filled)
    components.append(Text(f"{bar}  {int(fraction * 100)}%", style="dim", justify="center"))

    if footer:
        components.append(Text(""))
        components.append(Text(footer, style="dim", justify="center"))

    return Panel(Align.center(Group(*components)), border_style=color)


class TimerDisplay(LiveStatePublisher):
    """Renders snapshots in place with rich.live."""

    def __init__(self, console: Console | None = None, footer: str | None = "Ctrl+C to stop"):
        self.console = console or Console()
        self.footer = footer
        self._live: Live | None = None

    def publish(self, snapshot: LiveSnapshot) -> None:
        panel = render_snapshot(snapshot, self.footer)
        if self._live is None:
            self._live = Live(panel, console=self.console, auto_refresh=False, transient=True)
            self._live.start()
        else:
            self._live.update(panel, refresh=True)

    def end(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
