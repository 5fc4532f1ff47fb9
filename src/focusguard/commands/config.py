"""Settings commands."""

import typer
from pydantic import ValidationError

from focusguard.config import BlockingMode, TimerConfiguration
from focusguard.ui.console import get_console
from focusguard.ui.formatters import format_output, format_success, format_warning
from focusguard.utils.exit_codes import ERROR_INVALID_ARGS, ERROR_NOT_FOUND

from .decorators import AppError, command_wrapper
from .deps import get_settings_manager

console = get_console()
app = typer.Typer(help="Timer settings")
allow_app = typer.Typer(help="Apps allowed in whitelist mode")
app.add_typer(allow_app, name="allow")

_SCALAR_KEYS = [k for k in TimerConfiguration.model_fields if k != "allow_list"]


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format (table/json/yaml)"),
) -> None:
    """Show the current settings."""
    config = get_settings_manager().config
    format_output(config.model_dump(mode="json"), output)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help=f"Setting name ({', '.join(_SCALAR_KEYS)})"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change one setting. Durations are in seconds."""
    if key not in _SCALAR_KEYS:
        raise AppError(f"Unknown setting '{key}'", exit_code=ERROR_NOT_FOUND)
    try:
        get_settings_manager().set(key, value)
    except ValidationError as e:
        message = e.errors()[0]["msg"]
        raise AppError(f"Invalid value for {key}: {message}", exit_code=ERROR_INVALID_ARGS) from e
    format_success(f"{key} = {value}")


@app.command("reset")
@command_wrapper
def reset_config() -> None:
    """Restore default settings."""
    get_settings_manager().reset()
    format_success("Settings reset to defaults")


@app.command("mode")
@command_wrapper
def set_mode(
    mode: BlockingMode = typer.Argument(..., help="strict, whitelist or relaxed"),
) -> None:
    """Choose which apps stay usable during focus."""
    settings = get_settings_manager()
    config = settings.update(blocking_mode=mode)
    format_success(f"Blocking mode: {mode.display_name} ({mode.description})")
    if mode is BlockingMode.WHITELIST and not config.allow_list:
        format_warning(
            "No apps are allowed yet; add some with 'focusguard config allow add'"
        )


@allow_app.command("add")
@command_wrapper
def allow_add(apps: list[str] = typer.Argument(..., help="App identifiers")) -> None:
    """Allow apps during whitelist focus sessions."""
    settings = get_settings_manager()
    settings.update(allow_list=[*settings.config.allow_list, *apps])
    format_success(f"Allowed: {', '.join(settings.config.allow_list)}")


@allow_app.command("remove")
@command_wrapper
def allow_remove(apps: list[str] = typer.Argument(..., help="App identifiers")) -> None:
    """Stop allowing apps."""
    settings = get_settings_manager()
    missing = [a for a in apps if a not in settings.config.allow_list]
    if missing:
        raise AppError(f"Not in allow list: {', '.join(missing)}", exit_code=ERROR_NOT_FOUND)
    settings.update(allow_list=[a for a in settings.config.allow_list if a not in apps])
    format_success(f"Removed: {', '.join(apps)}")


@allow_app.command("list")
@command_wrapper
def allow_list() -> None:
    """List allowed apps."""
    apps = get_settings_manager().config.allow_list
    if not apps:
        console.print("[yellow]No apps allowed[/yellow]")
        return
    for app_id in apps:
        console.print(f"• {app_id}")
