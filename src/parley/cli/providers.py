"""Factory functions for CLI.

Centralizes creation of the chat configuration, transport and log sink from
command-line options and environment variables. Hides configuration details
from command implementations.
"""

from datetime import datetime
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.text import Text

from ..session import ChatConfig
from ..transport import Transport, create_transport
from ..ui.config import LOG_TIMESTAMP_FORMAT, LogLevel

# Default console for diagnostics (stdout carries the reply)
_console = Console(stderr=True)

_LEVEL_STYLES = {
    "debug": "dim white",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


def get_config(console: Console | None = None, **overrides: Any) -> ChatConfig:
    """Create the chat configuration from environment variables and options.

    Args:
        console: Optional Rich console for output
        **overrides: Option values; None means "not given"

    Returns:
        Validated chat configuration

    Raises:
        SystemExit: If the configuration is invalid

    Environment variables:
        PARLEY_MODEL, PARLEY_API_URL, PARLEY_MAX_TOKENS,
        PARLEY_TRANSPORT, PARLEY_SYSTEM_PROMPT
    """
    import typer

    con = console or _console
    try:
        return ChatConfig.from_env(**overrides)
    except ValidationError as e:
        con.print("[red]Error: invalid configuration[/red]")
        con.print(str(e), markup=False)
        raise typer.Exit(code=1)


def make_log_callback(
    level: str | None,
    console: Console | None = None,
):
    """Create a (level, component, message) callback that prints to the console.

    Args:
        level: Minimum level to print (debug/info/warning/error); None prints
            only errors
        console: Optional Rich console for output
    """
    con = console or _console
    threshold = LogLevel.from_string(level) if level else LogLevel.ERROR

    def log_callback(record_level: str, component: str, message: str) -> None:
        if LogLevel.from_string(record_level) < threshold:
            return
        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)
        line = Text.assemble(
            (f"{timestamp} ", "dim"),
            (f"{record_level.upper():<5} ", _LEVEL_STYLES.get(record_level, "white")),
            (f"[{component}] ", "bold"),
            message,
        )
        con.print(line, soft_wrap=True)

    return log_callback


def get_transport(config: ChatConfig, log_callback=None) -> Transport:
    """Create the transport named in the configuration.

    Raises:
        SystemExit: If the transport type is unknown
    """
    import typer

    transport_config: dict[str, Any] = {"debug_callback": log_callback}
    if config.transport == "httpx":
        transport_config["timeout"] = config.timeout

    try:
        return create_transport(config.transport, **transport_config)
    except ValueError as e:
        _console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
