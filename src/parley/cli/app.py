"""Main CLI application using Typer."""
import asyncio
import json
import sys
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console

from ..session import BufferSink, ChatSession, QueueDispatcher
from ..stream import ContentDelta, StreamError, decode_stream
from ..transcript import ERROR_MARKER, parse_transcript, user_prompt_line
from .providers import get_config, get_transport, make_log_callback

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="parley",
    help="Terminal chat client that streams replies into an editable transcript",
    no_args_is_help=True,
    add_completion=True,
)

# Reply text goes to stdout, diagnostics to stderr
console = Console()
err_console = Console(stderr=True)


@app.command()
def chat(
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum output tokens"),
    transport: str | None = typer.Option(
        None, "--transport", "-t", help="Transport to use: httpx or curl"
    ),
    system: str | None = typer.Option(None, "--system", "-s", help="System prompt"),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show the log panel at this level (debug/info/warning/error)"
    ),
):
    """Open the interactive chat window."""
    from ..ui import run_textual_tui

    config = get_config(
        err_console,
        model=model,
        max_tokens=max_tokens,
        transport=transport,
        system=system,
    )
    asyncio.run(run_textual_tui(config, log_level=log_level))


@app.command()
def ask(
    prompt: str | None = typer.Argument(
        None, help="Message to send (read from stdin when omitted)"
    ),
    transcript: Path | None = typer.Option(
        None,
        "--transcript",
        "-f",
        exists=True,
        dir_okay=False,
        help="Earlier transcript to continue"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Model identifier"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum output tokens"),
    transport: str | None = typer.Option(
        None, "--transport", "-t", help="Transport to use: httpx or curl"
    ),
    system: str | None = typer.Option(None, "--system", "-s", help="System prompt"),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Print log records at this level to stderr"
    ),
    save: Path | None = typer.Option(
        None, "--save", "-o", dir_okay=False, help="Write the resulting transcript here"
    ),
):
    """Send one message and stream the reply to stdout."""
    config = get_config(
        err_console,
        model=model,
        max_tokens=max_tokens,
        transport=transport,
        system=system,
    )

    if prompt is None:
        prompt = sys.stdin.read().strip()
    if not prompt:
        err_console.print("[red]Error: empty prompt[/red]")
        raise typer.Exit(code=1)

    lines = transcript.read_text().splitlines() if transcript else []
    # Drop a dangling empty prompt left at the end of a saved transcript
    if lines and lines[-1] == user_prompt_line(config.prefixes):
        lines.pop()
    lines.append(user_prompt_line(config.prefixes) + prompt)

    failed = False

    def echo(kind: str, payload) -> None:
        nonlocal failed
        if kind == "text":
            console.print(payload, end="", markup=False, highlight=False, soft_wrap=True)
        elif ERROR_MARKER in payload:
            failed = True

    log_callback = make_log_callback(log_level, err_console)
    sink = BufferSink(lines, listener=echo)
    dispatcher = QueueDispatcher()
    session = ChatSession(
        config,
        get_transport(config, log_callback),
        sink,
        dispatch=dispatcher,
        debug_callback=log_callback,
    )

    # The session has already logged why nothing was sent
    if not session.send():
        raise typer.Exit(code=1)

    try:
        dispatcher.run_until(lambda: not session.is_busy)
    except KeyboardInterrupt:
        session.cancel()
        err_console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(code=130)

    console.print()
    if save is not None:
        save.write_text(sink.text + "\n")
        err_console.print(f"[dim]Transcript saved to {save}[/dim]")

    if failed:
        err_console.print("[red]Error: request failed[/red]")
        raise typer.Exit(code=1)


@app.command()
def parse(
    transcript: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Transcript file to parse"
    ),
):
    """Print the messages a transcript would send, as JSON."""
    config = get_config(err_console)
    messages = parse_transcript(transcript.read_text().splitlines(), config.prefixes)
    if not messages:
        err_console.print("[yellow]No messages found[/yellow]")
        raise typer.Exit(code=1)
    console.print_json(json.dumps([msg.to_wire() for msg in messages]))


@app.command()
def replay(
    body: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Captured streaming response body"
    ),
):
    """Print the reply text contained in a captured event stream."""
    with body.open(encoding="utf-8", errors="replace") as f:
        for event in decode_stream(line.rstrip("\r\n") for line in f):
            if isinstance(event, ContentDelta):
                console.print(event.text, end="", markup=False, highlight=False, soft_wrap=True)
            elif isinstance(event, StreamError):
                console.print()
                err_console.print(f"Error reading stream: {event.cause}", style="red", markup=False)
                raise typer.Exit(code=1)
    console.print()


if __name__ == "__main__":
    app()
