"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from ..config import AVAILABLE_MODELS, AppConfig, find_model, load_config
from ..log import configure_logging
from ..session import (
    AsyncioScheduler,
    ContentType,
    Message,
    MessageFilter,
    RevealState,
    SessionController,
    SessionEvent,
    SessionEventType,
    VirtualScheduler,
)
from .providers import build_controller

# Create Typer app
app = typer.Typer(
    name="parley",
    help="Chat with hosted language models, with progressive reveal and portable history",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

PREVIEW_LENGTH = 80


def _config() -> AppConfig:
    return load_config()


def _offline_controller(config: AppConfig) -> SessionController:
    """Controller for commands that never send; its timers never fire."""
    return build_controller(VirtualScheduler(), config, console, warn=False)


@app.callback()
def main(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Log level for console output (debug/info/warning/error)"
    )
):
    """Parley command line."""
    config = _config()
    configure_logging(log_level or config.log_level)


@app.command()
def chat():
    """Open the interactive terminal UI."""
    from ..ui import run_textual_tui

    config = _config()
    configure_logging(config.log_level, log_file=config.log_file)
    asyncio.run(run_textual_tui(config))


async def _print_reveal(controller: SessionController, message: Message) -> None:
    """Echo a running reveal to the console until it completes."""
    printed = 0
    done = asyncio.Event()

    def on_event(event: SessionEvent) -> None:
        nonlocal printed
        if event.message is None or event.message.id != message.id:
            return
        if event.type is SessionEventType.REVEAL_PROGRESS and event.text is not None:
            console.out(event.text[printed:], end="", highlight=False)
            printed = len(event.text)
        elif event.type is SessionEventType.REVEAL_COMPLETE:
            done.set()

    unsubscribe = controller.subscribe(on_event)
    try:
        if controller.animator.is_active(message.id):
            await done.wait()
        else:
            console.out(message.content[printed:], end="", highlight=False)
    finally:
        unsubscribe()
    console.out("")


async def _present(controller: SessionController, message: Message, reveal: bool) -> None:
    settings = controller.settings
    if message.content_type is ContentType.CODE and settings.code_highlighting:
        controller.skip_reveal(message.id)
        console.print(Syntax(message.content, message.language or "text", theme="monokai"))
    elif reveal and message.reveal_state is RevealState.REVEALING:
        await _print_reveal(controller, message)
    else:
        controller.skip_reveal(message.id)
        console.out(message.content, highlight=False)


async def _run_exchange(regenerate: bool, prompt: str | None, reveal: bool) -> None:
    controller = build_controller(AsyncioScheduler(), _config(), console)
    try:
        if regenerate:
            message = await controller.regenerate_last()
        else:
            message = await controller.send(prompt)

        if message is None:
            reason = controller.error or "Nothing to send"
            console.print(f"[red]Error: {reason}[/red]")
            raise typer.Exit(code=1)

        await _present(controller, message, reveal)
    finally:
        await controller.aclose()


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    reveal: bool = typer.Option(
        True,
        "--reveal/--no-reveal",
        help="Replay the answer with the typing effect"
    )
):
    """Send one message in the persisted conversation and print the answer."""
    asyncio.run(_run_exchange(regenerate=False, prompt=prompt, reveal=reveal))


@app.command()
def regenerate(
    reveal: bool = typer.Option(
        True,
        "--reveal/--no-reveal",
        help="Replay the answer with the typing effect"
    )
):
    """Redo the last exchange of the persisted conversation."""
    asyncio.run(_run_exchange(regenerate=True, prompt=None, reveal=reveal))


@app.command()
def history(
    filter_: MessageFilter = typer.Option(
        MessageFilter.ALL,
        "--filter",
        "-f",
        help="Show all messages, only code, or only text"
    ),
    full: bool = typer.Option(
        False,
        "--full",
        help="Show full message content"
    )
):
    """List the persisted conversation."""
    controller = _offline_controller(_config())
    messages = controller.filtered(filter_)

    if not messages:
        console.print("[yellow]No messages[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Role", style="cyan", width=10)
    table.add_column("Type", style="yellow", width=18)
    table.add_column("Time", style="dim", width=9)
    table.add_column("Content")

    for i, message in enumerate(messages, 1):
        content = message.content
        if not full and len(content) > PREVIEW_LENGTH:
            content = content[:PREVIEW_LENGTH] + "..."
        kind = message.content_type.value
        if message.language:
            kind = f"{kind} ({message.language})"
        table.add_row(
            str(i),
            message.role.value,
            kind,
            message.timestamp.astimezone().strftime("%H:%M:%S"),
            content,
        )

    console.print(table)
    console.print(f"[dim]{len(messages)} of {len(controller.messages)} messages[/dim]")


@app.command("export")
def export_history(
    destination: Path = typer.Argument(
        Path("."),
        help="File to write, or a directory for a timestamped file"
    )
):
    """Export messages and settings to a JSON file."""
    controller = _offline_controller(_config())
    try:
        path = controller.export_snapshot(destination)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Exported {len(controller.messages)} messages to {path}[/green]")


@app.command("import")
def import_history(
    source: Path = typer.Argument(..., help="Exported chat history file")
):
    """Replace the conversation and settings with an exported file."""
    controller = _offline_controller(_config())
    if not controller.import_snapshot(source):
        console.print(f"[red]Error: {controller.error}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Imported {len(controller.messages)} messages from {source}[/green]")


@app.command()
def clear(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt"
    )
):
    """Delete all messages in the conversation."""
    controller = _offline_controller(_config())
    if not yes:
        confirm = typer.confirm("Are you sure you want to clear all messages? This cannot be undone.")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return
    controller.clear()
    console.print("[green]Conversation cleared[/green]")


@app.command()
def models():
    """List the model catalogue."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Provider", style="yellow")
    table.add_column("Context", style="green", justify="right")
    table.add_column("Description", style="dim")

    for model in AVAILABLE_MODELS:
        table.add_row(
            model.id,
            model.name,
            model.provider or "",
            f"{model.context_window:,}" if model.context_window else "",
            model.description,
        )
    console.print(table)


@app.command()
def settings(
    model: str = typer.Option(None, "--model", "-m", help="Model id"),
    temperature: float = typer.Option(None, "--temperature", "-t", help="Sampling temperature (0-2)"),
    max_tokens: int = typer.Option(None, "--max-tokens", help="Maximum tokens per answer"),
    typing_speed: int = typer.Option(None, "--typing-speed", help="Reveal speed in ms per character"),
    system_prompt: str = typer.Option(None, "--system-prompt", help="System prompt sent before the history"),
    code_highlighting: bool = typer.Option(
        None, "--code-highlighting/--no-code-highlighting", help="Highlight code answers"
    ),
    dark_mode: bool = typer.Option(None, "--dark/--light", help="TUI color scheme"),
):
    """Show or change the persisted settings."""
    controller = _offline_controller(_config())
    changes = {
        key: value
        for key, value in {
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "typing_speed": typing_speed,
            "system_prompt": system_prompt,
            "code_highlighting": code_highlighting,
            "dark_mode": dark_mode,
        }.items()
        if value is not None
    }

    if changes:
        try:
            controller.update_settings(**changes)
        except ValidationError as e:
            console.print(f"[red]Error: {e.errors()[0]['msg']}[/red]")
            raise typer.Exit(code=1)
        if model is not None and find_model(model) is None:
            console.print(f"[yellow]Note: {model} is not in the model catalogue[/yellow]")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in controller.settings.model_dump().items():
        table.add_row(name, repr(value) if isinstance(value, str) else str(value))
    console.print(table)


if __name__ == "__main__":
    app()
