"""Provider factory functions for CLI.

Centralizes creation of the store, completion client and controller from the
environment. Hides configuration details from command implementations.
"""

from rich.console import Console

from ..config import AppConfig, load_config
from ..llm import CompletionClient, create_completion_client
from ..session import MessageStore, Scheduler, SessionController
from ..storage import PersistentStore, create_persistent_store

# Default console for output
_console = Console()


def get_backend(config: AppConfig) -> PersistentStore:
    """Create the durable storage backend.

    Environment variables:
        PARLEY_STORAGE: file or memory (default: file)
        PARLEY_DATA_DIR: directory for the file backend (default: ~/.parley)
    """
    if config.storage_backend == "file":
        return create_persistent_store("file", directory=config.data_dir)
    return create_persistent_store(config.storage_backend)


def get_client(
    config: AppConfig,
    console: Console | None = None,
    warn: bool = True,
) -> CompletionClient:
    """Create the completion client.

    A missing API key only prints a warning: sends then fail with
    "API key not configured" without touching the network.

    Environment variables:
        PARLEY_PROVIDER: openrouter, openai or deepseek (default: openrouter)
        OPENROUTER_API_KEY / PARLEY_API_KEY: credential
        PARLEY_BASE_URL: custom endpoint
    """
    con = console or _console
    if warn and not config.api_key:
        con.print("[yellow]Warning: OPENROUTER_API_KEY not set, requests will fail[/yellow]")

    client_config: dict[str, str | None] = {"api_key": config.api_key}
    if config.base_url:
        client_config["base_url"] = config.base_url
    return create_completion_client(config.provider, **client_config)


def build_controller(
    scheduler: Scheduler,
    config: AppConfig | None = None,
    console: Console | None = None,
    warn: bool = True,
) -> SessionController:
    """Wire store, client and scheduler into a started controller."""
    config = config or load_config()
    store = MessageStore(get_backend(config))
    controller = SessionController(store, get_client(config, console, warn), scheduler)
    controller.start()
    return controller


