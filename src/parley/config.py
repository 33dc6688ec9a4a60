"""Application configuration.

Centralizes environment lookups, storage keys and the model catalogue so
that the session engine, CLI and TUI agree on the same values.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Durable storage
SESSION_STORAGE_KEY = "parley.session"  # Single document holding messages + settings
LOG_FILE_NAME = "parley.log"

# Timing (milliseconds)
ERROR_TIMEOUT_MS = 5000  # Auto-clear delay for the visible error
DEFAULT_TYPING_SPEED_MS = 20  # Reveal interval per character

# Request defaults
DEFAULT_MODEL = "anthropic/claude-3-sonnet-20240229"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000

APP_TITLE = "AI Chat Assistant"


class ModelInfo(BaseModel):
    """A selectable model in the catalogue."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    provider: str | None = None
    context_window: int | None = None


AVAILABLE_MODELS: list[ModelInfo] = [
    ModelInfo(
        id="google/gemini-2.0-flash-001",
        name="Gemini Flash 2.0",
        description="Most capable Google model",
        provider="Google",
        context_window=20000,
    ),
    ModelInfo(
        id="deepseek/deepseek-r1-distill-llama-8b",
        name="DeepSeek: R1 8B",
        description="Most capable Deepseek model",
        provider="DeepSeek",
        context_window=20000,
    ),
    ModelInfo(
        id="anthropic/claude-3.5-haiku-20241022:beta",
        name="Claude 3.5 Haiku",
        description="Most capable Claude model",
        provider="Anthropic",
        context_window=20000,
    ),
    ModelInfo(
        id="google/gemini-pro",
        name="Gemini Pro",
        description="Google's advanced model",
        provider="Google",
        context_window=32000,
    ),
]


def find_model(model_id: str) -> ModelInfo | None:
    """Look up a catalogue entry by id."""
    for model in AVAILABLE_MODELS:
        if model.id == model_id:
            return model
    return None


class AppConfig(BaseModel):
    """Process-level configuration read once at startup."""

    provider: str = Field(default="openrouter", description="Completion provider preset")
    api_key: str | None = Field(default=None, description="Static API credential")
    base_url: str | None = Field(default=None, description="Override for the provider base URL")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".parley")
    storage_backend: str = Field(default="file", description="'file' or 'memory'")
    log_level: str = Field(default="WARNING")

    @property
    def log_file(self) -> Path:
        return self.data_dir / LOG_FILE_NAME


def load_config() -> AppConfig:
    """Build the configuration from the environment.

    Environment variables:
        PARLEY_PROVIDER: openrouter, openai or deepseek (default: openrouter)
        OPENROUTER_API_KEY / PARLEY_API_KEY: credential (PARLEY_API_KEY wins)
        PARLEY_BASE_URL: custom OpenAI-compatible endpoint
        PARLEY_DATA_DIR: directory for durable state (default: ~/.parley)
        PARLEY_STORAGE: file or memory (default: file)
        PARLEY_LOG_LEVEL: logging level name (default: WARNING)
    """
    load_dotenv()

    data_dir = os.getenv("PARLEY_DATA_DIR")
    return AppConfig(
        provider=os.getenv("PARLEY_PROVIDER", "openrouter").lower(),
        api_key=os.getenv("PARLEY_API_KEY") or os.getenv("OPENROUTER_API_KEY") or None,
        base_url=os.getenv("PARLEY_BASE_URL") or None,
        data_dir=Path(data_dir).expanduser() if data_dir else Path.home() / ".parley",
        storage_backend=os.getenv("PARLEY_STORAGE", "file").lower(),
        log_level=os.getenv("PARLEY_LOG_LEVEL", "WARNING").upper(),
    )
