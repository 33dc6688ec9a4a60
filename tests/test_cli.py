"""Tests for the Typer command line."""
import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from parley.cli import app as cli_app
from parley.config import SESSION_STORAGE_KEY
from parley.session import ContentType, Message, MessageStore, Role
from parley.storage import JsonFileStore

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Isolated data directory with no credential configured."""
    directory = tmp_path / "data"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PARLEY_DATA_DIR", str(directory))
    monkeypatch.setenv("PARLEY_STORAGE", "file")
    monkeypatch.delenv("PARLEY_API_KEY", raising=False)
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.setattr(cli_app, "console", Console(width=200))
    return directory


@pytest.fixture
def seeded(data_dir):
    """Data directory holding a two-message session."""
    store = MessageStore(JsonFileStore(data_dir))
    store.append(Message(role=Role.USER, content="hello there"))
    store.append(
        Message(
            role=Role.ASSISTANT,
            content="print('hi')",
            content_type=ContentType.CODE,
            language="python",
        )
    )
    return data_dir


def _invoke(*args: str, input: str | None = None):
    return runner.invoke(cli_app.app, list(args), input=input)


class TestModels:
    """Tests for the models command."""

    def test_lists_catalogue(self, data_dir):
        """Test that every catalogue entry is shown."""
        result = _invoke("models")

        assert result.exit_code == 0
        assert "google/gemini-pro" in result.output
        assert "Claude 3.5 Haiku" in result.output


class TestHistory:
    """Tests for the history command."""

    def test_empty(self, data_dir):
        """Test the message for an empty session."""
        result = _invoke("history")

        assert result.exit_code == 0
        assert "No messages" in result.output

    def test_lists_messages(self, seeded):
        """Test that stored messages are listed."""
        result = _invoke("history")

        assert result.exit_code == 0
        assert "hello there" in result.output
        assert "code (python)" in result.output
        assert "2 of 2 messages" in result.output

    def test_filter(self, seeded):
        """Test the code filter."""
        result = _invoke("history", "--filter", "code")

        assert result.exit_code == 0
        assert "hello there" not in result.output
        assert "1 of 2 messages" in result.output


class TestSettings:
    """Tests for the settings command."""

    def test_show_defaults(self, data_dir):
        """Test showing the default settings."""
        result = _invoke("settings")

        assert result.exit_code == 0
        assert "temperature" in result.output
        assert "0.7" in result.output

    def test_update_persists(self, data_dir):
        """Test that a change is written to the data directory."""
        result = _invoke("settings", "--temperature", "1.5", "--no-code-highlighting")
        assert result.exit_code == 0

        document = json.loads((data_dir / f"{SESSION_STORAGE_KEY}.json").read_text())
        assert document["settings"]["temperature"] == 1.5
        assert document["settings"]["codeHighlighting"] is False

    def test_invalid_value(self, data_dir):
        """Test that an out-of-range value exits with an error."""
        result = _invoke("settings", "--temperature", "5")

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_model_note(self, data_dir):
        """Test that a model outside the catalogue is accepted with a note."""
        result = _invoke("settings", "--model", "acme/custom")

        assert result.exit_code == 0
        assert "not in the model catalogue" in result.output


class TestExportImportClear:
    """Tests for export, import and clear."""

    def test_export_clear_import(self, seeded, tmp_path):
        """Test that an export restores the session after a clear."""
        out = tmp_path / "backup.json"

        result = _invoke("export", str(out))
        assert result.exit_code == 0
        assert out.exists()

        assert _invoke("clear", "--yes").exit_code == 0
        assert "No messages" in _invoke("history").output

        result = _invoke("import", str(out))
        assert result.exit_code == 0
        assert "Imported 2 messages" in result.output
        assert "hello there" in _invoke("history").output

    def test_export_to_directory(self, seeded, tmp_path):
        """Test the timestamped file name for a directory target."""
        result = _invoke("export", str(tmp_path))

        assert result.exit_code == 0
        assert list(tmp_path.glob("chat-history-*.json"))

    def test_import_invalid(self, seeded, tmp_path):
        """Test that a malformed file exits with an error and keeps the session."""
        bad = tmp_path / "bad.json"
        bad.write_text("[]")

        result = _invoke("import", str(bad))
        assert result.exit_code == 1
        assert "Invalid chat history file" in result.output
        assert "hello there" in _invoke("history").output

    def test_clear_aborted(self, seeded):
        """Test that declining the prompt keeps the session."""
        result = _invoke("clear", input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert "hello there" in _invoke("history").output


class TestAsk:
    """Tests for the ask and regenerate commands."""

    def test_ask_without_key(self, data_dir):
        """Test that a missing credential fails fast and keeps the user turn."""
        result = _invoke("ask", "hello")

        assert result.exit_code == 1
        assert "API key not configured" in result.output
        assert "hello" in _invoke("history").output

    def test_regenerate_empty_session(self, data_dir):
        """Test that there is nothing to regenerate in an empty session."""
        result = _invoke("regenerate")

        assert result.exit_code == 1
        assert "Nothing to send" in result.output
