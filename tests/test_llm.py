"""Unit tests for the completion client module."""
import httpx
import openai
import pytest
from openai.types.chat import ChatCompletion

from parley.config import APP_TITLE
from parley.errors import CompletionFailure
from parley.llm import (
    ChatMessage,
    CompletionClient,
    CompletionErrorKind,
    CompletionResult,
    OpenAICompatibleClient,
    RequestContext,
    create_completion_client,
)
from parley.llm.providers.openai_compatible import DEEPSEEK_BASE_URL, OPENROUTER_BASE_URL

REQUEST = httpx.Request("POST", f"{OPENROUTER_BASE_URL}/chat/completions")
HISTORY = [ChatMessage(role="user", content="hi")]
CONTEXT = RequestContext(model="google/gemini-pro", temperature=0.5, max_tokens=100)


def _completion(content: str | None = "hello", **extra) -> ChatCompletion:
    choices = []
    if content is not None:
        choices = [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ]
    return ChatCompletion.model_validate(
        {
            "id": "gen-1",
            "object": "chat.completion",
            "created": 0,
            "model": "google/gemini-pro",
            "choices": choices,
            **extra,
        }
    )


def _status_error(cls, status: int, body):
    response = httpx.Response(status, request=REQUEST, json=body)
    return cls("request failed", response=response, body=body)


@pytest.fixture
def openrouter_client():
    return OpenAICompatibleClient(api_key="sk-or-test")


def _respond_with(monkeypatch, client: OpenAICompatibleClient, outcome):
    """Replace the SDK call; returns the list of captured kwargs."""
    captured = []

    async def fake_create(**kwargs):
        captured.append(kwargs)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(client._client.chat.completions, "create", fake_create)
    return captured


class TestCompletionClient:
    """Tests for CompletionClient interface."""

    def test_completion_client_is_abstract(self):
        """Test that CompletionClient cannot be instantiated directly."""
        with pytest.raises(TypeError):
            CompletionClient()  # type: ignore

    @pytest.mark.asyncio
    async def test_async_context_manager_closes(self):
        """Test that leaving the context closes the client."""
        client = OpenAICompatibleClient(api_key=None)
        async with client as entered:
            assert entered is client


class TestCompletionResult:
    """Tests for CompletionResult."""

    def test_ok(self):
        """Test a successful result."""
        result = CompletionResult.ok("text")

        assert result.is_ok
        assert result.unwrap() == "text"

    def test_err_default_message(self):
        """Test that a failure without a message gets the default text."""
        result = CompletionResult.err(CompletionErrorKind.MALFORMED_RESPONSE)

        assert not result.is_ok
        assert result.message == "Invalid response format"

    def test_unwrap_raises(self):
        """Test that unwrap raises CompletionFailure with the kind."""
        result = CompletionResult.err(CompletionErrorKind.RATE_LIMITED, "slow down")

        with pytest.raises(CompletionFailure) as excinfo:
            result.unwrap()
        assert excinfo.value.kind == CompletionErrorKind.RATE_LIMITED
        assert str(excinfo.value) == "slow down"


class TestOpenAICompatibleClient:
    """Tests for request building and error mapping."""

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(self):
        """Test that no key short-circuits before the network."""
        client = OpenAICompatibleClient(api_key=None)
        result = await client.complete(HISTORY, CONTEXT)

        assert client.has_credential is False
        assert result.error == CompletionErrorKind.MISSING_CREDENTIAL
        assert result.message == "API key not configured"

    def test_client_setup(self, openrouter_client):
        """Test attribution headers and disabled SDK retries."""
        sdk = openrouter_client._client

        assert openrouter_client.has_credential
        assert sdk.max_retries == 0
        assert sdk.default_headers["X-Title"] == APP_TITLE
        assert str(sdk.base_url).rstrip("/") == OPENROUTER_BASE_URL

    @pytest.mark.asyncio
    async def test_success(self, monkeypatch, openrouter_client):
        """Test that the first choice's content is returned."""
        captured = _respond_with(monkeypatch, openrouter_client, _completion("hello"))
        result = await openrouter_client.complete(HISTORY, CONTEXT)

        assert result.is_ok
        assert result.text == "hello"
        assert captured[0]["model"] == "google/gemini-pro"
        assert captured[0]["temperature"] == 0.5
        assert captured[0]["max_tokens"] == 100
        assert captured[0]["messages"] == [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_system_prompt_is_prepended(self, monkeypatch, openrouter_client):
        """Test that a non-empty system prompt leads the request."""
        captured = _respond_with(monkeypatch, openrouter_client, _completion())
        context = CONTEXT.model_copy(update={"system_prompt": "be brief"})
        await openrouter_client.complete(HISTORY, context)

        assert captured[0]["messages"][0] == {"role": "system", "content": "be brief"}
        assert len(captured[0]["messages"]) == 2

    @pytest.mark.asyncio
    async def test_blank_system_prompt_is_omitted(self, monkeypatch, openrouter_client):
        """Test that a whitespace-only system prompt is not sent."""
        captured = _respond_with(monkeypatch, openrouter_client, _completion())
        context = CONTEXT.model_copy(update={"system_prompt": "  "})
        await openrouter_client.complete(HISTORY, context)

        assert [m["role"] for m in captured[0]["messages"]] == ["user"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,kind,message",
        [
            (
                _status_error(openai.AuthenticationError, 401, {"error": {"message": "No auth credentials found"}}),
                CompletionErrorKind.UNAUTHORIZED,
                "No auth credentials found",
            ),
            (
                _status_error(openai.RateLimitError, 429, {"message": "Rate limit exceeded"}),
                CompletionErrorKind.RATE_LIMITED,
                "Rate limit exceeded",
            ),
            (
                _status_error(openai.InternalServerError, 500, {"error": {"message": "Upstream error"}}),
                CompletionErrorKind.OTHER,
                "Upstream error",
            ),
            (
                _status_error(openai.BadRequestError, 400, None),
                CompletionErrorKind.OTHER,
                "Failed to get response",
            ),
            (
                openai.APIConnectionError(request=REQUEST),
                CompletionErrorKind.NETWORK,
                None,
            ),
            (
                openai.APITimeoutError(request=REQUEST),
                CompletionErrorKind.NETWORK,
                None,
            ),
        ],
    )
    async def test_error_mapping(self, monkeypatch, openrouter_client, error, kind, message):
        """Test that SDK exceptions map onto failure kinds."""
        _respond_with(monkeypatch, openrouter_client, error)
        result = await openrouter_client.complete(HISTORY, CONTEXT)

        assert result.error == kind
        if message is not None:
            assert result.message == message
        else:
            assert result.message

    @pytest.mark.asyncio
    async def test_missing_content_is_malformed(self, monkeypatch, openrouter_client):
        """Test that a response without choices is a format error."""
        _respond_with(monkeypatch, openrouter_client, _completion(None))
        result = await openrouter_client.complete(HISTORY, CONTEXT)

        assert result.error == CompletionErrorKind.MALFORMED_RESPONSE
        assert result.message == "Invalid response format"

    @pytest.mark.asyncio
    async def test_embedded_error_message(self, monkeypatch, openrouter_client):
        """Test that an error object in a 200 response is surfaced."""
        completion = _completion(None, error={"message": "Model is overloaded"})
        _respond_with(monkeypatch, openrouter_client, completion)
        result = await openrouter_client.complete(HISTORY, CONTEXT)

        assert result.error == CompletionErrorKind.OTHER
        assert result.message == "Model is overloaded"

    @pytest.mark.asyncio
    async def test_close(self, openrouter_client):
        """Test that close releases the SDK client."""
        await openrouter_client.close()
        assert openrouter_client._client.is_closed()


class TestFactory:
    """Tests for create_completion_client."""

    def test_openrouter_preset(self):
        """Test the default OpenRouter endpoint."""
        client = create_completion_client("openrouter", api_key="k")

        assert isinstance(client, OpenAICompatibleClient)
        assert str(client._client.base_url).rstrip("/") == OPENROUTER_BASE_URL

    def test_deepseek_preset(self):
        """Test the DeepSeek endpoint and default model."""
        client = create_completion_client("DeepSeek", api_key="k")

        assert client.model == "deepseek-chat"
        assert str(client._client.base_url).rstrip("/") == DEEPSEEK_BASE_URL

    def test_base_url_override(self):
        """Test that an explicit base_url beats the preset."""
        client = create_completion_client("openrouter", api_key="k", base_url="http://localhost:8080/v1")

        assert str(client._client.base_url).rstrip("/") == "http://localhost:8080/v1"

    def test_unknown_provider(self):
        """Test that unsupported providers raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_completion_client("carrier-pigeon")


@pytest.mark.integration
class TestOpenRouterIntegration:
    """Live request against OpenRouter; skipped without a key."""

    @pytest.mark.asyncio
    async def test_round_trip(self, api_keys):
        """Test one real completion."""
        if not api_keys["openrouter"]:
            pytest.skip("OPENROUTER_API_KEY not set")

        async with OpenAICompatibleClient(api_key=api_keys["openrouter"]) as client:
            result = await client.complete(
                [ChatMessage(role="user", content="Reply with the word pong")],
                RequestContext(model="google/gemini-2.0-flash-001", max_tokens=10),
            )

        assert result.is_ok, result.message
