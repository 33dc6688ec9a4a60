import logging
from collections.abc import Sequence
from typing import Any

from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
)

from ...config import APP_TITLE, DEFAULT_MODEL
from ..base import CompletionClient
from ..models import ChatMessage, CompletionErrorKind, CompletionResult, RequestContext

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEEPSEEK_BASE_URL = "https://api.deepseek.com"

FALLBACK_ERROR_MESSAGE = "Failed to get response"


def _to_request_messages(
    history: Sequence[ChatMessage],
    system_prompt: str,
) -> list[dict[str, str]]:
    """Convert conversation history to the wire format.

    Only role and content are sent; ids and timestamps stay local.
    """
    messages = [{"role": msg.role, "content": msg.content} for msg in history]
    if system_prompt.strip():
        messages.insert(0, {"role": "system", "content": system_prompt})
    return messages


def _status_error_message(error: APIStatusError) -> str:
    """Pull the human-readable message out of an error response body.

    The SDK hands over either the whole body ({"error": {"message": ...}})
    or just the inner error object, depending on version.
    """
    body = error.body
    if isinstance(body, dict):
        inner = body.get("error")
        if isinstance(inner, dict) and isinstance(inner.get("message"), str):
            return inner["message"]
        if isinstance(body.get("message"), str):
            return body["message"]
    return FALLBACK_ERROR_MESSAGE


def _extract_content(completion: Any) -> str | None:
    """Read choices[0].message.content, or None when the path is absent."""
    choices = getattr(completion, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else None


def _embedded_error(completion: Any) -> str | None:
    """Some gateways answer 200 with an error object instead of choices."""
    extra = getattr(completion, "model_extra", None) or {}
    error = extra.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


class OpenAICompatibleClient(CompletionClient):
    """Completion client for OpenAI-compatible chat endpoints.

    Hidden design decisions:
    - API client initialization (via OpenAI SDK)
    - Attribution headers for OpenRouter
    - Mapping SDK exceptions to CompletionErrorKind
    - Credential check before any network call
    """

    def __init__(
        self,
        api_key: str | None,
        model: str = DEFAULT_MODEL,
        base_url: str | None = OPENROUTER_BASE_URL,
        app_title: str = APP_TITLE,
        referer: str | None = None,
        timeout: float = 60.0,
        **client_kwargs: Any
    ):
        """Initialize the client.

        Args:
            api_key: API credential; None or empty disables requests
            model: Default model when the request context does not name one
            base_url: API base URL (default: OpenRouter)
            app_title: Sent as X-Title for OpenRouter attribution
            referer: Sent as HTTP-Referer when given
            timeout: Request timeout in seconds
            **client_kwargs: Additional kwargs for AsyncOpenAI client
        """
        self._model = model
        self._base_url = base_url
        self._client: AsyncOpenAI | None = None

        if api_key:
            headers = {"X-Title": app_title}
            if referer:
                headers["HTTP-Referer"] = referer
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout,
                max_retries=0,
                default_headers=headers,
                **client_kwargs
            )

    @property
    def model(self) -> str:
        """Get the default model name."""
        return self._model

    @property
    def has_credential(self) -> bool:
        return self._client is not None

    async def complete(
        self,
        history: Sequence[ChatMessage],
        context: RequestContext,
    ) -> CompletionResult:
        """Send the conversation and return the assistant text or a failure.

        Args:
            history: Conversation including the new user turn
            context: Model, sampling settings and system prompt

        Returns:
            CompletionResult; never raises for API or transport failures
        """
        if self._client is None:
            logger.warning("Completion requested without a configured API key")
            return CompletionResult.err(CompletionErrorKind.MISSING_CREDENTIAL)

        model_to_use = context.model or self._model
        messages = _to_request_messages(history, context.system_prompt)
        logger.info("Requesting completion from %s with %d messages", model_to_use, len(messages))

        try:
            completion = await self._client.chat.completions.create(
                model=model_to_use,
                messages=messages,
                temperature=context.temperature,
                max_tokens=context.max_tokens,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            logger.warning("Completion rejected: %s", e)
            return CompletionResult.err(CompletionErrorKind.UNAUTHORIZED, _status_error_message(e))
        except RateLimitError as e:
            logger.warning("Completion rate limited: %s", e)
            return CompletionResult.err(CompletionErrorKind.RATE_LIMITED, _status_error_message(e))
        except APIStatusError as e:
            logger.warning("Completion failed with status %s", e.status_code)
            return CompletionResult.err(CompletionErrorKind.OTHER, _status_error_message(e))
        except APIConnectionError as e:
            logger.warning("Completion transport failure: %s", e)
            return CompletionResult.err(CompletionErrorKind.NETWORK)
        except APIResponseValidationError as e:
            logger.warning("Completion response failed validation: %s", e)
            return CompletionResult.err(CompletionErrorKind.MALFORMED_RESPONSE)

        content = _extract_content(completion)
        if content is None:
            embedded = _embedded_error(completion)
            if embedded is not None:
                return CompletionResult.err(CompletionErrorKind.OTHER, embedded)
            return CompletionResult.err(CompletionErrorKind.MALFORMED_RESPONSE)

        return CompletionResult.ok(content)

    async def close(self) -> None:
        """Close the underlying HTTP client.

        Note: Uses the OpenAI SDK's async close for proper cleanup.
        See: https://github.com/openai/openai-python#async-usage
        """
        if self._client is not None:
            await self._client.close()
