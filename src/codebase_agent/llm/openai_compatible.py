"""OpenAI-compatible LLM provider implementation."""

from typing import Dict, List, Optional

from openai import OpenAI, APIError, RateLimitError, APIConnectionError, AuthenticationError, BadRequestError

from .base import (
    LLMProvider,
    Message,
    LLMResponse,
    UsageMetrics,
    LLMError,
    LLMRateLimitError,
    LLMInvalidRequestError,
)
from ..utils.debug import DebugLogger


class OpenAICompatibleLLM(LLMProvider):
    """Chat-completions provider for OpenAI, OpenRouter, Ollama and other
    servers that follow the OpenAI API format.
    """

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: int = 3,
    ):
        """Initialize OpenAI-compatible client.

        Args:
            api_key: API key for authentication
            base_url: Custom base URL (defaults to OpenAI's standard URL)
            timeout: Request timeout in seconds
            max_retries: Retry attempts made by the client itself (default: 3)
        """
        client_kwargs = {
            "api_key": api_key,
            "max_retries": max_retries,
        }
        if base_url:
            client_kwargs["base_url"] = base_url
        if timeout:
            client_kwargs["timeout"] = timeout

        self.client = OpenAI(**client_kwargs)

    @staticmethod
    def _to_openai_format(messages: List[Message]) -> List[Dict[str, str]]:
        return [{"role": msg.role, "content": msg.content} for msg in messages]

    def _handle_error(self, error: Exception) -> LLMError:
        """Map OpenAI exceptions to LLMError types."""
        if isinstance(error, RateLimitError):
            return LLMRateLimitError(f"Rate limit exceeded: {error}")
        if isinstance(error, (AuthenticationError, BadRequestError)):
            return LLMInvalidRequestError(f"Invalid request: {error}")
        if isinstance(error, APIConnectionError):
            return LLMError(f"Connection error: {error}")
        return LLMError(f"API error: {error}")

    def generate(
        self,
        messages: List[Message],
        model: str,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        system: Optional[str] = None,
        debug_category: str = "llm",
    ) -> LLMResponse:
        formatted_messages = self._to_openai_format(messages)
        if system:
            formatted_messages.insert(0, {"role": "system", "content": system})

        request = {
            "model": model,
            "messages": formatted_messages,
            "max_completion_tokens": max_tokens,
            "temperature": temperature,
        }

        request_id = None
        if DebugLogger.is_enabled():
            request_id = DebugLogger.log_request("chat_completions", request, category=debug_category)

        try:
            response = self.client.chat.completions.create(**request)
        except APIError as e:
            raise self._handle_error(e) from e

        if DebugLogger.is_enabled():
            DebugLogger.log_response("chat_completions", response.model_dump(), request_id, category=debug_category)

        choice = response.choices[0]
        content = choice.message.content or ""
        if not content:
            if choice.finish_reason == "length":
                raise LLMError(
                    f"Model {model} hit token limit before generating output - try a smaller context."
                )
            raise LLMError(f"Received empty response from model {model} (finish_reason: {choice.finish_reason})")

        usage = response.usage
        return LLMResponse(
            content=content,
            model=response.model,
            stop_reason=choice.finish_reason or "stop",
            usage=UsageMetrics(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
        )
