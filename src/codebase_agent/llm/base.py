"""Abstract base class and dataclasses for answer generators."""

from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic.dataclasses import dataclass


@dataclass
class Message:
    """Single message sent to a generator.

    Attributes:
        role: "user" or "assistant"
        content: Message content text
    """
    role: str
    content: str


@dataclass
class UsageMetrics:
    """Token usage for one generation call."""
    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass
class LLMResponse:
    """Complete response from a generator.

    Attributes:
        content: Generated text content
        model: Model identifier used for generation
        stop_reason: Provider-reported reason generation stopped
        usage: Token usage metrics
    """
    content: str
    model: str
    stop_reason: str
    usage: UsageMetrics


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Provider-specific configuration (region, credentials, base URL) belongs in
    the constructor so callers stay provider-agnostic.
    """

    @abstractmethod
    def generate(
        self,
        messages: List[Message],
        model: str,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        system: Optional[str] = None,
        debug_category: str = "llm",
    ) -> LLMResponse:
        """Generate a complete response.

        Args:
            messages: Messages to send, oldest first
            model: Model identifier to use for generation
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            system: Optional system prompt
            debug_category: Category for debug logging

        Returns:
            LLMResponse containing generated content and metadata

        Raises:
            LLMError: On any provider failure
        """


class LLMError(Exception):
    """Base exception for LLM-related errors."""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded when calling LLM API."""
    pass


class LLMInvalidRequestError(LLMError):
    """Invalid request parameters for LLM API."""
    pass
