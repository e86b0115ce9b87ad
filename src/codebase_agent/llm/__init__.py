"""LLM abstraction layer for Codebase Agent."""

from codebase_agent.llm.base import (
    LLMError,
    LLMInvalidRequestError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    Message,
)
from codebase_agent.llm.factory import create_llm_provider

__all__ = [
    "LLMProvider",
    "Message",
    "LLMResponse",
    "LLMError",
    "LLMRateLimitError",
    "LLMInvalidRequestError",
    "create_llm_provider",
]
