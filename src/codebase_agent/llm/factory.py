"""LLM provider factory."""

from .base import LLMProvider
from ..config.settings import Settings

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def create_llm_provider(settings: Settings) -> LLMProvider:
    """Create an LLM provider from settings.

    Providers:
    - "bedrock": AWS Bedrock Converse API (default)
    - "openai": OpenAI API
    - "openrouter": OpenRouter API
    - "ollama": Ollama server

    Raises:
        ValueError: If the provider is unknown or its configuration is missing
    """
    provider = settings.llm_provider

    if provider == "bedrock":
        from .bedrock import BedrockLLM
        return BedrockLLM(
            region_name=settings.bedrock_region,
            profile_name=settings.aws_profile,
        )

    from .openai_compatible import OpenAICompatibleLLM

    if provider == "openai":
        if not settings.openai_api_key:
            raise ValueError(
                "OpenAI provider requires OPENAI_API_KEY environment variable to be set.\n"
                "  export OPENAI_API_KEY=your-key-here"
            )
        return OpenAICompatibleLLM(
            api_key=settings.openai_api_key,
            base_url=settings.base_url_override,
        )

    if provider == "openrouter":
        if not settings.openrouter_api_key:
            raise ValueError(
                "OpenRouter provider requires OPENROUTER_API_KEY environment variable to be set.\n"
                "  export OPENROUTER_API_KEY=your-key-here"
            )
        return OpenAICompatibleLLM(
            api_key=settings.openrouter_api_key,
            base_url=settings.base_url_override or OPENROUTER_BASE_URL,
        )

    if provider == "ollama":
        # Ollama ignores the key but the client requires one
        return OpenAICompatibleLLM(
            api_key="ollama",
            base_url=settings.base_url_override or settings.ollama_base_url,
        )

    raise ValueError(
        f"Unknown LLM provider: {provider}\n"
        "Valid providers: bedrock, openai, openrouter, ollama"
    )
