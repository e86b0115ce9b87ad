"""Configuration management for Codebase Agent."""

from pathlib import Path
from typing import Optional

from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


# Model identifiers
DEFAULT_EMBEDDING_MODEL_ID = "amazon.titan-embed-text-v1"

# Provider-specific model defaults
PROVIDER_MODEL_DEFAULTS = {
    "bedrock": "anthropic.claude-3-sonnet-20240229-v1:0",
    "openai": "gpt-4o-mini",
    "openrouter": "meta-llama/llama-3.3-70b-instruct:free",
    "ollama": "qwen2.5-coder:7b",
}

# Embedding model characteristics - Bedrock Titan
TITAN_EMBEDDING_DIMENSION = 1536  # Titan text v1 vector dimension

# Embedding model characteristics - Local Jina Code
JINA_CODE_MODEL_ID = "jinaai/jina-code-embeddings-0.5b"
JINA_CODE_DIMENSION = 512  # Matryoshka truncation from 896

# Retrieval characteristics
DEFAULT_CANDIDATE_COUNT = 15  # Hybrid candidates fetched per query
DEFAULT_MAX_CONTEXT_CHUNKS = 8  # Ranked chunks handed to the generator
DEFAULT_RELEVANCE_FLOOR = 0.3  # Exclusive lower bound on adjusted score
DEFAULT_MAX_CHUNK_CHARS = 1000  # Per-chunk content limit in assembled context
MAX_QUERY_LENGTH = 1000  # Characters accepted for a single question

# Ingestion characteristics
DEFAULT_INGEST_BATCH_SIZE = 10


class Settings(BaseSettings):
    """Application settings.

    Values come from keyword arguments, then environment variables, then a
    local ``.env`` file. Environment names follow the field names
    (case-insensitive), e.g. ``OPENSEARCH_ENDPOINT`` or ``AWS_REGION``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )

    # Storage base directory
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".codebase-agent")

    # AWS settings
    aws_region: str = "us-east-1"
    aws_profile: Optional[str] = None

    # Provider settings
    embedding_provider: str = "local"  # "local" or "bedrock"
    index_provider: str = "chroma"  # "chroma" or "opensearch"
    llm_provider: str = "bedrock"  # "bedrock", "openai", "openrouter", "ollama"
    base_url_override: Optional[str] = None  # Override base URL for OpenAI-compatible providers

    # OpenSearch settings
    opensearch_endpoint: Optional[str] = None
    opensearch_index: str = "codebase-knowledge"
    opensearch_username: str = "admin"
    opensearch_password: str = "admin"
    opensearch_verify_certs: bool = True

    # OpenAI-compatible API keys
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key")
    )
    openrouter_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "openrouter_api_key")
    )

    # OpenAI-compatible endpoints
    ollama_base_url: str = "http://127.0.0.1:11434/v1"

    # Generation settings
    model_override: Optional[str] = None
    max_tokens: int = 4000
    temperature: float = 0.1

    @property
    def bedrock_region(self) -> str:
        """Get Bedrock region (uses aws_region)."""
        return self.aws_region

    @property
    def generation_model(self) -> str:
        """Get the generation model for the current provider.

        Returns the CLI override if set, otherwise the provider default.

        Raises:
            ValueError: If no LLM provider is configured
            KeyError: If provider is not recognized
        """
        if self.model_override:
            return self.model_override

        if not self.llm_provider:
            raise ValueError("No LLM provider configured. Use --llm-provider.")

        if self.llm_provider not in PROVIDER_MODEL_DEFAULTS:
            raise KeyError(f"Unknown provider: {self.llm_provider}")

        return PROVIDER_MODEL_DEFAULTS[self.llm_provider]

    # Embedding settings
    embedding_model: str = DEFAULT_EMBEDDING_MODEL_ID
    bedrock_embedding_dimension: int = TITAN_EMBEDDING_DIMENSION
    local_embedding_model: str = JINA_CODE_MODEL_ID
    local_embedding_dimension: int = JINA_CODE_DIMENSION

    @property
    def embedding_dimension(self) -> int:
        """Vector dimension for the configured embedding provider."""
        if self.embedding_provider == "bedrock":
            return self.bedrock_embedding_dimension
        return self.local_embedding_dimension

    # Ingestion
    ingest_batch_size: int = Field(default=DEFAULT_INGEST_BATCH_SIZE, ge=1, le=50)
    max_concurrent_jobs: int = Field(default=2, ge=1)

    # Retrieval and context limits
    candidate_count: int = DEFAULT_CANDIDATE_COUNT
    max_context_chunks: int = DEFAULT_MAX_CONTEXT_CHUNKS
    relevance_floor: float = DEFAULT_RELEVANCE_FLOOR
    max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS
    history_limit: int = 10

    # Debug settings
    debug: bool = False

    @property
    def debug_log_dir(self) -> Path:
        """Get the debug log directory."""
        return self.data_dir / "logs"
