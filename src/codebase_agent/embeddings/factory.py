from .base import Embedder
from ..config.settings import Settings


def create_embedder(settings: Settings) -> Embedder:
    """Create the Embedder selected by ``settings.embedding_provider``.

    "local" uses a sentence-transformers model; "bedrock" uses Titan
    through the Bedrock runtime with ``settings.embedding_model``.
    """
    provider = settings.embedding_provider

    if provider == "local":
        # Deferred so sentence-transformers is only imported when used
        from .local import LocalEmbedder
        return LocalEmbedder(
            model_id=settings.local_embedding_model,
            dimension=settings.local_embedding_dimension,
        )

    if provider == "bedrock":
        from .bedrock import BedrockEmbedder
        return BedrockEmbedder(
            model_id=settings.embedding_model,
            region_name=settings.aws_region,
            dimension=settings.bedrock_embedding_dimension,
            profile_name=settings.aws_profile,
        )

    raise ValueError(
        f"Unknown embedding provider: {provider}. "
        f"Expected one of: 'local', 'bedrock'."
    )
