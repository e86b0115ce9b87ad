from typing import List, Optional

from .base import Embedder, EmbeddingError
from ..utils.debug import DebugLogger
from ..utils.progress import console
from ..utils.symbols import SYMBOLS

sentence_transformers_import = None


class LocalEmbedder(Embedder):
    """Local embeddings using a sentence-transformers model.

    The default model is a code embedding model with Matryoshka
    representations, so vectors are truncated to the configured dimension.
    """

    def __init__(self, model_id: str, dimension: int = 512, device: Optional[str] = None):
        """Load the model.

        Args:
            model_id: Hugging Face model identifier
            dimension: Target dimension for Matryoshka truncation
            device: Torch device string; sentence-transformers picks one if None
        """
        self.model_id = model_id
        self._dimension = dimension

        # Heavy import, deferred until a local embedder is actually requested
        global sentence_transformers_import
        if sentence_transformers_import is None:
            sentence_transformers_import = __import__("sentence_transformers")

        self.model = sentence_transformers_import.SentenceTransformer(
            model_id,
            trust_remote_code=True,
            device=device,
            truncate_dim=dimension,
        )
        console.print(f"{SYMBOLS['info']} Local embeddings using {self.model.device}")

    def embed(self, text: str) -> List[float]:
        """Generate embedding vector for text.

        Args:
            text: Input text to embed

        Returns:
            Embedding vector as list of floats
        """
        request_id = None
        if DebugLogger.is_enabled():
            request_id = DebugLogger.log_request(
                "encode",
                {"model_id": self.model_id, "dimension": self._dimension, "text_length": len(text)},
                category="embedding",
            )

        try:
            vectors = self.model.encode(
                [text],
                batch_size=1,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except (RuntimeError, ValueError) as e:
            raise EmbeddingError(f"Local embedding failed: {e}") from e
        embedding = vectors[0][:self._dimension].tolist()

        if DebugLogger.is_enabled():
            DebugLogger.log_response(
                "encode",
                {"embedding_dimension": len(embedding), "model_id": self.model_id},
                request_id,
                category="embedding",
            )

        return embedding

    @property
    def dimension(self) -> int:
        """Embedding vector dimension."""
        return self._dimension
