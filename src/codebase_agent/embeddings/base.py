from abc import ABC, abstractmethod
from typing import List


class EmbeddingError(Exception):
    """Raised when an embedding provider fails to produce a vector."""


class Embedder(ABC):
    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """Generate embedding vector for text"""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Embedding vector dimension"""
