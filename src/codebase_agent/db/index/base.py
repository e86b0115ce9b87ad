"""Abstract base class for hybrid (lexical + vector) document indexes.

The index stores one document per chunk: the chunk's keyword fields, its
text, an opaque metadata object and the embedding vector. The vector is
write-only; it is never returned in search results.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field

from ...models.query import SearchFilters, SearchHit

# Relative weights of the two signals in a hybrid query
TEXT_BOOST = 1.0
VECTOR_BOOST = 2.0


class IndexOperationError(Exception):
    """Raised when the index backend rejects or fails an operation."""


class Bucket(BaseModel):
    """One term-aggregation bucket."""

    key: str
    doc_count: int


class RepositoryStats(BaseModel):
    """Aggregate counts for one repository's documents."""

    total_chunks: int = 0
    total_files: int = 0
    file_types: list[Bucket] = Field(default_factory=list)
    chunk_types: list[Bucket] = Field(default_factory=list)

    def file_type_keys(self) -> set[str]:
        return {bucket.key for bucket in self.file_types}


class HybridIndex(ABC):
    """Abstract base class for hybrid index operations."""

    @abstractmethod
    def initialize(self, dimension: int) -> None:
        """Create the index/collection if it does not exist. Idempotent.

        Args:
            dimension: Dimensionality of the embedding vectors
        """

    @abstractmethod
    def index(self, document: dict[str, Any]) -> str:
        """Store one document and return its generated id.

        Args:
            document: Document as produced by Chunk.to_document()
        """

    @abstractmethod
    def search_vector(
        self,
        vector: list[float],
        k: int,
        filters: Optional[SearchFilters] = None,
    ) -> list[SearchHit]:
        """Nearest-neighbour search on the embedding field only."""

    @abstractmethod
    def search_hybrid(
        self,
        text: str,
        vector: list[float],
        k: int,
        filters: Optional[SearchFilters] = None,
    ) -> list[SearchHit]:
        """Combined text-relevance and vector-similarity search.

        A document qualifies if it matches either signal. Its score is
        ``TEXT_BOOST * text_score + VECTOR_BOOST * vector_score``.

        Returns:
            Up to k hits, best first
        """

    @abstractmethod
    def aggregate_stats(self, repository: str) -> RepositoryStats:
        """Per-file-type and per-chunk-type counts plus distinct files."""

    @abstractmethod
    def delete_by_filter(self, repository: str) -> int:
        """Delete every document of a repository.

        Returns:
            Number of documents removed
        """

    @abstractmethod
    def count(self, filters: Optional[SearchFilters] = None) -> int:
        """Number of documents matching the filters (all if None)."""

    @abstractmethod
    def close(self) -> None:
        """Release client resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
