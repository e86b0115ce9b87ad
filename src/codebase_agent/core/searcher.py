"""
Retrieval Module

Embeds a question, runs a hybrid query against the index and re-ranks the
candidates by query intent.
"""

from typing import List, Optional

from codebase_agent.config.settings import (
    DEFAULT_CANDIDATE_COUNT,
    DEFAULT_MAX_CONTEXT_CHUNKS,
    DEFAULT_RELEVANCE_FLOOR,
)
from codebase_agent.core.ranking import filter_and_rank
from codebase_agent.db.index.base import HybridIndex
from codebase_agent.embeddings.base import Embedder
from codebase_agent.models.query import QueryParams, RankedChunk, SearchFilters, SearchHit
from codebase_agent.utils.progress import log_info


class Searcher:
    """
    Retrieval engine over a hybrid index.

    Responsibilities:
    - Generate query embeddings (raw query text, no preprocessing)
    - Issue hybrid queries, optionally restricted to one repository
    - Apply intent boosts, the relevance floor and the context cap
    """

    def __init__(
        self,
        embedder: Embedder,
        index: HybridIndex,
        candidate_count: int = DEFAULT_CANDIDATE_COUNT,
        max_results: int = DEFAULT_MAX_CONTEXT_CHUNKS,
        relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
    ):
        """
        Initialize the retrieval engine.

        Args:
            embedder: Embedding provider for query encoding
            index: Hybrid index to query
            candidate_count: Candidates fetched from the index per question
            max_results: Maximum ranked chunks returned by retrieve()
            relevance_floor: Exclusive lower bound on adjusted scores
        """
        self.embedder = embedder
        self.index = index
        self.candidate_count = candidate_count
        self.max_results = max_results
        self.relevance_floor = relevance_floor

    def retrieve(
        self,
        query_text: str,
        query_vector: Optional[List[float]] = None,
        repository: Optional[str] = None,
    ) -> List[RankedChunk]:
        """
        Retrieve the context chunks for a question.

        Args:
            query_text: User question
            query_vector: Precomputed query embedding (computed if None)
            repository: Optional repository to restrict the search to

        Returns:
            Up to max_results ranked chunks, best first. Empty when no
            candidate clears the relevance floor.
        """
        if query_vector is None:
            query_vector = self.embedder.embed(query_text)

        hits = self.index.search_hybrid(
            query_text,
            query_vector,
            self.candidate_count,
            SearchFilters(repository=repository),
        )
        ranked = filter_and_rank(
            hits,
            query_text,
            relevance_floor=self.relevance_floor,
            limit=self.max_results,
        )
        log_info(f"Retrieved {len(ranked)} of {len(hits)} candidates for: {query_text[:50]}")
        return ranked

    def search(self, params: QueryParams, file_type: Optional[str] = None) -> List[SearchHit]:
        """
        Ad-hoc hybrid search without intent re-ranking.

        Args:
            params: Validated query parameters (query, repository, limit)
            file_type: Optional file type filter (e.g. "python")

        Returns:
            Up to params.limit raw hits, best first
        """
        query_vector = self.embedder.embed(params.query)
        hits = self.index.search_hybrid(
            params.query,
            query_vector,
            params.limit,
            SearchFilters(repository=params.repository, file_type=file_type),
        )
        log_info(f"Search found {len(hits)} results")
        return hits
