"""Query parameter and search result models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.settings import MAX_QUERY_LENGTH


class QueryParams(BaseModel):
    """Parameters for asking a question or searching a codebase.

    Attributes:
        query: Natural-language question or search text
        repository: Optional repository name to restrict the search to
        session_id: Optional conversation session identifier
        limit: Maximum hits for ad-hoc search (1-100)
    """

    query: str = Field(..., description="User's question")
    repository: Optional[str] = Field(
        None, description="Restrict retrieval to this repository"
    )
    session_id: Optional[str] = Field(
        None, description="Conversation session identifier"
    )
    limit: int = Field(
        default=10, ge=1, le=100, description="Max hits for ad-hoc search"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "How do I set up this project?",
                "repository": "my-service",
                "session_id": "5b0c3f3e-2a39-4d3f-a0a4-2b1f1c7e6d11",
            }
        }
    )

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate that the query is non-empty and not oversized.

        Args:
            v: Query to validate

        Returns:
            Stripped query string

        Raises:
            ValueError: If query is empty or longer than MAX_QUERY_LENGTH
        """
        if not v or len(v.strip()) == 0:
            raise ValueError("Query is required and must be a non-empty string")
        if len(v) > MAX_QUERY_LENGTH:
            raise ValueError(
                f"Query is too long. Maximum {MAX_QUERY_LENGTH} characters allowed."
            )
        return v.strip()


class SearchFilters(BaseModel):
    """Exact-match filters applied as a conjunction over keyword fields."""

    repository: Optional[str] = None
    file_type: Optional[str] = None

    def as_terms(self) -> Dict[str, str]:
        """Return the active filters keyed by index field name."""
        terms: Dict[str, str] = {}
        if self.repository:
            terms["repository"] = self.repository
        if self.file_type:
            terms["fileType"] = self.file_type
        return terms


class SearchHit(BaseModel):
    """A document returned by the hybrid index.

    The embedding vector is write-only and never appears on a hit.

    Attributes:
        id: Server-assigned document identifier
        score: Raw relevance score reported by the index
        content: Chunk text
        chunk_type: Chunk type value (see ChunkType)
    """

    id: str
    score: float = Field(..., ge=0.0)
    content: str = ""
    file_path: str = ""
    file_name: str = ""
    file_type: str = "unknown"
    chunk_type: str = ""
    repository: str = ""
    branch: str = "main"
    start_line: Optional[int] = None
    end_line: Optional[int] = None
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    description: Optional[str] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_source(cls, doc_id: str, score: float, source: Dict[str, Any]) -> "SearchHit":
        """Build a hit from an index document body.

        Args:
            doc_id: Document identifier
            score: Raw score from the index
            source: Stored document fields (camelCase, as written by Chunk.to_document)

        Returns:
            SearchHit instance
        """
        metadata = source.get("metadata") or {}
        return cls(
            id=doc_id,
            score=max(0.0, float(score or 0.0)),
            content=source.get("content") or "",
            file_path=source.get("filePath") or "",
            file_name=source.get("fileName") or "",
            file_type=source.get("fileType") or "unknown",
            chunk_type=source.get("chunkType") or "",
            repository=source.get("repository") or "",
            branch=source.get("branch") or "main",
            start_line=metadata.get("startLine"),
            end_line=metadata.get("endLine"),
            function_name=metadata.get("functionName"),
            class_name=metadata.get("className"),
            description=metadata.get("description"),
            timestamp=source.get("timestamp"),
        )


class RankedChunk(SearchHit):
    """A search hit after intent re-ranking.

    Attributes:
        adjusted_score: Raw score after multiplicative intent boosts
        rank_index: Position of the hit in the original candidate list
    """

    adjusted_score: float
    rank_index: int = 0


class SourceRef(BaseModel):
    """Reference to a chunk that contributed to an answer."""

    file_path: str
    file_name: str
    chunk_type: Optional[str] = None
    score: float

    @classmethod
    def from_ranked(cls, chunk: RankedChunk) -> "SourceRef":
        return cls(
            file_path=chunk.file_path,
            file_name=chunk.file_name,
            chunk_type=chunk.chunk_type,
            score=chunk.score,
        )
