"""Chunk data model representing a typed unit of extracted file content."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ChunkType(str, Enum):
    """Kinds of chunk produced by the extractor."""

    FILE_OVERVIEW = "file_overview"
    FUNCTION = "function"
    CLASS = "class"
    ROUTE = "route"
    DOCUMENTATION = "documentation"
    CONFIGURATION = "configuration"


@dataclass(frozen=True)
class Chunk:
    """A contiguous unit of extracted content with location tracking.

    Chunks are created in memory during a single ingestion pass and are never
    modified afterwards. Each one belongs to exactly one file of exactly one
    repository.

    Attributes:
        type: Kind of chunk (overview, function, class, ...)
        content: Raw text of the chunk (never empty)
        file_path: Path of the file relative to the repository root
        file_name: Base name of the file
        file_type: Language/category tag derived from the extension
        repository: Repository name the chunk was ingested under
        branch: Branch the repository was ingested from
        start_line: First line in the original file (1-based)
        end_line: Last line in the original file (1-based, inclusive)
        function_name: Extracted function or method name, if any
        class_name: Extracted class or interface name (class chunks only)
        description: Short human-readable description, if any
    """

    type: ChunkType
    content: str
    file_path: str
    file_name: str
    file_type: str
    repository: str
    branch: str
    start_line: int
    end_line: int
    function_name: Optional[str] = None
    class_name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if not self.content or not self.content.strip():
            raise ValueError(f"Chunk content cannot be empty ({self.file_path})")
        if self.start_line < 1 or self.end_line < self.start_line:
            raise ValueError(
                f"Invalid line range {self.start_line}-{self.end_line} for {self.file_path}"
            )

    def to_document(self, embedding: list[float]) -> dict[str, Any]:
        """Render the index document for this chunk.

        Keyword fields are top-level so they can be filtered and aggregated;
        line ranges and names live in the opaque ``metadata`` object.

        Args:
            embedding: Embedding vector for the chunk

        Returns:
            Document dictionary ready for HybridIndex.index()
        """
        return {
            "content": self.content,
            "embedding": embedding,
            "filePath": self.file_path,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "chunkType": self.type.value,
            "repository": self.repository,
            "branch": self.branch or "main",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "metadata": {
                "startLine": self.start_line,
                "endLine": self.end_line,
                "functionName": self.function_name,
                "className": self.class_name,
                "description": self.description,
            },
        }
