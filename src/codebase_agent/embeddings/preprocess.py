"""Text preparation applied to chunks before embedding."""

import re

from ..models.chunk import Chunk

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def prepare_chunk_text(chunk: Chunk) -> str:
    """Build the embedding input for a chunk.

    A short metadata header (path, type, optional description) precedes the
    normalized body so the embedding model sees where the text came from.
    Queries are embedded as-is and never go through this function.
    """
    parts = [
        f"File: {chunk.file_path}",
        f"Type: {chunk.type.value}",
    ]
    if chunk.description:
        parts.append(f"Description: {chunk.description}")
    parts.append(f"Content: {normalize_whitespace(chunk.content)}")
    return "\n".join(parts)
