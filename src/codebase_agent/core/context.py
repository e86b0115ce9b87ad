"""Render ranked chunks and conversation history into generator input."""

from typing import List, Sequence

from ..config.settings import DEFAULT_MAX_CHUNK_CHARS
from ..models.query import RankedChunk
from ..models.session import Interaction

NO_CONTEXT_SENTINEL = "No specific codebase context found for this query."
TRUNCATION_MARKER = "..."

SYSTEM_PROMPT = (
    "You are an AI assistant specialized in helping developers understand codebases. "
    "You have access to relevant code snippets and documentation from the repository."
)

ANSWER_INSTRUCTIONS = (
    "1. Provide a clear, helpful answer based on the codebase context",
    "2. Include specific file paths and code examples when relevant",
    "3. If you reference code, explain what it does and how it works",
    "4. For setup questions, provide step-by-step instructions",
    "5. If the context doesn't contain enough information, say so and suggest where to look",
    "6. Keep explanations developer-friendly and actionable",
)


def truncate_content(content: str, max_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> str:
    """Cut content at ``max_chars`` characters, marking the cut.

    Truncation is by character count and may split a line.
    """
    if len(content) > max_chars:
        return content[:max_chars] + TRUNCATION_MARKER
    return content


def assemble_context(chunks: Sequence[RankedChunk], max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> str:
    """Render ranked chunks as a markdown context block.

    Args:
        chunks: Ranked chunks, best first
        max_chunk_chars: Per-chunk content limit

    Returns:
        Context text, or NO_CONTEXT_SENTINEL when there are no chunks
    """
    if not chunks:
        return NO_CONTEXT_SENTINEL

    context = "## Relevant Codebase Information:\n\n"
    for i, chunk in enumerate(chunks, start=1):
        context += f"### {i}. {chunk.file_name} ({chunk.chunk_type})\n"
        context += f"**File Path:** {chunk.file_path}\n"
        if chunk.function_name:
            context += f"**Function:** {chunk.function_name}\n"
        if chunk.class_name:
            context += f"**Class:** {chunk.class_name}\n"
        context += f"**Content:**\n```\n{truncate_content(chunk.content, max_chunk_chars)}\n```\n\n"
    return context


def render_history(history: Sequence[Interaction]) -> str:
    """Render prior interactions as ``role: content`` lines."""
    lines: List[str] = []
    for interaction in history:
        lines.append(f"user: {interaction.query}")
        lines.append(f"assistant: {interaction.response}")
    return "\n".join(lines)


def build_prompt(question: str, context: str, history: Sequence[Interaction] = ()) -> str:
    """Compose the generator prompt from context, history and the question."""
    sections = [
        SYSTEM_PROMPT,
        f"## Codebase Context:\n{context}",
    ]
    if history:
        sections.append(f"## Conversation History:\n{render_history(history)}")
    sections.append(f"## Current Question:\n{question}")
    sections.append("## Instructions:\n" + "\n".join(ANSWER_INSTRUCTIONS))
    sections.append("Please answer the question:")
    return "\n\n".join(sections)
