"""Tests for context assembly and prompt construction."""

from codebase_agent.core.context import (
    NO_CONTEXT_SENTINEL,
    assemble_context,
    build_prompt,
    render_history,
    truncate_content,
)
from codebase_agent.models.query import RankedChunk
from codebase_agent.models.session import Interaction


def _ranked(content="print('hi')", **fields):
    defaults = {
        "id": "1",
        "score": 0.9,
        "adjusted_score": 0.9,
        "content": content,
        "file_path": "src/app.py",
        "file_name": "app.py",
        "chunk_type": "function",
    }
    defaults.update(fields)
    return RankedChunk(**defaults)


class TestTruncation:
    def test_content_at_limit_is_untouched(self):
        content = "a" * 1000
        assert truncate_content(content, 1000) == content

    def test_content_over_limit_is_cut_and_marked(self):
        truncated = truncate_content("a" * 1001, 1000)

        assert truncated == "a" * 1000 + "..."
        assert len(truncated) == 1003


class TestAssembleContext:
    def test_no_chunks_gives_sentinel(self):
        assert assemble_context([]) == NO_CONTEXT_SENTINEL

    def test_chunk_rendering(self):
        chunk = _ranked(function_name="main", class_name=None)

        context = assemble_context([chunk])

        assert context == (
            "## Relevant Codebase Information:\n\n"
            "### 1. app.py (function)\n"
            "**File Path:** src/app.py\n"
            "**Function:** main\n"
            "**Content:**\n```\nprint('hi')\n```\n\n"
        )

    def test_chunks_are_numbered_in_order(self):
        chunks = [
            _ranked(id="1", file_name="a.py", file_path="a.py"),
            _ranked(id="2", file_name="b.py", file_path="b.py", chunk_type="class", class_name="Handler"),
        ]

        context = assemble_context(chunks)

        assert context.index("### 1. a.py (function)") < context.index("### 2. b.py (class)")
        assert "**Class:** Handler" in context
        assert "**Function:**" not in context

    def test_long_chunk_is_truncated_in_context(self):
        context = assemble_context([_ranked(content="x" * 1001)], max_chunk_chars=1000)

        assert "x" * 1000 + "...\n```" in context
        assert "x" * 1001 not in context


class TestPrompt:
    def test_history_rendering(self):
        history = [Interaction(query="What is this?", response="A CLI.")]

        assert render_history(history) == "user: What is this?\nassistant: A CLI."

    def test_prompt_sections(self):
        history = [Interaction(query="first question", response="first answer")]

        prompt = build_prompt("How do I run it?", "CONTEXT BLOCK", history)

        assert "## Codebase Context:\nCONTEXT BLOCK" in prompt
        assert "## Conversation History:\nuser: first question" in prompt
        assert "## Current Question:\nHow do I run it?" in prompt
        assert prompt.index("## Codebase Context") < prompt.index("## Current Question")
        assert prompt.endswith("Please answer the question:")

    def test_prompt_without_history_omits_section(self):
        prompt = build_prompt("Q?", NO_CONTEXT_SENTINEL)

        assert "## Conversation History" not in prompt
        assert NO_CONTEXT_SENTINEL in prompt
