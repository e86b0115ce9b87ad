"""Question answering over indexed repositories."""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from codebase_agent.config.settings import (
    DEFAULT_MAX_CHUNK_CHARS,
)
from codebase_agent.core.context import assemble_context, build_prompt, NO_CONTEXT_SENTINEL
from codebase_agent.core.ranking import analyze_query_intent
from codebase_agent.core.searcher import Searcher
from codebase_agent.db.index.base import HybridIndex
from codebase_agent.db.store.base import StateStore
from codebase_agent.llm.base import LLMProvider, Message
from codebase_agent.models.query import QueryParams, SourceRef
from codebase_agent.models.session import Interaction
from codebase_agent.utils.progress import log_info, log_warning

GENERIC_QUESTIONS = (
    "How do I set up the development environment for this project?",
    "What is the overall architecture of this application?",
    "How does authentication work in this system?",
    "What are the main API endpoints and what do they do?",
    "How do I run tests for this project?",
    "What dependencies does this project use?",
    "How is the database configured?",
    "What is the deployment process?",
)

JAVASCRIPT_QUESTIONS = (
    "How do I install npm dependencies?",
    "What Node.js version is required?",
)

PYTHON_QUESTIONS = (
    "How do I set up a Python virtual environment?",
    "What Python packages are required?",
)

FALLBACK_QUESTIONS = (
    "How do I set up this project?",
    "What is the project structure?",
    "How do I run the application?",
)

JAVASCRIPT_FILE_TYPES = {"javascript", "typescript", "react", "react-typescript"}
MAX_SUGGESTIONS = 6


class RAGAnswer(BaseModel):
    """Answer to one question, with the chunks it was grounded on."""

    response: str
    session_id: str
    sources: List[SourceRef] = Field(default_factory=list)
    intent: str = "general"
    context_found: bool = False


class RAGService:
    """Retrieve, assemble, generate and record one interaction per question.

    Embedding, index and generation failures propagate to the caller; the
    session is only appended to after a successful generation.
    """

    def __init__(
        self,
        searcher: Searcher,
        llm: LLMProvider,
        store: StateStore,
        model: str,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        history_limit: int = 10,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
    ):
        self.searcher = searcher
        self.llm = llm
        self.store = store
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.history_limit = history_limit
        self.max_chunk_chars = max_chunk_chars

    def process_query(self, params: QueryParams) -> RAGAnswer:
        """Answer a validated question.

        Args:
            params: Query parameters; a new session id is generated when
                params.session_id is None

        Returns:
            RAGAnswer with the response text and its sources
        """
        session_id = params.session_id or str(uuid.uuid4())
        history = self.store.list_recent_interactions(session_id, self.history_limit)

        ranked = self.searcher.retrieve(params.query, repository=params.repository)
        context = assemble_context(ranked, self.max_chunk_chars)
        prompt = build_prompt(params.query, context, history)

        response = self.llm.generate(
            [Message(role="user", content=prompt)],
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        sources = [SourceRef.from_ranked(chunk) for chunk in ranked]
        self.store.append_interaction(
            session_id,
            Interaction(query=params.query, response=response.content, sources=sources),
        )
        log_info(
            f"Answered with {len(sources)} sources "
            f"({response.usage.input_tokens} in / {response.usage.output_tokens} out tokens)"
        )

        return RAGAnswer(
            response=response.content,
            session_id=session_id,
            sources=sources,
            intent=analyze_query_intent(params.query),
            context_found=context != NO_CONTEXT_SENTINEL,
        )

    def get_history(self, session_id: str, limit: Optional[int] = None) -> List[Interaction]:
        """Most recent interactions of a session, oldest first."""
        return self.store.list_recent_interactions(session_id, limit or self.history_limit)

    def clear_session(self, session_id: str) -> bool:
        return self.store.clear_session(session_id)


def suggested_questions(index: HybridIndex, repository: Optional[str] = None) -> List[str]:
    """Starter questions, tailored to the languages found in a repository.

    Language-specific questions come first so they survive the cut to
    MAX_SUGGESTIONS. Any failure reading stats yields a short generic list.
    """
    file_types: set[str] = set()
    if repository:
        try:
            file_types = index.aggregate_stats(repository).file_type_keys()
        except Exception as e:
            log_warning(f"Could not load stats for {repository}: {e}")
            return list(FALLBACK_QUESTIONS)

    questions: List[str] = []
    if file_types & JAVASCRIPT_FILE_TYPES:
        questions.extend(JAVASCRIPT_QUESTIONS)
    if "python" in file_types:
        questions.extend(PYTHON_QUESTIONS)
    questions.extend(GENERIC_QUESTIONS)
    return questions[:MAX_SUGGESTIONS]
