"""Core operations for the Codebase Agent API.

Every operation takes a ServiceContext so callers decide which components
(and which configuration) back it:
- ingest_repository / get_job_status: background ingestion
- ask_question: retrieval-augmented answer with session history
- search_codebase: ad-hoc hybrid search
- get_repository_stats / list_repositories / delete_repository
- get_history / clear_session
- get_suggested_questions
- extract_repository: dry-run extraction without touching the index
"""

from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from codebase_agent.core.extractor import ChunkExtractor, ExtractionResult
from codebase_agent.core.rag import RAGAnswer, suggested_questions
from codebase_agent.db.index.base import RepositoryStats
from codebase_agent.models.job import IngestionJob, IngestionRequest, RepositoryRecord
from codebase_agent.models.query import QueryParams, SearchHit
from codebase_agent.models.session import Interaction

from .context import ServiceContext
from .exceptions import (
    InvalidRequestError,
    JobNotFoundError,
    RepositoryNotFoundError,
    SessionNotFoundError,
)


def _validation_message(error: ValidationError) -> str:
    # pydantic prefixes custom ValueError messages with "Value error, "
    first = error.errors()[0]
    return first["msg"].removeprefix("Value error, ")


def build_ingestion_request(
    repository_name: str,
    repository_url: Optional[str] = None,
    local_path: Optional[Path] = None,
    branch: str = "main",
    ignore_patterns: Optional[List[str]] = None,
) -> IngestionRequest:
    """Validate ingestion parameters.

    Raises:
        InvalidRequestError: If the name is missing or the source is missing/ambiguous
    """
    try:
        return IngestionRequest(
            repository_name=repository_name or "",
            repository_url=repository_url,
            local_path=local_path,
            branch=branch or "main",
            ignore_patterns=ignore_patterns or [],
        )
    except ValidationError as e:
        raise InvalidRequestError(_validation_message(e), e.errors()) from e


def build_query_params(
    query: str,
    repository: Optional[str] = None,
    session_id: Optional[str] = None,
    limit: int = 10,
) -> QueryParams:
    """Validate query parameters.

    Raises:
        InvalidRequestError: If the query is empty or too long
    """
    try:
        return QueryParams(query=query or "", repository=repository, session_id=session_id, limit=limit)
    except ValidationError as e:
        raise InvalidRequestError(_validation_message(e), e.errors()) from e


async def ingest_repository(
    ctx: ServiceContext,
    repository_name: str,
    repository_url: Optional[str] = None,
    local_path: Optional[Path] = None,
    branch: str = "main",
    ignore_patterns: Optional[List[str]] = None,
    wait: bool = False,
) -> IngestionJob:
    """Queue a repository for ingestion.

    Must be awaited inside a running event loop; the ingestion itself runs on
    the context's worker tasks.

    Args:
        ctx: Service context
        repository_name: Name to index the repository under
        repository_url: Git URL to clone (exclusive with local_path)
        local_path: Existing checkout to read (exclusive with repository_url)
        branch: Branch to clone
        ignore_patterns: Extra gitignore-style patterns
        wait: Wait for the job to finish before returning

    Returns:
        The job record: pending when wait is False, terminal otherwise

    Raises:
        InvalidRequestError: If parameters are invalid (no job is created)
    """
    request = build_ingestion_request(repository_name, repository_url, local_path, branch, ignore_patterns)
    job = ctx.queue.submit(request)
    if wait:
        job = await ctx.queue.wait(job.job_id)
    return job


def get_job_status(ctx: ServiceContext, job_id: str) -> IngestionJob:
    """Current status record of an ingestion job.

    Raises:
        JobNotFoundError: If the id is unknown
    """
    job = ctx.get_store().get_job(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job


def ask_question(
    ctx: ServiceContext,
    query: str,
    repository: Optional[str] = None,
    session_id: Optional[str] = None,
) -> RAGAnswer:
    """Answer a question about the indexed code.

    Raises:
        InvalidRequestError: If the query is empty or longer than the limit
        EmbeddingError, IndexOperationError, LLMError: On provider failure
    """
    params = build_query_params(query, repository, session_id)
    return ctx.rag.process_query(params)


def search_codebase(
    ctx: ServiceContext,
    query: str,
    repository: Optional[str] = None,
    file_type: Optional[str] = None,
    limit: int = 10,
) -> List[SearchHit]:
    """Raw hybrid search without intent re-ranking."""
    params = build_query_params(query, repository, limit=limit)
    return ctx.searcher.search(params, file_type=file_type)


def get_repository_stats(ctx: ServiceContext, repository: str) -> RepositoryStats:
    """Chunk and file counts for an ingested repository.

    Raises:
        RepositoryNotFoundError: If the repository has no documents and no record
    """
    stats = ctx.open_index().aggregate_stats(repository)
    if stats.total_chunks == 0 and ctx.get_store().get_repository(repository) is None:
        raise RepositoryNotFoundError(repository)
    return stats


def list_repositories(ctx: ServiceContext) -> List[RepositoryRecord]:
    return ctx.get_store().list_repositories()


def delete_repository(ctx: ServiceContext, repository: str) -> int:
    """Remove a repository's documents and its record.

    Returns:
        Number of index documents deleted

    Raises:
        RepositoryNotFoundError: If there was nothing to delete
    """
    deleted = ctx.open_index().delete_by_filter(repository)
    removed_record = ctx.get_store().delete_repository(repository)
    if deleted == 0 and not removed_record:
        raise RepositoryNotFoundError(repository)
    return deleted


def get_history(ctx: ServiceContext, session_id: str, limit: int = 10) -> List[Interaction]:
    """Most recent interactions of a session, oldest first.

    Raises:
        SessionNotFoundError: If the session does not exist
    """
    store = ctx.get_store()
    if store.get_session(session_id) is None:
        raise SessionNotFoundError(session_id)
    return store.list_recent_interactions(session_id, limit)


def clear_session(ctx: ServiceContext, session_id: str) -> None:
    """Delete a session and its history.

    Raises:
        SessionNotFoundError: If the session does not exist
    """
    if not ctx.get_store().clear_session(session_id):
        raise SessionNotFoundError(session_id)


def get_suggested_questions(ctx: ServiceContext, repository: Optional[str] = None) -> List[str]:
    """Starter questions, tailored to a repository's languages when given."""
    return suggested_questions(ctx.open_index(), repository)


def extract_repository(
    root: Path,
    repository_name: str,
    branch: str = "main",
    ignore_patterns: Optional[List[str]] = None,
) -> ExtractionResult:
    """Run chunk extraction only (no embedding, no index writes)."""
    return ChunkExtractor().extract_repository(Path(root), repository_name, branch, ignore_patterns)
