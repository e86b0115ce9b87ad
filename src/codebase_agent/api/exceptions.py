"""Custom exceptions for the Codebase Agent API."""

from codebase_agent.db.index.base import IndexOperationError
from codebase_agent.embeddings.base import EmbeddingError
from codebase_agent.llm.base import LLMError, LLMInvalidRequestError, LLMRateLimitError
from codebase_agent.vcs.git import SourceFetchError


class CodebaseAgentError(Exception):
    """Base exception for all Codebase Agent API errors."""
    pass


class InvalidRequestError(CodebaseAgentError):
    """Raised when request parameters fail validation. No work has started."""

    def __init__(self, message: str, errors: list = None):
        """Initialize exception.

        Args:
            message: Human-readable summary
            errors: Optional list of field-level validation errors
        """
        self.errors = errors or []
        super().__init__(message)


class JobNotFoundError(CodebaseAgentError):
    """Raised when an ingestion job id is unknown."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Ingestion job '{job_id}' not found")


class RepositoryNotFoundError(CodebaseAgentError):
    """Raised when a repository has never been ingested."""

    def __init__(self, repository: str, message: str = None):
        self.repository = repository
        if message is None:
            message = (
                f"Repository '{repository}' has not been ingested. "
                f"Run the 'ingest' command first."
            )
        super().__init__(message)


class SessionNotFoundError(CodebaseAgentError):
    """Raised when a conversation session does not exist."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session '{session_id}' not found")


__all__ = [
    "CodebaseAgentError",
    "InvalidRequestError",
    "JobNotFoundError",
    "RepositoryNotFoundError",
    "SessionNotFoundError",
    "SourceFetchError",
    "IndexOperationError",
    "EmbeddingError",
    "LLMError",
    "LLMRateLimitError",
    "LLMInvalidRequestError",
]
