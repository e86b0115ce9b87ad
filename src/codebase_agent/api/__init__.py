"""Public API for Codebase Agent library usage.

Example:
    ```python
    import asyncio
    from pathlib import Path
    from codebase_agent.api import ServiceContext, ingest_repository, ask_question

    async def main():
        with ServiceContext() as ctx:
            job = await ingest_repository(ctx, "my-service", local_path=Path("."), wait=True)
            print(job.status, job.message)
            answer = ask_question(ctx, "How do I set up this project?", repository="my-service")
            print(answer.response)

    asyncio.run(main())
    ```
"""

from .context import ServiceContext

from .operations import (
    ask_question,
    clear_session,
    delete_repository,
    extract_repository,
    get_history,
    get_job_status,
    get_repository_stats,
    get_suggested_questions,
    ingest_repository,
    list_repositories,
    search_codebase,
)

from .exceptions import (
    CodebaseAgentError,
    EmbeddingError,
    IndexOperationError,
    InvalidRequestError,
    JobNotFoundError,
    LLMError,
    RepositoryNotFoundError,
    SessionNotFoundError,
    SourceFetchError,
)

__all__ = [
    'ServiceContext',

    'ask_question',
    'clear_session',
    'delete_repository',
    'extract_repository',
    'get_history',
    'get_job_status',
    'get_repository_stats',
    'get_suggested_questions',
    'ingest_repository',
    'list_repositories',
    'search_codebase',

    'CodebaseAgentError',
    'EmbeddingError',
    'IndexOperationError',
    'InvalidRequestError',
    'JobNotFoundError',
    'LLMError',
    'RepositoryNotFoundError',
    'SessionNotFoundError',
    'SourceFetchError',
]
