"""Background ingestion jobs.

``IngestionQueue.submit`` validates nothing beyond what ``IngestionRequest``
already enforced, records a pending job and returns at once. Worker tasks
pull jobs off an asyncio queue and run them through ``IngestionPipeline``,
which persists a status message after every phase so callers can poll
``StateStore.get_job``.
"""

import asyncio
import uuid
from contextlib import ExitStack
from pathlib import Path
from typing import Optional

from codebase_agent.core.extractor import ChunkExtractor
from codebase_agent.core.indexer import Indexer, IndexingResult
from codebase_agent.db.index.base import HybridIndex
from codebase_agent.db.store.base import StateStore
from codebase_agent.models.job import IngestionJob, IngestionRequest, JobStatus, RepositoryRecord
from codebase_agent.utils.progress import log_error, log_info, log_success
from codebase_agent.vcs.git import GitFetcher, SourceFetchError


class IngestionPipeline:
    """Runs one ingestion end to end: fetch, extract, replace, index, record."""

    def __init__(
        self,
        extractor: ChunkExtractor,
        indexer: Indexer,
        index: HybridIndex,
        store: StateStore,
        dimension: int,
        fetcher: Optional[GitFetcher] = None,
    ):
        self.extractor = extractor
        self.indexer = indexer
        self.index = index
        self.store = store
        self.dimension = dimension
        self.fetcher = fetcher or GitFetcher()

    def _status(self, job_id: str, status: JobStatus, message: str, repository: str) -> None:
        self.store.put_job_status(job_id, status, message, repository=repository)

    async def run(self, job_id: str, request: IngestionRequest) -> Optional[IndexingResult]:
        """Execute a job. Failures end up in the job record, never raised.

        Returns:
            IndexingResult on completion, None if the job failed
        """
        name = request.repository_name
        try:
            with ExitStack() as stack:
                if request.repository_url:
                    self._status(job_id, JobStatus.PROCESSING, "Cloning repository...", name)
                    root = await asyncio.to_thread(
                        stack.enter_context,
                        self.fetcher.checkout(request.repository_url, request.branch),
                    )
                else:
                    self._status(job_id, JobStatus.PROCESSING, "Using local path...", name)
                    root = Path(request.local_path).expanduser().resolve()
                    if not root.is_dir():
                        raise SourceFetchError(str(root), "not a directory")

                self._status(job_id, JobStatus.PROCESSING, "Processing code files...", name)
                extraction = await asyncio.to_thread(
                    self.extractor.extract_repository,
                    root,
                    name,
                    request.branch,
                    request.ignore_patterns,
                )

            # Re-ingestion replaces the repository's documents wholesale
            await asyncio.to_thread(self.index.initialize, self.dimension)
            deleted = await asyncio.to_thread(self.index.delete_by_filter, name)
            if deleted:
                log_info(f"Removed {deleted} existing documents for {name}")

            self._status(job_id, JobStatus.PROCESSING, "Generating embeddings...", name)

            def report(processed: int, total: int) -> None:
                percent = round(processed / total * 100) if total else 100
                self._status(job_id, JobStatus.PROCESSING, f"Indexing chunks... {percent}%", name)

            result = await self.indexer.index_chunks(extraction.chunks, progress_callback=report)

            self.store.save_repository(RepositoryRecord(
                repository_name=name,
                source=request.source_location,
                branch=request.branch,
                total_chunks=result.indexed,
                job_id=job_id,
            ))
            self._status(
                job_id,
                JobStatus.COMPLETED,
                f"Successfully processed {result.indexed} chunks",
                name,
            )
            log_success(f"Ingested {name}: {result.indexed} chunks ({result.failed} failed)")
            return result
        except Exception as e:
            log_error(f"Ingestion of {name} failed: {e}")
            self._status(job_id, JobStatus.FAILED, str(e), name)
            return None


class IngestionQueue:
    """Asyncio job queue with a fixed number of worker tasks.

    Must be used from inside a running event loop. Workers are started on
    the first submit() and stopped by close().
    """

    def __init__(self, pipeline: IngestionPipeline, store: StateStore, max_concurrent_jobs: int = 2):
        self.pipeline = pipeline
        self.store = store
        self.max_concurrent_jobs = max_concurrent_jobs
        self._queue: Optional[asyncio.Queue] = None
        self._workers: list[asyncio.Task] = []
        self._done: dict[str, asyncio.Future] = {}

    def _ensure_workers(self) -> None:
        loop = asyncio.get_running_loop()
        if self._workers and self._workers[0].get_loop() is not loop:
            # Workers from a previous asyncio.run() died with their loop
            self._workers = []
            self._queue = None
        if self._queue is None:
            self._queue = asyncio.Queue()
        if not self._workers:
            self._workers = [
                loop.create_task(self._worker(), name=f"ingestion-worker-{i}")
                for i in range(self.max_concurrent_jobs)
            ]

    def submit(self, request: IngestionRequest) -> IngestionJob:
        """Record a pending job and enqueue it. Does not wait for it to run."""
        self._ensure_workers()
        job_id = str(uuid.uuid4())
        self.store.put_job_status(
            job_id, JobStatus.PENDING, "Queued for ingestion", repository=request.repository_name
        )
        self._done[job_id] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((job_id, request))
        return self.store.get_job(job_id)

    async def _worker(self) -> None:
        while True:
            job_id, request = await self._queue.get()
            try:
                await self.pipeline.run(job_id, request)
            finally:
                self._queue.task_done()
                # Waiters already hold the future; finished jobs are read from the store
                future = self._done.pop(job_id, None)
                if future is not None and not future.done():
                    future.set_result(None)

    async def wait(self, job_id: str) -> Optional[IngestionJob]:
        """Wait until a submitted job reaches a terminal state."""
        future = self._done.get(job_id)
        if future is not None:
            await future
        return self.store.get_job(job_id)

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
