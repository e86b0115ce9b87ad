import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from codebase_agent.config.settings import DEFAULT_INGEST_BATCH_SIZE
from codebase_agent.db.index.base import HybridIndex
from codebase_agent.embeddings.base import Embedder
from codebase_agent.embeddings.preprocess import prepare_chunk_text
from codebase_agent.models.chunk import Chunk
from codebase_agent.utils.progress import log_warning

ProgressCallback = Callable[[int, int], None]


@dataclass
class IndexingResult:
    """Counts from one indexing run."""

    indexed: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.indexed + self.failed


class Indexer:
    """Embeds chunks and writes them to the hybrid index in bounded batches.

    Within a batch every chunk is embedded and indexed concurrently; the next
    batch starts only after the whole batch has finished, so at most
    ``batch_size`` provider calls are in flight. A chunk whose embed or index
    call fails is logged and counted, and the rest of the batch carries on.
    """

    def __init__(
        self,
        embedder: Embedder,
        index: HybridIndex,
        batch_size: int = DEFAULT_INGEST_BATCH_SIZE,
    ):
        """Create a new Indexer.

        Args:
            embedder: Embedding provider instance.
            index: Hybrid index the documents are written to.
            batch_size: Chunks embedded and indexed concurrently per batch.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.embedder = embedder
        self.index = index
        self.batch_size = batch_size

    async def index_chunks(
        self,
        chunks: Sequence[Chunk],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> IndexingResult:
        """Embed and index every chunk.

        Args:
            chunks: Chunks to write
            progress_callback: Called with (processed, total) after each batch

        Returns:
            IndexingResult with success and failure counts
        """
        result = IndexingResult()
        total = len(chunks)

        for start in range(0, total, self.batch_size):
            batch = chunks[start:start + self.batch_size]
            outcomes: List[bool] = await asyncio.gather(
                *(self._index_one(chunk) for chunk in batch)
            )
            result.indexed += sum(1 for ok in outcomes if ok)
            result.failed += sum(1 for ok in outcomes if not ok)

            if progress_callback:
                progress_callback(start + len(batch), total)

        return result

    async def _index_one(self, chunk: Chunk) -> bool:
        try:
            vector = await asyncio.to_thread(self.embedder.embed, prepare_chunk_text(chunk))
            await asyncio.to_thread(self.index.index, chunk.to_document(vector))
        except Exception as e:
            log_warning(
                f"Error indexing chunk {chunk.file_path}:{chunk.start_line}-{chunk.end_line}: {e}"
            )
            return False
        return True
