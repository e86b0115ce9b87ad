"""Dependency container for library and CLI operations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from codebase_agent.config.settings import Settings
from codebase_agent.core.extractor import ChunkExtractor
from codebase_agent.core.indexer import Indexer
from codebase_agent.core.jobs import IngestionPipeline, IngestionQueue
from codebase_agent.core.rag import RAGService
from codebase_agent.core.searcher import Searcher
from codebase_agent.db.index.base import HybridIndex
from codebase_agent.db.store.base import StateStore
from codebase_agent.embeddings.base import Embedder
from codebase_agent.llm.base import LLMProvider
from codebase_agent.utils.debug import DebugLogger


@dataclass
class ServiceContext:
    """Builds and owns every component an operation needs.

    Components are created on first access from ``settings``. Tests (or
    embedding applications) can pass ready-made components instead; those
    are used as-is. Nothing here is a module-level singleton: two contexts
    never share a component unless the caller passes the same object to both.

    Example:
        ```python
        with ServiceContext(data_dir=Path("/tmp/agent")) as ctx:
            hits = ctx.searcher.retrieve("How do I set up this project?")
        ```

    Attributes:
        data_dir: Optional custom data directory
        embedding_provider: Override for settings.embedding_provider
        index_provider: Override for settings.index_provider
        llm_provider: Override for settings.llm_provider
        debug: Enable debug request/response logging
    """

    data_dir: Optional[Path] = None
    embedding_provider: Optional[str] = None
    index_provider: Optional[str] = None
    llm_provider: Optional[str] = None
    debug: bool = False

    settings: Optional[Settings] = None
    embedder: Optional[Embedder] = None
    index: Optional[HybridIndex] = None
    store: Optional[StateStore] = None
    llm: Optional[LLMProvider] = None

    _searcher: Optional[Searcher] = field(default=None, init=False, repr=False)
    _rag: Optional[RAGService] = field(default=None, init=False, repr=False)
    _queue: Optional[IngestionQueue] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if self.settings is None:
            overrides = {
                "embedding_provider": self.embedding_provider,
                "index_provider": self.index_provider,
                "llm_provider": self.llm_provider,
                "data_dir": self.data_dir,
            }
            self.settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
        if self.debug or self.settings.debug:
            DebugLogger.configure(enabled=True, log_dir=self.settings.debug_log_dir)

    def get_embedder(self) -> Embedder:
        if self.embedder is None:
            from codebase_agent.embeddings.factory import create_embedder
            self.embedder = create_embedder(self.settings)
        return self.embedder

    def get_index(self) -> HybridIndex:
        """Lazy-load the configured hybrid index (chroma or opensearch)."""
        if self.index is None:
            provider = self.settings.index_provider
            if provider == "chroma":
                from codebase_agent.db.index.chroma import ChromaHybridIndex
                self.index = ChromaHybridIndex(
                    collection_name=self.settings.opensearch_index,
                    data_dir=self.settings.data_dir,
                )
            elif provider == "opensearch":
                from codebase_agent.db.index.opensearch import OpenSearchHybridIndex
                self.index = OpenSearchHybridIndex(
                    endpoint=self.settings.opensearch_endpoint,
                    index_name=self.settings.opensearch_index,
                    username=self.settings.opensearch_username,
                    password=self.settings.opensearch_password,
                    verify_certs=self.settings.opensearch_verify_certs,
                )
            else:
                raise ValueError(
                    f"Unknown index provider: {provider}. Expected one of: 'chroma', 'opensearch'."
                )
        return self.index

    def get_store(self) -> StateStore:
        if self.store is None:
            from codebase_agent.db.store.sqlite import SQLiteStateStore
            self.store = SQLiteStateStore(data_dir=self.settings.data_dir)
            self.store.initialize()
        return self.store

    def get_llm(self) -> LLMProvider:
        if self.llm is None:
            from codebase_agent.llm.factory import create_llm_provider
            self.llm = create_llm_provider(self.settings)
        return self.llm

    def open_index(self) -> HybridIndex:
        """Index initialized for the embedder's dimension, ready for queries."""
        index = self.get_index()
        dimension = self.embedder.dimension if self.embedder is not None else self.settings.embedding_dimension
        index.initialize(dimension)
        return index

    @property
    def searcher(self) -> Searcher:
        if self._searcher is None:
            self._searcher = Searcher(
                self.get_embedder(),
                self.open_index(),
                candidate_count=self.settings.candidate_count,
                max_results=self.settings.max_context_chunks,
                relevance_floor=self.settings.relevance_floor,
            )
        return self._searcher

    @property
    def rag(self) -> RAGService:
        if self._rag is None:
            self._rag = RAGService(
                self.searcher,
                self.get_llm(),
                self.get_store(),
                model=self.settings.generation_model,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                history_limit=self.settings.history_limit,
                max_chunk_chars=self.settings.max_chunk_chars,
            )
        return self._rag

    def build_pipeline(self, batch_size: Optional[int] = None) -> IngestionPipeline:
        embedder = self.get_embedder()
        index = self.get_index()
        return IngestionPipeline(
            extractor=ChunkExtractor(),
            indexer=Indexer(embedder, index, batch_size=batch_size or self.settings.ingest_batch_size),
            index=index,
            store=self.get_store(),
            dimension=embedder.dimension,
        )

    @property
    def queue(self) -> IngestionQueue:
        if self._queue is None:
            self._queue = IngestionQueue(
                self.build_pipeline(),
                self.get_store(),
                max_concurrent_jobs=self.settings.max_concurrent_jobs,
            )
        return self._queue

    def close(self) -> None:
        """Close index and store connections."""
        if self.index is not None:
            self.index.close()
            self.index = None
        if self.store is not None:
            self.store.close()
            self.store = None
        self._searcher = None
        self._rag = None
        self._queue = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
