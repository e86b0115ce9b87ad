"""Core package initialization."""

from codebase_agent.core.extractor import ChunkExtractor
from codebase_agent.core.indexer import Indexer
from codebase_agent.core.searcher import Searcher
from codebase_agent.core.rag import RAGService
from codebase_agent.core.jobs import IngestionPipeline, IngestionQueue

__all__ = ["ChunkExtractor", "Indexer", "Searcher", "RAGService", "IngestionPipeline", "IngestionQueue"]
