import json
import re
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Optional

import chromadb

from .base import (
    TEXT_BOOST,
    VECTOR_BOOST,
    Bucket,
    HybridIndex,
    RepositoryStats,
)
from ...models.query import SearchFilters, SearchHit

KEYWORD_FIELDS = ("filePath", "fileName", "fileType", "chunkType", "repository", "branch", "timestamp")
_TERM = re.compile(r"\w+")

# Vector candidates fetched per requested hit before text scoring
CANDIDATE_MULTIPLIER = 4


def query_terms(text: str) -> list[str]:
    """Distinct lowercase word tokens of a query, in first-seen order."""
    seen: dict[str, None] = {}
    for term in _TERM.findall(text.lower()):
        seen.setdefault(term, None)
    return list(seen)


def text_score(terms: list[str], content: str, file_path: str, file_name: str) -> float:
    """Fraction of query terms found in the content, path or file name."""
    if not terms:
        return 0.0
    haystack = f"{content}\n{file_path}\n{file_name}".lower()
    return sum(1 for term in terms if term in haystack) / len(terms)


def build_where(filters: Optional[SearchFilters]) -> Optional[dict[str, Any]]:
    if filters is None:
        return None
    terms = filters.as_terms()
    if not terms:
        return None
    clauses = [{field: value} for field, value in terms.items()]
    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


class ChromaHybridIndex(HybridIndex):
    """Local hybrid index in a persistent ChromaDB collection.

    Vector similarity comes from a cosine HNSW collection. Chroma has no
    BM25, so the lexical signal is the fraction of query terms present in a
    candidate, computed over the vector candidate pool.
    """

    def __init__(self, collection_name: str = "codebase-knowledge", data_dir: Optional[Path] = None):
        base_dir = data_dir or Path.home() / ".codebase-agent"
        self.storage_path = Path(base_dir) / "data" / "chroma"
        self.collection_name = collection_name
        self.client = None
        self.collection = None

    def _ensure_client(self):
        if self.client is None:
            self.storage_path.mkdir(parents=True, exist_ok=True)
            self.client = chromadb.PersistentClient(
                path=str(self.storage_path),
                settings=chromadb.Settings(anonymized_telemetry=False)
            )

    def _require_collection(self):
        if self.collection is None:
            raise RuntimeError("Collection not initialized. Call initialize() first.")
        return self.collection

    def initialize(self, dimension: int) -> None:
        self._ensure_client()
        self.collection = self.client.get_or_create_collection(
            name=self.collection_name,
            metadata={"dimension": dimension, "hnsw:space": "cosine"}
        )

    def index(self, document: dict[str, Any]) -> str:
        collection = self._require_collection()
        doc_id = uuid.uuid4().hex
        metadata = {field: document.get(field) or "" for field in KEYWORD_FIELDS}
        # Chroma metadata is flat and rejects None, so the nested object is stored as JSON
        metadata["metadata"] = json.dumps(document.get("metadata") or {})
        collection.add(
            ids=[doc_id],
            embeddings=[document["embedding"]],
            documents=[document["content"]],
            metadatas=[metadata],
        )
        return doc_id

    def _to_hit(self, doc_id: str, score: float, content: str, metadata: dict[str, Any]) -> SearchHit:
        source = dict(metadata)
        source["content"] = content
        source["metadata"] = json.loads(metadata.get("metadata") or "{}")
        return SearchHit.from_source(doc_id, score, source)

    def _vector_candidates(self, vector: list[float], n: int, filters: Optional[SearchFilters]) -> list[tuple[str, float, str, dict]]:
        collection = self._require_collection()
        available = self.count(filters)
        if available == 0:
            return []
        results = collection.query(
            query_embeddings=[vector],
            n_results=min(n, available),
            where=build_where(filters),
            include=["documents", "metadatas", "distances"],
        )
        candidates = []
        if results['ids'] and results['ids'][0]:
            for i, doc_id in enumerate(results['ids'][0]):
                distance = results['distances'][0][i] if results['distances'] else 1.0
                similarity = max(0.0, min(1.0, 1.0 - distance))
                candidates.append((
                    doc_id,
                    similarity,
                    results['documents'][0][i] or "",
                    results['metadatas'][0][i] or {},
                ))
        return candidates

    def search_vector(self, vector, k, filters=None) -> list[SearchHit]:
        return [
            self._to_hit(doc_id, similarity, content, metadata)
            for doc_id, similarity, content, metadata in self._vector_candidates(vector, k, filters)
        ]

    def search_hybrid(self, text, vector, k, filters=None) -> list[SearchHit]:
        terms = query_terms(text)
        scored = []
        for doc_id, similarity, content, metadata in self._vector_candidates(vector, k * CANDIDATE_MULTIPLIER, filters):
            lexical = text_score(terms, content, metadata.get("filePath", ""), metadata.get("fileName", ""))
            if lexical <= 0.0 and similarity <= 0.0:
                continue
            combined = TEXT_BOOST * lexical + VECTOR_BOOST * similarity
            scored.append((combined, doc_id, content, metadata))

        # sorted() is stable, so equal scores keep vector-candidate order
        scored = sorted(scored, key=lambda item: item[0], reverse=True)[:k]
        return [self._to_hit(doc_id, score, content, metadata) for score, doc_id, content, metadata in scored]

    def _get(self, filters: Optional[SearchFilters], include: list[str]) -> dict[str, Any]:
        collection = self._require_collection()
        return collection.get(where=build_where(filters), include=include)

    def aggregate_stats(self, repository: str) -> RepositoryStats:
        metadatas = self._get(SearchFilters(repository=repository), ["metadatas"])["metadatas"] or []
        file_types = Counter(m.get("fileType", "unknown") for m in metadatas)
        chunk_types = Counter(m.get("chunkType", "") for m in metadatas)

        def buckets(counter: Counter, size: int) -> list[Bucket]:
            ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
            return [Bucket(key=key, doc_count=count) for key, count in ordered[:size]]

        return RepositoryStats(
            total_chunks=len(metadatas),
            total_files=len({m.get("filePath") for m in metadatas}),
            file_types=buckets(file_types, 20),
            chunk_types=buckets(chunk_types, 10),
        )

    def delete_by_filter(self, repository: str) -> int:
        ids = self._get(SearchFilters(repository=repository), [])["ids"]
        if ids:
            self._require_collection().delete(ids=ids)
        return len(ids)

    def count(self, filters: Optional[SearchFilters] = None) -> int:
        if build_where(filters) is None:
            return self._require_collection().count()
        return len(self._get(filters, [])["ids"])

    def close(self) -> None:
        """Release the collection and shut the client down."""
        self.collection = None

        # Release file handles held by the client (matters on Windows)
        if self.client is not None:
            try:
                if hasattr(self.client, 'clear_system_cache'):
                    self.client.clear_system_cache()
            finally:
                self.client = None
