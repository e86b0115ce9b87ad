"""OpenSearch-backed hybrid index using a lucene HNSW knn_vector field."""

from typing import Any, Optional

from opensearchpy import OpenSearch
from opensearchpy.exceptions import NotFoundError, OpenSearchException

from .base import (
    TEXT_BOOST,
    VECTOR_BOOST,
    Bucket,
    HybridIndex,
    IndexOperationError,
    RepositoryStats,
)
from ...models.query import SearchFilters, SearchHit
from ...utils.debug import DebugLogger
from ...utils.progress import log_info

TEXT_FIELDS = ["content", "filePath", "fileName"]


def build_index_body(dimension: int) -> dict[str, Any]:
    """Index settings and mapping for chunk documents."""
    return {
        "settings": {
            "number_of_shards": 1,
            "number_of_replicas": 0,
            "index.knn": True,
        },
        "mappings": {
            "properties": {
                "content": {"type": "text", "analyzer": "standard"},
                "embedding": {
                    "type": "knn_vector",
                    "dimension": dimension,
                    "method": {
                        "name": "hnsw",
                        "space_type": "cosinesimil",
                        "engine": "lucene",
                    },
                },
                "filePath": {"type": "keyword"},
                "fileName": {"type": "keyword"},
                "fileType": {"type": "keyword"},
                "chunkType": {"type": "keyword"},
                "repository": {"type": "keyword"},
                "branch": {"type": "keyword"},
                "timestamp": {"type": "date"},
                "metadata": {"type": "object", "enabled": False},
            }
        },
    }


def _term_filters(filters: Optional[SearchFilters]) -> list[dict[str, Any]]:
    if filters is None:
        return []
    return [{"term": {field: value}} for field, value in filters.as_terms().items()]


def build_hybrid_query(
    text: str,
    vector: list[float],
    k: int,
    filters: Optional[SearchFilters] = None,
) -> dict[str, Any]:
    """Bool query whose should-clauses are a multi_match and a knn clause."""
    query: dict[str, Any] = {
        "bool": {
            "should": [
                {
                    "multi_match": {
                        "query": text,
                        "fields": TEXT_FIELDS,
                        "boost": TEXT_BOOST,
                    }
                },
                {
                    "knn": {
                        "embedding": {
                            "vector": vector,
                            "k": k,
                            "boost": VECTOR_BOOST,
                        }
                    }
                },
            ],
            "minimum_should_match": 1,
        }
    }
    terms = _term_filters(filters)
    if terms:
        query["bool"]["filter"] = terms
    return {
        "size": k,
        "query": query,
        "_source": {"excludes": ["embedding"]},
    }


def build_vector_query(
    vector: list[float],
    k: int,
    filters: Optional[SearchFilters] = None,
) -> dict[str, Any]:
    knn: dict[str, Any] = {"embedding": {"vector": vector, "k": k}}
    terms = _term_filters(filters)
    query: dict[str, Any] = {"knn": knn}
    if terms:
        query = {"bool": {"must": [{"knn": knn}], "filter": terms}}
    return {
        "size": k,
        "query": query,
        "_source": {"excludes": ["embedding"]},
    }


class OpenSearchHybridIndex(HybridIndex):
    """Hybrid index stored in a single OpenSearch index.

    Args:
        endpoint: Cluster URL (e.g. https://search-domain.us-east-1.es.amazonaws.com)
        index_name: Index holding chunk documents
        username: Basic-auth user
        password: Basic-auth password
        verify_certs: Verify TLS certificates
        client: Pre-built OpenSearch client (tests inject a mock here)
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        index_name: str = "codebase-knowledge",
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify_certs: bool = True,
        client: Optional[OpenSearch] = None,
    ):
        if client is None and not endpoint:
            raise ValueError("OpenSearch endpoint is required (set OPENSEARCH_ENDPOINT)")
        self.endpoint = endpoint
        self.index_name = index_name
        self._auth = (username, password) if username else None
        self._verify_certs = verify_certs
        self.client = client

    def _ensure_client(self) -> OpenSearch:
        if self.client is None:
            self.client = OpenSearch(
                hosts=[self.endpoint],
                http_auth=self._auth,
                use_ssl=self.endpoint.startswith("https"),
                verify_certs=self._verify_certs,
                timeout=60,
            )
        return self.client

    def initialize(self, dimension: int) -> None:
        client = self._ensure_client()
        try:
            if client.indices.exists(index=self.index_name):
                return
            client.indices.create(index=self.index_name, body=build_index_body(dimension))
            log_info(f"Created OpenSearch index {self.index_name}")
        except OpenSearchException as e:
            raise IndexOperationError(f"Failed to initialize index {self.index_name}: {e}") from e

    def index(self, document: dict[str, Any]) -> str:
        client = self._ensure_client()
        try:
            response = client.index(index=self.index_name, body=document)
        except OpenSearchException as e:
            raise IndexOperationError(f"Failed to index document: {e}") from e
        return response["_id"]

    def _search(self, body: dict[str, Any]) -> list[SearchHit]:
        client = self._ensure_client()
        request_id = DebugLogger.log_request("search", body, category="index")
        try:
            response = client.search(index=self.index_name, body=body)
        except NotFoundError:
            return []
        except OpenSearchException as e:
            raise IndexOperationError(f"Search failed: {e}") from e
        DebugLogger.log_response("search", response, request_id, category="index")

        return [
            SearchHit.from_source(hit["_id"], hit.get("_score") or 0.0, hit.get("_source") or {})
            for hit in response["hits"]["hits"]
        ]

    def search_vector(self, vector, k, filters=None) -> list[SearchHit]:
        return self._search(build_vector_query(vector, k, filters))

    def search_hybrid(self, text, vector, k, filters=None) -> list[SearchHit]:
        return self._search(build_hybrid_query(text, vector, k, filters))

    def aggregate_stats(self, repository: str) -> RepositoryStats:
        client = self._ensure_client()
        body = {
            "size": 0,
            "query": {"term": {"repository": repository}},
            "aggs": {
                "file_types": {"terms": {"field": "fileType", "size": 20}},
                "chunk_types": {"terms": {"field": "chunkType", "size": 10}},
                "total_files": {"cardinality": {"field": "filePath"}},
            },
        }
        try:
            response = client.search(index=self.index_name, body=body)
        except OpenSearchException as e:
            raise IndexOperationError(f"Failed to aggregate stats for {repository}: {e}") from e

        aggregations = response.get("aggregations", {})
        total = response["hits"]["total"]
        return RepositoryStats(
            total_chunks=total["value"] if isinstance(total, dict) else int(total),
            total_files=aggregations.get("total_files", {}).get("value", 0),
            file_types=[
                Bucket(key=b["key"], doc_count=b["doc_count"])
                for b in aggregations.get("file_types", {}).get("buckets", [])
            ],
            chunk_types=[
                Bucket(key=b["key"], doc_count=b["doc_count"])
                for b in aggregations.get("chunk_types", {}).get("buckets", [])
            ],
        )

    def delete_by_filter(self, repository: str) -> int:
        client = self._ensure_client()
        try:
            response = client.delete_by_query(
                index=self.index_name,
                body={"query": {"term": {"repository": repository}}},
                refresh=True,
            )
        except NotFoundError:
            return 0
        except OpenSearchException as e:
            raise IndexOperationError(f"Failed to delete documents for {repository}: {e}") from e
        return int(response.get("deleted", 0))

    def count(self, filters: Optional[SearchFilters] = None) -> int:
        client = self._ensure_client()
        terms = _term_filters(filters)
        body = {"query": {"bool": {"filter": terms}}} if terms else {"query": {"match_all": {}}}
        try:
            response = client.count(index=self.index_name, body=body)
        except NotFoundError:
            return 0
        except OpenSearchException as e:
            raise IndexOperationError(f"Count failed: {e}") from e
        return int(response["count"])

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
