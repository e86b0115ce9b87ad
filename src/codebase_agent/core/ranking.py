"""Intent-driven re-ranking of hybrid search candidates.

Generic embedding similarity tends to underweight structurally obvious
matches: a setup question should surface the README or package manifest even
when it is phrased unlike the README's prose. Each rule below pairs a group
of query keywords with a structural test on a candidate; every rule that
fires multiplies the candidate's score by ``INTENT_BOOST``.
"""

from dataclasses import dataclass
from typing import Callable, List, Sequence

from ..config.settings import DEFAULT_MAX_CONTEXT_CHUNKS, DEFAULT_RELEVANCE_FLOOR
from ..models.chunk import ChunkType
from ..models.query import RankedChunk, SearchHit

INTENT_BOOST = 1.5

SETUP_FILE_NAMES = ("package.json", "README.md")


@dataclass(frozen=True)
class IntentRule:
    name: str
    keywords: tuple[str, ...]
    applies_to: Callable[[SearchHit], bool]

    def triggered_by(self, query: str) -> bool:
        return any(keyword in query for keyword in self.keywords)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        "setup",
        ("setup", "set up", "install", "configure"),
        lambda hit: hit.file_name in SETUP_FILE_NAMES
        or hit.chunk_type == ChunkType.DOCUMENTATION.value,
    ),
    IntentRule(
        "api",
        ("api", "endpoint", "route"),
        lambda hit: "routes" in hit.file_path or hit.chunk_type == ChunkType.ROUTE.value,
    ),
    IntentRule(
        "database",
        ("database", "model", "schema"),
        lambda hit: "models" in hit.file_path or hit.chunk_type == ChunkType.CLASS.value,
    ),
    IntentRule(
        "auth",
        ("auth", "login", "user"),
        lambda hit: "auth" in hit.file_path or "auth" in hit.content.lower(),
    ),
)

# Ordered: the first group with a keyword in the query names the intent
QUERY_INTENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("setup", ("setup", "set up", "install", "configure", "environment", "dependencies")),
    ("architecture", ("architecture", "structure", "design", "overview", "how does")),
    ("api", ("api", "endpoint", "route", "request", "response")),
    ("database", ("database", "db", "model", "schema", "data")),
    ("authentication", ("auth", "login", "user", "permission", "token")),
    ("deployment", ("deploy", "build", "production", "docker", "server")),
    ("testing", ("test", "testing", "spec", "unit", "integration")),
    ("troubleshooting", ("error", "issue", "problem", "debug", "fix")),
)


def adjusted_score(hit: SearchHit, query: str) -> float:
    """Raw score multiplied by INTENT_BOOST once per firing rule."""
    query = query.lower()
    score = hit.score
    for rule in INTENT_RULES:
        if rule.triggered_by(query) and rule.applies_to(hit):
            score *= INTENT_BOOST
    return score


def filter_and_rank(
    hits: Sequence[SearchHit],
    query: str,
    relevance_floor: float = DEFAULT_RELEVANCE_FLOOR,
    limit: int = DEFAULT_MAX_CONTEXT_CHUNKS,
) -> List[RankedChunk]:
    """Boost, filter and order candidates.

    Candidates whose adjusted score is at or below ``relevance_floor`` are
    dropped. The rest are sorted by adjusted score, highest first; equal
    scores keep their original candidate order.

    Args:
        hits: Candidates in the order the index returned them
        query: User question
        relevance_floor: Exclusive lower bound on the adjusted score
        limit: Maximum chunks returned

    Returns:
        Up to ``limit`` ranked chunks
    """
    ranked = []
    for position, hit in enumerate(hits):
        score = adjusted_score(hit, query)
        if score <= relevance_floor:
            continue
        ranked.append(RankedChunk(**hit.model_dump(), adjusted_score=score, rank_index=position))

    ranked.sort(key=lambda chunk: (-chunk.adjusted_score, chunk.rank_index))
    return ranked[:limit]


def analyze_query_intent(query: str) -> str:
    """Classify a question into a coarse intent ("general" if nothing matches)."""
    query = query.lower()
    for intent, keywords in QUERY_INTENTS:
        if any(keyword in query for keyword in keywords):
            return intent
    return "general"
