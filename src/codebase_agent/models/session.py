"""Conversation session models."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field

from .query import SourceRef


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Interaction(BaseModel):
    """One question/answer exchange within a session.

    Attributes:
        query: Question asked by the user
        response: Generated answer
        sources: Chunks that were handed to the generator
        timestamp: When the interaction was recorded
    """

    query: str
    response: str
    sources: List[SourceRef] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)


class Session(BaseModel):
    """Conversation state keyed by an opaque session identifier.

    The interaction list is append-only; ``query_count`` always equals the
    number of interactions appended through the session store.
    """

    session_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    last_updated: datetime = Field(default_factory=_utcnow)
    interactions: List[Interaction] = Field(default_factory=list)
    query_count: int = 0
