from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ...models.job import IngestionJob, JobStatus, RepositoryRecord
from ...models.session import Interaction, Session


class StateStore(ABC):
    """Persistent store for sessions, ingestion job status and repository records."""

    @abstractmethod
    def initialize(self) -> None:
        """Create tables if needed. Idempotent."""

    # Sessions

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[Session]:
        """Load a session with its full interaction history, or None."""

    @abstractmethod
    def put_session(self, session: Session) -> None:
        """Create or replace the session header (not its interactions)."""

    @abstractmethod
    def append_interaction(self, session_id: str, interaction: Interaction) -> Session:
        """Append an interaction and bump query_count in one transaction.

        The session is created if it does not exist yet.

        Returns:
            The updated session header (interactions not loaded)
        """

    @abstractmethod
    def list_recent_interactions(self, session_id: str, limit: int = 10) -> List[Interaction]:
        """Most recent ``limit`` interactions, oldest first."""

    @abstractmethod
    def clear_session(self, session_id: str) -> bool:
        """Delete a session and its interactions. Returns False if absent."""

    # Jobs

    @abstractmethod
    def put_job_status(
        self,
        job_id: str,
        status: JobStatus,
        message: str,
        timestamp: Optional[datetime] = None,
        repository: Optional[str] = None,
    ) -> None:
        """Create or update a job status record."""

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[IngestionJob]:
        """Load a job status record, or None."""

    # Repositories

    @abstractmethod
    def save_repository(self, record: RepositoryRecord) -> None:
        """Create or replace a repository record."""

    @abstractmethod
    def get_repository(self, name: str) -> Optional[RepositoryRecord]:
        """Load a repository record, or None."""

    @abstractmethod
    def list_repositories(self) -> List[RepositoryRecord]:
        """All repository records, most recently updated first."""

    @abstractmethod
    def delete_repository(self, name: str) -> bool:
        """Delete a repository record. Returns False if absent."""

    @abstractmethod
    def close(self) -> None:
        """Close the underlying connection."""
