"""Ingestion job and repository record models."""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """Lifecycle states of an ingestion job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class IngestionRequest(BaseModel):
    """Parameters for ingesting one repository.

    Exactly one of ``repository_url`` and ``local_path`` must be provided.

    Attributes:
        repository_name: Name the repository is indexed under
        repository_url: Git URL to clone
        local_path: Existing checkout to read directly
        branch: Branch to clone (ignored for local paths)
        ignore_patterns: Extra gitignore-style patterns to exclude
    """

    repository_name: str = Field(..., description="Repository name")
    repository_url: Optional[str] = Field(None, description="Git URL to clone")
    local_path: Optional[Path] = Field(None, description="Local checkout path")
    branch: str = Field(default="main", description="Branch to ingest")
    ignore_patterns: list[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "repository_name": "my-service",
                "repository_url": "https://github.com/acme/my-service.git",
                "branch": "main",
            }
        }
    )

    @field_validator("repository_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Repository name is required")
        return v.strip()

    @model_validator(mode="after")
    def validate_source(self) -> "IngestionRequest":
        if not self.repository_url and not self.local_path:
            raise ValueError("Either repository URL or local path is required")
        if self.repository_url and self.local_path:
            raise ValueError("Provide either repository URL or local path, not both")
        return self

    @property
    def source_location(self) -> str:
        return self.repository_url or str(self.local_path)


class IngestionJob(BaseModel):
    """Observable status record of one repository-ingestion run."""

    job_id: str
    repository: str
    status: JobStatus = JobStatus.PENDING
    message: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class RepositoryRecord(BaseModel):
    """Metadata saved for a repository after a successful ingestion."""

    repository_name: str
    source: str
    branch: str = "main"
    total_chunks: int = 0
    job_id: Optional[str] = None
    last_updated: datetime = Field(default_factory=_utcnow)
