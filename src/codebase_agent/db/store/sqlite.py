import json
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .base import StateStore
from ...models.job import IngestionJob, JobStatus, RepositoryRecord
from ...models.query import SourceRef
from ...models.session import Interaction, Session


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLiteStateStore(StateStore):
    def __init__(self, data_dir: Optional[Path] = None):
        base_dir = data_dir or Path.home() / ".codebase-agent"
        self.db_path = Path(base_dir) / "data" / "state.db"
        self.conn = None
        # Ingestion workers and the query path may share one store
        self._lock = threading.RLock()

    def _connect(self):
        if self.conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON")
        return self.conn

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def initialize(self) -> None:
        with self._lock:
            conn = self._connect()
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    created_at TIMESTAMP NOT NULL,
                    last_updated TIMESTAMP NOT NULL,
                    query_count INTEGER NOT NULL DEFAULT 0
                );
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS interactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    timestamp TIMESTAMP NOT NULL,
                    query TEXT NOT NULL,
                    response TEXT NOT NULL,
                    sources TEXT NOT NULL,
                    FOREIGN KEY (session_id) REFERENCES sessions(session_id) ON DELETE CASCADE
                );
            """)
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_interactions_session ON interactions(session_id);")
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS ingestion_jobs (
                    job_id TEXT PRIMARY KEY,
                    repository TEXT NOT NULL,
                    status TEXT NOT NULL,
                    message TEXT NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                );
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS repositories (
                    repository_name TEXT PRIMARY KEY,
                    source TEXT NOT NULL,
                    branch TEXT NOT NULL,
                    total_chunks INTEGER NOT NULL,
                    job_id TEXT,
                    last_updated TIMESTAMP NOT NULL
                );
            """)
            conn.commit()

    # Sessions

    def get_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            conn = self._connect()
            row = conn.execute(
                "SELECT * FROM sessions WHERE session_id = ?", (session_id,)
            ).fetchone()
            if row is None:
                return None
            rows = conn.execute(
                "SELECT * FROM interactions WHERE session_id = ? ORDER BY id", (session_id,)
            ).fetchall()

        session = self._row_to_session(row)
        session.interactions = [self._row_to_interaction(r) for r in rows]
        return session

    def put_session(self, session: Session) -> None:
        with self._lock:
            conn = self._connect()
            conn.execute(
                """
                INSERT INTO sessions (session_id, created_at, last_updated, query_count)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    last_updated = excluded.last_updated,
                    query_count = excluded.query_count
                """,
                (
                    session.session_id,
                    session.created_at.isoformat(),
                    session.last_updated.isoformat(),
                    session.query_count,
                ),
            )
            conn.commit()

    def append_interaction(self, session_id: str, interaction: Interaction) -> Session:
        now = _now().isoformat()
        sources = json.dumps([source.model_dump() for source in interaction.sources])
        with self._lock:
            conn = self._connect()
            with conn:
                conn.execute(
                    """
                    INSERT INTO sessions (session_id, created_at, last_updated, query_count)
                    VALUES (?, ?, ?, 0)
                    ON CONFLICT(session_id) DO NOTHING
                    """,
                    (session_id, now, now),
                )
                conn.execute(
                    """
                    INSERT INTO interactions (session_id, timestamp, query, response, sources)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        session_id,
                        interaction.timestamp.isoformat(),
                        interaction.query,
                        interaction.response,
                        sources,
                    ),
                )
                conn.execute(
                    """
                    UPDATE sessions SET query_count = query_count + 1, last_updated = ?
                    WHERE session_id = ?
                    """,
                    (now, session_id),
                )
            row = conn.execute(
                "SELECT * FROM sessions WHERE session_id = ?", (session_id,)
            ).fetchone()
        return self._row_to_session(row)

    def list_recent_interactions(self, session_id: str, limit: int = 10) -> List[Interaction]:
        if limit <= 0:
            return []
        with self._lock:
            rows = self._connect().execute(
                """
                SELECT * FROM (
                    SELECT * FROM interactions WHERE session_id = ?
                    ORDER BY id DESC LIMIT ?
                ) ORDER BY id
                """,
                (session_id, limit),
            ).fetchall()
        return [self._row_to_interaction(r) for r in rows]

    def clear_session(self, session_id: str) -> bool:
        with self._lock:
            conn = self._connect()
            with conn:
                conn.execute("DELETE FROM interactions WHERE session_id = ?", (session_id,))
                cursor = conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))
        return cursor.rowcount > 0

    # Jobs

    def put_job_status(self, job_id, status, message, timestamp=None, repository=None) -> None:
        timestamp = (timestamp or _now()).isoformat()
        with self._lock:
            conn = self._connect()
            conn.execute(
                """
                INSERT INTO ingestion_jobs (job_id, repository, status, message, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(job_id) DO UPDATE SET
                    status = excluded.status,
                    message = excluded.message,
                    updated_at = excluded.updated_at
                """,
                (job_id, repository or "", JobStatus(status).value, message, timestamp, timestamp),
            )
            conn.commit()

    def get_job(self, job_id: str) -> Optional[IngestionJob]:
        with self._lock:
            row = self._connect().execute(
                "SELECT * FROM ingestion_jobs WHERE job_id = ?", (job_id,)
            ).fetchone()
        if row is None:
            return None
        return IngestionJob(
            job_id=row["job_id"],
            repository=row["repository"],
            status=JobStatus(row["status"]),
            message=row["message"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    # Repositories

    def save_repository(self, record: RepositoryRecord) -> None:
        with self._lock:
            conn = self._connect()
            conn.execute(
                """
                INSERT OR REPLACE INTO repositories
                (repository_name, source, branch, total_chunks, job_id, last_updated)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.repository_name,
                    record.source,
                    record.branch,
                    record.total_chunks,
                    record.job_id,
                    record.last_updated.isoformat(),
                ),
            )
            conn.commit()

    def get_repository(self, name: str) -> Optional[RepositoryRecord]:
        with self._lock:
            row = self._connect().execute(
                "SELECT * FROM repositories WHERE repository_name = ?", (name,)
            ).fetchone()
        return self._row_to_repository(row) if row else None

    def list_repositories(self) -> List[RepositoryRecord]:
        with self._lock:
            rows = self._connect().execute(
                "SELECT * FROM repositories ORDER BY last_updated DESC, repository_name"
            ).fetchall()
        return [self._row_to_repository(r) for r in rows]

    def delete_repository(self, name: str) -> bool:
        with self._lock:
            conn = self._connect()
            cursor = conn.execute("DELETE FROM repositories WHERE repository_name = ?", (name,))
            conn.commit()
        return cursor.rowcount > 0

    def close(self):
        with self._lock:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

    @staticmethod
    def _row_to_session(row) -> Session:
        return Session(
            session_id=row["session_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            last_updated=datetime.fromisoformat(row["last_updated"]),
            query_count=row["query_count"],
        )

    @staticmethod
    def _row_to_interaction(row) -> Interaction:
        return Interaction(
            query=row["query"],
            response=row["response"],
            sources=[SourceRef(**source) for source in json.loads(row["sources"])],
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )

    @staticmethod
    def _row_to_repository(row) -> RepositoryRecord:
        return RepositoryRecord(
            repository_name=row["repository_name"],
            source=row["source"],
            branch=row["branch"],
            total_chunks=row["total_chunks"],
            job_id=row["job_id"],
            last_updated=datetime.fromisoformat(row["last_updated"]),
        )
