import shutil
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from codebase_agent.utils.debug import DebugLogger
from codebase_agent.utils.progress import console, log_warning


class SourceFetchError(Exception):
    """Raised when a repository cannot be fetched."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to fetch {source}: {reason}")


class GitFetcher:
    """Shallow single-branch clones into temporary directories."""

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def clone(self, url: str, branch: str, destination: Path) -> Path:
        """Clone one branch of ``url`` into ``destination``.

        Raises:
            SourceFetchError: If git is missing or the clone fails
        """
        cmd = [
            self.git_executable,
            "clone",
            "--branch", branch,
            "--single-branch",
            "--depth", "1",
            url,
            str(destination),
        ]

        if DebugLogger.is_enabled():
            console.print(f"[dim]GitFetcher.clone: {' '.join(cmd)}[/dim]")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise SourceFetchError(url, str(e)) from e

        if result.returncode != 0:
            raise SourceFetchError(url, result.stderr.strip() or f"git exited with {result.returncode}")
        return destination

    @contextmanager
    def checkout(self, url: str, branch: str) -> Iterator[Path]:
        """Clone into a temporary directory that is removed on exit."""
        temp_dir = Path(tempfile.mkdtemp(prefix="codebase-agent-"))
        try:
            yield self.clone(url, branch, temp_dir / "repo")
        finally:
            try:
                shutil.rmtree(temp_dir)
            except OSError as e:
                log_warning(f"Could not remove {temp_dir}: {e}")
