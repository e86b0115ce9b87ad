"""
Tests for GitFetcher covering:
- Shallow single-branch clone of a local repository
- Temporary checkout cleanup
- Failures for missing repositories, branches and git executables

Uses temporary Git repositories for testing.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from codebase_agent.vcs.git import GitFetcher, SourceFetchError

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def origin_repo(tmp_path):
    """Fixture providing a repository with one commit on 'main'."""
    repo = tmp_path / "origin"
    repo.mkdir()
    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")
    (repo / "app.py").write_text("def main():\n    return 0\n")
    _git(repo, "add", "app.py")
    _git(repo, "commit", "-m", "Initial commit")
    return repo


@requires_git
def test_clone_local_repository(origin_repo, tmp_path):
    destination = GitFetcher().clone(origin_repo.as_uri(), "main", tmp_path / "clone")

    assert (destination / "app.py").read_text().startswith("def main")


@requires_git
def test_checkout_removes_temp_directory(origin_repo):
    with GitFetcher().checkout(origin_repo.as_uri(), "main") as root:
        assert (root / "app.py").exists()
        temp_dir = root.parent

    assert not temp_dir.exists()


@requires_git
def test_missing_branch_raises(origin_repo, tmp_path):
    with pytest.raises(SourceFetchError) as exc_info:
        GitFetcher().clone(origin_repo.as_uri(), "does-not-exist", tmp_path / "clone")

    assert exc_info.value.source == origin_repo.as_uri()
    assert exc_info.value.reason


@requires_git
def test_checkout_cleans_up_after_failure(tmp_path):
    fetcher = GitFetcher()

    with pytest.raises(SourceFetchError):
        with fetcher.checkout((tmp_path / "missing").as_uri(), "main"):
            pass


def test_missing_git_executable(tmp_path):
    fetcher = GitFetcher(git_executable=str(tmp_path / "no-such-git"))

    with pytest.raises(SourceFetchError):
        fetcher.clone("https://example.com/repo.git", "main", tmp_path / "clone")
