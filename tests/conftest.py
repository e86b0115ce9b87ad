import re

import pytest

from codebase_agent.embeddings.base import Embedder
from codebase_agent.models.query import SearchHit

FAKE_DIMENSION = 8


class DummyProgress:
    """
    Test-only no-op progress object to avoid Rich LiveError from Live/Progress.

    Matches the Progress API used by the CLI closely enough to stand in for
    Rich's Progress.
    """

    def __init__(self, *args, **kwargs):
        self.finished = False

    def add_task(self, *args, **kwargs):
        return "task-id"

    def update(self, *args, **kwargs):
        pass

    def advance(self, *args, **kwargs):
        pass

    def start(self):
        self.finished = False

    def stop(self):
        self.finished = True

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


@pytest.fixture(autouse=True)
def dummy_progress(monkeypatch):
    """
    Globally patch codebase_agent.utils.progress.Progress for tests.

    Any create_progress_bar(...) call then builds a DummyProgress, so no test
    constructs a real Rich Progress/Live instance.
    """
    from codebase_agent.utils import progress as progress_utils

    monkeypatch.setattr(progress_utils, "Progress", DummyProgress)
    yield


class FakeEmbedder(Embedder):
    """Deterministic bag-of-words embedder.

    Each word adds weight to one bucket chosen by its character sum, and every
    bucket starts slightly above zero so no vector is ever all zeros.
    """

    def __init__(self, dimension: int = FAKE_DIMENSION, fail_on=None):
        self._dimension = dimension
        self.fail_on = fail_on
        self.calls = []

    def embed(self, text):
        self.calls.append(text)
        if self.fail_on and self.fail_on(text):
            raise RuntimeError("embedding backend unavailable")
        vector = [0.1] * self._dimension
        for word in re.findall(r"\w+", text.lower()):
            vector[sum(map(ord, word)) % self._dimension] += 1.0
        return vector

    @property
    def dimension(self):
        return self._dimension


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


def make_hit(doc_id, score, **fields):
    """Build a SearchHit with sensible defaults for ranking tests."""
    defaults = {
        "content": "const value = compute();",
        "file_path": f"src/{doc_id}.js",
        "file_name": f"{doc_id}.js",
        "file_type": "javascript",
        "chunk_type": "function",
        "repository": "demo",
    }
    defaults.update(fields)
    return SearchHit(id=doc_id, score=score, **defaults)


AUTH_JS = """const bcrypt = require('bcrypt');

function login(username, password) {
  const user = lookupUser(username);
  if (!user) {
    return null;
  }
  const valid = bcrypt.compareSync(password, user.hash);
  if (!valid) {
    audit.record('failed-login', username);
    return null;
  }
  const token = createToken(user);
  audit.record('login', user.id);
  return {
    token: token,
    expires: Date.now() + 3600,
    user: user.id,
  };
}

module.exports = { login };
"""

README_MD = """# Auth Service
Handles user login and token issuing.
## Setup
Run npm install and then npm start.
"""


@pytest.fixture
def sample_repo(tmp_path):
    """Repository with one JavaScript module and a two-section README."""
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "auth.js").write_text(AUTH_JS, encoding="utf-8")
    (repo / "README.md").write_text(README_MD, encoding="utf-8")
    return repo


def make_chunks(count, failing=()):
    """Single-line function chunks; indices in ``failing`` contain "explode"."""
    from codebase_agent.models.chunk import Chunk, ChunkType

    chunks = []
    for i in range(count):
        body = "explode()" if i in failing else f"return {i};"
        chunks.append(Chunk(
            type=ChunkType.FUNCTION,
            content=f"function handler{i}() {{ {body} }}",
            file_path=f"src/handler{i}.js",
            file_name=f"handler{i}.js",
            file_type="javascript",
            repository="demo",
            branch="main",
            start_line=1,
            end_line=1,
            function_name=f"handler{i}",
        ))
    return chunks


PROVIDER_ENV_VARS = (
    "AWS_PROFILE",
    "AWS_REGION",
    "EMBEDDING_PROVIDER",
    "INDEX_PROVIDER",
    "LLM_PROVIDER",
    "OPENAI_API_KEY",
    "OPENROUTER_API_KEY",
    "OPENSEARCH_ENDPOINT",
    "DATA_DIR",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_provider_env(monkeypatch):
    """Keep developer environment variables out of Settings in tests."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
