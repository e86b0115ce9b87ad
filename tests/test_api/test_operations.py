"""End-to-end tests of the library operations over local components."""

import asyncio

import pytest
from unittest.mock import Mock

from codebase_agent.api import (
    ServiceContext,
    ask_question,
    clear_session,
    delete_repository,
    extract_repository,
    get_history,
    get_job_status,
    get_repository_stats,
    get_suggested_questions,
    ingest_repository,
    list_repositories,
    search_codebase,
)
from codebase_agent.api.exceptions import (
    InvalidRequestError,
    JobNotFoundError,
    RepositoryNotFoundError,
    SessionNotFoundError,
)
from codebase_agent.config.settings import Settings
from codebase_agent.core.rag import JAVASCRIPT_QUESTIONS
from codebase_agent.db.index.chroma import ChromaHybridIndex
from codebase_agent.db.store.sqlite import SQLiteStateStore
from codebase_agent.llm.base import LLMResponse, UsageMetrics
from codebase_agent.models.job import JobStatus
from conftest import FakeEmbedder


@pytest.fixture
def llm():
    llm = Mock()
    llm.generate.return_value = LLMResponse(
        content="Call `login(username, password)` from auth.js.",
        model="test-model",
        stop_reason="end_turn",
        usage=UsageMetrics(input_tokens=10, output_tokens=5, total_tokens=15),
    )
    return llm


@pytest.fixture
def ctx(tmp_path, llm):
    store = SQLiteStateStore(data_dir=tmp_path)
    store.initialize()
    context = ServiceContext(
        settings=Settings(_env_file=None, data_dir=tmp_path, llm_provider="ollama"),
        embedder=FakeEmbedder(),
        index=ChromaHybridIndex(data_dir=tmp_path),
        store=store,
        llm=llm,
    )
    yield context
    context.close()


def _ingest(ctx, **kwargs):
    async def run():
        job = await ingest_repository(ctx, wait=True, **kwargs)
        await ctx.queue.close()
        return job

    return asyncio.run(run())


@pytest.fixture
def ingested(ctx, sample_repo):
    job = _ingest(ctx, repository_name="demo", local_path=sample_repo)
    assert job.status == JobStatus.COMPLETED
    return ctx


class TestIngestion:
    def test_ingest_and_status(self, ctx, sample_repo):
        job = _ingest(ctx, repository_name="demo", local_path=sample_repo)

        assert job.message == "Successfully processed 5 chunks"
        assert get_job_status(ctx, job.job_id).status == JobStatus.COMPLETED
        assert [r.repository_name for r in list_repositories(ctx)] == ["demo"]

    def test_ingest_without_waiting_returns_pending_job(self, ctx, sample_repo):
        async def run():
            job = await ingest_repository(ctx, "demo", local_path=sample_repo)
            await ctx.queue.join()
            await ctx.queue.close()
            return job

        job = asyncio.run(run())

        assert job.status == JobStatus.PENDING
        assert get_job_status(ctx, job.job_id).status == JobStatus.COMPLETED

    def test_reingest_replaces_documents(self, ingested, sample_repo):
        _ingest(ingested, repository_name="demo", local_path=sample_repo)

        assert get_repository_stats(ingested, "demo").total_chunks == 5

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"repository_name": "", "repository_url": "https://x/y.git"}, "Repository name is required"),
            ({"repository_name": "demo"}, "Either repository URL or local path is required"),
        ],
    )
    def test_invalid_requests_create_no_job(self, ctx, kwargs, message):
        with pytest.raises(InvalidRequestError) as exc_info:
            _ingest(ctx, **kwargs)

        assert str(exc_info.value) == message

    def test_unknown_job(self, ctx):
        with pytest.raises(JobNotFoundError):
            get_job_status(ctx, "missing")

    def test_dry_run_extraction(self, sample_repo):
        result = extract_repository(sample_repo, "demo")

        assert len(result.chunks) == 5
        assert result.processed_files == 2


class TestQuestions:
    def test_ask_question(self, ingested, llm):
        answer = ask_question(ingested, "Where is login handled?", repository="demo")

        assert answer.response.startswith("Call `login")
        assert answer.context_found is True
        assert any(source.file_name == "auth.js" for source in answer.sources)
        assert llm.generate.call_args.kwargs["model"] == "qwen2.5-coder:7b"

    def test_conversation_history(self, ingested):
        first = ask_question(ingested, "Where is login handled?", repository="demo")
        ask_question(ingested, "And where are tokens created?", repository="demo", session_id=first.session_id)

        history = get_history(ingested, first.session_id)

        assert [i.query for i in history] == ["Where is login handled?", "And where are tokens created?"]

        clear_session(ingested, first.session_id)
        with pytest.raises(SessionNotFoundError):
            get_history(ingested, first.session_id)

    def test_clear_unknown_session(self, ctx):
        with pytest.raises(SessionNotFoundError):
            clear_session(ctx, "missing")

    @pytest.mark.parametrize("query", ["", "q" * 1001])
    def test_invalid_query(self, ctx, query):
        with pytest.raises(InvalidRequestError):
            ask_question(ctx, query)

    def test_search_codebase(self, ingested):
        hits = search_codebase(ingested, "login token", repository="demo", file_type="javascript", limit=3)

        assert hits
        assert all(hit.file_type == "javascript" for hit in hits)

    def test_suggested_questions(self, ingested):
        questions = get_suggested_questions(ingested, "demo")

        assert questions[:2] == list(JAVASCRIPT_QUESTIONS)


class TestRepositoryManagement:
    def test_stats(self, ingested):
        stats = get_repository_stats(ingested, "demo")

        assert stats.total_chunks == 5
        assert stats.total_files == 2
        assert stats.file_type_keys() == {"javascript", "markdown"}

    def test_delete(self, ingested):
        assert delete_repository(ingested, "demo") == 5
        assert list_repositories(ingested) == []

        with pytest.raises(RepositoryNotFoundError):
            get_repository_stats(ingested, "demo")
        with pytest.raises(RepositoryNotFoundError):
            delete_repository(ingested, "demo")
