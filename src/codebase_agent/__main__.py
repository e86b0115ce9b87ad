"""CLI entry point for Codebase Agent."""

import asyncio
import sys
from collections import Counter
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from codebase_agent import __version__
from codebase_agent.api import (
    CodebaseAgentError,
    EmbeddingError,
    IndexOperationError,
    LLMError,
    ServiceContext,
    ask_question,
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
from codebase_agent.api.operations import build_ingestion_request
from codebase_agent.models.job import JobStatus
from codebase_agent.utils.progress import (
    create_progress_bar,
    log_error,
    log_info,
    log_success,
    log_warning,
    update_progress,
)
from codebase_agent.utils.symbols import SYMBOLS
from codebase_agent.vcs.git import GitFetcher, SourceFetchError

# Answers and tables go to stdout; status messages use the shared stderr console
output = Console()

HANDLED_ERRORS = (CodebaseAgentError, SourceFetchError, IndexOperationError, EmbeddingError, LLMError, ValueError)


def _service(ctx, **overrides) -> ServiceContext:
    return ServiceContext(
        data_dir=ctx.obj.get('data_dir'),
        embedding_provider=ctx.obj.get('embedding_provider'),
        index_provider=ctx.obj.get('index_provider'),
        llm_provider=ctx.obj.get('llm_provider'),
        debug=ctx.obj.get('debug', False),
        **overrides,
    )


def _fail(action: str, error) -> None:
    log_error(f"{action}: {error}")
    sys.exit(1)


@click.group()
@click.option('--debug', is_flag=True, help='Write provider and index requests/responses to the debug log directory')
@click.option('--data-dir', type=click.Path(path_type=Path), help='Base directory for local data (default: ~/.codebase-agent)')
@click.option('--embedding-provider', type=click.Choice(['local', 'bedrock']), help='Embedding provider: local=sentence-transformers, bedrock=AWS Titan')
@click.option('--index-provider', type=click.Choice(['chroma', 'opensearch']), help='Hybrid index backend (default: chroma)')
@click.option('--llm-provider', type=click.Choice(['bedrock', 'openai', 'openrouter', 'ollama']), help='Answer generator (default: bedrock)')
@click.version_option(version=__version__)
@click.pass_context
def main(ctx, debug: bool, data_dir: Optional[Path], embedding_provider: Optional[str], index_provider: Optional[str], llm_provider: Optional[str]) -> None:
    """Codebase Agent - ask questions about source-code repositories.

    Ingest a repository into a hybrid (keyword + vector) index, then ask
    natural-language questions answered from the most relevant code.

    Unset options fall back to environment variables and .env
    (EMBEDDING_PROVIDER, INDEX_PROVIDER, LLM_PROVIDER, OPENSEARCH_ENDPOINT, ...).
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    ctx.obj['data_dir'] = data_dir.expanduser().resolve() if data_dir else None
    ctx.obj['embedding_provider'] = embedding_provider
    ctx.obj['index_provider'] = index_provider
    ctx.obj['llm_provider'] = llm_provider


@main.command()
@click.argument("name", type=str)
@click.option("--path", "local_path", type=click.Path(exists=True, file_okay=False, path_type=Path), help="Local checkout to ingest")
@click.option("--url", "repository_url", type=str, help="Git URL to clone and ingest")
@click.option("--branch", default="main", show_default=True, help="Branch to clone")
@click.option("--batch-size", type=click.IntRange(1, 50), help="Chunks embedded concurrently per batch")
@click.option("--ignore", "ignore_patterns", multiple=True, help="Extra gitignore-style pattern (repeatable)")
@click.option("--dry-run", is_flag=True, help="Extract and report chunks without embedding or indexing")
@click.pass_context
def ingest(
    ctx,
    name: str,
    local_path: Optional[Path],
    repository_url: Optional[str],
    branch: str,
    batch_size: Optional[int],
    ignore_patterns: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Ingest a repository under NAME.

    Examples:

        \b
        $ codebase-agent ingest my-service --path ./my-service
        $ codebase-agent ingest my-service --url https://github.com/acme/my-service.git --branch develop
        $ codebase-agent ingest my-service --path . --dry-run
    """
    try:
        request = build_ingestion_request(name, repository_url, local_path, branch, list(ignore_patterns))
    except CodebaseAgentError as e:
        _fail("Invalid ingestion request", e)

    if dry_run:
        _dry_run(request)
        return

    service = _service(ctx)
    if batch_size:
        service.settings.ingest_batch_size = batch_size

    async def run():
        job = await ingest_repository(
            service,
            request.repository_name,
            request.repository_url,
            request.local_path,
            request.branch,
            request.ignore_patterns,
        )
        log_info(f"Job {job.job_id} queued")
        progress, task_id = create_progress_bar(job.message)
        with progress:
            while True:
                current = get_job_status(service, job.job_id)
                update_progress(progress, task_id, advance=0, description=current.message)
                if current.status.is_terminal:
                    break
                await asyncio.sleep(0.5)
        await service.queue.close()
        return current

    try:
        with service:
            job = asyncio.run(run())
    except HANDLED_ERRORS as e:
        _fail("Ingestion failed", e)

    if job.status == JobStatus.COMPLETED:
        log_success(job.message)
    else:
        _fail("Ingestion failed", job.message)


def _dry_run(request) -> None:
    def report(root: Path) -> None:
        result = extract_repository(root, request.repository_name, request.branch, request.ignore_patterns)
        table = Table(title=f"Dry run: {request.repository_name}")
        table.add_column("Chunk type", style="cyan")
        table.add_column("Count", style="yellow", justify="right")
        for chunk_type, count in sorted(Counter(c.type.value for c in result.chunks).items()):
            table.add_row(chunk_type, str(count))
        output.print(table)
        log_info(f"{result.processed_files} files processed, {result.skipped_files} skipped")

    try:
        if request.repository_url:
            with GitFetcher().checkout(request.repository_url, request.branch) as root:
                report(root)
        else:
            report(Path(request.local_path))
    except SourceFetchError as e:
        _fail("Dry run failed", e)


@main.command()
@click.argument("job_id", type=str)
@click.pass_context
def status(ctx, job_id: str) -> None:
    """Show the status of an ingestion job."""
    try:
        with _service(ctx) as service:
            job = get_job_status(service, job_id)
    except HANDLED_ERRORS as e:
        _fail("Failed to get job status", e)

    output.print(f"[bold]{job.status.value}[/bold] {job.message}")
    output.print(f"[dim]repository={job.repository} updated={job.updated_at.isoformat()}[/dim]")


@main.command()
@click.argument("question", type=str)
@click.option("--repository", "-r", type=str, help="Restrict retrieval to this repository")
@click.option("--session", "session_id", type=str, help="Continue an existing conversation")
@click.pass_context
def ask(ctx, question: str, repository: Optional[str], session_id: Optional[str]) -> None:
    """Ask a QUESTION about ingested code.

    Examples:

        \b
        $ codebase-agent ask "How do I set up this project?" -r my-service
        $ codebase-agent ask "Where is login handled?" --session 5b0c3f3e-...
    """
    try:
        with _service(ctx) as service:
            answer = ask_question(service, question, repository=repository, session_id=session_id)
    except HANDLED_ERRORS as e:
        _fail("Failed to answer question", e)

    output.print(Markdown(answer.response))
    if answer.sources:
        output.print()
        output.print("[bold]Sources:[/bold]")
        for source in answer.sources:
            output.print(f"  {SYMBOLS['source']} {source.file_path} [dim]({source.chunk_type}, {source.score:.3f})[/dim]")
    log_info(f"Session: {answer.session_id}")


@main.command()
@click.argument("query", type=str)
@click.option("--repository", "-r", type=str, help="Restrict to this repository")
@click.option("--file-type", type=str, help="Restrict to a file type (e.g. python, javascript)")
@click.option("--limit", default=10, type=click.IntRange(1, 100), show_default=True, help="Maximum results")
@click.pass_context
def search(ctx, query: str, repository: Optional[str], file_type: Optional[str], limit: int) -> None:
    """Hybrid search over indexed chunks (no answer generation)."""
    try:
        with _service(ctx) as service:
            hits = search_codebase(service, query, repository=repository, file_type=file_type, limit=limit)
    except HANDLED_ERRORS as e:
        _fail("Search failed", e)

    if not hits:
        log_warning("No results found")
        return

    table = Table(title=f"Search results for '{query}'")
    table.add_column("Score", style="yellow", justify="right")
    table.add_column("Type", style="magenta")
    table.add_column("File", style="cyan", overflow="fold")
    table.add_column("Lines", style="blue")
    table.add_column("Name", style="green")
    for hit in hits:
        lines = f"{hit.start_line}-{hit.end_line}" if hit.start_line else ""
        table.add_row(
            f"{hit.score:.3f}",
            hit.chunk_type,
            hit.file_path,
            lines,
            hit.function_name or hit.class_name or "",
        )
    output.print(table)


@main.command()
@click.argument("name", type=str)
@click.pass_context
def stats(ctx, name: str) -> None:
    """Show chunk and file counts for repository NAME."""
    try:
        with _service(ctx) as service:
            repo_stats = get_repository_stats(service, name)
    except HANDLED_ERRORS as e:
        _fail("Failed to get stats", e)

    output.print(f"[bold]{name}[/bold]: {repo_stats.total_chunks} chunks in {repo_stats.total_files} files")
    for title, buckets in (("File types", repo_stats.file_types), ("Chunk types", repo_stats.chunk_types)):
        table = Table(title=title)
        table.add_column("Key", style="cyan")
        table.add_column("Chunks", style="yellow", justify="right")
        for bucket in buckets:
            table.add_row(bucket.key, str(bucket.doc_count))
        output.print(table)


@main.command(name="list")
@click.pass_context
def list_cmd(ctx) -> None:
    """List ingested repositories."""
    try:
        with _service(ctx) as service:
            records = list_repositories(service)
    except HANDLED_ERRORS as e:
        _fail("Failed to list repositories", e)

    if not records:
        log_info("No repositories ingested yet. Run 'codebase-agent ingest NAME --path PATH' first.")
        return

    table = Table(title="Repositories")
    table.add_column("Name", style="cyan bold")
    table.add_column("Source", style="white", overflow="fold")
    table.add_column("Branch", style="green")
    table.add_column("Chunks", style="yellow", justify="right")
    table.add_column("Last Updated", style="blue")
    for record in records:
        table.add_row(
            record.repository_name,
            record.source,
            record.branch,
            str(record.total_chunks),
            record.last_updated.strftime("%Y-%m-%dT%H:%M:%SZ"),
        )
    output.print(table)


@main.command()
@click.argument("name", type=str)
@click.confirmation_option(prompt="Delete all indexed documents for this repository?")
@click.pass_context
def delete(ctx, name: str) -> None:
    """Delete repository NAME from the index."""
    try:
        with _service(ctx) as service:
            deleted = delete_repository(service, name)
    except HANDLED_ERRORS as e:
        _fail("Failed to delete repository", e)
    log_success(f"Deleted {deleted} documents for '{name}'")


@main.command()
@click.argument("session_id", type=str)
@click.option("--limit", default=10, type=click.IntRange(1, 100), show_default=True, help="Most recent interactions to show")
@click.pass_context
def history(ctx, session_id: str, limit: int) -> None:
    """Show the conversation history of SESSION_ID."""
    try:
        with _service(ctx) as service:
            interactions = get_history(service, session_id, limit)
    except HANDLED_ERRORS as e:
        _fail("Failed to load history", e)

    for interaction in interactions:
        output.print(f"[dim]{interaction.timestamp.isoformat()}[/dim]")
        output.print(f"[bold cyan]Q:[/bold cyan] {interaction.query}")
        output.print(Markdown(interaction.response))
        output.print()


@main.command()
@click.option("--repository", "-r", type=str, help="Tailor suggestions to this repository")
@click.pass_context
def suggest(ctx, repository: Optional[str]) -> None:
    """Suggest starter questions."""
    try:
        with _service(ctx) as service:
            questions = get_suggested_questions(service, repository)
    except HANDLED_ERRORS as e:
        _fail("Failed to suggest questions", e)

    for question in questions:
        output.print(f"{SYMBOLS['source']} {question}")


if __name__ == "__main__":
    main()
