"""Console output helpers shared by the CLI and the ingestion pipeline."""

from typing import Any, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .symbols import SYMBOLS

# Status output goes to stderr so answers on stdout stay pipeable
console = Console(stderr=True, force_terminal=True, legacy_windows=False)
error_console = Console(stderr=True, force_terminal=True, legacy_windows=False)


def create_progress_bar(description: str = "Indexing", total: Optional[int] = None) -> tuple[Progress, TaskID]:
    """Create a progress bar for ingestion batches.

    Args:
        description: Description text for the progress bar
        total: Total number of chunks (None for indeterminate)

    Returns:
        Tuple of (Progress instance, TaskID) for updating
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )

    task_id = progress.add_task(description, total=total)
    return progress, task_id


def update_progress(
    progress: Progress,
    task_id: TaskID,
    advance: int = 1,
    description: Optional[str] = None,
) -> None:
    """Advance a progress bar, optionally replacing its description."""
    if description:
        progress.update(task_id, description=description)
    progress.advance(task_id, advance)


def log_info(message: str, **kwargs: Any) -> None:
    """Log an info message."""
    console.print(f"[blue]{SYMBOLS['info']}[/blue] {message}", **kwargs)


def log_warning(message: str, **kwargs: Any) -> None:
    """Log a warning message."""
    console.print(f"[yellow]{SYMBOLS['warning']}[/yellow] {message}", **kwargs)


def log_error(message: str, **kwargs: Any) -> None:
    """Log an error message to the error console."""
    error_console.print(f"[red]{SYMBOLS['error']}[/red] {message}", **kwargs)


def log_success(message: str, **kwargs: Any) -> None:
    """Log a success message."""
    console.print(f"[green]{SYMBOLS['success']}[/green] {message}", **kwargs)
