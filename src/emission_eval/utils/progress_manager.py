"""
Progress tracking for the evaluation loop.

Per-utterance diagnostics go through `print`, which writes above the live
progress bar instead of tearing it.
"""

from typing import Optional

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


class ProgressManager:
    """Manages the progress bar over the utterances of the test set."""

    def __init__(self, console: Optional[Console] = None):
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
        )
        self.sample_task: TaskID | None = None

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()

    @property
    def console(self) -> Console:
        return self.progress.console

    def start_sample_processing(
        self, dataset_name: str, total_samples: Optional[int]
    ) -> None:
        """Start progress tracking for the utterances of a test set."""
        self.sample_task = self.progress.add_task(
            f"[yellow]Evaluating {dataset_name}...", total=total_samples
        )

    def advance_sample(self) -> None:
        """Advance the sample progress bar."""
        if self.sample_task is not None:
            self.progress.advance(self.sample_task)

    def finish_sample_processing(self) -> None:
        """Remove the sample progress task."""
        if self.sample_task is not None:
            self.progress.remove_task(self.sample_task)
            self.sample_task = None

    def print(self, *objects, **kwargs) -> None:
        self.progress.console.print(*objects, **kwargs)
