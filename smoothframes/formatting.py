"""Rich-based console formatting utilities"""

import logging
from typing import Dict

from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TaskID
from rich.text import Text

from .models import ProgressEvent

console = Console(stderr=True)
log = logging.getLogger(__name__)

def print_check(message: str) -> None:
    """Print a checkmark message in bold green."""
    text = Text("✓ ", style="bold green") + Text(message, style="bold")
    console.print(text)

def print_error(message: str) -> None:
    """Print an error message in bold red."""
    text = Text("✗ ", style="bold red") + Text(message, style="bold")
    console.print(text)

def print_success(message: str) -> None:
    """Print a success message in plain green."""
    text = Text("✓ ", style="green") + Text(message, style="green")
    console.print(text)

def print_header(title: str, width: int = 80) -> None:
    """Print a decorative header."""
    separator = Text("=" * width, style="bold blue")
    padding = (width - len(title)) // 2
    title_line = " " * padding + title
    console.print(separator)
    console.print(title_line, style="bold blue")
    console.print(separator)

def print_separator() -> None:
    """Print a separator line."""
    console.print("-" * 40, style="blue")

def print_info(message: str) -> None:
    """Print an informational message in a subtle style."""
    text = Text("ℹ ", style="bold blue") + Text(message, style="blue")
    console.print(text)


class SegmentProgressDisplay:
    """Live progress bars, one per segment.

    Use as a context manager and pass ``update`` as the progress callback
    of the dispatcher. Updates arrive from worker threads; rich's Progress
    handles its own locking.
    """
    def __init__(self, segment_count: int):
        self.progress = Progress(
            TextColumn("[bold blue]Segment {task.fields[label]}"),
            BarColumn(),
            TextColumn("{task.percentage:>5.1f}%"),
            TextColumn("fps: {task.fields[fps]}"),
            console=console,
            transient=True,
        )
        self._tasks: Dict[int, TaskID] = {}
        for index in range(segment_count):
            self._tasks[index] = self.progress.add_task(
                "interpolate", total=100.0,
                label=f"{index + 1}/{segment_count}", fps="N/A"
            )

    def __enter__(self) -> "SegmentProgressDisplay":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.progress.stop()

    def update(self, event: ProgressEvent) -> None:
        task_id = self._tasks.get(event.segment_index)
        if task_id is None:
            log.debug("Progress for unknown segment %d ignored", event.segment_index)
            return
        fps = f"{event.current_fps:.1f}" if event.current_fps is not None else "N/A"
        self.progress.update(task_id, completed=event.percent, fps=fps)
