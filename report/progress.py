"""
Progress reporting for long-running enrichment steps.
"""
import threading
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn


class ProgressBar:
    """Thin wrapper over rich.progress with the init/tick/terminate cycle the pipeline uses. Ticks are thread-safe."""

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        self.quiet = quiet
        self.console = console or Console(stderr=True)
        self._progress: Optional[Progress] = None
        self._task = None
        self._lock = threading.Lock()
        self.ticks = 0

    def init(self, title: str, total: int):
        self.terminate()
        self._progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
            disable=self.quiet,
        )
        self.ticks = 0
        self._progress.start()
        self._task = self._progress.add_task(title, total=total)

    def tick(self, count: int = 1):
        with self._lock:
            self.ticks += count
        if self._progress is not None:
            self._progress.advance(self._task, count)

    def terminate(self):
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
