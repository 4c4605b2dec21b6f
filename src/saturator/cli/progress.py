"""Rich progress bars driven by per-request completion notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from saturator.engine.runner import MEASURED_PHASE, WARMUP_PHASE

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console
    from rich.progress import TaskID

    from saturator.engine.protocol import ProgressObserver

_PHASE_LABELS = {
    WARMUP_PHASE: "Warm-up",
    MEASURED_PHASE: "Measuring",
}


class RichProgressObserver:
    """Advances one rich progress task per completed request."""

    def __init__(self, progress: Progress, task_id: TaskID) -> None:
        self._progress = progress
        self._task_id = task_id

    def on_request_completed(self) -> None:
        self._progress.advance(self._task_id)


def build_progress(console: Console) -> Progress:
    """Create the progress display used by ``saturator run``."""
    return Progress(
        SpinnerColumn(style="green"),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def observer_factory(progress: Progress) -> Callable[[str, int], ProgressObserver]:
    """Return a factory adding one progress bar per phase.

    Each phase gets its own bar and total, so warm-up and measured
    requests are counted independently.
    """

    def _observer_for(phase: str, total: int) -> ProgressObserver:
        task_id = progress.add_task(_PHASE_LABELS.get(phase, phase), total=total)
        return RichProgressObserver(progress, task_id)

    return _observer_for
