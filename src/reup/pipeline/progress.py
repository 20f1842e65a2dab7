"""Aggregate batch progress."""

from collections.abc import Callable

from reup.models.pipeline import BatchProgress, PipelineStage


class BatchProgressTracker:
    """Combines per-stage fractions into one non-decreasing batch fraction.

    Each enabled stage of an item is an equal share of that item; the batch
    fraction is ``(completed items + item fraction) / total items``.
    """

    def __init__(self, total: int, callback: Callable[[BatchProgress], None] | None = None):
        self.total = total
        self.callback = callback
        self.completed = 0
        self.overall = 0.0
        self._index: int | None = None
        self._stages: list[PipelineStage] = []
        self._item_fraction = 0.0

    def start_item(self, index: int, stages: list[PipelineStage]) -> None:
        self._index = index
        self._stages = stages
        self._item_fraction = 0.0

    def update(self, stage: PipelineStage, fraction: float) -> BatchProgress:
        """Report progress of the active stage of the current item."""
        fraction = max(0.0, min(1.0, fraction))
        if stage in self._stages:
            position = self._stages.index(stage)
            item_fraction = (position + fraction) / len(self._stages)
            self._item_fraction = max(self._item_fraction, item_fraction)
        return self._emit(stage)

    def finish_item(self) -> BatchProgress:
        """Count the current item as completed, whatever its outcome."""
        self.completed = min(self.total, self.completed + 1)
        self._item_fraction = 0.0
        return self._emit(None)

    def stage_callback(self, stage: PipelineStage) -> Callable[[float], None]:
        return lambda fraction: self.update(stage, fraction)

    def _snapshot(self, stage: PipelineStage | None = None) -> BatchProgress:
        return BatchProgress(
            completed=self.completed,
            total=self.total,
            current_fraction=self._item_fraction,
            current_index=self._index,
            stage=stage,
            overall=self.overall,
        )

    def _emit(self, stage: PipelineStage | None) -> BatchProgress:
        if self.total > 0:
            raw = (self.completed + self._item_fraction) / self.total
            self.overall = max(self.overall, min(1.0, raw))
        progress = self._snapshot(stage)
        if self.callback:
            self.callback(progress)
        return progress
