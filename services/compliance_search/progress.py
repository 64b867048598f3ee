"""
Search Progress
===============

Progress events emitted while a search runs.

Percentages never decrease within one search. Callback failures are
logged and ignored; they never affect the search.

Version: 0.1.0
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from shared.logging import get_logger

logger = get_logger(__name__)


class ProgressStep(str, Enum):
    """Checkpoints reported to progress callbacks."""

    INITIALIZING = "initializing"
    CACHE_CHECK = "cache_check"
    WAITING = "waiting"
    API_SEARCH = "api_search"
    PROCESSING_APIS = "processing_apis"
    AI_PROCESSING = "ai_processing"
    DEDUPLICATING = "deduplicating"
    AI_CATEGORIZING = "ai_categorizing"
    AI_BATCH_PROCESSING = "ai_batch_processing"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"


STEP_PERCENTAGES: dict[ProgressStep, int] = {
    ProgressStep.INITIALIZING: 5,
    ProgressStep.CACHE_CHECK: 10,
    ProgressStep.WAITING: 15,
    ProgressStep.API_SEARCH: 30,
    ProgressStep.PROCESSING_APIS: 60,
    ProgressStep.AI_PROCESSING: 75,
    ProgressStep.DEDUPLICATING: 78,
    ProgressStep.AI_CATEGORIZING: 82,
    ProgressStep.AI_BATCH_PROCESSING: 82,
    ProgressStep.FINALIZING: 95,
    ProgressStep.COMPLETE: 100,
}

BATCH_PROGRESS_START = 82
BATCH_PROGRESS_END = 88


@dataclass
class ProgressEvent:
    """One progress notification."""

    step: ProgressStep
    percentage: int
    message: str
    recoverable: bool | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


ProgressCallback = Callable[[ProgressEvent], Awaitable[None] | None]


def batch_percentage(completed: int, total: int) -> int:
    """Percentage after ``completed`` of ``total`` classification batches."""
    if total <= 0:
        return BATCH_PROGRESS_END
    span = BATCH_PROGRESS_END - BATCH_PROGRESS_START
    return BATCH_PROGRESS_START + round(span * completed / total)


class ProgressReporter:
    """Delivers progress events for one search to an optional callback."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self.last_percentage = 0
        self.events: list[ProgressEvent] = []

    async def emit(
        self,
        step: ProgressStep,
        message: str,
        percentage: int | None = None,
    ) -> None:
        if percentage is None:
            percentage = STEP_PERCENTAGES.get(step, self.last_percentage)
        percentage = max(percentage, self.last_percentage)
        self.last_percentage = percentage

        await self._deliver(ProgressEvent(step=step, percentage=percentage, message=message))

    async def error(self, message: str, recoverable: bool) -> None:
        """Report a degradation (recoverable) or a failed search."""
        await self._deliver(
            ProgressEvent(
                step=ProgressStep.ERROR,
                percentage=self.last_percentage,
                message=message,
                recoverable=recoverable,
            )
        )

    async def _deliver(self, event: ProgressEvent) -> None:
        self.events.append(event)
        if self._callback is None:
            return

        try:
            result = self._callback(event)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                "progress_callback_failed",
                step=event.step.value,
                error=str(e),
            )
