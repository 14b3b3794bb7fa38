"""
Batch Processing

Runs many inputs through one AnalysisPipeline with bounded concurrency
and aggregates the results.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
import asyncio
import time

from .contracts.base import ConfigurationError, Error, SignatureEngineError
from .contracts.prediction_contracts import TrajectoryPrediction
from .contracts.signature_contracts import TemporalSignature
from .pipeline import AnalysisPipeline


@dataclass(frozen=True)
class BatchItem:
    """One input of a batch; higher priority runs first."""
    item_id: str
    data: Any
    priority: int = 0
    current_position: Optional[int] = None
    total_expected_length: Optional[int] = None


@dataclass(frozen=True)
class BatchResult:
    item_id: str
    success: bool
    processing_time_ms: float
    signature: Optional[TemporalSignature] = None
    prediction: Optional[TrajectoryPrediction] = None
    error: Optional[Error] = None


@dataclass(frozen=True)
class BatchProgress:
    total: int
    completed: int
    failed: int
    percentage: float
    estimated_remaining_ms: float
    current_item: Optional[str] = None


@dataclass(frozen=True)
class BatchAggregation:
    total_items: int
    success_count: int
    failure_count: int
    total_processing_time_ms: float
    average_processing_time_ms: float
    archetype_distribution: Dict[str, int] = field(default_factory=dict)
    outcome_distribution: Dict[str, int] = field(default_factory=dict)
    average_intensity: float = 0.0
    average_confidence: float = 0.0


@dataclass
class BatchConfig:
    """Configuration for batch processing."""
    concurrency: int = 5
    continue_on_error: bool = True
    on_progress: Optional[Callable[[BatchProgress], None]] = None

    def __post_init__(self):
        if self.concurrency <= 0:
            raise ConfigurationError("concurrency must be > 0")


class BatchProcessingError(SignatureEngineError):
    """A batch item failed while continue_on_error was off."""

    def __init__(self, result: BatchResult):
        self.result = result
        message = result.error.message if result.error else "unknown error"
        super().__init__(f"Batch item {result.item_id} failed: {message}")


class BatchProcessor:
    """
    Bounded-concurrency batch runner.

    Results come back in processing order (priority descending, input
    order for equal priority), whatever order items finish in.
    """

    def __init__(self, pipeline: AnalysisPipeline, config: Optional[BatchConfig] = None):
        self.pipeline = pipeline
        self.config = config or BatchConfig()

    async def process(self, items: Sequence[BatchItem]) -> List[BatchResult]:
        ordered = sorted(items, key=lambda item: item.priority, reverse=True)
        if not ordered:
            return []

        semaphore = asyncio.Semaphore(self.config.concurrency)
        start = time.perf_counter()
        finished: List[BatchResult] = []
        failures: List[BatchResult] = []

        async def run(item: BatchItem) -> Optional[BatchResult]:
            async with semaphore:
                # Items already running finish; nothing new starts after a failure
                if failures:
                    return None
                result = await self._process_item(item)
                if not result.success and not self.config.continue_on_error:
                    failures.append(result)
            finished.append(result)
            self._report_progress(len(ordered), finished, start, item.item_id)
            return result

        results = await asyncio.gather(*(run(item) for item in ordered))

        if failures:
            raise BatchProcessingError(failures[0])

        return list(results)

    async def _process_item(self, item: BatchItem) -> BatchResult:
        start = time.perf_counter()
        context = await self.pipeline.execute(
            item.data,
            current_position=item.current_position,
            total_expected_length=item.total_expected_length
        )
        elapsed = (time.perf_counter() - start) * 1000.0

        return BatchResult(
            item_id=item.item_id,
            success=context.succeeded,
            processing_time_ms=elapsed,
            signature=context.signature if context.succeeded else None,
            prediction=context.prediction if context.succeeded else None,
            error=context.error
        )

    def _report_progress(
        self,
        total: int,
        finished: List[BatchResult],
        start: float,
        current_item: str
    ):
        if self.config.on_progress is None:
            return

        completed = sum(1 for r in finished if r.success)
        failed = len(finished) - completed
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        average_ms = elapsed_ms / len(finished)

        self.config.on_progress(BatchProgress(
            total=total,
            completed=completed,
            failed=failed,
            percentage=len(finished) / total * 100.0,
            estimated_remaining_ms=(total - len(finished)) * average_ms,
            current_item=current_item
        ))

    @staticmethod
    def aggregate(results: Sequence[BatchResult]) -> BatchAggregation:
        successful = [r for r in results if r.success and r.signature is not None]
        total_time = sum(r.processing_time_ms for r in results)

        archetypes: Dict[str, int] = {}
        for result in successful:
            archetype = result.signature.archetype
            archetypes[archetype] = archetypes.get(archetype, 0) + 1

        predictions = [r.prediction for r in successful if r.prediction is not None]
        outcomes: Dict[str, int] = {}
        for prediction in predictions:
            outcomes[prediction.predicted_outcome] = outcomes.get(prediction.predicted_outcome, 0) + 1

        return BatchAggregation(
            total_items=len(results),
            success_count=len(successful),
            failure_count=len(results) - len(successful),
            total_processing_time_ms=total_time,
            average_processing_time_ms=total_time / len(results) if results else 0.0,
            archetype_distribution=archetypes,
            outcome_distribution=outcomes,
            average_intensity=(
                sum(r.signature.intensity for r in successful) / len(successful)
                if successful else 0.0
            ),
            average_confidence=(
                sum(p.confidence for p in predictions) / len(predictions)
                if predictions else 0.0
            )
        )
