"""
Analysis Pipeline

Composable extract -> classify -> match -> predict run over one domain
adapter, with per-stage caching, middleware and audit logging.

BOUNDARY ENFORCEMENT:
=====================
- Step failures are captured as Error data on the context, never
  re-raised to the caller
- Caches are owned by the pipeline instance (no module-level state)
- Steps communicate only through PipelineContext
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union
import asyncio
import time

from .adapters.base import DomainAdapter
from .contracts.base import Error, ErrorCode
from .contracts.prediction_contracts import (
    ArchetypeDefinition,
    HistoricalPattern,
    PatternMatch,
    TrajectoryPrediction,
)
from .contracts.signature_contracts import TemporalSignature
from .inference.caching import CacheBundle, match_key, prediction_key, signature_key
from .matching.matcher import PatternMatcher
from .observability import AuditOutcome, ObservabilityEngine
from .prediction.trajectory import TrajectoryPredictor
from .signature.fingerprint import generate_fingerprint


# =============================================================================
# CONTEXT AND STEP TYPES
# =============================================================================

@dataclass
class PipelineContext:
    """Mutable state carried through one pipeline run."""
    input: Any
    current_position: Optional[int] = None
    total_expected_length: Optional[int] = None
    signature: Optional[TemporalSignature] = None
    archetype_definition: Optional[ArchetypeDefinition] = None
    matches: Optional[List[PatternMatch]] = None
    prediction: Optional[TrajectoryPrediction] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timing: Dict[str, float] = field(default_factory=dict)
    error: Optional[Error] = None
    skip_remaining: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def fail(self, code: ErrorCode, message: str, **context: str):
        """Record a failure and stop the remaining steps."""
        self.error = Error.create(code, message, **context)
        self.skip_remaining = True


NextFn = Callable[[], Awaitable[None]]
Middleware = Callable[[PipelineContext, NextFn], Awaitable[None]]


@dataclass
class PipelineStep:
    """A named async step, optionally guarded by a condition."""
    name: str
    execute: Callable[[PipelineContext], Awaitable[None]]
    condition: Optional[Callable[[PipelineContext], bool]] = None
    error_code: ErrorCode = ErrorCode.EXTRACTION_FAILED


@dataclass
class PipelineConfig:
    """Configuration for the analysis pipeline."""
    default_horizon: int = 40
    enable_matching: bool = True
    enable_prediction: bool = True


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def classify_signature(adapter: DomainAdapter, signature: TemporalSignature) -> TemporalSignature:
    """
    Apply the adapter's archetype, regenerating the fingerprint when it
    changes. Empty signatures keep their neutral archetype and fingerprint.
    """
    if signature.is_empty:
        return signature
    archetype = adapter.classify_archetype(signature)
    if archetype == signature.archetype:
        return signature
    return replace(
        signature,
        archetype=archetype,
        fingerprint=generate_fingerprint(
            signature.quadrant_profile,
            signature.temporal_flow,
            archetype,
            signature.intensity
        )
    )


# =============================================================================
# PIPELINE
# =============================================================================

class AnalysisPipeline:
    """
    Runs one domain adapter's input through the analysis stages.

    Default steps: extract, classify, match, predict. Matching and
    prediction can be switched off in PipelineConfig. Custom steps may
    be appended or inserted; middleware wraps the whole step run.
    """

    def __init__(
        self,
        adapter: DomainAdapter,
        corpus: Optional[Sequence[HistoricalPattern]] = None,
        matcher: Optional[PatternMatcher] = None,
        predictor: Optional[TrajectoryPredictor] = None,
        caches: Optional[CacheBundle] = None,
        observability: Optional[ObservabilityEngine] = None,
        config: Optional[PipelineConfig] = None
    ):
        self.adapter = adapter
        self.matcher = matcher or PatternMatcher()
        self.predictor = predictor or TrajectoryPredictor()
        self.caches = caches or CacheBundle()
        self.observability = observability or ObservabilityEngine()
        self.config = config or PipelineConfig()
        self._corpus: List[HistoricalPattern] = list(corpus or [])
        self._corpus_version = 0
        self._steps: List[PipelineStep] = []
        self._middleware: List[Middleware] = []
        self._initialize_default_steps()

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def _initialize_default_steps(self):
        self.add_step(PipelineStep(
            name="extract",
            execute=self._extract,
            error_code=ErrorCode.EXTRACTION_FAILED
        ))
        self.add_step(PipelineStep(
            name="classify",
            execute=self._classify,
            condition=lambda ctx: ctx.signature is not None,
            error_code=ErrorCode.CLASSIFICATION_FAILED
        ))
        self.add_step(PipelineStep(
            name="match",
            execute=self._match,
            condition=lambda ctx: (
                self.config.enable_matching and ctx.signature is not None
            ),
            error_code=ErrorCode.MATCHING_FAILED
        ))
        self.add_step(PipelineStep(
            name="predict",
            execute=self._predict,
            condition=lambda ctx: (
                self.config.enable_prediction
                and ctx.signature is not None
                and ctx.matches is not None
            ),
            error_code=ErrorCode.PREDICTION_FAILED
        ))

    def add_step(self, step: PipelineStep) -> AnalysisPipeline:
        self._steps.append(step)
        return self

    def insert_step(self, index: int, step: PipelineStep) -> AnalysisPipeline:
        self._steps.insert(index, step)
        return self

    def use(self, middleware: Middleware) -> AnalysisPipeline:
        self._middleware.append(middleware)
        return self

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self._steps]

    @property
    def corpus(self) -> List[HistoricalPattern]:
        return list(self._corpus)

    def set_corpus(self, corpus: Sequence[HistoricalPattern]):
        """Replace the corpus; cached matches and predictions are dropped."""
        self._corpus = list(corpus)
        self._corpus_version += 1
        self.caches.matches.clear()
        self.caches.predictions.clear()

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(
        self,
        raw_input: Any,
        current_position: Optional[int] = None,
        total_expected_length: Optional[int] = None
    ) -> PipelineContext:
        """Run the pipeline; failures are reported on context.error."""
        context = PipelineContext(
            input=raw_input,
            current_position=current_position,
            total_expected_length=total_expected_length
        )
        start = time.perf_counter()

        try:
            await self._build_chain(context)()
        except Exception as exc:
            # Steps record their own failures; this catches middleware
            if context.error is None:
                context.fail(ErrorCode.PIPELINE_FAILED, _describe(exc))

        context.timing["total_ms"] = _elapsed_ms(start)
        self.observability.collect_metric("pipeline_duration_ms", context.timing["total_ms"])
        self.observability.log_audit(
            action="execute",
            entity_id=context.signature.fingerprint if context.signature else None,
            outcome=AuditOutcome.SUCCESS if context.succeeded else AuditOutcome.FAILURE,
            details=context.error.message if context.error else "",
            stage="pipeline"
        )
        return context

    def _build_chain(self, context: PipelineContext) -> NextFn:
        middleware = list(self._middleware)
        index = 0

        async def run_next():
            nonlocal index
            if context.skip_remaining:
                return
            if index < len(middleware):
                current = middleware[index]
                index += 1
                await current(context, run_next)
            else:
                await self._execute_steps(context)

        return run_next

    async def _execute_steps(self, context: PipelineContext):
        for step in self._steps:
            if context.skip_remaining:
                break
            if step.condition is not None and not step.condition(context):
                continue
            try:
                await step.execute(context)
            except Exception as exc:
                context.fail(step.error_code, _describe(exc), step=step.name)
                self.observability.log_audit(
                    action=step.name,
                    outcome=AuditOutcome.FAILURE,
                    details=_describe(exc),
                    stage="pipeline"
                )

    # -------------------------------------------------------------------------
    # Default steps
    # -------------------------------------------------------------------------

    def _cache_lookup(self, cache, key: str):
        value = cache.get(key)
        metric = "cache_hits_total" if value is not None else "cache_misses_total"
        self.observability.collect_metric(metric, 1, {"cache": cache.name})
        return value

    async def _extract(self, ctx: PipelineContext):
        start = time.perf_counter()
        states = self.adapter.parse_input(ctx.input)
        if ctx.current_position is None:
            ctx.current_position = len(states)
        if ctx.total_expected_length is None:
            ctx.total_expected_length = ctx.current_position + self.config.default_horizon

        key = signature_key([self.adapter.render_state(s) for s in states])
        cached = self._cache_lookup(self.caches.signatures, key)
        if cached is not None:
            ctx.signature = cached
            ctx.metadata["signature_from_cache"] = True
            self.observability.log_audit(
                "extract", cached.fingerprint, AuditOutcome.CACHE_HIT, stage="extraction"
            )
        else:
            ctx.signature = self.adapter.extract_signature(states)
            self.caches.signatures.set(key, ctx.signature)
            self.observability.log_audit(
                "extract", ctx.signature.fingerprint,
                details=f"{len(states)} states", stage="extraction"
            )

        ctx.timing["extraction_ms"] = _elapsed_ms(start)
        self.observability.collect_metric("extraction_duration_ms", ctx.timing["extraction_ms"])

    async def _classify(self, ctx: PipelineContext):
        signature = classify_signature(self.adapter, ctx.signature)
        ctx.signature = signature
        ctx.archetype_definition = self.adapter.get_archetype_registry().get(signature.archetype)
        self.observability.log_audit(
            "classify", signature.fingerprint, details=signature.archetype, stage="classification"
        )

    async def _match(self, ctx: PipelineContext):
        start = time.perf_counter()
        options = {
            "min_similarity": self.matcher.config.min_similarity,
            "limit": self.matcher.config.limit,
            "corpus_version": self._corpus_version,
            "corpus_size": len(self._corpus),
        }
        key = match_key(ctx.signature.fingerprint, options)
        cached = self._cache_lookup(self.caches.matches, key)
        if cached is not None:
            ctx.matches = list(cached)
            outcome = AuditOutcome.CACHE_HIT
        else:
            ctx.matches = self.matcher.find_matches(ctx.signature, self._corpus)
            self.caches.matches.set(key, tuple(ctx.matches))
            outcome = AuditOutcome.SUCCESS

        ctx.timing["matching_ms"] = _elapsed_ms(start)
        self.observability.collect_metric("matching_duration_ms", ctx.timing["matching_ms"])
        self.observability.collect_metric("corpus_size", len(self._corpus))
        self.observability.log_audit(
            "match", ctx.signature.fingerprint, outcome,
            details=f"{len(ctx.matches)} matches", stage="matching"
        )

    async def _predict(self, ctx: PipelineContext):
        start = time.perf_counter()
        key = prediction_key(
            ctx.signature.fingerprint,
            ctx.current_position
        ) + f"_{ctx.total_expected_length}_{self._corpus_version}"
        cached = self._cache_lookup(self.caches.predictions, key)
        if cached is not None:
            ctx.prediction = cached
            outcome = AuditOutcome.CACHE_HIT
        else:
            ctx.prediction = self.predictor.predict(
                ctx.signature,
                ctx.matches,
                ctx.archetype_definition,
                ctx.current_position,
                ctx.total_expected_length
            )
            self.caches.predictions.set(key, ctx.prediction)
            outcome = AuditOutcome.SUCCESS

        ctx.timing["prediction_ms"] = _elapsed_ms(start)
        self.observability.collect_metric("prediction_duration_ms", ctx.timing["prediction_ms"])
        self.observability.log_audit(
            "predict", ctx.signature.fingerprint, outcome,
            details=ctx.prediction.predicted_outcome, stage="prediction"
        )

    # -------------------------------------------------------------------------
    # Cache access
    # -------------------------------------------------------------------------

    def get_cache_stats(self):
        return self.caches.get_stats()

    def clear_cache(self):
        self.caches.clear_all()


# =============================================================================
# BUILT-IN MIDDLEWARE
# =============================================================================

def validation_middleware(
    validator: Callable[[Any], Union[bool, str]]
) -> Middleware:
    """
    Stop the run when validator returns False (generic message) or a
    string (used as the message).
    """
    async def middleware(ctx: PipelineContext, next_fn: NextFn):
        result = validator(ctx.input)
        if result is False:
            ctx.fail(ErrorCode.INVALID_INPUT, "Input validation failed")
            return
        if isinstance(result, str):
            ctx.fail(ErrorCode.INVALID_INPUT, result)
            return
        await next_fn()

    return middleware


def timeout_middleware(timeout_seconds: float) -> Middleware:
    async def middleware(ctx: PipelineContext, next_fn: NextFn):
        try:
            await asyncio.wait_for(next_fn(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            ctx.fail(
                ErrorCode.TIMEOUT,
                f"Pipeline timeout after {timeout_seconds}s",
                timeout_seconds=str(timeout_seconds)
            )

    return middleware


def audit_middleware(observability: ObservabilityEngine) -> Middleware:
    """Record the start and end of every run on the given engine."""
    async def middleware(ctx: PipelineContext, next_fn: NextFn):
        observability.log_audit("run_started", stage="pipeline")
        await next_fn()
        observability.log_audit(
            "run_finished",
            entity_id=ctx.signature.fingerprint if ctx.signature else None,
            outcome=AuditOutcome.SUCCESS if ctx.succeeded else AuditOutcome.FAILURE,
            details=ctx.error.message if ctx.error else "",
            stage="pipeline"
        )

    return middleware


def create_pipeline(adapter: DomainAdapter, **kwargs) -> AnalysisPipeline:
    return AnalysisPipeline(adapter, **kwargs)
