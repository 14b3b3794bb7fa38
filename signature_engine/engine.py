"""
Engine Orchestration Module

Single entry point wiring the signature, matching, prediction, cache
and observability layers for one domain adapter.

DESIGN PRINCIPLES:
==================
1. Layers communicate ONLY through contracts
2. Every engine instance owns its caches (no global singletons)
3. All operations are traceable through observability
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import time

from .adapters.base import DomainAdapter
from .adapters.events import EventSequenceAdapter
from .config import EngineConfig
from .contracts.cache_contracts import CacheStats
from .contracts.prediction_contracts import (
    ArchetypeDefinition,
    HistoricalPattern,
    PatternMatch,
    SustainabilityAssessment,
    TrajectoryPrediction,
)
from .contracts.signature_contracts import TemporalSignature
from .inference.caching import BoundedCache, CacheBundle
from .matching.matcher import PatternMatcher
from .observability import ObservabilityEngine
from .pipeline import AnalysisPipeline, PipelineContext, classify_signature
from .prediction.trajectory import TrajectoryPredictor, assess_sustainability, trajectory_divergence


class SignatureEngine:
    """
    Unified engine facade.

    LAYER FLOW:
    ===========
    1. Adapter: raw input -> ordered states
    2. Signature: states -> TemporalSignature
    3. Matching: signature x corpus -> ranked PatternMatches
    4. Prediction: matches -> TrajectoryPrediction
    5. Observability: records all stage activity
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        adapter: Optional[DomainAdapter] = None,
        corpus: Optional[Sequence[HistoricalPattern]] = None,
        clock: Callable[[], float] = time.time
    ):
        self._config = config or EngineConfig()
        self._adapter = adapter or EventSequenceAdapter(
            extraction_config=self._config.extraction,
            similarity_weights=self._config.matching.weights
        )
        self._matcher = PatternMatcher(self._config.matching)
        self._predictor = TrajectoryPredictor(self._config.prediction)
        self._observability = ObservabilityEngine(self._config.observability)
        self._caches = CacheBundle(
            signatures=BoundedCache(self._config.signature_cache, clock=clock),
            matches=BoundedCache(self._config.match_cache, clock=clock),
            predictions=BoundedCache(self._config.prediction_cache, clock=clock)
        )
        self._pipeline = AnalysisPipeline(
            self._adapter,
            corpus=corpus,
            matcher=self._matcher,
            predictor=self._predictor,
            caches=self._caches,
            observability=self._observability,
            config=self._config.pipeline
        )

    # =========================================================================
    # COMPONENT ACCESS
    # =========================================================================

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def adapter(self) -> DomainAdapter:
        return self._adapter

    @property
    def pipeline(self) -> AnalysisPipeline:
        return self._pipeline

    @property
    def observability(self) -> ObservabilityEngine:
        return self._observability

    # =========================================================================
    # SINGLE-STAGE OPERATIONS
    # =========================================================================

    def extract(self, raw_input: Any) -> TemporalSignature:
        """Parse, extract and classify without touching caches."""
        states = self._adapter.parse_input(raw_input)
        signature = classify_signature(self._adapter, self._adapter.extract_signature(states))
        self._observability.log_audit(
            "extract", signature.fingerprint,
            details=f"{len(states)} states", stage="extraction"
        )
        return signature

    def similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        return self._adapter.calculate_similarity(a, b)

    def find_matches(
        self,
        signature: TemporalSignature,
        corpus: Optional[Iterable[HistoricalPattern]] = None,
        min_similarity: Optional[float] = None,
        limit: Optional[int] = None,
        archetypes: Optional[Iterable[str]] = None,
        outcomes: Optional[Iterable[str]] = None
    ) -> List[PatternMatch]:
        """Rank the given corpus, or the engine's own corpus when none is given."""
        patterns = self._pipeline.corpus if corpus is None else list(corpus)
        matches = self._matcher.find_matches(
            signature, patterns,
            min_similarity=min_similarity,
            limit=limit,
            archetypes=archetypes,
            outcomes=outcomes
        )
        self._observability.log_audit(
            "match", signature.fingerprint,
            details=f"{len(matches)} of {len(patterns)} patterns", stage="matching"
        )
        return matches

    def outcome_probabilities(self, matches: Sequence[PatternMatch]) -> Dict[str, float]:
        return self._matcher.outcome_probabilities(matches)

    def predict(
        self,
        signature: TemporalSignature,
        matches: Sequence[PatternMatch],
        current_position: int,
        total_expected_length: int,
        archetype: Optional[ArchetypeDefinition] = None
    ) -> TrajectoryPrediction:
        if archetype is None:
            archetype = self._adapter.get_archetype_registry().get(signature.archetype)
        prediction = self._predictor.predict(
            signature, matches, archetype, current_position, total_expected_length
        )
        self._observability.log_audit(
            "predict", signature.fingerprint,
            details=prediction.predicted_outcome, stage="prediction"
        )
        return prediction

    def divergence(self, signature: TemporalSignature, matches: Sequence[PatternMatch]) -> float:
        return trajectory_divergence(signature, matches)

    def sustainability(self, signature: TemporalSignature) -> SustainabilityAssessment:
        return assess_sustainability(signature)

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def set_corpus(self, corpus: Sequence[HistoricalPattern]):
        self._pipeline.set_corpus(corpus)

    async def analyze(
        self,
        raw_input: Any,
        current_position: Optional[int] = None,
        total_expected_length: Optional[int] = None
    ) -> PipelineContext:
        return await self._pipeline.execute(raw_input, current_position, total_expected_length)

    # =========================================================================
    # CACHE AND AUDIT
    # =========================================================================

    def cache_stats(self) -> Dict[str, CacheStats]:
        return self._caches.get_stats()

    def clear_caches(self):
        self._caches.clear_all()
        self._observability.log_audit("clear", stage="cache")

    def audit_report(self) -> Dict:
        return self._observability.generate_audit_report()
