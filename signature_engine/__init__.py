"""
Temporal Signature Engine

Domain-agnostic extraction of temporal signatures from activity
sequences, similarity matching against a historical corpus, and
trajectory prediction.

LAYERS:
=======
contracts/    Immutable data contracts and errors
signature/    Phase, quadrant, critical moment, fingerprint, extractor
archetypes/   Archetype resolution
matching/     Similarity and corpus ranking
prediction/   Trajectory forecasting
inference/    Bounded caches
adapters/     DomainAdapter interface and the generic event adapter
"""

from .config import EngineConfig
from .engine import SignatureEngine
from .pipeline import AnalysisPipeline, PipelineContext
from .batch import BatchProcessor, BatchItem, BatchConfig
from .signature import SignatureExtractor, ExtractionConfig
from .matching import PatternMatcher, MatchingConfig
from .prediction import TrajectoryPredictor, PredictionConfig
from .inference import BoundedCache, CacheConfig
from .adapters import DomainAdapter, EventSequenceAdapter

__version__ = "0.1.0"

__all__ = [
    'EngineConfig', 'SignatureEngine',
    'AnalysisPipeline', 'PipelineContext',
    'BatchProcessor', 'BatchItem', 'BatchConfig',
    'SignatureExtractor', 'ExtractionConfig',
    'PatternMatcher', 'MatchingConfig',
    'TrajectoryPredictor', 'PredictionConfig',
    'BoundedCache', 'CacheConfig',
    'DomainAdapter', 'EventSequenceAdapter',
]
