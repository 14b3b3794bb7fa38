"""
Matching Layer

Compares signatures and ranks historical patterns.

BOUNDARY ENFORCEMENT:
=====================
This layer MUST NOT:
- Extract signatures from raw events
- Forecast trajectories
- Mutate corpus entries (matches are new read-only objects)
"""

from .similarity import (
    SimilarityWeights,
    DEFAULT_WEIGHTS,
    quadrant_similarity,
    temporal_flow_similarity,
    signature_similarity,
)
from .matcher import (
    MatchingConfig,
    PatternMatcher,
    outcome_probabilities,
    most_likely_outcome,
    pattern_diversity,
    match_confidence,
)

__all__ = [
    'SimilarityWeights', 'DEFAULT_WEIGHTS', 'quadrant_similarity',
    'temporal_flow_similarity', 'signature_similarity',
    'MatchingConfig', 'PatternMatcher', 'outcome_probabilities',
    'most_likely_outcome', 'pattern_diversity', 'match_confidence',
]
