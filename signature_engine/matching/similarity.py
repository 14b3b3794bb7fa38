"""
Signature Similarity

Distance-inverted similarity scores between signatures, all in [0, 1].

All functions are symmetric: similarity(a, b) == similarity(b, a).
"""

from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from ..contracts.base import ConfigurationError, clamp
from ..contracts.signature_contracts import (
    QuadrantProfile,
    TemporalFlow,
    TemporalSignature,
)


@dataclass(frozen=True)
class SimilarityWeights:
    """
    Component weights for signature_similarity.

    Normalized by their sum, so only the ratios matter.
    """
    quadrant: float = 0.4
    temporal: float = 0.3
    archetype: float = 0.1
    intensity: float = 0.1
    direction: float = 0.1

    def __post_init__(self):
        values = (self.quadrant, self.temporal, self.archetype,
                  self.intensity, self.direction)
        if any(v < 0 for v in values):
            raise ConfigurationError("similarity weights must be >= 0")
        if sum(values) <= 0:
            raise ConfigurationError("similarity weights must not all be zero")

    @property
    def total(self) -> float:
        return self.quadrant + self.temporal + self.archetype + self.intensity + self.direction


DEFAULT_WEIGHTS = SimilarityWeights()


def quadrant_similarity(a: QuadrantProfile, b: QuadrantProfile) -> float:
    """1 - (sum of absolute per-region differences) / 4."""
    distance = float(np.sum(np.abs(np.array(a.as_tuple()) - np.array(b.as_tuple()))))
    return clamp(1.0 - distance / 4.0)


def temporal_flow_similarity(a: TemporalFlow, b: TemporalFlow) -> float:
    """Phase closeness 0.5, momentum closeness 0.3, trend agreement 0.2."""
    phases_a = np.array([a.opening, a.middle, a.ending])
    phases_b = np.array([b.opening, b.middle, b.ending])
    phase_similarity = 1.0 - float(np.sum(np.abs(phases_a - phases_b))) / 3.0
    momentum_similarity = 1.0 - abs(a.momentum - b.momentum) / 2.0
    trend_match = 1.0 if a.trend == b.trend else 0.0

    return clamp(
        phase_similarity * 0.5
        + momentum_similarity * 0.3
        + trend_match * 0.2
    )


def signature_similarity(
    a: TemporalSignature,
    b: TemporalSignature,
    weights: SimilarityWeights = DEFAULT_WEIGHTS
) -> float:
    archetype_match = 1.0 if a.archetype == b.archetype else 0.0
    intensity_similarity = 1.0 - abs(a.intensity - b.intensity)
    direction_match = 1.0 if a.flow_direction == b.flow_direction else 0.0

    weighted = (
        quadrant_similarity(a.quadrant_profile, b.quadrant_profile) * weights.quadrant
        + temporal_flow_similarity(a.temporal_flow, b.temporal_flow) * weights.temporal
        + archetype_match * weights.archetype
        + intensity_similarity * weights.intensity
        + direction_match * weights.direction
    )
    return clamp(weighted / weights.total)
