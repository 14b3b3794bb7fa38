"""
Prediction Layer

Turns ranked matches into trajectory forecasts.

BOUNDARY ENFORCEMENT:
=====================
This layer MUST NOT:
- Rank or filter a corpus
- Extract or modify signatures
- Keep state between predictions

Predictions are ADVISORY ONLY.
"""

from .trajectory import (
    PredictionConfig,
    TrajectoryPredictor,
    PRIMARY_OUTCOMES,
    SECONDARY_OUTCOMES,
    DRAW_OUTCOMES,
    ARCHETYPE_RECOMMENDATIONS,
    strategic_guidance,
    trajectory_divergence,
    assess_sustainability,
)

__all__ = [
    'PredictionConfig', 'TrajectoryPredictor',
    'PRIMARY_OUTCOMES', 'SECONDARY_OUTCOMES', 'DRAW_OUTCOMES',
    'ARCHETYPE_RECOMMENDATIONS', 'strategic_guidance',
    'trajectory_divergence', 'assess_sustainability',
]
