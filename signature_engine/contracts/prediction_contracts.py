"""
Prediction Contracts

Immutable data structures for matching, archetypes and trajectory
prediction outputs.

CRITICAL: All functions producing these contracts MUST be deterministic.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .base import (
    SignatureValidationError,
    check_non_negative,
    check_range,
    coerce_enum,
)
from .signature_contracts import TemporalSignature


# Floating-point tolerance on the sum of outcome probabilities.
PROBABILITY_SUM_TOLERANCE = 1.01


# =============================================================================
# ENUMS
# =============================================================================

class ArchetypeOutcome(str, Enum):
    """Typical outcome an archetype leads to."""
    PRIMARY_WINS = "primary_wins"
    SECONDARY_WINS = "secondary_wins"
    DRAW = "draw"
    UNCERTAIN = "uncertain"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# ARCHETYPE CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class ArchetypeDefinition:
    """
    A named strategic pattern category with its historical profile.

    Consumed by the trajectory predictor as a confidence and guidance
    input only.
    """
    archetype_id: str
    name: str
    description: str
    success_rate: float
    predicted_outcome: ArchetypeOutcome
    confidence: float
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    related_archetypes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.archetype_id:
            raise SignatureValidationError("archetype_id", self.archetype_id, "must be non-empty")
        check_range("success_rate", self.success_rate, 0.0, 1.0)
        check_range("confidence", self.confidence, 0.0, 1.0)
        object.__setattr__(
            self, "predicted_outcome",
            coerce_enum("predicted_outcome", ArchetypeOutcome, self.predicted_outcome)
        )
        object.__setattr__(self, "keywords", tuple(self.keywords))
        object.__setattr__(self, "related_archetypes", tuple(self.related_archetypes))


@dataclass(frozen=True)
class ArchetypeRegistry:
    """All archetype definitions of one domain."""
    domain: str
    version: str
    archetypes: Tuple[ArchetypeDefinition, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "archetypes", tuple(self.archetypes))

    def get(self, archetype_id: str) -> Optional[ArchetypeDefinition]:
        for definition in self.archetypes:
            if definition.archetype_id == archetype_id:
                return definition
        return None

    def as_mapping(self) -> Dict[str, ArchetypeDefinition]:
        return {d.archetype_id: d for d in self.archetypes}


@dataclass(frozen=True)
class ArchetypeMatchResult:
    """Result of resolving a signature against a registry."""
    archetype: str
    confidence: float
    match_reasons: Tuple[str, ...]
    alternatives: Tuple[Tuple[str, float], ...] = field(default_factory=tuple)


# =============================================================================
# MATCHING CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class HistoricalPattern:
    """A corpus entry: a past signature and how it turned out."""
    pattern_id: str
    signature: TemporalSignature
    outcome: str
    metadata: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PatternMatch:
    """
    A historical signature ranked against a query signature.

    Read-only result of matching; never mutated.
    """
    pattern_id: str
    signature: TemporalSignature
    outcome: str
    similarity: float
    source_metadata: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    def __post_init__(self):
        check_range("similarity", self.similarity, 0.0, 1.0)


# =============================================================================
# TRAJECTORY CONTRACTS
# =============================================================================

@dataclass(frozen=True)
class TrajectoryMilestone:
    """A predicted future point of interest."""
    predicted_index: int
    event: str
    probability: float
    impact: float
    recommendation: Optional[str] = None

    def __post_init__(self):
        check_range("probability", self.probability, 0.0, 1.0)
        check_range("impact", self.impact, -1.0, 1.0)


@dataclass(frozen=True)
class TrajectoryPrediction:
    """
    Forecast built from ranked matches and an optional archetype.

    INVARIANT: outcome probabilities are non-negative and sum to at most
    PROBABILITY_SUM_TOLERANCE.
    """
    predicted_outcome: str
    confidence: float
    primary_win_probability: float
    secondary_win_probability: float
    draw_probability: float
    milestones: Tuple[TrajectoryMilestone, ...]
    strategic_guidance: str
    lookahead_horizon: int
    pattern_sample_size: int

    def __post_init__(self):
        check_range("confidence", self.confidence, 0.0, 1.0)
        for name in (
            "primary_win_probability",
            "secondary_win_probability",
            "draw_probability",
        ):
            check_non_negative(name, getattr(self, name))
        total = (
            self.primary_win_probability
            + self.secondary_win_probability
            + self.draw_probability
        )
        if total > PROBABILITY_SUM_TOLERANCE:
            raise SignatureValidationError(
                "outcome_probabilities", total,
                f"must sum to <= {PROBABILITY_SUM_TOLERANCE}"
            )
        if self.lookahead_horizon < 0:
            raise SignatureValidationError(
                "lookahead_horizon", self.lookahead_horizon, "must be >= 0"
            )
        object.__setattr__(self, "milestones", tuple(self.milestones))


@dataclass(frozen=True)
class SustainabilityAssessment:
    """Whether the current trajectory can be kept up."""
    sustainable: bool
    risk_level: RiskLevel
    reason: str
