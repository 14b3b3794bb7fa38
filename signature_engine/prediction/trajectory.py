"""
Trajectory Predictor

Forecasts where a sequence is heading from its ranked historical matches
and, when available, its archetype definition.

BOUNDARY ENFORCEMENT:
- Consumes PatternMatch results; never ranks a corpus itself
- Output is advisory; no state is kept between calls
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import math

from ..contracts.base import ConfigurationError, clamp
from ..contracts.prediction_contracts import (
    ArchetypeDefinition,
    ArchetypeOutcome,
    PatternMatch,
    RiskLevel,
    SustainabilityAssessment,
    TrajectoryMilestone,
    TrajectoryPrediction,
)
from ..contracts.signature_contracts import DominantForce, TemporalSignature, Trend
from ..matching.matcher import match_confidence, most_likely_outcome, outcome_probabilities


PRIMARY_OUTCOMES = ("primary_wins", "white_wins", "success", "win")
SECONDARY_OUTCOMES = ("secondary_wins", "black_wins", "failure", "loss")
DRAW_OUTCOMES = ("draw", "neutral", "uncertain", "tie")

ARCHETYPE_RECOMMENDATIONS: Dict[str, str] = {
    "aggressive_expansion": "Sustain the pace while consolidating gains",
    "maintenance_mode": "Look for a catalyst to avoid stagnation",
    "chaotic_evolution": "Reduce scope until the pattern stabilizes",
    "controlled_decline": "Decide whether to intervene or wind down deliberately",
    "concentrated_activity": "Spread effort beyond the dominant region",
    "balanced_approach": "Keep the balance while probing for an opening",
    "standard_evolution": "Continue current strategy with vigilance",
}
DEFAULT_RECOMMENDATION = "Continue current strategy with vigilance"


@dataclass
class PredictionConfig:
    """Configuration for trajectory prediction."""
    match_confidence_weight: float = 0.6
    archetype_confidence_weight: float = 0.4
    default_archetype_confidence: float = 0.5
    max_lookahead: int = 80
    min_sample_size: int = 5
    max_milestones: int = 5
    max_folded_moments: int = 2
    default_outcome_probability: float = 0.33
    primary_outcomes: Tuple[str, ...] = PRIMARY_OUTCOMES
    secondary_outcomes: Tuple[str, ...] = SECONDARY_OUTCOMES
    draw_outcomes: Tuple[str, ...] = DRAW_OUTCOMES
    archetype_recommendations: Mapping[str, str] = field(
        default_factory=lambda: dict(ARCHETYPE_RECOMMENDATIONS)
    )

    def __post_init__(self):
        if self.match_confidence_weight < 0 or self.archetype_confidence_weight < 0:
            raise ConfigurationError("confidence weights must be >= 0")
        if self.max_lookahead < 0:
            raise ConfigurationError("max_lookahead must be >= 0")
        if self.min_sample_size <= 0:
            raise ConfigurationError("min_sample_size must be > 0")
        if self.max_milestones < 0:
            raise ConfigurationError("max_milestones must be >= 0")
        if not 0.0 <= self.default_outcome_probability <= 0.5:
            raise ConfigurationError("default_outcome_probability must be in [0, 0.5]")


# =============================================================================
# FORMATTING
# =============================================================================

def format_label(value: str) -> str:
    """snake_case id -> Title Case label."""
    return " ".join(word.capitalize() for word in value.replace("_", " ").split(" ") if word)


def strategic_guidance(
    signature: TemporalSignature,
    archetype: Optional[ArchetypeDefinition],
    probabilities: Mapping[str, float]
) -> str:
    parts: List[str] = []

    if archetype is not None:
        parts.append(f'Pattern matches "{archetype.name}" archetype')
        if archetype.success_rate > 0.6:
            parts.append(
                f"historically successful {round(archetype.success_rate * 100)}% of the time"
            )

    trend = signature.temporal_flow.trend
    if trend == Trend.ACCELERATING:
        parts.append("Momentum is building - capitalize on current trajectory")
    elif trend == Trend.DECLINING:
        parts.append("Activity declining - consider repositioning or intervention")
    elif trend == Trend.VOLATILE:
        parts.append("High volatility detected - exercise caution")
    else:
        parts.append("Stable trajectory - maintain current course")

    if signature.dominant_force != DominantForce.BALANCED:
        side = "Primary" if signature.dominant_force == DominantForce.PRIMARY else "Secondary"
        parts.append(f"{side} force has initiative")

    if probabilities:
        top_outcome, top_probability = max(probabilities.items(), key=lambda item: item[1])
        if top_probability > 0.5:
            parts.append(
                f"{round(top_probability * 100)}% trajectory toward {format_label(top_outcome)}"
            )

    return ". ".join(parts) + "."


# =============================================================================
# COMPANION ASSESSMENTS
# =============================================================================

def trajectory_divergence(
    signature: TemporalSignature,
    matches: Sequence[PatternMatch]
) -> float:
    """
    Distance of the signature's intensity and momentum from the match
    averages. No matches is maximum divergence (1).
    """
    if not matches:
        return 1.0
    average_intensity = sum(m.signature.intensity for m in matches) / len(matches)
    average_momentum = sum(m.signature.temporal_flow.momentum for m in matches) / len(matches)

    intensity_divergence = abs(signature.intensity - average_intensity)
    momentum_divergence = abs(signature.temporal_flow.momentum - average_momentum) / 2.0
    return (intensity_divergence + momentum_divergence) / 2.0


def assess_sustainability(signature: TemporalSignature) -> SustainabilityAssessment:
    """Decision table over trend, intensity, momentum and severe moments."""
    flow = signature.temporal_flow

    if flow.trend == Trend.ACCELERATING and signature.intensity > 0.8:
        return SustainabilityAssessment(
            sustainable=False,
            risk_level=RiskLevel.HIGH,
            reason="High intensity with accelerating trend may lead to burnout"
        )

    if flow.trend == Trend.DECLINING and flow.momentum < -0.5:
        return SustainabilityAssessment(
            sustainable=False,
            risk_level=RiskLevel.HIGH,
            reason="Declining trend with negative momentum indicates loss of direction"
        )

    severe = [m for m in signature.critical_moments if m.severity > 0.7]
    if len(severe) > 3:
        return SustainabilityAssessment(
            sustainable=False,
            risk_level=RiskLevel.MEDIUM,
            reason="Too many critical moments indicate instability"
        )

    if flow.trend == Trend.VOLATILE:
        return SustainabilityAssessment(
            sustainable=True,
            risk_level=RiskLevel.MEDIUM,
            reason="Volatile but may stabilize"
        )

    return SustainabilityAssessment(
        sustainable=True,
        risk_level=RiskLevel.LOW,
        reason="Current trajectory appears sustainable"
    )


# =============================================================================
# PREDICTOR
# =============================================================================

class TrajectoryPredictor:
    """
    Match-driven trajectory forecasting.

    Guarantees:
    - primary + secondary + draw probabilities never exceed 1
    - every milestone lies in (current_position, total_expected_length]
    - lookahead never exceeds the remaining distance
    """

    def __init__(self, config: Optional[PredictionConfig] = None):
        self.config = config or PredictionConfig()
        self._version = "1.0.0"

    def predict(
        self,
        signature: TemporalSignature,
        matches: Sequence[PatternMatch],
        archetype: Optional[ArchetypeDefinition],
        current_position: int,
        total_expected_length: int
    ) -> TrajectoryPrediction:
        cfg = self.config
        probabilities = outcome_probabilities(matches)

        archetype_confidence = (
            archetype.confidence if archetype is not None
            else cfg.default_archetype_confidence
        )
        confidence = clamp(
            match_confidence(matches, cfg.min_sample_size) * cfg.match_confidence_weight
            + archetype_confidence * cfg.archetype_confidence_weight
        )

        primary, secondary, draw = self.win_probabilities(probabilities)

        remaining = max(0, total_expected_length - current_position)
        lookahead = max(0, min(remaining, math.floor(cfg.max_lookahead * confidence)))

        return TrajectoryPrediction(
            predicted_outcome=most_likely_outcome(matches) or ArchetypeOutcome.UNCERTAIN.value,
            confidence=confidence,
            primary_win_probability=primary,
            secondary_win_probability=secondary,
            draw_probability=draw,
            milestones=tuple(self.milestones(signature, current_position, total_expected_length)),
            strategic_guidance=strategic_guidance(signature, archetype, probabilities),
            lookahead_horizon=lookahead,
            pattern_sample_size=len(matches)
        )

    def win_probabilities(self, probabilities: Mapping[str, float]) -> Tuple[float, float, float]:
        """
        Collapse domain outcome names into primary / secondary / draw.

        When none of the known outcome names are present both sides fall
        back to the default probability. Draw takes whatever is left.
        """
        cfg = self.config
        known = set(cfg.primary_outcomes) | set(cfg.secondary_outcomes) | set(cfg.draw_outcomes)
        if not any(name in probabilities for name in known):
            primary = cfg.default_outcome_probability
            secondary = cfg.default_outcome_probability
        else:
            primary = sum(probabilities.get(name, 0.0) for name in cfg.primary_outcomes)
            secondary = sum(probabilities.get(name, 0.0) for name in cfg.secondary_outcomes)

        primary = clamp(primary)
        secondary = clamp(secondary, 0.0, 1.0 - primary)
        draw = max(0.0, 1.0 - primary - secondary)
        return primary, secondary, draw

    def recommendation_for(self, archetype: str) -> str:
        return self.config.archetype_recommendations.get(archetype, DEFAULT_RECOMMENDATION)

    def milestones(
        self,
        signature: TemporalSignature,
        current_position: int,
        total_expected_length: int
    ) -> List[TrajectoryMilestone]:
        remaining = total_expected_length - current_position
        if remaining <= 0:
            return []

        trend = signature.temporal_flow.trend
        candidates = [
            TrajectoryMilestone(
                predicted_index=math.floor(current_position + remaining * 0.25),
                event="Critical Decision Point",
                probability=0.75,
                impact=0.8 if signature.intensity > 0.6 else 0.5,
                recommendation=(
                    "Maintain momentum" if trend == Trend.ACCELERATING
                    else "Consider strategic pivot"
                )
            ),
            TrajectoryMilestone(
                predicted_index=math.floor(current_position + remaining * 0.5),
                event="Trajectory Confirmation",
                probability=0.65,
                impact=0.6,
                recommendation="Evaluate if current pattern holds"
            ),
        ]

        if signature.archetype and remaining > 10:
            candidates.append(TrajectoryMilestone(
                predicted_index=math.floor(current_position + remaining * 0.7),
                event=f"{format_label(signature.archetype)} Phase",
                probability=0.7,
                impact=0.7,
                recommendation=self.recommendation_for(signature.archetype)
            ))

        folded = [
            m for m in signature.critical_moments[:self.config.max_folded_moments]
            if m.index > current_position
        ]
        for moment in folded:
            candidates.append(TrajectoryMilestone(
                predicted_index=moment.index,
                event=moment.description or format_label(moment.moment_type),
                probability=moment.severity,
                impact=moment.severity,
                recommendation=f"Prepare for {moment.moment_type}"
            ))

        in_range = [
            m for m in candidates
            if current_position < m.predicted_index <= total_expected_length
        ]
        in_range.sort(key=lambda m: m.predicted_index)
        return in_range[:self.config.max_milestones]

    def divergence(self, signature: TemporalSignature, matches: Sequence[PatternMatch]) -> float:
        return trajectory_divergence(signature, matches)

    def sustainability(self, signature: TemporalSignature) -> SustainabilityAssessment:
        return assess_sustainability(signature)
