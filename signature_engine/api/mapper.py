"""
API Mapper
==========

Transforms API DTOs into engine contracts and back.
Contract validation runs on the way in, so malformed signatures fail
here with SignatureValidationError.
"""
from dataclasses import asdict
from typing import Any, Dict, List

from ..contracts.cache_contracts import CacheStats
from ..contracts.prediction_contracts import (
    HistoricalPattern,
    PatternMatch,
    SustainabilityAssessment,
    TrajectoryPrediction,
)
from ..contracts.signature_contracts import (
    CriticalMoment,
    QuadrantProfile,
    TemporalFlow,
    TemporalSignature,
)
from .models import (
    CacheStatsModel,
    CriticalMomentModel,
    EventModel,
    MatchModel,
    MilestoneModel,
    PatternModel,
    PredictionResponse,
    QuadrantProfileModel,
    SignatureModel,
    SustainabilityResponse,
    TemporalFlowModel,
)


# =============================================================================
# INBOUND
# =============================================================================

def events_to_raw(events: List[EventModel]) -> List[Dict[str, Any]]:
    """Event DTOs -> raw event dictionaries for the adapter."""
    return [event.model_dump() for event in events]


def signature_from_model(model: SignatureModel) -> TemporalSignature:
    return TemporalSignature(
        fingerprint=model.fingerprint,
        archetype=model.archetype,
        dominant_force=model.dominant_force,
        flow_direction=model.flow_direction,
        intensity=model.intensity,
        quadrant_profile=QuadrantProfile(**model.quadrant_profile.model_dump()),
        temporal_flow=TemporalFlow(**model.temporal_flow.model_dump()),
        critical_moments=tuple(
            CriticalMoment(**moment.model_dump()) for moment in model.critical_moments
        ),
        domain_data=tuple(sorted(model.domain_data.items()))
    )


def pattern_from_model(model: PatternModel) -> HistoricalPattern:
    return HistoricalPattern(
        pattern_id=model.pattern_id,
        signature=signature_from_model(model.signature),
        outcome=model.outcome,
        metadata=tuple(sorted(model.metadata.items()))
    )


# =============================================================================
# OUTBOUND
# =============================================================================

def signature_to_model(signature: TemporalSignature) -> SignatureModel:
    flow = signature.temporal_flow
    return SignatureModel(
        fingerprint=signature.fingerprint,
        archetype=signature.archetype,
        dominant_force=signature.dominant_force.value,
        flow_direction=signature.flow_direction.value,
        intensity=signature.intensity,
        quadrant_profile=QuadrantProfileModel(**asdict(signature.quadrant_profile)),
        temporal_flow=TemporalFlowModel(
            opening=flow.opening,
            middle=flow.middle,
            ending=flow.ending,
            trend=flow.trend.value,
            momentum=flow.momentum
        ),
        critical_moments=[
            CriticalMomentModel(
                index=m.index,
                severity=m.severity,
                moment_type=m.moment_type,
                description=m.description
            )
            for m in signature.critical_moments
        ],
        domain_data=dict(signature.domain_data)
    )


def match_to_model(match: PatternMatch) -> MatchModel:
    return MatchModel(
        pattern_id=match.pattern_id,
        outcome=match.outcome,
        similarity=match.similarity,
        signature=signature_to_model(match.signature),
        source_metadata=dict(match.source_metadata)
    )


def prediction_to_model(prediction: TrajectoryPrediction, divergence: float) -> PredictionResponse:
    return PredictionResponse(
        predicted_outcome=prediction.predicted_outcome,
        confidence=prediction.confidence,
        primary_win_probability=prediction.primary_win_probability,
        secondary_win_probability=prediction.secondary_win_probability,
        draw_probability=prediction.draw_probability,
        milestones=[MilestoneModel(**asdict(m)) for m in prediction.milestones],
        strategic_guidance=prediction.strategic_guidance,
        lookahead_horizon=prediction.lookahead_horizon,
        pattern_sample_size=prediction.pattern_sample_size,
        divergence=divergence
    )


def sustainability_to_model(assessment: SustainabilityAssessment) -> SustainabilityResponse:
    return SustainabilityResponse(
        sustainable=assessment.sustainable,
        risk_level=assessment.risk_level.value,
        reason=assessment.reason
    )


def cache_stats_to_model(stats: CacheStats) -> CacheStatsModel:
    return CacheStatsModel(**asdict(stats))
