"""
API Models
==========

Pydantic request/response bodies for the HTTP surface.
These mirror the frozen contracts field for field; conversion lives in
mapper.py.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# SIGNATURE DTOs
# =============================================================================

class EventModel(BaseModel):
    timestamp: float
    magnitude: float = Field(ge=0)
    region: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class QuadrantProfileModel(BaseModel):
    q1: float = Field(ge=0)
    q2: float = Field(ge=0)
    q3: float = Field(ge=0)
    q4: float = Field(ge=0)
    center: float = Field(default=0.0, ge=0)


class TemporalFlowModel(BaseModel):
    opening: float = Field(ge=0, le=1)
    middle: float = Field(ge=0, le=1)
    ending: float = Field(ge=0, le=1)
    trend: str
    momentum: float = Field(ge=-1, le=1)


class CriticalMomentModel(BaseModel):
    index: int = Field(ge=0)
    severity: float = Field(ge=0, le=1)
    moment_type: str
    description: str = ""


class SignatureModel(BaseModel):
    fingerprint: str
    archetype: str
    dominant_force: str
    flow_direction: str
    intensity: float = Field(ge=0, le=1)
    quadrant_profile: QuadrantProfileModel
    temporal_flow: TemporalFlowModel
    critical_moments: List[CriticalMomentModel] = Field(default_factory=list)
    domain_data: Dict[str, Any] = Field(default_factory=dict)


class PatternModel(BaseModel):
    pattern_id: str
    signature: SignatureModel
    outcome: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# REQUESTS
# =============================================================================

class SignatureRequest(BaseModel):
    events: List[EventModel]


class SimilarityRequest(BaseModel):
    a: SignatureModel
    b: SignatureModel


class MatchRequest(BaseModel):
    signature: SignatureModel
    corpus: Optional[List[PatternModel]] = None
    min_similarity: Optional[float] = Field(default=None, ge=0, le=1)
    limit: Optional[int] = Field(default=None, ge=0)
    archetypes: Optional[List[str]] = None
    outcomes: Optional[List[str]] = None


class PredictionRequest(BaseModel):
    signature: SignatureModel
    corpus: Optional[List[PatternModel]] = None
    current_position: int = Field(ge=0)
    total_expected_length: int = Field(ge=0)


class SustainabilityRequest(BaseModel):
    signature: SignatureModel


# =============================================================================
# RESPONSES
# =============================================================================

class SimilarityResponse(BaseModel):
    similarity: float


class MatchModel(BaseModel):
    pattern_id: str
    outcome: str
    similarity: float
    signature: SignatureModel
    source_metadata: Dict[str, Any] = Field(default_factory=dict)


class MatchResponse(BaseModel):
    matches: List[MatchModel]
    outcome_probabilities: Dict[str, float]
    confidence: float


class MilestoneModel(BaseModel):
    predicted_index: int
    event: str
    probability: float
    impact: float
    recommendation: Optional[str] = None


class PredictionResponse(BaseModel):
    predicted_outcome: str
    confidence: float
    primary_win_probability: float
    secondary_win_probability: float
    draw_probability: float
    milestones: List[MilestoneModel]
    strategic_guidance: str
    lookahead_horizon: int
    pattern_sample_size: int
    divergence: float


class SustainabilityResponse(BaseModel):
    sustainable: bool
    risk_level: str
    reason: str


class CacheStatsModel(BaseModel):
    name: str
    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int
    hit_rate: float
