"""
Contracts Module

Defines explicit data contracts between engine stages.
All stages MUST use these contracts - no direct coupling allowed.

DESIGN PRINCIPLES:
==================
1. Signature and prediction contracts are immutable (frozen dataclasses)
2. Contracts define WHAT, not HOW
3. Invariants are checked at construction, never downstream
4. No domain-specific fields beyond domain_data
"""

from .base import (
    ErrorCode,
    Error,
    SignatureEngineError,
    SignatureValidationError,
    ConfigurationError,
)

from .signature_contracts import (
    Region,
    Trend,
    DominantForce,
    FlowDirection,
    ActivityEvent,
    QuadrantProfile,
    TemporalFlow,
    CriticalMoment,
    TemporalSignature,
    EMPTY_FINGERPRINT,
)

from .prediction_contracts import (
    ArchetypeOutcome,
    RiskLevel,
    ArchetypeDefinition,
    ArchetypeRegistry,
    ArchetypeMatchResult,
    HistoricalPattern,
    PatternMatch,
    TrajectoryMilestone,
    TrajectoryPrediction,
    SustainabilityAssessment,
)

from .cache_contracts import (
    EvictionPolicy,
    CacheEntry,
    CacheStats,
)

__all__ = [
    # Errors
    'ErrorCode', 'Error', 'SignatureEngineError',
    'SignatureValidationError', 'ConfigurationError',
    # Signature contracts
    'Region', 'Trend', 'DominantForce', 'FlowDirection', 'ActivityEvent',
    'QuadrantProfile', 'TemporalFlow', 'CriticalMoment', 'TemporalSignature',
    'EMPTY_FINGERPRINT',
    # Prediction contracts
    'ArchetypeOutcome', 'RiskLevel', 'ArchetypeDefinition',
    'ArchetypeRegistry', 'ArchetypeMatchResult', 'HistoricalPattern',
    'PatternMatch', 'TrajectoryMilestone', 'TrajectoryPrediction',
    'SustainabilityAssessment',
    # Cache contracts
    'EvictionPolicy', 'CacheEntry', 'CacheStats',
]
