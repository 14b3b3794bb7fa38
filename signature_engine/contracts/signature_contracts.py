"""
Signature Contracts

Immutable data structures for activity input and extracted signatures.
Every signature stage produces and consumes these contracts.

NO EXTRACTION LOGIC HERE - only data definitions and their invariants.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple

from .base import (
    SignatureValidationError,
    check_finite,
    check_non_negative,
    check_range,
    coerce_enum,
)


# =============================================================================
# ENUMS
# =============================================================================

class Region(str, Enum):
    """Aggregation bucket an activity event is tagged with."""
    Q1 = "q1"
    Q2 = "q2"
    Q3 = "q3"
    Q4 = "q4"
    CENTER = "center"


class Trend(str, Enum):
    """Direction of activity over the sequence."""
    STABLE = "stable"
    ACCELERATING = "accelerating"
    DECLINING = "declining"
    VOLATILE = "volatile"


class DominantForce(str, Enum):
    """Which of two competing signals has the initiative."""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    BALANCED = "balanced"


class FlowDirection(str, Enum):
    """Qualitative direction derived from the quadrant profile."""
    FORWARD = "forward"
    LATERAL = "lateral"
    BACKWARD = "backward"
    CHAOTIC = "chaotic"


# =============================================================================
# INPUT CONTRACT
# =============================================================================

@dataclass(frozen=True)
class ActivityEvent:
    """
    One timestamped, weighted, region-tagged unit of domain input.

    Produced by a domain adapter (a commit, a move, a tick).
    timestamp is any monotonically comparable number (epoch seconds,
    move number, tick sequence).
    """
    timestamp: float
    magnitude: float
    region: Region
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        check_finite("timestamp", self.timestamp)
        check_non_negative("magnitude", self.magnitude)
        object.__setattr__(self, "region", coerce_enum("region", Region, self.region))


# =============================================================================
# SIGNATURE COMPONENTS
# =============================================================================

@dataclass(frozen=True)
class QuadrantProfile:
    """
    Normalized activity share per region.

    Weights are raw sums divided by total weight, so
    q1 + q2 + q3 + q4 + center == 1 for any non-zero input.
    """
    q1: float
    q2: float
    q3: float
    q4: float
    center: float = 0.0

    def __post_init__(self):
        for name in ("q1", "q2", "q3", "q4", "center"):
            check_non_negative(name, getattr(self, name))

    @staticmethod
    def uniform() -> QuadrantProfile:
        """Defined fallback for zero total weight."""
        return QuadrantProfile(q1=0.25, q2=0.25, q3=0.25, q4=0.25, center=0.0)

    def as_tuple(self) -> Tuple[float, float, float, float, float]:
        return (self.q1, self.q2, self.q3, self.q4, self.center)

    @property
    def total(self) -> float:
        return sum(self.as_tuple())


@dataclass(frozen=True)
class TemporalFlow:
    """How activity evolves across opening, middle and ending windows."""
    opening: float
    middle: float
    ending: float
    trend: Trend
    momentum: float

    def __post_init__(self):
        for name in ("opening", "middle", "ending"):
            check_range(name, getattr(self, name), 0.0, 1.0)
        object.__setattr__(self, "trend", coerce_enum("trend", Trend, self.trend))
        check_range("momentum", self.momentum, -1.0, 1.0)

    @staticmethod
    def neutral() -> TemporalFlow:
        return TemporalFlow(
            opening=0.0, middle=0.0, ending=0.0,
            trend=Trend.STABLE, momentum=0.0
        )


@dataclass(frozen=True)
class CriticalMoment:
    """A turning point in the sequence."""
    index: int
    severity: float
    moment_type: str
    description: str
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            raise SignatureValidationError("index", self.index, "must be an int >= 0")
        check_range("severity", self.severity, 0.0, 1.0)
        if not self.moment_type:
            raise SignatureValidationError("moment_type", self.moment_type, "must be non-empty")


# =============================================================================
# SIGNATURE
# =============================================================================

EMPTY_FINGERPRINT = "EP-00000000"


@dataclass(frozen=True)
class TemporalSignature:
    """
    Immutable temporal fingerprint of an activity sequence.

    This is the CORE contract of the engine.
    Matching and prediction operate on these fields only; domain adapters
    may attach extra data through domain_data but never alter the base
    invariants.
    """
    fingerprint: str
    archetype: str
    dominant_force: DominantForce
    flow_direction: FlowDirection
    intensity: float
    quadrant_profile: QuadrantProfile
    temporal_flow: TemporalFlow
    critical_moments: Tuple[CriticalMoment, ...] = field(default_factory=tuple)
    domain_data: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.fingerprint, str) or not self.fingerprint:
            raise SignatureValidationError(
                "fingerprint", self.fingerprint, "must be a non-empty string"
            )
        if not isinstance(self.archetype, str):
            raise SignatureValidationError("archetype", self.archetype, "must be a string")
        object.__setattr__(
            self, "dominant_force",
            coerce_enum("dominant_force", DominantForce, self.dominant_force)
        )
        object.__setattr__(
            self, "flow_direction",
            coerce_enum("flow_direction", FlowDirection, self.flow_direction)
        )
        check_range("intensity", self.intensity, 0.0, 1.0)
        if not isinstance(self.quadrant_profile, QuadrantProfile):
            raise SignatureValidationError(
                "quadrant_profile", self.quadrant_profile, "must be a QuadrantProfile"
            )
        if not isinstance(self.temporal_flow, TemporalFlow):
            raise SignatureValidationError(
                "temporal_flow", self.temporal_flow, "must be a TemporalFlow"
            )
        object.__setattr__(self, "critical_moments", tuple(self.critical_moments))
        object.__setattr__(self, "domain_data", tuple(self.domain_data))

    @property
    def is_empty(self) -> bool:
        return self.fingerprint == EMPTY_FINGERPRINT
