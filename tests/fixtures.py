"""
Shared Test Fixtures

Explicit builders for events, signatures, corpora and clocks.

RULES:
======
1. All fixtures are EXPLICIT, not random (hypothesis strategies live
   beside the property tests)
2. Builders take overrides so each test states only what it cares about
"""

from __future__ import annotations
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from signature_engine.contracts import (
    ActivityEvent,
    ArchetypeDefinition,
    ArchetypeOutcome,
    ArchetypeRegistry,
    CriticalMoment,
    DominantForce,
    FlowDirection,
    HistoricalPattern,
    PatternMatch,
    QuadrantProfile,
    Region,
    TemporalFlow,
    TemporalSignature,
    Trend,
)


REGION_CYCLE = (Region.Q1, Region.Q2, Region.Q3, Region.Q4)


# =============================================================================
# EVENTS
# =============================================================================

def make_event(timestamp: float, magnitude: float, region=Region.Q1) -> ActivityEvent:
    return ActivityEvent(timestamp=timestamp, magnitude=magnitude, region=region)


def make_events(
    magnitudes: Sequence[float],
    regions: Optional[Sequence] = None,
    spacing: float = 1.0
) -> List[ActivityEvent]:
    """Evenly spaced events; regions cycle q1..q4 unless given."""
    regions = regions or REGION_CYCLE
    return [
        make_event(i * spacing, magnitude, regions[i % len(regions)])
        for i, magnitude in enumerate(magnitudes)
    ]


def raw_events(magnitudes: Sequence[float], region: str = "q1") -> List[dict]:
    return [
        {"timestamp": float(i), "magnitude": m, "region": region}
        for i, m in enumerate(magnitudes)
    ]


# =============================================================================
# SIGNATURES
# =============================================================================

def make_profile(q1=0.25, q2=0.25, q3=0.25, q4=0.25, center=0.0) -> QuadrantProfile:
    return QuadrantProfile(q1=q1, q2=q2, q3=q3, q4=q4, center=center)


def make_flow(opening=0.5, middle=0.5, ending=0.5, trend=Trend.STABLE, momentum=0.0) -> TemporalFlow:
    return TemporalFlow(
        opening=opening, middle=middle, ending=ending, trend=trend, momentum=momentum
    )


def make_moment(index: int, severity: float = 0.8, moment_type: str = "major_change") -> CriticalMoment:
    return CriticalMoment(
        index=index,
        severity=severity,
        moment_type=moment_type,
        description=f"Moment at {index}"
    )


def make_signature(**overrides) -> TemporalSignature:
    base = TemporalSignature(
        fingerprint="EP-1234ABCD",
        archetype="balanced_approach",
        dominant_force=DominantForce.BALANCED,
        flow_direction=FlowDirection.CHAOTIC,
        intensity=0.5,
        quadrant_profile=make_profile(),
        temporal_flow=make_flow(),
        critical_moments=(),
        domain_data=()
    )
    return replace(base, **overrides)


# =============================================================================
# CORPUS
# =============================================================================

def make_pattern(pattern_id: str, outcome: str, signature=None, **signature_overrides) -> HistoricalPattern:
    return HistoricalPattern(
        pattern_id=pattern_id,
        signature=signature or make_signature(**signature_overrides),
        outcome=outcome,
        metadata=(("source", "test"),)
    )


def make_match(outcome: str, similarity: float, **signature_overrides) -> PatternMatch:
    return PatternMatch(
        pattern_id=f"p_{outcome}_{similarity}",
        signature=make_signature(**signature_overrides),
        outcome=outcome,
        similarity=similarity
    )


def make_definition(
    archetype_id: str,
    success_rate: float = 0.7,
    confidence: float = 0.8,
    keywords: Iterable[str] = (),
    related: Iterable[str] = (),
    outcome=ArchetypeOutcome.PRIMARY_WINS
) -> ArchetypeDefinition:
    return ArchetypeDefinition(
        archetype_id=archetype_id,
        name=archetype_id.replace("_", " ").title(),
        description=f"{archetype_id} test archetype",
        success_rate=success_rate,
        predicted_outcome=outcome,
        confidence=confidence,
        keywords=tuple(keywords),
        related_archetypes=tuple(related)
    )


def make_registry() -> ArchetypeRegistry:
    return ArchetypeRegistry(
        domain="test",
        version="1.0.0",
        archetypes=(
            make_definition("steady_builder", 0.75, keywords=("stable", "balanced", "steady"),
                            related=("slow_burn",)),
            make_definition("slow_burn", 0.55, keywords=("stable", "low", "quiet")),
            make_definition("blitz", 0.4, keywords=("accelerating", "high", "aggressive")),
        )
    )


# =============================================================================
# CLOCK
# =============================================================================

class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds
