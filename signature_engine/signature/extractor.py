"""
Signature Extractor

Composes phase, quadrant, critical-moment and fingerprint calculators
into one TemporalSignature per activity sequence.

Pipeline:
1. Order events by timestamp (stable)
2. Normalize magnitudes into activity levels
3. Quadrant profile -> flow direction
4. Temporal flow (phases, trend, momentum)
5. Magnitude spikes -> critical moments
6. Intensity and dominant force
7. Archetype (caller-supplied or registry-free classification)
8. Fingerprint
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..contracts.base import (
    ConfigurationError,
    check_finite,
    check_non_negative,
    clamp,
)
from ..contracts.signature_contracts import (
    ActivityEvent,
    DominantForce,
    FlowDirection,
    QuadrantProfile,
    TemporalFlow,
    TemporalSignature,
    EMPTY_FINGERPRINT,
)
from ..archetypes.resolver import classify_universal_archetype
from .critical import detect_magnitude_spikes
from .fingerprint import generate_fingerprint
from .phase import PhaseBoundaries, calculate_temporal_flow
from .quadrant import determine_flow_direction, profile_from_events


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class ExtractionConfig:
    """Configuration for signature extraction."""
    magnitude_scale: float = 1.0
    opening_fraction: float = 0.25
    middle_fraction: float = 0.5
    trend_threshold: float = 0.2
    volatility_threshold: float = 0.3
    momentum_window: float = 0.2
    spike_factor: float = 3.0
    spike_severity_divisor: float = 5.0
    max_critical_moments: int = 10
    balance_threshold: float = 0.1
    chaos_threshold: float = 0.15
    empty_archetype: str = "unclassified"

    def __post_init__(self):
        if self.magnitude_scale <= 0:
            raise ConfigurationError("magnitude_scale must be > 0")
        if self.max_critical_moments < 0:
            raise ConfigurationError("max_critical_moments must be >= 0")
        if not 0.0 < self.momentum_window <= 0.5:
            raise ConfigurationError("momentum_window must be in (0, 0.5]")
        for name in ("trend_threshold", "volatility_threshold",
                     "balance_threshold", "chaos_threshold"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0")
        # Raises ConfigurationError on bad fractions
        self.phase_boundaries()

    def phase_boundaries(self) -> PhaseBoundaries:
        return PhaseBoundaries(opening=self.opening_fraction, middle=self.middle_fraction)


@dataclass(frozen=True)
class SignatureHints:
    """
    Domain knowledge the generic extractor cannot infer.

    intensity_metrics: (value, weight) pairs; values in [0, 1]
    primary_signal / secondary_signal: competing forces (e.g. white vs
    black activity); both default to quadrant sides
    """
    archetype: Optional[str] = None
    intensity_metrics: Tuple[Tuple[float, float], ...] = field(default_factory=tuple)
    primary_signal: Optional[float] = None
    secondary_signal: Optional[float] = None
    domain_data: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)


# =============================================================================
# PRIMITIVES
# =============================================================================

def calculate_intensity(metrics: Iterable[Tuple[float, float]]) -> float:
    """
    Weighted average of (value, weight) pairs, clamped to [0, 1].

    Zero total weight gives 0.
    """
    total_value = 0.0
    total_weight = 0.0
    for value, weight in metrics:
        check_finite("metric_value", value)
        check_non_negative("metric_weight", weight)
        total_value += value * weight
        total_weight += weight

    if total_weight == 0.0:
        return 0.0
    return clamp(total_value / total_weight)


def determine_dominant_force(
    primary_signal: float,
    secondary_signal: float,
    threshold: float = 0.1
) -> DominantForce:
    """Signed difference with a symmetric dead band."""
    check_finite("primary_signal", primary_signal)
    check_finite("secondary_signal", secondary_signal)
    diff = primary_signal - secondary_signal
    if diff > threshold:
        return DominantForce.PRIMARY
    if diff < -threshold:
        return DominantForce.SECONDARY
    return DominantForce.BALANCED


# =============================================================================
# EXTRACTOR
# =============================================================================

class SignatureExtractor:
    """
    Domain-neutral signature extraction.

    Identical event sequences (and hints) always yield identical
    signatures, fingerprints included.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()
        self._boundaries = self.config.phase_boundaries()
        self._version = "1.0.0"

    def empty_signature(self, hints: Optional[SignatureHints] = None) -> TemporalSignature:
        """Neutral signature for an empty sequence."""
        return TemporalSignature(
            fingerprint=EMPTY_FINGERPRINT,
            archetype=self.config.empty_archetype,
            dominant_force=DominantForce.BALANCED,
            flow_direction=FlowDirection.CHAOTIC,
            intensity=0.0,
            quadrant_profile=QuadrantProfile.uniform(),
            temporal_flow=TemporalFlow.neutral(),
            critical_moments=(),
            domain_data=hints.domain_data if hints else ()
        )

    def activity_levels(self, events: Sequence[ActivityEvent]) -> np.ndarray:
        magnitudes = np.array([e.magnitude for e in events], dtype=float)
        return np.clip(magnitudes / self.config.magnitude_scale, 0.0, 1.0)

    def extract(
        self,
        events: Iterable[ActivityEvent],
        hints: Optional[SignatureHints] = None
    ) -> TemporalSignature:
        hints = hints or SignatureHints()
        ordered: List[ActivityEvent] = sorted(events, key=lambda e: e.timestamp)
        if not ordered:
            return self.empty_signature(hints)

        cfg = self.config
        levels = self.activity_levels(ordered)

        profile = profile_from_events(ordered)
        flow_direction = determine_flow_direction(profile, cfg.chaos_threshold)

        temporal_flow = calculate_temporal_flow(
            levels,
            boundaries=self._boundaries,
            trend_threshold=cfg.trend_threshold,
            volatility_threshold=cfg.volatility_threshold,
            momentum_window=cfg.momentum_window
        )

        critical_moments = detect_magnitude_spikes(
            [e.magnitude for e in ordered],
            factor=cfg.spike_factor,
            severity_divisor=cfg.spike_severity_divisor,
            max_moments=cfg.max_critical_moments
        )

        metrics = hints.intensity_metrics or self._default_intensity_metrics(levels, temporal_flow)
        intensity = calculate_intensity(metrics)

        primary = hints.primary_signal
        secondary = hints.secondary_signal
        if primary is None:
            primary = profile.q1 + profile.q3
        if secondary is None:
            secondary = profile.q2 + profile.q4
        dominant_force = determine_dominant_force(primary, secondary, cfg.balance_threshold)

        draft = TemporalSignature(
            fingerprint=EMPTY_FINGERPRINT,
            archetype=hints.archetype or "",
            dominant_force=dominant_force,
            flow_direction=flow_direction,
            intensity=intensity,
            quadrant_profile=profile,
            temporal_flow=temporal_flow,
            critical_moments=tuple(critical_moments),
            domain_data=hints.domain_data
        )
        archetype = hints.archetype or classify_universal_archetype(draft)

        return replace(
            draft,
            archetype=archetype,
            fingerprint=generate_fingerprint(profile, temporal_flow, archetype, intensity)
        )

    @staticmethod
    def _default_intensity_metrics(
        levels: np.ndarray,
        temporal_flow: TemporalFlow
    ) -> Tuple[Tuple[float, float], ...]:
        # Overall activity dominates; the ending window adds recency
        return (
            (float(np.mean(levels)), 0.7),
            (temporal_flow.ending, 0.3),
        )
