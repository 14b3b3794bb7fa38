"""
Fingerprint Generator

Deterministic short identifiers for quantized signature components.

Format: EP-XXXXXXXX, uppercase hex, always 8 digits, zero-padded.
"""

from __future__ import annotations
import math

from ..contracts.signature_contracts import QuadrantProfile, TemporalFlow


FINGERPRINT_PREFIX = "EP-"
_MASK_32 = 0xFFFFFFFF


def hash_string(value: str) -> str:
    """Rolling multiply-add (x31) hash, 32-bit, as 8 lowercase hex digits."""
    h = 0
    for char in value:
        h = (h * 31 + ord(char)) & _MASK_32
    return format(h, "08x")


def quantize(value: float) -> int:
    """Round x100 to an integer, halves rounding up."""
    return math.floor(value * 100 + 0.5)


def fingerprint_components(
    quadrant_profile: QuadrantProfile,
    temporal_flow: TemporalFlow,
    archetype: str,
    intensity: float
) -> str:
    parts = [
        quantize(quadrant_profile.q1),
        quantize(quadrant_profile.q2),
        quantize(quadrant_profile.q3),
        quantize(quadrant_profile.q4),
        quantize(quadrant_profile.center),
        quantize(temporal_flow.opening),
        quantize(temporal_flow.middle),
        quantize(temporal_flow.ending),
        quantize(temporal_flow.momentum),
        temporal_flow.trend.value,
        archetype,
        quantize(intensity),
    ]
    return "|".join(str(p) for p in parts)


def generate_fingerprint(
    quadrant_profile: QuadrantProfile,
    temporal_flow: TemporalFlow,
    archetype: str,
    intensity: float
) -> str:
    """Same quantized inputs always give the same fingerprint."""
    digest = hash_string(
        fingerprint_components(quadrant_profile, temporal_flow, archetype, intensity)
    )
    return FINGERPRINT_PREFIX + digest.upper()
