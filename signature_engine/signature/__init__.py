"""
Signature Layer

Turns ordered activity events into immutable TemporalSignatures.

BOUNDARY ENFORCEMENT:
=====================
This layer MUST NOT:
- Compare signatures against history
- Predict outcomes
- Cache results (the pipeline owns caching)
- Depend on any specific domain

Every calculator here is deterministic and replay-safe.
"""

from .phase import (
    PhaseBoundaries,
    DEFAULT_BOUNDARIES,
    calculate_temporal_flow,
    calculate_momentum,
    calculate_volatility,
    classify_trend,
)
from .quadrant import (
    calculate_quadrant_profile,
    profile_from_events,
    determine_flow_direction,
)
from .critical import (
    detect_critical_moments,
    detect_magnitude_spikes,
    MAX_CRITICAL_MOMENTS,
)
from .fingerprint import (
    hash_string,
    generate_fingerprint,
    FINGERPRINT_PREFIX,
)
from .extractor import (
    ExtractionConfig,
    SignatureHints,
    SignatureExtractor,
    calculate_intensity,
    determine_dominant_force,
)

__all__ = [
    # Phase
    'PhaseBoundaries', 'DEFAULT_BOUNDARIES', 'calculate_temporal_flow',
    'calculate_momentum', 'calculate_volatility', 'classify_trend',
    # Quadrant
    'calculate_quadrant_profile', 'profile_from_events', 'determine_flow_direction',
    # Critical moments
    'detect_critical_moments', 'detect_magnitude_spikes', 'MAX_CRITICAL_MOMENTS',
    # Fingerprint
    'hash_string', 'generate_fingerprint', 'FINGERPRINT_PREFIX',
    # Extractor
    'ExtractionConfig', 'SignatureHints', 'SignatureExtractor',
    'calculate_intensity', 'determine_dominant_force',
]
