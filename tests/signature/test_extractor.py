"""
Signature Extractor Tests

INVARIANTS:
- Same events in any input order yield the same signature
- Empty input yields the documented neutral signature
"""

import pytest

from signature_engine.contracts import (
    ConfigurationError,
    DominantForce,
    EMPTY_FINGERPRINT,
    FlowDirection,
    QuadrantProfile,
    Region,
    SignatureValidationError,
    Trend,
)
from signature_engine.signature.extractor import (
    ExtractionConfig,
    SignatureExtractor,
    SignatureHints,
    calculate_intensity,
    determine_dominant_force,
)
from tests.fixtures import make_events


class TestEmptyInput:

    def test_empty_signature(self):
        signature = SignatureExtractor().extract([])
        assert signature.is_empty
        assert signature.fingerprint == EMPTY_FINGERPRINT
        assert signature.archetype == "unclassified"
        assert signature.flow_direction == FlowDirection.CHAOTIC
        assert signature.dominant_force == DominantForce.BALANCED
        assert signature.intensity == 0.0
        assert signature.quadrant_profile == QuadrantProfile.uniform()
        assert signature.critical_moments == ()

    def test_empty_signature_keeps_domain_data(self):
        hints = SignatureHints(domain_data=(("source", "repo"),))
        signature = SignatureExtractor().extract([], hints)
        assert signature.domain_data == (("source", "repo"),)

    def test_empty_archetype_configurable(self):
        extractor = SignatureExtractor(ExtractionConfig(empty_archetype="none"))
        assert extractor.extract([]).archetype == "none"


class TestExtraction:

    def test_equal_magnitudes_are_stable(self):
        signature = SignatureExtractor().extract(make_events([0.5, 0.5, 0.5]))
        assert signature.temporal_flow.trend == Trend.STABLE
        assert signature.temporal_flow.momentum == 0.0
        assert signature.intensity == pytest.approx(0.5)
        assert signature.fingerprint.startswith("EP-")
        assert not signature.is_empty

    def test_rising_activity_accelerates(self):
        magnitudes = [0.1 * i for i in range(1, 11)]
        signature = SignatureExtractor().extract(make_events(magnitudes))
        assert signature.temporal_flow.trend == Trend.ACCELERATING

    def test_input_order_does_not_matter(self):
        events = make_events([0.2, 0.9, 0.4, 0.6, 0.1])
        extractor = SignatureExtractor()
        assert extractor.extract(events) == extractor.extract(list(reversed(events)))

    def test_magnitude_scale_normalizes_levels(self):
        extractor = SignatureExtractor(ExtractionConfig(magnitude_scale=10.0))
        signature = extractor.extract(make_events([5.0, 5.0, 5.0]))
        assert signature.temporal_flow.opening == pytest.approx(0.5)
        assert signature.intensity == pytest.approx(0.5)

    def test_levels_above_scale_are_clipped(self):
        signature = SignatureExtractor().extract(make_events([3.0, 3.0, 3.0]))
        assert signature.temporal_flow.ending == 1.0
        assert signature.intensity == 1.0

    def test_spike_becomes_critical_moment(self):
        signature = SignatureExtractor().extract(make_events([1.0] * 9 + [20.0]))
        assert len(signature.critical_moments) == 1
        assert signature.critical_moments[0].index == 9
        assert signature.critical_moments[0].moment_type == "major_change"

    def test_universal_archetype_assigned(self):
        events = make_events([0.5, 0.5, 0.5, 0.5], regions=[Region.Q1])
        signature = SignatureExtractor().extract(events)
        assert signature.archetype == "concentrated_activity"

    def test_default_dominant_force_from_sides(self):
        extractor = SignatureExtractor()
        q1_heavy = extractor.extract(make_events([0.5] * 4, regions=[Region.Q1]))
        q2_heavy = extractor.extract(make_events([0.5] * 4, regions=[Region.Q2]))
        even = extractor.extract(make_events([0.5] * 4))
        assert q1_heavy.dominant_force == DominantForce.PRIMARY
        assert q2_heavy.dominant_force == DominantForce.SECONDARY
        assert even.dominant_force == DominantForce.BALANCED


class TestHints:

    def test_hints_override_defaults(self):
        hints = SignatureHints(
            archetype="custom",
            intensity_metrics=((0.9, 1.0),),
            primary_signal=0.2,
            secondary_signal=0.8,
            domain_data=(("k", "v"),)
        )
        signature = SignatureExtractor().extract(make_events([0.5, 0.5, 0.5]), hints)
        assert signature.archetype == "custom"
        assert signature.intensity == pytest.approx(0.9)
        assert signature.dominant_force == DominantForce.SECONDARY
        assert signature.domain_data == (("k", "v"),)

    def test_archetype_hint_changes_fingerprint(self):
        events = make_events([0.5, 0.5, 0.5])
        extractor = SignatureExtractor()
        a = extractor.extract(events, SignatureHints(archetype="a"))
        b = extractor.extract(events, SignatureHints(archetype="b"))
        assert a.fingerprint != b.fingerprint


class TestIntensity:

    def test_weighted_average(self):
        assert calculate_intensity([(1.0, 1.0), (0.0, 1.0)]) == pytest.approx(0.5)
        assert calculate_intensity([(1.0, 3.0), (0.0, 1.0)]) == pytest.approx(0.75)

    def test_zero_weight_gives_zero(self):
        assert calculate_intensity([]) == 0.0
        assert calculate_intensity([(0.8, 0.0)]) == 0.0

    def test_clamped(self):
        assert calculate_intensity([(2.0, 1.0)]) == 1.0

    def test_negative_weight_rejected(self):
        with pytest.raises(SignatureValidationError):
            calculate_intensity([(0.5, -1.0)])


class TestDominantForce:

    def test_dead_band(self):
        assert determine_dominant_force(0.6, 0.4) == DominantForce.PRIMARY
        assert determine_dominant_force(0.45, 0.5) == DominantForce.BALANCED
        assert determine_dominant_force(0.2, 0.5) == DominantForce.SECONDARY

    def test_nan_rejected(self):
        with pytest.raises(SignatureValidationError):
            determine_dominant_force(float("nan"), 0.5)


class TestExtractionConfig:

    @pytest.mark.parametrize("overrides", [
        {"magnitude_scale": 0.0},
        {"max_critical_moments": -1},
        {"momentum_window": 0.0},
        {"momentum_window": 0.6},
        {"trend_threshold": -0.1},
        {"opening_fraction": 0.8, "middle_fraction": 0.5},
    ])
    def test_invalid_config_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            ExtractionConfig(**overrides)
