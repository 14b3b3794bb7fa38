"""
Fingerprint Generator Tests
"""

import re

from signature_engine.contracts import QuadrantProfile, TemporalFlow, Trend
from signature_engine.signature.fingerprint import (
    fingerprint_components,
    generate_fingerprint,
    hash_string,
    quantize,
)
from tests.fixtures import make_flow, make_profile


FINGERPRINT_PATTERN = re.compile(r"^EP-[0-9A-F]{8}$")


class TestHashString:

    def test_empty_string(self):
        assert hash_string("") == "00000000"

    def test_known_values(self):
        assert hash_string("a") == "00000061"
        assert hash_string("ab") == "00000c21"

    def test_wraps_to_32_bits(self):
        digest = hash_string("x" * 500)
        assert len(digest) == 8
        assert int(digest, 16) <= 0xFFFFFFFF


class TestQuantize:

    def test_halves_round_up(self):
        assert quantize(0.125) == 13
        assert quantize(0.124) == 12

    def test_negative_values(self):
        assert quantize(-0.5) == -50


class TestFingerprint:

    def test_components_layout(self):
        components = fingerprint_components(
            QuadrantProfile.uniform(), TemporalFlow.neutral(), "x", 0.5
        )
        assert components == "25|25|25|25|0|0|0|0|0|stable|x|50"

    def test_format(self):
        fingerprint = generate_fingerprint(make_profile(), make_flow(), "balanced_approach", 0.5)
        assert FINGERPRINT_PATTERN.match(fingerprint)

    def test_deterministic(self):
        a = generate_fingerprint(make_profile(), make_flow(), "x", 0.42)
        b = generate_fingerprint(make_profile(), make_flow(), "x", 0.42)
        assert a == b

    def test_sub_quantum_noise_ignored(self):
        a = generate_fingerprint(make_profile(), make_flow(), "x", 0.420)
        b = generate_fingerprint(make_profile(), make_flow(), "x", 0.421)
        assert a == b

    def test_sensitive_to_each_component(self):
        base = generate_fingerprint(make_profile(), make_flow(), "x", 0.5)
        assert generate_fingerprint(make_profile(), make_flow(), "y", 0.5) != base
        assert generate_fingerprint(make_profile(), make_flow(), "x", 0.6) != base
        assert generate_fingerprint(
            make_profile(), make_flow(trend=Trend.VOLATILE), "x", 0.5
        ) != base
        assert generate_fingerprint(
            make_profile(q1=0.4, q2=0.1), make_flow(), "x", 0.5
        ) != base
