"""
Property Tests for Signature Engine Contracts

Generated inputs checked against the engine's invariants:
profile normalization, bounded signature fields, deterministic
fingerprints, ordered and thresholded matches, bounded predictions
and bounded caches.
"""

import re

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from signature_engine.contracts import Region, Trend
from signature_engine.inference.caching import BoundedCache, CacheConfig
from signature_engine.matching.matcher import PatternMatcher
from signature_engine.matching.similarity import signature_similarity
from signature_engine.prediction.trajectory import TrajectoryPredictor
from signature_engine.signature.extractor import SignatureExtractor
from signature_engine.signature.quadrant import (
    calculate_quadrant_profile,
    determine_flow_direction,
)
from tests.fixtures import make_event, make_flow, make_match, make_pattern, make_signature


FINGERPRINT_PATTERN = re.compile(r"^EP-[0-9A-F]{8}$")

unit_floats = st.floats(min_value=0.0, max_value=1.0, allow_nan=False)


# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

@composite
def region_weights(draw):
    """Arbitrary non-negative (region, weight) activity."""
    return draw(st.lists(
        st.tuples(
            st.sampled_from(list(Region)),
            st.floats(min_value=0.0, max_value=1000.0, allow_nan=False)
        ),
        max_size=30
    ))


@composite
def event_sequences(draw):
    """Events with distinct timestamps in arbitrary input order."""
    magnitudes = draw(st.lists(
        st.floats(min_value=0.0, max_value=5.0, allow_nan=False),
        max_size=40
    ))
    regions = draw(st.lists(
        st.sampled_from(list(Region)), min_size=len(magnitudes), max_size=len(magnitudes)
    ))
    events = [make_event(float(i), m, r) for i, (m, r) in enumerate(zip(magnitudes, regions))]
    return draw(st.permutations(events))


@composite
def signatures(draw):
    """Valid signatures with a normalized profile."""
    profile = calculate_quadrant_profile(draw(region_weights()))
    flow = make_flow(
        opening=draw(unit_floats),
        middle=draw(unit_floats),
        ending=draw(unit_floats),
        trend=draw(st.sampled_from(list(Trend))),
        momentum=draw(st.floats(min_value=-1.0, max_value=1.0, allow_nan=False))
    )
    return make_signature(
        archetype=draw(st.sampled_from(["a", "b", "c"])),
        intensity=draw(unit_floats),
        quadrant_profile=profile,
        temporal_flow=flow,
        flow_direction=determine_flow_direction(profile)
    )


# =============================================================================
# SIGNATURE INVARIANTS
# =============================================================================

@given(region_weights())
def test_profile_sums_to_one(activity):
    """INVARIANT: a quadrant profile is always normalized."""
    profile = calculate_quadrant_profile(activity)
    assert abs(profile.total - 1.0) < 1e-9
    assert all(v >= 0.0 for v in profile.as_tuple())


@given(region_weights())
def test_flow_direction_is_a_pure_function(activity):
    profile = calculate_quadrant_profile(activity)
    assert determine_flow_direction(profile) == determine_flow_direction(profile)


@settings(deadline=None)
@given(event_sequences())
def test_extraction_is_deterministic_and_bounded(events):
    """INVARIANT: same events -> same signature, every field in range."""
    extractor = SignatureExtractor()
    first = extractor.extract(events)
    second = extractor.extract(list(reversed(events)))

    assert first == second
    assert FINGERPRINT_PATTERN.match(first.fingerprint)
    assert 0.0 <= first.intensity <= 1.0
    assert -1.0 <= first.temporal_flow.momentum <= 1.0
    assert len(first.critical_moments) <= 10

    indices = [m.index for m in first.critical_moments]
    assert indices == sorted(indices)
    assert all(i < len(events) for i in indices)


# =============================================================================
# MATCHING INVARIANTS
# =============================================================================

@given(signatures(), signatures())
def test_similarity_symmetric_and_bounded(a, b):
    score = signature_similarity(a, b)
    assert 0.0 <= score <= 1.0
    assert abs(score - signature_similarity(b, a)) < 1e-9


@given(signatures())
def test_self_similarity_is_one(signature):
    assert abs(signature_similarity(signature, signature) - 1.0) < 1e-9


@settings(deadline=None)
@given(
    signatures(),
    st.lists(signatures(), max_size=15),
    unit_floats,
    st.integers(min_value=0, max_value=10)
)
def test_matches_sorted_thresholded_and_limited(target, corpus_signatures, threshold, limit):
    """INVARIANT: matches are ordered, above threshold, at most limit."""
    corpus = [
        make_pattern(f"p{i}", "success", signature=s)
        for i, s in enumerate(corpus_signatures)
    ]
    matches = PatternMatcher().find_matches(
        target, corpus, min_similarity=threshold, limit=limit
    )

    assert len(matches) <= limit
    similarities = [m.similarity for m in matches]
    assert similarities == sorted(similarities, reverse=True)
    assert all(s >= threshold for s in similarities)


# =============================================================================
# PREDICTION INVARIANTS
# =============================================================================

@given(
    signatures(),
    st.lists(
        st.tuples(st.sampled_from(["success", "failure", "draw", "other"]), unit_floats),
        max_size=10
    ),
    st.integers(min_value=0, max_value=200),
    st.integers(min_value=0, max_value=200)
)
def test_prediction_bounds(signature, votes, current, total):
    """INVARIANT: probabilities sum to <= 1 and milestones stay in (current, total]."""
    matches = [make_match(outcome, similarity) for outcome, similarity in votes]
    prediction = TrajectoryPredictor().predict(signature, matches, None, current, total)

    total_probability = (
        prediction.primary_win_probability
        + prediction.secondary_win_probability
        + prediction.draw_probability
    )
    assert total_probability <= 1.0 + 1e-9
    assert 0 <= prediction.lookahead_horizon <= max(0, total - current)
    for milestone in prediction.milestones:
        assert current < milestone.predicted_index <= total


# =============================================================================
# CACHE INVARIANTS
# =============================================================================

@given(
    st.integers(min_value=1, max_value=8),
    st.lists(st.tuples(st.sampled_from(["get", "set"]), st.integers(0, 20)), max_size=100)
)
def test_cache_never_exceeds_capacity(max_size, operations):
    for policy in ("lru", "lfu", "fifo"):
        cache = BoundedCache(CacheConfig("prop", max_size, 60.0, policy), clock=lambda: 0.0)
        for op, key in operations:
            if op == "set":
                cache.set(str(key), key)
            else:
                value = cache.get(str(key))
                assert value is None or value == key
            assert cache.size() <= max_size
