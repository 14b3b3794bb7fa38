"""
Pattern Matcher Tests

INVARIANTS:
- Results sorted by similarity descending, stable for ties
- No result below the similarity threshold
- At most limit results
"""

import pytest

from signature_engine.contracts import ConfigurationError, FlowDirection, Trend
from signature_engine.matching.matcher import (
    MatchingConfig,
    PatternMatcher,
    match_confidence,
    most_likely_outcome,
    outcome_probabilities,
    pattern_diversity,
)
from tests.fixtures import make_flow, make_match, make_pattern, make_profile, make_signature


def build_corpus():
    return [
        make_pattern("close", "success", intensity=0.9),
        make_pattern("exact", "success"),
        make_pattern("far", "failure", signature=make_signature(
            archetype="other",
            intensity=0.0,
            flow_direction=FlowDirection.FORWARD,
            quadrant_profile=make_profile(q1=1.0, q2=0.0, q3=0.0, q4=0.0),
            temporal_flow=make_flow(opening=0.0, middle=0.0, ending=0.0,
                                    trend=Trend.DECLINING, momentum=-1.0)
        )),
        make_pattern("draw", "draw", intensity=0.7, archetype="steady"),
    ]


class TestFindMatches:

    def test_sorted_and_thresholded(self):
        matches = PatternMatcher().find_matches(make_signature(), build_corpus())
        assert [m.pattern_id for m in matches] == ["exact", "close", "draw"]
        similarities = [m.similarity for m in matches]
        assert similarities == sorted(similarities, reverse=True)
        assert all(s >= 0.5 for s in similarities)

    def test_threshold_override(self):
        matches = PatternMatcher().find_matches(
            make_signature(), build_corpus(), min_similarity=0.0
        )
        assert len(matches) == 4
        assert matches[-1].pattern_id == "far"

    def test_limit(self):
        matches = PatternMatcher().find_matches(make_signature(), build_corpus(), limit=2)
        assert [m.pattern_id for m in matches] == ["exact", "close"]

    def test_zero_limit(self):
        assert PatternMatcher().find_matches(make_signature(), build_corpus(), limit=0) == []

    def test_empty_corpus(self):
        assert PatternMatcher().find_matches(make_signature(), []) == []

    def test_archetype_filter(self):
        matches = PatternMatcher().find_matches(
            make_signature(), build_corpus(), archetypes=["steady"]
        )
        assert [m.pattern_id for m in matches] == ["draw"]

    def test_outcome_filter(self):
        matches = PatternMatcher().find_matches(
            make_signature(), build_corpus(), outcomes=["draw", "failure"], min_similarity=0.0
        )
        assert {m.outcome for m in matches} == {"draw", "failure"}

    def test_ties_keep_corpus_order(self):
        corpus = [make_pattern("first", "success"), make_pattern("second", "failure")]
        matches = PatternMatcher().find_matches(make_signature(), corpus)
        assert [m.pattern_id for m in matches] == ["first", "second"]

    def test_metadata_carried(self):
        matches = PatternMatcher().find_matches(make_signature(), build_corpus(), limit=1)
        assert matches[0].source_metadata == (("source", "test"),)

    def test_config_defaults_used(self):
        matcher = PatternMatcher(MatchingConfig(min_similarity=0.99, limit=5))
        matches = matcher.find_matches(make_signature(), build_corpus())
        assert [m.pattern_id for m in matches] == ["exact"]


class TestOutcomeSummaries:

    def test_similarity_weighted_probabilities(self):
        matches = [
            make_match("success", 0.9),
            make_match("success", 0.6),
            make_match("failure", 0.5),
        ]
        probabilities = outcome_probabilities(matches)
        assert probabilities["success"] == pytest.approx(0.75)
        assert probabilities["failure"] == pytest.approx(0.25)
        assert sum(probabilities.values()) == pytest.approx(1.0)

    def test_no_matches(self):
        assert outcome_probabilities([]) == {}
        assert most_likely_outcome([]) is None

    def test_zero_similarity_is_uniform(self):
        matches = [make_match("success", 0.0), make_match("failure", 0.0)]
        assert outcome_probabilities(matches) == {"success": 0.5, "failure": 0.5}

    def test_most_likely_outcome(self):
        matches = [make_match("failure", 0.4), make_match("success", 0.9)]
        assert most_likely_outcome(matches) == "success"

    def test_outcome_counts(self):
        matches = [make_match("success", 0.9), make_match("success", 0.6), make_match("draw", 0.5)]
        assert PatternMatcher().outcome_counts(matches) == {"success": 2, "draw": 1}


class TestConfidence:

    def test_no_matches_gives_zero(self):
        assert match_confidence([]) == 0.0

    def test_full_sample_of_perfect_matches(self):
        matches = [make_match("success", 1.0) for _ in range(5)]
        assert match_confidence(matches) == pytest.approx(1.0)

    def test_single_match(self):
        assert match_confidence([make_match("success", 0.9)]) == pytest.approx(0.64)

    def test_diversity(self):
        assert pattern_diversity([make_match("success", 0.9)]) == 0.0
        matches = [make_match("success", 0.9), make_match("failure", 0.8)]
        assert pattern_diversity(matches) == pytest.approx(0.5)


class TestMatchingConfig:

    @pytest.mark.parametrize("overrides", [
        {"min_similarity": 1.5},
        {"limit": -1},
        {"min_sample_size": 0},
    ])
    def test_invalid_config_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            MatchingConfig(**overrides)
