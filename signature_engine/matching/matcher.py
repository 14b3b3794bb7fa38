"""
Pattern Matcher

Ranks a historical corpus against a query signature and summarizes the
matches as outcome probabilities and a confidence score.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from ..contracts.base import ConfigurationError, clamp
from ..contracts.prediction_contracts import HistoricalPattern, PatternMatch
from ..contracts.signature_contracts import TemporalSignature
from .similarity import SimilarityWeights, signature_similarity


@dataclass
class MatchingConfig:
    """Configuration for pattern matching."""
    weights: SimilarityWeights = field(default_factory=SimilarityWeights)
    min_similarity: float = 0.5
    limit: int = 10
    min_sample_size: int = 5

    def __post_init__(self):
        if not 0.0 <= self.min_similarity <= 1.0:
            raise ConfigurationError("min_similarity must be in [0, 1]")
        if self.limit < 0:
            raise ConfigurationError("limit must be >= 0")
        if self.min_sample_size <= 0:
            raise ConfigurationError("min_sample_size must be > 0")


# =============================================================================
# MATCH SUMMARIES
# =============================================================================

def outcome_probabilities(matches: Sequence[PatternMatch]) -> Dict[str, float]:
    """
    Similarity-weighted vote per outcome, normalized to sum to 1.

    No matches gives an empty mapping. If every match has zero similarity
    the vote is uniform over the outcomes present.
    """
    if not matches:
        return {}

    votes: Dict[str, float] = {}
    for match in matches:
        votes[match.outcome] = votes.get(match.outcome, 0.0) + match.similarity

    total = sum(votes.values())
    if total == 0.0:
        return {outcome: 1.0 / len(votes) for outcome in votes}
    return {outcome: weight / total for outcome, weight in votes.items()}


def most_likely_outcome(matches: Sequence[PatternMatch]) -> Optional[str]:
    """Highest-probability outcome; ties keep the first seen."""
    probabilities = outcome_probabilities(matches)
    best = None
    best_probability = -1.0
    for outcome, probability in probabilities.items():
        if probability > best_probability:
            best = outcome
            best_probability = probability
    return best


def pattern_diversity(matches: Sequence[PatternMatch]) -> float:
    """Spread of archetypes and outcomes across matches, in [0, 1]."""
    n = len(matches)
    if n < 2:
        return 0.0
    archetypes = {m.signature.archetype for m in matches}
    outcomes = {m.outcome for m in matches}
    return ((len(archetypes) - 1) / (n - 1) + (len(outcomes) - 1) / (n - 1)) / 2.0


def match_confidence(matches: Sequence[PatternMatch], min_sample_size: int = 5) -> float:
    """
    Grows with match count (saturating at min_sample_size) and average
    similarity; consensus among matches adds a little more.
    """
    if not matches:
        return 0.0
    sample_factor = min(1.0, len(matches) / min_sample_size)
    average_similarity = sum(m.similarity for m in matches) / len(matches)
    consensus = 1.0 - pattern_diversity(matches) * 0.5
    return clamp(sample_factor * 0.4 + average_similarity * 0.4 + consensus * 0.2)


# =============================================================================
# MATCHER
# =============================================================================

class PatternMatcher:
    """
    Corpus ranking.

    Output is sorted by similarity descending (stable for equal scores),
    never contains an entry below min_similarity, and holds at most
    limit entries.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        self.config = config or MatchingConfig()
        self._version = "1.0.0"

    def similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        return signature_similarity(a, b, self.config.weights)

    def find_matches(
        self,
        target: TemporalSignature,
        corpus: Iterable[HistoricalPattern],
        min_similarity: Optional[float] = None,
        limit: Optional[int] = None,
        archetypes: Optional[Iterable[str]] = None,
        outcomes: Optional[Iterable[str]] = None
    ) -> List[PatternMatch]:
        threshold = self.config.min_similarity if min_similarity is None else min_similarity
        max_results = self.config.limit if limit is None else limit
        archetype_filter = set(archetypes) if archetypes is not None else None
        outcome_filter = set(outcomes) if outcomes is not None else None

        matches = []
        for pattern in corpus:
            if archetype_filter is not None and pattern.signature.archetype not in archetype_filter:
                continue
            if outcome_filter is not None and pattern.outcome not in outcome_filter:
                continue

            score = self.similarity(target, pattern.signature)
            if score < threshold:
                continue

            matches.append(PatternMatch(
                pattern_id=pattern.pattern_id,
                signature=pattern.signature,
                outcome=pattern.outcome,
                similarity=score,
                source_metadata=pattern.metadata
            ))

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:max(0, max_results)]

    def outcome_probabilities(self, matches: Sequence[PatternMatch]) -> Dict[str, float]:
        return outcome_probabilities(matches)

    def confidence(self, matches: Sequence[PatternMatch]) -> float:
        return match_confidence(matches, self.config.min_sample_size)

    def outcome_counts(self, matches: Sequence[PatternMatch]) -> Dict[str, int]:
        return dict(Counter(m.outcome for m in matches))
