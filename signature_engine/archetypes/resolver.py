"""
Archetype Resolver

Scores a signature against every archetype of a domain registry.
Also provides registry-free classification for signatures whose domain
supplied no archetype.

BOUNDARY ENFORCEMENT:
- Reads signatures, never builds or mutates them
- Registry is injected; no domain registries live here
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..contracts.base import ConfigurationError, clamp
from ..contracts.prediction_contracts import (
    ArchetypeDefinition,
    ArchetypeMatchResult,
    ArchetypeRegistry,
)
from ..contracts.signature_contracts import TemporalSignature, Trend


UNKNOWN_ARCHETYPE = "unknown"

FLOW_KEYWORDS = frozenset({
    "ascending", "descending", "stable", "volatile", "chaotic",
    "accelerating", "declining", "steady",
})
BALANCE_KEYWORDS = frozenset({"balanced", "stable", "even", "distributed"})


@dataclass(frozen=True)
class ArchetypeMatchCriteria:
    """Domain-agnostic scoring thresholds."""
    balance_variance: float = 0.1
    match_threshold: float = 0.5
    max_alternatives: int = 3

    def __post_init__(self):
        if self.max_alternatives < 0:
            raise ConfigurationError("max_alternatives must be >= 0")
        if not 0.0 <= self.match_threshold <= 1.0:
            raise ConfigurationError("match_threshold must be in [0, 1]")


# =============================================================================
# FACTOR SCORES
# =============================================================================

def signature_terms(signature: TemporalSignature) -> List[str]:
    """Searchable lowercase terms describing a signature."""
    terms = [
        signature.archetype.lower(),
        signature.flow_direction.value,
        signature.dominant_force.value,
        signature.temporal_flow.trend.value,
    ]

    if signature.intensity > 0.8:
        terms.extend(["high", "intense", "aggressive"])
    elif signature.intensity > 0.5:
        terms.extend(["moderate", "active"])
    else:
        terms.extend(["low", "passive", "quiet"])

    momentum = signature.temporal_flow.momentum
    if momentum > 0.5:
        terms.extend(["accelerating", "growing"])
    elif momentum < -0.5:
        terms.extend(["declining", "slowing"])
    else:
        terms.extend(["stable", "steady"])

    return terms


def keyword_score(signature: TemporalSignature, keywords) -> float:
    """Fraction of keywords that overlap (substring either way) a signature term."""
    if not keywords:
        return 0.0
    terms = [t for t in signature_terms(signature) if t]
    matches = 0
    for keyword in keywords:
        normalized = keyword.lower()
        if any(normalized in term or term in normalized for term in terms):
            matches += 1
    return matches / len(keywords)


def intensity_alignment(signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
    # Successful archetypes tend to run at controlled, moderate intensity
    expected = 0.6 if definition.success_rate > 0.6 else 0.4
    return 1.0 - min(abs(signature.intensity - expected), 1.0)


def flow_alignment(signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
    flow_terms = [k.lower() for k in definition.keywords if k.lower() in FLOW_KEYWORDS]
    if not flow_terms:
        return 0.5
    return 1.0 if signature.temporal_flow.trend.value in flow_terms else 0.3


def quadrant_alignment(
    signature: TemporalSignature,
    definition: ArchetypeDefinition,
    balance_variance: float = 0.1
) -> float:
    profile = signature.quadrant_profile
    values = np.array([profile.q1, profile.q2, profile.q3, profile.q4])
    is_balanced = float(np.var(values)) < balance_variance

    prefers_balance = any(k.lower() in BALANCE_KEYWORDS for k in definition.keywords)
    if prefers_balance:
        return 1.0 if is_balanced else 0.4
    return 0.4 if is_balanced else 1.0


# =============================================================================
# RESOLVER
# =============================================================================

class ArchetypeResolver:
    """
    Resolves signatures against one domain's archetype registry.

    Score is a weighted blend: keywords 0.3 (only when the definition has
    keywords), intensity 0.25, flow 0.25, quadrant balance 0.2, normalized
    by the weights actually used.
    """

    def __init__(
        self,
        registry: ArchetypeRegistry,
        criteria: Optional[ArchetypeMatchCriteria] = None
    ):
        self._registry = registry
        self._criteria = criteria or ArchetypeMatchCriteria()
        self._version = "1.0.0"

    @property
    def registry(self) -> ArchetypeRegistry:
        return self._registry

    def score(self, signature: TemporalSignature, definition: ArchetypeDefinition) -> float:
        score = 0.0
        factors = 0.0

        if definition.keywords:
            score += keyword_score(signature, definition.keywords) * 0.3
            factors += 0.3

        score += intensity_alignment(signature, definition) * 0.25
        score += flow_alignment(signature, definition) * 0.25
        score += quadrant_alignment(
            signature, definition, self._criteria.balance_variance
        ) * 0.2
        factors += 0.7

        return clamp(score / factors) if factors > 0 else 0.0

    def score_all(self, signature: TemporalSignature) -> List[Tuple[str, float]]:
        """All archetype scores, best first (ties keep registry order)."""
        scores = [
            (definition.archetype_id, self.score(signature, definition))
            for definition in self._registry.archetypes
        ]
        scores.sort(key=lambda item: item[1], reverse=True)
        return scores

    def resolve(self, signature: TemporalSignature) -> ArchetypeMatchResult:
        candidates = self.score_all(signature)
        if not candidates:
            return ArchetypeMatchResult(
                archetype=UNKNOWN_ARCHETYPE,
                confidence=0.0,
                match_reasons=("No matching archetype definition found",),
                alternatives=()
            )

        best_id, best_score = candidates[0]
        limit = 1 + self._criteria.max_alternatives
        return ArchetypeMatchResult(
            archetype=best_id,
            confidence=best_score,
            match_reasons=tuple(self.match_reasons(signature, best_id)),
            alternatives=tuple(candidates[1:limit])
        )

    def match_reasons(self, signature: TemporalSignature, archetype_id: str) -> List[str]:
        definition = self._registry.get(archetype_id)
        if definition is None:
            return ["No matching archetype definition found"]

        reasons = [f'Pattern matches "{definition.name}" archetype']

        trend = signature.temporal_flow.trend
        if trend == Trend.ACCELERATING:
            reasons.append("Momentum is building in current trajectory")
        elif trend == Trend.DECLINING:
            reasons.append("Activity shows declining trend")

        if signature.intensity > 0.7:
            reasons.append("High intensity activity detected")

        if definition.success_rate > 0.6:
            reasons.append(f"Historical success rate: {round(definition.success_rate * 100)}%")

        return reasons

    def get_definition(self, archetype_id: str) -> Optional[ArchetypeDefinition]:
        return self._registry.get(archetype_id)

    def all_definitions(self) -> List[ArchetypeDefinition]:
        return list(self._registry.archetypes)

    def matches_archetype(self, signature: TemporalSignature, archetype_id: str) -> bool:
        result = self.resolve(signature)
        return (
            result.archetype == archetype_id
            and result.confidence > self._criteria.match_threshold
        )


# =============================================================================
# REGISTRY-FREE CLASSIFICATION
# =============================================================================

def classify_universal_archetype(signature: TemporalSignature) -> str:
    """
    Classify from signature metrics alone.

    Rules are checked in order; the first that fires wins.
    """
    flow = signature.temporal_flow
    intensity = signature.intensity

    if intensity > 0.7 and flow.trend == Trend.ACCELERATING:
        return "aggressive_expansion"
    if intensity < 0.3 and flow.trend == Trend.STABLE:
        return "maintenance_mode"
    if flow.trend == Trend.VOLATILE and len(signature.critical_moments) > 3:
        return "chaotic_evolution"
    if flow.trend == Trend.DECLINING and flow.momentum < -0.3:
        return "controlled_decline"

    profile = signature.quadrant_profile
    quadrants = (profile.q1, profile.q2, profile.q3, profile.q4)
    if max(quadrants) - min(quadrants) > 0.5:
        return "concentrated_activity"
    if abs(profile.q1 - profile.q2) < 0.1 and abs(profile.q3 - profile.q4) < 0.1:
        return "balanced_approach"

    return "standard_evolution"


def archetype_similarity(
    archetype_a: str,
    archetype_b: str,
    registry: ArchetypeRegistry
) -> float:
    """
    1 for identical ids, 0.7 for declared relatives, otherwise a blend of
    keyword Jaccard overlap (0.6) and success-rate closeness (0.4).
    Unknown ids score 0.
    """
    if archetype_a == archetype_b:
        return 1.0

    def_a = registry.get(archetype_a)
    def_b = registry.get(archetype_b)
    if def_a is None or def_b is None:
        return 0.0

    if archetype_b in def_a.related_archetypes or archetype_a in def_b.related_archetypes:
        return 0.7

    keywords_a = set(def_a.keywords)
    keywords_b = set(def_b.keywords)
    union = keywords_a | keywords_b
    keyword_similarity = len(keywords_a & keywords_b) / len(union) if union else 0.0
    success_similarity = 1.0 - abs(def_a.success_rate - def_b.success_rate)

    return keyword_similarity * 0.6 + success_similarity * 0.4
