"""
Generic event-sequence adapter.

Accepts raw event dictionaries (or ready-made ActivityEvents) and uses
the domain-neutral extractor, resolver and similarity directly.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..archetypes.resolver import (
    ArchetypeMatchCriteria,
    ArchetypeResolver,
    classify_universal_archetype,
)
from ..contracts.base import SignatureValidationError
from ..contracts.prediction_contracts import ArchetypeRegistry
from ..contracts.signature_contracts import ActivityEvent, TemporalSignature
from ..matching.similarity import SimilarityWeights, signature_similarity
from ..signature.extractor import ExtractionConfig, SignatureExtractor
from .base import DomainAdapter


RawEvent = Union[ActivityEvent, Mapping[str, Any]]

REQUIRED_FIELDS = ("timestamp", "magnitude", "region")


def event_from_mapping(raw: Mapping[str, Any]) -> ActivityEvent:
    """Build an ActivityEvent from {timestamp, magnitude, region, metadata?}."""
    for name in REQUIRED_FIELDS:
        if name not in raw:
            raise SignatureValidationError(name, None, "is required")

    metadata = raw.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise SignatureValidationError("metadata", metadata, "must be a mapping")

    return ActivityEvent(
        timestamp=raw["timestamp"],
        magnitude=raw["magnitude"],
        region=raw["region"],
        metadata=tuple(sorted((str(k), str(v)) for k, v in metadata.items()))
    )


class EventSequenceAdapter(DomainAdapter[ActivityEvent]):
    """
    Domain-neutral adapter over timestamped, region-tagged events.

    With an empty registry, archetypes come from registry-free
    classification. With a registry, the resolver's best match is used
    when it clears the criteria's match threshold.
    """

    def __init__(
        self,
        registry: Optional[ArchetypeRegistry] = None,
        extraction_config: Optional[ExtractionConfig] = None,
        similarity_weights: Optional[SimilarityWeights] = None,
        criteria: Optional[ArchetypeMatchCriteria] = None,
        domain: str = "events"
    ):
        self._domain = domain
        self._registry = registry or ArchetypeRegistry(domain=domain, version="1.0.0")
        self._criteria = criteria or ArchetypeMatchCriteria()
        self._extractor = SignatureExtractor(extraction_config)
        self._resolver = ArchetypeResolver(self._registry, self._criteria)
        self._weights = similarity_weights or SimilarityWeights()

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def extractor(self) -> SignatureExtractor:
        return self._extractor

    def parse_input(self, raw: Iterable[RawEvent]) -> List[ActivityEvent]:
        if isinstance(raw, (str, bytes)) or isinstance(raw, Mapping):
            raise SignatureValidationError("events", type(raw).__name__, "must be a sequence of events")

        events = [
            item if isinstance(item, ActivityEvent) else event_from_mapping(item)
            for item in raw
        ]
        return sorted(events, key=lambda e: e.timestamp)

    def extract_signature(self, states: List[ActivityEvent]) -> TemporalSignature:
        return self._extractor.extract(states)

    def classify_archetype(self, signature: TemporalSignature) -> str:
        if not self._registry.archetypes:
            return classify_universal_archetype(signature)

        result = self._resolver.resolve(signature)
        if result.confidence > self._criteria.match_threshold:
            return result.archetype
        return classify_universal_archetype(signature)

    def get_archetype_registry(self) -> ArchetypeRegistry:
        return self._registry

    def calculate_similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        return signature_similarity(a, b, self._weights)

    def render_state(self, state: ActivityEvent) -> str:
        return f"t={state.timestamp!r} {state.region.value} x{state.magnitude!r}"

    def describe(self) -> Dict[str, Any]:
        return {
            'domain': self._domain,
            'registry_version': self._registry.version,
            'archetypes': [d.archetype_id for d in self._registry.archetypes],
        }
