"""
Event Sequence Adapter Tests
"""

import pytest

from signature_engine.adapters import DomainAdapter, EventSequenceAdapter
from signature_engine.adapters.events import event_from_mapping
from signature_engine.contracts import Region, SignatureValidationError
from signature_engine.inference.caching import signature_key
from tests.fixtures import make_event, make_registry, make_signature, raw_events


class TestEventFromMapping:

    def test_builds_event(self):
        event = event_from_mapping({
            "timestamp": 1.5, "magnitude": 2.0, "region": "q3", "metadata": {"sha": "abc"}
        })
        assert event.region == Region.Q3
        assert event.metadata == (("sha", "abc"),)

    @pytest.mark.parametrize("missing", ["timestamp", "magnitude", "region"])
    def test_required_fields(self, missing):
        raw = {"timestamp": 0.0, "magnitude": 1.0, "region": "q1"}
        del raw[missing]
        with pytest.raises(SignatureValidationError):
            event_from_mapping(raw)

    def test_metadata_must_be_mapping(self):
        with pytest.raises(SignatureValidationError):
            event_from_mapping({"timestamp": 0, "magnitude": 1, "region": "q1", "metadata": [1]})


class TestParseInput:

    def test_sorts_by_timestamp(self):
        raw = [
            {"timestamp": 2.0, "magnitude": 1.0, "region": "q1"},
            {"timestamp": 0.0, "magnitude": 1.0, "region": "q2"},
        ]
        events = EventSequenceAdapter().parse_input(raw)
        assert [e.timestamp for e in events] == [0.0, 2.0]

    def test_accepts_ready_made_events(self):
        events = EventSequenceAdapter().parse_input([make_event(1.0, 0.5)])
        assert events[0].magnitude == 0.5

    @pytest.mark.parametrize("raw", ["events", {"timestamp": 0}])
    def test_rejects_non_sequences(self, raw):
        with pytest.raises(SignatureValidationError):
            EventSequenceAdapter().parse_input(raw)


class TestAdapterOperations:

    def test_is_a_domain_adapter(self):
        assert isinstance(EventSequenceAdapter(), DomainAdapter)

    def test_render_state(self):
        assert EventSequenceAdapter().render_state(make_event(3.0, 0.5)) == "t=3.0 q1 x0.5"

    def test_render_state_keeps_full_precision(self):
        adapter = EventSequenceAdapter()
        first = [make_event(1700000000.0, 0.1234567), make_event(1700000001.0, 0.5)]
        second = [make_event(1700000000.5, 0.1234568), make_event(1700000001.0, 0.5)]

        assert adapter.render_state(first[0]) != adapter.render_state(second[0])
        assert signature_key([adapter.render_state(s) for s in first]) != signature_key(
            [adapter.render_state(s) for s in second]
        )

    def test_universal_classification_without_registry(self):
        adapter = EventSequenceAdapter()
        signature = make_signature(intensity=0.2)
        assert adapter.classify_archetype(signature) == "maintenance_mode"

    def test_registry_classification(self):
        adapter = EventSequenceAdapter(registry=make_registry())
        assert adapter.classify_archetype(make_signature(intensity=0.6)) == "steady_builder"

    def test_extract_signature(self):
        adapter = EventSequenceAdapter()
        signature = adapter.extract_signature(adapter.parse_input(raw_events([0.5, 0.5, 0.5])))
        assert signature.quadrant_profile.q1 == 1.0

    def test_similarity(self):
        adapter = EventSequenceAdapter()
        assert adapter.calculate_similarity(make_signature(), make_signature()) == pytest.approx(1.0)

    def test_describe(self):
        adapter = EventSequenceAdapter(registry=make_registry(), domain="repos")
        assert adapter.domain == "repos"
        assert adapter.describe() == {
            "domain": "repos",
            "registry_version": "1.0.0",
            "archetypes": ["steady_builder", "slow_burn", "blitz"],
        }
