"""Builders shared by the engine-level tests."""

from signature_engine.adapters import EventSequenceAdapter
from signature_engine.contracts import HistoricalPattern
from signature_engine.engine import SignatureEngine
from tests.fixtures import raw_events


STEADY_EVENTS = raw_events([0.5, 0.5, 0.5])


def corpus_like(raw, outcome="success", pattern_id="hist_1"):
    """A one-pattern corpus whose signature is extracted from raw."""
    signature = SignatureEngine().extract(raw)
    return [HistoricalPattern(pattern_id=pattern_id, signature=signature, outcome=outcome)]


def make_adapter(**kwargs):
    return EventSequenceAdapter(**kwargs)
