"""
Adapters Layer

Domain adapters convert raw domain input into ActivityEvents and read
signatures in their domain's vocabulary.

BOUNDARY ENFORCEMENT:
=====================
Adapters MUST NOT:
- Alter base TemporalSignature invariants
- Rank corpora or forecast trajectories
- Be looked up by domain name inside the core
"""

from .base import DomainAdapter
from .events import EventSequenceAdapter, event_from_mapping

__all__ = [
    'DomainAdapter',
    'EventSequenceAdapter',
    'event_from_mapping',
]
