"""
Domain Adapter Interface

The only seam through which domain knowledge enters the engine.
The core never branches on a domain name; it calls these operations.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Generic, List, TypeVar

from ..contracts.prediction_contracts import ArchetypeRegistry
from ..contracts.signature_contracts import TemporalSignature


TState = TypeVar("TState")


class DomainAdapter(ABC, Generic[TState]):
    """
    Abstract base for domain adapters (code history, games, markets...).

    Each adapter knows how to turn ONE kind of raw input into ordered
    states and how to read a signature in its domain's vocabulary.
    """

    @property
    @abstractmethod
    def domain(self) -> str:
        """Return the domain identifier."""
        pass

    @abstractmethod
    def parse_input(self, raw: Any) -> List[TState]:
        """Convert raw input into an ordered state sequence."""
        pass

    @abstractmethod
    def extract_signature(self, states: List[TState]) -> TemporalSignature:
        """Build the temporal signature of a state sequence."""
        pass

    @abstractmethod
    def classify_archetype(self, signature: TemporalSignature) -> str:
        """Return the archetype id for a signature."""
        pass

    @abstractmethod
    def get_archetype_registry(self) -> ArchetypeRegistry:
        """Return this domain's archetype registry."""
        pass

    @abstractmethod
    def calculate_similarity(self, a: TemporalSignature, b: TemporalSignature) -> float:
        """Similarity of two signatures in [0, 1]."""
        pass

    @abstractmethod
    def render_state(self, state: TState) -> str:
        """Human-readable rendering of one state."""
        pass
