"""
Archetypes Layer

Maps signatures to named strategic patterns.

BOUNDARY ENFORCEMENT:
=====================
This layer MUST NOT:
- Extract signatures
- Rank historical patterns
- Hold domain-specific registries (adapters inject them)
"""

from .resolver import (
    ArchetypeMatchCriteria,
    ArchetypeResolver,
    UNKNOWN_ARCHETYPE,
    classify_universal_archetype,
    archetype_similarity,
)

__all__ = [
    'ArchetypeMatchCriteria',
    'ArchetypeResolver',
    'UNKNOWN_ARCHETYPE',
    'classify_universal_archetype',
    'archetype_similarity',
]
