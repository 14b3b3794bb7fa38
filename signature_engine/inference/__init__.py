"""
Inference Support

Runtime caching for the analysis stages.

BOUNDARY ENFORCEMENT:
=====================
This package MUST NOT:
- Compute signatures, matches or predictions itself
- Hold module-level cache instances (engines own their caches)
"""

from .caching import (
    CacheConfig,
    BoundedCache,
    CacheBundle,
    create_signature_cache,
    create_match_cache,
    create_prediction_cache,
    signature_cache_config,
    match_cache_config,
    prediction_cache_config,
    signature_key,
    match_key,
    prediction_key,
)

__all__ = [
    'CacheConfig', 'BoundedCache', 'CacheBundle',
    'create_signature_cache', 'create_match_cache', 'create_prediction_cache',
    'signature_cache_config', 'match_cache_config', 'prediction_cache_config',
    'signature_key', 'match_key', 'prediction_key',
]
