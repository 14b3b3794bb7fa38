"""
Engine Configuration

Groups the per-component configs and reads overrides from TSE_*
environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional, TypeVar
import os

from .contracts.base import ConfigurationError
from .contracts.cache_contracts import EvictionPolicy
from .inference.caching import (
    CacheConfig,
    match_cache_config,
    prediction_cache_config,
    signature_cache_config,
)
from .matching.matcher import MatchingConfig
from .observability import ObservabilityConfig
from .pipeline import PipelineConfig
from .prediction.trajectory import PredictionConfig
from .signature.extractor import ExtractionConfig


ENV_PREFIX = "TSE_"

V = TypeVar("V")


def _parse(environ: Mapping[str, str], name: str, parser: Callable[[str], V]) -> Optional[V]:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return parser(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name}={raw!r} is not a valid value") from None


def _policy(raw: str) -> EvictionPolicy:
    return EvictionPolicy(raw.lower())


@dataclass
class EngineConfig:
    """Complete configuration of one engine instance."""
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    signature_cache: CacheConfig = field(default_factory=signature_cache_config)
    match_cache: CacheConfig = field(default_factory=match_cache_config)
    prediction_cache: CacheConfig = field(default_factory=prediction_cache_config)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        """
        Defaults overridden by TSE_* variables.

        Unparseable or out-of-range values raise ConfigurationError.
        """
        env = os.environ if environ is None else environ
        config = cls()

        matching_overrides = {}
        min_similarity = _parse(env, "MIN_SIMILARITY", float)
        if min_similarity is not None:
            matching_overrides["min_similarity"] = min_similarity
        limit = _parse(env, "MATCH_LIMIT", int)
        if limit is not None:
            matching_overrides["limit"] = limit
        if matching_overrides:
            config.matching = replace(config.matching, **matching_overrides)

        max_lookahead = _parse(env, "MAX_LOOKAHEAD", int)
        if max_lookahead is not None:
            config.prediction = replace(config.prediction, max_lookahead=max_lookahead)

        policy = _parse(env, "EVICTION_POLICY", _policy)
        for attr, prefix in (
            ("signature_cache", "SIGNATURE_CACHE"),
            ("match_cache", "MATCH_CACHE"),
            ("prediction_cache", "PREDICTION_CACHE"),
        ):
            overrides = {}
            size = _parse(env, f"{prefix}_SIZE", int)
            if size is not None:
                overrides["max_size"] = size
            ttl = _parse(env, f"{prefix}_TTL", float)
            if ttl is not None:
                overrides["default_ttl"] = ttl
            if policy is not None:
                overrides["policy"] = policy
            if overrides:
                setattr(config, attr, replace(getattr(config, attr), **overrides))

        return config
