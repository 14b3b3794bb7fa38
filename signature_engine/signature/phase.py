"""
Phase Calculator

Splits a normalized activity-level sequence into opening, middle and
ending windows and derives trend and momentum.

BOUNDARY ENFORCEMENT:
- Pure function of the level sequence
- NO knowledge of regions or domains
- Replay-safe
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence
import math

import numpy as np

from ..contracts.base import ConfigurationError, clamp
from ..contracts.signature_contracts import TemporalFlow, Trend


@dataclass(frozen=True)
class PhaseBoundaries:
    """Window fractions; the ending window takes whatever is left."""
    opening: float = 0.25
    middle: float = 0.5

    def __post_init__(self):
        if not 0.0 < self.opening < 1.0:
            raise ConfigurationError(f"opening fraction must be in (0, 1), got {self.opening}")
        if not 0.0 <= self.middle < 1.0:
            raise ConfigurationError(f"middle fraction must be in [0, 1), got {self.middle}")
        if self.opening + self.middle > 1.0:
            raise ConfigurationError("opening + middle fractions must not exceed 1")

    @property
    def ending(self) -> float:
        return 1.0 - self.opening - self.middle


DEFAULT_BOUNDARIES = PhaseBoundaries()


def _window_mean(window: np.ndarray) -> float:
    if window.size == 0:
        return 0.0
    return float(np.mean(window))


def classify_trend(
    opening: float,
    ending: float,
    volatility: float,
    trend_threshold: float = 0.2,
    volatility_threshold: float = 0.3
) -> Trend:
    """
    Compare ending against opening with +/- trend_threshold bands.

    Volatility (mean absolute consecutive delta) above the threshold
    overrides the band comparison.
    """
    if volatility > volatility_threshold:
        return Trend.VOLATILE
    if ending > opening * (1.0 + trend_threshold):
        return Trend.ACCELERATING
    if ending < opening * (1.0 - trend_threshold):
        return Trend.DECLINING
    return Trend.STABLE


def calculate_volatility(levels: Sequence[float]) -> float:
    """Mean absolute difference between consecutive levels."""
    values = np.asarray(levels, dtype=float)
    if values.size < 2:
        return 0.0
    return float(np.mean(np.abs(np.diff(values))))


def calculate_momentum(levels: Sequence[float], window_fraction: float = 0.2) -> float:
    """
    Relative change of the most recent window against the one before it.

    Clamped to [-1, 1]; 0 when there is not enough history or the
    preceding window averages to zero.
    """
    values = np.asarray(levels, dtype=float)
    n = values.size
    window = max(1, math.floor(n * window_fraction))
    if n < 2 * window:
        return 0.0

    recent = _window_mean(values[n - window:])
    previous = _window_mean(values[n - 2 * window:n - window])
    if previous == 0.0:
        return 0.0
    return clamp((recent - previous) / previous, -1.0, 1.0)


def calculate_temporal_flow(
    levels: Sequence[float],
    boundaries: Optional[PhaseBoundaries] = None,
    trend_threshold: float = 0.2,
    volatility_threshold: float = 0.3,
    momentum_window: float = 0.2
) -> TemporalFlow:
    """
    Build a TemporalFlow from activity levels in [0, 1].

    Every window holds at least one element when the sequence is
    non-empty. Trend is classified before momentum is computed.
    """
    bounds = boundaries or DEFAULT_BOUNDARIES
    values = np.clip(np.asarray(levels, dtype=float), 0.0, 1.0)
    n = values.size
    if n == 0:
        return TemporalFlow.neutral()

    opening_end = max(1, math.floor(n * bounds.opening))
    middle_end = max(opening_end, math.floor(n * (bounds.opening + bounds.middle)))

    opening = _window_mean(values[:opening_end])
    if middle_end > opening_end:
        middle = _window_mean(values[opening_end:middle_end])
    else:
        # Too short for its own middle window; use the nearest level
        middle = float(values[min(opening_end, n - 1)])
    if middle_end < n:
        ending = _window_mean(values[middle_end:])
    else:
        ending = float(values[-1])

    trend = classify_trend(
        opening,
        ending,
        calculate_volatility(values),
        trend_threshold=trend_threshold,
        volatility_threshold=volatility_threshold
    )
    momentum = calculate_momentum(values, momentum_window)

    return TemporalFlow(
        opening=opening,
        middle=middle,
        ending=ending,
        trend=trend,
        momentum=momentum
    )
