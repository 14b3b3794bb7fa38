"""
Critical Moment Detector

Finds sequence positions with outsized magnitude change.

Two detectors:
- detect_magnitude_spikes: raw magnitudes far above the sequence average
  (used by the signature extractor)
- detect_critical_moments: normalized levels that jump away from their
  running average (surge / drop)

Both return moments in chronological order, capped at a fixed count.
"""

from __future__ import annotations
from typing import List, Sequence

import numpy as np

from ..contracts.signature_contracts import CriticalMoment


MAX_CRITICAL_MOMENTS = 10
MIN_SEQUENCE_LENGTH = 3


def detect_magnitude_spikes(
    magnitudes: Sequence[float],
    factor: float = 3.0,
    severity_divisor: float = 5.0,
    max_moments: int = MAX_CRITICAL_MOMENTS
) -> List[CriticalMoment]:
    """Flag events whose magnitude exceeds factor x the sequence average."""
    values = np.asarray(magnitudes, dtype=float)
    if values.size < MIN_SEQUENCE_LENGTH:
        return []

    average = float(np.mean(values))
    if average == 0.0:
        return []

    moments = []
    for index, magnitude in enumerate(values.tolist()):
        if magnitude > average * factor:
            ratio = magnitude / average
            moments.append(CriticalMoment(
                index=index,
                severity=min(1.0, magnitude / (average * severity_divisor)),
                moment_type="major_change",
                description=f"Activity spike at position {index}: {ratio:.1f}x average"
            ))

    return moments[:max_moments]


def detect_critical_moments(
    values: Sequence[float],
    threshold: float = 0.2,
    min_severity: float = 0.3,
    max_moments: int = MAX_CRITICAL_MOMENTS
) -> List[CriticalMoment]:
    """
    Flag levels that move more than threshold away from the running
    average of everything before them.

    Severity is the size of the move, capped at 1.
    """
    levels = np.asarray(values, dtype=float)
    if levels.size < MIN_SEQUENCE_LENGTH:
        return []

    running_sums = np.cumsum(levels)
    moments = []
    for index in range(1, levels.size):
        running_average = running_sums[index - 1] / index
        change = float(levels[index] - running_average)
        if abs(change) <= threshold:
            continue

        severity = min(1.0, abs(change))
        if severity < min_severity:
            continue

        if change > 0:
            moment_type = "surge"
            description = f"Activity surge at position {index} (+{change:.2f} vs running average)"
        else:
            moment_type = "drop"
            description = f"Activity drop at position {index} ({change:.2f} vs running average)"

        moments.append(CriticalMoment(
            index=index,
            severity=severity,
            moment_type=moment_type,
            description=description
        ))

    return moments[:max_moments]
