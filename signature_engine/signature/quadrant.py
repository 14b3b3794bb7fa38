"""
Quadrant Calculator

Aggregates weighted activity into four regions plus a center bucket and
derives a qualitative flow direction.
"""

from __future__ import annotations
from typing import Dict, Iterable, Tuple, Union

from ..contracts.base import check_non_negative, coerce_enum
from ..contracts.signature_contracts import (
    ActivityEvent,
    FlowDirection,
    QuadrantProfile,
    Region,
)


RegionWeight = Tuple[Union[Region, str], float]


def calculate_quadrant_profile(activities: Iterable[RegionWeight]) -> QuadrantProfile:
    """
    Weighted-sum-then-normalize over region tags.

    Zero total weight yields the uniform {0.25, 0.25, 0.25, 0.25, 0}
    profile rather than an error.
    """
    sums: Dict[Region, float] = {region: 0.0 for region in Region}
    for region, weight in activities:
        check_non_negative("weight", weight)
        sums[coerce_enum("region", Region, region)] += float(weight)

    total = sum(sums.values())
    if total == 0.0:
        return QuadrantProfile.uniform()

    return QuadrantProfile(
        q1=sums[Region.Q1] / total,
        q2=sums[Region.Q2] / total,
        q3=sums[Region.Q3] / total,
        q4=sums[Region.Q4] / total,
        center=sums[Region.CENTER] / total
    )


def profile_from_events(events: Iterable[ActivityEvent]) -> QuadrantProfile:
    """Quadrant profile weighted by event magnitude."""
    return calculate_quadrant_profile((e.region, e.magnitude) for e in events)


def determine_flow_direction(
    profile: QuadrantProfile,
    chaos_threshold: float = 0.15
) -> FlowDirection:
    """
    Forward-ness is top regions minus bottom regions; lateral-ness is the
    difference between the two sides. Both under the threshold is chaotic.
    """
    forward = (profile.q1 + profile.q2) - (profile.q3 + profile.q4)
    lateral = abs((profile.q1 + profile.q3) - (profile.q2 + profile.q4))

    if abs(forward) < chaos_threshold and lateral < chaos_threshold:
        return FlowDirection.CHAOTIC
    if abs(forward) >= lateral:
        return FlowDirection.FORWARD if forward > 0 else FlowDirection.BACKWARD
    return FlowDirection.LATERAL
