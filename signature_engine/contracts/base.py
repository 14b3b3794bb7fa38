"""
Base Contracts and Shared Types

Foundational error types and field validators used by every contract.

BOUNDARY ENFORCEMENT:
=====================
- Contracts validate at construction and fail fast
- Degenerate-but-legal inputs (empty sequences, zero weights) are NOT errors;
  components return documented neutral defaults for those
- Only malformed values (NaN, negative where non-negative is declared,
  out-of-range ratios) and invalid configuration raise
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Tuple
import math
import numbers


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for pipeline failures.
    Every failure that is reported as data is enumerated here.
    """
    # Input errors
    INVALID_INPUT = auto()

    # Stage errors
    EXTRACTION_FAILED = auto()
    CLASSIFICATION_FAILED = auto()
    MATCHING_FAILED = auto()
    PREDICTION_FAILED = auto()

    # Runtime errors
    TIMEOUT = auto()
    PIPELINE_FAILED = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: str) -> Error:
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple(sorted((k, str(v)) for k, v in context.items()))
        )


# =============================================================================
# EXCEPTIONS
# =============================================================================

class SignatureEngineError(Exception):
    """Root of all errors raised by the engine."""


class SignatureValidationError(SignatureEngineError, ValueError):
    """A contract field violated its declared invariant."""

    def __init__(self, field_name: str, value: object, constraint: str):
        self.field_name = field_name
        self.value = value
        self.constraint = constraint
        super().__init__(f"{field_name}={value!r} {constraint}")


class ConfigurationError(SignatureEngineError, ValueError):
    """Invalid component configuration (cache capacity, thresholds, ...)."""


# =============================================================================
# FIELD VALIDATORS
# =============================================================================
# Validation order per field: finiteness, then range, then membership.

def check_finite(field_name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise SignatureValidationError(field_name, value, "must be a number")
    if not math.isfinite(value):
        raise SignatureValidationError(field_name, value, "must be finite")


def check_non_negative(field_name: str, value: float) -> None:
    check_finite(field_name, value)
    if value < 0.0:
        raise SignatureValidationError(field_name, value, "must be >= 0")


def check_range(field_name: str, value: float, low: float, high: float) -> None:
    check_finite(field_name, value)
    if not low <= value <= high:
        raise SignatureValidationError(
            field_name, value, f"must be in [{low}, {high}]"
        )


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp into [low, high]."""
    return max(low, min(high, value))


def coerce_enum(field_name: str, enum_cls, value):
    """Return value as a member of enum_cls, raising a validation error otherwise."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise SignatureValidationError(
            field_name, value, f"must be one of {[m.value for m in enum_cls]}"
        ) from None
