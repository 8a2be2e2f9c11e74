"""
Error types
===========

- `InvalidExponent` is per-record and recoverable: the record is left out of
  the economic ranking and counted.
- `DegenerateDecomposition` and `EmptyInput` abort the whole run.
- `ExcessiveInvalidExponents` aborts only when strict exponent checking is on.
"""

from __future__ import annotations
from typing import Optional


class StormRankError(Exception):
    """Base class for errors raised by the pipeline."""


class InvalidExponent(StormRankError, ValueError):
    """Raised when a damage exponent code is outside the valid domain."""

    def __init__(self, code: str):
        super().__init__(f"Invalid damage exponent code: {code!r}")
        self.code = code


class DegenerateDecomposition(StormRankError):
    """The fatalities/injuries decomposition has no usable dominant axis."""

    def __init__(self, reason: str, n_records: int, explained_variance: Optional[float] = None):
        ev = "undefined" if explained_variance is None else f"{explained_variance:.4f}"
        super().__init__(f"{reason} (records={n_records}, explained_variance={ev})")
        self.reason = reason
        self.n_records = n_records
        self.explained_variance = explained_variance


class EmptyInput(StormRankError):
    """No records were supplied."""


class ExcessiveInvalidExponents(StormRankError):
    def __init__(self, fraction: float, threshold: float):
        super().__init__(
            f"{fraction:.2%} of records carry an invalid damage exponent "
            f"(allowed: {threshold:.2%})"
        )
        self.fraction = fraction
        self.threshold = threshold
