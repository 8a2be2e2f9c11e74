"""Run configuration for the ranking pipeline."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from .exponents import DEFAULT_EXPONENT_TABLE, build_exponent_table, normalize_code


@dataclass(frozen=True)
class PipelineConfig:
    """Knobs for one pipeline run.

    variance_threshold: minimum share of variance PC1 must explain.
    valid_exponent_codes: exponent codes accepted as well-formed.
    max_invalid_fraction: share of invalid-exponent records tolerated before
        the run is flagged (None disables the check).
    strict_exponents: raise instead of warning when that share is exceeded.
    eigen_tolerance: relative eigenvalue gap below which no axis dominates.
    """
    variance_threshold: float = 0.95
    valid_exponent_codes: FrozenSet[str] = frozenset(DEFAULT_EXPONENT_TABLE)
    max_invalid_fraction: Optional[float] = 0.01
    strict_exponents: bool = False
    eigen_tolerance: float = 1e-9

    def __post_init__(self) -> None:
        if not 0.0 <= self.variance_threshold <= 1.0:
            raise ValueError("variance_threshold must be in [0, 1]")
        if self.max_invalid_fraction is not None and not 0.0 <= self.max_invalid_fraction <= 1.0:
            raise ValueError("max_invalid_fraction must be in [0, 1]")
        if self.eigen_tolerance < 0:
            raise ValueError("eigen_tolerance must be non-negative")
        codes = frozenset(normalize_code(c) for c in self.valid_exponent_codes)
        object.__setattr__(self, "valid_exponent_codes", codes)
        # fail early on codes without a multiplier
        build_exponent_table(codes)

    def exponent_table(self) -> Dict[str, float]:
        return build_exponent_table(sorted(self.valid_exponent_codes))
