"""
Data model
==========

Each row of the storm events export becomes a `RawEventRecord`. We keep it
immutable (`frozen=True`) so that:
- records cannot be edited after loading, and
- every derived value (dollar cost, health score) is recomputed by the
  pipeline instead of being patched in place.

The pipeline turns raw records into `NormalizedRecord` objects, fits one
`CompositeModel` per run and reduces everything to two `RegionalRanking`
tables plus a `Diagnostics` record.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class RawEventRecord:
    """One storm event row.

    `event_type` is expected to be case-normalized (the loader upper-cases it).
    Exponent codes are kept exactly as read; `ExponentResolver` decides
    whether they are valid.
    """
    region: str
    event_type: str
    fatalities: float = 0.0
    injuries: float = 0.0
    prop_dmg: float = 0.0
    prop_dmg_exp: str = ""
    crop_dmg: float = 0.0
    crop_dmg_exp: str = ""

    def __post_init__(self) -> None:
        for name in ("fatalities", "injuries", "prop_dmg", "crop_dmg"):
            v = getattr(self, name)
            if not math.isfinite(v) or v < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {v!r}")


@dataclass(frozen=True)
class NormalizedRecord:
    region: str
    event_type: str
    # dollars; None when an exponent code was invalid
    total_cost: Optional[float]
    total_health_cost: float


@dataclass(frozen=True)
class CompositeModel:
    """Fitted projection of (fatalities, injuries) onto their first principal axis."""
    mean: Tuple[float, float]
    axis: Tuple[float, float]
    eigenvalues: Tuple[float, float]
    explained_variance: float
    n_records: int

    def project(self, fatalities: float, injuries: float) -> float:
        return (fatalities - self.mean[0]) * self.axis[0] + (injuries - self.mean[1]) * self.axis[1]


@dataclass(frozen=True)
class RankingRow:
    region: str
    event_type: str
    value: float


@dataclass(frozen=True)
class RegionalRanking:
    """Top event type per region for one metric.

    Rows are ordered by value (descending), then region (ascending).
    Regions without any positive-metric record do not appear.
    """
    metric: str
    rows: Tuple[RankingRow, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[RankingRow]:
        return iter(self.rows)

    def __contains__(self, region: object) -> bool:
        return any(r.region == region for r in self.rows)

    def get(self, region: str) -> Optional[RankingRow]:
        for r in self.rows:
            if r.region == region:
                return r
        return None

    def regions(self) -> Tuple[str, ...]:
        return tuple(r.region for r in self.rows)

    def as_dict(self) -> Dict[str, Tuple[str, float]]:
        """Return {region: (event_type, value)}."""
        return {r.region: (r.event_type, r.value) for r in self.rows}

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(r.region, r.event_type, r.value) for r in self.rows],
            columns=["region", "event_type", self.metric],
        )


@dataclass(frozen=True)
class Diagnostics:
    """Data-quality figures reported with every run."""
    n_records: int
    n_invalid_exponent: int
    invalid_exponent_fraction: float
    explained_variance: float
    economic_regions_missing: int
    health_regions_missing: int
    regions_without_qualifying_event: int
    invalid_fraction_exceeded: bool = False
    rejected_codes: Dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, object]:
        return {
            "n_records": self.n_records,
            "n_invalid_exponent": self.n_invalid_exponent,
            "invalid_exponent_fraction": self.invalid_exponent_fraction,
            "invalid_fraction_exceeded": self.invalid_fraction_exceeded,
            "rejected_codes": dict(sorted(self.rejected_codes.items())),
            "explained_variance": self.explained_variance,
            "economic_regions_missing": self.economic_regions_missing,
            "health_regions_missing": self.health_regions_missing,
            "regions_without_qualifying_event": self.regions_without_qualifying_event,
        }
