"""
Composite health score
======================

Fatalities and injuries are strongly correlated, so we reduce them to a
single number by projecting each record onto the first principal component
of the (fatalities, injuries) cloud.

Steps in `CompositeScorer.fit`:
1) center both variables on their mean
2) sample covariance matrix (2 x 2, ddof=1)
3) symmetric eigen-decomposition, components sorted by eigenvalue (desc)
4) gate: the first component must explain at least `variance_threshold`
   of the total variance and clearly dominate the second one
5) sign canonicalization: more harm must mean a higher score

The decomposition alone does not fix the sign of an eigenvector, so step 5
flips the axis whenever it points away from the all-positive direction (1, 1).
"""

from __future__ import annotations
from typing import Optional, Sequence

import numpy as np
import structlog

from .errors import DegenerateDecomposition, EmptyInput
from .models import CompositeModel, RawEventRecord

logger = structlog.get_logger(__name__)


def _health_matrix(records: Sequence[RawEventRecord]) -> np.ndarray:
    return np.array([(r.fatalities, r.injuries) for r in records], dtype=float).reshape(-1, 2)


def canonical_sign(axis: np.ndarray) -> np.ndarray:
    """Orient `axis` so its dot product with (1, 1) is positive.

    If the dot product is exactly zero, the first non-zero component is made
    positive instead.
    """
    s = float(axis.sum())
    if s < 0:
        return -axis
    if s == 0:
        for v in axis:
            if v != 0:
                return -axis if v < 0 else axis
    return axis


class CompositeScorer:
    """Fit once, then score. The fitted model is immutable."""

    def __init__(self, variance_threshold: float = 0.95, eigen_tolerance: float = 1e-9):
        self.variance_threshold = variance_threshold
        self.eigen_tolerance = eigen_tolerance
        self.model: Optional[CompositeModel] = None

    def fit(self, records: Sequence[RawEventRecord]) -> CompositeModel:
        x = _health_matrix(records)
        n = x.shape[0]
        if n == 0:
            raise EmptyInput("No records to fit the health score on")
        if n < 2:
            raise DegenerateDecomposition("At least two records are needed for a covariance matrix", n)

        mean = x.mean(axis=0)
        cov = np.cov(x - mean, rowvar=False)
        vals, vecs = np.linalg.eigh(cov)
        order = np.argsort(vals)[::-1]
        vals = np.clip(vals[order], 0.0, None)
        vecs = vecs[:, order]

        total = float(vals.sum())
        if not np.isfinite(total) or total <= 0.0:
            raise DegenerateDecomposition("Fatalities and injuries have zero variance", n)
        explained = float(vals[0] / total)
        if vals[0] - vals[1] <= self.eigen_tolerance * total:
            raise DegenerateDecomposition("Eigenvalues are near-equal; no dominant axis", n, explained)
        if explained < self.variance_threshold:
            raise DegenerateDecomposition(
                f"First component explains less than {self.variance_threshold:.2%} of the variance",
                n, explained,
            )

        axis = canonical_sign(vecs[:, 0])
        self.model = CompositeModel(
            mean=(float(mean[0]), float(mean[1])),
            axis=(float(axis[0]), float(axis[1])),
            eigenvalues=(float(vals[0]), float(vals[1])),
            explained_variance=explained,
            n_records=n,
        )
        logger.info(
            "composite_model_fitted",
            records=n,
            explained_variance=round(explained, 6),
            axis=self.model.axis,
        )
        return self.model

    def _require_model(self) -> CompositeModel:
        if self.model is None:
            raise RuntimeError("CompositeScorer.fit() must be called before scoring")
        return self.model

    def score(self, record: RawEventRecord) -> float:
        """Signed composite score of one record (totalHealthCost)."""
        return self._require_model().project(record.fatalities, record.injuries)

    def score_many(self, records: Sequence[RawEventRecord]) -> np.ndarray:
        m = self._require_model()
        x = _health_matrix(records)
        return (x - np.asarray(m.mean)) @ np.asarray(m.axis)
