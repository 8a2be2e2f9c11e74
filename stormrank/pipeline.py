"""
Pipeline
========

`run(records, config)` is the single entry point of the core:

1) fit the composite health model over ALL records (frozen before use)
2) normalize monetary fields (invalid exponents -> cost None, counted)
3) score every record with the fitted model
4) rank regions twice, independently: by dollar cost and by health score
5) collect diagnostics

Nothing is cached between runs: each call builds its own resolver, scorer
and aggregator, so the same input and config always give the same tables.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from .aggregate import RegionalAggregator
from .config import PipelineConfig
from .errors import EmptyInput, ExcessiveInvalidExponents
from .exponents import ExponentResolver
from .models import CompositeModel, Diagnostics, NormalizedRecord, RawEventRecord, RegionalRanking
from .monetary import MonetaryNormalizer
from .scoring import CompositeScorer

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    economic: RegionalRanking
    health: RegionalRanking
    diagnostics: Diagnostics
    model: CompositeModel


def normalize_records(
    records: Sequence[RawEventRecord],
    normalizer: MonetaryNormalizer,
    scorer: CompositeScorer,
) -> list:
    """Build NormalizedRecords; the scorer must already be fitted."""
    costs = normalizer.normalize(records)
    scores = scorer.score_many(records)
    return [
        NormalizedRecord(
            region=rec.region,
            event_type=rec.event_type,
            total_cost=cost,
            total_health_cost=float(score),
        )
        for rec, cost, score in zip(records, costs, scores)
    ]


def run(records: Sequence[RawEventRecord], config: Optional[PipelineConfig] = None) -> PipelineResult:
    config = config or PipelineConfig()
    records = list(records)
    if not records:
        raise EmptyInput("No records to process")

    log = logger.bind(records=len(records))
    log.info("pipeline_started", variance_threshold=config.variance_threshold)

    scorer = CompositeScorer(config.variance_threshold, config.eigen_tolerance)
    model = scorer.fit(records)

    resolver = ExponentResolver(config.exponent_table())
    normalized = normalize_records(records, MonetaryNormalizer(resolver), scorer)

    exceeded = resolver.exceeds(config.max_invalid_fraction)
    if exceeded:
        if config.strict_exponents:
            raise ExcessiveInvalidExponents(resolver.rejected_fraction, config.max_invalid_fraction)
        log.warning(
            "invalid_exponent_fraction_exceeded",
            fraction=resolver.rejected_fraction,
            threshold=config.max_invalid_fraction,
        )

    aggregator = RegionalAggregator()
    economic = aggregator.aggregate(normalized, "total_cost")
    health = aggregator.aggregate(normalized, "total_health_cost")

    econ_missing = aggregator.missing_regions(normalized, economic)
    health_missing = aggregator.missing_regions(normalized, health)

    diagnostics = Diagnostics(
        n_records=len(records),
        n_invalid_exponent=resolver.rejected,
        invalid_exponent_fraction=resolver.rejected_fraction,
        explained_variance=model.explained_variance,
        economic_regions_missing=len(econ_missing),
        health_regions_missing=len(health_missing),
        regions_without_qualifying_event=len(set(econ_missing) | set(health_missing)),
        invalid_fraction_exceeded=exceeded,
        rejected_codes=dict(resolver.rejected_codes),
    )
    log.info("pipeline_finished", **diagnostics.as_dict())
    return PipelineResult(economic=economic, health=health, diagnostics=diagnostics, model=model)
