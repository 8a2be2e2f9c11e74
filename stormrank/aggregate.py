"""
Regional top-1 aggregation
==========================

For one metric (dollar cost or health score):

1) keep only records whose metric is present and > 0
2) sum the metric per (region, event_type)
3) per region, keep the event type with the largest sum

Ties on the summed value are broken by event type name (alphabetically
first wins). The order is made explicit with a stable sort, so the result
never depends on the row order of the input.
"""

from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Sequence, Union

import pandas as pd
import structlog

from .models import NormalizedRecord, RankingRow, RegionalRanking

logger = structlog.get_logger(__name__)

MetricSelector = Union[str, Callable[[NormalizedRecord], Optional[float]]]


def _selector(metric: MetricSelector) -> Callable[[NormalizedRecord], Optional[float]]:
    if callable(metric):
        return metric
    return lambda r: getattr(r, metric)


def _metric_name(metric: MetricSelector) -> str:
    if callable(metric):
        return getattr(metric, "__name__", "metric")
    return metric


class RegionalAggregator:
    def aggregate(self, records: Sequence[NormalizedRecord], metric: MetricSelector) -> RegionalRanking:
        """Rank the top event type of every region by `metric`.

        `metric` is either an attribute name of NormalizedRecord
        ("total_cost", "total_health_cost") or a callable.
        """
        name = _metric_name(metric)
        get = _selector(metric)

        rows = []
        for r in records:
            v = get(r)
            if v is None or not v > 0:
                continue
            rows.append((r.region, r.event_type, float(v)))

        if not rows:
            logger.info("aggregated", metric=name, qualifying_records=0, regions=0)
            return RegionalRanking(metric=name)

        df = pd.DataFrame(rows, columns=["region", "event_type", "value"])
        sums = df.groupby(["region", "event_type"], sort=True, as_index=False)["value"].sum()

        # explicit tie-break: value desc, then event_type asc
        sums = sums.sort_values(
            ["region", "value", "event_type"],
            ascending=[True, False, True],
            kind="mergesort",
        )
        top = sums.drop_duplicates(subset="region", keep="first")
        top = top[top["value"] > 0]
        top = top.sort_values(["value", "region"], ascending=[False, True], kind="mergesort")

        ranking = RegionalRanking(
            metric=name,
            rows=tuple(
                RankingRow(region=reg, event_type=et, value=float(val))
                for reg, et, val in top.itertuples(index=False, name=None)
            ),
        )
        logger.info("aggregated", metric=name, qualifying_records=len(rows), regions=len(ranking))
        return ranking

    @staticmethod
    def missing_regions(records: Iterable[NormalizedRecord], ranking: RegionalRanking) -> List[str]:
        """Regions present in `records` but absent from `ranking`."""
        ranked = set(ranking.regions())
        return sorted({r.region for r in records} - ranked)
