"""
Export helpers
==============

Serialization lives outside the core: the pipeline returns plain objects and
these helpers write them out.

- CSV: one file per ranking (region, event_type, value)
- JSON: both rankings plus the diagnostics, keeps field names
"""

from __future__ import annotations
from typing import Optional
import csv
import json

from .models import RegionalRanking
from .pipeline import PipelineResult


def export_csv(ranking: RegionalRanking, path: str) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["region", "event_type", ranking.metric])
        for r in ranking:
            w.writerow([r.region, r.event_type, repr(r.value)])


def _ranking_payload(ranking: RegionalRanking):
    return [{"region": r.region, "event_type": r.event_type, "value": r.value} for r in ranking]


def export_json(result: PipelineResult, path: str) -> None:
    """Write both rankings, the fitted model and the diagnostics to one JSON file."""
    m = result.model
    payload = {
        "economic": _ranking_payload(result.economic),
        "health": _ranking_payload(result.health),
        "model": {
            "mean": list(m.mean),
            "axis": list(m.axis),
            "eigenvalues": list(m.eigenvalues),
            "explained_variance": m.explained_variance,
            "n_records": m.n_records,
        },
        "diagnostics": result.diagnostics.as_dict(),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def format_table(ranking: RegionalRanking, limit: Optional[int] = None) -> str:
    """Plain-text table for the terminal."""
    rows = ranking.rows if limit is None else ranking.rows[:limit]
    lines = [f"{'REGION':<8}{'EVENT TYPE':<32}{ranking.metric:>20}"]
    for r in rows:
        lines.append(f"{r.region:<8}{r.event_type[:31]:<32}{r.value:>20,.2f}")
    if limit is not None and len(ranking) > limit:
        lines.append(f"... ({len(ranking)} regions, showing {limit})")
    return "\n".join(lines)
