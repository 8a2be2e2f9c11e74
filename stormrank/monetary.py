"""
Monetary normalization
======================

Converts (value, exponent code) pairs into dollars.

A record's total cost is only trusted when BOTH its property and its crop
exponent resolve. Validation happens before any arithmetic, so an unknown
code can never turn into a zero that quietly shrinks a sum.
"""

from __future__ import annotations
from typing import Iterable, List, Optional

import structlog

from .errors import InvalidExponent
from .exponents import ExponentResolver
from .models import RawEventRecord

logger = structlog.get_logger(__name__)


class MonetaryNormalizer:
    def __init__(self, resolver: Optional[ExponentResolver] = None):
        self.resolver = resolver or ExponentResolver()

    def amount(self, value: float, code: Optional[str]) -> float:
        """Return value * multiplier(code); raises InvalidExponent."""
        return value * self.resolver.multiplier(code)

    def total_cost(self, record: RawEventRecord) -> float:
        """Property + crop damage of one record, in dollars."""
        prop_mult, crop_mult = self.resolver.resolve(record.prop_dmg_exp, record.crop_dmg_exp)
        return record.prop_dmg * prop_mult + record.crop_dmg * crop_mult

    def normalize(self, records: Iterable[RawEventRecord]) -> List[Optional[float]]:
        """Total cost per record, None where an exponent code is invalid."""
        out: List[Optional[float]] = []
        for rec in records:
            try:
                out.append(self.total_cost(rec))
            except InvalidExponent as e:
                logger.debug("invalid_exponent", region=rec.region, event_type=rec.event_type, code=e.code)
                out.append(None)
        logger.info(
            "monetary_normalized",
            records=self.resolver.checked,
            rejected=self.resolver.rejected,
            rejected_fraction=round(self.resolver.rejected_fraction, 6),
        )
        return out
