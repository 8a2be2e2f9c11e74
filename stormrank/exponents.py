"""
Damage exponent codes
=====================

Storm damage figures come as a number plus a one-character magnitude code
(`PROPDMGEXP` / `CROPDMGEXP`). The raw column is dirty: besides the documented
letters it holds digits, `?`, `-`, `+` and blanks.

`ExponentResolver` treats the codes as a finite domain:
- a known code resolves to its multiplier,
- anything else raises `InvalidExponent` (never a silent zero),
- every record it checks is counted, so callers can see what share of the
  data was rejected.
"""

from __future__ import annotations
from collections import Counter
from typing import Dict, Mapping, Optional, Tuple

import structlog

from .errors import InvalidExponent

logger = structlog.get_logger(__name__)

DEFAULT_EXPONENT_TABLE: Dict[str, float] = {
    "": 1.0,
    "0": 1.0,
    "H": 1e2,
    "K": 1e3,
    "M": 1e6,
    "B": 1e9,
}


def normalize_code(code: Optional[str]) -> str:
    """Upper-case and strip a raw code; missing values become ''.

    A whitespace-only code therefore reads as the blank code (multiplier 1);
    the loader strips cells the same way, so both paths agree.
    """
    if code is None:
        return ""
    if isinstance(code, float) and code != code:  # NaN from pandas
        return ""
    return str(code).strip().upper()


def build_exponent_table(codes) -> Dict[str, float]:
    """Build a multiplier table restricted to `codes`.

    Letter codes take their multiplier from DEFAULT_EXPONENT_TABLE; a digit
    code d means 10**d.
    """
    table: Dict[str, float] = {}
    for raw in codes:
        c = normalize_code(raw)
        if c in DEFAULT_EXPONENT_TABLE:
            table[c] = DEFAULT_EXPONENT_TABLE[c]
        elif len(c) == 1 and c.isdigit():
            table[c] = 10.0 ** int(c)
        else:
            raise ValueError(f"No multiplier known for exponent code {raw!r}")
    return table


class ExponentResolver:
    """Map exponent codes to multipliers and keep a tally of rejected records."""

    def __init__(self, table: Optional[Mapping[str, float]] = None):
        self.table: Dict[str, float] = dict(DEFAULT_EXPONENT_TABLE if table is None else table)
        self.checked = 0
        self.rejected = 0
        self.rejected_codes: Counter = Counter()

    def multiplier(self, code: Optional[str]) -> float:
        c = normalize_code(code)
        try:
            return self.table[c]
        except KeyError:
            raise InvalidExponent(c) from None

    def resolve(self, *codes: Optional[str]) -> Tuple[float, ...]:
        """Resolve every exponent code of ONE record.

        The record counts as rejected if any of its codes is invalid; the
        first invalid code is re-raised.
        """
        self.checked += 1
        norm = [normalize_code(c) for c in codes]
        bad = [c for c in norm if c not in self.table]
        if bad:
            self.rejected += 1
            for c in bad:
                self.rejected_codes[c] += 1
            raise InvalidExponent(bad[0])
        return tuple(self.table[c] for c in norm)

    @property
    def rejected_fraction(self) -> float:
        if self.checked == 0:
            return 0.0
        return self.rejected / self.checked

    def exceeds(self, max_fraction: Optional[float]) -> bool:
        return max_fraction is not None and self.rejected_fraction > max_fraction
