"""
Dataset loader (StormData export -> RawEventRecord list)
========================================================

Reads the NOAA storm events export and converts each row into a
`RawEventRecord`.

Key ideas:
- The raw file is usually a bzip2-compressed CSV; pandas infers the
  compression from the suffix. `.xlsx` extracts are read with openpyxl.
- We try multiple possible column names because exports vary in casing.
- Event types are stripped and upper-cased; exponent codes are kept as text
  so that `ExponentResolver` sees exactly what the file holds.
- The loader returns immutable records; it never edits the source file.
"""

from __future__ import annotations
from typing import List
import re

import pandas as pd
import structlog

from .models import RawEventRecord

logger = structlog.get_logger(__name__)


def _to_float(x, column: str) -> float:
    """Convert a cell to float; blanks count as 0.0, unparseable text raises."""
    if pd.isna(x): return 0.0
    try: return float(x)
    except (TypeError, ValueError):
        raise ValueError(f"{column} is not a number: {x!r}") from None

def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def read_frame(path: str) -> pd.DataFrame:
    if str(path).lower().endswith((".xlsx", ".xlsm")):
        return pd.read_excel(path, engine="openpyxl", dtype=object)
    # exponent columns must stay text ("0", "", "?")
    return pd.read_csv(path, dtype=object, keep_default_na=False, na_values=[""], low_memory=False)


def records_from_frame(df: pd.DataFrame) -> List[RawEventRecord]:
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    region_col = _col(df, "STATE", "State", "Region")
    type_col = _col(df, "EVTYPE", "EVENT_TYPE", "Event Type")
    fat_col = _col(df, "FATALITIES", "Deaths")
    inj_col = _col(df, "INJURIES")
    prop_col = _col(df, "PROPDMG", "Property Damage")
    prop_exp_col = _col(df, "PROPDMGEXP", "Property Damage Exp")
    crop_col = _col(df, "CROPDMG", "Crop Damage")
    crop_exp_col = _col(df, "CROPDMGEXP", "Crop Damage Exp")

    records: List[RawEventRecord] = []
    for i, row in enumerate(df[[region_col, type_col, fat_col, inj_col,
                               prop_col, prop_exp_col, crop_col, crop_exp_col]].itertuples(index=False)):
        try:
            records.append(RawEventRecord(
                region=_to_str(row[0]),
                event_type=_to_str(row[1]).upper(),
                fatalities=_to_float(row[2], fat_col),
                injuries=_to_float(row[3], inj_col),
                prop_dmg=_to_float(row[4], prop_col),
                prop_dmg_exp=_to_str(row[5]),
                crop_dmg=_to_float(row[6], crop_col),
                crop_dmg_exp=_to_str(row[7]),
            ))
        except ValueError as e:
            raise ValueError(f"Row {i}: {e}") from e
    return records


def load_storm_events(path: str) -> List[RawEventRecord]:
    """Load a StormData export (CSV, optionally compressed, or XLSX)."""
    df = read_frame(path)
    records = records_from_frame(df)
    logger.info("dataset_loaded", path=str(path), records=len(records))
    return records
