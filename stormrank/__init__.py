"""
stormrank package
=================

Ranks severe-weather event types per region by economic loss and by a
composite public-health score.

- The pipeline entry point is `stormrank.pipeline.run`.
- Exponent codes and dollar amounts are handled in `exponents.py` / `monetary.py`.
- The health score (principal-component projection) is in `scoring.py`.
- Dataset loading is in `stormrank/loader.py`, the CLI in `stormrank/cli.py`.
"""

from .config import PipelineConfig
from .errors import (
    DegenerateDecomposition,
    EmptyInput,
    ExcessiveInvalidExponents,
    InvalidExponent,
    StormRankError,
)
from .models import RawEventRecord
from .pipeline import PipelineResult, run

__version__ = '0.1.0'

__all__ = [
    "PipelineConfig",
    "PipelineResult",
    "RawEventRecord",
    "run",
    "StormRankError",
    "InvalidExponent",
    "DegenerateDecomposition",
    "EmptyInput",
    "ExcessiveInvalidExponents",
]
