"""
Configuration & Global Constants
================================
This module serves as the central registry for numeric tolerances and defaults.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (e.g., ``1e-12``) scattered
   throughout the geometry and sampling code.
2. Consistency: The construction checks and the command-line demo read the
   same defaults.

Exports:
    AREA_EPSILON (float): Relative tolerance; a face with area at or below
        AREA_EPSILON * longest_edge**2 is degenerate.
    DEFAULT_SAMPLE_COUNT (int): Number of samples drawn by the command-line demo.
    DEFAULT_SEED (int | None): Seed used by the demo when none is given.
    LOG_FORMAT (str): Format string for log records.
    LOG_DATE_FORMAT (str): Date format for log records.
"""
from typing import Optional

# Geometry tolerances (dimensionless)
AREA_EPSILON: float = 1e-12

# Sampling defaults
DEFAULT_SAMPLE_COUNT: int = 10_000
DEFAULT_SEED: Optional[int] = None

# Logging
LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT: str = '%H:%M:%S'
