"""Leave Optimizer.

Recommend which working days to take as leave so that they join weekends
and holidays into longer breaks.
"""

from loguru import logger

from leavewise.days import DayKind, classify_day
from leavewise.errors import ExtractionError, ExtractionErrorKind
from leavewise.extract import HolidayExtractor, ParsedHoliday
from leavewise.holidays import get_holidays, in_holidays, us_holidays
from leavewise.optimizer import (
    LeaveOptimizer,
    OptimizationResult,
    Opportunity,
    Recommendation,
    optimize_leaves,
)

logger.disable("leavewise")

__all__ = [
    "DayKind",
    "ExtractionError",
    "ExtractionErrorKind",
    "HolidayExtractor",
    "LeaveOptimizer",
    "OptimizationResult",
    "Opportunity",
    "ParsedHoliday",
    "Recommendation",
    "classify_day",
    "get_holidays",
    "in_holidays",
    "optimize_leaves",
    "us_holidays",
]
