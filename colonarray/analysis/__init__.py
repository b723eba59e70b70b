"""Analysis modules for tumor vs normal expression comparison."""

from colonarray.analysis.correlation import (
    correlation_difference,
    group_correlation,
    top_differential_pairs,
)
from colonarray.analysis.multiple_testing import (
    GroupPartition,
    MultiTestCorrector,
    MultiTestResult,
    multiple_t_test,
)

__all__ = [
    "GroupPartition",
    "MultiTestCorrector",
    "MultiTestResult",
    "multiple_t_test",
    "group_correlation",
    "correlation_difference",
    "top_differential_pairs",
]
