"""Statistical testing modules."""

from colonarray.stats.correction import CorrectionMethod, adjust_pvalues, apply_correction
from colonarray.stats.ttest import column_ttest

__all__ = [
    "CorrectionMethod",
    "adjust_pvalues",
    "apply_correction",
    "column_ttest",
]
