"""
colonarray - differential expression analysis of tumor vs normal microarrays

Per-gene two-sample t-tests with multiple-comparison correction, and
within-group gene correlation comparison, for two-group expression data
such as the Alon et al. (1999) colon tissue arrays.

Key Features:
- Vectorized Welch / Student t-tests per gene with NaN for degenerate genes
- Holm, Hochberg, Hommel, Bonferroni (FWER) and BH, BY (FDR) corrections
- Explicit reference-group convention for label-to-group mapping
- Spearman correlation differences between tissue groups
- HDF5 / CSV dataset loading and result export

Example:
    >>> from colonarray import MultiTestCorrector, load_microarray
    >>> data = load_microarray("alon1999.h5")
    >>> corrector = MultiTestCorrector()
    >>> holm = corrector.compute(data["expression"], data["status"], "holm")
"""

__version__ = "0.1.0"

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
from colonarray.config import AnalysisConfig
from colonarray.errors import (
    ColonArrayError,
    InvalidGroupCountError,
    ShapeMismatchError,
    UnknownCorrectionMethodError,
)
from colonarray.io.loaders import load_microarray
from colonarray.simulation import simulate_microarray
from colonarray.stats.correction import CorrectionMethod, adjust_pvalues, apply_correction
from colonarray.stats.ttest import column_ttest

__all__ = [
    # Version
    "__version__",
    # Errors
    "ColonArrayError",
    "ShapeMismatchError",
    "InvalidGroupCountError",
    "UnknownCorrectionMethodError",
    # Stats
    "CorrectionMethod",
    "adjust_pvalues",
    "apply_correction",
    "column_ttest",
    # Multiple testing
    "GroupPartition",
    "MultiTestCorrector",
    "MultiTestResult",
    "multiple_t_test",
    # Correlation
    "group_correlation",
    "correlation_difference",
    "top_differential_pairs",
    # Data
    "load_microarray",
    "simulate_microarray",
    # Config
    "AnalysisConfig",
]
