"""
Configuration for a tumor vs normal expression analysis run.
"""

import json
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Optional

import numpy as np

from colonarray.stats.correction import CorrectionMethod


def _convert_to_native(obj: Any) -> Any:
    """Convert numpy types to native Python types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: _convert_to_native(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_native(v) for v in obj]
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, Enum):
        return obj.value
    else:
        return obj


@dataclass
class AnalysisConfig:
    """
    Analysis configuration.

    Parameters
    ----------
    data_path : str, optional
        Dataset file (.h5/.hdf5/.csv/.tsv).
    expression_key : str
        HDF5 dataset with the expression matrix.
    status_key : str
        HDF5 dataset or table column with group labels.
    reference_group : str, optional
        Label treated as group A. Defaults to the first label in sorted order.
    equal_var : bool
        Pooled-variance t-test instead of Welch's test.
    fwer_method : CorrectionMethod
        Correction controlling the family-wise error rate.
    fdr_method : CorrectionMethod
        Correction controlling the false discovery rate.
    alpha : float
        Significance level for counting rejections.
    correlation_method : str
        "spearman" or "pearson" for within-group gene correlation.
    n_top_pairs : int
        Number of differential gene pairs to report. 0 skips the correlation step.
    make_plots : bool
        Write figures to ``output_dir``.
    output_dir : str, optional
        Directory for result files. Nothing is written if None.
    """

    data_path: Optional[str] = None
    expression_key: str = "expression"
    status_key: str = "status"
    reference_group: Optional[str] = None
    equal_var: bool = False
    fwer_method: CorrectionMethod = CorrectionMethod.HOLM
    fdr_method: CorrectionMethod = CorrectionMethod.BY
    alpha: float = 0.10
    correlation_method: str = "spearman"
    n_top_pairs: int = 10
    make_plots: bool = True
    output_dir: Optional[str] = None

    def __post_init__(self):
        self.fwer_method = CorrectionMethod.parse(self.fwer_method)
        self.fdr_method = CorrectionMethod.parse(self.fdr_method)
        if not 0.0 < self.alpha < 1.0:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return _convert_to_native(asdict(self))

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> "AnalysisConfig":
        """Load configuration from JSON file. Unknown keys are ignored."""
        with open(path) as f:
            d = json.load(f)

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})
