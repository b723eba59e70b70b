"""
Per-gene two-sample testing with multiple-comparison correction.

Every column (gene) of a samples x genes matrix is compared between two
groups of rows with a two-sided t-test; the resulting p-values are then
adjusted across all genes with a chosen correction method.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

import numpy as np

from colonarray.errors import InvalidGroupCountError, ShapeMismatchError
from colonarray.stats.correction import CorrectionMethod, adjust_pvalues
from colonarray.stats.ttest import column_ttest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupPartition:
    """
    Assignment of matrix rows to two groups.

    Group A is ``reference_group`` when given, otherwise the first label in
    sorted order (``np.unique`` order). For tumor/normal labels the default
    therefore makes "normal" group A.
    """

    group_a: Any
    group_b: Any
    mask_a: np.ndarray
    mask_b: np.ndarray

    @classmethod
    def from_labels(cls, labels, reference_group: Optional[Any] = None) -> "GroupPartition":
        labels = np.asarray(labels)
        if labels.ndim != 1:
            raise ShapeMismatchError(f"labels must be 1-D, got shape {labels.shape}")

        levels = np.unique(labels)
        if len(levels) != 2:
            raise InvalidGroupCountError(
                f"Expected exactly 2 distinct labels, found {len(levels)}: {list(levels)}"
            )

        if reference_group is None:
            group_a, group_b = levels[0], levels[1]
        elif reference_group == levels[0]:
            group_a, group_b = levels[0], levels[1]
        elif reference_group == levels[1]:
            group_a, group_b = levels[1], levels[0]
        else:
            raise ValueError(
                f"Reference group '{reference_group}' not found in labels. "
                f"Available: {list(levels)}"
            )

        return cls(
            group_a=group_a,
            group_b=group_b,
            mask_a=labels == group_a,
            mask_b=labels == group_b,
        )

    @property
    def n_a(self) -> int:
        return int(np.sum(self.mask_a))

    @property
    def n_b(self) -> int:
        return int(np.sum(self.mask_b))


@dataclass
class MultiTestResult:
    """Raw, FWER-adjusted and FDR-adjusted p-values for every gene."""

    feature_names: list[str]
    pvalues: np.ndarray
    fwer_pvalues: np.ndarray
    fdr_pvalues: np.ndarray
    fwer_method: str
    fdr_method: str
    alpha: float
    partition: Optional[GroupPartition] = None

    @property
    def n_features(self) -> int:
        return len(self.pvalues)

    def _select(self, which: str) -> np.ndarray:
        if which == "raw":
            return self.pvalues
        if which == "fwer":
            return self.fwer_pvalues
        if which == "fdr":
            return self.fdr_pvalues
        raise ValueError(f"Unknown p-value set: '{which}'. Use 'raw', 'fwer', or 'fdr'.")

    def rejected(self, which: str = "raw", alpha: Optional[float] = None) -> np.ndarray:
        """Boolean mask of genes with p-value <= alpha."""
        alpha = self.alpha if alpha is None else alpha
        return self._select(which) <= alpha

    def n_rejected(self, which: str = "raw", alpha: Optional[float] = None) -> int:
        """Number of rejected null hypotheses at alpha."""
        return int(np.sum(self.rejected(which, alpha)))

    def rejection_counts(self, alpha: Optional[float] = None) -> dict[str, int]:
        return {which: self.n_rejected(which, alpha) for which in ("raw", "fwer", "fdr")}

    def get_rejected_genes(self, which: str = "fwer", alpha: Optional[float] = None) -> list[str]:
        """Return names of rejected genes, most significant first."""
        values = self._select(which)
        idx = np.where(self.rejected(which, alpha))[0]
        idx = idx[np.argsort(values[idx], kind="stable")]
        return [self.feature_names[i] for i in idx]

    def sorted_pvalues(self) -> dict[str, np.ndarray]:
        """Sorted p-value curves keyed by display label, NaNs dropped."""
        curves = {
            "raw": self.pvalues,
            self.fwer_method: self.fwer_pvalues,
            self.fdr_method: self.fdr_pvalues,
        }
        return {label: np.sort(v[~np.isnan(v)]) for label, v in curves.items()}

    def to_dataframe(self):
        """Convert to pandas DataFrame."""
        import pandas as pd

        return pd.DataFrame(
            {
                "gene": self.feature_names,
                "pvalue": self.pvalues,
                f"pvalue_{self.fwer_method}": self.fwer_pvalues,
                f"pvalue_{self.fdr_method}": self.fdr_pvalues,
            }
        )


class MultiTestCorrector:
    """
    Per-feature two-sample t-tests with multiple-comparison correction.

    Parameters
    ----------
    equal_var : bool, default=False
        Use the pooled-variance Student test instead of Welch's test.
    reference_group : optional
        Label mapped to group A. Defaults to the first label in sorted order.

    Example
    -------
    >>> corrector = MultiTestCorrector()
    >>> holm = corrector.compute(expression, status, "holm")
    >>> int(np.sum(holm <= 0.10))
    """

    def __init__(self, equal_var: bool = False, reference_group: Optional[Any] = None):
        self.equal_var = equal_var
        self.reference_group = reference_group

    def _validate(self, matrix, labels) -> tuple[np.ndarray, GroupPartition]:
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.ndim != 2:
            raise ShapeMismatchError(f"matrix must be 2-D, got shape {matrix.shape}")

        labels = np.asarray(labels)
        if len(labels) != matrix.shape[0]:
            raise ShapeMismatchError(
                f"Label count ({len(labels)}) does not match matrix rows ({matrix.shape[0]})"
            )

        return matrix, GroupPartition.from_labels(labels, self.reference_group)

    def _raw(self, matrix: np.ndarray, partition: GroupPartition) -> np.ndarray:
        _, pvalues = column_ttest(
            matrix[partition.mask_a],
            matrix[partition.mask_b],
            equal_var=self.equal_var,
        )
        n_undefined = int(np.sum(np.isnan(pvalues)))
        if n_undefined:
            logger.debug(f"{n_undefined}/{len(pvalues)} features have an undefined test")
        return pvalues

    def raw_pvalues(self, matrix, labels) -> np.ndarray:
        """Unadjusted p-value per column."""
        matrix, partition = self._validate(matrix, labels)
        return self._raw(matrix, partition)

    def compute(
        self,
        matrix,
        labels,
        method: Union[CorrectionMethod, str, None] = CorrectionMethod.NONE,
    ) -> np.ndarray:
        """
        Adjusted p-value per column.

        Parameters
        ----------
        matrix : array-like
            Expression matrix (n_samples, n_features).
        labels : array-like
            Group label per row; exactly two distinct values.
        method : CorrectionMethod or str
            Correction method. "none" returns the raw p-values.

        Returns
        -------
        np.ndarray
            Adjusted p-values, one per column in column order. NaN where the
            test is undefined.

        Raises
        ------
        ShapeMismatchError
            If the label count differs from the row count.
        InvalidGroupCountError
            If labels do not contain exactly two distinct values.
        UnknownCorrectionMethodError
            If ``method`` is not a supported correction.
        """
        method = CorrectionMethod.parse(method)
        matrix, partition = self._validate(matrix, labels)
        return adjust_pvalues(self._raw(matrix, partition), method)

    def run(
        self,
        matrix,
        labels,
        fwer_method: Union[CorrectionMethod, str] = CorrectionMethod.HOLM,
        fdr_method: Union[CorrectionMethod, str] = CorrectionMethod.BY,
        alpha: float = 0.10,
        feature_names: Optional[list[str]] = None,
    ) -> MultiTestResult:
        """
        Compute raw, FWER-adjusted and FDR-adjusted p-values in one pass.

        The t-tests are run once and both corrections are applied to the
        same raw vector.
        """
        fwer_method = CorrectionMethod.parse(fwer_method)
        fdr_method = CorrectionMethod.parse(fdr_method)
        matrix, partition = self._validate(matrix, labels)

        if feature_names is None:
            feature_names = [f"gene_{i + 1}" for i in range(matrix.shape[1])]
        elif len(feature_names) != matrix.shape[1]:
            raise ShapeMismatchError(
                f"Feature name count ({len(feature_names)}) does not match "
                f"matrix columns ({matrix.shape[1]})"
            )

        logger.info(
            f"Testing {matrix.shape[1]} features: "
            f"'{partition.group_a}' (n={partition.n_a}) vs '{partition.group_b}' (n={partition.n_b})"
        )
        pvalues = self._raw(matrix, partition)

        return MultiTestResult(
            feature_names=list(feature_names),
            pvalues=pvalues,
            fwer_pvalues=adjust_pvalues(pvalues, fwer_method),
            fdr_pvalues=adjust_pvalues(pvalues, fdr_method),
            fwer_method=fwer_method.value,
            fdr_method=fdr_method.value,
            alpha=alpha,
            partition=partition,
        )


def multiple_t_test(
    matrix,
    labels,
    method: Union[CorrectionMethod, str, None] = "none",
    equal_var: bool = False,
    reference_group: Optional[Any] = None,
) -> np.ndarray:
    """
    Per-column t-test p-values adjusted with ``method``.

    Functional shortcut for ``MultiTestCorrector(...).compute(...)``.

    Examples
    --------
    >>> pval = multiple_t_test(expression, status)
    >>> pval_holm = multiple_t_test(expression, status, "holm")
    >>> pval_by = multiple_t_test(expression, status, "BY")
    """
    corrector = MultiTestCorrector(equal_var=equal_var, reference_group=reference_group)
    return corrector.compute(matrix, labels, method)
