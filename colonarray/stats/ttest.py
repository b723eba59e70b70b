"""
Column-wise two-sample t-tests.

Each column of the two input matrices is tested independently; non-finite
values are dropped per column. Tests that cannot be computed (too few
observations, essentially constant data) yield NaN instead of raising.
"""

import numpy as np
from scipy import stats


def _column_moments(x: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return finite-value count, mean and sample variance per column."""
    finite = np.isfinite(x)
    n = finite.sum(axis=0).astype(np.float64)
    values = np.where(finite, x, 0.0)

    with np.errstate(invalid="ignore", divide="ignore"):
        mean = values.sum(axis=0) / n
        centered = np.where(finite, x - mean, 0.0)
        var = (centered**2).sum(axis=0) / (n - 1)

    return n, mean, var


def column_ttest(
    group_a: np.ndarray,
    group_b: np.ndarray,
    equal_var: bool = False,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Two-sided two-sample t-test for every column.

    Parameters
    ----------
    group_a : np.ndarray
        Values of group A (n_samples_a, n_features).
    group_b : np.ndarray
        Values of group B (n_samples_b, n_features).
    equal_var : bool, default=False
        If False, Welch's test with Welch-Satterthwaite degrees of freedom.
        If True, Student's test with pooled variance.

    Returns
    -------
    tuple of (np.ndarray, np.ndarray)
        (statistics, pvalues), each of length n_features. Both are NaN for
        features whose test is undefined.

    Examples
    --------
    >>> a = np.array([[1.0], [2.0], [3.0], [4.0], [5.0]])
    >>> b = np.array([[2.0], [4.0], [6.0], [8.0], [10.0]])
    >>> t, p = column_ttest(a, b)
    >>> round(float(t[0]), 4)
    -1.8974
    """
    group_a = np.asarray(group_a, dtype=np.float64)
    group_b = np.asarray(group_b, dtype=np.float64)
    if group_a.ndim == 1:
        group_a = group_a[:, np.newaxis]
    if group_b.ndim == 1:
        group_b = group_b[:, np.newaxis]
    if group_a.shape[1] != group_b.shape[1]:
        raise ValueError(
            f"Feature count mismatch: group A has {group_a.shape[1]}, group B has {group_b.shape[1]}"
        )

    n_a, mean_a, var_a = _column_moments(group_a)
    n_b, mean_b, var_b = _column_moments(group_b)

    with np.errstate(invalid="ignore", divide="ignore"):
        if equal_var:
            df = n_a + n_b - 2
            # A single observation contributes no variance term
            ss_a = np.where(n_a > 1, (n_a - 1) * var_a, 0.0)
            ss_b = np.where(n_b > 1, (n_b - 1) * var_b, 0.0)
            pooled = (ss_a + ss_b) / df
            stderr = np.sqrt(pooled * (1.0 / n_a + 1.0 / n_b))
            defined = (n_a >= 1) & (n_b >= 1) & (df >= 1)
        else:
            se2_a = var_a / n_a
            se2_b = var_b / n_b
            stderr = np.sqrt(se2_a + se2_b)
            df = (se2_a + se2_b) ** 2 / (se2_a**2 / (n_a - 1) + se2_b**2 / (n_b - 1))
            defined = (n_a >= 2) & (n_b >= 2)

        # Essentially constant data: the statistic is not meaningful
        tol = 10 * np.finfo(np.float64).eps * np.maximum(np.abs(mean_a), np.abs(mean_b))
        defined &= np.isfinite(stderr) & (stderr > tol)

        statistic = np.where(defined, (mean_a - mean_b) / stderr, np.nan)
        pvalues = np.where(defined, 2.0 * stats.t.sf(np.abs(statistic), df), np.nan)

    return statistic, np.minimum(pvalues, 1.0)
