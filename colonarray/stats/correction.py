"""
Multiple-comparison correction of p-values.

Implements:
- Bonferroni, Holm, Hochberg, Hommel (control FWER)
- Benjamini-Hochberg (BH) and Benjamini-Yekutieli (BY) (control FDR)

NaN p-values are excluded from ranking and from the number of tests,
then restored at their original positions.
"""

from enum import Enum
from typing import Union

import numpy as np

from colonarray.errors import UnknownCorrectionMethodError


class CorrectionMethod(Enum):
    """Supported p-value correction methods."""

    NONE = "none"
    BONFERRONI = "bonferroni"
    HOLM = "holm"
    HOCHBERG = "hochberg"
    HOMMEL = "hommel"
    BH = "BH"
    BY = "BY"

    @classmethod
    def parse(cls, method: Union["CorrectionMethod", str, None]) -> "CorrectionMethod":
        """
        Resolve a method given as member, name or None.

        Names are case-insensitive; "fdr" is accepted for BH.
        """
        if isinstance(method, cls):
            return method
        if method is None:
            return cls.NONE
        if isinstance(method, str):
            key = method.strip().lower()
            if key in _ALIASES:
                return _ALIASES[key]
        available = ", ".join(m.value for m in cls)
        raise UnknownCorrectionMethodError(
            f"Unknown correction method: '{method}'. Available: {available}"
        )


_ALIASES = {m.value.lower(): m for m in CorrectionMethod}
_ALIASES["fdr"] = CorrectionMethod.BH


def _adjust_none(p: np.ndarray) -> np.ndarray:
    return p.copy()


def _adjust_bonferroni(p: np.ndarray) -> np.ndarray:
    return np.minimum(p * len(p), 1.0)


def _adjust_holm(p: np.ndarray) -> np.ndarray:
    n = len(p)
    sorted_idx = np.argsort(p, kind="stable")
    factors = n - np.arange(n)

    # Step-down: running maximum from the smallest p-value
    adjusted_sorted = np.maximum.accumulate(p[sorted_idx] * factors)
    adjusted_sorted = np.minimum(adjusted_sorted, 1.0)

    adjusted = np.empty(n)
    adjusted[sorted_idx] = adjusted_sorted
    return adjusted


def _step_up(p: np.ndarray, factors: np.ndarray) -> np.ndarray:
    """Multiply ascending p-values by factors, then take the running minimum from the end."""
    n = len(p)
    sorted_idx = np.argsort(p, kind="stable")
    adjusted_sorted = p[sorted_idx] * factors

    adjusted_sorted = np.minimum.accumulate(adjusted_sorted[::-1])[::-1]
    adjusted_sorted = np.minimum(adjusted_sorted, 1.0)

    adjusted = np.empty(n)
    adjusted[sorted_idx] = adjusted_sorted
    return adjusted


def _adjust_hochberg(p: np.ndarray) -> np.ndarray:
    n = len(p)
    return _step_up(p, n - np.arange(n))


def _adjust_bh(p: np.ndarray) -> np.ndarray:
    n = len(p)
    ranks = np.arange(1, n + 1)
    return _step_up(p, n / ranks)


def _adjust_by(p: np.ndarray) -> np.ndarray:
    n = len(p)
    ranks = np.arange(1, n + 1)

    # BY correction factor: sum(1/i) for i in 1..n
    c_n = np.sum(1.0 / ranks)
    return _step_up(p, n * c_n / ranks)


def _adjust_hommel(p: np.ndarray) -> np.ndarray:
    n = len(p)
    if n == 2:
        return _adjust_hochberg(p)

    sorted_idx = np.argsort(p, kind="stable")
    ps = p[sorted_idx]
    ranks = np.arange(1, n + 1)

    q = np.full(n, np.min(n * ps / ranks))
    pa = q.copy()
    for m in range(n - 1, 1, -1):
        split = n - m + 1
        q1 = np.min(m * ps[split:] / np.arange(2, m + 1))
        q[:split] = np.minimum(m * ps[:split], q1)
        q[split:] = q[split - 1]
        pa = np.maximum(pa, q)

    adjusted = np.empty(n)
    adjusted[sorted_idx] = np.maximum(pa, ps)
    return adjusted


_ADJUSTERS = {
    CorrectionMethod.NONE: _adjust_none,
    CorrectionMethod.BONFERRONI: _adjust_bonferroni,
    CorrectionMethod.HOLM: _adjust_holm,
    CorrectionMethod.HOCHBERG: _adjust_hochberg,
    CorrectionMethod.HOMMEL: _adjust_hommel,
    CorrectionMethod.BH: _adjust_bh,
    CorrectionMethod.BY: _adjust_by,
}

_missing = set(CorrectionMethod) - set(_ADJUSTERS)
if _missing:
    raise ImportError(f"No adjustment routine registered for: {sorted(m.value for m in _missing)}")


def adjust_pvalues(pvalues, method: Union[CorrectionMethod, str, None] = "none") -> np.ndarray:
    """
    Adjust p-values for multiple comparisons.

    Parameters
    ----------
    pvalues : array-like
        1-D array of p-values. NaN entries are left as NaN.
    method : CorrectionMethod or str, default="none"
        Correction method; see ``CorrectionMethod``.

    Returns
    -------
    np.ndarray
        Adjusted p-values in the input order.

    Examples
    --------
    >>> adjust_pvalues([0.01, 0.04, 0.03], method="holm")
    array([0.03, 0.06, 0.06])
    """
    method = CorrectionMethod.parse(method)
    pvalues = np.asarray(pvalues, dtype=np.float64)
    if pvalues.ndim != 1:
        raise ValueError(f"pvalues must be 1-D, got shape {pvalues.shape}")

    adjusted = np.full(len(pvalues), np.nan)

    nan_mask = np.isnan(pvalues)
    valid_pvalues = pvalues[~nan_mask]
    if len(valid_pvalues) == 0:
        return adjusted

    adjusted[~nan_mask] = _ADJUSTERS[method](valid_pvalues)
    return adjusted


def apply_correction(
    pvalues,
    method: Union[CorrectionMethod, str, None] = "BY",
    alpha: float = 0.10,
) -> dict:
    """
    Apply a correction and threshold the adjusted p-values.

    Parameters
    ----------
    pvalues : array-like
        Array of p-values.
    method : CorrectionMethod or str, default="BY"
        Correction method.
    alpha : float, default=0.10
        Significance level; a test is rejected when its adjusted p-value <= alpha.

    Returns
    -------
    dict
        Dictionary with:
        - 'adjusted_pvalues': Corrected p-values
        - 'significant': Boolean mask of rejected hypotheses
        - 'n_significant': Number of rejections
        - 'method': Method used (CorrectionMethod value)
        - 'alpha': Alpha threshold used
    """
    method = CorrectionMethod.parse(method)
    adjusted = adjust_pvalues(pvalues, method)

    # NaN compares False, so undefined tests are never rejected
    significant = adjusted <= alpha

    return {
        "adjusted_pvalues": adjusted,
        "significant": significant,
        "n_significant": int(np.sum(significant)),
        "method": method.value,
        "alpha": alpha,
    }
