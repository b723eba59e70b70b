"""
Gene-gene correlation within tissue groups.

Compares the correlation structure of the two groups to find gene pairs
whose association changes most between normal and tumor samples.
"""

import logging
from typing import Literal, Optional

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)


def group_correlation(
    matrix: np.ndarray,
    mask: Optional[np.ndarray] = None,
    method: Literal["spearman", "pearson"] = "spearman",
) -> np.ndarray:
    """
    Gene x gene correlation matrix over a subset of samples.

    Parameters
    ----------
    matrix : np.ndarray
        Expression matrix (n_samples, n_genes).
    mask : np.ndarray, optional
        Boolean mask selecting the samples to use. All samples if None.
    method : {"spearman", "pearson"}, default="spearman"
        Spearman correlation is the Pearson correlation of column ranks
        (average ranks for ties).

    Returns
    -------
    np.ndarray
        Correlation matrix (n_genes, n_genes). Rows and columns of genes that
        are constant within the subset are NaN.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2:
        raise ValueError(f"matrix must be 2-D, got shape {matrix.shape}")
    if mask is not None:
        matrix = matrix[np.asarray(mask, dtype=bool)]

    if method == "spearman":
        matrix = stats.rankdata(matrix, axis=0)
    elif method != "pearson":
        raise ValueError(f"Unknown method: '{method}'. Use 'spearman' or 'pearson'.")

    centered = matrix - matrix.mean(axis=0)
    norms = np.sqrt(np.sum(centered**2, axis=0))

    with np.errstate(invalid="ignore", divide="ignore"):
        corr = (centered.T @ centered) / np.outer(norms, norms)

    corr = np.clip(corr, -1.0, 1.0)
    np.fill_diagonal(corr, np.where(norms > 0, 1.0, np.nan))
    return corr


def correlation_difference(corr_a: np.ndarray, corr_b: np.ndarray) -> np.ndarray:
    """Absolute element-wise difference of two correlation matrices."""
    corr_a = np.asarray(corr_a, dtype=np.float64)
    corr_b = np.asarray(corr_b, dtype=np.float64)
    if corr_a.shape != corr_b.shape:
        raise ValueError(f"Shape mismatch: {corr_a.shape} vs {corr_b.shape}")
    return np.abs(corr_a - corr_b)


def top_differential_pairs(
    diff: np.ndarray,
    n: int = 10,
    gene_names: Optional[list[str]] = None,
    corr_a: Optional[np.ndarray] = None,
    corr_b: Optional[np.ndarray] = None,
):
    """
    Extract the gene pairs with the largest correlation difference.

    Each unordered pair appears once (i < j). NaN differences are skipped.

    Parameters
    ----------
    diff : np.ndarray
        Symmetric difference matrix (n_genes, n_genes).
    n : int, default=10
        Number of pairs to return.
    gene_names : list of str, optional
        Gene names. Defaults to 1-based gene indices.
    corr_a, corr_b : np.ndarray, optional
        Group correlation matrices; their values are added as columns.

    Returns
    -------
    pd.DataFrame
        Columns: gene_i, gene_j, index_i, index_j, difference
        [, corr_a, corr_b], sorted by difference descending.
    """
    import pandas as pd

    diff = np.asarray(diff, dtype=np.float64)
    n_genes = diff.shape[0]
    if gene_names is None:
        gene_names = [str(i + 1) for i in range(n_genes)]

    rows, cols = np.triu_indices(n_genes, k=1)
    values = diff[rows, cols]
    valid = ~np.isnan(values)
    rows, cols, values = rows[valid], cols[valid], values[valid]

    order = np.argsort(-values, kind="stable")[:n]

    df = pd.DataFrame(
        {
            "gene_i": [gene_names[i] for i in rows[order]],
            "gene_j": [gene_names[j] for j in cols[order]],
            "index_i": rows[order],
            "index_j": cols[order],
            "difference": values[order],
        }
    )
    if corr_a is not None:
        df["corr_a"] = np.asarray(corr_a)[rows[order], cols[order]]
    if corr_b is not None:
        df["corr_b"] = np.asarray(corr_b)[rows[order], cols[order]]

    if len(df):
        top = df.iloc[0]
        logger.info(
            f"Largest correlation difference: {top['gene_i']} / {top['gene_j']} "
            f"({top['difference']:.3f})"
        )
    return df
