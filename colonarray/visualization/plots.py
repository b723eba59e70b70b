"""
Plotting utilities for multiple-testing and correlation results.
"""

from typing import Optional

import numpy as np


def plot_sorted_pvalues(
    pvalue_sets: dict[str, np.ndarray],
    alpha: float = 0.10,
    title: Optional[str] = None,
    figsize: tuple[float, float] = (8, 6),
    ax=None,
):
    """
    Plot sorted p-value curves for several corrections.

    Parameters
    ----------
    pvalue_sets : dict
        Mapping of legend label to p-values (e.g. {"raw": p, "holm": ..., "BY": ...}).
        Values are sorted and NaNs dropped before plotting.
    alpha : float
        Significance level drawn as a dashed horizontal line.
    title : str, optional
        Plot title.
    figsize : tuple
        Figure size.
    ax : matplotlib axis, optional
        Existing axis to plot on.

    Returns
    -------
    matplotlib axis
        The plot axis.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    colors = plt.cm.tab10(np.arange(len(pvalue_sets)) % 10)
    for color, (label, values) in zip(colors, pvalue_sets.items()):
        values = np.asarray(values, dtype=np.float64)
        values = np.sort(values[~np.isnan(values)])
        ax.plot(np.arange(1, len(values) + 1), values, color=color, label=label)

    ax.axhline(alpha, linestyle="--", color="black", linewidth=1)
    ax.axhline(0.0, linestyle=":", color="gray", linewidth=1)
    ax.axhline(1.0, linestyle=":", color="gray", linewidth=1)

    ax.set_xlabel("Rank")
    ax.set_ylabel("Sorted p-values")
    if title:
        ax.set_title(title)
    ax.legend(loc="lower right", facecolor="white")

    return ax


def plot_correlation_difference(
    diff: np.ndarray,
    title: str = "|Correlation difference|",
    cmap: str = "magma",
    figsize: tuple[float, float] = (7, 6),
    ax=None,
):
    """
    Heatmap of an absolute correlation difference matrix.

    Parameters
    ----------
    diff : np.ndarray
        Difference matrix (n_genes, n_genes), values in [0, 2].
    title : str
        Plot title.
    cmap : str
        Colormap.
    figsize : tuple
        Figure size.
    ax : matplotlib axis, optional
        Existing axis to plot on.

    Returns
    -------
    matplotlib axis
        The plot axis.
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=figsize)

    im = ax.imshow(np.asarray(diff), cmap=cmap, vmin=0.0, vmax=2.0, interpolation="nearest")
    plt.colorbar(im, ax=ax, label="|difference|")

    ax.set_xlabel("Gene")
    ax.set_ylabel("Gene")
    ax.set_title(title)

    return ax


def save_figure(fig, path: str, dpi: int = 150):
    """
    Save figure to file.

    Parameters
    ----------
    fig : matplotlib figure
        Figure to save.
    path : str
        Output path.
    dpi : int
        Resolution.
    """
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
