"""Visualization functions for analysis results."""

from colonarray.visualization.plots import (
    plot_correlation_difference,
    plot_sorted_pvalues,
    save_figure,
)

__all__ = [
    "plot_sorted_pvalues",
    "plot_correlation_difference",
    "save_figure",
]
