"""
Synthetic two-group microarray data.

Generates log2-scale expression for tumor and normal samples where a known
subset of genes is differentially expressed, for validating the testing and
correction pipeline against ground truth.
"""

from typing import Any, Optional

import numpy as np


def simulate_microarray(
    n_tumor: int = 40,
    n_normal: int = 22,
    n_genes: int = 2000,
    n_differential: int = 200,
    effect_range: tuple[float, float] = (0.5, 2.0),
    baseline_mean: float = 7.0,
    baseline_sd: float = 1.5,
    noise_range: tuple[float, float] = (0.3, 1.0),
    seed: Optional[int] = None,
) -> dict[str, Any]:
    """
    Simulate a tumor vs normal expression dataset.

    Model (log2 scale), for gene g and sample s:
        x_sg = mu_g + sigma_g * eps_sg + tumor_s * delta_g
        mu_g ~ N(baseline_mean, baseline_sd²), sigma_g ~ U(noise_range)
        delta_g = ±d_g * sigma_g, d_g ~ U(effect_range) for differential genes, else 0

    Parameters
    ----------
    n_tumor, n_normal : int
        Samples per group. Defaults match the Alon et al. colon data (40/22).
    n_genes : int
        Number of genes.
    n_differential : int
        Number of differentially expressed genes.
    effect_range : tuple of float
        Range of standardized mean shifts for differential genes.
    baseline_mean, baseline_sd : float
        Distribution of per-gene baseline expression.
    noise_range : tuple of float
        Range of per-gene noise standard deviations.
    seed : int, optional
        Random seed for reproducibility.

    Returns
    -------
    dict
        Dataset dict as returned by ``load_microarray`` with an extra
        'differential' key: sorted indices of differentially expressed genes.
    """
    if n_differential > n_genes:
        raise ValueError(f"n_differential ({n_differential}) exceeds n_genes ({n_genes})")
    if n_tumor < 1 or n_normal < 1:
        raise ValueError("Each group needs at least one sample")

    rng = np.random.default_rng(seed)
    n_samples = n_tumor + n_normal

    mu = rng.normal(baseline_mean, baseline_sd, size=n_genes)
    sigma = rng.uniform(*noise_range, size=n_genes)
    expression = mu + sigma * rng.standard_normal((n_samples, n_genes))

    differential = np.sort(rng.choice(n_genes, size=n_differential, replace=False))
    effect = rng.uniform(*effect_range, size=n_differential)
    sign = rng.choice([-1.0, 1.0], size=n_differential)

    # Tumor samples first, then normal
    expression[:n_tumor, differential] += sign * effect * sigma[differential]

    status = np.array(["tumor"] * n_tumor + ["normal"] * n_normal, dtype=object)
    order = rng.permutation(n_samples)

    return {
        "expression": expression[order],
        "status": status[order],
        "gene_names": [f"gene_{i + 1}" for i in range(n_genes)],
        "sample_names": [f"sample_{i + 1}" for i in range(n_samples)],
        "differential": differential,
    }
