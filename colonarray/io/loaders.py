"""
Loading of two-group microarray datasets.

A dataset has an ``expression`` matrix (samples x genes) and a ``status``
label per sample, e.g. the Alon et al. (1999) colon data with 62 samples,
2000 genes and labels "tumor" / "normal".
"""

import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

logger = logging.getLogger(__name__)


def _decode(values) -> list:
    return [v.decode() if isinstance(v, bytes) else v for v in values]


def load_microarray(
    path: str,
    expression_key: str = "expression",
    status_key: str = "status",
) -> dict[str, Any]:
    """
    Load a microarray dataset from HDF5 or delimited text.

    Parameters
    ----------
    path : str
        Path to a ``.h5``/``.hdf5`` file or a ``.csv``/``.tsv`` table.
    expression_key : str, default="expression"
        HDF5 dataset holding the (samples x genes) matrix.
    status_key : str, default="status"
        HDF5 dataset, or table column, holding the group labels.

    Returns
    -------
    dict
        Dictionary with:
        - 'expression': Expression matrix (samples x genes), float64
        - 'status': Group label per sample (object array)
        - 'gene_names': Gene names
        - 'sample_names': Sample names

    Notes
    -----
    Tables are read with the first column as sample id and every column
    other than ``status_key`` as a gene.

    Examples
    --------
    >>> data = load_microarray("alon1999.h5")
    >>> data['expression'].shape
    (62, 2000)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".h5", ".hdf5"):
        data = _load_hdf5(path, expression_key, status_key)
    elif suffix in (".csv", ".tsv", ".txt"):
        data = _load_table(path, status_key)
    else:
        raise ValueError(
            f"Unsupported file type: '{path.suffix}'. Use .h5, .hdf5, .csv, .tsv or .txt."
        )

    n_samples, n_genes = data["expression"].shape
    if len(data["status"]) != n_samples:
        raise ValueError(
            f"'{status_key}' has {len(data['status'])} entries but expression has {n_samples} rows"
        )

    levels, counts = np.unique(data["status"], return_counts=True)
    summary = ", ".join(f"{lvl}={cnt}" for lvl, cnt in zip(levels, counts))
    logger.info(f"Loaded {path.name}: {n_samples} samples x {n_genes} genes ({summary})")
    return data


def _load_hdf5(path: Path, expression_key: str, status_key: str) -> dict[str, Any]:
    try:
        import h5py
    except ImportError:
        raise ImportError("h5py is required. Install with: pip install h5py")

    with h5py.File(path, "r") as f:
        for key in (expression_key, status_key):
            if key not in f:
                raise KeyError(f"Dataset '{key}' not found. Available: {list(f.keys())}")

        expression = f[expression_key][()].astype(np.float64)
        status = np.array(_decode(f[status_key][()]), dtype=object)
        gene_names = _decode(f["gene_names"][()]) if "gene_names" in f else None
        sample_names = _decode(f["sample_names"][()]) if "sample_names" in f else None

    if expression.ndim != 2:
        raise ValueError(f"'{expression_key}' must be 2-D, got shape {expression.shape}")

    if gene_names is None:
        gene_names = [f"gene_{i + 1}" for i in range(expression.shape[1])]
    if sample_names is None:
        sample_names = [f"sample_{i + 1}" for i in range(expression.shape[0])]

    return {
        "expression": expression,
        "status": status,
        "gene_names": [str(g) for g in gene_names],
        "sample_names": [str(s) for s in sample_names],
    }


def _load_table(path: Path, status_key: str) -> dict[str, Any]:
    import pandas as pd

    sep = "\t" if path.suffix.lower() in (".tsv", ".txt") else ","
    df = pd.read_csv(path, sep=sep, index_col=0)

    if status_key not in df.columns:
        raise KeyError(f"Column '{status_key}' not found. Available: {list(df.columns)}")

    status = df[status_key].astype(str).values.astype(object)
    genes = df.drop(columns=[status_key])

    return {
        "expression": genes.values.astype(np.float64),
        "status": status,
        "gene_names": [str(g) for g in genes.columns],
        "sample_names": [str(s) for s in df.index],
    }


def save_microarray(
    path: str,
    expression: np.ndarray,
    status,
    gene_names: Optional[list[str]] = None,
    sample_names: Optional[list[str]] = None,
) -> None:
    """
    Write a dataset in the layout read by ``load_microarray``.

    The format is chosen from the file extension (HDF5 or CSV/TSV).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    expression = np.asarray(expression, dtype=np.float64)
    status = [str(s) for s in status]

    if gene_names is None:
        gene_names = [f"gene_{i + 1}" for i in range(expression.shape[1])]
    if sample_names is None:
        sample_names = [f"sample_{i + 1}" for i in range(expression.shape[0])]

    suffix = path.suffix.lower()
    if suffix in (".h5", ".hdf5"):
        import h5py

        with h5py.File(path, "w") as f:
            f.create_dataset("expression", data=expression, compression="gzip")
            f.create_dataset("status", data=np.array(status, dtype="S"))
            f.create_dataset("gene_names", data=np.array(gene_names, dtype="S"))
            f.create_dataset("sample_names", data=np.array(sample_names, dtype="S"))
    elif suffix in (".csv", ".tsv", ".txt"):
        import pandas as pd

        sep = "\t" if suffix in (".tsv", ".txt") else ","
        df = pd.DataFrame(expression, index=sample_names, columns=gene_names)
        df.insert(0, "status", status)
        df.to_csv(path, sep=sep)
    else:
        raise ValueError(
            f"Unsupported file type: '{path.suffix}'. Use .h5, .hdf5, .csv, .tsv or .txt."
        )
