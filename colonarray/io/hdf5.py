"""
HDF5 I/O utilities for storing and loading analysis results.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np


def save_results_hdf5(
    path: str,
    arrays: Dict[str, np.ndarray],
    metadata: Optional[Dict[str, Any]] = None,
    gene_names: Optional[List[str]] = None,
    compression: str = "gzip",
    compression_level: int = 4,
) -> None:
    """
    Save analysis results to HDF5 file.

    Parameters
    ----------
    path : str
        Output file path.
    arrays : dict
        Dictionary of arrays to save. Keys become dataset names.
    metadata : dict, optional
        Additional metadata as attributes. None values are skipped.
    gene_names : list, optional
        Gene names to store.
    compression : str, default="gzip"
        Compression algorithm.
    compression_level : int, default=4
        Compression level (1-9).

    Examples
    --------
    >>> arrays = {"pvalue": raw, "pvalue_holm": holm, "pvalue_BY": by}
    >>> save_results_hdf5("results.h5", arrays, gene_names=gene_list)
    """
    try:
        import h5py
    except ImportError:
        raise ImportError("h5py is required. Install with: pip install h5py")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with h5py.File(path, "w") as f:
        for name, arr in arrays.items():
            arr = np.asarray(arr)
            if arr.ndim == 0:
                f.create_dataset(name, data=arr)
            else:
                f.create_dataset(
                    name,
                    data=arr,
                    compression=compression,
                    compression_opts=compression_level,
                )

        if metadata is not None:
            for key, value in metadata.items():
                if isinstance(value, (int, float, str, bool, np.integer, np.floating)):
                    f.attrs[key] = value
                elif isinstance(value, (list, tuple)):
                    f.attrs[key] = np.array(value)

        if gene_names is not None:
            f.create_dataset(
                "gene_names",
                data=np.array([str(g) for g in gene_names], dtype="S"),
            )


def load_results_hdf5(path: str) -> Dict[str, Any]:
    """
    Load analysis results from HDF5 file.

    Parameters
    ----------
    path : str
        Input file path.

    Returns
    -------
    dict
        Dictionary with:
        - Each dataset as a key-value pair
        - 'metadata': dict of file attributes
        - 'gene_names': list of gene names (if present)
    """
    try:
        import h5py
    except ImportError:
        raise ImportError("h5py is required. Install with: pip install h5py")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    result = {}
    metadata = {}

    with h5py.File(path, "r") as f:
        for key in f.keys():
            if key == "gene_names":
                result["gene_names"] = [x.decode() for x in f[key][:]]
            else:
                result[key] = f[key][()]

        for key, value in f.attrs.items():
            metadata[key] = value

    result["metadata"] = metadata
    return result
