"""I/O utilities for dataset loading and results export."""

from colonarray.io.hdf5 import load_results_hdf5, save_results_hdf5
from colonarray.io.loaders import load_microarray, save_microarray

__all__ = [
    "load_microarray",
    "save_microarray",
    "save_results_hdf5",
    "load_results_hdf5",
]
