"""
Dataset utilities for furthest-neighbor search.

This module provides:
- as_points: Validate array-likes as a finite [num_points, dim] matrix
- load_dataset: Read a point matrix from .npy, .csv/.txt or .parquet files
- ReferenceSet: Handle whose storage can be handed over to a model
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from ..exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".npy", ".csv", ".txt", ".parquet")


def as_points(data, name: str = "data", allow_empty: bool = False) -> np.ndarray:
    """
    Coerce input to a finite float64 matrix of points (one point per row).

    Args:
        data: Array-like of shape [num_points, dim]
        name: Name used in error messages
        allow_empty: Accept a matrix with zero rows (e.g. an empty query set)

    Returns:
        Numpy array of shape [num_points, dim]

    Raises:
        InvalidArgumentError: If the input is not 2-D, empty, or not finite
    """
    points = np.asarray(data, dtype=np.float64)

    if points.ndim != 2:
        raise InvalidArgumentError(
            f"{name} must be a 2-D array [num_points, dim], got {points.ndim}-D"
        )
    if (points.shape[0] == 0 and not allow_empty) or points.shape[1] == 0:
        raise InvalidArgumentError(f"{name} is empty (shape {points.shape})")
    if not np.isfinite(points).all():
        raise InvalidArgumentError(f"{name} contains NaN or infinite values")

    return points


def load_dataset(path: Union[str, Path]) -> np.ndarray:
    """
    Load a point matrix from disk.

    CSV (comma separated) and text (whitespace separated) files are read
    without a header; every column is a coordinate and every row a point.

    Args:
        path: Path to a .npy, .csv, .txt or .parquet file

    Returns:
        Numpy array of shape [num_points, dim]

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidArgumentError: If the suffix is unsupported or the data is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}")

    suffix = path.suffix.lower()
    if suffix == ".npy":
        data = np.load(path)
    elif suffix == ".csv":
        data = pd.read_csv(path, header=None).to_numpy(dtype=np.float64)
    elif suffix == ".txt":
        data = pd.read_csv(path, header=None, sep=r"\s+").to_numpy(dtype=np.float64)
    elif suffix == ".parquet":
        data = pd.read_parquet(path).to_numpy(dtype=np.float64)
    else:
        raise InvalidArgumentError(
            f"Unsupported dataset format '{suffix}'. Supported: {SUPPORTED_SUFFIXES}"
        )

    points = as_points(data, name=str(path))
    logger.info(f"Loaded {points.shape[0]:,} points of dimension {points.shape[1]} from {path}")
    return points


class ReferenceSet:
    """
    A reference dataset whose storage can be transferred to a model.

    Training only needs the reference points while it runs, so a model may
    take the backing array instead of copying it. After release() the handle
    is empty: size == 0 and n_points == 0, with the dimension preserved.

    Example:
        reference = ReferenceSet(points)
        model.train(reference, l=5, m=5)
        assert reference.size == 0
    """

    def __init__(self, data):
        """
        Initialize with a point matrix.

        Args:
            data: Array-like of shape [num_points, dim]
        """
        self._data = as_points(data, name="reference set")
        self._consumed = False

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReferenceSet":
        """Load a reference set with load_dataset()."""
        return cls(load_dataset(path))

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def n_points(self) -> int:
        """Number of points (rows)."""
        return self._data.shape[0]

    @property
    def dim(self) -> int:
        """Dimension of each point."""
        return self._data.shape[1]

    @property
    def size(self) -> int:
        """Total number of stored elements."""
        return self._data.size

    @property
    def is_consumed(self) -> bool:
        return self._consumed

    def __len__(self) -> int:
        return self.n_points

    def release(self) -> np.ndarray:
        """
        Hand the backing array to the caller and empty this handle.

        Returns:
            The point matrix previously held by this reference set
        """
        data = self._data
        self._data = np.empty((0, data.shape[1]), dtype=np.float64)
        self._consumed = True
        return data
