"""
Data handling for furthest-neighbor search.

This module handles:
- Validation of point matrices (one point per row)
- Loading datasets from .npy, .csv/.txt and .parquet files
- ReferenceSet handles whose storage a model can take over
"""

from .dataset import ReferenceSet, as_points, load_dataset

__all__ = [
    "ReferenceSet",
    "as_points",
    "load_dataset",
]
