"""
Approximate furthest-neighbor (kFN) search.

DrusillaSelect reduces a reference set to a small candidate set chosen along
l projection directions (m points per direction), then answers k-furthest
neighbor queries by scanning only those candidates:
- Training: centroid, pivot directions, top-m selection per direction
- Search: brute-force scan of the candidate set, results mapped back to
  reference set indices
- Persistence: binary (.npz), JSON and YAML encodings of the model state

Usage:
    from approx_kfn import DrusillaSelect, ReferenceSet

    model = DrusillaSelect(l=5, m=5, reference_set=points)
    neighbors, distances = model.search(queries, k=1)

    model.save("artifacts/drusilla.npz")
    model = DrusillaSelect.load("artifacts/drusilla.npz")

    # Compare with exact search
    from approx_kfn.retrieval import evaluate
    metrics = evaluate(model, queries, points, k=1)
"""

from .data import ReferenceSet, load_dataset
from .drusilla_select import DrusillaSelect
from .exceptions import (
    ApproxKFNError,
    InvalidArgumentError,
    NotTrainedError,
    SerializationError,
)
from .retrieval import ExactFurthestSearch
from .training import DrusillaConfig

__version__ = "1.0.0"

__all__ = [
    "ApproxKFNError",
    "DrusillaConfig",
    "DrusillaSelect",
    "ExactFurthestSearch",
    "InvalidArgumentError",
    "NotTrainedError",
    "ReferenceSet",
    "SerializationError",
    "load_dataset",
]
