"""
Retrieval module for furthest-neighbor search.

This module provides:
- furthest_neighbors: Brute-force scan used over the candidate set
- ExactFurthestSearch: Exact search over the full reference set (FAISS)
- Metrics comparing approximate and exact results
"""

from .exact import ExactFurthestSearch
from .metrics import compute_distance_error, compute_recall_at_k, evaluate
from .search import furthest_neighbors, pairwise_distances, select_furthest

__all__ = [
    "ExactFurthestSearch",
    "compute_distance_error",
    "compute_recall_at_k",
    "evaluate",
    "furthest_neighbors",
    "pairwise_distances",
    "select_furthest",
]
