"""
Brute-force furthest-neighbor scan over a small point set.

Provides:
- pairwise_distances: Euclidean distances between two point blocks
- select_furthest: Keep the k furthest points per query
- furthest_neighbors: Blocked scan combining the two
"""

import logging
from typing import Tuple

import numpy as np
from tqdm import tqdm

logger = logging.getLogger(__name__)


def pairwise_distances(queries: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Euclidean distances between every query and every point.

    Computed from explicit differences rather than the expanded
    |q|^2 + |p|^2 - 2 q.p form, so equal inputs always give bit-equal
    distances regardless of which block they were computed in.

    Squared differences are accumulated one coordinate at a time, so the
    largest temporary is [num_queries, num_points] whatever the dimension.

    Args:
        queries: Query points [num_queries, dim]
        points: Points to compare against [num_points, dim]

    Returns:
        Distances [num_queries, num_points]
    """
    squared = np.zeros((queries.shape[0], points.shape[0]), dtype=np.float64)
    diff = np.empty_like(squared)
    for axis in range(queries.shape[1]):
        np.subtract.outer(queries[:, axis], points[:, axis], out=diff)
        np.multiply(diff, diff, out=diff)
        squared += diff
    return np.sqrt(squared, out=squared)


def select_furthest(distances: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Top-k furthest update rule over a block of distances.

    Each row keeps its k largest distances in descending order. Equal
    distances keep the lower column first.

    Args:
        distances: Distances [num_queries, num_points]
        k: Number of neighbors to keep (k <= num_points)

    Returns:
        Tuple of (columns [num_queries, k], distances [num_queries, k])
    """
    order = np.argsort(-distances, axis=1, kind="stable")[:, :k]
    return order, np.take_along_axis(distances, order, axis=1)


def furthest_neighbors(
    queries: np.ndarray,
    points: np.ndarray,
    k: int,
    batch_size: int = 1024,
    show_progress: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Exhaustively find the k furthest points for every query.

    Result slots start as index -1 with distance 0 and are filled one block
    of queries at a time.

    Args:
        queries: Query points [num_queries, dim]
        points: Points to scan [num_points, dim]
        k: Number of neighbors per query
        batch_size: Queries per distance block
        show_progress: Whether to show a progress bar

    Returns:
        Tuple of (neighbors [num_queries, k], distances [num_queries, k]),
        where neighbors are row positions in `points`
    """
    num_queries = queries.shape[0]
    neighbors = np.full((num_queries, k), -1, dtype=np.int64)
    distances = np.zeros((num_queries, k), dtype=np.float64)

    starts = range(0, num_queries, batch_size)
    if show_progress:
        starts = tqdm(starts, desc="Scanning candidates")

    for start_idx in starts:
        end_idx = min(start_idx + batch_size, num_queries)
        block = pairwise_distances(queries[start_idx:end_idx], points)
        neighbors[start_idx:end_idx], distances[start_idx:end_idx] = select_furthest(block, k)

    logger.debug(f"Scanned {num_queries:,} queries against {points.shape[0]:,} points")
    return neighbors, distances
