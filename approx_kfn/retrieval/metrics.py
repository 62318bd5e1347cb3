"""
Quality metrics for approximate furthest-neighbor search.

Primary metric: Recall@K
- Fraction of the exact k furthest neighbors found by the approximate search

Also reports the distance error of the furthest neighbor:
- Relative shortfall (exact - approx) / exact, averaged and maximised over
  queries. It is never negative since the candidate set is a subset of the
  reference set.
"""

import logging
import time
from typing import Dict

import numpy as np

from ..exceptions import InvalidArgumentError
from .exact import ExactFurthestSearch

logger = logging.getLogger(__name__)


def compute_recall_at_k(
    approx_neighbors: np.ndarray,
    exact_neighbors: np.ndarray,
) -> float:
    """
    Compute Recall@K of approximate results against exact results.

    Recall@K = (# of exact k furthest found) / k, averaged over queries.

    Args:
        approx_neighbors: Approximate neighbor indices [num_queries, k]
        exact_neighbors: Exact neighbor indices [num_queries, k]

    Returns:
        Mean recall in [0, 1]
    """
    if approx_neighbors.shape != exact_neighbors.shape:
        raise InvalidArgumentError(
            f"Shape mismatch: {approx_neighbors.shape} vs {exact_neighbors.shape}"
        )

    k = exact_neighbors.shape[1]
    recalls = [
        len(set(approx_row.tolist()) & set(exact_row.tolist())) / k
        for approx_row, exact_row in zip(approx_neighbors, exact_neighbors)
    ]
    return float(np.mean(recalls))


def compute_distance_error(
    approx_distances: np.ndarray,
    exact_distances: np.ndarray,
) -> Dict[str, float]:
    """
    Relative error of the furthest distance per query.

    Queries whose exact furthest distance is 0 (all points coincide) count
    as error 0.

    Args:
        approx_distances: Approximate distances [num_queries, k]
        exact_distances: Exact distances [num_queries, k]

    Returns:
        Dict with "mean_relative_error" and "max_relative_error"
    """
    approx_far = approx_distances[:, 0]
    exact_far = exact_distances[:, 0]

    errors = np.zeros_like(exact_far)
    positive = exact_far > 0.0
    errors[positive] = (exact_far[positive] - approx_far[positive]) / exact_far[positive]

    return {
        "mean_relative_error": float(errors.mean()),
        "max_relative_error": float(errors.max()),
    }


def evaluate(model, queries: np.ndarray, reference: np.ndarray, k: int) -> Dict[str, float]:
    """
    Compare a trained model against exact search on the full reference set.

    Args:
        model: Trained DrusillaSelect
        queries: Query points [num_queries, dim]
        reference: Reference set the model was trained on [num_points, dim]
        k: Number of neighbors per query

    Returns:
        Dict with recall, distance errors and search timings (seconds)
    """
    start = time.time()
    approx_neighbors, approx_distances = model.search(queries, k)
    approx_time = time.time() - start

    exact = ExactFurthestSearch(reference)
    start = time.time()
    exact_neighbors, exact_distances = exact.search(queries, k)
    exact_time = time.time() - start

    metrics = {
        f"recall@{k}": compute_recall_at_k(approx_neighbors, exact_neighbors),
        **compute_distance_error(approx_distances, exact_distances),
        "approx_search_time": approx_time,
        "exact_search_time": exact_time,
    }

    logger.info(
        f"Recall@{k}: {metrics[f'recall@{k}']:.4f}, "
        f"mean relative error: {metrics['mean_relative_error']:.4f}, "
        f"approx {approx_time:.3f}s vs exact {exact_time:.3f}s"
    )
    return metrics
