"""
Exact furthest-neighbor search using a FAISS flat index.

Used as ground truth when measuring the quality of an approximate
candidate set.
"""

import logging
from typing import Tuple

import faiss
import numpy as np

from ..data import as_points
from ..exceptions import InvalidArgumentError
from .search import pairwise_distances, select_furthest

logger = logging.getLogger(__name__)


class ExactFurthestSearch:
    """
    Exact k-furthest-neighbor search over a full reference set.

    A flat L2 index ranks every reference point for each query; the far end
    of that ranking is then re-scored in float64 so that distances and tie
    order agree with the brute-force scan used by DrusillaSelect.

    Example:
        exact = ExactFurthestSearch(reference)
        neighbors, distances = exact.search(queries, k=5)
    """

    def __init__(self, reference, rerank_slack: int = 8):
        """
        Build the index.

        Args:
            reference: Reference points [num_points, dim]
            rerank_slack: Extra far-end candidates re-scored beyond k
        """
        self.reference = as_points(reference, name="reference set")
        self.rerank_slack = rerank_slack

        self.index = faiss.IndexFlatL2(self.reference.shape[1])
        self.index.add(np.ascontiguousarray(self.reference, dtype=np.float32))
        logger.info(f"Exact index built with {self.index.ntotal:,} vectors")

    @property
    def num_points(self) -> int:
        return self.index.ntotal

    def search(self, queries, k: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Find the exact k furthest reference points for each query.

        Args:
            queries: Query points [num_queries, dim]
            k: Number of neighbors per query

        Returns:
            Tuple of (neighbors [num_queries, k], distances [num_queries, k]),
            ordered furthest first
        """
        queries = as_points(queries, name="query set")
        if queries.shape[1] != self.reference.shape[1]:
            raise InvalidArgumentError(
                f"Query dimension {queries.shape[1]} does not match "
                f"reference dimension {self.reference.shape[1]}"
            )
        if not 1 <= k <= self.num_points:
            raise InvalidArgumentError(
                f"k must be in [1, {self.num_points}], got {k}"
            )

        # Flat index returns every point ordered nearest first
        _, ranked = self.index.search(
            np.ascontiguousarray(queries, dtype=np.float32), self.num_points
        )
        depth = min(self.num_points, k + self.rerank_slack)
        shortlist = ranked[:, ::-1][:, :depth]

        neighbors = np.empty((queries.shape[0], k), dtype=np.int64)
        distances = np.empty((queries.shape[0], k), dtype=np.float64)
        for q, candidates in enumerate(shortlist):
            # Re-rank by reference position so ties resolve to the lower index
            candidates = np.sort(candidates)
            exact = pairwise_distances(queries[q : q + 1], self.reference[candidates])
            order, top = select_furthest(exact, k)
            neighbors[q] = candidates[order[0]]
            distances[q] = top[0]

        return neighbors, distances
