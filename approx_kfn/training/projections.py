"""
Projection primitives used to build the DrusillaSelect candidate set.

Every function works on a centered point matrix of shape [num_points, dim]
(one point per row). A training run calls them once per projection round:

1. compute_norm_scores: initial pivot scores (distance from the centroid)
2. projection_line: unit direction through the current pivot
3. offsets_and_distortions: position along / away from that direction
4. select_top_m: the m points lying furthest out along the direction
5. far_from_line: which points stay in the pivot pool for later rounds
"""

import numpy as np

from ..exceptions import InvalidArgumentError


def compute_centroid(points: np.ndarray) -> np.ndarray:
    """Mean point of the dataset, shape [dim]."""
    return points.mean(axis=0)


def compute_norm_scores(centered: np.ndarray, centroid: np.ndarray) -> np.ndarray:
    """
    Initial per-point pivot scores.

    The centroid is subtracted from the already-centered points a second time,
    so the score is ||(x - c) - c||. Candidate sets built by earlier releases
    depend on this ordering of pivots, so it is kept as is.

    Args:
        centered: Centered points [num_points, dim]
        centroid: Dataset mean [dim]

    Returns:
        Scores [num_points]
    """
    return np.linalg.norm(centered - centroid, axis=1)


def projection_line(centered: np.ndarray, pivot: int) -> np.ndarray:
    """
    Unit vector in the direction of the pivot's centered position.

    A pivot sitting exactly on the centroid has no direction; the zero vector
    is returned and every offset along it is 0.
    """
    direction = centered[pivot]
    length = np.linalg.norm(direction)
    if length == 0.0:
        return np.zeros_like(direction)
    return direction / length


def offsets_and_distortions(
    centered: np.ndarray,
    line: np.ndarray,
    active: np.ndarray,
):
    """
    Scalar projection onto the line and residual distance from it.

    Args:
        centered: Centered points [num_points, dim]
        line: Unit projection direction [dim]
        active: Boolean mask [num_points]; inactive points get 0 for both

    Returns:
        Tuple of (offsets, distortions), each [num_points]
    """
    num_points = centered.shape[0]
    offsets = np.zeros(num_points, dtype=np.float64)
    distortions = np.zeros(num_points, dtype=np.float64)

    selected = centered[active]
    projected = selected @ line
    residuals = selected - np.outer(projected, line)

    offsets[active] = projected
    distortions[active] = np.linalg.norm(residuals, axis=1)
    return offsets, distortions


def select_top_m(scores: np.ndarray, m: int, eligible: np.ndarray) -> np.ndarray:
    """
    Indices of the m largest scores among eligible points.

    The result is ordered by descending score. Equal scores are resolved in
    favour of the lower index.

    Args:
        scores: Per-point scores [num_points]
        m: Number of points to select
        eligible: Boolean mask [num_points] of selectable points

    Returns:
        Integer array [m]

    Raises:
        InvalidArgumentError: If fewer than m points are eligible
    """
    num_eligible = int(np.count_nonzero(eligible))
    if num_eligible < m:
        raise InvalidArgumentError(
            f"Cannot select {m} candidates from {num_eligible} remaining points"
        )

    ranked = np.where(eligible, scores, -np.inf)
    # Stable sort on the negated scores keeps lower indices first among ties
    order = np.argsort(-ranked, kind="stable")
    return order[:m]


def far_from_line(
    offsets: np.ndarray,
    distortions: np.ndarray,
    far_angle: float,
) -> np.ndarray:
    """
    Mask of points whose angle to the projection line is at least far_angle.

    The angle is atan(distortion / |offset|). A zero offset counts as far
    (the angle is taken to be pi / 2).

    Returns:
        Boolean mask [num_points]
    """
    abs_offsets = np.abs(offsets)
    angles = np.full(abs_offsets.shape, np.pi / 2)
    nonzero = abs_offsets > 0.0
    angles[nonzero] = np.arctan(distortions[nonzero] / abs_offsets[nonzero])
    return angles >= far_angle
