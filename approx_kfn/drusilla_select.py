"""
DrusillaSelect: approximate furthest-neighbor search over a candidate set.

Training picks l projection directions through the points furthest from the
centroid and keeps the m points lying furthest out along each one. Queries
then scan only those l*m candidates instead of the full reference set.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np
from tqdm import tqdm

from .data import ReferenceSet, as_points
from .exceptions import InvalidArgumentError, NotTrainedError, SerializationError
from .retrieval.search import furthest_neighbors
from .serialization import STATE_FIELDS, decode_state, encode_state, infer_encoding
from .training import (
    DrusillaConfig,
    compute_centroid,
    compute_norm_scores,
    far_from_line,
    offsets_and_distortions,
    projection_line,
    select_top_m,
)

logger = logging.getLogger(__name__)


def _check_count(value, name: str) -> int:
    """Validate a count (l, m or k) as a positive integer."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    if value < 1:
        raise InvalidArgumentError(f"Invalid value of {name}; must be greater than 0!")
    return int(value)


class DrusillaSelect:
    """
    Approximate k-furthest-neighbor search structure.

    State (replaced as a whole by every train() or load_state_dict() call):
    - candidate_set: Selected points [l*m, dim], one projection round per
      block of m rows
    - candidate_indices: Row of each candidate in the training reference set
    - l, m: Number of projections and candidates per projection

    train() replaces shared state without locking, so it must not run
    concurrently with search() on the same instance. search() is read-only
    and may be called from several threads at once.

    Example:
        model = DrusillaSelect(l=5, m=5, reference_set=points)
        neighbors, distances = model.search(queries, k=1)

        # Or train later
        model = DrusillaSelect(l=5, m=5)
        model.train(ReferenceSet(points))
    """

    def __init__(
        self,
        l: int,
        m: int,
        reference_set: Optional[Union[np.ndarray, ReferenceSet]] = None,
        config: Optional[DrusillaConfig] = None,
    ):
        """
        Initialize and optionally train.

        Args:
            l: Number of projections (> 0)
            m: Candidates kept per projection (> 0)
            reference_set: Points to train on (optional)
            config: Training/search configuration (defaults to DrusillaConfig())

        Raises:
            InvalidArgumentError: If l or m is not positive
        """
        self._l = _check_count(l, "l")
        self._m = _check_count(m, "m")
        self.config = config or DrusillaConfig()

        self._candidate_set = np.empty((0, 0), dtype=np.float64)
        self._candidate_indices = np.empty(0, dtype=np.int64)

        if reference_set is not None:
            self.train(reference_set)

    @property
    def l(self) -> int:
        """Number of projections."""
        return self._l

    @property
    def m(self) -> int:
        """Candidates kept per projection."""
        return self._m

    @property
    def candidate_set(self) -> np.ndarray:
        # Read-only view; state is only replaced through train()/load_state_dict()
        view = self._candidate_set.view()
        view.flags.writeable = False
        return view

    @property
    def candidate_indices(self) -> np.ndarray:
        view = self._candidate_indices.view()
        view.flags.writeable = False
        return view

    @property
    def n_candidates(self) -> int:
        return self._candidate_set.shape[0]

    @property
    def dim(self) -> int:
        return self._candidate_set.shape[1]

    @property
    def is_trained(self) -> bool:
        return self.n_candidates > 0

    def __repr__(self) -> str:
        return (
            f"DrusillaSelect(l={self._l}, m={self._m}, "
            f"n_candidates={self.n_candidates}, dim={self.dim})"
        )

    # =========================================================================
    # Training
    # =========================================================================

    def train(
        self,
        reference_set: Union[np.ndarray, ReferenceSet],
        l: int = 0,
        m: int = 0,
    ) -> None:
        """
        Build the candidate set from a reference set.

        Passing 0 for l or m keeps the stored value. All checks run before
        any state changes; on error the previous candidate set is intact.

        A ReferenceSet is consumed: its storage is taken over and the handle
        is left empty. A plain array is only read.

        Steps:
        1. Center the points and score each by distance from the centroid
        2. For each of l rounds:
           a. Take the highest-scoring point as pivot, project onto its direction
           b. Score points by |offset| - |distortion| and keep the top m
           c. Drop the kept points and those close to the line from the pivot pool

        Args:
            reference_set: Points [num_points, dim]
            l: Number of projections (0 = keep current)
            m: Candidates per projection (0 = keep current)

        Raises:
            InvalidArgumentError: If l*m exceeds the number of points, or the
                data is invalid
        """
        l = self._l if l == 0 else _check_count(l, "l")
        m = self._m if m == 0 else _check_count(m, "m")

        if isinstance(reference_set, ReferenceSet):
            num_points = reference_set.n_points
        else:
            reference_set = as_points(reference_set, name="reference set")
            num_points = reference_set.shape[0]

        if l * m > num_points:
            raise InvalidArgumentError(
                f"l and m are too large! l*m = {l * m} exceeds the {num_points} "
                f"points in the dataset. Choose smaller values."
            )

        if isinstance(reference_set, ReferenceSet):
            points = reference_set.release()
        else:
            points = reference_set

        candidate_set, candidate_indices = self._select_candidates(points, l, m)

        self._l = l
        self._m = m
        self._candidate_set = candidate_set
        self._candidate_indices = candidate_indices

        logger.info(
            f"Trained candidate set: {l} projections x {m} candidates "
            f"from {num_points:,} points (dim={points.shape[1]})"
        )

    def _select_candidates(
        self,
        points: np.ndarray,
        l: int,
        m: int,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Run the projection rounds and return (candidate_set, candidate_indices)."""
        num_points, dim = points.shape

        centroid = compute_centroid(points)
        centered = points - centroid
        # Zeroed scores leave the pivot pool; the vector lives only for this call
        norms = compute_norm_scores(centered, centroid)
        available = np.ones(num_points, dtype=bool)

        candidate_set = np.empty((l * m, dim), dtype=np.float64)
        candidate_indices = np.empty(l * m, dtype=np.int64)

        rounds = range(l)
        if self.config.show_progress:
            rounds = tqdm(rounds, desc="Projection rounds")

        for round_idx in rounds:
            pivot = int(np.argmax(norms))
            line = projection_line(centered, pivot)

            offsets, distortions = offsets_and_distortions(centered, line, norms > 0.0)
            scores = np.abs(offsets) - np.abs(distortions)

            chosen = select_top_m(scores, m, available)
            rows = slice(round_idx * m, round_idx * m + m)
            candidate_set[rows] = points[chosen]
            candidate_indices[rows] = chosen

            available[chosen] = False
            norms[chosen] = 0.0
            norms *= far_from_line(offsets, distortions, self.config.far_angle)

            logger.debug(
                f"Round {round_idx}: pivot={pivot}, "
                f"{int(np.count_nonzero(norms)):,} points left in pivot pool"
            )

        return candidate_set, candidate_indices

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, queries, k: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        Find the approximate k furthest neighbors of each query.

        Args:
            queries: Query points [num_queries, dim]
            k: Number of neighbors per query (1 <= k <= l*m)

        Returns:
            Tuple of (neighbors [num_queries, k], distances [num_queries, k]),
            furthest first. Neighbors are row indices into the reference set
            the model was trained on. An empty query set gives [0, k] results.

        Raises:
            NotTrainedError: If the model hasn't been trained
            InvalidArgumentError: If k is out of range or dimensions differ
        """
        if not self.is_trained:
            raise NotTrainedError(
                "Candidate set not initialized! Call train() first."
            )
        k = _check_count(k, "k")
        if k > self._l * self._m:
            raise InvalidArgumentError(
                f"Requested k={k} is greater than the {self._l * self._m} points "
                f"in the candidate set! Increase l or m."
            )

        queries = as_points(queries, name="query set", allow_empty=True)
        if queries.shape[1] != self.dim:
            raise InvalidArgumentError(
                f"Query dimension {queries.shape[1]} does not match "
                f"candidate dimension {self.dim}"
            )

        local_neighbors, distances = furthest_neighbors(
            queries,
            self._candidate_set,
            k,
            batch_size=self.config.batch_size,
            show_progress=self.config.show_progress,
        )

        # Candidate rows -> reference set rows
        return self._candidate_indices[local_neighbors], distances

    # =========================================================================
    # Persistence
    # =========================================================================

    def state_dict(self) -> Dict[str, Any]:
        """
        Model state as four named fields.

        Returns:
            Dict with candidate_set, candidate_indices, l and m (copies)
        """
        return {
            "candidate_set": self._candidate_set.copy(),
            "candidate_indices": self._candidate_indices.copy(),
            "l": self._l,
            "m": self._m,
        }

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """
        Replace the model state, as if it had been trained.

        Raises:
            SerializationError: If the fields are missing or inconsistent
        """
        missing = [name for name in STATE_FIELDS if name not in state]
        if missing:
            raise SerializationError(f"State is missing fields: {missing}")

        candidate_set = np.asarray(state["candidate_set"], dtype=np.float64)
        candidate_indices = np.asarray(state["candidate_indices"], dtype=np.int64)
        l, m = int(state["l"]), int(state["m"])

        if l < 1 or m < 1:
            raise SerializationError(f"Invalid l={l}, m={m} in state")
        if candidate_set.ndim != 2:
            raise SerializationError(
                f"candidate_set must be 2-D, got shape {candidate_set.shape}"
            )
        if candidate_indices.shape != (candidate_set.shape[0],):
            raise SerializationError(
                f"{candidate_indices.shape[0]} candidate indices for "
                f"{candidate_set.shape[0]} candidates"
            )
        if candidate_set.shape[0] not in (0, l * m):
            raise SerializationError(
                f"Trained state must hold l*m = {l * m} candidates, "
                f"got {candidate_set.shape[0]}"
            )

        self._l = l
        self._m = m
        self._candidate_set = candidate_set
        self._candidate_indices = candidate_indices

    def dumps(self, encoding: str = "binary") -> bytes:
        """Encode the model state ("binary", "json" or "yaml")."""
        return encode_state(self.state_dict(), encoding)

    @classmethod
    def loads(
        cls,
        payload: bytes,
        encoding: str = "binary",
        config: Optional[DrusillaConfig] = None,
    ) -> "DrusillaSelect":
        """Create a model from bytes produced by dumps()."""
        # l and m are placeholders until the decoded state replaces them
        model = cls(l=1, m=1, config=config)
        model.load_state_dict(decode_state(payload, encoding))
        return model

    def save(self, path: Union[str, Path], encoding: Optional[str] = None) -> None:
        """
        Save the model state to disk.

        Args:
            path: Output path; the suffix selects the encoding when
                encoding is None (.npz, .json, .yaml/.yml)
            encoding: Explicit encoding (optional)
        """
        path = Path(path)
        encoding = infer_encoding(path, encoding)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.dumps(encoding))
        logger.info(f"Model saved to: {path} ({encoding})")

    def load_from(self, path: Union[str, Path], encoding: Optional[str] = None) -> None:
        """
        Replace this model's state with one saved by save().

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Model state not found at {path}")

        encoding = infer_encoding(path, encoding)
        self.load_state_dict(decode_state(path.read_bytes(), encoding))
        logger.info(f"Model loaded from: {path} ({self.n_candidates} candidates)")

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        encoding: Optional[str] = None,
        config: Optional[DrusillaConfig] = None,
    ) -> "DrusillaSelect":
        """
        Load a model saved by save().

        Args:
            path: Path to the saved state
            encoding: Explicit encoding (optional, inferred from the suffix)
            config: Search configuration for the loaded model

        Returns:
            DrusillaSelect instance

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        model = cls(l=1, m=1, config=config)
        model.load_from(path, encoding)
        return model
