"""
Configuration for DrusillaSelect training and search.
"""

import math
from dataclasses import dataclass

from ..exceptions import InvalidArgumentError


@dataclass
class DrusillaConfig:
    """
    Configuration for the DrusillaSelect candidate set.

    The projection count l and the per-projection candidate count m are model
    state (they are serialized with the candidate set), so they are passed to
    the model directly rather than through this config.

    Attributes:
        far_angle: Angle (radians) between a point and the projection line
            below which the point leaves the pivot pool after a round
            (default: pi / 8)

        batch_size: Number of query points per distance block at search time
            (default: 1024). Larger = fewer numpy calls, more memory.

        show_progress: Whether to show tqdm progress bars for projection
            rounds and query blocks
    """

    far_angle: float = math.pi / 8
    batch_size: int = 1024
    show_progress: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if not 0.0 < self.far_angle <= math.pi / 2:
            raise InvalidArgumentError(
                f"far_angle must be in (0, pi/2], got {self.far_angle}"
            )
        if self.batch_size < 1:
            raise InvalidArgumentError(
                f"batch_size must be positive, got {self.batch_size}"
            )

    def to_dict(self) -> dict:
        """Convert config to dictionary for logging."""
        return {
            "far_angle": self.far_angle,
            "batch_size": self.batch_size,
            "show_progress": self.show_progress,
        }
