"""
Candidate set training for DrusillaSelect.

This module provides:
- DrusillaConfig: Search and training settings
- Projection primitives used by each projection round
"""

from .config import DrusillaConfig
from .projections import (
    compute_centroid,
    compute_norm_scores,
    far_from_line,
    offsets_and_distortions,
    projection_line,
    select_top_m,
)

__all__ = [
    "DrusillaConfig",
    "compute_centroid",
    "compute_norm_scores",
    "far_from_line",
    "offsets_and_distortions",
    "projection_line",
    "select_top_m",
]
