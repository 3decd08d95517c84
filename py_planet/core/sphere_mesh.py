"""
Latitude/longitude sphere mesh.

Vertices are laid out exactly like the WebGL client's UV sphere so a vertex
index means the same point on both sides: rings from the +y pole down to the
-y pole, each ring sweeping longitude with a duplicated seam vertex.
Coordinates are stored as float32 (the renderer's buffer precision) and all
distances are computed in float64 from those stored values.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import structlog

logger = structlog.get_logger()


@dataclass(eq=False)
class SphereMesh:
    """Fixed-resolution sphere vertex set."""

    radius: float = 2.0
    width_segments: int = 64
    height_segments: int = 32
    positions: np.ndarray = field(init=False, repr=False)
    _neighbor_cache: Dict[float, List[np.ndarray]] = field(
        init=False, repr=False, default_factory=dict
    )

    def __post_init__(self):
        if self.width_segments < 3 or self.height_segments < 2:
            raise ValueError(
                f"Sphere needs at least 3x2 segments, got "
                f"{self.width_segments}x{self.height_segments}"
            )

        u = np.arange(self.width_segments + 1) / self.width_segments
        v = np.arange(self.height_segments + 1) / self.height_segments
        phi = u * (np.pi * 2)
        theta = v * np.pi

        # Ring-major ordering: theta (latitude) outer, phi (longitude) inner
        cos_phi = np.cos(phi)[np.newaxis, :]
        sin_phi = np.sin(phi)[np.newaxis, :]
        sin_theta = np.sin(theta)[:, np.newaxis]
        cos_theta = np.cos(theta)[:, np.newaxis]

        x = -self.radius * cos_phi * sin_theta
        y = np.broadcast_to(self.radius * cos_theta, x.shape)
        z = self.radius * sin_phi * sin_theta

        stacked = np.stack([x, y, z], axis=-1).reshape(-1, 3)
        self.positions = stacked.astype(np.float32)

        logger.debug(
            "Sphere mesh built",
            vertices=self.vertex_count,
            width_segments=self.width_segments,
            height_segments=self.height_segments,
        )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def positions64(self) -> np.ndarray:
        """Stored float32 coordinates widened to float64."""
        return self.positions.astype(np.float64)

    @property
    def abs_y(self) -> np.ndarray:
        """Absolute height above the equator, used as an elevation proxy."""
        return np.abs(self.positions64[:, 1])

    def vertex(self, index: int) -> np.ndarray:
        return self.positions64[index]

    def distances_from(self, index: int) -> np.ndarray:
        """Chord distances from vertex ``index`` to every vertex."""
        return chord_distances(self.positions64, self.positions64[index])

    def neighbors_within(self, threshold: float) -> List[np.ndarray]:
        """
        For every vertex, the indices of other vertices closer than ``threshold``.

        The lists are cached per threshold since the smoothing pass reuses them
        on every iteration.
        """
        cached = self._neighbor_cache.get(threshold)
        if cached is not None:
            return cached

        points = self.positions64
        neighbors = []
        for i in range(len(points)):
            distances = chord_distances(points, points[i])
            mask = distances < threshold
            mask[i] = False
            neighbors.append(np.nonzero(mask)[0])

        self._neighbor_cache[threshold] = neighbors
        logger.debug(
            "Neighbor lists built",
            threshold=threshold,
            avg_neighbors=round(float(np.mean([len(n) for n in neighbors])), 1),
        )
        return neighbors


def chord_distances(points: np.ndarray, origin: np.ndarray) -> np.ndarray:
    """Straight-line distance from ``origin`` to each row of ``points``."""
    dx = points[:, 0] - origin[0]
    dy = points[:, 1] - origin[1]
    dz = points[:, 2] - origin[2]
    return np.sqrt(dx * dx + dy * dy + dz * dz)
