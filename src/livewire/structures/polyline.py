"""
Polyline container for reconstructed minimal paths.
"""

import logging
from typing import Iterable, Optional, Sequence

import numpy as np
from scipy.interpolate import splev, splprep

logger = logging.getLogger(__name__)


class PolyLinePath:
    """
    A parametric path through an ordered list of vertices in index space.

    The path is parametrized on [0, N - 1]: integer parameters land on
    vertices and fractional ones interpolate linearly between neighbors.

    Args:
        dimension: Number of coordinates per vertex.
        vertices: Optional initial vertices.
    """

    def __init__(self, dimension: int, vertices: Optional[Iterable[Sequence[float]]] = None):
        if dimension < 1:
            raise ValueError(f"Path dimension must be positive, got {dimension}.")
        self.dimension = dimension
        self._vertices = []
        if vertices is not None:
            for vertex in vertices:
                self.add_vertex(vertex)

    def add_vertex(self, vertex: Sequence[float]) -> None:
        vertex = np.asarray(vertex, dtype=float).reshape(-1)
        if vertex.size != self.dimension:
            raise ValueError(
                f"Expected a {self.dimension}-D vertex, got {vertex.size} coordinates."
            )
        self._vertices.append(vertex)

    @property
    def vertices(self) -> np.ndarray:
        """(N, D) array of the vertices, in path order."""
        if not self._vertices:
            return np.empty((0, self.dimension), dtype=float)
        return np.vstack(self._vertices)

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self):
        return iter(self.vertices)

    @property
    def start_point(self) -> np.ndarray:
        if not self._vertices:
            raise IndexError("Path has no vertices.")
        return self._vertices[0].copy()

    @property
    def end_point(self) -> np.ndarray:
        if not self._vertices:
            raise IndexError("Path has no vertices.")
        return self._vertices[-1].copy()

    def evaluate(self, t: float) -> np.ndarray:
        """
        Position at parameter `t`, clamped to [0, N - 1].
        """
        if not self._vertices:
            raise IndexError("Path has no vertices.")
        t = min(max(float(t), 0.0), float(len(self._vertices) - 1))
        lower = int(np.floor(t))
        upper = min(lower + 1, len(self._vertices) - 1)
        fraction = t - lower
        return (1.0 - fraction) * self._vertices[lower] + fraction * self._vertices[upper]

    def length(self, spacing: Optional[Sequence[float]] = None) -> float:
        """
        Total length of the polyline.

        Args:
            spacing: Physical spacing per axis. Index units if None.
        """
        if len(self._vertices) < 2:
            return 0.0
        steps = np.diff(self.vertices, axis=0)
        if spacing is not None:
            steps = steps * np.asarray(spacing, dtype=float)
        return float(np.sum(np.linalg.norm(steps, axis=1)))

    def to_physical(
        self, origin: Optional[Sequence[float]] = None, spacing: Optional[Sequence[float]] = None
    ) -> np.ndarray:
        """Maps the vertices to physical coordinates."""
        points = self.vertices
        if spacing is not None:
            points = points * np.asarray(spacing, dtype=float)
        if origin is not None:
            points = points + np.asarray(origin, dtype=float)
        return points

    def reversed(self) -> "PolyLinePath":
        return PolyLinePath(self.dimension, self._vertices[::-1])

    def smoothed(self, smoothing_factor: float = 0.5, num_points: int = 20) -> "PolyLinePath":
        """
        Fits a cubic smoothing spline through the vertices and resamples it.

        Paths with fewer than four vertices are returned unchanged (as a copy).

        Args:
            smoothing_factor: Spline smoothing per vertex.
            num_points: Number of samples along the smoothed path.

        Returns:
            A new PolyLinePath with the same end points.
        """
        if len(self._vertices) < 4:
            return PolyLinePath(self.dimension, self._vertices)

        # splprep rejects consecutive duplicate points.
        points = self.vertices
        keep = np.ones(len(points), dtype=bool)
        keep[1:] = np.any(np.diff(points, axis=0) != 0, axis=1)
        points = points[keep]
        if len(points) < 4:
            return PolyLinePath(self.dimension, points)

        tck, u = splprep(points.T, s=len(points) * smoothing_factor, k=3)
        u_new = np.linspace(u.min(), u.max(), num_points)
        samples = np.vstack(splev(u_new, tck)).T

        # Pin the end points, splines with s > 0 do not interpolate them.
        samples[0] = points[0]
        samples[-1] = points[-1]
        logger.debug(f"Smoothed path of {len(points)} vertices into {num_points} samples.")
        return PolyLinePath(self.dimension, samples)

    def __repr__(self) -> str:
        return f"PolyLinePath(dimension={self.dimension}, vertices={len(self)})"
