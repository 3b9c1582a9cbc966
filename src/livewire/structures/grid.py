"""
Image access for the livewire engine.

Wraps an N-D array together with the physical spacing and origin metadata
that the cost model and the point-based queries need.
"""

from typing import Optional, Sequence, Tuple

import numpy as np


class ImageGrid:
    """
    Read-only view of an N-D image on a regular grid.

    Args:
        array: The image data, one scalar per cell.
        spacing: Physical size of a cell along each axis (default: ones).
        origin: Physical position of the cell at index 0 (default: zeros).
    """

    def __init__(
        self,
        array: np.ndarray,
        spacing: Optional[Sequence[float]] = None,
        origin: Optional[Sequence[float]] = None,
    ):
        array = np.asarray(array)
        if array.ndim == 0:
            raise ValueError("Image must have at least one dimension.")

        self.array = array
        self.spacing = self._axis_vector(spacing, 1.0, "spacing")
        self.origin = self._axis_vector(origin, 0.0, "origin")

        if np.any(self.spacing <= 0):
            raise ValueError(f"Spacing must be positive, got {self.spacing.tolist()}.")

    def _axis_vector(self, values, default: float, name: str) -> np.ndarray:
        if values is None:
            return np.full(self.ndim, default, dtype=float)
        vector = np.asarray(values, dtype=float).reshape(-1)
        if vector.size != self.ndim:
            raise ValueError(
                f"Expected {self.ndim} {name} values, got {vector.size}."
            )
        return vector

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.array.shape

    @property
    def ndim(self) -> int:
        return self.array.ndim

    @property
    def size(self) -> int:
        return self.array.size

    def is_in_bounds(self, index: Sequence[int]) -> bool:
        """Returns True if the index addresses a cell of the image."""
        if len(index) != self.ndim:
            return False
        return all(0 <= int(i) < n for i, n in zip(index, self.shape))

    def pixel_at(self, index: Sequence[int]):
        if not self.is_in_bounds(index):
            raise IndexError(f"Index {tuple(index)} is outside image of shape {self.shape}.")
        return self.array[tuple(int(i) for i in index)]

    def spacing_along_axis(self, axis: int) -> float:
        return float(self.spacing[axis])

    def continuous_index_to_nearest_index(self, cindex: Sequence[float]) -> Tuple[int, ...]:
        """
        Rounds a continuous index to the nearest grid index (halves round up).

        Args:
            cindex: Continuous index, one value per axis.

        Returns:
            The nearest integer index. It may lie outside the image.
        """
        cindex = np.asarray(cindex, dtype=float).reshape(-1)
        if cindex.size != self.ndim:
            raise ValueError(f"Expected a {self.ndim}-D index, got {cindex.size} values.")
        return tuple(int(v) for v in np.floor(cindex + 0.5))

    def point_to_continuous_index(self, point: Sequence[float]) -> np.ndarray:
        point = np.asarray(point, dtype=float).reshape(-1)
        if point.size != self.ndim:
            raise ValueError(f"Expected a {self.ndim}-D point, got {point.size} values.")
        return (point - self.origin) / self.spacing

    def point_to_nearest_index(self, point: Sequence[float]) -> Tuple[int, ...]:
        """Converts a physical point to the index of the nearest cell."""
        return self.continuous_index_to_nearest_index(self.point_to_continuous_index(point))

    def index_to_point(self, index: Sequence[float]) -> np.ndarray:
        """Converts a (possibly continuous) index to a physical point."""
        return self.origin + np.asarray(index, dtype=float) * self.spacing


def as_image_grid(image) -> ImageGrid:
    """Returns `image` unchanged if it is an ImageGrid, otherwise wraps it."""
    if isinstance(image, ImageGrid):
        return image
    return ImageGrid(image)
