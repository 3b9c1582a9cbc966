"""
Neighborhood enumeration on N-D grids.

Generalizes the 26-neighborhood used for voxel tracing to any dimension and
to both face (2·D) and full (3^D - 1) connectivity.
"""

import itertools
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

Offset = Tuple[int, ...]
Cell = Tuple[int, ...]


def neighbor_offsets(ndim: int, face_connected: bool) -> List[Offset]:
    """
    Lists the unit offsets of a cell's neighborhood.

    Args:
        ndim: Grid dimension.
        face_connected: If True, only the 2·ndim axis-aligned offsets are
            returned; otherwise all 3^ndim - 1 non-zero offsets.

    Returns:
        Offsets in a fixed order.
    """
    if ndim < 1:
        raise ValueError(f"Grid dimension must be positive, got {ndim}.")

    if face_connected:
        offsets = []
        for axis in range(ndim):
            for step in (-1, 1):
                offset = [0] * ndim
                offset[axis] = step
                offsets.append(tuple(offset))
        return offsets

    return [
        offset
        for offset in itertools.product((-1, 0, 1), repeat=ndim)
        if any(offset)
    ]


class NeighborTopology:
    """
    Neighbor relation restricted to the image bounds and the inclusion mask.

    Args:
        shape: Image shape.
        mask: Optional label array of the same shape.
        inside_value: Mask label of the cells that may be visited.
        face_connected: Connectivity mode.
    """

    def __init__(
        self,
        shape: Sequence[int],
        mask: Optional[np.ndarray] = None,
        inside_value: int = 1,
        face_connected: bool = True,
    ):
        self.shape = tuple(int(n) for n in shape)
        if mask is not None and mask.shape != self.shape:
            raise ValueError(
                f"Mask shape {mask.shape} does not match image shape {self.shape}."
            )
        self.mask = mask
        self.inside_value = inside_value
        self.face_connected = face_connected
        self.offsets = neighbor_offsets(len(self.shape), face_connected)

    def is_in_bounds(self, cell: Sequence[int]) -> bool:
        if len(cell) != len(self.shape):
            return False
        return all(0 <= c < n for c, n in zip(cell, self.shape))

    def is_inside(self, cell: Cell) -> bool:
        """True if no mask is set or the mask holds the inside label at `cell`."""
        return self.mask is None or self.mask[cell] == self.inside_value

    def contains(self, cell: Cell) -> bool:
        return self.is_in_bounds(cell) and self.is_inside(cell)

    def neighbors(self, cell: Cell) -> Iterator[Tuple[Offset, Cell]]:
        """
        Yields the visitable neighbors of a cell.

        Args:
            cell: The center cell.

        Yields:
            (offset, neighbor) pairs with neighbor = cell + offset.
        """
        for offset in self.offsets:
            neighbor = tuple(c + o for c, o in zip(cell, offset))
            if self.contains(neighbor):
                yield offset, neighbor
