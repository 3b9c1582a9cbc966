"""
Livewire minimal path search.

Implements the live-wire boundary extraction of Barrett and Mortensen: a
single Dijkstra search from an anchor fills a direction field over every cell
reachable under the mask, and paths from any queried cell back to the anchor
are then read off that field on demand.

Reference:
    W. A. Barrett and E. N. Mortensen, "Interactive live-wire boundary
    extraction", Medical Image Analysis, 1(4):331-341, 1997.
"""

import enum
import heapq
import itertools
import logging
import threading
from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import InvalidAnchor, LivewireError, NotVisited, OutOfBounds, UnreachableQuery
from ..structures.grid import ImageGrid, as_image_grid
from ..structures.polyline import PolyLinePath
from .cost import INFINITE_COST, CostModel, LivewireCost
from .direction_field import DirectionField
from .topology import NeighborTopology

logger = logging.getLogger(__name__)

Cell = Tuple[int, ...]


class SearchState(enum.Enum):
    UNBUILT = "unbuilt"
    BUILDING = "building"
    BUILT = "built"


CONFIGURATION_FIELDS = ("image", "anchor", "mask", "connectivity", "spacing", "cost_model")


class MinimalPathSearch:
    """
    Computes minimal cost paths from every reachable cell to an anchor.

    The direction field is built lazily on the first query and reused until
    the image, anchor, mask, connectivity, spacing mode or cost model changes.
    Every public method holds `lock`, so concurrent callers are serialized.

    Args:
        image: Input image, a numpy array or an ImageGrid.
        anchor: Index of the cell all paths lead to.
        mask: Optional label array restricting the search.
        inside_value: Mask label of the cells the search may visit.
        face_connected: If True, only axis-aligned steps are taken;
            otherwise diagonal steps are allowed too.
        use_image_spacing: If True, link lengths are measured with the
            image's physical spacing instead of index distance.
        cost_model: Link cost policy (default: LivewireCost()).
    """

    def __init__(
        self,
        image=None,
        anchor: Optional[Sequence[int]] = None,
        mask: Optional[np.ndarray] = None,
        inside_value: int = 1,
        face_connected: bool = True,
        use_image_spacing: bool = False,
        cost_model: Optional[CostModel] = None,
    ):
        self.lock = threading.RLock()

        self._image: Optional[ImageGrid] = None
        self._anchor: Optional[Cell] = None
        self._mask: Optional[np.ndarray] = None
        self._inside_value = inside_value
        self._face_connected = bool(face_connected)
        self._use_image_spacing = bool(use_image_spacing)
        self._cost_model = LivewireCost() if cost_model is None else cost_model

        self._field: Optional[DirectionField] = None
        self._topology: Optional[NeighborTopology] = None
        self._state = SearchState.UNBUILT
        self._dirty = set(CONFIGURATION_FIELDS)

        if image is not None:
            self.set_image(image)
        if anchor is not None:
            self.set_anchor(anchor)
        if mask is not None:
            self.set_mask(mask)

    # --- CONFIGURATION ---
    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def dirty(self) -> FrozenSet[str]:
        """Configuration fields changed since the last successful build."""
        return frozenset(self._dirty)

    @property
    def image(self) -> Optional[ImageGrid]:
        return self._image

    @property
    def anchor(self) -> Optional[Cell]:
        return self._anchor

    @property
    def mask(self) -> Optional[np.ndarray]:
        return self._mask

    @property
    def inside_value(self) -> int:
        return self._inside_value

    @property
    def face_connected(self) -> bool:
        return self._face_connected

    @property
    def use_image_spacing(self) -> bool:
        return self._use_image_spacing

    @property
    def cost_model(self) -> CostModel:
        return self._cost_model

    def _invalidate(self, field: str) -> None:
        self._dirty.add(field)
        self._field = None
        self._topology = None
        self._state = SearchState.UNBUILT
        logger.debug(f"Configuration '{field}' changed; direction field invalidated.")

    def set_image(self, image) -> None:
        """Sets the input image (an array, or an ImageGrid carrying spacing and origin)."""
        with self.lock:
            self._image = as_image_grid(image)
            self._invalidate("image")

    def set_anchor(self, anchor: Sequence[int]) -> None:
        with self.lock:
            anchor = tuple(int(a) for a in anchor)
            if anchor == self._anchor:
                return
            self._anchor = anchor
            self._invalidate("anchor")

    def set_mask(self, mask: Optional[np.ndarray], inside_value: Optional[int] = None) -> None:
        """
        Restricts the search to the cells whose mask label is `inside_value`.

        Args:
            mask: Label array of the image's shape, or None to lift the mask.
            inside_value: New inside label (keeps the current one if None).
        """
        with self.lock:
            if mask is not None:
                mask = np.asarray(mask)
                if self._image is not None and mask.shape != self._image.shape:
                    raise ValueError(
                        f"Mask shape {mask.shape} does not match image shape {self._image.shape}."
                    )
            self._mask = mask
            if inside_value is not None:
                self._inside_value = inside_value
            self._invalidate("mask")

    def set_inside_value(self, inside_value: int) -> None:
        with self.lock:
            if inside_value != self._inside_value:
                self._inside_value = inside_value
                self._invalidate("mask")

    def set_face_connected(self, face_connected: bool) -> None:
        with self.lock:
            if bool(face_connected) != self._face_connected:
                self._face_connected = bool(face_connected)
                self._invalidate("connectivity")

    def set_use_image_spacing(self, use_image_spacing: bool) -> None:
        with self.lock:
            if bool(use_image_spacing) != self._use_image_spacing:
                self._use_image_spacing = bool(use_image_spacing)
                self._invalidate("spacing")

    def set_cost_model(self, cost_model: CostModel) -> None:
        with self.lock:
            self._cost_model = cost_model
            self._invalidate("cost_model")

    # --- SEARCH ---
    def build(self) -> DirectionField:
        """
        Returns the direction field, running the search first if needed.

        Raises:
            LivewireError: If no image is set.
            InvalidAnchor: If the anchor is unset, out of bounds or masked out.
        """
        with self.lock:
            if self._state is SearchState.BUILT and self._field is not None:
                return self._field
            if self._image is None:
                raise LivewireError("No input image set.")

            self._state = SearchState.BUILDING
            field = None
            try:
                field = self._generate_direction_field()
            finally:
                if field is None:
                    self._field = None
                    self._topology = None
                    self._state = SearchState.UNBUILT

            self._field = field
            self._dirty.clear()
            self._state = SearchState.BUILT
            return field

    def _validated_anchor(self, topology: NeighborTopology) -> Cell:
        anchor = self._anchor
        if anchor is None:
            raise InvalidAnchor("Anchor seed has not been set.")
        if not topology.is_in_bounds(anchor):
            raise InvalidAnchor(
                f"Anchor {anchor} is outside the image of shape {topology.shape}."
            )
        if not topology.is_inside(anchor):
            raise InvalidAnchor(f"Anchor {anchor} is outside the mask.")
        return anchor

    def _link_cost(self, topology: NeighborTopology, source: Cell, target: Cell, offset) -> float:
        if not topology.contains(target):
            return INFINITE_COST
        cost = self._cost_model.edge_cost(source, target, offset)
        if not cost >= 0:
            raise ValueError(f"Cost model returned {cost} for link {source} -> {target}.")
        return cost

    def _generate_direction_field(self) -> DirectionField:
        grid = self._image
        field = DirectionField(grid.shape)
        if grid.size == 0:
            logger.warning("Input image is empty; the direction field has no cells.")
            self._topology = None
            return field

        topology = NeighborTopology(
            grid.shape, self._mask, self._inside_value, self._face_connected
        )
        anchor = self._validated_anchor(topology)

        spacing = grid.spacing if self._use_image_spacing else np.ones(grid.ndim)
        # The model may be shared with other engines that prepared it since.
        stale = not self._cost_model.is_prepared_for(grid.array, spacing)
        if stale or self._dirty & {"image", "spacing", "cost_model"}:
            self._cost_model.prepare(grid.array, spacing)

        logger.info(
            f"Starting minimal path search from anchor {anchor} "
            f"({'face' if self._face_connected else 'full'} connectivity)."
        )

        sequence = itertools.count()
        field.record_best(anchor, (0,) * grid.ndim, 0.0)
        queue: List[Tuple[float, int, Cell]] = [(0.0, next(sequence), anchor)]

        while queue:
            current_cost, _, current = heapq.heappop(queue)

            # Stale entry: the cell was already settled or reached more cheaply.
            if field.finalized[current] or current_cost > field.costs[current]:
                continue
            field.finalize(current)

            for offset, neighbor in topology.neighbors(current):
                if field.finalized[neighbor]:
                    continue
                link_cost = self._link_cost(topology, current, neighbor, offset)
                if link_cost == INFINITE_COST:
                    continue
                candidate = current_cost + link_cost
                if field.record_best(neighbor, offset, candidate):
                    heapq.heappush(queue, (candidate, next(sequence), neighbor))

        self._topology = topology
        logger.info(
            f"Minimal path search complete: {field.visited_count} of {field.size} cells reached."
        )
        return field

    # --- QUERIES ---
    def _checked_index(self, index: Sequence[int]) -> Cell:
        cell = tuple(int(i) for i in index)
        if not self._image.is_in_bounds(cell):
            raise OutOfBounds(f"Index {cell} is outside the image of shape {self._image.shape}.")
        return cell

    def reconstruct(self, index: Sequence[int]) -> List[Cell]:
        """
        Reads the minimal path from a cell back to the anchor.

        Args:
            index: The queried cell.

        Returns:
            List of cells starting at `index` and ending at the anchor.

        Raises:
            OutOfBounds: If `index` is outside the image.
            UnreachableQuery: If `index` cannot be reached from the anchor.
        """
        with self.lock:
            field = self.build()
            if field.size == 0:
                raise UnreachableQuery("The image is empty; no cell was reached.")
            cell = self._checked_index(index)
            if not field.is_visited(cell):
                raise UnreachableQuery(f"Cell {cell} is not reachable from anchor {self._anchor}.")

            path = [cell]
            offset = field.predecessor_of(cell)
            while any(offset):
                cell = tuple(c - o for c, o in zip(cell, offset))
                path.append(cell)
                if len(path) > field.visited_count:
                    raise RuntimeError(f"Direction field contains a cycle through {cell}.")
                offset = field.predecessor_of(cell)
            return path

    def evaluate_at_index(self, index: Sequence[int]) -> PolyLinePath:
        """Minimal path from `index` to the anchor, as a polyline."""
        with self.lock:
            cells = self.reconstruct(index)
            return PolyLinePath(self._image.ndim, cells)

    def evaluate_at_continuous_index(self, cindex: Sequence[float]) -> PolyLinePath:
        """Minimal path from the cell nearest to a continuous index."""
        with self.lock:
            if self._image is None:
                raise LivewireError("No input image set.")
            return self.evaluate_at_index(self._image.continuous_index_to_nearest_index(cindex))

    def evaluate(self, point: Sequence[float]) -> PolyLinePath:
        """Minimal path from the cell nearest to a physical point."""
        with self.lock:
            if self._image is None:
                raise LivewireError("No input image set.")
            return self.evaluate_at_index(self._image.point_to_nearest_index(point))

    def cumulative_cost(self, index: Sequence[int]) -> float:
        """Cost of the minimal path from `index` to the anchor."""
        with self.lock:
            field = self.build()
            if field.size == 0:
                raise UnreachableQuery("The image is empty; no cell was reached.")
            cell = self._checked_index(index)
            try:
                return field.cost_of(cell)
            except NotVisited as e:
                raise UnreachableQuery(
                    f"Cell {cell} is not reachable from anchor {self._anchor}."
                ) from e

    def traversal_cost(self, source: Sequence[int], target: Sequence[int]) -> float:
        """
        Link cost between two adjacent cells under the current configuration.

        Returns INFINITE_COST when `target` is out of bounds or masked out.
        """
        with self.lock:
            self.build()
            source = self._checked_index(source)
            target = tuple(int(t) for t in target)
            offset = tuple(t - s for s, t in zip(source, target))
            if offset not in self._topology.offsets:
                raise ValueError(
                    f"Cells {source} and {target} are not adjacent under the current connectivity."
                )
            return self._link_cost(self._topology, source, target, offset)

    def cost_map(self) -> np.ndarray:
        """Cumulative cost of every cell, inf where unreached."""
        with self.lock:
            return self.build().cost_map()
