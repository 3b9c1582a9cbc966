"""
Backpointer storage produced by the minimal path search.
"""

from typing import Sequence, Tuple

import networkx as nx
import numpy as np

from ..exceptions import NotVisited

Offset = Tuple[int, ...]
Cell = Tuple[int, ...]


class DirectionField:
    """
    Per-cell predecessor offsets and best known cumulative costs.

    A cell is visited once a cost has been recorded for it. The offset stored
    for a cell is `cell - predecessor`; the anchor stores the zero offset.

    Args:
        shape: Image shape.
    """

    def __init__(self, shape: Sequence[int]):
        self.shape = tuple(int(n) for n in shape)
        self.ndim = len(self.shape)
        self.costs = np.full(self.shape, np.inf, dtype=float)
        self.offsets = np.zeros(self.shape + (self.ndim,), dtype=np.int8)
        self.visited = np.zeros(self.shape, dtype=bool)
        self.finalized = np.zeros(self.shape, dtype=bool)

    @property
    def size(self) -> int:
        return self.visited.size

    @property
    def visited_count(self) -> int:
        return int(np.count_nonzero(self.visited))

    def record_best(self, cell: Cell, offset: Offset, cost: float) -> bool:
        """
        Records `offset` as the way back from `cell` if `cost` improves on it.

        Args:
            cell: The cell being reached.
            offset: `cell - predecessor`.
            cost: Cumulative cost of reaching `cell` through that predecessor.

        Returns:
            True if the record was written. Equal costs keep the earlier record.
        """
        if self.visited[cell] and not cost < self.costs[cell]:
            return False
        self.costs[cell] = cost
        self.offsets[cell] = offset
        self.visited[cell] = True
        return True

    def is_visited(self, cell: Cell) -> bool:
        return bool(self.visited[cell])

    def predecessor_of(self, cell: Cell) -> Offset:
        if not self.visited[cell]:
            raise NotVisited(f"Cell {cell} has not been visited.")
        return tuple(int(o) for o in self.offsets[cell])

    def cost_of(self, cell: Cell) -> float:
        if not self.visited[cell]:
            raise NotVisited(f"Cell {cell} has not been visited.")
        return float(self.costs[cell])

    def finalize(self, cell: Cell) -> None:
        self.finalized[cell] = True

    def is_finalized(self, cell: Cell) -> bool:
        return bool(self.finalized[cell])

    def cost_map(self) -> np.ndarray:
        """Copy of the cumulative costs, inf where unreached."""
        return self.costs.copy()

    def visited_mask(self) -> np.ndarray:
        return self.visited.copy()

    def to_graph(self) -> nx.DiGraph:
        """
        Exports the shortest-path tree.

        Returns:
            DiGraph with one node per visited cell (attribute `cost`) and one
            edge from every non-anchor cell to its predecessor, weighted by
            the cost increment along that link.
        """
        tree = nx.DiGraph()
        for index in np.argwhere(self.visited):
            cell = tuple(int(i) for i in index)
            tree.add_node(cell, cost=float(self.costs[cell]))

        for cell in list(tree.nodes):
            offset = self.offsets[cell]
            if not offset.any():
                continue
            predecessor = tuple(int(c - o) for c, o in zip(cell, offset))
            weight = float(self.costs[cell] - self.costs[predecessor])
            tree.add_edge(cell, predecessor, weight=weight)
        return tree
