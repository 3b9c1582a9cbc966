"""Core algorithms for minimal path search."""

from .cost import (
    INFINITE_COST,
    CostModel,
    CostWeights,
    LivewireCost,
    LocalCostImage,
    UniformCost,
)
from .derivatives import (
    DerivativeField,
    compute_derivatives,
    compute_gradient,
    gradient_magnitude,
    laplacian_zero_crossings,
)
from .direction_field import DirectionField
from .minimal_path import MinimalPathSearch, SearchState
from .topology import NeighborTopology, neighbor_offsets

__all__ = [
    "INFINITE_COST",
    "CostModel",
    "CostWeights",
    "LivewireCost",
    "LocalCostImage",
    "UniformCost",
    "DerivativeField",
    "compute_derivatives",
    "compute_gradient",
    "gradient_magnitude",
    "laplacian_zero_crossings",
    "DirectionField",
    "MinimalPathSearch",
    "SearchState",
    "NeighborTopology",
    "neighbor_offsets",
]
