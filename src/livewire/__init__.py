"""
livewire - Minimal path boundary tracing on N-D images

A Python package implementing the live-wire / intelligent scissors
segmentation of Barrett and Mortensen on regular grids of any dimension.
"""

__version__ = "0.1.0"

# Core classes and functions
from .core.cost import CostWeights, LivewireCost, LocalCostImage, UniformCost
from .core.minimal_path import MinimalPathSearch, SearchState
from .exceptions import InvalidAnchor, LivewireError, NotVisited, OutOfBounds, UnreachableQuery
from .processing.contour import trace_contour
from .structures.grid import ImageGrid
from .structures.polyline import PolyLinePath

__all__ = [
    "MinimalPathSearch",
    "SearchState",
    "LivewireCost",
    "UniformCost",
    "LocalCostImage",
    "CostWeights",
    "ImageGrid",
    "PolyLinePath",
    "trace_contour",
    "LivewireError",
    "InvalidAnchor",
    "OutOfBounds",
    "NotVisited",
    "UnreachableQuery",
]
