"""Data structures for images and paths."""

from .grid import ImageGrid
from .polyline import PolyLinePath

__all__ = ["ImageGrid", "PolyLinePath"]
