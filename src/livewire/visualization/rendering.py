"""
Matplotlib rendering of livewire paths and cost maps.
"""

import logging
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..core.minimal_path import MinimalPathSearch
from ..structures.polyline import PolyLinePath

logger = logging.getLogger(__name__)


def _path_vertices(path, ndim: int) -> np.ndarray:
    if isinstance(path, PolyLinePath):
        return path.vertices
    if len(path) == 0:
        return np.empty((0, ndim), dtype=float)
    return np.asarray(path, dtype=float).reshape(len(path), -1)


def plot_path(
    image: np.ndarray,
    path,
    ax: Optional[plt.Axes] = None,
    anchor: Optional[Sequence[int]] = None,
    color: str = "red",
    cmap: str = "gray",
) -> plt.Axes:
    """
    Overlays a path on a 2D image.

    Args:
        image: 2D image (row, column).
        path: PolyLinePath or sequence of (row, column) indices.
        ax: Axes to draw on (a new figure is created if None).
        anchor: Optional anchor index to mark.
        color: Path color.
        cmap: Colormap for the image.

    Returns:
        The axes drawn on.
    """
    image = np.asarray(image)
    if image.ndim != 2:
        raise ValueError(f"plot_path expects a 2D image, got {image.ndim}D.")
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    vertices = _path_vertices(path, 2)
    ax.imshow(image, cmap=cmap)
    if len(vertices):
        ax.plot(vertices[:, 1], vertices[:, 0], color=color, linewidth=1.5)
    if anchor is not None:
        ax.plot(anchor[1], anchor[0], marker="o", color="yellow", markersize=6)
    ax.set_axis_off()
    return ax


def plot_cost_map(
    search: MinimalPathSearch, ax: Optional[plt.Axes] = None, cmap: str = "viridis"
) -> plt.Axes:
    """
    Shows the cumulative cost to the anchor of a 2D search. Unreached cells
    are left blank.
    """
    costs = search.cost_map()
    if costs.ndim != 2:
        raise ValueError(f"plot_cost_map expects a 2D search, got {costs.ndim}D.")
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    shown = np.ma.masked_invalid(costs)
    image = ax.imshow(shown, cmap=cmap)
    ax.figure.colorbar(image, ax=ax, label="Cumulative cost")
    if search.anchor is not None:
        ax.plot(search.anchor[1], search.anchor[0], marker="o", color="red", markersize=6)
    ax.set_title("Cost to anchor")
    return ax


def plot_projections(volume: np.ndarray, path=None, color: str = "red") -> plt.Figure:
    """
    Displays the maximum intensity projections of a 3D volume along each
    axis, with the path projected on each view.

    Args:
        volume: 3D volume (z, y, x).
        path: Optional PolyLinePath or sequence of (z, y, x) indices.
        color: Path color.

    Returns:
        The figure.
    """
    volume = np.asarray(volume)
    if volume.ndim != 3:
        raise ValueError(f"plot_projections expects a 3D volume, got {volume.ndim}D.")

    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    titles = ["XY (max over Z)", "XZ (max over Y)", "YZ (max over X)"]
    # (row axis, column axis) of the path shown on each projection
    path_axes = [(1, 2), (0, 2), (0, 1)]
    vertices = None if path is None else _path_vertices(path, 3)

    for axis, (ax, title, (row, col)) in enumerate(zip(axes, titles, path_axes)):
        ax.imshow(np.max(volume, axis=axis), cmap="gray")
        if vertices is not None and len(vertices):
            ax.plot(vertices[:, col], vertices[:, row], color=color, linewidth=1.0)
        ax.set_title(title)
        ax.set_axis_off()

    fig.tight_layout()
    return fig
