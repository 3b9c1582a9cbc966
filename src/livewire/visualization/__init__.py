"""Visualization tools for livewire paths."""

from .rendering import plot_cost_map, plot_path, plot_projections

__all__ = ["plot_path", "plot_cost_map", "plot_projections"]
