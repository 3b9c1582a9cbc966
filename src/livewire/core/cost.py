"""
Local traversal costs between adjacent grid cells.

The engine only relies on the `CostModel` contract: a non-negative, finite
cost for every link between two in-bounds, in-mask cells. `LivewireCost`
implements the gradient magnitude, gradient direction and Laplacian
zero-crossing combination of Barrett and Mortensen (1997).
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .derivatives import DerivativeField, compute_derivatives

logger = logging.getLogger(__name__)

INFINITE_COST = np.inf

Offset = Tuple[int, ...]
Cell = Tuple[int, ...]


class CostModel:
    """
    Base class for link cost policies.

    Subclasses implement `edge_cost`. The engine calls `prepare` before every
    build whose image, spacing or cost model changed, and whenever the model
    was last prepared for another image or spacing.
    """

    def __init__(self):
        self.image: Optional[np.ndarray] = None
        self.spacing: Optional[np.ndarray] = None
        self._geometry: Dict[Offset, Tuple[float, np.ndarray]] = {}

    def prepare(self, image: np.ndarray, spacing: Sequence[float]) -> None:
        """
        Binds the model to an image.

        Args:
            image: The N-D image being searched.
            spacing: Effective spacing, physical when the search is
                spacing-aware and ones otherwise.
        """
        self.image = image
        self.spacing = np.asarray(spacing, dtype=float)
        self._geometry = {}

    def is_prepared_for(self, image: np.ndarray, spacing: Sequence[float]) -> bool:
        """True if the last `prepare` call was for this very array and spacing."""
        return (
            self.image is image
            and self.spacing is not None
            and np.array_equal(self.spacing, np.asarray(spacing, dtype=float))
        )

    def _step(self, offset: Offset) -> Tuple[float, np.ndarray]:
        geometry = self._geometry.get(offset)
        if geometry is None:
            physical = np.asarray(offset, dtype=float) * self.spacing
            length = float(np.linalg.norm(physical))
            geometry = (length, physical / length)
            self._geometry[offset] = geometry
        return geometry

    def step_length(self, offset: Offset) -> float:
        """Length of the link `offset` in (effective) physical units."""
        return self._step(offset)[0]

    def step_direction(self, offset: Offset) -> np.ndarray:
        """Unit vector along the link `offset`."""
        return self._step(offset)[1]

    def edge_cost(self, source: Cell, target: Cell, offset: Offset) -> float:
        """Cost of moving from `source` to `target`, where target = source + offset."""
        raise NotImplementedError


class UniformCost(CostModel):
    """Every link costs `value` per unit of length."""

    def __init__(self, value: float = 1.0):
        super().__init__()
        if not np.isfinite(value) or value < 0:
            raise ValueError(f"Uniform cost must be finite and non-negative, got {value}.")
        self.value = float(value)

    def edge_cost(self, source: Cell, target: Cell, offset: Offset) -> float:
        return self.value * self.step_length(offset)


class LocalCostImage(CostModel):
    """
    Entering a cell costs its local cost times the link length.

    Args:
        local_cost: Array of the image's shape with finite, non-negative values.
    """

    def __init__(self, local_cost: np.ndarray):
        super().__init__()
        local_cost = np.asarray(local_cost, dtype=float)
        if not np.all(np.isfinite(local_cost)) or np.any(local_cost < 0):
            raise ValueError("Local costs must be finite and non-negative.")
        self.local_cost = local_cost

    def prepare(self, image: np.ndarray, spacing: Sequence[float]) -> None:
        if image.shape != self.local_cost.shape:
            raise ValueError(
                f"Local cost shape {self.local_cost.shape} does not match image shape {image.shape}."
            )
        super().prepare(image, spacing)

    def edge_cost(self, source: Cell, target: Cell, offset: Offset) -> float:
        return float(self.local_cost[target]) * self.step_length(offset)


@dataclass(frozen=True)
class CostWeights:
    """Relative weights of the three livewire cost terms."""

    zero_crossing: float = 0.43
    gradient_magnitude: float = 0.43
    gradient_direction: float = 0.14

    def __post_init__(self):
        for name in ("zero_crossing", "gradient_magnitude", "gradient_direction"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ValueError(f"Weight '{name}' must be finite and non-negative, got {value}.")


class LivewireCost(CostModel):
    """
    Intelligent-scissors link cost.

    For a link p -> q of length |L|:

        cost = wZ * fZ(q) + wG * fG(q) * |L| + wD * fD(p, q)

    fG is the inverted, normalized gradient magnitude, fZ is 0 on Laplacian
    zero crossings and 1 elsewhere, and fD penalizes links that run along the
    gradient instead of across it, averaged over both endpoints.

    Args:
        weights: Term weights.
        sigma: Gaussian scale of the derivative filters, in cells.
        derivatives: Precomputed derivative field. When given, `sigma` is
            ignored and nothing is recomputed on `prepare`.
    """

    def __init__(
        self,
        weights: Optional[CostWeights] = None,
        sigma: float = 1.0,
        derivatives: Optional[DerivativeField] = None,
    ):
        super().__init__()
        self.weights = CostWeights() if weights is None else weights
        self.sigma = sigma
        self.derivatives = derivatives
        self._supplied = derivatives is not None

        self.magnitude_cost: Optional[np.ndarray] = None
        self.zero_crossing_cost: Optional[np.ndarray] = None
        self.unit_gradient: Optional[np.ndarray] = None

    def prepare(self, image: np.ndarray, spacing: Sequence[float]) -> None:
        super().prepare(image, spacing)

        if not self._supplied:
            self.derivatives = compute_derivatives(image, self.spacing, self.sigma)
        gradient, magnitude, zero_crossings = self.derivatives
        if magnitude.shape != image.shape:
            raise ValueError(
                f"Derivative field shape {magnitude.shape} does not match image shape {image.shape}."
            )

        max_magnitude = float(magnitude.max()) if magnitude.size else 0.0
        if max_magnitude > 0:
            self.magnitude_cost = 1.0 - magnitude / max_magnitude
        else:
            logger.warning("Image gradient is zero everywhere; magnitude term is constant.")
            self.magnitude_cost = np.ones(image.shape, dtype=float)

        self.zero_crossing_cost = np.where(zero_crossings, 0.0, 1.0)

        # Cells without a gradient get a zero direction and no direction penalty.
        self.unit_gradient = np.divide(
            gradient,
            magnitude,
            out=np.zeros_like(gradient, dtype=float),
            where=magnitude > 0,
        )
        # Move the vector axis last so unit_gradient[cell] is a D-vector.
        self.unit_gradient = np.moveaxis(self.unit_gradient, 0, -1)

    def direction_cost(self, source: Cell, target: Cell, offset: Offset) -> float:
        link = self.step_direction(offset)
        dp = min(1.0, abs(float(np.dot(self.unit_gradient[source], link))))
        dq = min(1.0, abs(float(np.dot(self.unit_gradient[target], link))))
        return (np.arcsin(dp) + np.arcsin(dq)) / np.pi

    def edge_cost(self, source: Cell, target: Cell, offset: Offset) -> float:
        w = self.weights
        cost = w.zero_crossing * self.zero_crossing_cost[target]
        cost += w.gradient_magnitude * self.magnitude_cost[target] * self.step_length(offset)
        if w.gradient_direction:
            cost += w.gradient_direction * self.direction_cost(source, target, offset)
        return float(cost)
