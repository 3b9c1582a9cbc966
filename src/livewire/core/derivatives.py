"""
Local image derivatives used by the livewire cost model.

Gradients and Laplacians are computed with Gaussian derivative filters, as in
the Hessian computations elsewhere in the package, and are expressed per unit
of physical spacing.
"""

import logging
from typing import NamedTuple, Optional, Sequence

import numpy as np
from scipy import ndimage as ndi
from skimage.util import img_as_float

logger = logging.getLogger(__name__)

# Relative magnitude below which filter responses are treated as round-off.
ROUND_OFF_TOLERANCE = 1e-10


class DerivativeField(NamedTuple):
    """Per-cell derivative data consumed by the cost model."""

    gradient: np.ndarray  # (D, *shape)
    magnitude: np.ndarray  # (*shape)
    zero_crossings: np.ndarray  # (*shape), bool


def _axis_order(ndim: int, axis: int, order: int) -> Sequence[int]:
    orders = [0] * ndim
    orders[axis] = order
    return orders


def _intensity_scale(volume: np.ndarray) -> float:
    # Signed integer images come out of img_as_float divided by their dtype
    # range, so the tolerance follows the converted values, not a fixed floor.
    return float(np.max(np.abs(volume))) if volume.size else 0.0


def _suppress_round_off(response: np.ndarray, scale: float) -> np.ndarray:
    response[np.abs(response) < ROUND_OFF_TOLERANCE * scale] = 0.0
    return response


def compute_gradient(
    volume: np.ndarray, spacing: Optional[Sequence[float]] = None, sigma: float = 1.0
) -> np.ndarray:
    """
    Computes the gradient vector of every cell.

    Args:
        volume: Input N-D image.
        spacing: Physical spacing along each axis (default: ones).
        sigma: Gaussian scale in cells. With sigma <= 0, central differences
            are used instead.

    Returns:
        Array of shape (D, *volume.shape) holding d/dx_d along each axis.
    """
    volume = img_as_float(volume)
    spacing = np.ones(volume.ndim) if spacing is None else np.asarray(spacing, dtype=float)
    scale = _intensity_scale(volume)

    gradient = np.zeros((volume.ndim,) + volume.shape, dtype=float)
    for axis in range(volume.ndim):
        if sigma > 0:
            derivative = ndi.gaussian_filter(
                volume, sigma=sigma, order=_axis_order(volume.ndim, axis, 1)
            )
        elif volume.shape[axis] >= 2:
            derivative = np.gradient(volume, axis=axis)
        else:
            continue
        gradient[axis] = _suppress_round_off(derivative / spacing[axis], scale)
    return gradient


def gradient_magnitude(gradient: np.ndarray) -> np.ndarray:
    """Euclidean norm of a (D, *shape) gradient field."""
    return np.sqrt(np.sum(np.square(gradient), axis=0))


def laplacian_zero_crossings(
    volume: np.ndarray, spacing: Optional[Sequence[float]] = None, sigma: float = 1.0
) -> np.ndarray:
    """
    Marks the cells lying on a zero crossing of the Laplacian.

    A sign change between two face-adjacent cells is attributed to the cell
    whose Laplacian is closer to zero (the lower index on ties).

    Args:
        volume: Input N-D image.
        spacing: Physical spacing along each axis (default: ones).
        sigma: Gaussian scale in cells (sigma <= 0 uses a 3-point stencil).

    Returns:
        Boolean array of the image's shape.
    """
    volume = img_as_float(volume)
    spacing = np.ones(volume.ndim) if spacing is None else np.asarray(spacing, dtype=float)
    scale = _intensity_scale(volume)

    laplacian = np.zeros(volume.shape, dtype=float)
    for axis in range(volume.ndim):
        if sigma > 0:
            second = ndi.gaussian_filter(
                volume, sigma=sigma, order=_axis_order(volume.ndim, axis, 2)
            )
        else:
            second = ndi.correlate1d(volume, [1.0, -2.0, 1.0], axis=axis, mode="reflect")
        laplacian += second / spacing[axis] ** 2
    laplacian = _suppress_round_off(laplacian, scale)

    crossings = np.zeros(volume.shape, dtype=bool)
    for axis in range(volume.ndim):
        if volume.shape[axis] < 2:
            continue
        lower = [slice(None)] * volume.ndim
        upper = [slice(None)] * volume.ndim
        lower[axis] = slice(None, -1)
        upper[axis] = slice(1, None)
        lower, upper = tuple(lower), tuple(upper)

        low_values, high_values = laplacian[lower], laplacian[upper]
        sign_change = low_values * high_values < 0
        low_is_closer = np.abs(low_values) <= np.abs(high_values)
        crossings[lower] |= sign_change & low_is_closer
        crossings[upper] |= sign_change & ~low_is_closer
    return crossings


def compute_derivatives(
    volume: np.ndarray, spacing: Optional[Sequence[float]] = None, sigma: float = 1.0
) -> DerivativeField:
    """
    Computes the derivative field of an image in one call.

    Args:
        volume: Input N-D image.
        spacing: Physical spacing along each axis (default: ones).
        sigma: Gaussian scale in cells.

    Returns:
        DerivativeField with gradient vectors, magnitudes and zero crossings.
    """
    gradient = compute_gradient(volume, spacing, sigma)
    magnitude = gradient_magnitude(gradient)
    zero_crossings = laplacian_zero_crossings(volume, spacing, sigma)

    max_magnitude = float(magnitude.max()) if magnitude.size else 0.0
    logger.debug(
        f"Derivatives computed at sigma={sigma}: max gradient {max_magnitude:.4g}, "
        f"{int(np.count_nonzero(zero_crossings))} zero-crossing cells."
    )
    return DerivativeField(gradient, magnitude, zero_crossings)
