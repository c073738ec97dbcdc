# =============================================================================
# GEOMETRY: Permittivity Map Construction
# =============================================================================
"""
Rasterize scatterers onto the FDFD grid.

Positions and radii are in grid coordinates: pixel (i, j) covers
[i, i+1) × [j, j+1), so a cylinder centered at (10.5, 10.5) is centered on
pixel (10, 10).

Each function does ONE thing:
    cylinders_to_permittivity: Place circular scatterers on a uniform background
    add_slab: Fill a range of x with a homogeneous material
    random_cylinders: Draw non-overlapping cylinder centers inside a region
    filling_fraction: Fraction of a region covered by cylinders
"""

import numpy as np


def _pixel_coverage(center, radius, x0, x1, y0, y1, supersample):
    """Fraction of each pixel in [x0, x1) × [y0, y1) covered by a disk."""
    offsets = (np.arange(supersample) + 0.5) / supersample
    xs = (np.arange(x0, x1)[:, np.newaxis] + offsets).ravel()
    ys = (np.arange(y0, y1)[:, np.newaxis] + offsets).ravel()
    inside = ((xs[:, np.newaxis] - center[0]) ** 2 +
              (ys[np.newaxis, :] - center[1]) ** 2) <= radius ** 2
    inside = inside.reshape(x1 - x0, supersample, y1 - y0, supersample)
    return inside.mean(axis=(1, 3))


def cylinders_to_permittivity(shape, centers, radius, eps_cylinder, eps_background=1.0,
                              supersample=4, eps_r=None):
    """
    Convert a list of cylinder centers into a 2D permittivity map.

    Pixels on the cylinder boundary get the area-weighted average of the two
    permittivities, estimated on a supersample × supersample sub-grid.

    Args:
        shape: (nx, ny) of the grid
        centers: Iterable of (x, y) cylinder centers in grid coordinates
        radius: Cylinder radius in grid points
        eps_cylinder: Permittivity inside the cylinders
        eps_background: Permittivity outside
        supersample: Sub-samples per pixel edge (1 = plain pixel-center test)
        eps_r: Optional existing map to draw into (modified in place)

    Returns:
        eps_r: nx × ny permittivity array
    """
    if radius <= 0:
        raise ValueError(f"Cylinder radius must be positive, got {radius}")
    if supersample < 1:
        raise ValueError(f"supersample must be >= 1, got {supersample}")

    nx, ny = shape
    if eps_r is None:
        dtype = complex if np.iscomplexobj(eps_cylinder) or np.iscomplexobj(eps_background) else float
        eps_r = np.full((nx, ny), eps_background, dtype=dtype)

    for center in centers:
        cx, cy = center

        # Bounding box of this cylinder, clipped to the grid
        x0 = max(0, int(np.floor(cx - radius)))
        x1 = min(nx, int(np.ceil(cx + radius)) + 1)
        y0 = max(0, int(np.floor(cy - radius)))
        y1 = min(ny, int(np.ceil(cy + radius)) + 1)
        if x0 >= x1 or y0 >= y1:
            continue

        coverage = _pixel_coverage((cx, cy), radius, x0, x1, y0, y1, supersample)
        patch = eps_r[x0:x1, y0:y1]
        eps_r[x0:x1, y0:y1] = coverage * eps_cylinder + (1 - coverage) * patch

    return eps_r


def add_slab(eps_r, x_start, x_end, eps_slab):
    """
    Fill columns x_start ≤ x < x_end with a homogeneous material.

    Args:
        eps_r: nx × ny permittivity array (modified in place)
        x_start: First x index of the slab
        x_end: One past the last x index
        eps_slab: Slab permittivity

    Returns:
        eps_r: The same array with the slab added
    """
    if not 0 <= x_start < x_end <= eps_r.shape[0]:
        raise ValueError(f"Slab [{x_start}, {x_end}) does not fit in nx={eps_r.shape[0]}")
    eps_r[x_start:x_end, :] = eps_slab
    return eps_r


def random_cylinders(region, radius, n_cylinders, min_gap=0.0, rng=None, max_tries=100000):
    """
    Draw non-overlapping cylinder centers inside a rectangular region.

    Cylinders lie entirely inside the region and keep at least ``min_gap``
    between their walls.

    Args:
        region: (x_min, x_max, y_min, y_max) in grid coordinates
        radius: Cylinder radius in grid points
        n_cylinders: Number of cylinders to place
        min_gap: Minimum wall-to-wall distance in grid points
        rng: numpy Generator or seed (default: fresh Generator)
        max_tries: Give up after this many rejected draws

    Returns:
        centers: n_cylinders × 2 array of (x, y) centers

    Raises:
        RuntimeError: If the cylinders cannot be packed into the region
    """
    rng = np.random.default_rng(rng)
    x_min, x_max, y_min, y_max = region
    if x_max - x_min < 2 * radius or y_max - y_min < 2 * radius:
        raise ValueError(f"Region {region} is too small for radius {radius}")

    min_dist_sq = (2 * radius + min_gap) ** 2
    centers = np.empty((n_cylinders, 2))
    n_placed = 0
    tries = 0

    while n_placed < n_cylinders:
        if tries >= max_tries:
            raise RuntimeError(
                f"Placed only {n_placed}/{n_cylinders} cylinders after {max_tries} tries; "
                f"reduce n_cylinders or min_gap"
            )
        tries += 1
        candidate = (rng.uniform(x_min + radius, x_max - radius),
                     rng.uniform(y_min + radius, y_max - radius))
        placed = centers[:n_placed]
        dist_sq = (placed[:, 0] - candidate[0]) ** 2 + (placed[:, 1] - candidate[1]) ** 2
        if np.all(dist_sq >= min_dist_sq):
            centers[n_placed] = candidate
            n_placed += 1

    return centers


def filling_fraction(centers, radius, region):
    """Area fraction of ``region`` covered by non-overlapping cylinders."""
    x_min, x_max, y_min, y_max = region
    area = (x_max - x_min) * (y_max - y_min)
    return len(centers) * np.pi * radius ** 2 / area


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'cylinders_to_permittivity',
    'add_slab',
    'random_cylinders',
    'filling_fraction',
]
