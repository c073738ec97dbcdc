# =============================================================================
# BEAMS: Gaussian Beam Synthesis and Back-Propagation
# =============================================================================
"""
Build incident wavefronts that focus at a chosen point.

A Gaussian profile is written on the focal plane, reduced to the propagating
channels of the background, and back-propagated to the source plane. The
line source that launches those coefficients then produces a beam whose
waist sits on the focal plane (evanescent components are lost, so waists
below about half a wavelength come out wider than requested).

Lengths along the grid (center, waist, distances) are in grid points.
"""

import numpy as np

from .simulation import create_line_source


# =============================================================================
# Analytic Gaussian Beam
# =============================================================================

def rayleigh_range(waist, wavelength, index=1.0):
    """z_R = π w0² n / λ (waist and wavelength in the same units)."""
    return np.pi * waist ** 2 * index / wavelength


def beam_width(z, waist, wavelength, index=1.0):
    """Paraxial 1/e² intensity radius at distance z from the waist."""
    z_r = rayleigh_range(waist, wavelength, index)
    return waist * np.sqrt(1 + (z / z_r) ** 2)


def gaussian_profile(ny, center, waist):
    """
    Gaussian field exp(-(y - center)²/waist²) on a y-periodic grid.

    Distances wrap around the period so the profile stays smooth across
    the boundary.

    Args:
        ny: Transverse grid points
        center: Beam center in grid coordinates
        waist: 1/e field radius in grid points

    Returns:
        profile: Length-ny real array
    """
    if waist <= 0:
        raise ValueError(f"Waist must be positive, got {waist}")
    y = np.arange(ny)
    dy = (y - center + ny / 2) % ny - ny / 2
    return np.exp(-(dy / waist) ** 2)


def measure_width(line):
    """
    Second-moment 1/e² intensity radius of a field along y, in grid points.

    Equals the waist for a Gaussian beam; the centroid is taken on the
    circle so beams straddling the periodic boundary are handled.
    """
    intensity = np.abs(np.asarray(line)) ** 2
    ny = len(intensity)
    theta = 2 * np.pi * np.arange(ny) / ny
    centroid = np.angle(np.sum(intensity * np.exp(1j * theta))) * ny / (2 * np.pi)
    dy = (np.arange(ny) - centroid + ny / 2) % ny - ny / 2
    variance = np.sum(intensity * dy ** 2) / np.sum(intensity)
    return 2 * np.sqrt(variance)


# =============================================================================
# Channel-Space Synthesis
# =============================================================================

def focused_beam_coefficients(basis, center, waist, focal_distance):
    """
    Channel coefficients at the source plane of a beam focused downstream.

    Args:
        basis: ChannelBasis of the background medium
        center: Focal spot position along y (grid coordinates)
        waist: Waist radius at the focus (grid points)
        focal_distance: Source plane to focal plane distance (grid points)

    Returns:
        coefficients: Length-M field amplitudes at the source plane
    """
    focal_line = gaussian_profile(basis.ny, center, waist)
    focal_coefficients = basis.project(focal_line)
    return basis.propagate(focal_coefficients, -focal_distance)


def normalize_flux(basis, coefficients):
    """Scale field amplitudes so the beam carries unit total flux."""
    wavefront = basis.to_flux_normalized(coefficients)
    norm = np.linalg.norm(wavefront)
    if norm == 0:
        raise ValueError("Cannot normalize a wavefront with zero flux")
    return coefficients / norm


def focused_beam_source(basis, domain, x_source, x_focus, center, waist, normalize=True):
    """
    Line source that launches a Gaussian beam focused at (x_focus, center).

    Args:
        basis: ChannelBasis of the background medium
        domain: SimulationDomain (periodic in y)
        x_source: Column of the source line
        x_focus: Column of the focal plane (x_focus >= x_source)
        center: Focal spot position along y
        waist: Waist radius at the focus (grid points)
        normalize: If True, scale the beam to unit incident flux

    Returns:
        (source, coefficients): nx × ny current array and the launched
        field amplitudes at the source plane
    """
    if not domain.periodic_y:
        raise ValueError("Channel-based beams need a y-periodic domain")
    if x_focus < x_source:
        raise ValueError(f"Focal plane x={x_focus} lies behind the source plane x={x_source}")

    coefficients = focused_beam_coefficients(basis, center, waist, x_focus - x_source)
    if normalize:
        coefficients = normalize_flux(basis, coefficients)
    source = create_line_source(domain, x_source, basis.line_source(coefficients))
    return source, coefficients


def propagate_profile(basis, coefficients, distances):
    """
    Field of a +x-going wavefront in the homogeneous background.

    Args:
        basis: ChannelBasis
        coefficients: Field amplitudes at distance 0
        distances: Iterable of distances along x (grid points)

    Returns:
        field: len(distances) × ny complex array, indexed [x, y]
    """
    distances = np.atleast_1d(distances)
    field = np.empty((len(distances), basis.ny), dtype=complex)
    for i, d in enumerate(distances):
        field[i] = basis.synthesize(basis.propagate(coefficients, d))
    return field


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'rayleigh_range',
    'beam_width',
    'gaussian_profile',
    'measure_width',
    'focused_beam_coefficients',
    'normalize_flux',
    'focused_beam_source',
    'propagate_profile',
]
