# =============================================================================
# Test Beams: Gaussian Synthesis and Back-Propagation
# =============================================================================
"""
Checks of the Gaussian beam helpers:
1. Width measurement recovers the waist, also across the periodic boundary
2. A back-propagated Gaussian refocuses at the requested plane
3. The FDFD beam launched from the source line focuses where requested
"""

import numpy as np
import pytest

from wavescatter.beams import (
    rayleigh_range, beam_width, gaussian_profile, measure_width,
    focused_beam_coefficients, normalize_flux, focused_beam_source, propagate_profile,
)
from wavescatter.channels import ChannelBasis
from wavescatter.constants import DL, WAVELENGTH, RESOLUTION
from wavescatter.simulation import SimulationDomain, make_slab_layout, run_simulation


def test_paraxial_formulas():
    z_r = rayleigh_range(10.0, 15.0)

    assert z_r == pytest.approx(np.pi * 100 / 15)
    assert beam_width(0.0, 10.0, 15.0) == pytest.approx(10.0)
    assert beam_width(z_r, 10.0, 15.0) == pytest.approx(10.0 * np.sqrt(2))
    assert rayleigh_range(10.0, 15.0, index=1.5) == pytest.approx(1.5 * z_r)


def test_measure_width_of_gaussian():
    profile = gaussian_profile(200, 100, 12.0)

    assert measure_width(profile) == pytest.approx(12.0, rel=1e-3)


def test_measure_width_across_boundary():
    """A beam centered on y = 0 wraps around the period."""
    profile = gaussian_profile(200, 0, 12.0)

    assert profile[0] == pytest.approx(1.0)
    assert profile[1] == pytest.approx(profile[-1])
    assert measure_width(profile) == pytest.approx(12.0, rel=1e-3)


def test_gaussian_profile_rejects_bad_waist():
    with pytest.raises(ValueError):
        gaussian_profile(100, 50, 0.0)


def test_back_propagated_beam_refocuses():
    basis = ChannelBasis(120, DL, WAVELENGTH)
    waist, focal_distance = 15.0, 60

    coefficients = focused_beam_coefficients(basis, 60, waist, focal_distance)
    field = propagate_profile(basis, coefficients, [0, focal_distance])

    assert field.shape == (2, 120)
    at_source, at_focus = measure_width(field[0]), measure_width(field[1])
    assert at_focus == pytest.approx(waist, rel=0.1)
    assert at_source > 1.3 * at_focus


def test_normalize_flux():
    basis = ChannelBasis(56, DL, WAVELENGTH)
    coefficients = focused_beam_coefficients(basis, 28, 10.0, 30)
    normalized = normalize_flux(basis, coefficients)

    assert np.linalg.norm(basis.to_flux_normalized(normalized)) == pytest.approx(1.0)
    with pytest.raises(ValueError):
        normalize_flux(basis, np.zeros(basis.n_channels))


def test_focused_beam_source_checks_geometry():
    layout = make_slab_layout(ny=56, slab_thickness=0, gap=30)
    basis = ChannelBasis(56, DL, WAVELENGTH)

    with pytest.raises(ValueError):
        focused_beam_source(basis, layout.domain, layout.x_source, layout.x_source - 1, 28, 10.0)

    open_domain = SimulationDomain(nx=100, ny=100, periodic_y=False)
    with pytest.raises(ValueError):
        focused_beam_source(basis, open_domain, 30, 60, 50, 10.0)


def test_fdfd_beam_focuses_at_requested_plane():
    """Solved beam is narrowest near the focal plane and narrower than at launch."""
    ny, waist, focal_distance = 84, float(RESOLUTION), 60
    layout = make_slab_layout(ny=ny, slab_thickness=0, gap=45)
    domain = layout.domain
    basis = ChannelBasis(ny, domain.dl, domain.wavelength)
    x_focus = layout.x_source + focal_distance

    source, coefficients = focused_beam_source(basis, domain, layout.x_source, x_focus,
                                               ny / 2, waist)
    Ez = run_simulation(np.ones(domain.shape), source, domain, verbose=False)

    columns = np.arange(layout.x_source + 1, layout.x_transmission + 1)
    width = np.array([measure_width(Ez[x, :]) for x in columns])
    x_waist = columns[np.argmin(width)]

    assert abs(x_waist - x_focus) <= 10
    assert width[columns == x_focus][0] < 0.8 * width[0]
