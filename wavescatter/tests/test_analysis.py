# =============================================================================
# Test Analysis: Eigenchannels and Phase Conjugation
# =============================================================================
"""
Checks of the post-processing:
1. SVD of t gives sorted eigenvalues and the open channel
2. The open channel transmits at least as much as any plane wave, and a
   solve with it transmits tau_max
3. Phase conjugation of a point source focuses back onto the target
"""

import numpy as np
import pytest

from wavescatter.analysis import (
    transmission_eigenchannels, open_channel, plane_wave_transmission,
    wavefront_transmission, bimodal_density, phase_conjugate,
    phase_conjugation_wavefront, focus_enhancement,
)
from wavescatter.channels import ChannelBasis
from wavescatter.constants import DL, WAVELENGTH
from wavescatter.simulation import make_slab_layout, make_disordered_slab
from wavescatter.scattering import compute_scattering_matrices, solve_wavefront, transmitted_flux


# =============================================================================
# Transmission Eigenchannels
# =============================================================================

def test_eigenchannels_of_random_matrix():
    rng = np.random.default_rng(0)
    t = (rng.normal(size=(6, 6)) + 1j * rng.normal(size=(6, 6))) / 6

    tau, V, U = transmission_eigenchannels(t)

    assert np.all(np.diff(tau) <= 0)
    np.testing.assert_allclose(V.conj().T @ V, np.eye(6), atol=1e-12)
    np.testing.assert_allclose(t @ V[:, 0], np.sqrt(tau[0]) * U[:, 0], atol=1e-12)

    wavefront, tau_max = open_channel(t)
    assert tau_max == pytest.approx(tau[0])
    assert wavefront_transmission(t, wavefront) == pytest.approx(tau_max)
    for index in range(6):
        assert plane_wave_transmission(t, index) <= tau_max + 1e-12


def test_eigenchannels_reject_vectors():
    with pytest.raises(ValueError):
        transmission_eigenchannels(np.ones(4))


def test_wavefront_transmission_ignores_scale():
    t = np.diag([0.5, 1.0]).astype(complex)

    assert wavefront_transmission(t, [0, 3]) == pytest.approx(1.0)
    assert wavefront_transmission(t, [2, 0]) == pytest.approx(0.25)


def test_bimodal_density():
    tau = np.array([-0.1, 0.0, 0.25, 0.5, 1.0])
    density = bimodal_density(tau, 0.2)

    assert np.isnan(density[0]) and np.isnan(density[1]) and np.isnan(density[-1])
    assert density[2] == pytest.approx(0.2 / (2 * 0.25 * np.sqrt(0.75)))
    assert density[2] > density[3]


def test_open_channel_of_disordered_slab():
    layout, eps_r, _ = make_disordered_slab(ny=28, slab_thickness=15, gap=6, radius=2.0,
                                            n_cylinders=5, eps_scatterer=2.25,
                                            min_gap=1.0, rng=1)
    domain = layout.domain
    basis = ChannelBasis(domain.ny, domain.dl, domain.wavelength)

    result = compute_scattering_matrices(eps_r, layout, basis, verbose=False)
    wavefront, tau_max = open_channel(result.t)

    plane = plane_wave_transmission(result.t, basis.normal_index)
    assert tau_max >= plane - 1e-12

    Ez = solve_wavefront(eps_r, layout, basis, wavefront)
    assert transmitted_flux(Ez, layout, basis) == pytest.approx(tau_max, abs=1e-6)


# =============================================================================
# Phase Conjugation
# =============================================================================

def test_phase_conjugate_reverses_channel_order():
    basis = ChannelBasis(56, DL, WAVELENGTH)
    rng = np.random.default_rng(2)
    coefficients = rng.normal(size=basis.n_channels) + 1j * rng.normal(size=basis.n_channels)

    conjugate = phase_conjugate(basis.synthesize(coefficients), basis)

    np.testing.assert_allclose(conjugate, np.conj(coefficients[::-1]), atol=1e-12)


def test_focus_enhancement():
    intensity = np.ones((10, 10))
    intensity[4, 5] = 11.0

    assert focus_enhancement(intensity, (4, 5)) == pytest.approx(11.0 / 1.1)
    assert focus_enhancement(intensity, (4, 5), region=(0, 2, 0, 10)) == pytest.approx(11.0)


def test_phase_conjugation_focuses_in_free_space():
    layout = make_slab_layout(ny=56, slab_thickness=20, gap=10)
    domain = layout.domain
    basis = ChannelBasis(domain.ny, domain.dl, domain.wavelength)
    eps_r = np.ones(domain.shape)
    target = (layout.x_slab_start + 10, 28)

    wavefront = phase_conjugation_wavefront(eps_r, layout, basis, target, verbose=False)
    assert np.linalg.norm(wavefront) == pytest.approx(1.0)

    Ez = solve_wavefront(eps_r, layout, basis, wavefront)
    intensity = np.abs(Ez) ** 2

    assert abs(int(np.argmax(intensity[target[0], :])) - target[1]) <= 1
    assert focus_enhancement(intensity, target, region=layout.slab_region) > 2


def test_phase_conjugation_target_checks():
    layout = make_slab_layout(ny=28, slab_thickness=10, gap=5)
    basis = ChannelBasis(28, layout.domain.dl, layout.domain.wavelength)
    eps_r = np.ones(layout.domain.shape)

    with pytest.raises(ValueError):
        phase_conjugation_wavefront(eps_r, layout, basis, (layout.x_source, 14), verbose=False)
    with pytest.raises(ValueError):
        phase_conjugation_wavefront(eps_r, layout, basis, (layout.domain.nx - 1, 14),
                                    verbose=False)


def test_phase_conjugation_focuses_inside_disorder():
    """
    The conjugated wavefront maximizes the target intensity over all unit-flux inputs.

    By linearity the target field is g·w with g_b the field from channel b
    alone, so the optimum is Σ|g_b|² and any other input (a plane wave) is lower.
    """
    layout, eps_r, _ = make_disordered_slab(ny=56, slab_thickness=30, gap=6, radius=2.0,
                                            n_cylinders=25, eps_scatterer=2.25,
                                            min_gap=1.0, rng=3)
    domain = layout.domain
    basis = ChannelBasis(domain.ny, domain.dl, domain.wavelength)
    target = (layout.x_slab_start + 20, domain.ny // 2)

    response = np.array([solve_wavefront(eps_r, layout, basis, e_b)[target]
                         for e_b in np.eye(basis.n_channels, dtype=complex)])
    optimum = np.sum(np.abs(response) ** 2)

    wavefront = phase_conjugation_wavefront(eps_r, layout, basis, target, verbose=False)
    achieved = np.abs(solve_wavefront(eps_r, layout, basis, wavefront)[target]) ** 2
    plane = np.abs(response[basis.normal_index]) ** 2

    assert achieved == pytest.approx(np.abs(response @ wavefront) ** 2, rel=1e-6)
    assert achieved / optimum > 0.99
    assert achieved > plane
