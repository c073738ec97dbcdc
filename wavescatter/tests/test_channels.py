# =============================================================================
# Test Channels: Mesh-to-Channel Reduction
# =============================================================================
"""
Checks of the periodic channel basis:
1. Channel count and ordering follow the finite-difference dispersion
2. Profiles are orthonormal, so projection inverts synthesis
3. Propagation is a pure phase, line sources scale with nu
"""

import numpy as np
import pytest

from wavescatter.channels import ChannelBasis
from wavescatter.constants import DL, WAVELENGTH, MU_0, PROPAGATION_SIGN


def test_channel_count_matches_dispersion():
    """ny=30 at 15 points per wavelength keeps orders -2..2."""
    basis = ChannelBasis(30, DL, WAVELENGTH)

    assert basis.n_channels == 5
    assert list(basis.orders) == [-2, -1, 0, 1, 2]
    assert np.all(np.diff(basis.ky) > 0)


def test_normal_channel():
    basis = ChannelBasis(28, DL, WAVELENGTH)
    i = basis.normal_index

    assert basis.ky[i] == 0
    expected_kx = 2 / DL * np.arcsin(np.pi / 15)
    assert basis.kx[i] == pytest.approx(expected_kx, rel=1e-12)
    assert basis.angles_deg[i] == pytest.approx(0.0)
    assert np.all((basis.nu > 0) & (basis.nu <= 1))


def test_denser_background_has_more_channels():
    air = ChannelBasis(56, DL, WAVELENGTH, eps_background=1.0)
    glass = ChannelBasis(56, DL, WAVELENGTH, eps_background=2.25)

    assert glass.n_channels > air.n_channels


def test_profiles_are_orthonormal():
    basis = ChannelBasis(56, DL, WAVELENGTH)
    gram = basis.profiles.conj().T @ basis.profiles

    np.testing.assert_allclose(gram, np.eye(basis.n_channels), atol=1e-12)


def test_project_inverts_synthesize():
    basis = ChannelBasis(56, DL, WAVELENGTH)
    rng = np.random.default_rng(1)
    coefficients = rng.normal(size=basis.n_channels) + 1j * rng.normal(size=basis.n_channels)

    np.testing.assert_allclose(basis.project(basis.synthesize(coefficients)), coefficients,
                               atol=1e-12)


def test_propagate_is_pure_phase():
    basis = ChannelBasis(56, DL, WAVELENGTH)
    coefficients = np.ones(basis.n_channels, dtype=complex)

    forward = basis.propagate(coefficients, 10)
    np.testing.assert_allclose(np.abs(forward), 1.0)
    np.testing.assert_allclose(forward, np.exp(PROPAGATION_SIGN * 1j * basis.kxdl * 10))
    np.testing.assert_allclose(basis.propagate(forward, -10), coefficients, atol=1e-12)


def test_propagate_matrix_columns():
    basis = ChannelBasis(28, DL, WAVELENGTH)
    identity = np.eye(basis.n_channels, dtype=complex)

    propagated = basis.propagate(identity, 5)
    np.testing.assert_allclose(np.diag(propagated), basis.propagate(np.ones(basis.n_channels), 5))


def test_flux_normalization():
    basis = ChannelBasis(28, DL, WAVELENGTH)
    amplitudes = np.arange(1, basis.n_channels + 1, dtype=complex)

    wavefront = basis.to_flux_normalized(amplitudes)
    np.testing.assert_allclose(wavefront, amplitudes * np.sqrt(basis.nu))
    np.testing.assert_allclose(basis.from_flux_normalized(wavefront), amplitudes)


def test_line_source_of_normal_channel_is_uniform():
    basis = ChannelBasis(28, DL, WAVELENGTH)
    coefficients = np.zeros(basis.n_channels, dtype=complex)
    coefficients[basis.normal_index] = 1.0

    current = basis.line_source(coefficients)
    expected = 2 * basis.nu[basis.normal_index] / (basis.omega * MU_0 * DL ** 2) / np.sqrt(28)
    np.testing.assert_allclose(current, expected)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        ChannelBasis(1, DL, WAVELENGTH)
    with pytest.raises(ValueError):
        ChannelBasis(28, DL, WAVELENGTH, eps_background=2.0 + 0.1j)
    with pytest.raises(ValueError):
        ChannelBasis(28, DL, -WAVELENGTH)

    basis = ChannelBasis(28, DL, WAVELENGTH)
    with pytest.raises(ValueError):
        basis.synthesize(np.ones(basis.n_channels + 1))
    with pytest.raises(ValueError):
        basis.project(np.ones(27))


def test_no_propagating_channel():
    """A grid spacing of one wavelength cannot carry any wave."""
    with pytest.raises(ValueError):
        ChannelBasis(28, WAVELENGTH, WAVELENGTH)
