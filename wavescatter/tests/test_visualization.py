# =============================================================================
# Test Visualization: Figures and Animation Files
# =============================================================================
"""
Every plotting function writes its file when given ``save_path``.
Runs on the Agg backend (see conftest.py).
"""

import numpy as np
import matplotlib.pyplot as plt
import pytest
from matplotlib.animation import FuncAnimation

from wavescatter.channels import ChannelBasis
from wavescatter.constants import DL, WAVELENGTH, PROPAGATION_SIGN
from wavescatter.simulation import make_slab_layout
from wavescatter.visualization import (
    plot_permittivity, plot_field, visualize_simulation, plot_comparison,
    plot_transmission_eigenvalues, plot_channel_coefficients, plot_beam_width, field_frames,
    animate_field,
)


@pytest.fixture
def slab_fields():
    layout = make_slab_layout(ny=28, slab_thickness=10, gap=5)
    eps_r = np.ones(layout.domain.shape)
    eps_r[layout.x_slab_start:layout.x_slab_end] = 2.25
    x = np.arange(layout.domain.nx)[:, np.newaxis]
    Ez = np.exp(-1j * 0.4 * x) * np.ones(layout.domain.shape)
    return layout, eps_r, Ez


def test_static_plots(tmp_path, slab_fields):
    layout, eps_r, Ez = slab_fields

    plot_permittivity(eps_r, save_path=tmp_path / 'eps.png')
    plot_field(Ez, component='intensity', eps_r=eps_r, save_path=tmp_path / 'field.png')
    visualize_simulation(eps_r, Ez, layout=layout, save_path=tmp_path / 'sim.png')
    plot_comparison({'a': Ez, 'b': 2 * Ez}, eps_r=eps_r, save_path=tmp_path / 'cmp.png')

    for name in ['eps.png', 'field.png', 'sim.png', 'cmp.png']:
        assert (tmp_path / name).exists()


def test_plot_field_rejects_unknown_component(slab_fields):
    _, _, Ez = slab_fields
    with pytest.raises(ValueError):
        plot_field(Ez, component='phase')


def test_plot_comparison_needs_fields():
    with pytest.raises(ValueError):
        plot_comparison({})


def test_channel_and_eigenvalue_plots(tmp_path):
    basis = ChannelBasis(56, DL, WAVELENGTH)
    wavefront = np.ones(basis.n_channels) / np.sqrt(basis.n_channels)
    tau = np.random.default_rng(0).uniform(0, 1, 50)

    plot_channel_coefficients(basis, wavefront, save_path=tmp_path / 'coefficients.png')
    plot_transmission_eigenvalues(tau, save_path=tmp_path / 'tau.png')
    plot_beam_width(np.arange(10), np.linspace(20, 10, 10), expected=np.linspace(21, 10, 10),
                    x_focus=9, save_path=tmp_path / 'width.png')

    for name in ['coefficients.png', 'tau.png', 'width.png']:
        assert (tmp_path / name).exists()


def test_animate_field(tmp_path, slab_fields):
    _, eps_r, Ez = slab_fields

    path = animate_field(Ez, save_path=tmp_path / 'field.gif', n_frames=4, eps_r=eps_r)
    assert path == tmp_path / 'field.gif'
    assert (tmp_path / 'field.gif').stat().st_size > 0

    assert isinstance(animate_field(Ez, n_frames=2), FuncAnimation)
    with pytest.raises(ValueError):
        animate_field(Ez, n_frames=0)


def test_plot_comparison_saves_and_closes(tmp_path, slab_fields):
    _, eps_r, Ez = slab_fields

    fig = plot_comparison([Ez, 0.5 * Ez], eps_r=eps_r, save_path=tmp_path / 'cmp.png')

    assert (tmp_path / 'cmp.png').exists()
    assert not plt.fignum_exists(fig.number)


def test_field_frames_move_forward_wave_toward_plus_x():
    """A crest of exp(-ikx) advances by 1/8 wavelength per frame of 8."""
    wavelength_px = 40
    x = np.arange(2 * wavelength_px)
    Ez = np.exp(PROPAGATION_SIGN * 2j * np.pi * x / wavelength_px)[:, np.newaxis]

    frames = field_frames(Ez, n_frames=8)

    assert frames.shape == (8, 2 * wavelength_px, 1)
    np.testing.assert_allclose(frames[0], np.real(Ez))
    assert np.argmax(frames[0, :wavelength_px, 0]) == 0
    assert np.argmax(frames[1, :wavelength_px, 0]) == wavelength_px // 8
    with pytest.raises(ValueError):
        field_frames(Ez, n_frames=0)
