# =============================================================================
# VISUALIZATION: Plotting and Animation
# =============================================================================
"""
Visualization functions for the scattering workflows.

Main functions:
    visualize_simulation: 3-panel display (permittivity, intensity, output profile)
    plot_permittivity: Plot just the permittivity map
    plot_field: Plot one component of the field (real part, |E| or |E|²)
    plot_comparison: Side-by-side intensity maps on a common color scale
    plot_transmission_eigenvalues: Histogram of τ with the bimodal reference
    plot_channel_coefficients: Flux per channel of an input wavefront
    plot_beam_width: Beam radius along x against the paraxial prediction
    field_frames: Real-field snapshots over one optical period
    animate_field: Time-harmonic animation Re[E exp(iωt)] over one period

Every function takes ``save_path``: the figure is written there and closed,
otherwise it is shown.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, PillowWriter
from matplotlib.colors import LinearSegmentedColormap

from .analysis import bimodal_density
from .constants import TIME_SIGN


# =============================================================================
# Color Schemes
# =============================================================================

# Permittivity colormap: white for free space, darker blue for denser dielectric
COLORS_EPS = ['white', 'lightsteelblue', 'steelblue', 'midnightblue']
EPS_CMAP = LinearSegmentedColormap.from_list('dielectric_eps', COLORS_EPS)

FIELD_CMAP = 'RdBu_r'       # Signed fields (real part)
INTENSITY_CMAP = 'inferno'  # |E| and |E|²

# Marker colors for the planes of a slab layout
PLANE_COLORS = {
    'x_reflection': '#2a9d8f',
    'x_source': '#e9c46a',
    'x_transmission': '#e76f51',
}


def _finish(fig, save_path, tight=True):
    """Save and close the figure, or show it."""
    if tight:
        plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
    else:
        plt.show()
    return fig


def _field_component(Ez, component):
    if component == 'real':
        return np.real(Ez)
    if component == 'abs':
        return np.abs(Ez)
    if component == 'intensity':
        return np.abs(Ez) ** 2
    raise ValueError(f"Unknown component '{component}'. Use 'real', 'abs' or 'intensity'")


def _draw_outline(ax, eps_r):
    """Contour of the scatterers on top of a field map."""
    eps_real = np.real(eps_r)
    if np.ptp(eps_real) > 0:
        level = 0.5 * (eps_real.min() + eps_real.max())
        ax.contour(eps_real.T, levels=[level], colors='white', linewidths=0.5, origin='lower')


def _draw_planes(ax, layout):
    for name, color in PLANE_COLORS.items():
        ax.axvline(getattr(layout, name), color=color, linestyle='--', alpha=0.8,
                   label=name.replace('x_', ''))


def plot_permittivity(eps_r, title="Permittivity Map", save_path=None):
    """
    Plot just the permittivity map.

    Args:
        eps_r: Permittivity map (nx × ny)
        title: Plot title
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=(8, 6))

    im = ax.imshow(np.real(eps_r).T, origin='lower', cmap=EPS_CMAP)
    ax.set_title(title)
    ax.set_xlabel('x (grid points)')
    ax.set_ylabel('y (grid points)')
    plt.colorbar(im, ax=ax, label='ε')

    return _finish(fig, save_path)


def plot_field(Ez, title=None, component='real', eps_r=None, save_path=None):
    """
    Plot one component of the electric field.

    Args:
        Ez: Complex electric field (nx × ny)
        title: Plot title (default: derived from the component)
        component: 'real', 'abs' or 'intensity'
        eps_r: Optional permittivity map drawn as an outline
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    data = _field_component(Ez, component)
    fig, ax = plt.subplots(figsize=(8, 6))

    if component == 'real':
        vmax = np.max(np.abs(data)) or 1.0
        im = ax.imshow(data.T, origin='lower', cmap=FIELD_CMAP, vmin=-vmax, vmax=vmax)
    else:
        im = ax.imshow(data.T, origin='lower', cmap=INTENSITY_CMAP)
    if eps_r is not None:
        _draw_outline(ax, eps_r)

    labels = {'real': 'Re(Ez)', 'abs': '|Ez|', 'intensity': '|Ez|²'}
    ax.set_title(title or labels[component])
    ax.set_xlabel('x (grid points)')
    ax.set_ylabel('y (grid points)')
    plt.colorbar(im, ax=ax, label=labels[component])

    return _finish(fig, save_path)


def visualize_simulation(eps_r, Ez, layout=None, title=None, save_path=None):
    """
    Overview of one solve.

    Shows three panels:
    1. Permittivity map
    2. Intensity |Ez|² with the reflection/source/transmission planes
    3. Intensity profile along y on the transmission plane (or last column)

    Args:
        eps_r: Permittivity map (nx × ny)
        Ez: Electric field (nx × ny)
        layout: Optional SlabLayout whose planes are marked
        title: Optional title for the figure
        save_path: If provided, save figure to this path instead of displaying

    Returns:
        fig: The matplotlib figure object
    """
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))

    if title:
        fig.suptitle(title, fontsize=14, fontweight='bold')

    # -------------------------------------------------------------------------
    # Panel 1: Permittivity Map
    # -------------------------------------------------------------------------
    im0 = axes[0].imshow(np.real(eps_r).T, origin='lower', cmap=EPS_CMAP)
    axes[0].set_title('Permittivity εr')
    plt.colorbar(im0, ax=axes[0], label='ε')

    # -------------------------------------------------------------------------
    # Panel 2: Intensity with Planes
    # -------------------------------------------------------------------------
    intensity = np.abs(Ez) ** 2
    im1 = axes[1].imshow(intensity.T, origin='lower', cmap=INTENSITY_CMAP)
    axes[1].set_title('|Ez|² Intensity')
    plt.colorbar(im1, ax=axes[1], label='|Ez|²')
    _draw_outline(axes[1], eps_r)
    if layout is not None:
        _draw_planes(axes[1], layout)
        axes[1].legend(loc='upper right', fontsize=8)

    # -------------------------------------------------------------------------
    # Panel 3: Output Profile
    # -------------------------------------------------------------------------
    x_out = layout.x_transmission if layout is not None else Ez.shape[0] - 1
    axes[2].plot(np.arange(Ez.shape[1]), intensity[x_out, :], color=PLANE_COLORS['x_transmission'])
    axes[2].set_xlabel('y (grid points)')
    axes[2].set_ylabel('|Ez|²')
    axes[2].set_title(f'Profile at x = {x_out}')
    axes[2].grid(True, alpha=0.3)

    return _finish(fig, save_path)


def plot_comparison(fields, eps_r=None, title="Intensity Comparison", save_path=None):
    """
    Side-by-side intensity maps sharing one color scale.

    Args:
        fields: Dict of {label: Ez} (or list of fields, labelled by index)
        eps_r: Optional permittivity map drawn as an outline
        title: Figure title
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    if isinstance(fields, (list, tuple)):
        fields = {f"Field {i+1}": Ez for i, Ez in enumerate(fields)}
    if not fields:
        raise ValueError("Nothing to compare")

    intensities = {label: np.abs(Ez) ** 2 for label, Ez in fields.items()}
    vmax = max(I.max() for I in intensities.values())

    fig, axes = plt.subplots(1, len(intensities), figsize=(6 * len(intensities), 5), squeeze=False)
    fig.suptitle(title, fontsize=14, fontweight='bold')

    for ax, (label, I) in zip(axes[0], intensities.items()):
        im = ax.imshow(I.T, origin='lower', cmap=INTENSITY_CMAP, vmin=0, vmax=vmax)
        if eps_r is not None:
            _draw_outline(ax, eps_r)
        ax.set_title(label)
        ax.set_xlabel('x (grid points)')
    axes[0, 0].set_ylabel('y (grid points)')
    plt.colorbar(im, ax=axes[0].tolist(), label='|Ez|²')

    # Colorbar spans several axes, which tight_layout cannot arrange
    return _finish(fig, save_path, tight=False)


def plot_transmission_eigenvalues(tau, bins=20, show_bimodal=True,
                                  title="Transmission Eigenvalues", save_path=None):
    """
    Histogram of transmission eigenvalues.

    Args:
        tau: Transmission eigenvalues (0 ≤ τ ≤ 1)
        bins: Histogram bins over [0, 1]
        show_bimodal: Overlay the diffusive-regime bimodal density
        title: Plot title
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    tau = np.asarray(tau)
    fig, ax = plt.subplots(figsize=(8, 5))

    ax.hist(tau, bins=np.linspace(0, 1, bins + 1), density=True,
            color='steelblue', alpha=0.7, edgecolor='white', label='FDFD')

    if show_bimodal and len(tau) > 0:
        grid = np.linspace(0.01, 0.995, 400)
        ax.plot(grid, bimodal_density(grid, tau.mean()), color='#e76f51', linewidth=2,
                label=f'Bimodal (⟨τ⟩ = {tau.mean():.3f})')

    ax.set_xlabel('τ')
    ax.set_ylabel('Density')
    ax.set_title(title)
    ax.set_xlim(0, 1)
    ax.set_yscale('log')
    ax.legend()

    return _finish(fig, save_path)


def plot_channel_coefficients(basis, wavefront, title="Input Wavefront", save_path=None):
    """
    Flux carried by each channel of a flux-normalized wavefront.

    Args:
        basis: ChannelBasis the wavefront is expressed in
        wavefront: Flux-normalized amplitudes (length M)
        title: Plot title
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    wavefront = np.asarray(wavefront)
    fig, axes = plt.subplots(1, 2, figsize=(12, 4))

    angles = basis.angles_deg
    bar_width = 0.8 * np.min(np.diff(angles)) if len(angles) > 1 else 1.0
    axes[0].bar(angles, np.abs(wavefront) ** 2, width=bar_width, color='steelblue')
    axes[0].set_xlabel('Channel angle (°)')
    axes[0].set_ylabel('Flux fraction')
    axes[0].set_title(title)

    axes[1].plot(angles, np.unwrap(np.angle(wavefront)), 'o-', color='#e76f51', markersize=3)
    axes[1].set_xlabel('Channel angle (°)')
    axes[1].set_ylabel('Phase (rad)')
    axes[1].set_title('Phase')
    axes[1].grid(True, alpha=0.3)

    return _finish(fig, save_path)


def plot_beam_width(x, measured, expected=None, x_focus=None, title="Beam Width", save_path=None):
    """
    Beam radius along the propagation direction.

    Args:
        x: Column indices
        measured: Measured 1/e² radius at each column (grid points)
        expected: Optional paraxial prediction at the same columns
        x_focus: Optional focal plane to mark
        title: Plot title
        save_path: Optional path to save the figure

    Returns:
        fig: matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=(8, 5))

    ax.plot(x, measured, linewidth=2, color='steelblue', label='FDFD')
    if expected is not None:
        ax.plot(x, expected, linestyle='--', color='#e76f51', label='Paraxial')
    if x_focus is not None:
        ax.axvline(x_focus, color='gray', linestyle=':', label='Focal plane')

    ax.set_xlabel('x (grid points)')
    ax.set_ylabel('Radius (grid points)')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend()

    return _finish(fig, save_path)


def field_frames(Ez, n_frames=24):
    """
    Snapshots Re[Ez exp(iωt)] at n_frames equally spaced times over one period.

    Returns:
        frames: n_frames × nx × ny real array
    """
    if n_frames < 1:
        raise ValueError(f"n_frames must be >= 1, got {n_frames}")
    Ez = np.asarray(Ez)
    phases = np.exp(TIME_SIGN * 2j * np.pi * np.arange(n_frames) / n_frames)
    return np.real(Ez[np.newaxis] * phases.reshape((-1,) + (1,) * Ez.ndim))


def animate_field(Ez, save_path=None, n_frames=24, fps=12, eps_r=None, title="Re[Ez(t)]"):
    """
    Animate the time-harmonic field Re[Ez exp(iωt)] over one optical period.

    Args:
        Ez: Complex electric field (nx × ny)
        save_path: GIF path; if None the FuncAnimation is returned unsaved
        n_frames: Frames per period
        fps: Frames per second of the GIF
        eps_r: Optional permittivity map drawn as an outline
        title: Plot title

    Returns:
        The FuncAnimation (or the saved path when ``save_path`` is given)
    """
    frames = field_frames(Ez, n_frames)
    vmax = np.max(np.abs(Ez)) or 1.0

    fig, ax = plt.subplots(figsize=(8, 6))
    im = ax.imshow(frames[0].T, origin='lower', cmap=FIELD_CMAP, vmin=-vmax, vmax=vmax,
                   animated=True)
    if eps_r is not None:
        _draw_outline(ax, eps_r)
    ax.set_title(title)
    ax.set_xlabel('x (grid points)')
    ax.set_ylabel('y (grid points)')
    plt.colorbar(im, ax=ax, label='Re(Ez)')

    def update(frame):
        im.set_data(frames[frame].T)
        return [im]

    animation = FuncAnimation(fig, update, frames=n_frames, interval=1000 / fps, blit=True)

    if save_path is None:
        return animation

    animation.save(save_path, writer=PillowWriter(fps=fps))
    plt.close(fig)
    print(f"Animation saved as {save_path}")
    return save_path


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'visualize_simulation',
    'plot_permittivity',
    'plot_field',
    'plot_comparison',
    'plot_transmission_eigenvalues',
    'plot_channel_coefficients',
    'plot_beam_width',
    'field_frames',
    'animate_field',
    'EPS_CMAP',
    'FIELD_CMAP',
    'INTENSITY_CMAP',
    'PLANE_COLORS',
]
