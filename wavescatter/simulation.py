# =============================================================================
# SIMULATION: FDFD Solver Glue
# =============================================================================
"""
Functions for running ceviche FDFD simulations of the scattering systems.

Each function does ONE thing:
        SimulationDomain: Grid size, spacing, wavelength and boundaries
        make_slab_layout: Place the probe, source and slab planes along x
        make_disordered_slab: Random cylinder slab with its layout and eps_r
        disordered_slab_from_config: Same, from an experiment config dict
        run_simulation: Solve Maxwell's equations, return the Ez field
        create_point_source: Point current at one grid cell
        create_line_source: Current profile along one column x = const
        plane_wave: Discrete plane wave that satisfies the grid dispersion
        scattered_field: Plane wave on scatterers via the scattered-field formulation

Notes about boundaries:
        - x is always terminated by ceviche's PML (``npml`` cells per side).
        - y is periodic when ``periodic_y`` is True (slab/channel workflows);
          otherwise y also gets PML (single scatterer in open space).
        - Fields are indexed ``Ez[x, y]``, matching ceviche.
"""

from dataclasses import dataclass

import numpy as np

from ceviche import fdfd_ez

from .constants import (
    DL, WAVELENGTH, NPML, EPSILON_0, PROPAGATION_SIGN,
    index_to_permittivity, wavelength_to_omega,
)
from .geometry import cylinders_to_permittivity, random_cylinders


# =============================================================================
# Domain Description
# =============================================================================

@dataclass
class SimulationDomain:
    """Grid and boundary description of one FDFD problem."""
    nx: int
    ny: int
    dl: float = DL
    wavelength: float = WAVELENGTH
    npml: int = NPML
    periodic_y: bool = True

    def __post_init__(self):
        if self.nx <= 2 * self.npml or self.ny < 2:
            raise ValueError(
                f"Grid {self.nx}×{self.ny} is too small for npml={self.npml}"
            )
        if not self.periodic_y and self.ny <= 2 * self.npml:
            raise ValueError(f"ny={self.ny} leaves no interior inside the y PML")

    @property
    def omega(self) -> float:
        return wavelength_to_omega(self.wavelength)

    @property
    def k0(self) -> float:
        return 2 * np.pi / self.wavelength

    @property
    def shape(self):
        return (self.nx, self.ny)

    def pml_widths(self):
        """PML cells per axis in the form ceviche expects."""
        return [self.npml, 0 if self.periodic_y else self.npml]


@dataclass
class SlabLayout:
    """
    Positions along x of a slab experiment (all in grid points).

        PML | x_reflection | x_source | gap | slab | gap | x_transmission | PML
    """
    domain: SimulationDomain
    x_reflection: int
    x_source: int
    x_slab_start: int
    x_slab_end: int
    x_transmission: int

    @property
    def slab_thickness(self) -> int:
        return self.x_slab_end - self.x_slab_start

    @property
    def slab_region(self):
        """(x_min, x_max, y_min, y_max) of the slab in grid coordinates."""
        return (self.x_slab_start, self.x_slab_end, 0, self.domain.ny)


def make_slab_layout(ny, slab_thickness, gap, dl=DL, wavelength=WAVELENGTH, npml=NPML,
                     probe_spacing=2):
    """
    Lay out a y-periodic slab experiment along x.

    Args:
        ny: Transverse grid points (one period)
        slab_thickness: Slab thickness in grid points (0 = free space only)
        gap: Free space between the source/probe planes and the slab
        dl: Grid spacing in meters
        wavelength: Free-space wavelength in meters
        npml: PML thickness in grid points
        probe_spacing: Cells between the PML, the reflection probe and the source

    Returns:
        layout: SlabLayout with its SimulationDomain
    """
    if slab_thickness < 0 or gap < 1:
        raise ValueError(f"Need slab_thickness >= 0 and gap >= 1, got {slab_thickness}, {gap}")

    x_reflection = npml + probe_spacing
    x_source = x_reflection + probe_spacing
    x_slab_start = x_source + gap
    x_slab_end = x_slab_start + slab_thickness
    x_transmission = x_slab_end + gap
    nx = x_transmission + probe_spacing + 1 + npml

    domain = SimulationDomain(nx=nx, ny=ny, dl=dl, wavelength=wavelength,
                              npml=npml, periodic_y=True)
    return SlabLayout(domain, x_reflection, x_source, x_slab_start, x_slab_end, x_transmission)


def make_disordered_slab(ny, slab_thickness, gap, radius, n_cylinders, eps_scatterer,
                         eps_background=1.0, min_gap=0.0, rng=None, dl=DL,
                         wavelength=WAVELENGTH, npml=NPML, supersample=4):
    """
    Slab of randomly placed, non-overlapping cylinders in free space.

    Args:
        ny: Transverse grid points (one period)
        slab_thickness: Slab thickness in grid points
        gap: Free space between the source/probe planes and the slab
        radius: Cylinder radius in grid points
        n_cylinders: Number of cylinders
        eps_scatterer: Cylinder permittivity
        eps_background: Permittivity between the cylinders and outside the slab
        min_gap: Minimum wall-to-wall spacing in grid points
        rng: numpy Generator or seed
        dl, wavelength, npml: Grid parameters
        supersample: Sub-samples per pixel edge when rasterizing

    Returns:
        (layout, eps_r, centers)
    """
    layout = make_slab_layout(ny, slab_thickness, gap, dl=dl, wavelength=wavelength, npml=npml)
    centers = random_cylinders(layout.slab_region, radius, n_cylinders, min_gap=min_gap, rng=rng)
    eps_r = cylinders_to_permittivity(layout.domain.shape, centers, radius, eps_scatterer,
                                      eps_background, supersample=supersample)
    return layout, eps_r, centers


def disordered_slab_from_config(config, rng=None):
    """Disordered slab described by an experiment config (indices, not permittivities)."""
    return make_disordered_slab(
        ny=config['ny'],
        slab_thickness=config['slab_thickness'],
        gap=config['gap'],
        radius=config['radius'],
        n_cylinders=config['n_cylinders'],
        eps_scatterer=index_to_permittivity(config['n_scatterer']),
        eps_background=index_to_permittivity(config['n_background']),
        min_gap=config['min_gap'],
        rng=rng,
    )


# =============================================================================
# Source Creation
# =============================================================================

def create_point_source(domain, position, amplitude=1.0):
    """
    Point current at a single grid cell.

    Args:
        domain: SimulationDomain
        position: (x, y) integer grid indices
        amplitude: Complex current amplitude

    Returns:
        source: nx × ny complex array
    """
    x, y = position
    if not (0 <= x < domain.nx and 0 <= y < domain.ny):
        raise ValueError(f"Point source {position} lies outside the {domain.nx}×{domain.ny} grid")
    source = np.zeros(domain.shape, dtype=complex)
    source[x, y] = amplitude
    return source


def create_line_source(domain, x, profile):
    """
    Current along the column x = const.

    Args:
        domain: SimulationDomain
        x: Column index of the source line
        profile: Length-ny complex current profile

    Returns:
        source: nx × ny complex array
    """
    profile = np.asarray(profile)
    if profile.shape != (domain.ny,):
        raise ValueError(f"Line profile must have shape ({domain.ny},), got {profile.shape}")
    if not domain.npml <= x < domain.nx - domain.npml:
        raise ValueError(f"Source line x={x} must lie outside the PML")
    source = np.zeros(domain.shape, dtype=complex)
    source[x, :] = profile
    return source


def plane_wave(domain, angle_deg=0.0, eps_background=1.0):
    """
    Plane wave travelling at ``angle_deg`` from +x on the discrete grid.

    The x wavenumber is chosen from the finite-difference dispersion so the
    wave is an exact solution of the discretized background problem.

    Args:
        domain: SimulationDomain
        angle_deg: Propagation angle measured from +x (|angle| < 90)
        eps_background: Permittivity of the background medium

    Returns:
        E_inc: nx × ny complex field with unit amplitude
    """
    if not -90 < angle_deg < 90:
        raise ValueError(f"Plane wave must travel toward +x, got angle {angle_deg}°")

    dl = domain.dl
    k = domain.k0 * np.sqrt(eps_background)
    ky = k * np.sin(np.radians(angle_deg))
    sin_sq = (dl / 2) ** 2 * (k ** 2 - (2 / dl * np.sin(ky * dl / 2)) ** 2)
    if not 0 < sin_sq < 1:
        raise ValueError(
            f"No propagating plane wave for eps_background={eps_background} at dl={dl}"
        )
    kx = 2 / dl * np.arcsin(np.sqrt(sin_sq))

    x = np.arange(domain.nx) * dl
    y = np.arange(domain.ny) * dl
    return np.exp(PROPAGATION_SIGN * 1j * (kx * x[:, np.newaxis] + ky * y[np.newaxis, :]))


# =============================================================================
# FDFD Simulation
# =============================================================================

def run_simulation(eps_r, source, domain, verbose=True):
    """
    Run a ceviche FDFD simulation with the given permittivity map and source.

    Args:
        eps_r: nx × ny permittivity array (fully constructed)
        source: nx × ny complex current distribution
        domain: SimulationDomain with the grid and boundaries
        verbose: If True, print simulation parameters

    Returns:
        Ez: Complex electric field Ez(x, y) across the domain
    """
    if np.shape(eps_r) != domain.shape or np.shape(source) != domain.shape:
        raise ValueError(
            f"eps_r {np.shape(eps_r)} and source {np.shape(source)} must both match "
            f"the domain shape {domain.shape}"
        )

    if verbose:
        print(f"--- Simulation ---")
        print(f"  λ = {domain.wavelength*1e6:.3f} µm, dl = {domain.dl*1e9:.1f} nm")
        print(f"  Grid: {domain.nx}×{domain.ny}, PML = {domain.pml_widths()}")

    simulation = fdfd_ez(domain.omega, domain.dl, eps_r, domain.pml_widths())
    Hx, Hy, Ez = simulation.solve(source)

    return Ez


def scattered_field(eps_r, domain, angle_deg=0.0, eps_background=1.0, verbose=True):
    """
    Total field of a plane wave incident on the scatterers in ``eps_r``.

    Solves for the scattered field driven by the induced current
    J = -iωε0(ε - ε_bg) E_inc. Scatterers must stay out of the PML.

    Args:
        eps_r: nx × ny permittivity array
        domain: SimulationDomain (normally with PML on all sides)
        angle_deg: Incidence angle from +x
        eps_background: Background permittivity the incident wave lives in
        verbose: If True, print simulation parameters

    Returns:
        (E_total, E_scattered, E_incident)
    """
    E_incident = plane_wave(domain, angle_deg, eps_background)
    contrast = np.asarray(eps_r) - eps_background
    source = -1j * domain.omega * EPSILON_0 * contrast * E_incident
    E_scattered = run_simulation(eps_r, source, domain, verbose=verbose)
    return E_incident + E_scattered, E_scattered, E_incident


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'SimulationDomain',
    'SlabLayout',
    'make_slab_layout',
    'make_disordered_slab',
    'disordered_slab_from_config',
    'create_point_source',
    'create_line_source',
    'plane_wave',
    'run_simulation',
    'scattered_field',
]
