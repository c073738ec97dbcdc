# =============================================================================
# wavescatter - Wave Scattering Workflows on an FDFD Solver
# =============================================================================
"""
This package provides the glue around the ceviche FDFD solver for
scattering studies of dielectric cylinders and disordered slabs.

Modules:
    constants: Physical parameters, grid setup, experiment configurations
    channels: Propagating channels and mesh-to-channel reduction
    geometry: Permittivity maps (cylinders, slabs, random disorder)
    simulation: Domains, sources and FDFD solves
    beams: Gaussian beam synthesis and back-propagation
    scattering: Transmission and reflection matrices
    analysis: Phase conjugation and open-channel analysis
    visualization: Plotting and animation
    results: Saving and loading workflow outputs

Quick Start:
    from wavescatter import (
        make_slab_layout, ChannelBasis, random_cylinders,
        cylinders_to_permittivity, compute_scattering_matrices, open_channel,
        solve_wavefront, RESOLUTION,
    )

    # Disordered slab between two free-space regions
    layout = make_slab_layout(ny=120, slab_thickness=90, gap=15)
    centers = random_cylinders(layout.slab_region, radius=2.25, n_cylinders=120,
                               min_gap=1.0, rng=0)
    eps_r = cylinders_to_permittivity(layout.domain.shape, centers, 2.25, 1.5**2)

    # Transmission matrix and its open channel
    basis = ChannelBasis(layout.domain.ny, layout.domain.dl, layout.domain.wavelength)
    result = compute_scattering_matrices(eps_r, layout, basis)
    wavefront, tau_max = open_channel(result.t)
    Ez = solve_wavefront(eps_r, layout, basis, wavefront)
"""

# Re-export everything from submodules for convenience
from .constants import *
from .channels import *
from .geometry import *
from .simulation import *
from .beams import *
from .scattering import *
from .analysis import *
from .results import *
from .visualization import *

__version__ = "0.1.0"
