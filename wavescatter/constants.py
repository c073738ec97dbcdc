# =============================================================================
# CONSTANTS: Simulation Parameters for the Scattering Workflows
# =============================================================================
"""
Physical and grid parameters shared by the scattering workflows.

Constants are organized into:
    - Physical constants (re-exported from ceviche so units always agree)
    - Operating wavelength and grid resolution
    - Material parameters (background, disorder, single cylinder)
    - Time convention of the solver
    - Experiment configurations (copied and overridden by the scripts)

Units are SI (meters). Geometry helpers work in grid coordinates, i.e.
positions measured in pixels of size DL.
"""

import numpy as np

from ceviche.constants import C_0, EPSILON_0, MU_0

# =============================================================================
# Physical Constants
# =============================================================================
SPEED_OF_LIGHT = C_0        # m/s

# =============================================================================
# Operating Wavelength
# =============================================================================
WAVELENGTH = 1.0e-6                        # Free-space wavelength: 1 µm
OMEGA = 2 * np.pi * SPEED_OF_LIGHT / WAVELENGTH

# =============================================================================
# Grid Resolution
# =============================================================================
RESOLUTION = 15                    # Grid points per free-space wavelength
DL = WAVELENGTH / RESOLUTION       # Grid spacing in meters
NPML = 20                          # PML thickness in grid points (x only for slabs)

# =============================================================================
# Materials
# =============================================================================
N_BACKGROUND = 1.0          # Free space around and between scatterers
N_SCATTERER = 1.5           # Cylinders of the disordered slab
N_CYLINDER = 2.0            # Single dielectric cylinder example

# =============================================================================
# Time Convention
# =============================================================================
# ceviche solves with exp(+iωt) time dependence, so a wave travelling toward
# +x varies as exp(-i kx x). Propagation, phase conjugation and animation
# all read the sign from here.
TIME_SIGN = +1
PROPAGATION_SIGN = -TIME_SIGN


# =============================================================================
# Experiment Configurations
# =============================================================================

# Plane wave on a single dielectric cylinder (PML on all four sides)
CYLINDER_CONFIG = {
    'nx': 150,                         # Grid points along x
    'ny': 150,                         # Grid points along y
    'radius': 0.75 * RESOLUTION,       # Cylinder radius (grid points)
    'n_cylinder': N_CYLINDER,
    'n_background': N_BACKGROUND,
    'angle_deg': 0.0,                  # Incidence angle from +x
    'supersample': 8,                  # Sub-samples per pixel edge for rasterizing
    'n_frames': 24,                    # Animation frames per optical period
}

# Gaussian beam focused in free space (periodic in y)
FOCUS_CONFIG = {
    'ny': 84,                          # Outermost channel stays well away from grazing
    'length': 8 * RESOLUTION,          # Source-to-probe free-space length
    'waist': 1.0 * RESOLUTION,         # Waist radius at the focus (grid points)
    'focal_distance': 5 * RESOLUTION,  # Source plane to focal plane (grid points)
    'n_background': N_BACKGROUND,
    'n_frames': 24,
}

# Phase conjugation through a disordered slab
PHASE_CONJUGATION_CONFIG = {
    'ny': 104,                         # Outermost channel stays well away from grazing
    'slab_thickness': 4 * RESOLUTION,
    'gap': RESOLUTION,                 # Free space between planes and slab
    'radius': 0.15 * RESOLUTION,
    'n_cylinders': 60,
    'min_gap': 1.0,                    # Minimum wall-to-wall spacing (grid points)
    'n_scatterer': N_SCATTERER,
    'n_background': N_BACKGROUND,
    'target_depth': 0.75,              # Target position as a fraction of the slab thickness
    'seed': 0,
}

# Open channel of a disordered slab
OPEN_CHANNEL_CONFIG = {
    'ny': 104,
    'slab_thickness': 6 * RESOLUTION,
    'gap': RESOLUTION,
    'radius': 0.15 * RESOLUTION,
    'n_cylinders': 120,
    'min_gap': 1.0,
    'n_scatterer': N_SCATTERER,
    'n_background': N_BACKGROUND,
    'seed': 0,
    'n_jobs': 1,                       # Parallel solves (1=serial, -1=all cores)
}


# =============================================================================
# Helper Functions
# =============================================================================

def wavelength_to_omega(wavelength):
    """
    Angular frequency for a free-space wavelength.

    Args:
        wavelength: Free-space wavelength in meters

    Returns:
        omega: Angular frequency in rad/s
    """
    if wavelength <= 0:
        raise ValueError(f"Wavelength must be positive, got {wavelength}")
    return 2 * np.pi * SPEED_OF_LIGHT / wavelength


def index_to_permittivity(n):
    """Relative permittivity of a non-magnetic material with refractive index n."""
    return n ** 2


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    # Physical constants
    'SPEED_OF_LIGHT', 'EPSILON_0', 'MU_0',
    # Wavelength
    'WAVELENGTH', 'OMEGA',
    # Grid
    'RESOLUTION', 'DL', 'NPML',
    # Materials
    'N_BACKGROUND', 'N_SCATTERER', 'N_CYLINDER',
    # Time convention
    'TIME_SIGN', 'PROPAGATION_SIGN',
    # Experiments
    'CYLINDER_CONFIG', 'FOCUS_CONFIG', 'PHASE_CONJUGATION_CONFIG',
    'OPEN_CHANNEL_CONFIG',
    # Functions
    'wavelength_to_omega', 'index_to_permittivity',
]
