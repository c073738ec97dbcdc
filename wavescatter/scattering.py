# =============================================================================
# SCATTERING: Transmission and Reflection Matrices of a Slab
# =============================================================================
"""
Channel-resolved response of a y-periodic slab, one FDFD solve per input.

Reference planes (see SlabLayout):
    - inputs are launched from the source plane ``x_source``
    - t is read on the transmission probe ``x_transmission``
    - r is read on the reflection probe ``x_reflection``, after removing the
      wave the source line emits directly toward -x

Both matrices are flux-normalized, so for a lossless slab the columns of
[r; t] have unit norm (up to PML and discretization error).
"""

from dataclasses import dataclass

import numpy as np
from joblib import Parallel, delayed

from .simulation import create_line_source, run_simulation


@dataclass
class ScatteringResult:
    """Flux-normalized transmission and reflection matrices (M × M)."""
    t: np.ndarray
    r: np.ndarray

    @property
    def n_channels(self) -> int:
        return self.t.shape[1]

    def total_transmission(self):
        """Transmitted flux for each unit-flux input channel."""
        return np.sum(np.abs(self.t) ** 2, axis=0)

    def total_reflection(self):
        """Reflected flux for each unit-flux input channel."""
        return np.sum(np.abs(self.r) ** 2, axis=0)

    def flux_balance(self):
        """T + R per input channel (1 for a lossless slab)."""
        return self.total_transmission() + self.total_reflection()


# =============================================================================
# Sources and Projections
# =============================================================================

def channel_input_source(layout, basis, coefficients):
    """
    Source array launching +x-going channel amplitudes from the source plane.

    Args:
        layout: SlabLayout
        basis: ChannelBasis of the background medium
        coefficients: Field amplitudes at the source plane

    Returns:
        source: nx × ny complex array
    """
    return create_line_source(layout.domain, layout.x_source, basis.line_source(coefficients))


def transmitted_wavefront(Ez, layout, basis):
    """Flux-normalized outgoing amplitudes on the transmission probe."""
    return basis.to_flux_normalized(basis.project(Ez[layout.x_transmission, :]))


def reflected_wavefront(Ez, layout, basis, coefficients):
    """
    Flux-normalized reflected amplitudes on the reflection probe.

    Args:
        Ez: Field of a solve launched with ``coefficients``
        layout: SlabLayout
        basis: ChannelBasis
        coefficients: Field amplitudes that were launched at the source plane
    """
    measured = basis.project(Ez[layout.x_reflection, :])
    direct = basis.propagate(coefficients, layout.x_source - layout.x_reflection)
    return basis.to_flux_normalized(measured - direct)


def transmitted_flux(Ez, layout, basis):
    """Total flux crossing the transmission probe."""
    return float(np.sum(np.abs(transmitted_wavefront(Ez, layout, basis)) ** 2))


def reflected_flux(Ez, layout, basis, coefficients):
    """Total reflected flux crossing the reflection probe."""
    return float(np.sum(np.abs(reflected_wavefront(Ez, layout, basis, coefficients)) ** 2))


# =============================================================================
# Solves
# =============================================================================

def solve_wavefront(eps_r, layout, basis, wavefront, verbose=False):
    """
    Full field for an incident wavefront.

    Args:
        eps_r: nx × ny permittivity array
        layout: SlabLayout
        basis: ChannelBasis of the background medium
        wavefront: Flux-normalized input amplitudes (length M)
        verbose: Print solver parameters

    Returns:
        Ez: Complex field over the domain
    """
    coefficients = basis.from_flux_normalized(wavefront)
    source = channel_input_source(layout, basis, coefficients)
    return run_simulation(eps_r, source, layout.domain, verbose=verbose)


def compute_scattering_matrices(eps_r, layout, basis, n_jobs=1, verbose=True):
    """
    Transmission and reflection matrices by launching each channel in turn.

    Args:
        eps_r: nx × ny permittivity array
        layout: SlabLayout
        basis: ChannelBasis of the background medium on both sides
        n_jobs: Number of parallel solves (1=serial, -1=all cores)
        verbose: Print progress

    Returns:
        ScatteringResult with t and r
    """
    if basis.ny != layout.domain.ny:
        raise ValueError(f"Basis has ny={basis.ny}, layout has ny={layout.domain.ny}")

    M = basis.n_channels
    inputs = np.eye(M, dtype=complex) / np.sqrt(basis.nu)[np.newaxis, :]

    if verbose:
        print(f"Computing scattering matrices: {M} input channels, n_jobs={n_jobs}")

    fields = Parallel(n_jobs=n_jobs, verbose=0)(
        delayed(run_simulation)(
            eps_r,
            channel_input_source(layout, basis, inputs[:, b]),
            layout.domain,
            verbose=False,
        )
        for b in range(M)
    )

    t = np.empty((M, M), dtype=complex)
    r = np.empty((M, M), dtype=complex)
    for b, Ez in enumerate(fields):
        t[:, b] = transmitted_wavefront(Ez, layout, basis)
        r[:, b] = reflected_wavefront(Ez, layout, basis, inputs[:, b])

    result = ScatteringResult(t=t, r=r)

    if verbose:
        T = result.total_transmission()
        print(f"  Done. Mean transmission = {T.mean():.4f}, "
              f"flux balance in [{result.flux_balance().min():.4f}, {result.flux_balance().max():.4f}]")

    return result


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'ScatteringResult',
    'channel_input_source',
    'transmitted_wavefront',
    'reflected_wavefront',
    'transmitted_flux',
    'reflected_flux',
    'solve_wavefront',
    'compute_scattering_matrices',
]
