# =============================================================================
# ANALYSIS: Phase Conjugation and Open-Channel Analysis
# =============================================================================
"""
Post-processing of solved fields and transmission matrices.

Main functions:
    transmission_eigenchannels: SVD of t into transmission eigenvalues/vectors
    open_channel: Input wavefront with the highest transmission
    plane_wave_transmission: Total transmission of one input channel
    phase_conjugate: Time-reverse a recorded line field into incident amplitudes
    phase_conjugation_wavefront: Point source at a target → focusing wavefront
    focus_enhancement: Intensity at a target relative to its surroundings
    bimodal_density: Diffusive-regime reference distribution of eigenvalues
"""

import numpy as np

from .beams import normalize_flux
from .simulation import create_point_source, run_simulation


# =============================================================================
# Transmission Eigenchannels
# =============================================================================

def transmission_eigenchannels(t):
    """
    Singular-value decomposition t = U diag(σ) Vᴴ.

    Args:
        t: M_out × M_in flux-normalized transmission matrix

    Returns:
        (tau, V, U): transmission eigenvalues σ² in descending order, input
        singular vectors (columns of V) and output singular vectors (columns
        of U)
    """
    t = np.asarray(t)
    if t.ndim != 2:
        raise ValueError(f"Transmission matrix must be 2D, got shape {t.shape}")
    U, sigma, Vh = np.linalg.svd(t)
    return sigma ** 2, Vh.conj().T, U


def open_channel(t):
    """
    Input wavefront of maximal transmission.

    Returns:
        (wavefront, tau_max): unit-norm flux-normalized input vector and its
        transmission eigenvalue
    """
    tau, V, _ = transmission_eigenchannels(t)
    return V[:, 0], tau[0]


def plane_wave_transmission(t, index):
    """Total transmission Σ_a |t_a,index|² of a single input channel."""
    return float(np.sum(np.abs(np.asarray(t)[:, index]) ** 2))


def wavefront_transmission(t, wavefront):
    """Total transmission of an arbitrary unit-flux input wavefront."""
    wavefront = np.asarray(wavefront)
    return float(np.sum(np.abs(np.asarray(t) @ wavefront) ** 2) / np.sum(np.abs(wavefront) ** 2))


def bimodal_density(tau, mean_transmission):
    """
    Diffusive-regime density of transmission eigenvalues,

        ρ(τ) = ⟨τ⟩ / (2 τ sqrt(1 - τ)),

    evaluated inside 0 < τ < 1 (NaN outside).
    """
    tau = np.asarray(tau, dtype=float)
    density = np.full(tau.shape, np.nan)
    inside = (tau > 0) & (tau < 1)
    density[inside] = mean_transmission / (2 * tau[inside] * np.sqrt(1 - tau[inside]))
    return density


# =============================================================================
# Phase Conjugation
# =============================================================================

def phase_conjugate(field_line, basis):
    """
    Time-reverse a field recorded along y.

    A wave travelling toward -x with profile E(y) becomes, after complex
    conjugation, a wave travelling toward +x with profile E*(y).

    Args:
        field_line: Length-ny recorded field
        basis: ChannelBasis of the medium at the recording plane

    Returns:
        coefficients: Field amplitudes of the +x-going conjugate wave
    """
    return basis.project(np.conj(np.asarray(field_line)))


def phase_conjugation_wavefront(eps_r, layout, basis, target, verbose=True):
    """
    Incident wavefront that focuses onto ``target`` by phase conjugation.

    A point source at the target radiates through the medium; its field
    is recorded on the reflection probe, back-propagated to the source
    plane, conjugated and normalized to unit incident flux.

    Args:
        eps_r: nx × ny permittivity array
        layout: SlabLayout
        basis: ChannelBasis of the background medium
        target: (x, y) integer grid indices of the focus
        verbose: Print progress

    Returns:
        wavefront: Flux-normalized input amplitudes (length M)
    """
    if not layout.x_source < target[0] < layout.domain.nx - layout.domain.npml:
        raise ValueError(f"Target {target} must lie between the source plane and the PML")

    if verbose:
        print(f"Phase conjugation: point source at {tuple(target)}")

    source = create_point_source(layout.domain, target)
    Ez = run_simulation(eps_r, source, layout.domain, verbose=verbose)

    # -x-going amplitudes on the probe, carried back to the source plane
    recorded = basis.project(Ez[layout.x_reflection, :])
    at_source = basis.propagate(recorded, layout.x_reflection - layout.x_source)

    coefficients = phase_conjugate(basis.synthesize(at_source), basis)
    coefficients = normalize_flux(basis, coefficients)
    return basis.to_flux_normalized(coefficients)


def focus_enhancement(intensity, target, region=None):
    """
    Intensity at the target divided by the mean intensity of a region.

    Args:
        intensity: nx × ny array of |E|²
        target: (x, y) grid indices
        region: Optional (x_min, x_max, y_min, y_max) slice bounds
                (default: whole array)

    Returns:
        enhancement: Scalar ratio
    """
    intensity = np.asarray(intensity)
    if region is None:
        window = intensity
    else:
        x_min, x_max, y_min, y_max = (int(v) for v in region)
        window = intensity[x_min:x_max, y_min:y_max]
    return float(intensity[tuple(target)] / np.mean(window))


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'transmission_eigenchannels',
    'open_channel',
    'plane_wave_transmission',
    'wavefront_transmission',
    'bimodal_density',
    'phase_conjugate',
    'phase_conjugation_wavefront',
    'focus_enhancement',
]
