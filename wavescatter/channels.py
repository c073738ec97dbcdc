# =============================================================================
# CHANNELS: Mesh-to-Channel Reduction for a Periodic Transverse Boundary
# =============================================================================
"""
Propagating channels of a homogeneous region that is periodic in y.

On the FDFD grid the transverse profiles are discrete Fourier modes,

    u_a(y_n) = exp(i ky_a y_n) / sqrt(ny),    ky_a = 2π a / (ny dl)

and the longitudinal wavenumber follows the finite-difference dispersion

    (2/dl sin(kx dl/2))² = k0² ε_bg - (2/dl sin(ky dl/2))²

Channels with 0 < sin²(kx dl/2) < 1 propagate; the rest are dropped.
The flux carried by a channel of field amplitude A is proportional to
nu |A|² with nu = sin(kx dl), so sqrt(nu) A is the flux-normalized amplitude.

Each function does ONE thing:
    project: field on a line → channel coefficients
    synthesize: channel coefficients → field on a line
    propagate: advance coefficients through the homogeneous medium
    line_source: current on a line that launches given coefficients
"""

import numpy as np

from .constants import MU_0, PROPAGATION_SIGN, wavelength_to_omega


class ChannelBasis:
    """
    Propagating channels of a homogeneous, y-periodic region.

    Channels are ordered by increasing ky, so the normal-incidence channel
    sits in the middle.
    """

    def __init__(self, ny: int, dl: float, wavelength: float, eps_background: float = 1.0):
        """
        Build the channel basis.

        Args:
            ny: Number of grid points across the transverse (y) period
            dl: Grid spacing in meters
            wavelength: Free-space wavelength in meters
            eps_background: Real relative permittivity of the homogeneous region
        """
        if ny < 2:
            raise ValueError(f"Transverse grid needs at least 2 points, got ny={ny}")
        if dl <= 0:
            raise ValueError(f"Grid spacing must be positive, got dl={dl}")
        if np.iscomplexobj(eps_background) and np.imag(eps_background) != 0:
            raise ValueError("Channels are only defined for a lossless (real) background")

        self.ny = ny
        self.dl = dl
        self.wavelength = wavelength
        self.omega = wavelength_to_omega(wavelength)
        self.eps_background = float(np.real(eps_background))
        self.k0 = 2 * np.pi / wavelength

        # All transverse Fourier orders, sorted by ky
        orders = np.sort(np.fft.fftfreq(ny, d=1.0 / ny).round().astype(int))
        ky_all = 2 * np.pi * orders / (ny * dl)
        ky_eff_sq = (2 / dl * np.sin(ky_all * dl / 2)) ** 2
        sin_sq = (dl / 2) ** 2 * (self.k0 ** 2 * self.eps_background - ky_eff_sq)

        propagating = (sin_sq > 0) & (sin_sq < 1)
        if not np.any(propagating):
            raise ValueError(
                f"No propagating channel for eps_background={eps_background} "
                f"at {ny} points per period"
            )

        self.orders = orders[propagating]
        self.ky = ky_all[propagating]
        self.kx = 2 / dl * np.arcsin(np.sqrt(sin_sq[propagating]))
        self.kxdl = self.kx * dl
        self.nu = np.sin(self.kxdl)

        y = np.arange(ny) * dl
        self.profiles = np.exp(1j * np.outer(y, self.ky)) / np.sqrt(ny)

    @property
    def n_channels(self) -> int:
        return len(self.ky)

    @property
    def normal_index(self) -> int:
        """Index of the normal-incidence (ky = 0) channel."""
        return int(np.flatnonzero(self.orders == 0)[0])

    @property
    def angles_deg(self) -> np.ndarray:
        """Propagation angle of each channel measured from +x."""
        return np.degrees(np.arctan2(self.ky, self.kx))

    def _check_coefficients(self, coefficients):
        coefficients = np.asarray(coefficients)
        if coefficients.shape[0] != self.n_channels:
            raise ValueError(
                f"Expected {self.n_channels} channel coefficients, got {coefficients.shape[0]}"
            )
        return coefficients

    def project(self, line):
        """
        Reduce a field sampled along y to channel coefficients.

        Args:
            line: Length-ny field (or ny × K array of fields)

        Returns:
            coefficients: Length-M (or M × K) complex array
        """
        line = np.asarray(line)
        if line.shape[0] != self.ny:
            raise ValueError(f"Expected a line of {self.ny} points, got {line.shape[0]}")
        return self.profiles.conj().T @ line

    def synthesize(self, coefficients):
        """Field along y for the given channel coefficients."""
        coefficients = self._check_coefficients(coefficients)
        return self.profiles @ coefficients

    def propagate(self, coefficients, distance):
        """
        Advance channel coefficients through the homogeneous medium.

        Args:
            coefficients: Length-M coefficients of +x-going waves
            distance: Distance along +x in grid points (negative = back-propagate)

        Returns:
            Coefficients at the new plane
        """
        coefficients = self._check_coefficients(coefficients)
        phase = np.exp(PROPAGATION_SIGN * 1j * self.kxdl * distance)
        if coefficients.ndim == 2:
            phase = phase[:, np.newaxis]
        return coefficients * phase

    def to_flux_normalized(self, coefficients):
        """Field amplitudes → flux-normalized amplitudes (sqrt(nu) A)."""
        return self._check_coefficients(coefficients) * np.sqrt(self.nu)

    def from_flux_normalized(self, wavefront):
        """Flux-normalized amplitudes → field amplitudes."""
        return self._check_coefficients(wavefront) / np.sqrt(self.nu)

    def line_source(self, coefficients):
        """
        Current along a source line that emits the given +x-going field.

        A line current J_a in channel a radiates A_a exp(-i kx |x - x_s|)
        to both sides with A_a = ω μ0 dl² J_a / (2 nu_a).

        Args:
            coefficients: Field amplitudes of the emitted waves at the source plane

        Returns:
            current: Length-ny complex current profile
        """
        coefficients = self._check_coefficients(coefficients)
        scale = 2 * self.nu / (self.omega * MU_0 * self.dl ** 2)
        return self.profiles @ (scale * coefficients)

    def __repr__(self):
        return (f"ChannelBasis(ny={self.ny}, n_channels={self.n_channels}, "
                f"eps_background={self.eps_background})")


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'ChannelBasis',
]
