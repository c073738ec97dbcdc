#!/usr/bin/env python3
# =============================================================================
# Workflow: Gaussian Beam Focused in Free Space
# =============================================================================
"""
Synthesize a Gaussian beam that focuses at a chosen point.

The Gaussian is written on the focal plane, reduced to the propagating
channels, back-propagated to the source plane and launched by a line source.
The solved beam is compared with the paraxial width w(z).

Usage:
    python -m wavescatter.scripts.run_gaussian_focus
    python -m wavescatter.scripts.run_gaussian_focus --waist 20 --output-dir ./focus

Output:
    metadata.json, eps_r.npy, Ez.npy, width.npy
    field.png, intensity.png, beam_width.png, coefficients.png, field.gif
"""

import argparse
from pathlib import Path

import numpy as np

from wavescatter.constants import FOCUS_CONFIG, DL, WAVELENGTH, NPML, index_to_permittivity
from wavescatter.channels import ChannelBasis
from wavescatter.simulation import make_slab_layout, run_simulation
from wavescatter.beams import focused_beam_source, measure_width, beam_width
from wavescatter.results import default_output_dir, save_results
from wavescatter.visualization import (
    plot_field, plot_beam_width, plot_channel_coefficients, animate_field,
)


def run(config, output_dir, verbose=True):
    """Run the focusing workflow with ``config`` and save everything to ``output_dir``."""
    eps_background = index_to_permittivity(config['n_background'])

    layout = make_slab_layout(ny=config['ny'], slab_thickness=0, gap=config['length'] // 2,
                              dl=DL, wavelength=WAVELENGTH, npml=NPML)
    domain = layout.domain
    eps_r = np.full(domain.shape, eps_background)

    basis = ChannelBasis(domain.ny, domain.dl, domain.wavelength, eps_background)
    x_focus = layout.x_source + config['focal_distance']
    center = domain.ny / 2

    source, coefficients = focused_beam_source(basis, domain, layout.x_source, x_focus,
                                               center, config['waist'])
    Ez = run_simulation(eps_r, source, domain, verbose=verbose)

    # Beam radius between source and transmission planes
    columns = np.arange(layout.x_source + 1, layout.x_transmission + 1)
    width = np.array([measure_width(Ez[x, :]) for x in columns])
    expected = beam_width(columns - x_focus, config['waist'], domain.wavelength / domain.dl,
                          config['n_background'])
    x_waist = int(columns[np.argmin(width)])

    if verbose:
        print(f"  Channels: {basis.n_channels} propagating")
        print(f"  Focal plane x = {x_focus}, narrowest beam at x = {x_waist}")
        print(f"  Waist: requested {config['waist']:.1f} px, measured {width.min():.2f} px")

    output_dir = Path(output_dir)
    save_results(output_dir,
                 {'eps_r': eps_r, 'Ez': Ez, 'width': width, 'coefficients': coefficients},
                 {'workflow': 'gaussian_focus', 'config': config, 'x_focus': x_focus,
                  'x_waist_measured': x_waist, 'waist_measured': width.min(),
                  'n_channels': basis.n_channels},
                 verbose=verbose)

    plot_field(Ez, title='Focused Gaussian beam Re(Ez)', save_path=output_dir / 'field.png')
    plot_field(Ez, title='Focused Gaussian beam |Ez|²', component='intensity',
               save_path=output_dir / 'intensity.png')
    plot_beam_width(columns, width, expected, x_focus=x_focus, save_path=output_dir / 'beam_width.png')
    plot_channel_coefficients(basis, basis.to_flux_normalized(coefficients),
                              title='Gaussian beam at the source plane',
                              save_path=output_dir / 'coefficients.png')
    animate_field(Ez, save_path=output_dir / 'field.gif', n_frames=config['n_frames'])

    return Ez, width


def main():
    parser = argparse.ArgumentParser(description='Gaussian beam focused in free space')
    parser.add_argument('--waist', type=float, default=FOCUS_CONFIG['waist'],
                        help='Waist radius at the focus in grid points')
    parser.add_argument('--focal-distance', type=int, default=FOCUS_CONFIG['focal_distance'],
                        help='Source plane to focal plane distance in grid points')
    parser.add_argument('--output-dir', '-o', type=str, default=None,
                        help='Output directory (default: outputs/gaussian_focus_<timestamp>)')
    args = parser.parse_args()

    config = FOCUS_CONFIG.copy()
    config['waist'] = args.waist
    config['focal_distance'] = args.focal_distance
    if config['focal_distance'] > config['length']:
        parser.error(f"--focal-distance must be at most {config['length']}")
    output_dir = args.output_dir or default_output_dir('gaussian_focus')

    print("=" * 80)
    print("GAUSSIAN BEAM FOCUSED IN FREE SPACE")
    print("=" * 80)

    run(config, output_dir)

    print(f"\n✓ Results saved to: {output_dir}")


if __name__ == '__main__':
    main()
