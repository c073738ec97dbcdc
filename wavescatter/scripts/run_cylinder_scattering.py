#!/usr/bin/env python3
# =============================================================================
# Workflow: Plane Wave Scattering from a Dielectric Cylinder
# =============================================================================
"""
A plane wave hits a single dielectric cylinder in open space (PML on all
four sides). The scattered field is solved directly, the total field is
incident + scattered.

Usage:
    python -m wavescatter.scripts.run_cylinder_scattering
    python -m wavescatter.scripts.run_cylinder_scattering --angle 30 --output-dir ./cylinder

Output:
    metadata.json, eps_r.npy, E_total.npy, E_scattered.npy
    permittivity.png, total_field.png, scattered_field.png, total_field.gif
"""

import argparse
from pathlib import Path

from wavescatter.constants import CYLINDER_CONFIG, DL, WAVELENGTH, NPML, index_to_permittivity
from wavescatter.geometry import cylinders_to_permittivity
from wavescatter.simulation import SimulationDomain, scattered_field
from wavescatter.results import default_output_dir, save_results
from wavescatter.visualization import plot_permittivity, plot_field, animate_field


def run(config, output_dir, verbose=True):
    """Run the cylinder workflow with ``config`` and save everything to ``output_dir``."""
    domain = SimulationDomain(nx=config['nx'], ny=config['ny'], dl=DL, wavelength=WAVELENGTH,
                              npml=NPML, periodic_y=False)
    eps_background = index_to_permittivity(config['n_background'])
    eps_cylinder = index_to_permittivity(config['n_cylinder'])

    center = (domain.nx / 2, domain.ny / 2)
    eps_r = cylinders_to_permittivity(domain.shape, [center], config['radius'], eps_cylinder,
                                      eps_background, supersample=config['supersample'])

    E_total, E_scattered, _ = scattered_field(eps_r, domain, config['angle_deg'],
                                              eps_background, verbose=verbose)

    output_dir = Path(output_dir)
    save_results(output_dir,
                 {'eps_r': eps_r, 'E_total': E_total, 'E_scattered': E_scattered},
                 {'workflow': 'cylinder_scattering', 'config': config,
                  'dl': DL, 'wavelength': WAVELENGTH},
                 verbose=verbose)

    plot_permittivity(eps_r, title='Dielectric cylinder', save_path=output_dir / 'permittivity.png')
    plot_field(E_total, title='Total field Re(Ez)', eps_r=eps_r, save_path=output_dir / 'total_field.png')
    plot_field(E_scattered, title='Scattered field |Ez|', component='abs', eps_r=eps_r,
               save_path=output_dir / 'scattered_field.png')
    animate_field(E_total, save_path=output_dir / 'total_field.gif',
                  n_frames=config['n_frames'], eps_r=eps_r)

    return E_total, E_scattered


def main():
    parser = argparse.ArgumentParser(description='Plane wave scattering from a dielectric cylinder')
    parser.add_argument('--angle', type=float, default=CYLINDER_CONFIG['angle_deg'],
                        help='Incidence angle from +x in degrees (default: 0)')
    parser.add_argument('--n-cylinder', type=float, default=CYLINDER_CONFIG['n_cylinder'],
                        help='Refractive index of the cylinder')
    parser.add_argument('--output-dir', '-o', type=str, default=None,
                        help='Output directory (default: outputs/cylinder_<timestamp>)')
    args = parser.parse_args()

    config = CYLINDER_CONFIG.copy()
    config['angle_deg'] = args.angle
    config['n_cylinder'] = args.n_cylinder
    output_dir = args.output_dir or default_output_dir('cylinder')

    print("=" * 80)
    print("PLANE WAVE SCATTERING FROM A DIELECTRIC CYLINDER")
    print("=" * 80)
    print(f"  Grid: {config['nx']}×{config['ny']}, radius = {config['radius']:.1f} px, "
          f"n = {config['n_cylinder']}, angle = {config['angle_deg']}°")

    run(config, output_dir)

    print(f"\n✓ Results saved to: {output_dir}")


if __name__ == '__main__':
    main()
