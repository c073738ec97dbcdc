# =============================================================================
# RESULTS: Saving and Loading Workflow Outputs
# =============================================================================
"""
Each workflow run writes one directory:

    <output_dir>/
        metadata.json       parameters, timestamp, scalar results
        <name>.npy          one file per array (fields, eps_r, t, ...)
"""

import json
from datetime import datetime
from pathlib import Path

import numpy as np


def default_output_dir(name, root="outputs"):
    """outputs/<name>_<timestamp>"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(root) / f"{name}_{timestamp}"


def _to_serializable(value):
    """Convert numpy scalars/arrays and complex numbers to JSON types."""
    if isinstance(value, dict):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_serializable(v) for v in value]
    if isinstance(value, np.ndarray):
        return _to_serializable(value.tolist())
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (np.floating,)):
        return float(value)
    if isinstance(value, (complex, np.complexfloating)):
        return {'real': float(value.real), 'imag': float(value.imag)}
    if isinstance(value, Path):
        return str(value)
    return value


def save_results(output_dir, arrays, metadata=None, verbose=True):
    """
    Save arrays and metadata of a workflow run.

    Args:
        output_dir: Directory to write (created if needed)
        arrays: Dict of {name: ndarray}
        metadata: Dict of parameters and scalar results
        verbose: Print the saved location

    Returns:
        output_dir as a Path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    metadata = dict(metadata or {})
    metadata.setdefault('timestamp', datetime.now().isoformat())
    metadata['arrays'] = sorted(arrays)

    with open(output_dir / 'metadata.json', 'w') as f:
        json.dump(_to_serializable(metadata), f, indent=2)

    for name, array in arrays.items():
        np.save(output_dir / f'{name}.npy', np.asarray(array))

    if verbose:
        print(f"  ✓ Saved {len(arrays)} arrays to {output_dir}/")

    return output_dir


def load_results(output_dir):
    """
    Load a directory written by ``save_results``.

    Returns:
        (arrays, metadata)
    """
    output_dir = Path(output_dir)
    metadata_path = output_dir / 'metadata.json'
    if not metadata_path.exists():
        raise FileNotFoundError(f"No metadata.json in {output_dir}")

    with open(metadata_path) as f:
        metadata = json.load(f)

    arrays = {name: np.load(output_dir / f'{name}.npy') for name in metadata.get('arrays', [])}
    return arrays, metadata


# =============================================================================
# Module-level exports
# =============================================================================
__all__ = [
    'default_output_dir',
    'save_results',
    'load_results',
]
