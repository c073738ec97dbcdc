# =============================================================================
# Test Results: Saving and Loading Workflow Outputs
# =============================================================================

import json

import numpy as np
import pytest

from wavescatter.results import default_output_dir, save_results, load_results


def test_save_and_load(tmp_path):
    Ez = np.arange(6).reshape(2, 3) * (1 + 1j)
    metadata = {
        'config': {'ny': np.int64(28), 'radius': np.float64(2.5)},
        'tau_max': np.float64(0.9),
        'coefficient': 0.5 - 0.25j,
        'converged': np.bool_(True),
        'shape': (2, 3),
    }

    save_results(tmp_path / 'run', {'Ez': Ez, 'eps_r': np.ones((2, 3))}, metadata, verbose=False)
    arrays, loaded = load_results(tmp_path / 'run')

    np.testing.assert_array_equal(arrays['Ez'], Ez)
    assert set(arrays) == {'Ez', 'eps_r'}
    assert loaded['config'] == {'ny': 28, 'radius': 2.5}
    assert loaded['coefficient'] == {'real': 0.5, 'imag': -0.25}
    assert loaded['converged'] is True
    assert loaded['shape'] == [2, 3]
    assert 'timestamp' in loaded


def test_metadata_is_plain_json(tmp_path):
    save_results(tmp_path, {'t': np.eye(2, dtype=complex)}, {'path': tmp_path}, verbose=False)

    with open(tmp_path / 'metadata.json') as f:
        metadata = json.load(f)
    assert metadata['arrays'] == ['t']
    assert metadata['path'] == str(tmp_path)


def test_load_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_results(tmp_path / 'missing')


def test_default_output_dir():
    path = default_output_dir('open_channel', root='runs')

    assert path.parent.name == 'runs'
    assert path.name.startswith('open_channel_')
