import numpy as np
import pytest

from betagun.config import DEFAULT_CONFIG, load_config


def test_defaults():
    config = load_config()
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
    assert config['source']['radius_cm'] == 0.5
    assert config['direction']['theta_max'] == pytest.approx(np.pi)


def test_mapping_overrides_are_merged():
    config = load_config({'ion': {'Z': 55}, 'seed': 3})
    assert config['ion']['Z'] == 55
    assert config['ion']['A'] == 47
    assert config['seed'] == 3
    assert DEFAULT_CONFIG['ion']['Z'] == 19


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="source.diameter"):
        load_config({'source': {'diameter': 1.0}})
    with pytest.raises(ValueError):
        load_config({'colour': 'red'})
    with pytest.raises(ValueError):
        load_config({'ion': 19})


def test_yaml_file(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("spectrum_file: spectra/beta.dat\nverbose: true\n")
    config = load_config(path)
    assert config['verbose'] is True
    assert config['spectrum_file'] == str(tmp_path / "spectra" / "beta.dat")


def test_yaml_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")

    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_config(path)

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(empty) == DEFAULT_CONFIG
