"""
Source configuration.

Settings are plain nested dicts. A YAML file only needs the keys it changes;
everything else comes from DEFAULT_CONFIG.

Example (source.yaml):

    spectrum_file: spectra/K47_beta.dat
    particle: chargedgeantino
    ion: {Z: 19, A: 47}
    source:
      radius_cm: 0.5
      radial_sampling: linear
    seed: 1234
"""

import copy
import numpy as np
import yaml
from pathlib import Path
from typing import Any, Mapping, Optional, Union


DEFAULT_CONFIG = {
    'spectrum_file': None,
    'particle': 'e-',
    'ion': {
        'Z': 19,
        'A': 47,
        'charge': 0.0,              # [e+]
        'excitation_energy': 0.0,   # [MeV]
    },
    'source': {
        'radius_cm': 0.5,           # 5 mm disk
        'z_cm': -0.025,             # -0.25 mm
        'radial_sampling': 'area',  # 'area' or 'linear'
    },
    'direction': {
        'theta_min': 0.0,
        'theta_max': float(np.pi),
        'phi_min': 0.0,
        'phi_max': float(2.0 * np.pi),
    },
    'seed': None,
    'verbose': False,
}


def _merge(base: dict, override: Mapping, where: str = '') -> dict:
    for key, value in override.items():
        if key not in base:
            raise ValueError(f"Unknown config key '{where}{key}'. "
                             f"Available: {list(base.keys())}")
        if isinstance(base[key], dict):
            if not isinstance(value, Mapping):
                raise ValueError(f"Config key '{where}{key}' must be a mapping")
            _merge(base[key], value, where=f"{where}{key}.")
        else:
            base[key] = value
    return base


def load_config(source: Union[str, Path, Mapping, None] = None) -> dict:
    """
    Build a full configuration.

    Parameters:
        source: YAML file path, mapping of overrides, or None for defaults

    Returns:
        Configuration dict with every key of DEFAULT_CONFIG
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if source is None:
        return config

    base_dir: Optional[Path] = None
    if isinstance(source, Mapping):
        overrides: Any = source
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, 'r') as f:
            overrides = yaml.safe_load(f) or {}
        base_dir = path.parent

    if not isinstance(overrides, Mapping):
        raise ValueError(f"Config must be a mapping, got {type(overrides).__name__}")

    _merge(config, overrides)

    # Relative spectrum paths are relative to the config file
    spectrum_file = config['spectrum_file']
    if spectrum_file is not None and base_dir is not None:
        spectrum_path = Path(spectrum_file)
        if not spectrum_path.is_absolute():
            config['spectrum_file'] = str(base_dir / spectrum_path)

    return config
