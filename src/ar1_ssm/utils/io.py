"""
I/O utilities for loading configs and saving/loading results.
"""

import copy
import pickle
from pathlib import Path
from typing import Any, Dict, Union
import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "seed": 42,
    "logging": {"level": "INFO", "file": None},
    "model": {"variance_mode": "estimated", "q": None, "r": None},
    "estimation": {"approach": "marginal", "method": "L-BFGS-B", "maxiter": 2000},
    "simulation": {"n_steps": 500, "a": 0.7, "q": 1.0, "r": 0.5},
    "data": {"path": None, "column": "y"},
    "output": {"dir": "results"},
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML file, filling gaps from DEFAULT_CONFIG.

    Parameters
    ----------
    config_path : str or Path
        Path to YAML config file

    Returns
    -------
    dict
        Configuration dictionary
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    return _merge(DEFAULT_CONFIG, config)


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> None:
    """Save configuration to YAML file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def save_results(obj: Any, path: Union[str, Path]) -> None:
    """Save object to pickle file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "wb") as f:
        pickle.dump(obj, f)


def load_results(path: Union[str, Path]) -> Any:
    """
    Load object from pickle file.

    Parameters
    ----------
    path : str or Path
        Path to pickle file
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")

    with open(path, "rb") as f:
        return pickle.load(f)
