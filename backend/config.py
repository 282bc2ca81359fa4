# backend/config.py

import copy
import os

import yaml

DEFAULT_CONFIG_PATH = os.path.join("config", "game_config.yaml")

DEFAULTS = {
    "board": {
        "default_size": 10,
        "mine_ratio": 0.15,
    },
    "game": {
        "log_noop_opens": True,
    },
    "storage": {
        "path": "minesweeper.db",
    },
    "logging": {
        "level": "INFO",
    },
}


def _merge(base, override):
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path=None):
    """
    Load the YAML config at ``path`` (default config/game_config.yaml) over the
    built-in defaults. A missing file just yields the defaults.

    Size and mine bounds are not configurable; see backend.utils.
    """
    config = copy.deepcopy(DEFAULTS)
    path = path or DEFAULT_CONFIG_PATH
    if os.path.exists(path):
        with open(path, "r") as f:
            _merge(config, yaml.safe_load(f) or {})
    return config
