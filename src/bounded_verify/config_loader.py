import copy
import os
from typing import Optional

import yaml

DEFAULT_CFG = {
    "engine": {
        "backend": "z3",
        "factory": None,
        "model_suffix": ".model.yaml",
        "timeout_ms": None,
    },
    "subject": {
        "source_suffix": ".java",
        "compile_command": None,
    },
    "report": {
        "path": "verification-result.txt",
        "console": False,
    },
    "logging": {
        "verbose": True,
        "debug": False,
    },
}


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_cfg(path: Optional[str] = None) -> dict:
    """Defaults overlaid with the YAML file at `path` (a missing file means defaults)."""
    cfg = copy.deepcopy(DEFAULT_CFG)
    if path and os.path.exists(path):
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path}: top level must be a mapping")
        _merge(cfg, loaded)
    return cfg
