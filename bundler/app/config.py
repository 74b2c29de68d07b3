# bundler/app/config.py
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any

import json5

from bundler.core.config_stack import ConfigLayer, ConfigStack

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_CONFIG", "CONFIG_ENV_VAR",
    "initConfig", "resetConfig", "getConfigStack",
    "config", "configBool",
]

# ------------------------------------------------------------------ #
# Defaults
# ------------------------------------------------------------------ #

CONFIG_ENV_VAR = "BUNDLER_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "debug": {
        "devModeEnabled": True,
        "suppressRecurringMessages": {
            "enabled": False,
            "windowSeconds": 60,
            "maxPerWindow": 5,
            "summaryLevel": "INFO",
        },
    },
    "logging": {
        "file": {
            "enabled": False,
            "path": "bundler.log",
        },
    },
    "components": {
        "roots": [],
        "serverWide": ["base"],
        "installed": None,
    },
    "assets": {
        "allowSymlinks": False,
        "nonAggregablePrefixes": ["/web/content"],
    },
    "overrides": {
        "file": None,
    },
}

# ------------------------------------------------------------------ #
# Module singletons
# ------------------------------------------------------------------ #

_CONFIG_STACK: ConfigStack | None = None



def _loadFileLayer(path: Path) -> ConfigLayer:
    raw = json5.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Config file '{path}' must contain an object at the top level")
    return ConfigLayer(name=f"file:{path}", scope="file", data=raw)



def initConfig(path: str | Path | None = None, *, overrides: dict[str, Any] | None = None) -> ConfigStack:
    """
    Initialize the config stack (idempotent unless `path` or `overrides` are given).

    Layers: built-in defaults, then the JSON5 file at `path` (or $BUNDLER_CONFIG),
    then runtime `overrides`.
    """
    global _CONFIG_STACK
    if _CONFIG_STACK is not None and path is None and overrides is None:
        return _CONFIG_STACK

    layers = [ConfigLayer(name="defaults", scope="defaults", data=DEFAULT_CONFIG)]
    filePath = path or os.environ.get(CONFIG_ENV_VAR)
    if filePath:
        layers.append(_loadFileLayer(Path(filePath)))
    if overrides:
        layers.append(ConfigLayer(name="runtime", scope="runtime", data=overrides))

    _CONFIG_STACK = ConfigStack(layers)
    logger.info("Config initialized (layers: %s)", ", ".join(layer.name for layer in layers))
    return _CONFIG_STACK



def resetConfig() -> None:
    global _CONFIG_STACK
    _CONFIG_STACK = None



def getConfigStack() -> ConfigStack:
    if _CONFIG_STACK is None:
        initConfig()
    assert _CONFIG_STACK is not None
    return _CONFIG_STACK



def config(path: str, default: Any = None) -> Any:
    """
    Read a dotted path from the merged configuration.

    Example:
      value = config("components.serverWide")  # returns ["base"]
      value = config("non.existing.path", 300) # returns 300
    """
    return getConfigStack().get(path, default)



def configBool(path: str, default: bool = False) -> bool:
    """
    Read a boolean from the merged configuration.
    """
    val = config(path, None)
    if isinstance(val, bool):
        return val
    if val is None:
        return default
    return bool(val)
