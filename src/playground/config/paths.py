"""Centralized path management for the playground.

All local state (config, logs) lives under a single base directory that can be
overridden with the PLAYGROUND_HOME environment variable.

Default location: ~/.playground
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "PLAYGROUND_HOME"


@lru_cache(maxsize=1)
def get_playground_home() -> Path:
    """Get the base directory for playground data.

    Resolution order:
    1. PLAYGROUND_HOME environment variable (if set)
    2. ~/.playground

    Returns:
        Path to the playground home directory.
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()

    return Path.home() / ".playground"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_playground_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the default logs directory path."""
    return get_playground_home() / "logs"

