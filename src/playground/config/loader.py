"""Configuration loading from TOML files and environment variables."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import SecretStr

from playground.config.models import PlaygroundConfig
from playground.config.paths import get_config_path

logger = logging.getLogger(__name__)

# Checked in order; the first variable with a value wins.
PROVIDER_ENV_VARS: dict[str, tuple[str, ...]] = {
    "openai": ("OPENAI_API_KEY",),
    "huggingface": ("HUGGINGFACE_API_KEY", "HF_TOKEN"),
    "google": ("GOOGLE_VISION_API_KEY",),
}


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("config.toml"),  # Current directory
        get_config_path(),  # ~/.playground/config.toml (or PLAYGROUND_HOME)
    ]


def _set_secret_from_env(
    section: dict[str, Any], key: str, env_vars: tuple[str, ...]
) -> None:
    """Set a secret value from environment if not already set."""
    if section.get(key) is not None:
        return
    for env_var in env_vars:
        value = os.environ.get(env_var, "").strip()
        if value:
            section[key] = SecretStr(value)
            return


def _resolve_env_secrets(config: dict[str, Any]) -> dict[str, Any]:
    """Resolve API keys from environment variables where not set in config."""
    for provider, env_vars in PROVIDER_ENV_VARS.items():
        section = config.get(provider)
        if section is None:
            section = config[provider] = {}
        _set_secret_from_env(section, "api_key", env_vars)
    return config


def _find_config_path(path: Path | None) -> Path | None:
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return config_path

    for default_path in _get_default_config_paths():
        expanded = default_path.expanduser()
        if expanded.exists():
            return expanded
    return None


def load_config(path: Path | None = None) -> PlaygroundConfig:
    """Load configuration from an optional TOML file plus the environment.

    A config file is not required: without one, defaults are used and provider
    credentials come only from environment variables. Missing credentials never
    fail loading; they only disable the matching provider.

    Args:
        path: Explicit path to config file. If None, searches default locations.

    Returns:
        Validated PlaygroundConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        ValueError: If the config file is invalid.
    """
    raw_config: dict[str, Any] = {}
    config_path = _find_config_path(path)
    if config_path is not None:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
        logger.debug("config_loaded", extra={"config.path": str(config_path)})

    raw_config = _resolve_env_secrets(raw_config)
    config = PlaygroundConfig.model_validate(raw_config)

    missing = [name for name, ok in config.credential_status().items() if not ok]
    if missing:
        logger.info(
            "providers_without_credentials",
            extra={"providers": missing},
        )
    return config


def get_default_config() -> PlaygroundConfig:
    """Get a default configuration with credentials from the environment."""
    return PlaygroundConfig.model_validate(_resolve_env_secrets({}))
