"""Configuration module."""

from playground.config.loader import get_default_config, load_config
from playground.config.models import (
    AnalysisConfig,
    FetchConfig,
    GoogleVisionConfig,
    HuggingFaceConfig,
    OpenAIConfig,
    PlaygroundConfig,
    ServerConfig,
)
from playground.config.paths import (
    get_config_path,
    get_logs_path,
    get_playground_home,
)

__all__ = [
    "AnalysisConfig",
    "FetchConfig",
    "GoogleVisionConfig",
    "HuggingFaceConfig",
    "OpenAIConfig",
    "PlaygroundConfig",
    "ServerConfig",
    "get_config_path",
    "get_default_config",
    "get_logs_path",
    "get_playground_home",
    "load_config",
]
