"""Image and document analysis with provider fallback."""

from playground.analysis.base import AnalysisProvider, ProviderOutput
from playground.analysis.dispatcher import Dispatcher, create_dispatcher
from playground.analysis.errors import (
    AnalysisError,
    InvalidRequestError,
    LocalAnalysisError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRequestError,
    ProviderResponseError,
)
from playground.analysis.heuristics import LocalAnalyzer
from playground.analysis.normalizer import normalize
from playground.analysis.types import (
    AnalysisRequest,
    AnalysisResult,
    ContentKind,
    ImageTags,
    ProviderChoice,
)

__all__ = [
    "AnalysisError",
    "AnalysisProvider",
    "AnalysisRequest",
    "AnalysisResult",
    "ContentKind",
    "Dispatcher",
    "ImageTags",
    "InvalidRequestError",
    "LocalAnalysisError",
    "LocalAnalyzer",
    "ProviderChoice",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderOutput",
    "ProviderRequestError",
    "ProviderResponseError",
    "create_dispatcher",
    "normalize",
]
