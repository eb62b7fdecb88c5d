"""Adapters for the external AI services."""

from playground.analysis.providers.google import GoogleVisionProvider
from playground.analysis.providers.huggingface import HuggingFaceAnalysisProvider
from playground.analysis.providers.openai import OpenAIAnalysisProvider

__all__ = [
    "GoogleVisionProvider",
    "HuggingFaceAnalysisProvider",
    "OpenAIAnalysisProvider",
]
