"""Typed errors for analysis requests and provider adapters.

Exports
-------
- AnalysisError, InvalidRequestError, LocalAnalysisError
- ProviderError, ProviderNotConfiguredError, ProviderRequestError,
  ProviderResponseError
- classify_provider_error(exc, provider)

Every ProviderError is absorbed by the dispatcher and turned into a local
fallback. The subclasses only exist so operators can tell a missing key from
an outage from a provider that changed its response format.
"""

from __future__ import annotations

import json
import re

import httpx
import openai


class AnalysisError(Exception):
    """Base class for analysis failures."""


class InvalidRequestError(AnalysisError, ValueError):
    """The caller sent unusable input (empty content, bad URL)."""


class LocalAnalysisError(AnalysisError):
    """The local heuristic analyzer failed. Not expected to happen."""


class ProviderError(AnalysisError):
    """An external provider could not produce a result."""

    kind = "provider_error"

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason


class ProviderNotConfiguredError(ProviderError):
    """No credential for the provider, or it cannot handle the content kind."""

    kind = "not_configured"


class ProviderRequestError(ProviderError):
    """Network failure, timeout or non-success HTTP status."""

    kind = "request_failed"

    def __init__(
        self, provider: str, reason: str, *, status_code: int | None = None
    ) -> None:
        super().__init__(provider, reason)
        self.status_code = status_code


class ProviderResponseError(ProviderError):
    """The provider answered, but not in the shape we rely on."""

    kind = "invalid_response"


# Matches messages of errors that are really transport trouble
_TRANSIENT_PATTERN = re.compile(
    r"rate.?limit|too many requests|timeout|timed out|"
    r"connection.?(?:error|reset|refused)|service.?unavailable|overloaded",
    re.IGNORECASE,
)


def classify_provider_error(exc: BaseException, provider: str) -> ProviderError:
    """Map an arbitrary exception raised while calling a provider to a ProviderError.

    Heuristics:
      - ProviderError subclasses pass through
      - httpx status errors -> ProviderRequestError with the status code
      - httpx transport errors / timeouts -> ProviderRequestError
      - openai status / connection errors -> ProviderRequestError
      - openai authentication errors -> ProviderNotConfiguredError
      - JSON decode, KeyError, IndexError, TypeError, AttributeError, ValueError ->
        ProviderResponseError
      - messages that look like rate limits or timeouts -> ProviderRequestError
      - anything else -> ProviderRequestError
    """
    if isinstance(exc, ProviderError):
        return exc

    message = f"{type(exc).__name__}: {exc}"

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return ProviderRequestError(provider, f"HTTP {status}", status_code=status)
    if isinstance(exc, httpx.HTTPError):
        return ProviderRequestError(provider, message)

    if isinstance(exc, openai.AuthenticationError):
        return ProviderNotConfiguredError(provider, "credential rejected")
    if isinstance(exc, openai.APIStatusError):
        return ProviderRequestError(
            provider, f"HTTP {exc.status_code}", status_code=exc.status_code
        )
    if isinstance(exc, openai.APIConnectionError):
        return ProviderRequestError(provider, message)

    if isinstance(
        exc, json.JSONDecodeError | KeyError | IndexError | TypeError | AttributeError
    ):
        return ProviderResponseError(provider, message)

    if _TRANSIENT_PATTERN.search(message):
        return ProviderRequestError(provider, message)

    if isinstance(exc, ValueError):
        return ProviderResponseError(provider, message)

    return ProviderRequestError(provider, message)


__all__ = [
    "AnalysisError",
    "InvalidRequestError",
    "LocalAnalysisError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderRequestError",
    "ProviderResponseError",
    "classify_provider_error",
]
