"""Provider selection and fallback.

The dispatcher owns the one rule that matters to callers: every request
produces exactly one well-formed result. A request for a remote provider
that has no credential, cannot handle the content, or fails in any way is
answered by the local heuristic analyzer instead, and the result says so.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from playground.analysis.base import AnalysisProvider
from playground.analysis.errors import (
    InvalidRequestError,
    LocalAnalysisError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderResponseError,
    classify_provider_error,
)
from playground.analysis.heuristics import LocalAnalyzer
from playground.analysis.normalizer import normalize
from playground.analysis.providers import (
    GoogleVisionProvider,
    HuggingFaceAnalysisProvider,
    OpenAIAnalysisProvider,
)
from playground.analysis.types import (
    AnalysisRequest,
    AnalysisResult,
    ContentKind,
    ProviderChoice,
)
from playground.config.models import PlaygroundConfig
from playground.logging import redact

logger = logging.getLogger(__name__)

_FAILURE_EVENTS = {
    ProviderNotConfiguredError: "provider_not_configured",
    ProviderResponseError: "provider_response_invalid",
}


def _failure_event(error: ProviderError) -> str:
    for error_type, event in _FAILURE_EVENTS.items():
        if isinstance(error, error_type):
            return event
    return "provider_request_failed"


class Dispatcher:
    """Routes analysis requests to providers, falling back to local analysis."""

    def __init__(
        self,
        providers: Iterable[AnalysisProvider] = (),
        local: LocalAnalyzer | None = None,
        *,
        default_provider: ProviderChoice = ProviderChoice.OPENAI,
        max_concurrency: int | None = None,
    ) -> None:
        self._providers: dict[str, AnalysisProvider] = {p.name: p for p in providers}
        self._local = local or LocalAnalyzer()
        self._default_provider = default_provider
        self._semaphore = (
            asyncio.Semaphore(max_concurrency) if max_concurrency else None
        )

    @property
    def providers(self) -> dict[str, AnalysisProvider]:
        return dict(self._providers)

    @property
    def default_provider(self) -> ProviderChoice:
        return self._default_provider

    def provider_status(self) -> dict[str, bool]:
        """Whether each remote provider is ready to be called."""
        status = {
            choice.value: False
            for choice in ProviderChoice
            if choice is not ProviderChoice.LOCAL
        }
        for name, provider in self._providers.items():
            status[name] = provider.is_configured
        return status

    async def analyze(
        self,
        content: bytes | str,
        kind: ContentKind,
        provider: str | ProviderChoice | None = None,
        *,
        focus: str | None = None,
        mime_type: str | None = None,
        document_type: str | None = None,
    ) -> AnalysisResult:
        """Analyze content with the requested provider.

        Args:
            content: Image bytes or document text.
            kind: What the content is.
            provider: Requested provider; aliases and unknown values resolve
                to the default provider.
            focus: Optional region-of-interest hint for images.
            mime_type: MIME type of image content.
            document_type: Caller-supplied document category.

        Raises:
            InvalidRequestError: If `content` is empty.
        """
        request = AnalysisRequest(
            content=content,
            kind=kind,
            provider=ProviderChoice.parse(provider, self._default_provider),
            mime_type=mime_type,
            focus=focus,
            document_type=document_type,
        )
        return await self.analyze_request(request)

    async def analyze_request(self, request: AnalysisRequest) -> AnalysisResult:
        if request.is_empty():
            raise InvalidRequestError(f"No {request.kind.value} content provided")

        if request.provider is ProviderChoice.LOCAL:
            return self._run_local(request)

        try:
            return await self._call_provider(request)
        except Exception as e:
            error = classify_provider_error(e, request.provider.value)
            return self._fall_back(request, error)

    async def _call_provider(self, request: AnalysisRequest) -> AnalysisResult:
        name = request.provider.value
        provider = self._providers.get(name)
        if provider is None:
            raise ProviderNotConfiguredError(name, "provider not registered")
        if not provider.supports(request.kind):
            raise ProviderNotConfiguredError(
                name, f"{request.kind.value} analysis not supported"
            )
        if not provider.is_configured:
            raise ProviderNotConfiguredError(name, "no credential configured")

        if self._semaphore is None:
            raw = await provider.invoke(request)
        else:
            async with self._semaphore:
                raw = await provider.invoke(request)

        output = provider.parse(raw, request)
        structured = dict(output.fields)
        if output.key_points:
            structured["key_points"] = output.key_points
        result = normalize(provider.name, output.text, structured, request=request)
        logger.info(
            "analysis_completed",
            extra={"provider": provider.name, "kind": request.kind.value},
        )
        return result

    def _run_local(self, request: AnalysisRequest) -> AnalysisResult:
        try:
            return self._local.analyze(request)
        except Exception as e:
            raise LocalAnalysisError(f"local analysis failed: {e}") from e

    def _fall_back(
        self, request: AnalysisRequest, error: ProviderError
    ) -> AnalysisResult:
        reason = redact(f"{error.kind}: {error.reason}")
        extra: dict[str, object] = {"provider": error.provider, "reason": reason}
        status_code = getattr(error, "status_code", None)
        if status_code is not None:
            extra["status_code"] = status_code
        event = _failure_event(error)
        if isinstance(error, ProviderNotConfiguredError):
            logger.info(event, extra=extra)
        else:
            logger.warning(event, extra=extra)

        result = self._run_local(request)
        result.requested_provider = request.provider.value
        result.fallback_reason = reason
        return result

    async def aclose(self) -> None:
        for provider in self._providers.values():
            await provider.aclose()


def create_dispatcher(config: PlaygroundConfig) -> Dispatcher:
    """Build a dispatcher with every provider adapter wired from config."""

    def secret(section) -> str | None:
        return section.api_key.get_secret_value() if section.api_key else None

    providers: list[AnalysisProvider] = [
        OpenAIAnalysisProvider(
            api_key=secret(config.openai),
            model=config.openai.model,
            timeout=config.openai.timeout_seconds,
            max_tokens=config.openai.max_tokens,
            document_char_budget=config.analysis.document_char_budget,
        ),
        HuggingFaceAnalysisProvider(
            api_key=secret(config.huggingface),
            base_url=config.huggingface.base_url,
            caption_models=config.huggingface.caption_models,
            summarization_model=config.huggingface.summarization_model,
            min_caption_length=config.huggingface.min_caption_length,
            summary_min_length=config.huggingface.summary_min_length,
            summary_max_length=config.huggingface.summary_max_length,
            summarization_char_budget=config.analysis.summarization_char_budget,
            timeout=config.huggingface.timeout_seconds,
        ),
        GoogleVisionProvider(
            api_key=secret(config.google),
            endpoint=config.google.endpoint,
            max_results=config.google.max_results,
            timeout=config.google.timeout_seconds,
        ),
    ]
    return Dispatcher(
        providers,
        LocalAnalyzer(summary_sentences=config.analysis.summary_sentences),
        default_provider=ProviderChoice(config.analysis.default_provider),
        max_concurrency=config.analysis.max_concurrent_requests,
    )
