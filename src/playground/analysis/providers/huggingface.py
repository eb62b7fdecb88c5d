"""Hugging Face Inference API provider.

Images go through a list of caption models, tried one at a time until one
returns a usable caption. Documents go through a single summarization model.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from playground.analysis.base import AnalysisProvider, ProviderOutput
from playground.analysis.errors import (
    ProviderError,
    ProviderNotConfiguredError,
    ProviderRequestError,
    ProviderResponseError,
    classify_provider_error,
)
from playground.analysis.types import AnalysisRequest, ContentKind, ProviderChoice
from playground.config.models import DEFAULT_CAPTION_MODELS

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api-inference.huggingface.co/models"
DEFAULT_SUMMARIZATION_MODEL = "facebook/bart-large-cnn"


def _first_item(payload: Any) -> dict[str, Any] | None:
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    return payload if isinstance(payload, dict) else None


def caption_text(payload: Any) -> str:
    """`generated_text` from a captioning response, or '' if absent."""
    item = _first_item(payload)
    if item is None:
        return ""
    text = item.get("generated_text")
    return text.strip() if isinstance(text, str) else ""


def summary_text(payload: Any) -> str:
    """`summary_text` from a summarization response, or '' if absent."""
    item = _first_item(payload)
    if item is None:
        return ""
    text = item.get("summary_text")
    return text.strip() if isinstance(text, str) else ""


class HuggingFaceAnalysisProvider(AnalysisProvider):
    """Image captioning and summarization via hosted Hugging Face models."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        caption_models: Sequence[str] = DEFAULT_CAPTION_MODELS,
        summarization_model: str = DEFAULT_SUMMARIZATION_MODEL,
        min_caption_length: int = 10,
        summary_min_length: int = 30,
        summary_max_length: int = 130,
        summarization_char_budget: int = 1000,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._caption_models = list(caption_models)
        self._summarization_model = summarization_model
        self._min_caption_length = min_caption_length
        self._summary_min_length = summary_min_length
        self._summary_max_length = summary_max_length
        self._summarization_char_budget = summarization_char_budget
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return ProviderChoice.HUGGINGFACE.value

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def supports(self, kind: ContentKind) -> bool:
        return True

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _model_url(self, model: str) -> str:
        return f"{self._base_url}/{model}"

    async def invoke(self, request: AnalysisRequest) -> dict[str, Any]:
        if not self._api_key:
            raise ProviderNotConfiguredError(self.name, "HUGGINGFACE_API_KEY not set")
        if request.kind is ContentKind.IMAGE:
            return await self._caption(request)
        return await self._summarize(request)

    async def _caption(self, request: AnalysisRequest) -> dict[str, Any]:
        if not self._caption_models:
            raise ProviderNotConfiguredError(self.name, "no caption models configured")

        failures: list[ProviderError] = []
        for model in self._caption_models:
            try:
                response = await self._client.post(
                    self._model_url(model),
                    content=request.data,
                    headers=self._headers(request.effective_mime_type),
                )
                response.raise_for_status()
                payload = response.json()
            except Exception as e:
                error = classify_provider_error(e, self.name)
                failures.append(error)
                logger.warning(
                    "caption_candidate_failed",
                    extra={"model": model, "reason": error.reason},
                )
                continue

            text = caption_text(payload)
            if len(text) >= self._min_caption_length:
                return {"model": model, "payload": payload}

            failures.append(
                ProviderResponseError(self.name, f"{model}: caption too short")
            )
            logger.warning(
                "caption_candidate_unusable",
                extra={"model": model, "length": len(text)},
            )

        reasons = "; ".join(f.reason for f in failures)
        if all(isinstance(f, ProviderResponseError) for f in failures):
            raise ProviderResponseError(self.name, f"no usable caption ({reasons})")
        status = next(
            (
                f.status_code
                for f in reversed(failures)
                if isinstance(f, ProviderRequestError)
            ),
            None,
        )
        raise ProviderRequestError(
            self.name, f"all caption models failed ({reasons})", status_code=status
        )

    async def _summarize(self, request: AnalysisRequest) -> dict[str, Any]:
        body = {
            "inputs": request.text[: self._summarization_char_budget],
            "parameters": {
                "min_length": self._summary_min_length,
                "max_length": self._summary_max_length,
                "do_sample": False,
            },
        }
        response = await self._client.post(
            self._model_url(self._summarization_model),
            json=body,
            headers=self._headers(),
        )
        response.raise_for_status()
        return {"model": self._summarization_model, "payload": response.json()}

    def parse(self, raw: dict[str, Any], request: AnalysisRequest) -> ProviderOutput:
        payload = raw["payload"]
        if isinstance(payload, dict) and payload.get("error"):
            raise ProviderResponseError(self.name, str(payload["error"]))

        if request.kind is ContentKind.IMAGE:
            text = caption_text(payload)
        else:
            text = summary_text(payload)
        if not text:
            raise ProviderResponseError(self.name, f"{raw['model']}: no text in response")
        return ProviderOutput(text=text, fields={"model": raw["model"]})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
