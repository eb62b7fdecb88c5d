"""Google Cloud Vision provider (images only)."""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from playground.analysis.base import AnalysisProvider, ProviderOutput
from playground.analysis.errors import (
    ProviderNotConfiguredError,
    ProviderResponseError,
)
from playground.analysis.types import AnalysisRequest, ContentKind, ProviderChoice

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"
TOP_LABELS = 5


def build_annotate_body(data: bytes, max_results: int) -> dict[str, Any]:
    return {
        "requests": [
            {
                "image": {"content": base64.b64encode(data).decode("ascii")},
                "features": [
                    {"type": "LABEL_DETECTION", "maxResults": max_results},
                    {"type": "TEXT_DETECTION"},
                    {"type": "FACE_DETECTION"},
                    {"type": "OBJECT_LOCALIZATION", "maxResults": max_results},
                ],
            }
        ]
    }


def _percent(score: Any) -> int:
    try:
        return round(float(score) * 100)
    except (TypeError, ValueError):
        return 0


def format_report(annotation: dict[str, Any]) -> tuple[str, list[str]]:
    """Render one annotate response as a text report.

    Returns:
        Tuple of (report, key points from the top labels).
    """
    labels = [
        (label.get("description", ""), _percent(label.get("score")))
        for label in annotation.get("labelAnnotations", [])
        if label.get("description")
    ]
    objects = [
        (obj.get("name", ""), _percent(obj.get("score")))
        for obj in annotation.get("localizedObjectAnnotations", [])
        if obj.get("name")
    ]
    faces = len(annotation.get("faceAnnotations", []))
    texts = annotation.get("textAnnotations", [])
    extracted = texts[0].get("description", "").strip() if texts else ""

    sections: list[str] = []
    if labels:
        lines = "\n".join(f"- {name} ({pct}%)" for name, pct in labels)
        sections.append(f"Labels detected:\n{lines}")
    if objects:
        lines = "\n".join(f"- {name} ({pct}%)" for name, pct in objects)
        sections.append(f"Objects located:\n{lines}")
    if faces:
        noun = "face" if faces == 1 else "faces"
        sections.append(f"People: {faces} {noun} detected.")
    if extracted:
        sections.append(f"Text found in image:\n{extracted}")

    key_points = [f"{name} ({pct}%)" for name, pct in labels[:TOP_LABELS]]
    return "\n\n".join(sections), key_points


class GoogleVisionProvider(AnalysisProvider):
    """Label, text, face and object detection via the Cloud Vision REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        max_results: int = 10,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._endpoint = endpoint
        self._max_results = max_results
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return ProviderChoice.GOOGLE.value

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def supports(self, kind: ContentKind) -> bool:
        return kind is ContentKind.IMAGE

    async def invoke(self, request: AnalysisRequest) -> dict[str, Any]:
        if request.kind is not ContentKind.IMAGE:
            raise ProviderNotConfiguredError(self.name, "documents are not supported")
        if not self._api_key:
            raise ProviderNotConfiguredError(self.name, "GOOGLE_VISION_API_KEY not set")

        response = await self._client.post(
            self._endpoint,
            params={"key": self._api_key},
            json=build_annotate_body(request.data, self._max_results),
        )
        response.raise_for_status()
        return response.json()

    def parse(self, raw: dict[str, Any], request: AnalysisRequest) -> ProviderOutput:
        responses = raw.get("responses") if isinstance(raw, dict) else None
        if not responses:
            raise ProviderResponseError(self.name, "response has no annotations")
        annotation = responses[0]
        if not isinstance(annotation, dict):
            raise ProviderResponseError(self.name, "annotation is not an object")
        error = annotation.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise ProviderResponseError(self.name, str(message))

        report, key_points = format_report(annotation)
        if not report:
            raise ProviderResponseError(self.name, "nothing detected in image")
        return ProviderOutput(
            text=report,
            key_points=key_points or None,
            fields={"faces": len(annotation.get("faceAnnotations", []))},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
