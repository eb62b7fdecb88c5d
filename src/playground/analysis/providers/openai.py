"""OpenAI analysis provider (Chat Completions API, vision capable)."""

from __future__ import annotations

import base64
import logging
from typing import Any

import openai

from playground.analysis.base import AnalysisProvider, ProviderOutput
from playground.analysis.errors import (
    ProviderNotConfiguredError,
    ProviderResponseError,
)
from playground.analysis.normalizer import extract_bullets
from playground.analysis.types import AnalysisRequest, ContentKind, ProviderChoice

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"
DEFAULT_DOCUMENT_BUDGET = 8000

IMAGE_PROMPT = (
    "Provide a comprehensive analysis of this image in one detailed paragraph. "
    "Include: 1) All visible objects, vehicles, buildings, natural elements "
    "(mountains, trees, water, sky, etc.), 2) People if present and their "
    "activities, 3) Colors and visual characteristics, 4) Overall scene setting "
    "and atmosphere, 5) Any text, signs, or written content visible. Be "
    "thorough and descriptive, covering everything you can see in the image."
)

DOCUMENT_PROMPT = (
    "Summarize the following {document_type} in one concise paragraph. "
    "Then list up to 5 key points, one per line, each starting with '- '."
)


def build_image_prompt(focus: str | None) -> str:
    if focus and focus.strip():
        return (
            f"{IMAGE_PROMPT} Pay particular attention to the following region "
            f"or subject of interest: {focus.strip()}."
        )
    return IMAGE_PROMPT


def truncate_document(text: str, budget: int) -> tuple[str, bool]:
    """Cut `text` to `budget` characters, appending an explicit marker when cut.

    Returns:
        Tuple of (text to send, whether it was truncated).
    """
    if len(text) <= budget:
        return text, False
    marker = f"[Truncated: showing first {budget} of {len(text)} characters]"
    return f"{text[:budget]}\n\n{marker}", True


def split_summary(text: str) -> tuple[str, list[str]]:
    """Separate a completion into prose summary and bullet key points."""
    key_points = extract_bullets(text)
    if not key_points:
        return text.strip(), []
    prose = [
        line
        for line in text.splitlines()
        if line.strip() and not line.lstrip().startswith(("-", "*", "•"))
    ]
    summary = "\n".join(prose).strip()
    return summary or text.strip(), key_points


class OpenAIAnalysisProvider(AnalysisProvider):
    """GPT-4o image descriptions and document summaries."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        max_tokens: int = 1000,
        document_char_budget: int = DEFAULT_DOCUMENT_BUDGET,
        client: Any | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._document_char_budget = document_char_budget
        self._client = client
        if self._client is None and api_key:
            self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout)

    @property
    def name(self) -> str:
        return ProviderChoice.OPENAI.value

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def supports(self, kind: ContentKind) -> bool:
        return True

    def _image_messages(self, request: AnalysisRequest) -> list[dict[str, Any]]:
        image_data = base64.b64encode(request.data).decode("ascii")
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_image_prompt(request.focus)},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{request.effective_mime_type};base64,{image_data}"
                        },
                    },
                ],
            }
        ]

    def _document_messages(
        self, request: AnalysisRequest
    ) -> tuple[list[dict[str, Any]], bool]:
        text, truncated = truncate_document(request.text, self._document_char_budget)
        if truncated:
            logger.debug(
                "document_truncated",
                extra={
                    "provider": self.name,
                    "chars": len(request.text),
                    "budget": self._document_char_budget,
                },
            )
        instruction = DOCUMENT_PROMPT.format(
            document_type=request.document_type or "document"
        )
        messages = [
            {"role": "system", "content": instruction},
            {"role": "user", "content": text},
        ]
        return messages, truncated

    async def invoke(self, request: AnalysisRequest) -> dict[str, Any]:
        if self._client is None:
            raise ProviderNotConfiguredError(self.name, "OPENAI_API_KEY not set")

        truncated = False
        if request.kind is ContentKind.IMAGE:
            messages = self._image_messages(request)
        else:
            messages, truncated = self._document_messages(request)

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            max_tokens=self._max_tokens,
            timeout=self._timeout,
        )
        return {"response": response, "truncated": truncated}

    def parse(self, raw: dict[str, Any], request: AnalysisRequest) -> ProviderOutput:
        response = raw["response"]
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise ProviderResponseError(self.name, "response has no choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise ProviderResponseError(self.name, "empty completion content")

        fields: dict[str, Any] = {
            "model": getattr(response, "model", None) or self._model
        }
        if request.kind is ContentKind.IMAGE:
            return ProviderOutput(text=content.strip(), fields=fields)

        fields["truncated"] = raw["truncated"]
        summary, key_points = split_summary(content)
        return ProviderOutput(text=summary, key_points=key_points or None, fields=fields)

    async def aclose(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()
