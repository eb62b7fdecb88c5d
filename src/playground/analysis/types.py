"""Types shared by the analysis dispatcher, providers and HTTP boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MAX_KEY_POINTS = 5


class ContentKind(Enum):
    """What kind of content a request carries."""

    IMAGE = "image"
    DOCUMENT = "document"


class ProviderChoice(str, Enum):
    """Provider a caller can ask for.

    Values are the identifiers used on the wire (`apiChoice`, `apiUsed`).
    """

    OPENAI = "openai"
    HUGGINGFACE = "huggingface"
    GOOGLE = "google"
    LOCAL = "local"

    @classmethod
    def parse(
        cls, value: str | ProviderChoice | None, default: ProviderChoice
    ) -> ProviderChoice:
        """Resolve a caller-supplied choice, mapping unknown values to `default`."""
        if isinstance(value, ProviderChoice):
            return value
        if not value:
            return default
        key = value.strip().lower()
        try:
            return cls(key)
        except ValueError:
            return _ALIASES.get(key, default)


_ALIASES: dict[str, ProviderChoice] = {
    "primary-llm": ProviderChoice.OPENAI,
    "secondary-inference": ProviderChoice.HUGGINGFACE,
    "vision-api": ProviderChoice.GOOGLE,
}


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """A single analysis request; lives for one call only."""

    content: bytes | str
    kind: ContentKind
    provider: ProviderChoice = ProviderChoice.OPENAI
    mime_type: str | None = None
    focus: str | None = None
    document_type: str | None = None

    @property
    def effective_mime_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        return "image/jpeg" if self.kind is ContentKind.IMAGE else "text/plain"

    @property
    def text(self) -> str:
        """Document content as text."""
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8", errors="replace")
        return self.content

    @property
    def data(self) -> bytes:
        """Image content as bytes."""
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content

    def is_empty(self) -> bool:
        if isinstance(self.content, str):
            return not self.content.strip()
        return len(self.content) == 0


@dataclass(slots=True)
class ImageTags:
    """Keyword tags extracted from an image description."""

    objects: list[str] = field(default_factory=list)
    people: list[str] = field(default_factory=list)
    emotions: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AnalysisResult:
    """Canonical output for every analysis request.

    `provider` is the provider that actually produced the result, which
    differs from `requested_provider` when the dispatcher fell back.
    """

    description: str
    provider: str
    requested_provider: str
    key_points: list[str] = field(default_factory=list)
    category: str = ""
    confidence: int = 0
    fallback_reason: str | None = None
    word_count: int | None = None
    tags: ImageTags | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def fell_back(self) -> bool:
        return self.fallback_reason is not None

    def to_image_payload(self) -> dict[str, Any]:
        """JSON body for the describe-image endpoint."""
        tags = self.tags or ImageTags()
        return {
            "description": self.description,
            "apiUsed": self.provider,
            "requestedApi": self.requested_provider,
            "fallbackReason": self.fallback_reason,
            "keyPoints": list(self.key_points),
            "objects": list(tags.objects),
            "people": list(tags.people),
            "emotions": list(tags.emotions),
            "colors": list(tags.colors),
            "scene": self.category,
            "confidence": self.confidence,
            "success": True,
        }

    def to_document_payload(self) -> dict[str, Any]:
        """JSON body for the summarize endpoints."""
        return {
            "summary": self.description,
            "wordCount": self.word_count or 0,
            "keyPoints": list(self.key_points),
            "documentType": self.category,
            "apiUsed": self.provider,
            "requestedApi": self.requested_provider,
            "fallbackReason": self.fallback_reason,
            "success": True,
        }
