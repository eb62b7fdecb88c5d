"""Analysis provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from playground.analysis.types import AnalysisRequest, ContentKind


@dataclass(slots=True)
class ProviderOutput:
    """Parsed provider response, before normalization."""

    text: str
    key_points: list[str] | None = None
    fields: dict[str, Any] = field(default_factory=dict)


class AnalysisProvider(ABC):
    """Adapter wrapping one external AI service.

    The dispatcher checks `supports()` and `is_configured` first, then calls
    `invoke()` for the raw response and `parse()` to turn it into a
    ProviderOutput. Both may raise; the dispatcher falls back on any error.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier used on the wire (e.g., 'openai')."""
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials this provider needs are present."""
        ...

    @abstractmethod
    def supports(self, kind: ContentKind) -> bool:
        """Whether this provider can analyze the given content kind."""
        ...

    @abstractmethod
    async def invoke(self, request: AnalysisRequest) -> Any:
        """Perform the network call and return the raw provider response."""
        ...

    @abstractmethod
    def parse(self, raw: Any, request: AnalysisRequest) -> ProviderOutput:
        """Extract text and structured fields from a raw response.

        Raises:
            ProviderResponseError: If the response violates the provider's contract.
        """
        ...

    async def aclose(self) -> None:
        """Release any network resources held by the provider."""
        return None
