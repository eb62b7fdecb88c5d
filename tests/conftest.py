"""Shared test fixtures and factories."""

from pathlib import Path
from typing import Any

import pytest

from playground.analysis.base import AnalysisProvider, ProviderOutput
from playground.analysis.types import AnalysisRequest, ContentKind
from playground.config.loader import PROVIDER_ENV_VARS
from playground.config.models import PlaygroundConfig
from playground.config.paths import get_playground_home

# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep real credentials and config files out of every test."""
    for env_vars in PROVIDER_ENV_VARS.values():
        for env_var in env_vars:
            monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("PLAYGROUND_LOG_LEVEL", raising=False)
    monkeypatch.setenv("PLAYGROUND_HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    get_playground_home.cache_clear()
    yield
    get_playground_home.cache_clear()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config() -> PlaygroundConfig:
    """Configuration with no provider credentials."""
    return PlaygroundConfig()


@pytest.fixture
def config_toml_content() -> str:
    """Valid TOML config content."""
    return """
[openai]
model = "gpt-4o-mini"

[analysis]
default_provider = "huggingface"
max_concurrent_requests = 2

[server]
port = 4000
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


# =============================================================================
# Provider Fakes
# =============================================================================


class FakeProvider(AnalysisProvider):
    """Provider double that returns canned text or raises."""

    def __init__(
        self,
        name: str = "openai",
        *,
        text: str = "A red car parked on a city street next to a tall building.",
        key_points: list[str] | None = None,
        error: Exception | None = None,
        configured: bool = True,
        kinds: tuple[ContentKind, ...] = (ContentKind.IMAGE, ContentKind.DOCUMENT),
    ) -> None:
        self._name = name
        self.text = text
        self.key_points = key_points
        self.error = error
        self.configured = configured
        self.kinds = kinds
        self.calls: list[AnalysisRequest] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_configured(self) -> bool:
        return self.configured

    def supports(self, kind: ContentKind) -> bool:
        return kind in self.kinds

    async def invoke(self, request: AnalysisRequest) -> Any:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return {"text": self.text}

    def parse(self, raw: Any, request: AnalysisRequest) -> ProviderOutput:
        return ProviderOutput(text=raw["text"], key_points=self.key_points)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


def image_request(
    data: bytes = b"\x89PNG" + b"\x00" * 1000, **kwargs: Any
) -> AnalysisRequest:
    """Factory for image analysis requests."""
    kwargs.setdefault("mime_type", "image/png")
    return AnalysisRequest(content=data, kind=ContentKind.IMAGE, **kwargs)


def document_request(text: str, **kwargs: Any) -> AnalysisRequest:
    """Factory for document analysis requests."""
    return AnalysisRequest(content=text, kind=ContentKind.DOCUMENT, **kwargs)


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
