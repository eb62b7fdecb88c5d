"""Tests for provider dispatch and local fallback."""

import asyncio
import logging

import pytest

from playground.analysis.dispatcher import Dispatcher, create_dispatcher
from playground.analysis.errors import (
    InvalidRequestError,
    LocalAnalysisError,
    ProviderRequestError,
)
from playground.analysis.heuristics import LocalAnalyzer
from playground.analysis.types import ContentKind, ProviderChoice
from playground.config.models import PlaygroundConfig
from tests.conftest import FakeProvider

IMAGE = b"\xff\xd8\xff" + b"\x00" * 4096
DOCUMENT = "AI is transforming industries. " * 4


class TestDispatch:
    async def test_uses_requested_provider(self, fake_provider):
        dispatcher = Dispatcher([fake_provider])
        result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")

        assert result.provider == "openai"
        assert result.requested_provider == "openai"
        assert result.fallback_reason is None
        assert result.confidence == 90
        assert result.category == "Outdoor scene"
        assert len(fake_provider.calls) == 1

    async def test_alias_resolves_to_provider(self):
        google = FakeProvider("google", kinds=(ContentKind.IMAGE,))
        dispatcher = Dispatcher([google])
        result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "vision-api")
        assert result.provider == "google"

    async def test_unknown_choice_uses_default(self, fake_provider):
        dispatcher = Dispatcher([fake_provider])
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "bogus")
        assert result.provider == "openai"
        assert result.requested_provider == "openai"

    async def test_configured_default_provider(self):
        hf = FakeProvider("huggingface")
        dispatcher = Dispatcher([hf], default_provider=ProviderChoice.HUGGINGFACE)
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT)
        assert result.provider == "huggingface"

    async def test_local_skips_providers(self, fake_provider):
        dispatcher = Dispatcher([fake_provider])
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "local")
        assert result.provider == "local"
        assert result.fallback_reason is None
        assert fake_provider.calls == []

    @pytest.mark.parametrize("content", [b"", "", "   \n\t"])
    async def test_empty_content_rejected(self, fake_provider, content):
        dispatcher = Dispatcher([fake_provider])
        kind = ContentKind.IMAGE if isinstance(content, bytes) else ContentKind.DOCUMENT
        with pytest.raises(InvalidRequestError):
            await dispatcher.analyze(content, kind, "openai")
        assert fake_provider.calls == []


class TestFallback:
    async def test_missing_credential(self, caplog):
        provider = FakeProvider("google", configured=False)
        dispatcher = Dispatcher([provider])

        with caplog.at_level(logging.INFO, logger="playground.analysis.dispatcher"):
            result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "vision-api")

        assert result.provider == "local"
        assert result.requested_provider == "google"
        assert result.fallback_reason.startswith("not_configured")
        assert result.description
        assert provider.calls == []
        assert "provider_not_configured" in caplog.messages

    async def test_unregistered_provider(self):
        dispatcher = Dispatcher([])
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "openai")
        assert result.provider == "local"
        assert "not registered" in result.fallback_reason

    async def test_unsupported_kind(self):
        google = FakeProvider("google", kinds=(ContentKind.IMAGE,))
        dispatcher = Dispatcher([google])
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "google")
        assert result.provider == "local"
        assert result.word_count == len(DOCUMENT.split())
        assert google.calls == []

    async def test_request_failure(self, caplog):
        provider = FakeProvider(
            error=ProviderRequestError("openai", "HTTP 500", status_code=500)
        )
        dispatcher = Dispatcher([provider])

        with caplog.at_level(logging.WARNING, logger="playground.analysis.dispatcher"):
            result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")

        assert result.provider == "local"
        assert result.fallback_reason == "request_failed: HTTP 500"
        record = next(r for r in caplog.records if r.msg == "provider_request_failed")
        assert record.status_code == 500
        assert record.provider == "openai"

    async def test_unexpected_exception_falls_back(self):
        provider = FakeProvider(error=RuntimeError("socket closed"))
        dispatcher = Dispatcher([provider])
        result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")
        assert result.provider == "local"
        assert len(provider.calls) == 1

    async def test_empty_provider_text_falls_back(self, caplog):
        provider = FakeProvider(text="   ")
        dispatcher = Dispatcher([provider])

        with caplog.at_level(logging.WARNING, logger="playground.analysis.dispatcher"):
            result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")

        assert result.provider == "local"
        assert "provider_response_invalid" in caplog.messages

    async def test_wrong_shape_logged_as_invalid_response(self, caplog):
        provider = FakeProvider(
            error=AttributeError("'str' object has no attribute 'get'")
        )
        dispatcher = Dispatcher([provider])

        with caplog.at_level(logging.WARNING, logger="playground.analysis.dispatcher"):
            result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")

        assert result.provider == "local"
        assert result.fallback_reason.startswith("invalid_response")
        assert "provider_response_invalid" in caplog.messages
        assert "provider_request_failed" not in caplog.messages

    async def test_no_retries(self):
        provider = FakeProvider(error=RuntimeError("boom"))
        dispatcher = Dispatcher([provider])
        await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")
        assert len(provider.calls) == 1

    async def test_fallback_reason_is_redacted(self):
        provider = FakeProvider(
            error=RuntimeError("rejected key sk-abcdefghijklmnopqrstuvwxyz123456")
        )
        dispatcher = Dispatcher([provider])
        result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")
        assert "abcdefghijklmnopqrstuvwxyz" not in result.fallback_reason

    async def test_local_failure_is_raised(self):
        class BrokenAnalyzer(LocalAnalyzer):
            def analyze(self, request):
                raise RuntimeError("broken")

        dispatcher = Dispatcher([], BrokenAnalyzer())
        with pytest.raises(LocalAnalysisError):
            await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "local")


class TestProviderKeyPoints:
    async def test_key_points_capped(self):
        provider = FakeProvider(key_points=[f"point {i}" for i in range(9)])
        dispatcher = Dispatcher([provider])
        result = await dispatcher.analyze(DOCUMENT, ContentKind.DOCUMENT, "openai")
        assert result.key_points == [f"point {i}" for i in range(5)]

    @pytest.mark.parametrize("choice", ["openai", "huggingface", "google", "local"])
    async def test_every_choice_yields_a_result(self, choice):
        dispatcher = Dispatcher(
            [
                FakeProvider("openai"),
                FakeProvider("huggingface", configured=False),
                FakeProvider("google", error=RuntimeError("down")),
            ]
        )
        for kind, content in ((ContentKind.IMAGE, IMAGE), (ContentKind.DOCUMENT, DOCUMENT)):
            result = await dispatcher.analyze(content, kind, choice)
            assert result.description.strip()
            assert len(result.key_points) <= 5


class TestConcurrency:
    async def test_semaphore_caps_in_flight_calls(self):
        in_flight = 0
        peak = 0

        class SlowProvider(FakeProvider):
            async def invoke(self, request):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return await super().invoke(request)

        dispatcher = Dispatcher([SlowProvider()], max_concurrency=2)
        await asyncio.gather(
            *(dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai") for _ in range(6))
        )
        assert peak == 2


class TestStatusAndFactory:
    def test_provider_status(self):
        dispatcher = Dispatcher(
            [FakeProvider("openai"), FakeProvider("google", configured=False)]
        )
        assert dispatcher.provider_status() == {
            "openai": True,
            "huggingface": False,
            "google": False,
        }

    async def test_create_dispatcher_without_keys(self, config):
        dispatcher = create_dispatcher(config)
        try:
            assert set(dispatcher.providers) == {"openai", "huggingface", "google"}
            assert not any(dispatcher.provider_status().values())
            result = await dispatcher.analyze(IMAGE, ContentKind.IMAGE, "openai")
            assert result.provider == "local"
        finally:
            await dispatcher.aclose()

    async def test_create_dispatcher_with_keys(self):
        config = PlaygroundConfig.model_validate(
            {
                "openai": {"api_key": "sk-test"},
                "google": {"api_key": "AIza-test"},
                "analysis": {"default_provider": "google"},
            }
        )
        dispatcher = create_dispatcher(config)
        try:
            assert dispatcher.provider_status() == {
                "openai": True,
                "huggingface": False,
                "google": True,
            }
            assert dispatcher.default_provider is ProviderChoice.GOOGLE
        finally:
            await dispatcher.aclose()

    async def test_aclose_closes_providers(self, fake_provider):
        dispatcher = Dispatcher([fake_provider])
        await dispatcher.aclose()
        assert fake_provider.closed
