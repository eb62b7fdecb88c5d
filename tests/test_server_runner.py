from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast

from playground.server.runner import ServerRunner


class _FakeServer:
    def __init__(self, calls: list[str]) -> None:
        self.calls = calls
        self.should_exit = False

    async def serve(self) -> None:
        self.calls.append("serve")


class _FakeLoop:
    def __init__(self, calls: list[str]) -> None:
        self.calls = calls
        self.handlers: list[Any] = []

    def add_signal_handler(self, _sig, handler) -> None:
        self.calls.append("signal")
        self.handlers.append(handler)


def _patch(monkeypatch, calls: list[str]) -> tuple[_FakeServer, _FakeLoop]:
    server = _FakeServer(calls)
    loop = _FakeLoop(calls)
    monkeypatch.setattr(
        "playground.server.runner.uvicorn.Config", lambda *a, **kw: object()
    )
    monkeypatch.setattr("playground.server.runner.uvicorn.Server", lambda _cfg: server)
    monkeypatch.setattr(
        "playground.server.runner.asyncio.get_running_loop", lambda: loop
    )
    return server, loop


async def test_server_runner_serves(monkeypatch) -> None:
    calls: list[str] = []
    _patch(monkeypatch, calls)

    app = cast(Any, SimpleNamespace(state=SimpleNamespace()))
    runner = ServerRunner(app, host="127.0.0.1", port=3001)
    await runner.run()

    assert calls.count("signal") == 2
    assert calls[-1] == "serve"


async def test_first_signal_requests_graceful_exit(monkeypatch) -> None:
    calls: list[str] = []
    server, loop = _patch(monkeypatch, calls)
    exits: list[int] = []
    monkeypatch.setattr("playground.server.runner.os._exit", exits.append)

    runner = ServerRunner(cast(Any, SimpleNamespace()), host="127.0.0.1", port=3001)
    await runner.run()

    loop.handlers[0]()
    assert server.should_exit is True
    assert exits == []

    loop.handlers[1]()
    assert exits == [1]
