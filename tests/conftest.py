"""Global pytest configuration."""

from __future__ import annotations

import asyncio
import inspect
import os
from collections.abc import AsyncGenerator

import pytest

# Tests never talk to the live service; keep a developer .env from pointing them at it.
os.environ.setdefault("SINKINGYACHTS_API_URL", "http://sinkingyachts.test")
os.environ.setdefault("SINKINGYACHTS_FEED_URL", "ws://sinkingyachts.test/feed")


@pytest.fixture(scope="session")
def event_loop() -> AsyncGenerator[asyncio.AbstractEventLoop, None]:
    """Provide a shared event loop for async tests and fixtures."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        yield loop
    finally:
        loop.close()


def _get_loop(request: pytest.FixtureRequest) -> asyncio.AbstractEventLoop:
    try:
        loop = request.getfixturevalue("event_loop")
    except pytest.FixtureLookupError:
        loop = asyncio.new_event_loop()
    if loop.is_closed():
        loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    return loop


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem):  # type: ignore[override]
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        testargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        loop = testargs.get("event_loop") or asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.run_until_complete(pyfuncitem.obj(**testargs))
        return True
    return None


@pytest.hookimpl(tryfirst=True)
def pytest_fixture_setup(fixturedef, request):  # type: ignore[override]
    func = fixturedef.func
    if inspect.iscoroutinefunction(func):
        loop = _get_loop(request)
        kwargs = {arg: request.getfixturevalue(arg) for arg in fixturedef.argnames}
        return loop.run_until_complete(func(**kwargs))

    if inspect.isasyncgenfunction(func):
        loop = _get_loop(request)
        kwargs = {arg: request.getfixturevalue(arg) for arg in fixturedef.argnames}
        agen = func(**kwargs)
        value = loop.run_until_complete(agen.__anext__())

        def finalize() -> None:
            try:
                loop.run_until_complete(agen.__anext__())
            except StopAsyncIteration:
                pass

        request.addfinalizer(finalize)
        return value

    return None


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test as requiring asyncio support")


class StubRemote:
    """In-memory stand-in for ReputationRemote that records every call."""

    def __init__(
        self,
        *,
        verdicts: dict[str, bool] | None = None,
        full_list: list[str] | None = None,
        database_size: int = 0,
        recent: list | None = None,
    ):
        self.verdicts = dict(verdicts or {})
        self.full_list = list(full_list or [])
        self.database_size = database_size
        self.recent_changes = list(recent or [])
        self.fail_with: Exception | None = None
        self.check_delay = 0.0
        self.calls: list[tuple[str, object]] = []
        self.closed = False

    def calls_to(self, name: str) -> list:
        return [arg for call, arg in self.calls if call == name]

    async def fetch_full_list(self) -> list[str]:
        self.calls.append(("fetch_full_list", None))
        if self.fail_with:
            raise self.fail_with
        return list(self.full_list)

    async def check_domain(self, domain: str) -> bool:
        self.calls.append(("check_domain", domain))
        if self.check_delay:
            await asyncio.sleep(self.check_delay)
        if self.fail_with:
            raise self.fail_with
        return self.verdicts.get(domain, False)

    async def fetch_database_size(self) -> int:
        self.calls.append(("fetch_database_size", None))
        return self.database_size

    async def fetch_recent(self, seconds: int) -> list:
        self.calls.append(("fetch_recent", seconds))
        return list(self.recent_changes)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def stub_remote() -> StubRemote:
    return StubRemote()
