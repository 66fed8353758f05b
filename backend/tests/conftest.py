"""
Shared pytest fixtures for all tests.

Provides a controllable clock and scheduler, session stores, a tool registry
with a few sample tools, and HTTP clients bound to the gateway app.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from starlette.testclient import TestClient

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from src.gateway.api.main import create_app
from src.gateway.config import GatewayConfig
from src.gateway.rpcEngine.dispatcher import JsonRpcDispatcher
from src.gateway.sessionEngine.store import SessionStore
from src.gateway.tools.registry import Tool, ToolRegistry


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ManualJob:
    def __init__(self, interval: float, callback):
        self.interval = interval
        self.callback = callback
        self.cancelled = False
        self.waited = False

    def cancel(self) -> None:
        self.cancelled = True

    async def wait(self) -> None:
        self.waited = True


class ManualScheduler:
    """Scheduler whose jobs only run when a test calls :meth:`fire`."""

    def __init__(self):
        self.jobs: list[ManualJob] = []

    def call_every(self, interval: float, callback) -> ManualJob:
        job = ManualJob(interval, callback)
        self.jobs.append(job)
        return job

    def fire(self) -> None:
        for job in list(self.jobs):
            if not job.cancelled:
                job.callback()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def session_store(clock, scheduler):
    """SessionStore with a 30 minute timeout and manual time control."""
    store = SessionStore(timedelta(minutes=30), clock=clock, scheduler=scheduler)
    yield store
    store.stop()


async def _slow_echo(arguments):
    return {"echo": arguments.get("text")}


def _fail(arguments):
    raise RuntimeError("upstream unavailable")


@pytest.fixture
def registry():
    return ToolRegistry(
        [
            Tool(
                name="echo",
                description="Echo the given text",
                handler=_slow_echo,
                input_schema={
                    "type": "object",
                    "properties": {"text": {"type": "string"}},
                    "required": ["text"],
                },
            ),
            Tool(
                name="add",
                description="Add two numbers",
                handler=lambda args: {"sum": args["a"] + args["b"]},
                input_schema={
                    "type": "object",
                    "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                    "required": ["a", "b"],
                },
            ),
            Tool(name="broken", description="Always fails", handler=_fail),
        ]
    )


@pytest.fixture
def dispatcher(registry):
    return JsonRpcDispatcher(registry, server_name="gateway-test", server_version="9.9.9")


@pytest.fixture
def gateway_config():
    return GatewayConfig(server_name="gateway-test", server_version="9.9.9")


@pytest.fixture
def app(registry, gateway_config, session_store):
    return create_app(registry, config=gateway_config, sessions=session_store)


@pytest.fixture
def test_client(app):
    """Starlette TestClient with the full gateway application."""
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture
async def async_client(app):
    """httpx AsyncClient talking to the app in-process."""
    from httpx import ASGITransport, AsyncClient

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
