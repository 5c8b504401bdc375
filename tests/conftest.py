"""
Shared fixtures for the enhancement pipeline tests.

Provides an in-memory settings store, an event bus that records what
was published, and a provider catalog whose clients are fakes, so no
test touches the network or the real clipboard.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from inkpolish.app import build_services
from inkpolish.core.events import EventBus
from inkpolish.core.providers import (
    BUILTIN_DESCRIPTORS,
    ProviderCatalog,
    ProviderSession,
    ProviderTarget,
)
from inkpolish.core.settings import MemorySettingsStore


class FakeProviderClient:
    def __init__(
        self,
        reply: str = "enhanced text",
        models: Optional[List[str]] = None,
        connected: bool = True,
        valid_keys: tuple = ("good-key",),
    ):
        self.reply = reply
        self.models = models if models is not None else ["mistral", "llama3"]
        self.connected = connected
        self.valid_keys = valid_keys
        self.error: Optional[BaseException] = None
        self.gate: Optional[asyncio.Event] = None
        self.started: Optional[asyncio.Event] = None
        self.calls: List[tuple] = []
        self.verified_keys: List[str] = []
        self.cancelled = False

    async def check_connection(self, target: ProviderTarget) -> bool:
        return self.connected

    async def list_models(self, target: ProviderTarget) -> List[str]:
        return list(self.models)

    async def verify_api_key(self, target: ProviderTarget) -> bool:
        self.verified_keys.append(target.api_key)
        return target.api_key in self.valid_keys

    async def generate(self, target: ProviderTarget, text: str, system_message: str) -> str:
        self.calls.append((target, text, system_message))
        if self.started is not None:
            self.started.set()
        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingEventBus(EventBus):
    def __init__(self):
        super().__init__()
        self.published: List[object] = []

    def publish(self, event: object) -> None:
        self.published.append(event)
        super().publish(event)

    def of_type(self, event_type: type) -> List[object]:
        return [e for e in self.published if isinstance(e, event_type)]


@pytest.fixture
def store():
    return MemorySettingsStore()


@pytest.fixture
def events():
    return RecordingEventBus()


@pytest.fixture
def fake_clients() -> Dict[str, FakeProviderClient]:
    return {d.kind: FakeProviderClient() for d in BUILTIN_DESCRIPTORS}


@pytest.fixture
def catalog(fake_clients):
    catalog = ProviderCatalog()
    for descriptor in BUILTIN_DESCRIPTORS:
        client = fake_clients[descriptor.kind]
        catalog.register(descriptor, lambda client=client: client)
    return catalog


@pytest.fixture
def session(catalog, store, events):
    return ProviderSession(catalog=catalog, store=store, events=events, request_timeout=2.0)


@pytest.fixture
def context_text():
    return {"clipboard": None, "selection": None}


@pytest.fixture
def services(store, catalog, events, context_text):
    container = build_services(
        store=store,
        catalog=catalog,
        events=events,
        clipboard=lambda: context_text["clipboard"],
        selection=lambda: context_text["selection"],
        rate_limit_interval=0.0,
        request_timeout=2.0,
    )
    yield container
    container.shutdown()
