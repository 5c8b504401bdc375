import threading
from enum import Enum
from typing import Callable, Dict, List, Optional

from ...config import REQUEST_TIMEOUT_SECONDS
from .base import ProviderClient, ProviderDescriptor
from .litellm_client import LiteLLMClient
from .ollama import DEFAULT_BASE_URL as OLLAMA_BASE_URL
from .ollama import OllamaClient

ClientFactory = Callable[[], ProviderClient]


class ProviderKind(str, Enum):
    OLLAMA = "ollama"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    OPENROUTER = "openrouter"
    CUSTOM = "custom"


BUILTIN_DESCRIPTORS: List[ProviderDescriptor] = [
    ProviderDescriptor(
        kind=ProviderKind.OLLAMA.value,
        display_name="Ollama (Local)",
        base_url=OLLAMA_BASE_URL,
        default_model="mistral",
        requires_api_key=False,
        is_local=True,
    ),
    ProviderDescriptor(
        kind=ProviderKind.OPENAI.value,
        display_name="OpenAI",
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
        requires_api_key=True,
    ),
    ProviderDescriptor(
        kind=ProviderKind.ANTHROPIC.value,
        display_name="Anthropic",
        base_url="https://api.anthropic.com",
        default_model="claude-haiku-4-5-20251001",
        requires_api_key=True,
    ),
    ProviderDescriptor(
        kind=ProviderKind.GEMINI.value,
        display_name="Google Gemini",
        base_url="https://generativelanguage.googleapis.com",
        default_model="gemini/gemini-2.5-flash",
        requires_api_key=True,
    ),
    ProviderDescriptor(
        kind=ProviderKind.OPENROUTER.value,
        display_name="OpenRouter",
        base_url="https://openrouter.ai/api/v1",
        default_model="openrouter/auto",
        requires_api_key=True,
    ),
    ProviderDescriptor(
        kind=ProviderKind.CUSTOM.value,
        display_name="Custom (OpenAI-compatible)",
        base_url="",
        default_model="",
        requires_api_key=True,
        enumerates_models=False,
    ),
]


class ProviderCatalog:
    """Registry of provider kinds, their descriptors and client factories."""

    def __init__(self):
        self._descriptors: Dict[str, ProviderDescriptor] = {}
        self._factories: Dict[str, ClientFactory] = {}
        self._clients: Dict[str, ProviderClient] = {}
        self._lock = threading.Lock()

    def register(self, descriptor: ProviderDescriptor, factory: ClientFactory) -> None:
        """Register (or replace) a provider kind."""
        with self._lock:
            self._descriptors[descriptor.kind] = descriptor
            self._factories[descriptor.kind] = factory
            self._clients.pop(descriptor.kind, None)

    def __contains__(self, kind: object) -> bool:
        return _key(kind) in self._descriptors

    def kinds(self) -> List[str]:
        return list(self._descriptors)

    def descriptors(self) -> List[ProviderDescriptor]:
        return list(self._descriptors.values())

    def descriptor(self, kind: str) -> ProviderDescriptor:
        try:
            return self._descriptors[_key(kind)]
        except KeyError:
            raise KeyError(f"Unknown provider: {kind}") from None

    def client(self, kind: str) -> ProviderClient:
        key = _key(kind)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                factory = self._factories.get(key)
                if factory is None:
                    raise KeyError(f"Unknown provider: {kind}")
                client = factory()
                self._clients[key] = client
            return client


def _key(kind: object) -> str:
    return kind.value if isinstance(kind, ProviderKind) else str(kind)


def create_default_catalog(
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    ollama_client: Optional[OllamaClient] = None,
) -> ProviderCatalog:
    catalog = ProviderCatalog()
    for descriptor in BUILTIN_DESCRIPTORS:
        if descriptor.kind == ProviderKind.OLLAMA.value:
            catalog.register(
                descriptor, lambda: ollama_client or OllamaClient(timeout=timeout)
            )
        else:
            catalog.register(descriptor, lambda: LiteLLMClient(timeout=timeout))
    return catalog
