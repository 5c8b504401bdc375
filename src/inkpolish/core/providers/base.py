"""Base interface for inference providers.

Every provider kind registered in the catalog pairs a static
``ProviderDescriptor`` with a ``ProviderClient`` implementation. Clients
hold no selection state: each call receives a frozen ``ProviderTarget``
so the session can change underneath an in-flight request.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class ProviderDescriptor:
    kind: str
    display_name: str
    base_url: str
    default_model: str
    requires_api_key: bool
    is_local: bool = False
    enumerates_models: bool = True


@dataclass(frozen=True)
class ProviderTarget:
    """Snapshot of provider, endpoint, model and key taken at dispatch time."""

    descriptor: ProviderDescriptor
    base_url: str
    model: str
    api_key: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.descriptor.kind

    def with_api_key(self, api_key: Optional[str]) -> "ProviderTarget":
        return replace(self, api_key=api_key)


class ProviderError(Exception):
    """Failure raised by a provider client, with a human-readable message."""


class ProviderConnectionError(ProviderError):
    pass


class ProviderTimeoutError(ProviderError):
    pass


class ProviderResponseError(ProviderError):
    """The provider answered, but the payload could not be understood."""


class ProviderHTTPError(ProviderError):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class ProviderClient(Protocol):
    """Protocol for provider implementations.

    Every method may raise ``ProviderError``; callers never see
    transport-library exceptions.
    """

    async def check_connection(self, target: ProviderTarget) -> bool:
        """Return True when the provider answers its liveness probe."""
        ...

    async def list_models(self, target: ProviderTarget) -> List[str]:
        """Return model names available at the target endpoint."""
        ...

    async def verify_api_key(self, target: ProviderTarget) -> bool:
        """Return True when ``target.api_key`` is accepted by the provider."""
        ...

    async def generate(
        self, target: ProviderTarget, text: str, system_message: str
    ) -> str:
        """Send a (system message, user text) pair and return the raw reply."""
        ...
