from .base import (
    ProviderClient,
    ProviderConnectionError,
    ProviderDescriptor,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTarget,
    ProviderTimeoutError,
)
from .catalog import (
    BUILTIN_DESCRIPTORS,
    ProviderCatalog,
    ProviderKind,
    create_default_catalog,
)
from .litellm_client import LiteLLMClient, get_models_for_provider
from .ollama import OllamaClient
from .session import ProviderSession

__all__ = [
    "BUILTIN_DESCRIPTORS",
    "LiteLLMClient",
    "OllamaClient",
    "ProviderCatalog",
    "ProviderClient",
    "ProviderConnectionError",
    "ProviderDescriptor",
    "ProviderError",
    "ProviderHTTPError",
    "ProviderKind",
    "ProviderResponseError",
    "ProviderSession",
    "ProviderTarget",
    "ProviderTimeoutError",
    "create_default_catalog",
    "get_models_for_provider",
]
