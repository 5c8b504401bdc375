from typing import Dict, List, Optional, Tuple

import litellm

from ...utils.logger import get_logger
from .base import (
    ProviderConnectionError,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTarget,
    ProviderTimeoutError,
)

logger = get_logger(__name__)


# provider kind -> (model-name prefixes recognised in litellm.model_cost, routing prefix)
_MODEL_FILTERS: Dict[str, Tuple[Tuple[str, ...], Optional[str]]] = {
    "openai": (("gpt-", "o1-", "o3-", "o4-", "chatgpt-"), None),
    "anthropic": (("claude-",), None),
    "gemini": (("gemini/",), "gemini/"),
    "openrouter": (("openrouter/",), "openrouter/"),
    "custom": ((), "openai/"),
}

_FALLBACK_MODELS: Dict[str, List[str]] = {
    "openai": [
        "gpt-4o",
        "gpt-4o-mini",
        "o3",
        "o4-mini",
    ],
    "anthropic": [
        "claude-sonnet-4-5-20250929",
        "claude-opus-4-5-20251101",
        "claude-haiku-4-5-20251001",
        "claude-3-5-sonnet-20241022",
    ],
    "gemini": [
        "gemini/gemini-2.5-flash",
        "gemini/gemini-2.5-pro",
        "gemini/gemini-2.0-flash",
    ],
    "openrouter": [
        "openrouter/auto",
        "openrouter/openai/gpt-4o",
        "openrouter/anthropic/claude-sonnet-4.5",
    ],
}

_KNOWN_PREFIXES = (
    "openrouter/",
    "ollama/",
    "gemini/",
    "openai/",
    "anthropic/",
    "azure/",
    "huggingface/",
)


def format_model_name(model: str, kind: str) -> str:
    if model.startswith(_KNOWN_PREFIXES):
        return model

    prefix = _MODEL_FILTERS.get(kind, ((), None))[1]
    if prefix:
        return f"{prefix}{model}"
    return model


def get_models_for_provider(kind: str) -> List[str]:
    """Models litellm knows about for ``kind``, or a curated fallback list."""
    prefixes = _MODEL_FILTERS.get(kind, ((), None))[0]
    if not prefixes:
        return []

    try:
        all_models = list(litellm.model_cost.keys())
    except Exception as e:
        logger.warning(f"Failed to read litellm model catalog for {kind}: {e}")
        return list(_FALLBACK_MODELS.get(kind, []))

    if kind in ("openai", "anthropic"):
        filtered = [m for m in all_models if m.startswith(prefixes) and "/" not in m]
    else:
        filtered = [m for m in all_models if m.startswith(prefixes)]

    result = sorted(filtered)[:100]
    return result if result else list(_FALLBACK_MODELS.get(kind, []))


def supports_system_messages(model: str) -> bool:
    model_info = litellm.model_cost.get(model, {})
    return model_info.get("supports_system_messages", True) is not False


class LiteLLMClient:
    """Cloud / OpenAI-compatible providers routed through litellm."""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def _completion_kwargs(self, target: ProviderTarget, messages: List[dict]) -> dict:
        kwargs = {
            "model": format_model_name(target.model, target.kind),
            "messages": messages,
            "timeout": self.timeout,
        }
        if target.api_key:
            kwargs["api_key"] = target.api_key
        # litellm knows the hosted endpoints; only forward user overrides.
        if target.base_url and target.base_url != target.descriptor.base_url:
            kwargs["api_base"] = target.base_url
        return kwargs

    async def check_connection(self, target: ProviderTarget) -> bool:
        # Hosted APIs have no public liveness endpoint; a stored key is the signal.
        return bool(target.api_key)

    async def list_models(self, target: ProviderTarget) -> List[str]:
        return get_models_for_provider(target.kind)

    async def verify_api_key(self, target: ProviderTarget) -> bool:
        if not target.api_key:
            return False

        kwargs = self._completion_kwargs(
            target, [{"role": "user", "content": "ping"}]
        )
        kwargs["max_tokens"] = 1

        try:
            await litellm.acompletion(**kwargs)
        except litellm.AuthenticationError as e:
            logger.warning(f"API key rejected by {target.kind}: {e}")
            return False
        except Exception as e:
            logger.warning(f"Could not verify API key for {target.kind}: {e}")
            return False
        return True

    async def generate(
        self, target: ProviderTarget, text: str, system_message: str
    ) -> str:
        model = format_model_name(target.model, target.kind)

        if supports_system_messages(model):
            messages = [
                {"role": "system", "content": system_message},
                {"role": "user", "content": text},
            ]
        else:
            messages = [{"role": "user", "content": f"{system_message}\n\n{text}"}]
            logger.debug(f"Merged system prompt with user prompt for {model}")

        logger.info(f"Sending text to {target.descriptor.display_name} (model: {model})")

        try:
            response = await litellm.acompletion(
                **self._completion_kwargs(target, messages)
            )
        except litellm.Timeout as e:
            raise ProviderTimeoutError(
                f"{target.descriptor.display_name} request timed out."
            ) from e
        except litellm.APIConnectionError as e:
            raise ProviderConnectionError(
                f"Cannot reach {target.descriptor.display_name}: {e}"
            ) from e
        except litellm.AuthenticationError as e:
            raise ProviderHTTPError(
                f"{target.descriptor.display_name} rejected the API key.",
                getattr(e, "status_code", 401),
            ) from e
        except Exception as e:
            raise ProviderError(f"{target.descriptor.display_name} error: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise ProviderResponseError(
                f"{target.descriptor.display_name} returned an unexpected payload."
            ) from e

        if not isinstance(content, str):
            raise ProviderResponseError(
                f"{target.descriptor.display_name} response did not contain any text."
            )

        logger.info(f"Enhancement complete: {len(text)} -> {len(content)} chars")
        return content
