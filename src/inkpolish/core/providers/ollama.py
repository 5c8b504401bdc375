"""Ollama provider implementation (local HTTP inference server)."""

from typing import Any, List, Optional

import httpx

from ...utils.logger import get_logger
from .base import (
    ProviderConnectionError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTarget,
    ProviderTimeoutError,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaClient:
    def __init__(
        self,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    def _client(self, target: ProviderTarget, read_timeout: float) -> httpx.AsyncClient:
        timeout = httpx.Timeout(connect=5.0, read=read_timeout, write=10.0, pool=5.0)
        return httpx.AsyncClient(
            base_url=target.base_url.rstrip("/"),
            timeout=timeout,
            transport=self._transport,
        )

    async def check_connection(self, target: ProviderTarget) -> bool:
        try:
            async with self._client(target, read_timeout=5.0) as client:
                response = await client.get("/")
        except httpx.HTTPError as e:
            logger.debug(f"Ollama liveness probe failed at {target.base_url}: {e}")
            return False
        return response.status_code < 400

    async def list_models(self, target: ProviderTarget) -> List[str]:
        data = await self._request(target, "GET", "/api/tags", read_timeout=10.0)

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise ProviderResponseError("Ollama returned an unexpected model list.")

        return [
            item["name"]
            for item in models
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        ]

    async def verify_api_key(self, target: ProviderTarget) -> bool:
        # Ollama has no authentication.
        return True

    async def generate(
        self, target: ProviderTarget, text: str, system_message: str
    ) -> str:
        payload = {
            "model": target.model,
            "prompt": text,
            "system": system_message,
            "stream": False,
        }
        logger.info(f"Sending text to Ollama (model: {target.model})")

        data = await self._request(
            target, "POST", "/api/generate", json=payload, read_timeout=self.timeout
        )

        result = data.get("response") if isinstance(data, dict) else None
        if not isinstance(result, str):
            raise ProviderResponseError("Ollama response did not contain any text.")

        logger.info(f"Ollama enhancement completed ({len(result)} characters)")
        return result

    async def _request(
        self,
        target: ProviderTarget,
        method: str,
        path: str,
        read_timeout: float,
        json: Optional[dict] = None,
    ) -> Any:
        try:
            async with self._client(target, read_timeout) as client:
                response = await client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"Ollama request timed out after {read_timeout:g}s."
            ) from e
        except httpx.ConnectError as e:
            raise ProviderConnectionError(
                f"Cannot connect to Ollama at {target.base_url}. "
                "Make sure Ollama is running."
            ) from e
        except httpx.HTTPError as e:
            raise ProviderConnectionError(f"Ollama request failed: {e}") from e

        if response.status_code >= 400:
            raise ProviderHTTPError(
                _error_message(response, target), response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError("Ollama returned malformed JSON.") from e


def _error_message(response: httpx.Response, target: ProviderTarget) -> str:
    detail = ""
    try:
        body = response.json()
        if isinstance(body, dict):
            detail = str(body.get("error") or "")
    except ValueError:
        detail = response.text.strip()

    if response.status_code == 404 and "model" in detail.lower():
        return f"Model '{target.model}' is not available in Ollama. Pull it first."

    if detail:
        return f"Ollama error ({response.status_code}): {detail}"
    return f"Ollama returned HTTP {response.status_code}."
