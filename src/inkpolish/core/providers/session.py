"""
Provider selection state shared by the enhancement pipeline.

ProviderSession owns the selected provider, per-provider model choices,
the API key and its validity, and the connectivity cache. All state is
guarded by one lock; dispatch reads go through ``snapshot()`` so that a
settings change cannot retarget a request that is already in flight.
"""

import asyncio
import threading
from typing import Dict, List, Optional, Set

from ...config import REQUEST_TIMEOUT_SECONDS
from ...utils.logger import get_logger
from ..errors import CustomError, InvalidResponse, NetworkError, NotConfigured
from ..events import APIKeyChanged, EventBus, SettingsChanged
from ..settings import SettingsKeys, SettingsStore
from .base import (
    ProviderDescriptor,
    ProviderError,
    ProviderResponseError,
    ProviderTarget,
    ProviderTimeoutError,
)
from .catalog import ProviderCatalog, ProviderKind

logger = get_logger(__name__)


class ProviderSession:
    def __init__(
        self,
        catalog: ProviderCatalog,
        store: SettingsStore,
        events: EventBus,
        request_timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self._catalog = catalog
        self._store = store
        self._events = events
        self.request_timeout = request_timeout

        self._lock = threading.RLock()
        self._background_tasks: Set[asyncio.Task] = set()

        self._selected_models: Dict[str, str] = {}
        self._available_models: Dict[str, List[str]] = {}
        self._connected: Dict[str, bool] = {}
        self._api_key: Optional[str] = None
        self._is_api_key_valid = False

        saved_kind = store.get(SettingsKeys.SELECTED_PROVIDER)
        if saved_kind in catalog:
            self._selected_kind = str(saved_kind)
        elif ProviderKind.OLLAMA in catalog:
            self._selected_kind = ProviderKind.OLLAMA.value
        else:
            kinds = catalog.kinds()
            if not kinds:
                raise ValueError("Provider catalog is empty")
            self._selected_kind = kinds[0]

        for kind in catalog.kinds():
            saved_model = store.get(SettingsKeys.selected_model(kind))
            if saved_model:
                self._selected_models[kind] = str(saved_model)

        self._load_key_state(catalog.descriptor(self._selected_kind))

        logger.info(f"Provider session initialized with provider: {self._selected_kind}")

    # -- read access ---------------------------------------------------------

    @property
    def selected_kind(self) -> str:
        with self._lock:
            return self._selected_kind

    @property
    def descriptor(self) -> ProviderDescriptor:
        with self._lock:
            return self._catalog.descriptor(self._selected_kind)

    @property
    def api_key(self) -> Optional[str]:
        with self._lock:
            return self._api_key

    @property
    def is_api_key_valid(self) -> bool:
        with self._lock:
            return self._is_api_key_valid

    @property
    def is_connected(self) -> bool:
        with self._lock:
            return self._connected.get(self._selected_kind, False)

    @property
    def is_configured(self) -> bool:
        with self._lock:
            if not self.descriptor.requires_api_key:
                return True
            return bool(self._api_key) and self._is_api_key_valid

    def base_url(self) -> str:
        with self._lock:
            return self._base_url_for(self.descriptor)

    def current_model(self) -> str:
        with self._lock:
            return self._resolve_model(self.descriptor)

    def available_models(self) -> List[str]:
        with self._lock:
            return list(self._available_models.get(self._selected_kind, []))

    def connected_providers(self) -> List[str]:
        connected = []
        with self._lock:
            for descriptor in self._catalog.descriptors():
                if descriptor.is_local:
                    if self._connected.get(descriptor.kind, False):
                        connected.append(descriptor.kind)
                elif descriptor.requires_api_key:
                    if self._store.get(SettingsKeys.api_key(descriptor.kind)):
                        connected.append(descriptor.kind)
        return connected

    def snapshot(self) -> ProviderTarget:
        with self._lock:
            descriptor = self.descriptor
            return ProviderTarget(
                descriptor=descriptor,
                base_url=self._base_url_for(descriptor),
                model=self._resolve_model(descriptor),
                api_key=self._api_key,
            )

    # -- mutation ------------------------------------------------------------

    def select_provider(self, kind: str) -> None:
        descriptor = self._catalog.descriptor(kind)

        with self._lock:
            self._selected_kind = descriptor.kind
            self._store.set(SettingsKeys.SELECTED_PROVIDER, descriptor.kind)
            self._load_key_state(descriptor)

        logger.info(f"Selected provider: {descriptor.display_name}")

        if not descriptor.requires_api_key and descriptor.is_local:
            self._schedule_refresh()

        self._events.publish(SettingsChanged())

    def select_model(self, name: str) -> None:
        if not name:
            return

        with self._lock:
            kind = self._selected_kind
            self._selected_models[kind] = name
            self._store.set(SettingsKeys.selected_model(kind), name)

        logger.info(f"Selected model for {kind}: {name}")
        self._events.publish(SettingsChanged())

    def update_base_url(self, url: str) -> None:
        url = url.strip()
        with self._lock:
            descriptor = self.descriptor
            key = SettingsKeys.base_url(descriptor.kind)
            if url:
                self._store.set(key, url)
            else:
                self._store.remove(key)
            self._connected[descriptor.kind] = False
            self._available_models.pop(descriptor.kind, None)

        logger.info(f"Base URL for {descriptor.kind} set to {url or descriptor.base_url}")

        if descriptor.is_local:
            self._schedule_refresh()

        self._events.publish(SettingsChanged())

    async def save_api_key(self, key: str) -> bool:
        target = self.snapshot()
        descriptor = target.descriptor

        if not descriptor.requires_api_key:
            return True

        key = key.strip()
        is_valid = False
        if key:
            client = self._catalog.client(descriptor.kind)
            try:
                is_valid = await client.verify_api_key(target.with_api_key(key))
            except ProviderError as e:
                logger.warning(f"API key verification failed for {descriptor.kind}: {e}")

        with self._lock:
            still_selected = self._selected_kind == descriptor.kind
            if is_valid:
                self._store.set(SettingsKeys.api_key(descriptor.kind), key)
                if still_selected:
                    self._api_key = key
                    self._is_api_key_valid = True
            elif still_selected:
                self._is_api_key_valid = False

        if is_valid:
            logger.info(f"API key saved for {descriptor.kind}")
            self._events.publish(APIKeyChanged(kind=descriptor.kind))
        else:
            logger.warning(f"API key rejected for {descriptor.kind}")

        return is_valid

    def clear_api_key(self) -> None:
        with self._lock:
            descriptor = self.descriptor
            if not descriptor.requires_api_key:
                return
            self._api_key = None
            self._is_api_key_valid = False
            self._store.remove(SettingsKeys.api_key(descriptor.kind))

        logger.info(f"API key cleared for {descriptor.kind}")
        self._events.publish(APIKeyChanged(kind=descriptor.kind))

    # -- network -------------------------------------------------------------

    async def check_connection(self) -> bool:
        target = self.snapshot()
        client = self._catalog.client(target.kind)
        connected = await client.check_connection(target)

        with self._lock:
            self._connected[target.kind] = connected

        logger.info(
            f"{target.descriptor.display_name} is "
            f"{'reachable' if connected else 'unreachable'} at {target.base_url}"
        )
        return connected

    async def refresh_models(self) -> List[str]:
        target = self.snapshot()
        client = self._catalog.client(target.kind)
        models = await client.list_models(target)

        with self._lock:
            self._available_models[target.kind] = list(models)

        logger.debug(f"Found {len(models)} models for {target.kind}")
        return list(models)

    async def refresh(self) -> None:
        if not await self.check_connection():
            return
        try:
            await self.refresh_models()
        except ProviderError as e:
            logger.warning(f"Failed to list models: {e}")

    async def send(
        self,
        text: str,
        system_message: str,
        target: Optional[ProviderTarget] = None,
    ) -> str:
        target = target or self.snapshot()

        if target.descriptor.requires_api_key and not target.api_key:
            raise NotConfigured()

        client = self._catalog.client(target.kind)
        logger.info(
            f"Dispatching request to {target.descriptor.display_name} "
            f"(model: {target.model}, endpoint: {target.base_url or 'default'})"
        )

        try:
            return await asyncio.wait_for(
                client.generate(target, text, system_message),
                timeout=self.request_timeout,
            )
        except (asyncio.TimeoutError, ProviderTimeoutError) as e:
            logger.error(f"Request to {target.kind} timed out: {e}")
            raise NetworkError() from e
        except ProviderResponseError as e:
            logger.error(f"Malformed response from {target.kind}: {e}")
            raise InvalidResponse() from e
        except ProviderError as e:
            logger.error(f"Provider {target.kind} failed: {e}")
            raise CustomError(str(e)) from e

    # -- helpers -------------------------------------------------------------

    def _load_key_state(self, descriptor: ProviderDescriptor) -> None:
        if descriptor.requires_api_key:
            saved_key = self._store.get(SettingsKeys.api_key(descriptor.kind))
            self._api_key = saved_key or None
            self._is_api_key_valid = bool(saved_key)
        else:
            self._api_key = None
            self._is_api_key_valid = True

    def _base_url_for(self, descriptor: ProviderDescriptor) -> str:
        override = self._store.get(SettingsKeys.base_url(descriptor.kind))
        return str(override) if override else descriptor.base_url

    def _resolve_model(self, descriptor: ProviderDescriptor) -> str:
        selected = self._selected_models.get(descriptor.kind, "")
        if selected:
            available = self._available_models.get(descriptor.kind, [])
            # An unlisted provider has nothing to validate against yet.
            if not descriptor.enumerates_models or not available or selected in available:
                return selected
        return descriptor.default_model

    def _schedule_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping background refresh")
            return

        task = loop.create_task(self.refresh())
        self._background_tasks.add(task)
        task.add_done_callback(self._on_refresh_done)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background refresh failed: {error}", exc_info=error)

    async def wait_for_background_tasks(self) -> None:
        if self._background_tasks:
            # Failures are already logged by _on_refresh_done.
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
