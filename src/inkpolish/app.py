"""Application wiring."""

from dataclasses import dataclass
from typing import Optional

from inkpolish.config import RATE_LIMIT_INTERVAL_SECONDS, REQUEST_TIMEOUT_SECONDS
from inkpolish.core.events import EventBus
from inkpolish.core.input import ClipboardReader, ContextReader, SelectionReader
from inkpolish.core.providers import (
    ProviderCatalog,
    ProviderSession,
    create_default_catalog,
)
from inkpolish.core.settings import JsonSettingsStore, SettingsStore
from inkpolish.core.transcript_processor import (
    EnhancementEngine,
    PromptStore,
    RateLimiter,
    load_predefined_templates,
)
from inkpolish.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    store: SettingsStore
    events: EventBus
    catalog: ProviderCatalog
    session: ProviderSession
    prompts: PromptStore
    engine: EnhancementEngine

    async def start(self) -> None:
        """Probe local providers once an event loop is available."""
        if self.session.descriptor.is_local:
            await self.session.refresh()

    def shutdown(self) -> None:
        self.engine.close()


def build_services(
    store: Optional[SettingsStore] = None,
    catalog: Optional[ProviderCatalog] = None,
    events: Optional[EventBus] = None,
    clipboard: Optional[ContextReader] = None,
    selection: Optional[ContextReader] = None,
    rate_limit_interval: float = RATE_LIMIT_INTERVAL_SECONDS,
    request_timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> ServiceContainer:
    store = store if store is not None else JsonSettingsStore()
    events = events or EventBus()
    catalog = catalog or create_default_catalog(timeout=request_timeout)

    session = ProviderSession(
        catalog=catalog,
        store=store,
        events=events,
        request_timeout=request_timeout,
    )

    prompts = PromptStore(store=store, events=events)
    prompts.reconcile_predefined(load_predefined_templates())

    engine = EnhancementEngine(
        session=session,
        prompts=prompts,
        store=store,
        events=events,
        rate_limiter=RateLimiter(min_interval=rate_limit_interval),
        clipboard=clipboard or ClipboardReader(),
        selection=selection or SelectionReader(),
    )

    logger.info(
        f"Services ready: provider={session.selected_kind}, "
        f"prompts={len(prompts.all_prompts())}"
    )

    return ServiceContainer(
        store=store,
        events=events,
        catalog=catalog,
        session=session,
        prompts=prompts,
        engine=engine,
    )
