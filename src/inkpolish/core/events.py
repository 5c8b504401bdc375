"""
Typed publish/subscribe bus for settings and enhancement changes.

Observers (UI, shortcut handlers) subscribe to an event class and are
called synchronously on the publishing thread, in subscription order.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type, TypeVar
from uuid import UUID

from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SettingsChanged:
    pass


@dataclass(frozen=True)
class EnhancementToggled:
    enabled: bool


@dataclass(frozen=True)
class PromptSelectionChanged:
    prompt_id: Optional[UUID]


@dataclass(frozen=True)
class APIKeyChanged:
    kind: str


E = TypeVar("E")
Handler = Callable[[E], None]


class EventBus:
    def __init__(self):
        self._handlers: Dict[type, List[Callable]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[E], handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, event: object) -> None:
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Event handler {handler!r} failed for {type(event).__name__}"
                )

    def subscriber_count(self, event_type: type) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, []))
