"""
Enhancement pipeline: prompt + context -> provider -> filtered text.

EnhancementEngine is the single entry point used by callers holding
freshly transcribed text. It resolves the active prompt, builds the
system message (optionally grounded with the current selection or the
clipboard), waits for the rate limiter, dispatches through the provider
session against a frozen snapshot of its configuration, and filters the
reply.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from ...utils.logger import get_logger
from ..errors import CustomError, EnhancementError, EnhancementFailed, NotConfigured
from ..events import APIKeyChanged, EnhancementToggled, EventBus, SettingsChanged
from ..input import ContextReader, no_context
from ..providers import ProviderError, ProviderSession, ProviderTarget
from ..settings import SettingsKeys, SettingsStore
from .output_filter import OutputFilter
from .prompts import (
    ASSISTANT_MODE_PROMPT,
    ASSISTANT_PROMPT_ID,
    CUSTOM_PROMPT_TEMPLATE,
    DEFAULT_PROMPT_ID,
    PromptStore,
)
from .rate_limiter import RateLimiter

logger = get_logger(__name__)


@dataclass(frozen=True)
class EnhancementRequest:
    input_text: str
    system_message: str
    target: ProviderTarget
    issued_at: datetime

    @property
    def user_message(self) -> str:
        return format_transcript(self.input_text)


def format_transcript(text: str) -> str:
    return f"\n<TRANSCRIPT>\n{text}\n</TRANSCRIPT>"


def context_section(body: str) -> str:
    return f"\n\n<CONTEXT_INFORMATION>\n\n{body}\n</CONTEXT_INFORMATION>"


class EnhancementEngine:
    def __init__(
        self,
        session: ProviderSession,
        prompts: PromptStore,
        store: SettingsStore,
        events: EventBus,
        rate_limiter: Optional[RateLimiter] = None,
        clipboard: ContextReader = no_context,
        selection: ContextReader = no_context,
    ):
        self._session = session
        self._prompts = prompts
        self._store = store
        self._events = events
        self._rate_limiter = rate_limiter or RateLimiter()
        self._clipboard = clipboard
        self._selection = selection

        self._enabled = bool(store.get(SettingsKeys.ENHANCEMENT_ENABLED, False))
        self._use_clipboard_context = bool(
            store.get(SettingsKeys.USE_CLIPBOARD_CONTEXT, False)
        )

        if self._enabled and self._prompts.active_prompt() is None:
            self._select_first_prompt()

        self._unsubscribe = events.subscribe(APIKeyChanged, self._on_api_key_changed)

    # -- settings ------------------------------------------------------------

    @property
    def session(self) -> ProviderSession:
        return self._session

    @property
    def prompts(self) -> PromptStore:
        return self._prompts

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def is_configured(self) -> bool:
        return self._session.is_configured

    @property
    def is_enhancement_enabled(self) -> bool:
        return self._enabled

    @is_enhancement_enabled.setter
    def is_enhancement_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)
        self._store.set(SettingsKeys.ENHANCEMENT_ENABLED, self._enabled)

        if self._enabled and self._prompts.active_prompt() is None:
            self._select_first_prompt()

        logger.info(f"AI enhancement {'enabled' if self._enabled else 'disabled'}")
        self._events.publish(SettingsChanged())
        self._events.publish(EnhancementToggled(enabled=self._enabled))

    @property
    def use_clipboard_context(self) -> bool:
        return self._use_clipboard_context

    @use_clipboard_context.setter
    def use_clipboard_context(self, enabled: bool) -> None:
        self._use_clipboard_context = bool(enabled)
        self._store.set(SettingsKeys.USE_CLIPBOARD_CONTEXT, self._use_clipboard_context)

    def select_prompt_at(self, index: int) -> bool:
        prompts = self._prompts.all_prompts()
        if not 0 <= index < len(prompts):
            return False

        if not self._enabled:
            self.is_enhancement_enabled = True
        self._prompts.set_active(prompts[index].id)
        return True

    def _select_first_prompt(self) -> None:
        prompts = self._prompts.all_prompts()
        if prompts:
            self._prompts.set_active(prompts[0].id)

    def _on_api_key_changed(self, event: APIKeyChanged) -> None:
        if self._enabled and not self._session.is_configured:
            logger.warning(f"API key for {event.kind} is no longer valid, disabling enhancement")
            self.is_enhancement_enabled = False

    def close(self) -> None:
        self._unsubscribe()

    # -- pipeline ------------------------------------------------------------

    async def build_system_message(self, use_clipboard_context: Optional[bool] = None) -> str:
        if use_clipboard_context is None:
            use_clipboard_context = self._use_clipboard_context
        prompt = self._prompts.active_prompt()

        if prompt is not None and prompt.id == ASSISTANT_PROMPT_ID:
            selected_text = await asyncio.to_thread(self._selection)
            if selected_text:
                return prompt.prompt_text + context_section(
                    f"Selected Text: {selected_text}"
                )

        context = ""
        if use_clipboard_context:
            clipboard_text = await asyncio.to_thread(self._clipboard)
            if clipboard_text:
                context = context_section(
                    f"Available Clipboard Context: {clipboard_text}"
                )

        if prompt is None:
            default_prompt = self._prompts.get_prompt(DEFAULT_PROMPT_ID)
            if default_prompt is not None:
                return (
                    CUSTOM_PROMPT_TEMPLATE.format(instructions=default_prompt.prompt_text)
                    + context
                )
            return ASSISTANT_MODE_PROMPT + context

        if prompt.id == ASSISTANT_PROMPT_ID:
            return prompt.prompt_text + context

        return CUSTOM_PROMPT_TEMPLATE.format(instructions=prompt.prompt_text) + context

    async def enhance(
        self, text: str, use_clipboard_context: Optional[bool] = None
    ) -> Tuple[str, float]:
        """
        Enhance ``text`` and return it with the elapsed time in seconds.

        ``use_clipboard_context`` overrides the saved setting for this call
        only; None uses the saved setting.
        """
        if not text:
            return "", 0.0

        start_time = time.perf_counter()

        if not self._session.is_configured:
            raise NotConfigured()

        try:
            system_message = await self.build_system_message(use_clipboard_context)
            await self._rate_limiter.acquire()

            request = EnhancementRequest(
                input_text=text,
                system_message=system_message,
                target=self._session.snapshot(),
                issued_at=datetime.now(timezone.utc),
            )

            logger.debug(f"AI Enhancement - System Message: {request.system_message}")
            logger.debug(f"AI Enhancement - User Message: {request.user_message}")

            raw_result = await self._session.send(
                request.user_message, request.system_message, target=request.target
            )
        except EnhancementError:
            raise
        except ProviderError as e:
            raise CustomError(str(e)) from e
        except Exception as e:
            logger.exception(f"AI enhancement failed: {e}")
            raise EnhancementFailed() from e

        result = OutputFilter.filter(raw_result)
        duration = time.perf_counter() - start_time

        logger.info(
            f"Enhancement complete in {duration:.2f}s: {len(text)} -> {len(result)} chars"
        )
        return result, duration
