"""
Readers for context text outside the transcript.

Both readers shell out to the platform clipboard tools and return None
whenever the text is unavailable; the enhancement engine treats that the
same as an empty clipboard.
"""

import subprocess
from typing import Callable, List, Optional

from ...config import CONTEXT_READ_TIMEOUT_SECONDS
from ...utils.logger import get_logger
from ...utils.platform import (
    get_clipboard_command,
    get_selection_command,
    get_subprocess_kwargs,
)

logger = get_logger(__name__)

ContextReader = Callable[[], Optional[str]]


def _run_read_command(command: Optional[List[str]], timeout: float) -> Optional[str]:
    if not command:
        return None
    try:
        result = subprocess.run(
            command,
            **get_subprocess_kwargs(capture_output=True, text=True, timeout=timeout),
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        logger.debug(f"Context read via {command[0]} failed: {e}")
        return None

    if result.returncode != 0:
        return None
    text = result.stdout.strip()
    return text or None


class ClipboardReader:
    def __init__(self, timeout: float = CONTEXT_READ_TIMEOUT_SECONDS):
        self.timeout = timeout

    def __call__(self) -> Optional[str]:
        return _run_read_command(get_clipboard_command(), self.timeout)


class SelectionReader:
    def __init__(self, timeout: float = CONTEXT_READ_TIMEOUT_SECONDS):
        self.timeout = timeout

    def __call__(self) -> Optional[str]:
        return _run_read_command(get_selection_command(), self.timeout)


def no_context() -> Optional[str]:
    return None
