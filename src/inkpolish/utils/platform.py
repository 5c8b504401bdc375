"""Platform-specific utilities for cross-platform compatibility."""

import platform
import subprocess
from typing import Any, List, Optional


def get_platform() -> str:
    system = platform.system()
    if system == "Darwin":
        return "macos"
    return system.lower()


def get_subprocess_kwargs(**kwargs: Any) -> dict:
    """Default subprocess arguments, hiding the console window on Windows."""
    if get_platform() == "windows":
        kwargs.setdefault("creationflags", getattr(subprocess, "CREATE_NO_WINDOW", 0))
    return kwargs


def get_clipboard_command() -> Optional[List[str]]:
    system = get_platform()
    if system == "linux":
        return ["xclip", "-selection", "clipboard", "-o"]
    elif system == "macos":
        return ["pbpaste"]
    elif system == "windows":
        return ["powershell", "-command", "Get-Clipboard"]
    return None


def get_selection_command() -> Optional[List[str]]:
    # Only X11 exposes the current selection without accessibility APIs.
    if get_platform() == "linux":
        return ["xclip", "-selection", "primary", "-o"]
    return None
