"""
Settings persistence with JSON storage.

The enhancement core only sees a small key-value protocol; the JSON
store keeps the whole document in memory and rewrites the file on
every mutation. Uses platformdirs for cross-platform directory
resolution.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from platformdirs import user_config_path

from ...utils.logger import get_logger

logger = get_logger(__name__)

APP_NAME = "inkpolish"


def get_config_dir() -> Path:
    return user_config_path(APP_NAME, ensure_exists=True)


class SettingsKeys:
    SELECTED_PROVIDER = "selected_ai_provider"
    ENHANCEMENT_ENABLED = "is_ai_enhancement_enabled"
    USE_CLIPBOARD_CONTEXT = "use_clipboard_context"
    SELECTED_PROMPT_ID = "selected_prompt_id"
    CUSTOM_PROMPTS = "custom_prompts"

    @staticmethod
    def api_key(kind: str) -> str:
        return f"{kind}_api_key"

    @staticmethod
    def selected_model(kind: str) -> str:
        return f"{kind}_selected_model"

    @staticmethod
    def base_url(kind: str) -> str:
        return f"{kind}_base_url"


class SettingsStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemorySettingsStore:
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)


class JsonSettingsStore(MemorySettingsStore):
    def __init__(self, path: Optional[Path] = None):
        self._path = path or (get_config_dir() / "settings.json")
        super().__init__(self._load(self._path))

    @property
    def path(self) -> Path:
        return self._path

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Could not load settings: {e}. Using defaults.")
            return {}

        if not isinstance(data, dict):
            logger.warning("Settings root is not an object, using defaults")
            return {}
        return data

    def set(self, key: str, value: Any) -> None:
        super().set(key, value)
        self.save()

    def remove(self, key: str) -> None:
        super().remove(key)
        self.save()

    def save(self) -> None:
        data = self.to_dict()
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
