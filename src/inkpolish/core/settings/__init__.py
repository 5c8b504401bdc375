from .settings import (
    JsonSettingsStore,
    MemorySettingsStore,
    SettingsKeys,
    SettingsStore,
    get_config_dir,
)

__all__ = [
    "JsonSettingsStore",
    "MemorySettingsStore",
    "SettingsKeys",
    "SettingsStore",
    "get_config_dir",
]
