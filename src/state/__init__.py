"""
Key normalization, rehydration and sync of persisted state slices.

Raw keys are resolved once into `PersistKey` entries, then read back by
`rehydrate_application_state` and written by `sync_state_update`.
"""

from .keys import KeyValidationError, normalize_keys
from .models import KeyKind, KeyOptions, PersistKey
from .rehydrate import rehydrate_application_state
from .storage import FileStorage, MemoryStorage, Storage, storage_from_env
from .sync import sync_state_update

__all__ = [
    "FileStorage",
    "KeyKind",
    "KeyOptions",
    "KeyValidationError",
    "MemoryStorage",
    "PersistKey",
    "Storage",
    "normalize_keys",
    "rehydrate_application_state",
    "storage_from_env",
    "sync_state_update",
]
