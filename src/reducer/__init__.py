"""Meta-reducers wiring rehydrate and sync around a reducer."""

from .meta import INIT_ACTION, storage_sync, storage_sync_and_clean

__all__ = ["INIT_ACTION", "storage_sync", "storage_sync_and_clean"]
