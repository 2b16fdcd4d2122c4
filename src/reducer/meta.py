from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from pydantic import BaseModel

from common.reporting import WarningHook
from state.keys import normalize_keys
from state.rehydrate import rehydrate_application_state
from state.storage import Storage
from state.sync import sync_state_update


INIT_ACTION = "@ngrx/store/init"

Reducer = Callable[[Any, Any], Any]
MetaReducer = Callable[[Reducer], Reducer]


def _action_type(action: Any) -> Any:
    if isinstance(action, Mapping):
        return action.get("type")
    return getattr(action, "type", None)


def _merge_rehydrated(state: Any, rehydrated: Dict[str, Any]) -> Any:
    """Overlay rehydrated slices on `state`, key by key."""
    if state is None:
        return dict(rehydrated)
    if isinstance(state, BaseModel):
        # Revalidate so plain-dict slices become nested models again
        return type(state).model_validate({**dict(state), **rehydrated})
    if isinstance(state, Mapping):
        return {**state, **rehydrated}
    raise TypeError(f"Cannot merge rehydrated state into {type(state).__name__}")


def storage_sync(
    keys: Iterable[Any],
    *,
    storage: Storage,
    rehydrate: bool = False,
    remove_on_undefined: bool = False,
    on_warning: Optional[WarningHook] = None,
) -> MetaReducer:
    """
    Build a meta-reducer that persists selected state slices to `storage`.

    - Keys are validated immediately; malformed keys raise
      `state.keys.KeyValidationError` before anything touches storage.
    - With `rehydrate=True`, persisted slices are read once when a reducer is
      wrapped. They seed the state when the wrapped reducer is first called
      with `state=None`, and are merged over the reducer's own state on the
      init action.
    - After every call the next state is synced to storage.
    """
    state_keys = normalize_keys(keys, on_warning=on_warning)

    def wrap(reducer: Reducer) -> Reducer:
        rehydrated: Optional[Dict[str, Any]] = (
            rehydrate_application_state(state_keys, storage, on_warning=on_warning) if rehydrate else None
        )

        @functools.wraps(reducer)
        def wrapped(state: Any = None, action: Any = None) -> Any:
            if state is None and rehydrated is not None:
                state = dict(rehydrated)
            if rehydrated and _action_type(action) == INIT_ACTION:
                state = _merge_rehydrated(state, rehydrated)

            next_state = reducer(state, action)
            sync_state_update(next_state, state_keys, storage, remove_on_undefined, on_warning=on_warning)
            return next_state

        return wrapped

    return wrap


def storage_sync_and_clean(
    keys: Iterable[Any],
    *,
    storage: Storage,
    rehydrate: bool = False,
    on_warning: Optional[WarningHook] = None,
) -> MetaReducer:
    """
    `storage_sync` with `remove_on_undefined=True`.

    Suited to state resets such as logout: slices that become undefined are
    removed from storage rather than left behind.
    """
    return storage_sync(
        keys,
        storage=storage,
        rehydrate=rehydrate,
        remove_on_undefined=True,
        on_warning=on_warning,
    )
