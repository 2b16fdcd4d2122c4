from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from common.json_codec import stringify_json
from common.reporting import StorageWarning, WarningHook, resolve_hook

from .keys import normalize_keys
from .models import KeyOptions, PersistKey
from .storage import Storage


_MISSING = object()
_NO_FIELDS = (str, bytes, bytearray, int, float, bool, list, tuple, set, frozenset)


def _read_field(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _filter_slice(source: Any, fields: Sequence[str]) -> Dict[str, Any]:
    # Fields the slice does not carry are left out; scalars and sequences carry none
    out: Dict[str, Any] = {}
    if isinstance(source, _NO_FIELDS):
        return out
    for field in fields:
        if isinstance(source, Mapping):
            if field in source:
                out[field] = source[field]
            continue
        value = getattr(source, field, _MISSING)
        if value is not _MISSING and not callable(value):
            out[field] = value
    return out


def _shape(value: Any, options: Optional[KeyOptions]) -> Any:
    """Apply `serialize`, or failing that `filter`, to a state slice."""
    if options is None:
        return value
    if options.serialize is not None:
        return options.serialize(value)
    if options.filter is not None and value is not None:
        return _filter_slice(value, options.filter)
    return value


def _encode(value: Any, options: Optional[KeyOptions]) -> str:
    if isinstance(value, str):
        text = value
    elif options is not None:
        text = stringify_json(value, options.replacer, options.space)
    else:
        text = stringify_json(value)

    if options is not None and options.has_cipher:
        text = options.encrypt(text)
    return text


def _sync_key(
    state: Any,
    key: PersistKey,
    storage: Storage,
    remove_on_undefined: bool,
    report: WarningHook,
) -> None:
    name = key.name
    try:
        value = _shape(_read_field(state, name), key.options)
        if value is not None:
            storage.set_item(name, _encode(value, key.options))
            return
    except Exception as exc:
        report(
            StorageWarning(
                code="write_failed",
                key=name,
                message=f"Unable to save state for '{name}' to storage",
                error=exc,
            )
        )
        return

    if not remove_on_undefined:
        return
    try:
        storage.remove_item(name)
    except Exception as exc:
        report(
            StorageWarning(
                code="remove_failed",
                key=name,
                message=f"Exception on removing/cleaning undefined '{name}' state",
                error=exc,
            )
        )


def sync_state_update(
    state: Any,
    keys: Iterable[Any],
    storage: Storage,
    remove_on_undefined: bool = False,
    *,
    on_warning: Optional[WarningHook] = None,
) -> None:
    """
    Persist one storage entry per key from the current `state`.

    - A slice is read as `state[name]` for mappings, else `state.name`.
    - `serialize` replaces the slice; otherwise `filter` keeps only the
      listed fields.
    - Strings are stored verbatim; anything else is written as JSON using
      the key's `replacer`/`space`, then encrypted when a cipher pair is set.
    - Undefined slices (missing or None) are removed from storage only when
      `remove_on_undefined` is True.

    Failures for a key are reported through `on_warning` and never raised,
    so the remaining keys are still processed.
    """
    report = resolve_hook(on_warning)
    for key in normalize_keys(keys, on_warning=on_warning):
        _sync_key(state, key, storage, remove_on_undefined, report)
