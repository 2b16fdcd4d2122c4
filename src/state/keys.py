from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from common.reporting import StorageWarning, WarningHook, resolve_hook

from .models import KeyKind, KeyOptions, PersistKey


class KeyValidationError(TypeError):
    """Raised at setup when a key entry cannot be resolved to a string name."""

    def __init__(self, got_type: str, message: Optional[str] = None) -> None:
        self.got_type = got_type
        super().__init__(message or f"Unknown key parameter type: expected str, got {got_type}")


def _type_name(value: Any) -> str:
    return type(value).__name__


def _require_name(value: Any) -> str:
    if not isinstance(value, str):
        raise KeyValidationError(_type_name(value))
    return value


def _validate_options(name: str, raw: Any, data: dict) -> KeyOptions:
    try:
        return KeyOptions.model_validate(data)
    except ValidationError as ex:
        raise KeyValidationError(
            _type_name(raw), f"Invalid options for key '{name}': {ex}"
        ) from ex


def _check_cipher(name: str, options: KeyOptions, report: WarningHook) -> KeyOptions:
    enc, dec = options.encrypt, options.decrypt
    # Falsy values count as absent
    if not enc and not dec:
        return options
    if options.has_cipher:
        return options

    if not enc or not dec:
        code = "cipher_missing"
        message = f"Either encrypt or decrypt function is not present on '{name}' key options"
    else:
        code = "cipher_not_callable"
        message = f"Either encrypt or decrypt is not a function on '{name}' key options"
    report(StorageWarning(code=code, key=name, message=f"{message}; encryption disabled"))
    return options.model_copy(update={"encrypt": None, "decrypt": None})


def _with_options(name: str, raw: Any, report: WarningHook) -> PersistKey:
    if raw is None:
        return PersistKey(name=name)
    if isinstance(raw, KeyOptions):
        options = raw
    elif callable(raw):
        return PersistKey(name=name, kind=KeyKind.REVIVER, reviver=raw)
    elif isinstance(raw, Mapping):
        options = _validate_options(name, raw, dict(raw))
    elif isinstance(raw, (list, tuple)):
        # Bare sequence is shorthand for {"filter": [...]}
        options = _validate_options(name, raw, {"filter": list(raw)})
    else:
        raise KeyValidationError(
            _type_name(raw), f"Unknown options type for key '{name}': got {_type_name(raw)}"
        )
    return PersistKey(name=name, kind=KeyKind.OPTIONS, options=_check_cipher(name, options, report))


def _normalize_entry(entry: Any, report: WarningHook) -> PersistKey:
    if isinstance(entry, PersistKey):
        return entry
    if isinstance(entry, Mapping):
        if len(entry) != 1:
            raise KeyValidationError(
                _type_name(entry), f"Key mapping must hold exactly one entry, got {len(entry)}"
            )
        name, raw = next(iter(entry.items()))
        return _with_options(_require_name(name), raw, report)
    return PersistKey(name=_require_name(entry))


def normalize_keys(keys: Iterable[Any], *, on_warning: Optional[WarningHook] = None) -> List[PersistKey]:
    """
    Validate raw persistence keys and resolve them into `PersistKey` entries.

    Accepted entries
    - "name"
    - {"name": reviver}                 (callable, rehydrate only)
    - {"name": {"filter": [...], ...}}  (options mapping or `KeyOptions`)
    - {"name": ["a", "b"]}              (shorthand for a filter)

    Order, length and duplicates are preserved. Entries that are already
    `PersistKey` pass through unchanged.

    Raises
    - KeyValidationError when a name is not a string or options are malformed.
    """
    if isinstance(keys, (str, bytes, Mapping)):
        raise KeyValidationError(
            _type_name(keys), f"Keys must be a sequence of key entries, got {_type_name(keys)}"
        )
    report = resolve_hook(on_warning)
    return [_normalize_entry(entry, report) for entry in keys]
