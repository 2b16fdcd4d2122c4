from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from common.json_codec import Reviver, date_reviver, parse_json
from common.reporting import WarningHook

from .keys import normalize_keys
from .models import KeyKind, PersistKey
from .storage import Storage


logger = logging.getLogger(__name__)


def _read_options(
    key: PersistKey,
) -> Tuple[Reviver, Optional[Callable[[Any], Any]], Optional[Callable[[str], str]]]:
    """Return the `(reviver, deserialize, decrypt)` that apply when reading `key`."""
    if key.kind is KeyKind.REVIVER and key.reviver is not None:
        return key.reviver, None, None

    options = key.options
    if key.kind is not KeyKind.OPTIONS or options is None:
        return date_reviver, None, None

    reviver = options.reviver or date_reviver
    decrypt = options.decrypt if options.has_cipher else None
    return reviver, options.deserialize, decrypt


def rehydrate_application_state(
    keys: Iterable[Any],
    storage: Storage,
    *,
    on_warning: Optional[WarningHook] = None,
) -> Dict[str, Any]:
    """
    Read previously persisted slices back from `storage`.

    For each key: read the stored text, decrypt it when a cipher pair is
    configured, parse it as JSON with the key's reviver (dates are revived by
    default) and run `deserialize` on the result.

    Keys with nothing stored contribute nothing to the returned mapping.
    Later keys overwrite earlier ones sharing the same name.

    Raises
    - Any error from the storage read, decryption or JSON parsing.
    """
    state: Dict[str, Any] = {}
    for key in normalize_keys(keys, on_warning=on_warning):
        reviver, deserialize, decrypt = _read_options(key)

        raw = storage.get_item(key.name)
        if not raw:
            continue

        if decrypt is not None:
            raw = decrypt(raw)
        value = parse_json(raw, reviver)
        state[key.name] = deserialize(value) if deserialize is not None else value

    logger.debug("Rehydrated %d key(s) from storage: %s", len(state), ", ".join(state))
    return state
