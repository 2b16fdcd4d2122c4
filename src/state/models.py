from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class KeyOptions(BaseModel):
    """
    Per-key persistence options.

    Fields
    - reviver: `(key, value) -> value` applied while parsing on rehydrate;
      the date reviver is used when omitted.
    - deserialize: applied to the parsed value on rehydrate.
    - serialize: applied to the slice on sync; when set, `filter` is ignored.
    - filter: top-level fields of the slice to persist, in this order.
    - encrypt / decrypt: text transforms, effective only as a callable pair.
    - replacer / space: JSON formatting hooks used on sync only.

    Notes
    - `encrypt`/`decrypt` accept any value here. A half-configured or
      non-callable pair is dropped by the key normalizer with a warning.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    reviver: Optional[Callable[[str, Any], Any]] = None
    deserialize: Optional[Callable[[Any], Any]] = None
    serialize: Optional[Callable[[Any], Any]] = None
    filter: Optional[List[str]] = None
    encrypt: Any = None
    decrypt: Any = None
    replacer: Optional[Union[Callable[[str, Any], Any], List[str]]] = None
    space: Optional[Union[int, str]] = None

    @property
    def has_cipher(self) -> bool:
        return callable(self.encrypt) and callable(self.decrypt)


class KeyKind(str, Enum):
    BARE = "bare"
    REVIVER = "reviver"
    OPTIONS = "options"


@dataclass(frozen=True)
class PersistKey:
    """Canonical persistence key produced by `state.keys.normalize_keys`."""

    name: str
    kind: KeyKind = KeyKind.BARE
    reviver: Optional[Callable[[str, Any], Any]] = None
    options: Optional[KeyOptions] = None
