from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageWarning:
    """
    Structured report for a non-fatal persistence problem.

    Codes
    - cipher_missing: only one of encrypt/decrypt was configured for a key.
    - cipher_not_callable: encrypt or decrypt is present but not callable.
    - write_failed: serializing, encrypting or writing a slice raised.
    - remove_failed: removing an undefined slice raised.
    """

    code: str
    key: str
    message: str
    error: Optional[BaseException] = None


WarningHook = Callable[[StorageWarning], None]


def log_warning(warning: StorageWarning) -> None:
    """Default hook: forward the warning to the module logger."""
    logger.warning(
        "%s [key=%s, code=%s]",
        warning.message,
        warning.key,
        warning.code,
        exc_info=warning.error,
    )


def resolve_hook(hook: Optional[WarningHook]) -> WarningHook:
    return hook if hook is not None else log_warning


def collect_warnings() -> Tuple[List[StorageWarning], WarningHook]:
    """Return a list and a hook that appends every reported warning to it."""
    collected: List[StorageWarning] = []
    return collected, collected.append
