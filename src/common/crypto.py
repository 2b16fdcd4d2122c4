from __future__ import annotations

import os
from typing import Callable, Tuple

from cryptography.fernet import Fernet, InvalidToken


ENV_FERNET_KEY = "STATE_SYNC_FERNET_KEY"

CipherPair = Tuple[Callable[[str], str], Callable[[str], str]]


def _to_fernet(key: str | bytes) -> Fernet:
    """Construct a Fernet instance from a user-provided key.

    The key must be a URL-safe base64-encoded 32-byte key (str or bytes),
    as returned by `cryptography.fernet.Fernet.generate_key()`.
    """
    if isinstance(key, str):
        key_bytes = key.encode("utf-8")
    else:
        key_bytes = key
    return Fernet(key_bytes)


def fernet_hooks(key: str | bytes) -> CipherPair:
    """
    Build an `(encrypt, decrypt)` pair of text transforms backed by Fernet.

    Both sides take and return `str` so the pair can be dropped straight into
    a key's options: `{"session": {"encrypt": enc, "decrypt": dec}}`.
    """
    fernet = _to_fernet(key)

    def encrypt(text: str) -> str:
        return fernet.encrypt(text.encode("utf-8")).decode("ascii")

    def decrypt(token: str) -> str:
        try:
            return fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as ex:
            raise ValueError("Failed to decrypt state: invalid Fernet token") from ex

    return encrypt, decrypt


def fernet_hooks_from_env() -> CipherPair:
    key = os.environ.get(ENV_FERNET_KEY)
    if not key:
        raise RuntimeError(f"Missing required environment variable for state encryption: {ENV_FERNET_KEY}")
    return fernet_hooks(key)
