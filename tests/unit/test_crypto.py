from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from common.crypto import fernet_hooks, fernet_hooks_from_env
from state.rehydrate import rehydrate_application_state
from state.sync import sync_state_update


def test_fernet_hooks_round_trip():
    encrypt, decrypt = fernet_hooks(Fernet.generate_key())
    token = encrypt('{"a":1}')
    assert token != '{"a":1}'
    assert decrypt(token) == '{"a":1}'


def test_fernet_hooks_accept_str_key():
    encrypt, decrypt = fernet_hooks(Fernet.generate_key().decode("ascii"))
    assert decrypt(encrypt("hello")) == "hello"


def test_decrypt_with_wrong_key_raises_value_error():
    encrypt, _ = fernet_hooks(Fernet.generate_key())
    _, decrypt = fernet_hooks(Fernet.generate_key())
    with pytest.raises(ValueError):
        decrypt(encrypt("hello"))


def test_encrypted_slice_round_trip(storage):
    encrypt, decrypt = fernet_hooks(Fernet.generate_key())
    keys = [{"session": {"encrypt": encrypt, "decrypt": decrypt, "filter": ["token"]}}]

    sync_state_update({"session": {"token": "t-1", "scratch": 9}}, keys, storage)
    assert "t-1" not in storage.get_item("session")
    assert rehydrate_application_state(keys, storage) == {"session": {"token": "t-1"}}


def test_from_env(monkeypatch):
    monkeypatch.setenv("STATE_SYNC_FERNET_KEY", Fernet.generate_key().decode("ascii"))
    encrypt, decrypt = fernet_hooks_from_env()
    assert decrypt(encrypt("x")) == "x"


def test_from_env_missing_raises(monkeypatch):
    monkeypatch.delenv("STATE_SYNC_FERNET_KEY", raising=False)
    with pytest.raises(RuntimeError):
        fernet_hooks_from_env()
