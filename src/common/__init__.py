"""
Common utilities for state-sync.

Modules:
- json_codec: JSON parse/stringify with reviver and replacer hooks, date revival
- reporting: structured warnings for non-fatal persistence failures
- crypto: Fernet-backed encrypt/decrypt hook pair
"""

__all__ = [
    "crypto",
    "json_codec",
    "reporting",
]
