from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Union

from pydantic_core import to_jsonable_python


Reviver = Callable[[str, Any], Any]
Replacer = Union[Callable[[str, Any], Any], Sequence[str]]

# Anchored at the start; seconds required, fraction/offset optional.
_DATE_PREFIX = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})")

_MAX_INDENT = 10


def date_reviver(key: str, value: Any) -> Any:
    """Turn ISO-8601 date-time strings back into `datetime` objects."""
    if isinstance(value, str) and _DATE_PREFIX.match(value):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


def _revive(key: str, value: Any, reviver: Reviver) -> Any:
    # Children first, then the value itself (JSON.parse order)
    if isinstance(value, dict):
        value = {k: _revive(k, v, reviver) for k, v in value.items()}
    elif isinstance(value, list):
        value = [_revive(str(i), v, reviver) for i, v in enumerate(value)]
    return reviver(key, value)


def parse_json(text: str, reviver: Optional[Reviver] = date_reviver) -> Any:
    """
    Decode JSON text, passing every decoded value through `reviver`.

    The reviver is called as `reviver(key, value)` bottom-up: members before
    their container, list items with their index as a string key, and the
    root last with key "".
    """
    raw = json.loads(text)
    if reviver is None:
        return raw
    return _revive("", raw, reviver)


def _replace(key: str, value: Any, replacer: Callable[[str, Any], Any]) -> Any:
    value = replacer(key, value)
    if isinstance(value, dict):
        return {k: _replace(k, v, replacer) for k, v in value.items()}
    if isinstance(value, list):
        return [_replace(str(i), v, replacer) for i, v in enumerate(value)]
    return value


def _pick(value: Any, allowed: Sequence[str]) -> Any:
    if isinstance(value, dict):
        return {k: _pick(value[k], allowed) for k in allowed if k in value}
    if isinstance(value, list):
        return [_pick(v, allowed) for v in value]
    return value


def _indent(space: Union[int, str, None]) -> Union[int, str, None]:
    if isinstance(space, bool) or space is None:
        return None
    if isinstance(space, int):
        n = min(space, _MAX_INDENT)
        return n if n > 0 else None
    if isinstance(space, str):
        return space[:_MAX_INDENT] or None
    return None


def stringify_json(
    value: Any,
    replacer: Optional[Replacer] = None,
    space: Union[int, str, None] = None,
) -> str:
    """
    Encode `value` as JSON text with JSON.stringify-style hooks.

    - `replacer` callable: applied top-down as `replacer(key, value)`.
    - `replacer` sequence: only the listed object keys are emitted, in that order.
    - `space`: indentation (int clamped to 10, str truncated to 10); empty
      means compact output.

    Datetimes, pydantic models, dataclasses and similar values are converted
    with pydantic's JSON encoder before any replacer sees them.
    """
    data = to_jsonable_python(value)
    if callable(replacer):
        data = _replace("", data, replacer)
    elif replacer is not None:
        data = _pick(data, [str(k) for k in replacer])

    indent = _indent(space)
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        data,
        indent=indent,
        separators=separators,
        ensure_ascii=False,
        default=to_jsonable_python,
    )
