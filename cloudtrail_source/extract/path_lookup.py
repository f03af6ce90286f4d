"""Optional nested lookups over decoded JSON."""

from __future__ import annotations

import json
from typing import Any


def lookup_path(value: Any, *keys: str) -> Any | None:
    """Follow keys through nested objects.

    Returns None as soon as a key is missing, an intermediate value is not
    an object, or the final value is JSON null.
    """
    current = value
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def as_text(value: Any) -> str:
    """Render a scalar for the host: strings verbatim, anything else as JSON."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def lookup_text(value: Any, *keys: str) -> str | None:
    found = lookup_path(value, *keys)
    return None if found is None else as_text(found)
