"""Set-Cookie extraction and single-header cookie accumulation."""

from collections.abc import Mapping, MutableMapping
from typing import Any

COOKIE_HEADER = "cookie"
SET_COOKIE_HEADER = "set-cookie"


def get_set_cookie_values(headers: Any) -> list[str]:
    """Every Set-Cookie value in a response's headers; malformed input yields []"""
    if headers is None:
        return []

    get_list = getattr(headers, "get_list", None)
    if callable(get_list):
        values = get_list(SET_COOKIE_HEADER)
    elif isinstance(headers, Mapping):
        values = None
        for name, value in headers.items():
            if isinstance(name, str) and name.lower() == SET_COOKIE_HEADER:
                values = value
                break
    else:
        return []

    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return []
    return [value for value in values if isinstance(value, str) and value]


def cookie_pair(set_cookie: str) -> str | None:
    """The name=value part of a Set-Cookie value, without attributes"""
    pair = set_cookie.split(";", 1)[0].strip()
    if "=" not in pair or pair.startswith("="):
        return None
    return pair


def _cookie_key(headers: Mapping[str, Any]) -> str:
    for name in headers:
        if isinstance(name, str) and name.lower() == COOKIE_HEADER:
            return name
    return COOKIE_HEADER


def append_cookie(headers: MutableMapping[str, Any], pair: str) -> str:
    """Append a name=value pair to the cookie header in place and return the new value"""
    key = _cookie_key(headers)
    current = headers.get(key) or ""
    headers[key] = f"{current}; {pair}" if current else pair
    return headers[key]
