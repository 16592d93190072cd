"""Parsing for NAME=VALUE cookie options."""

from __future__ import annotations


def parse_cookies(values: list[str] | None) -> dict[str, str]:
    """Turn ["sessionid=abc", "csrftoken=x"] into a dict.

    Raises:
        ValueError: If an entry has no '=' or an empty name.
    """
    cookies: dict[str, str] = {}
    for raw in values or []:
        name, sep, value = raw.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid cookie '{raw}'. Expected NAME=VALUE")
        cookies[name] = value.strip()
    return cookies
