"""Conversion between the stored metafield string and a list of product handles.

The store keeps favorites as one ``multi_line_text_field``: one handle per
line, optionally wrapped (even repeatedly) in matching quotes by older widget
versions. Decoding
is lenient, encoding is canonical (plain handles joined by ``\\n``).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

_QUOTES = ("'", '"')
SEPARATOR = "\n"


def _clean(line: str) -> str:
    value = line.strip()
    while len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1].strip()
    return value


def decode(raw: str | None) -> list[str]:
    """Split ``raw`` into trimmed, unquoted, non-empty handles in stored order."""

    if not raw:
        return []
    handles = (_clean(line) for line in raw.split(SEPARATOR))
    return [handle for handle in handles if handle]


def encode(handles: Iterable[str]) -> str:
    """Join ``handles`` with newlines; no quoting is added."""

    return SEPARATOR.join(handles)


def decode_incoming(value: Any) -> list[str]:
    """Decode a client-submitted value into candidate handles.

    Strings may carry several newline-separated handles, lists contribute each
    element (which may itself be multi-line) and other scalars are
    stringified. ``None`` yields nothing.
    """

    if value is None:
        return []
    if isinstance(value, str):
        return decode(value)
    if isinstance(value, (list, tuple)):
        candidates: list[str] = []
        for item in value:
            if item is None:
                continue
            candidates.extend(decode(item if isinstance(item, str) else str(item)))
        return candidates
    return decode(str(value))


def dedupe(handles: Iterable[str]) -> list[str]:
    """Drop repeated handles, keeping each at its first position."""

    seen: set[str] = set()
    unique: list[str] = []
    for handle in handles:
        if handle not in seen:
            seen.add(handle)
            unique.append(handle)
    return unique


__all__ = ["SEPARATOR", "decode", "decode_incoming", "dedupe", "encode"]
