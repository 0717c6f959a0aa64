"""Utilities for working with request-scoped context metadata.

The FastAPI application assigns a unique request identifier to every inbound
HTTP call. Tiny helpers around the ``ContextVar`` keep middleware, exception
handlers and tests reading and writing the identifier the same way.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = [
    "REQUEST_ID_CONTEXT",
    "clear_request_id",
    "get_request_id",
    "set_request_id",
]

# Each request handler runs in its own task, so the ContextVar isolates the
# identifier per request without global mutable state.
REQUEST_ID_CONTEXT: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: str) -> Token[str]:
    """Persist the provided request identifier in the context variable.

    The returned token lets tests ``reset`` the context afterwards.
    """

    return REQUEST_ID_CONTEXT.set(request_id)


def get_request_id() -> str:
    """Retrieve the current request identifier (empty string when unset)."""

    return REQUEST_ID_CONTEXT.get()


def clear_request_id(token: Token[str] | None = None) -> None:
    """Reset the request identifier, using ``token`` when one is supplied."""

    if token is not None:
        REQUEST_ID_CONTEXT.reset(token)
    else:
        REQUEST_ID_CONTEXT.set("")
