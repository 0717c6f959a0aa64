"""FastAPI dependency wiring for backend services.

Separating dependency factories from service implementation modules keeps the
latter free of web-layer concerns, enabling easier reuse in tests and in the
CLI scripts.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from fastapi import Depends

from storefront_favorites.db.connection import get_session_factory
from storefront_favorites.services.session_resolver import (
    SessionResolver,
    SqlSessionResolver,
    StaticSessionResolver,
)
from storefront_favorites.settings import AppSettings, get_settings


async def get_http_client(
    settings: AppSettings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an ``httpx`` client configured with the store timeout."""

    async with httpx.AsyncClient(timeout=settings.store_timeout_seconds) as client:
        yield client


async def get_session_resolver(
    settings: AppSettings = Depends(get_settings),
) -> AsyncIterator[SessionResolver]:
    """Provide the credential resolver for the current request.

    A configured ``SHOP_ACCESS_TOKENS`` mapping wins; otherwise a database
    session is opened against the admin app's session table for the lifetime
    of the request.
    """

    tokens = settings.shop_access_tokens
    if tokens:
        yield StaticSessionResolver(tokens)
        return

    async with get_session_factory()() as session:
        yield SqlSessionResolver(session)


__all__ = ["get_http_client", "get_session_resolver"]
