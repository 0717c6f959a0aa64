"""Resolution of a shop domain to the access token used against the Admin API.

The synchronizer depends on the :class:`SessionResolver` protocol only; the
concrete resolvers below read the admin app's session table or a static
mapping supplied through configuration.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_favorites.db.models import ShopSession
from storefront_favorites.services.favorites.errors import SessionNotFoundError
from storefront_favorites.settings import normalize_shop_domain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopCredential:
    shop_domain: str
    access_token: str


class SessionResolver(Protocol):
    async def resolve_credential(self, shop: str) -> ShopCredential:
        """Return the credential bound to ``shop`` or raise ``SessionNotFoundError``."""
        ...


def _missing_session(shop_domain: str) -> SessionNotFoundError:
    return SessionNotFoundError(
        f"No active session found for shop: {shop_domain}",
        context={"shop": shop_domain},
    )


class StaticSessionResolver:
    """Serve credentials from a fixed ``{shop: token}`` mapping."""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = {
            normalize_shop_domain(shop): token for shop, token in tokens.items()
        }

    async def resolve_credential(self, shop: str) -> ShopCredential:
        shop_domain = normalize_shop_domain(shop)
        token = self._tokens.get(shop_domain)
        if not token:
            raise _missing_session(shop_domain)
        return ShopCredential(shop_domain=shop_domain, access_token=token)


class SqlSessionResolver:
    """Look up the first stored session for a shop, offline sessions first."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def resolve_credential(self, shop: str) -> ShopCredential:
        shop_domain = normalize_shop_domain(shop)
        query = (
            select(ShopSession)
            .where(ShopSession.shop == shop_domain)
            .order_by(ShopSession.is_online.asc(), ShopSession.id.asc())
            .limit(1)
        )
        result = await self._session.execute(query)
        stored = result.scalars().first()
        if stored is None or not stored.access_token:
            logger.warning("No stored session for shop %s", shop_domain)
            raise _missing_session(shop_domain)
        return ShopCredential(shop_domain=shop_domain, access_token=stored.access_token)


__all__ = [
    "SessionResolver",
    "ShopCredential",
    "SqlSessionResolver",
    "StaticSessionResolver",
]
