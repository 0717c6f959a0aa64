#!/usr/bin/env python
"""Create the customer metafield definition backing the favorites list.

The Admin API accepts writes to undefined metafields, but a definition makes
the field visible (and typed) in the Shopify admin. The script is idempotent:
it does nothing when a definition for the favorites key already exists.

Usage:
    python -m storefront_favorites.scripts.ensure_definition --shop my-store
    python -m storefront_favorites.scripts.ensure_definition --shop my-store --namespace favorites
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from storefront_favorites.db.connection import dispose_engine, get_async_session_context
from storefront_favorites.main import validate_environment
from storefront_favorites.services.favorites.errors import FavoritesError
from storefront_favorites.services.favorites_service import FavoritesService
from storefront_favorites.services.metafield_store import build_store_factory
from storefront_favorites.services.session_resolver import (
    SessionResolver,
    SqlSessionResolver,
    StaticSessionResolver,
)
from storefront_favorites.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Ensure the favorites customer metafield definition exists."
    )
    parser.add_argument("--shop", required=True, help="Shop handle or myshopify domain")
    parser.add_argument(
        "--namespace",
        default=None,
        help="Metafield namespace (defaults to FAVORITES_NAMESPACE)",
    )
    return parser.parse_args(argv)


async def ensure_definition(
    shop: str,
    namespace: str | None,
    *,
    settings: AppSettings,
    resolver: SessionResolver,
) -> bool:
    async with httpx.AsyncClient(timeout=settings.store_timeout_seconds) as client:
        service = FavoritesService(
            resolver=resolver,
            store_factory=build_store_factory(client, settings),
            settings=settings,
        )
        return await service.ensure_favorites_definition(shop=shop, namespace=namespace)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        if settings.shop_access_tokens:
            created = await ensure_definition(
                args.shop,
                args.namespace,
                settings=settings,
                resolver=StaticSessionResolver(settings.shop_access_tokens),
            )
        else:
            async with get_async_session_context() as session:
                created = await ensure_definition(
                    args.shop,
                    args.namespace,
                    settings=settings,
                    resolver=SqlSessionResolver(session),
                )
    except FavoritesError as exc:
        logger.error("Could not ensure metafield definition: %s", exc.message)
        if exc.errors:
            logger.error("Store errors: %s", exc.errors)
        return 1
    finally:
        await dispose_engine()

    if created:
        print("✅ Metafield definition created.")
    else:
        print("✅ Metafield definition already exists.")
    return 0


def main(argv: list[str] | None = None) -> int:
    validate_environment()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
