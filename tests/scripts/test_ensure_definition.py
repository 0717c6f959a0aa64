"""Tests for the metafield definition bootstrap command."""

from __future__ import annotations

import pytest

from storefront_favorites.scripts import ensure_definition as cli
from storefront_favorites.services.favorites.errors import StoreUserError
from storefront_favorites.services.favorites_service import FavoritesService
from storefront_favorites.services.session_resolver import StaticSessionResolver
from storefront_favorites.settings import AppSettings
from tests.support.fake_store import SHOP, FakeMetafieldStore, make_resolver, store_factory_for


@pytest.fixture
def static_settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    configured = AppSettings(
        favorites_namespace="favorites", shop_access_tokens_raw=f"{SHOP}=shpat_cli"
    )
    monkeypatch.setattr(cli, "get_settings", lambda: configured)
    monkeypatch.setattr(cli, "validate_environment", lambda: None)
    return configured


def test_parse_args_requires_shop() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args([])

    args = cli.parse_args(["--shop", SHOP, "--namespace", "favorite"])
    assert args.shop == SHOP
    assert args.namespace == "favorite"


def test_main_reports_created_definition(
    monkeypatch: pytest.MonkeyPatch,
    static_settings: AppSettings,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seen: dict[str, object] = {}

    async def fake_ensure(shop, namespace, *, settings, resolver):
        seen.update(shop=shop, namespace=namespace, resolver=resolver)
        return True

    monkeypatch.setattr(cli, "ensure_definition", fake_ensure)

    assert cli.main(["--shop", SHOP]) == 0
    assert "created" in capsys.readouterr().out
    assert seen["shop"] == SHOP
    assert seen["namespace"] is None
    assert isinstance(seen["resolver"], StaticSessionResolver)


def test_main_returns_failure_on_store_errors(
    monkeypatch: pytest.MonkeyPatch, static_settings: AppSettings
) -> None:
    async def failing_ensure(*args, **kwargs):
        raise StoreUserError("Store rejected the request", errors=[{"message": "Key is reserved"}])

    monkeypatch.setattr(cli, "ensure_definition", failing_ensure)

    assert cli.main(["--shop", SHOP]) == 1


@pytest.mark.asyncio
async def test_definition_created_in_requested_namespace(app_settings: AppSettings) -> None:
    store = FakeMetafieldStore()
    service = FavoritesService(
        resolver=make_resolver(),
        store_factory=store_factory_for(store),
        settings=app_settings,
    )

    assert await service.ensure_favorites_definition(shop=SHOP, namespace="favorite") is True
    assert store.definitions[0]["namespace"] == "favorite"
