"""Shared fixtures for the storefront favorites test-suite."""

from __future__ import annotations

import pytest

from storefront_favorites.services.favorites_service import FavoritesService
from storefront_favorites.settings import AppSettings
from tests.support.fake_store import FakeMetafieldStore, make_resolver, store_factory_for


@pytest.fixture
def app_settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    """Settings pinned to the default namespace regardless of the local env."""

    monkeypatch.delenv("FAVORITES_NAMESPACE", raising=False)
    monkeypatch.delenv("SHOP_ACCESS_TOKENS", raising=False)
    return AppSettings(favorites_namespace="favorites")


@pytest.fixture
def fake_store() -> FakeMetafieldStore:
    return FakeMetafieldStore()


@pytest.fixture
def favorites_service(
    fake_store: FakeMetafieldStore, app_settings: AppSettings
) -> FavoritesService:
    return FavoritesService(
        resolver=make_resolver(),
        store_factory=store_factory_for(fake_store),
        settings=app_settings,
    )
