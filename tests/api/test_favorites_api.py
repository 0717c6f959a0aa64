"""Integration-style tests that exercise the favorites routes with a fake store."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from storefront_favorites.main import app
from storefront_favorites.services.favorites.errors import StoreTransportError
from storefront_favorites.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)
from tests.support.fake_store import (
    ACCESS_DENIED_ERROR,
    CUSTOMER_ID,
    SHOP,
    FakeMetafieldStore,
)


@pytest_asyncio.fixture
async def api_client(favorites_service: FavoritesService) -> AsyncIterator[AsyncClient]:
    """Create an ``AsyncClient`` with the service wired to the fake store."""

    def _override_favorites_service() -> FavoritesService:
        return favorites_service

    app.dependency_overrides.clear()
    app.dependency_overrides[get_favorites_service] = _override_favorites_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


def _add_body(value, **extra) -> dict:
    return {
        "customerId": CUSTOMER_ID,
        "shop": SHOP,
        "metafields": [{"key": "favorite_products", "value": value, **extra}],
    }


@pytest.mark.asyncio
async def test_add_returns_merged_list(api_client: AsyncClient, fake_store: FakeMetafieldStore) -> None:
    fake_store.seed("a\nb")

    response = await api_client.post("/api/update-metafields", json=_add_body(["b", "c"]))

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["allFavorites"] == ["a", "b", "c"]
    assert payload["existingFavoritesCount"] == 2
    assert payload["newFavoritesAdded"] == 1
    assert payload["totalFavoritesCount"] == 3
    assert payload["createdMetafields"][0]["value"] == "a\nb\nc"
    assert "verificationResult" in payload
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_add_with_missing_customer_is_a_validation_error(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    response = await api_client.post(
        "/api/update-metafields",
        json={"shop": SHOP, "metafields": [{"key": "favorite_products", "value": "a"}]},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["error_type"] == "validation_error"
    assert any(error["field"].endswith("customerId") for error in payload["errors"])
    assert fake_store.calls == []


@pytest.mark.asyncio
async def test_add_with_empty_metafields_is_rejected(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/update-metafields",
        json={"customerId": CUSTOMER_ID, "shop": SHOP, "metafields": []},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_add_without_valid_handles_returns_400(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    response = await api_client.post("/api/update-metafields", json=_add_body("  \n''"))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "No valid product handles found after processing"
    assert fake_store.mutations == []


@pytest.mark.asyncio
async def test_access_policy_error_maps_to_403(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.read_errors = [ACCESS_DENIED_ERROR]

    response = await api_client.post("/api/update-metafields", json=_add_body("a"))

    assert response.status_code == 403
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"] == "Protected Customer Data Access Required"
    assert payload["context"]["shopifyError"] == ACCESS_DENIED_ERROR


@pytest.mark.asyncio
async def test_user_errors_map_to_400_with_list(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.user_errors = [{"field": ["metafields", "0", "ownerId"], "message": "Owner does not exist"}]

    response = await api_client.post("/api/update-metafields", json=_add_body("a"))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error_type"] == "store_error"
    assert payload["errors"] == fake_store.user_errors


@pytest.mark.asyncio
async def test_transport_failure_maps_to_500(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.write_transport_error = StoreTransportError(
        "GraphQL request failed: 503 Service Unavailable"
    )

    response = await api_client.post("/api/update-metafields", json=_add_body("a"))

    assert response.status_code == 500
    assert response.json()["error_type"] == "network_error"


@pytest.mark.asyncio
async def test_remove_returns_remaining_list(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.seed("a\nb\nc")

    response = await api_client.post(
        "/api/remove-metafields",
        json={"customerId": CUSTOMER_ID, "shop": SHOP, "productHandle": "b"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["removedProductHandle"] == "b"
    assert payload["remainingFavorites"] == ["a", "c"]
    assert payload["deleted"] is False


@pytest.mark.asyncio
async def test_remove_unknown_handle_returns_404_with_current_list(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.seed("a")

    response = await api_client.post(
        "/api/remove-metafields",
        json={"customerId": CUSTOMER_ID, "shop": SHOP, "productHandle": "z"},
    )

    assert response.status_code == 404
    payload = response.json()
    assert payload["error"] == "Product handle not found in favorites"
    assert payload["context"]["currentFavorites"] == ["a"]
    assert fake_store.mutations == []


@pytest.mark.asyncio
async def test_remove_missing_product_handle(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/remove-metafields", json={"customerId": CUSTOMER_ID, "shop": SHOP}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_shop_is_reported(api_client: AsyncClient) -> None:
    response = await api_client.post(
        "/api/update-metafields", json={**_add_body("a"), "shop": "elsewhere"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "No active session found for shop: elsewhere.myshopify.com"


@pytest.mark.asyncio
async def test_get_metafields_returns_decoded_favorites(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.seed("'a'\nb")

    response = await api_client.get(
        "/api/get-metafields", params={"customerId": CUSTOMER_ID, "shop": SHOP}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["favoriteProducts"] == ["a", "b"]
    assert payload["favoritesExists"] is True
    assert payload["customer"]["firstName"] == "Fan"


@pytest.mark.asyncio
async def test_get_metafields_requires_query_parameters(api_client: AsyncClient) -> None:
    response = await api_client.get("/api/get-metafields", params={"shop": SHOP})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_status_probes_and_health(api_client: AsyncClient) -> None:
    update_probe = await api_client.get("/api/update-metafields")
    remove_probe = await api_client.get("/api/remove-metafields")
    health = await api_client.get("/health")

    assert update_probe.json()["message"] == "Update metafields endpoint is working"
    assert remove_probe.json()["method"] == "GET"
    assert health.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_cors_preflight_is_answered(api_client: AsyncClient) -> None:
    response = await api_client.options(
        "/api/update-metafields",
        headers={
            "Origin": "https://demo-store.myshopify.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert "access-control-allow-origin" in response.headers


@pytest.mark.asyncio
async def test_remove_access_policy_error_maps_to_403(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.seed("a")
    fake_store.read_errors = [ACCESS_DENIED_ERROR]

    response = await api_client.post(
        "/api/remove-metafields",
        json={"customerId": CUSTOMER_ID, "shop": SHOP, "productHandle": "a"},
    )

    assert response.status_code == 403
    payload = response.json()
    assert payload["error_type"] == "access_policy_error"
    assert payload["context"]["developerNote"].startswith("For development")
    assert fake_store.mutations == []


@pytest.mark.asyncio
async def test_write_access_policy_error_maps_to_403(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    fake_store.write_errors = [{"message": "Throttled"}, ACCESS_DENIED_ERROR]

    response = await api_client.post("/api/update-metafields", json=_add_body("a"))

    assert response.status_code == 403
    assert response.json()["context"]["shopifyError"] == ACCESS_DENIED_ERROR


@pytest.mark.asyncio
async def test_generic_read_error_passes_through_as_400(
    api_client: AsyncClient, fake_store: FakeMetafieldStore
) -> None:
    throttled = {"message": "Throttled", "extensions": {"code": "THROTTLED"}}
    fake_store.read_errors = [throttled]

    response = await api_client.post("/api/update-metafields", json=_add_body("a"))

    assert response.status_code == 400
    payload = response.json()
    assert payload["error_type"] == "store_error"
    assert payload["errors"] == [throttled]
    assert fake_store.mutations == []
