"""FastAPI router exposing the storefront favorites operations.

Failures raised by the service are :class:`FavoritesError` subclasses and are
rendered by the application-level exception handler, so the handlers below
only deal with the success path.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, Request

from storefront_favorites.schemas.favorites import (
    AddFavoritesRequest,
    AddFavoritesResponse,
    EndpointStatusResponse,
    FavoritesSnapshotResponse,
    RemoveFavoriteRequest,
    RemoveFavoriteResponse,
)
from storefront_favorites.services.favorites_service import (
    FavoritesService,
    get_favorites_service,
)

router = APIRouter()


def _endpoint_status(request: Request, message: str) -> EndpointStatusResponse:
    return EndpointStatusResponse(
        message=message,
        timestamp=datetime.now(UTC),
        url=str(request.url),
        method=request.method,
    )


@router.get("/update-metafields", response_model=EndpointStatusResponse)
async def update_metafields_status(request: Request) -> EndpointStatusResponse:
    """Liveness probe used by the widget before it posts favorites."""

    return _endpoint_status(request, "Update metafields endpoint is working")


@router.post("/update-metafields", response_model=AddFavoritesResponse)
async def add_favorites(
    payload: AddFavoritesRequest,
    service: FavoritesService = Depends(get_favorites_service),
) -> AddFavoritesResponse:
    """Merge the submitted handles into the customer's favorites."""

    return await service.add_favorites(payload)


@router.get("/remove-metafields", response_model=EndpointStatusResponse)
async def remove_metafields_status(request: Request) -> EndpointStatusResponse:
    return _endpoint_status(request, "Remove metafields endpoint is working")


@router.post("/remove-metafields", response_model=RemoveFavoriteResponse)
async def remove_favorite(
    payload: RemoveFavoriteRequest,
    service: FavoritesService = Depends(get_favorites_service),
) -> RemoveFavoriteResponse:
    """Remove one handle; deletes the metafield when the list empties."""

    return await service.remove_favorite(payload)


@router.get("/get-metafields", response_model=FavoritesSnapshotResponse)
async def get_metafields(
    customer_id: str = Query(..., alias="customerId", min_length=1),
    shop: str = Query(..., min_length=1),
    namespace: str | None = Query(
        default=None,
        description="Namespace override; defaults to the configured favorites namespace.",
    ),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesSnapshotResponse:
    """Diagnostic dump of the customer's metafields and decoded favorites."""

    return await service.read_favorites(
        customer_id=customer_id, shop=shop, namespace=namespace
    )
