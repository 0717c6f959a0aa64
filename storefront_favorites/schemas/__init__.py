"""Pydantic schemas for API requests and responses."""

from storefront_favorites.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from storefront_favorites.schemas.favorites import (  # noqa: F401
    AddFavoritesRequest,
    AddFavoritesResponse,
    FavoritesSnapshotResponse,
    MetafieldInput,
    RemoveFavoriteRequest,
    RemoveFavoriteResponse,
)
