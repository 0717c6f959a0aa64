"""Pydantic schemas that power the favorites API surface.

Field names on the wire are the camelCase names the storefront widget sends
and expects; Python attributes stay snake_case through aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront_favorites.schemas.metafield import CustomerSummary, Metafield
from storefront_favorites.settings import FAVORITES_KEY


def _optional_namespace(value: str | None) -> str | None:
    """Treat a blank namespace override as absent."""

    if value is None:
        return None
    return value.strip() or None


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class MetafieldInput(_CamelModel):
    """One metafield entry submitted by the widget."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    key: str = Field(FAVORITES_KEY, description="Metafield key; only favorites are merged")
    namespace: str | None = Field(
        None,
        description="Namespace override; defaults to the configured favorites namespace.",
    )
    value: str | list[Any] | int | float | None = Field(
        None,
        description=(
            "Handles to add: a newline-delimited (optionally quoted) string or an"
            " array of strings."
        ),
    )
    type: str | None = Field(None, description="Ignored; the type is fixed server-side")

    @field_validator("namespace")
    @classmethod
    def _normalize_namespace(cls, value: str | None) -> str | None:
        return _optional_namespace(value)


class _CustomerRequest(_CamelModel):
    customer_id: str = Field(
        ...,
        alias="customerId",
        min_length=1,
        description="Customer GID, e.g. ``gid://shopify/Customer/123``",
    )
    shop: str = Field(
        ...,
        min_length=1,
        description="Shop handle or ``*.myshopify.com`` domain",
    )

    @field_validator("customer_id", "shop")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned


class AddFavoritesRequest(_CustomerRequest):
    """Payload of the ADD operation."""

    metafields: list[MetafieldInput] = Field(
        ...,
        min_length=1,
        description="Non-empty list of metafield entries to merge",
    )

    def favorites_entries(self, key: str = FAVORITES_KEY) -> list[MetafieldInput]:
        """Return the entries targeting the favorites key."""

        return [entry for entry in self.metafields if entry.key == key]

    def requested_namespace(self, key: str = FAVORITES_KEY) -> str | None:
        """Namespace named by the first favorites entry that names one."""

        for entry in self.favorites_entries(key):
            if entry.namespace:
                return entry.namespace
        return None


class RemoveFavoriteRequest(_CustomerRequest):
    """Payload of the REMOVE operation."""

    product_handle: str = Field(
        ...,
        alias="productHandle",
        min_length=1,
        description="Handle to remove (exact match)",
    )
    namespace: str | None = Field(None, description="Optional namespace override")

    @field_validator("product_handle")
    @classmethod
    def _strip_handle(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be blank")
        return cleaned

    @field_validator("namespace")
    @classmethod
    def _normalize_namespace(cls, value: str | None) -> str | None:
        return _optional_namespace(value)


class _SuccessResponse(_CamelModel):
    success: bool = True
    message: str
    namespace: str


class AddFavoritesResponse(_SuccessResponse):
    """Result of a successful ADD."""

    existing_favorites_count: int = Field(..., alias="existingFavoritesCount")
    incoming_favorites_count: int = Field(..., alias="incomingFavoritesCount")
    new_favorites_added: int = Field(..., alias="newFavoritesAdded")
    total_favorites_count: int = Field(..., alias="totalFavoritesCount")
    all_favorites: list[str] = Field(..., alias="allFavorites")
    created_metafields: list[Metafield] = Field(
        default_factory=list, alias="createdMetafields"
    )
    updated_metafields: int = Field(0, alias="updatedMetafields")
    verification_result: dict[str, Any] | None = Field(None, alias="verificationResult")
    data: dict[str, Any] | None = Field(None, description="Raw mutation response")


class RemoveFavoriteResponse(_SuccessResponse):
    """Result of a successful REMOVE."""

    removed_product_handle: str = Field(..., alias="removedProductHandle")
    previous_favorites_count: int = Field(..., alias="previousFavoritesCount")
    current_favorites_count: int = Field(..., alias="currentFavoritesCount")
    remaining_favorites: list[str] = Field(..., alias="remainingFavorites")
    deleted: bool
    verification_result: dict[str, Any] | None = Field(None, alias="verificationResult")
    data: dict[str, Any] | None = Field(None, description="Raw mutation response")


class FavoritesSnapshotResponse(_CamelModel):
    """Diagnostic view of every metafield on a customer."""

    success: bool = True
    namespace: str
    customer: CustomerSummary
    favorites_metafield: Metafield | None = Field(None, alias="favoritesMetafield")
    all_metafields: list[Metafield] = Field(default_factory=list, alias="allMetafields")
    total_metafields: int = Field(0, alias="totalMetafields")
    favorites_exists: bool = Field(False, alias="favoritesExists")
    favorite_products: list[str] = Field(default_factory=list, alias="favoriteProducts")


class EndpointStatusResponse(BaseModel):
    """Payload of the GET liveness probes on the mutation endpoints."""

    success: bool = True
    message: str
    timestamp: datetime
    url: str
    method: str
