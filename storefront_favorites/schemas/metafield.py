"""Pydantic models mirroring the metafield shapes returned by the Admin API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Metafield(BaseModel):
    """A single metafield node as returned by queries and ``metafieldsSet``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    namespace: str | None = None
    key: str | None = None
    value: str | None = None
    type: str | None = None
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")


class CustomerSummary(BaseModel):
    """Identity fields returned by the diagnostic customer query."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str | None = None
    first_name: str | None = Field(None, alias="firstName")
    last_name: str | None = Field(None, alias="lastName")


class GraphQLResponse(BaseModel):
    """Raw ``{data, errors}`` envelope of one GraphQL round trip."""

    data: dict[str, Any] | None = None
    errors: list[dict[str, Any]] | None = None
    extensions: dict[str, Any] | None = None
