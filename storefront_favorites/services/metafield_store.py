"""Admin GraphQL client for customer metafields.

:class:`MetafieldStore` wraps the handful of queries and mutations the
favorites workflow needs. It only deals with transport: a response that
arrives is returned as a :class:`GraphQLResponse` untouched so callers can
classify ``errors``/``userErrors`` themselves, while network failures,
non-2xx statuses and undecodable or malformed bodies raise
:class:`StoreTransportError`.
No retries are attempted; timeouts come from the shared ``httpx`` client.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from storefront_favorites.schemas.metafield import GraphQLResponse, Metafield
from storefront_favorites.services.favorites.errors import StoreTransportError
from storefront_favorites.services.session_resolver import ShopCredential
from storefront_favorites.settings import (
    FAVORITES_KEY,
    FAVORITES_METAFIELD_TYPE,
    AppSettings,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"

METAFIELD_FIELDS = """
  id
  namespace
  key
  value
  type
  createdAt
  updatedAt
"""

FETCH_METAFIELD_QUERY = f"""
query FavoritesMetafield($ownerId: ID!, $namespace: String!, $key: String!) {{
  customer(id: $ownerId) {{
    metafield(namespace: $namespace, key: $key) {{{METAFIELD_FIELDS}}}
  }}
}}
"""

CUSTOMER_SNAPSHOT_QUERY = f"""
query CustomerMetafields($ownerId: ID!, $namespace: String!, $key: String!) {{
  customer(id: $ownerId) {{
    id
    email
    firstName
    lastName
    metafields(first: 50) {{
      edges {{
        node {{{METAFIELD_FIELDS}}}
      }}
    }}
    metafield(namespace: $namespace, key: $key) {{{METAFIELD_FIELDS}}}
  }}
}}
"""

METAFIELDS_SET_MUTATION = f"""
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {{
  metafieldsSet(metafields: $metafields) {{
    metafields {{{METAFIELD_FIELDS}}}
    userErrors {{
      field
      message
      code
    }}
  }}
}}
"""

METAFIELD_DELETE_MUTATION = """
mutation metafieldDelete($input: MetafieldDeleteInput!) {
  metafieldDelete(input: $input) {
    deletedId
    userErrors {
      field
      message
    }
  }
}
"""

DEFINITIONS_QUERY = """
query FavoritesDefinitions($namespace: String!) {
  metafieldDefinitions(namespace: $namespace, ownerType: CUSTOMER, first: 50) {
    edges {
      node {
        id
        name
        key
      }
    }
  }
}
"""

DEFINITION_CREATE_MUTATION = """
mutation CreateMetafieldDefinition($definition: MetafieldDefinitionInput!) {
  metafieldDefinitionCreate(definition: $definition) {
    createdDefinition {
      id
      name
    }
    userErrors {
      field
      message
      code
    }
  }
}
"""


class FieldStore(Protocol):
    """Operations the synchronizer needs from the remote metafield store."""

    async def fetch_metafield(
        self, owner_id: str, namespace: str
    ) -> GraphQLResponse: ...

    async def set_metafield(
        self, owner_id: str, namespace: str, value: str
    ) -> GraphQLResponse: ...

    async def delete_metafield(self, metafield_id: str) -> GraphQLResponse: ...

    async def fetch_customer_snapshot(
        self, owner_id: str, namespace: str
    ) -> GraphQLResponse: ...

    async def fetch_definitions(self, namespace: str) -> GraphQLResponse: ...

    async def create_definition(self, namespace: str) -> GraphQLResponse: ...


StoreFactory = Callable[[ShopCredential], FieldStore]


class MetafieldStore:
    """GraphQL-backed :class:`FieldStore` bound to one shop credential."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        graphql_url: str,
        access_token: str,
        key: str = FAVORITES_KEY,
    ) -> None:
        self._client = client
        self._graphql_url = graphql_url
        self._access_token = access_token
        self._key = key

    async def execute(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> GraphQLResponse:
        """POST one GraphQL document and return the decoded envelope."""

        body: dict[str, Any] = {"query": query}
        if variables is not None:
            body["variables"] = variables

        try:
            response = await self._client.post(
                self._graphql_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    ACCESS_TOKEN_HEADER: self._access_token,
                },
            )
        except httpx.HTTPError as exc:
            logger.error("GraphQL request to %s failed: %s", self._graphql_url, exc)
            raise StoreTransportError(
                "GraphQL request failed", detail=f"{type(exc).__name__}: {exc}"
            ) from exc

        if not response.is_success:
            logger.error(
                "GraphQL request returned HTTP %s: %s",
                response.status_code,
                response.text[:500],
            )
            raise StoreTransportError(
                f"GraphQL request failed: {response.status_code} {response.reason_phrase}",
                detail=response.text[:500] or None,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreTransportError(
                "GraphQL response was not valid JSON", detail=str(exc)
            ) from exc

        if not isinstance(payload, dict):
            raise StoreTransportError(
                "GraphQL response was not a JSON object",
                detail=f"received {type(payload).__name__}",
            )

        try:
            return GraphQLResponse.model_validate(payload)
        except ValidationError as exc:
            raise StoreTransportError(
                "GraphQL response had an unexpected shape", detail=str(exc)[:500]
            ) from exc

    async def fetch_metafield(self, owner_id: str, namespace: str) -> GraphQLResponse:
        return await self.execute(
            FETCH_METAFIELD_QUERY,
            {"ownerId": owner_id, "namespace": namespace, "key": self._key},
        )

    async def set_metafield(
        self, owner_id: str, namespace: str, value: str
    ) -> GraphQLResponse:
        """Upsert the favorites field with ``value``."""

        return await self.execute(
            METAFIELDS_SET_MUTATION,
            {
                "metafields": [
                    {
                        "ownerId": owner_id,
                        "namespace": namespace,
                        "key": self._key,
                        "type": FAVORITES_METAFIELD_TYPE,
                        "value": value,
                    }
                ]
            },
        )

    async def delete_metafield(self, metafield_id: str) -> GraphQLResponse:
        return await self.execute(
            METAFIELD_DELETE_MUTATION, {"input": {"id": metafield_id}}
        )

    async def fetch_customer_snapshot(
        self, owner_id: str, namespace: str
    ) -> GraphQLResponse:
        return await self.execute(
            CUSTOMER_SNAPSHOT_QUERY,
            {"ownerId": owner_id, "namespace": namespace, "key": self._key},
        )

    async def fetch_definitions(self, namespace: str) -> GraphQLResponse:
        return await self.execute(DEFINITIONS_QUERY, {"namespace": namespace})

    async def create_definition(self, namespace: str) -> GraphQLResponse:
        return await self.execute(
            DEFINITION_CREATE_MUTATION,
            {
                "definition": {
                    "name": "Favorite Products",
                    "namespace": namespace,
                    "key": self._key,
                    "description": "A list of favorite products.",
                    "type": FAVORITES_METAFIELD_TYPE,
                    "ownerType": "CUSTOMER",
                }
            },
        )


def extract_metafield(response: GraphQLResponse) -> Metafield | None:
    """Return ``data.customer.metafield`` from a fetch response, if present."""

    customer = (response.data or {}).get("customer") or {}
    node = customer.get("metafield")
    if not node:
        return None
    return Metafield.model_validate(node)


def build_store_factory(
    client: httpx.AsyncClient, settings: AppSettings
) -> StoreFactory:
    """Return a factory binding ``client`` to each resolved shop credential."""

    def factory(credential: ShopCredential) -> FieldStore:
        return MetafieldStore(
            client,
            graphql_url=settings.graphql_url(credential.shop_domain),
            access_token=credential.access_token,
            key=settings.favorites_key,
        )

    return factory


__all__ = [
    "ACCESS_TOKEN_HEADER",
    "FieldStore",
    "MetafieldStore",
    "StoreFactory",
    "build_store_factory",
    "extract_metafield",
]
