"""Business logic powering the favorites API endpoints.

Collaborators:
* :class:`SessionResolver` – maps the request's shop to an access token.
* :class:`FieldStore` – Admin GraphQL reads and writes of the favorites field.
* :mod:`codec` / :mod:`algorithm` – pure decoding and merge/remove planning.

Every mutating operation runs through :meth:`FavoritesService._read_modify_write`:
read the field, plan the write from the decoded list, apply it, then re-read
the field as a best-effort verification. The pinned API version has no compare-and-swap,
so two concurrent writers on the same customer race and the last one wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx
from fastapi import Depends

from storefront_favorites.schemas.favorites import (
    AddFavoritesRequest,
    AddFavoritesResponse,
    FavoritesSnapshotResponse,
    RemoveFavoriteRequest,
    RemoveFavoriteResponse,
)
from storefront_favorites.schemas.metafield import (
    CustomerSummary,
    GraphQLResponse,
    Metafield,
)
from storefront_favorites.services.dependencies import (
    get_http_client,
    get_session_resolver,
)
from storefront_favorites.services.favorites.algorithm import (
    MergeOutcome,
    RemovalOutcome,
    WriteAction,
    WritePlan,
    plan_add,
    plan_remove,
)
from storefront_favorites.services.favorites.codec import (
    decode,
    decode_incoming,
    encode,
)
from storefront_favorites.services.favorites.errors import (
    CustomerNotFoundError,
    FavoritesError,
    StoreUserError,
    collect_user_errors,
    raise_for_store_errors,
)
from storefront_favorites.services.metafield_store import (
    FieldStore,
    StoreFactory,
    build_store_factory,
    extract_metafield,
)
from storefront_favorites.services.session_resolver import SessionResolver
from storefront_favorites.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

OutcomeT = TypeVar("OutcomeT")

_WRITE_ROOTS = ("metafieldsSet", "metafieldDelete")


@dataclass(frozen=True)
class FieldContext:
    """Identity of one favorites field plus the store that holds it."""

    store: FieldStore
    owner_id: str
    namespace: str


@dataclass(frozen=True)
class SyncResult(Generic[OutcomeT]):
    outcome: OutcomeT
    plan: WritePlan
    write_response: GraphQLResponse
    created_metafields: list[Metafield] = field(default_factory=list)
    verification: dict[str, Any] | None = None


class FavoritesService:
    """Orchestrates credential resolution, store access and list planning."""

    def __init__(
        self,
        *,
        resolver: SessionResolver,
        store_factory: StoreFactory,
        settings: AppSettings,
    ) -> None:
        self._resolver = resolver
        self._store_factory = store_factory
        self._settings = settings

    async def add_favorites(self, payload: AddFavoritesRequest) -> AddFavoritesResponse:
        key = self._settings.favorites_key
        context = await self._open(
            payload.shop,
            payload.customer_id,
            payload.requested_namespace(key),
        )

        incoming: list[str] = []
        for entry in payload.favorites_entries(key):
            incoming.extend(decode_incoming(entry.value))
        logger.info(
            "Adding %s candidate favorites for %s (namespace=%s)",
            len(incoming),
            context.owner_id,
            context.namespace,
        )

        result: SyncResult[MergeOutcome] = await self._read_modify_write(
            context, lambda current: plan_add(current, incoming)
        )
        outcome = result.outcome
        return AddFavoritesResponse(
            message=(
                f"Successfully added {outcome.net_new} new favorites to existing"
                f" {len(outcome.current)}. Total: {len(outcome.merged)}"
            ),
            namespace=context.namespace,
            existing_favorites_count=len(outcome.current),
            incoming_favorites_count=len(outcome.incoming),
            new_favorites_added=outcome.net_new,
            total_favorites_count=len(outcome.merged),
            all_favorites=outcome.merged,
            created_metafields=result.created_metafields,
            updated_metafields=len(result.created_metafields),
            verification_result=result.verification,
            data=result.write_response.model_dump(exclude_none=True),
        )

    async def remove_favorite(
        self, payload: RemoveFavoriteRequest
    ) -> RemoveFavoriteResponse:
        context = await self._open(
            payload.shop, payload.customer_id, payload.namespace
        )
        handle = payload.product_handle
        logger.info(
            "Removing favorite %r for %s (namespace=%s)",
            handle,
            context.owner_id,
            context.namespace,
        )

        result: SyncResult[RemovalOutcome] = await self._read_modify_write(
            context, lambda current: plan_remove(current, handle)
        )
        outcome = result.outcome
        if outcome.deleted:
            message = (
                f'Successfully removed "{handle}" from favorites. All favorites cleared.'
            )
        else:
            message = (
                f'Successfully removed "{handle}" from favorites.'
                f" {len(outcome.remaining)} favorites remaining."
            )
        return RemoveFavoriteResponse(
            message=message,
            namespace=context.namespace,
            removed_product_handle=handle,
            previous_favorites_count=len(outcome.previous),
            current_favorites_count=len(outcome.remaining),
            remaining_favorites=outcome.remaining,
            deleted=outcome.deleted,
            verification_result=result.verification,
            data=result.write_response.model_dump(exclude_none=True),
        )

    async def read_favorites(
        self, *, customer_id: str, shop: str, namespace: str | None = None
    ) -> FavoritesSnapshotResponse:
        """Return every metafield on the customer plus the decoded favorites."""

        context = await self._open(shop, customer_id, namespace)
        response = await context.store.fetch_customer_snapshot(
            context.owner_id, context.namespace
        )
        raise_for_store_errors(response.errors)

        customer = (response.data or {}).get("customer")
        if not customer:
            raise CustomerNotFoundError(
                "Customer not found", context={"customerId": context.owner_id}
            )

        edges = (customer.get("metafields") or {}).get("edges") or []
        all_metafields = [
            Metafield.model_validate(edge["node"]) for edge in edges if edge.get("node")
        ]
        favorites = extract_metafield(response)
        return FavoritesSnapshotResponse(
            namespace=context.namespace,
            customer=CustomerSummary.model_validate(customer),
            favorites_metafield=favorites,
            all_metafields=all_metafields,
            total_metafields=len(all_metafields),
            favorites_exists=favorites is not None,
            favorite_products=decode(favorites.value if favorites else None),
        )

    async def ensure_favorites_definition(
        self, *, shop: str, namespace: str | None = None
    ) -> bool:
        """Create the customer metafield definition when it is missing.

        Returns ``True`` when a definition was created, ``False`` when one
        already existed for the favorites key.
        """

        credential = await self._resolver.resolve_credential(shop)
        store = self._store_factory(credential)
        resolved_namespace = namespace or self._settings.favorites_namespace

        response = await store.fetch_definitions(resolved_namespace)
        raise_for_store_errors(response.errors)
        edges = (
            ((response.data or {}).get("metafieldDefinitions") or {}).get("edges")
            or []
        )
        if any(
            (edge.get("node") or {}).get("key") == self._settings.favorites_key
            for edge in edges
        ):
            logger.info("Metafield definition already exists for %s", resolved_namespace)
            return False

        created = await store.create_definition(resolved_namespace)
        raise_for_store_errors(created.errors)
        user_errors = collect_user_errors(created.data, "metafieldDefinitionCreate")
        if user_errors:
            raise StoreUserError(
                "Failed to create metafield definition",
                errors=user_errors,
                context={"errorSource": "userErrors"},
            )
        logger.info("Metafield definition created for %s", resolved_namespace)
        return True

    async def _open(
        self, shop: str, owner_id: str, namespace: str | None
    ) -> FieldContext:
        credential = await self._resolver.resolve_credential(shop)
        return FieldContext(
            store=self._store_factory(credential),
            owner_id=owner_id,
            namespace=(namespace or "").strip() or self._settings.favorites_namespace,
        )

    async def _read(self, context: FieldContext) -> Metafield | None:
        response = await context.store.fetch_metafield(
            context.owner_id, context.namespace
        )
        raise_for_store_errors(response.errors)
        return extract_metafield(response)

    async def _read_modify_write(
        self,
        context: FieldContext,
        planner: Callable[[list[str]], tuple[OutcomeT, WritePlan]],
    ) -> SyncResult[OutcomeT]:
        # TODO: send the read's compareDigest with metafieldsSet (API 2024-07+)
        # so a racing writer is rejected instead of silently overwritten.
        existing = await self._read(context)
        current = decode(existing.value if existing else None)
        logger.debug("Current favorites for %s: %s", context.owner_id, current)

        outcome, plan = planner(current)
        write_response = await self._apply(context, plan, existing)

        created: list[Metafield] = []
        if plan.action is WriteAction.SET:
            nodes = ((write_response.data or {}).get("metafieldsSet") or {}).get(
                "metafields"
            ) or []
            created = [Metafield.model_validate(node) for node in nodes]

        verification = await self._verify(context)
        return SyncResult(
            outcome=outcome,
            plan=plan,
            write_response=write_response,
            created_metafields=created,
            verification=verification,
        )

    async def _apply(
        self,
        context: FieldContext,
        plan: WritePlan,
        existing: Metafield | None,
    ) -> GraphQLResponse:
        if plan.action is WriteAction.DELETE:
            if existing is None or not existing.id:
                raise FavoritesError("Cannot delete a metafield without an id")
            response = await context.store.delete_metafield(existing.id)
        else:
            response = await context.store.set_metafield(
                context.owner_id, context.namespace, encode(plan.handles)
            )

        raise_for_store_errors(response.errors)
        user_errors = collect_user_errors(response.data, *_WRITE_ROOTS)
        if user_errors:
            logger.warning(
                "Store reported user errors for %s: %s", context.owner_id, user_errors
            )
            raise StoreUserError(
                "The store rejected the favorites update",
                errors=user_errors,
                context={"errorSource": "userErrors"},
            )
        return response

    async def _verify(self, context: FieldContext) -> dict[str, Any] | None:
        try:
            response = await context.store.fetch_metafield(
                context.owner_id, context.namespace
            )
        except FavoritesError as exc:
            logger.warning(
                "Verification read failed for %s after a successful write: %s",
                context.owner_id,
                exc.message,
            )
            return None
        return response.model_dump(exclude_none=True)


async def get_favorites_service(
    resolver: SessionResolver = Depends(get_session_resolver),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: AppSettings = Depends(get_settings),
) -> FavoritesService:
    """FastAPI dependency that wires the orchestrator together."""

    return FavoritesService(
        resolver=resolver,
        store_factory=build_store_factory(client, settings),
        settings=settings,
    )
