"""Exception taxonomy for favorites synchronisation and store error classification.

Every failure the synchronizer can report derives from :class:`FavoritesError`
and carries the HTTP status and :class:`ErrorType` the API layer should use.
The classification helpers at the bottom of the module are pure functions over
the error payloads returned by the Admin GraphQL API.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from storefront_favorites.schemas.error import ErrorType

ACCESS_DENIED_CODE = "ACCESS_DENIED"
PROTECTED_DATA_MARKER = "protected customer data"

ACCESS_POLICY_ERROR = "Protected Customer Data Access Required"
ACCESS_POLICY_MESSAGE = (
    "This app needs to be approved for protected customer data access to manage"
    " customer metafields. Please apply for this access in your Shopify Partner"
    " Dashboard."
)
ACCESS_POLICY_DEVELOPER_NOTE = (
    "For development, consider using app metafields or session storage as"
    " alternatives."
)
ACCESS_POLICY_DOCUMENTATION = (
    "https://shopify.dev/docs/apps/launch/protected-customer-data"
)


class FavoritesError(Exception):
    """Base class for failures surfaced as structured API responses."""

    status_code: int = 500
    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        errors: Sequence[Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.errors = list(errors) if errors is not None else None
        self.context = dict(context or {})


class FavoritesValidationError(FavoritesError):
    """Input failed validation before any store call was made."""

    status_code = 400
    error_type = ErrorType.VALIDATION_ERROR


class SessionNotFoundError(FavoritesError):
    """No access credential is bound to the requested shop."""

    status_code = 400
    error_type = ErrorType.AUTHENTICATION_ERROR


class AccessPolicyError(FavoritesError):
    """The store refused access to protected customer data."""

    status_code = 403
    error_type = ErrorType.ACCESS_POLICY_ERROR

    def __init__(self, store_error: Mapping[str, Any]) -> None:
        super().__init__(
            ACCESS_POLICY_ERROR,
            detail=ACCESS_POLICY_MESSAGE,
            context={
                "message": ACCESS_POLICY_MESSAGE,
                "documentation": ACCESS_POLICY_DOCUMENTATION,
                "developerNote": ACCESS_POLICY_DEVELOPER_NOTE,
                "shopifyError": dict(store_error),
            },
        )
        self.store_error = dict(store_error)


class NotFoundError(FavoritesError):
    """Base class for the 404 family."""

    status_code = 404
    error_type = ErrorType.NOT_FOUND


class NothingToRemoveError(NotFoundError):
    """The customer has no stored favorites at all."""


class HandleNotFoundError(NotFoundError):
    """The handle to remove is not part of the stored list."""


class CustomerNotFoundError(NotFoundError):
    """The store returned no customer for the requested id."""


class StoreUserError(FavoritesError):
    """The store reported GraphQL or mutation-level user errors."""

    status_code = 400
    error_type = ErrorType.STORE_ERROR


class StoreTransportError(FavoritesError):
    """The store could not be reached or answered with an unusable response."""

    status_code = 500
    error_type = ErrorType.NETWORK_ERROR


def find_access_denied(
    errors: Iterable[Mapping[str, Any]] | None,
) -> Mapping[str, Any] | None:
    """Return the first protected-data access error in ``errors``, if any."""

    for error in errors or ():
        if not isinstance(error, Mapping):
            continue
        extensions = error.get("extensions") or {}
        code = extensions.get("code") if isinstance(extensions, Mapping) else None
        message = str(error.get("message") or "")
        if code == ACCESS_DENIED_CODE and PROTECTED_DATA_MARKER in message.lower():
            return error
    return None


def raise_for_store_errors(errors: Sequence[Mapping[str, Any]] | None) -> None:
    """Raise the exception matching a top-level GraphQL error list.

    An access-policy error wins over everything else in the list; any other
    non-empty list is passed through verbatim as a :class:`StoreUserError`.
    """

    if not errors:
        return

    access_denied = find_access_denied(errors)
    if access_denied is not None:
        raise AccessPolicyError(access_denied)

    raise StoreUserError(
        "The store rejected the request",
        errors=errors,
        context={"errorSource": "graphql"},
    )


def collect_user_errors(
    data: Mapping[str, Any] | None, *roots: str
) -> list[dict[str, Any]]:
    """Gather ``userErrors`` attached to the named mutation results in ``data``."""

    collected: list[dict[str, Any]] = []
    if not data:
        return collected

    for root in roots:
        result = data.get(root) or {}
        for user_error in result.get("userErrors") or ():
            collected.append(dict(user_error))
    return collected


__all__ = [
    "ACCESS_DENIED_CODE",
    "ACCESS_POLICY_DEVELOPER_NOTE",
    "ACCESS_POLICY_DOCUMENTATION",
    "ACCESS_POLICY_ERROR",
    "ACCESS_POLICY_MESSAGE",
    "AccessPolicyError",
    "CustomerNotFoundError",
    "FavoritesError",
    "FavoritesValidationError",
    "HandleNotFoundError",
    "NotFoundError",
    "NothingToRemoveError",
    "SessionNotFoundError",
    "StoreTransportError",
    "StoreUserError",
    "collect_user_errors",
    "find_access_denied",
    "raise_for_store_errors",
]
