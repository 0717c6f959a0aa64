"""Centralized configuration management for the storefront favorites service."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings singleton so scripts importing :mod:`storefront_favorites.settings`
# observe the same values as the API process.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SHOPIFY_API_VERSION = "2024-01"
DEFAULT_FAVORITES_NAMESPACE = "favorites"
FAVORITES_KEY = "favorite_products"
FAVORITES_METAFIELD_TYPE = "multi_line_text_field"
DEFAULT_STORE_TIMEOUT_SECONDS = 10.0
DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/sessions.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
SHOP_DOMAIN_SUFFIX = ".myshopify.com"


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Besides the raw environment values the class exposes parsed helpers (the
    async database URL, the shop token mapping, the CORS origin list) so
    callers never repeat string munging.
    """

    _explicit_namespace: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values: object) -> None:
        """Remember whether the favorites namespace was configured explicitly."""

        normalized_keys = {str(key).lower() for key in values}
        super().__init__(**values)
        self._explicit_namespace = "favorites_namespace" in normalized_keys
        namespace_env = os.getenv("FAVORITES_NAMESPACE")
        if namespace_env is not None and namespace_env.strip():
            self._explicit_namespace = True

    shopify_api_version: str = Field(
        default=DEFAULT_SHOPIFY_API_VERSION,
        alias="SHOPIFY_API_VERSION",
        description="Admin GraphQL API version segment used to build endpoint URLs.",
    )
    favorites_namespace: str = Field(
        default=DEFAULT_FAVORITES_NAMESPACE,
        alias="FAVORITES_NAMESPACE",
        min_length=1,
        description=(
            "Metafield namespace holding the favorites list. Every route uses"
            " this value unless the request names a namespace explicitly."
        ),
    )
    favorites_key: str = Field(
        default=FAVORITES_KEY,
        alias="FAVORITES_KEY",
        min_length=1,
        description="Metafield key holding the favorites list.",
    )
    store_timeout_seconds: float = Field(
        default=DEFAULT_STORE_TIMEOUT_SECONDS,
        alias="STORE_TIMEOUT_SECONDS",
        gt=0,
        description="Timeout applied to every GraphQL request sent to the store.",
    )
    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "SQLAlchemy URL of the database holding the app's OAuth session"
            " table. Postgres URLs in sync format are coerced to psycopg."
        ),
    )
    shop_access_tokens_raw: str | None = Field(
        default=None,
        alias="SHOP_ACCESS_TOKENS",
        description=(
            "Comma-separated ``shop=token`` pairs. When present, credentials"
            " are served from this mapping instead of the session table."
        ),
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of allowed CORS origins (default ``*``).",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if not self.database_url or not self.database_url.strip():
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()
        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)
        return url

    @property
    def shop_access_tokens(self) -> dict[str, str]:
        """Parse ``SHOP_ACCESS_TOKENS`` into a ``{shop_domain: token}`` mapping."""

        if not self.shop_access_tokens_raw:
            return {}

        tokens: dict[str, str] = {}
        for pair in self.shop_access_tokens_raw.split(","):
            shop, separator, token = pair.partition("=")
            if not separator or not shop.strip() or not token.strip():
                continue
            tokens[normalize_shop_domain(shop)] = token.strip()
        return tokens

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return configured CORS origins, falling back to the wildcard."""

        if not self.cors_allow_origins_raw:
            return ["*"]

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin] or ["*"]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def graphql_url(self, shop_domain: str) -> str:
        """Return the Admin GraphQL endpoint for ``shop_domain``."""

        return f"https://{shop_domain}/admin/api/{self.shopify_api_version}/graphql.json"

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_namespace:
            warnings.append(
                "FAVORITES_NAMESPACE is not set - using default namespace "
                f"'{DEFAULT_FAVORITES_NAMESPACE}' (must match the storefront widget)"
            )

        if not self.database_url and not self.shop_access_tokens:
            warnings.append(
                "Neither DATABASE_URL nor SHOP_ACCESS_TOKENS is set - sessions "
                f"will be read from {DEFAULT_SQLITE_DATABASE_URL}"
            )

        return warnings


def normalize_shop_domain(shop: str) -> str:
    """Return ``shop`` as a full ``*.myshopify.com`` domain."""

    domain = shop.strip()
    if SHOP_DOMAIN_SUFFIX in domain:
        return domain
    return f"{domain}{SHOP_DOMAIN_SUFFIX}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_FAVORITES_NAMESPACE",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SHOPIFY_API_VERSION",
    "DEFAULT_SQLITE_DATABASE_URL",
    "DEFAULT_STORE_TIMEOUT_SECONDS",
    "FAVORITES_KEY",
    "FAVORITES_METAFIELD_TYPE",
    "get_settings",
    "normalize_shop_domain",
]
