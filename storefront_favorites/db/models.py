from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ShopSession(Base):
    """OAuth session row written by the embedded admin app.

    The table and column names follow the session storage schema of the
    Shopify app template, so the service reads the same rows the admin app
    writes. This service never writes to it.
    """

    __tablename__ = "Session"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    shop: Mapped[str] = mapped_column(String, nullable=False, index=True)
    state: Mapped[str] = mapped_column(String, nullable=False, default="")
    is_online: Mapped[bool] = mapped_column(
        "isOnline", Boolean, nullable=False, default=False
    )
    scope: Mapped[str | None] = mapped_column(String, nullable=True)
    expires: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    access_token: Mapped[str] = mapped_column("accessToken", Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column("userId", nullable=True)
