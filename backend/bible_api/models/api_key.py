"""
Telugu Bible API — API Key SQLAlchemy Model
=============================================

What:  ORM model for the `api_keys` table managed by the dashboard.
Why:   The API records when each key was last presented. Keys are issued,
       toggled and deleted by the dashboard; this service never enforces them.
How:   A single UPDATE ... SET last_used_at WHERE key_hash = :token per request
       that carries a key (see services/usage_service.py).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from bible_api.database import Base


class ApiKey(Base):
    __tablename__ = "api_keys"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Human label chosen when the key was created ("Mobile app")
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # The token as sent by clients in x-api-key / ?key=
    key_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Bumped by the usage tracker; NULL until the key is first used
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        UniqueConstraint("key_hash", name="uq_api_keys_key_hash"),
    )

    def __repr__(self) -> str:
        return f"<ApiKey(name='{self.name}', is_active={self.is_active})>"
