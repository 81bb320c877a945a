"""
Common mixins for the PHR tables
Identifiers are UUID4 strings and timestamps are naive UTC
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class UuidMixin:
    """Mixin for a UUID string primary key"""
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        default=utcnow, onupdate=utcnow
    )


class StatusMixin:
    """Mixin for entities with active/inactive status"""
    is_active: Mapped[bool] = mapped_column(default=True)
