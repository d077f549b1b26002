"""Database models for users."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from mutuals.db.postgres.session import Base

if TYPE_CHECKING:
    from mutuals.features.matches.models import Match


class User(Base):
    """User model, the entity on both ends of a match."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    # Deleting a user deletes its matches in both directions
    matches: Mapped[list["Match"]] = relationship(
        foreign_keys="Match.user_id",
        back_populates="user",
        cascade="all",
        order_by="Match.id",
    )
    inverse_matches: Mapped[list["Match"]] = relationship(
        foreign_keys="Match.matched_user_id",
        back_populates="matched_user",
        cascade="all",
    )

    def __repr__(self) -> str:
        return f"User(id={self.id!s}, email={self.email!r})"
