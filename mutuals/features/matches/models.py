"""Database models for matches."""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from mutuals.db.postgres.session import Base
from mutuals.features.users.models import User


class Match(Base):
    """Directed match record from ``user`` to ``matched_user``.

    A match is only ever inserted or deleted, never updated. Its reciprocal
    (the same pair swapped) is maintained by ``MatchedUsersService``; the
    table itself only enforces per-direction uniqueness.
    """

    __tablename__ = "matches"

    # Integer key doubles as insertion order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    matched_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    user: Mapped[User] = relationship(
        foreign_keys=[user_id], back_populates="matches"
    )
    matched_user: Mapped[User] = relationship(
        foreign_keys=[matched_user_id], back_populates="inverse_matches"
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint(
            "user_id", "matched_user_id", name="uq_matches_user_id_matched_user_id"
        ),
        CheckConstraint("user_id <> matched_user_id", name="ck_matches_not_self"),
        Index("ix_matches_user_id", "user_id"),
        Index("ix_matches_matched_user_id", "matched_user_id"),
    )

    # Fetch server-side created_at on flush; async sessions cannot lazy-load it
    __mapper_args__ = {"eager_defaults": True}

    def __repr__(self) -> str:
        return (
            f"Match(user_id={self.user_id!s}, matched_user_id={self.matched_user_id!s})"
        )
