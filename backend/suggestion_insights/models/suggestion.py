"""Suggestion model."""

import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from suggestion_insights.models.base import BaseModel

if TYPE_CHECKING:
    from suggestion_insights.models.user import User


class SuggestionStatus(str, enum.Enum):
    """Review status of a suggestion."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Suggestion(BaseModel):
    """User-submitted feedback item awaiting admin review."""

    __tablename__ = "suggestions"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    category: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    title: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=SuggestionStatus.PENDING.value,
        index=True,
    )
    is_hidden: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Relationships
    user: Mapped["User | None"] = relationship(
        "User",
        back_populates="suggestions",
    )

    def __repr__(self) -> str:
        return f"<Suggestion {self.id} [{self.status}] {self.title!r}>"
