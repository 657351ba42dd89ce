"""User model."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from suggestion_insights.models.base import BaseModel

if TYPE_CHECKING:
    from suggestion_insights.models.suggestion import Suggestion


class User(BaseModel):
    """Platform member who can submit suggestions."""

    __tablename__ = "users"

    first_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )
    last_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    avatar_url: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    is_blocked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # Relationships
    suggestions: Mapped[list["Suggestion"]] = relationship(
        "Suggestion",
        back_populates="user",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User {self.email}>"
