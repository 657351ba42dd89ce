"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from suggestion_insights.core.database import get_db
from suggestion_insights.services.suggestion_store import SuggestionStore

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_suggestion_store(db: DbSession) -> SuggestionStore:
    """Build a read-only SuggestionStore on the request's session."""
    return SuggestionStore(db)


SuggestionStoreDep = Annotated[SuggestionStore, Depends(get_suggestion_store)]
