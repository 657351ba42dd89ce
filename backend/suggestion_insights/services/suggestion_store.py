"""Read-only access to suggestions and their submitters.

Loads everything an analysis run needs in one upfront fetch; the analysis
itself never touches the database.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from suggestion_insights.models import Suggestion, SuggestionStatus, User
from suggestion_insights.schemas.suggestion import SuggestionRecord

logger = logging.getLogger(__name__)


class SuggestionStoreError(Exception):
    """Raised when suggestions or users cannot be loaded."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Failed to {operation}: {reason}")


@dataclass(frozen=True)
class SubmissionEvent:
    """One suggestion as seen by submitter activity statistics."""
    user_id: str
    created_at: datetime
    is_hidden: bool


class SuggestionStore:
    """Fetches suggestion snapshots from the application database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_pending_suggestions(self) -> list[SuggestionRecord]:
        """Load all pending suggestions with their submitter's blocked flag.

        Suggestions without a known submitter are treated as not blocked.

        Raises:
            SuggestionStoreError: If the database query fails
        """
        query = (
            select(Suggestion, User.is_blocked)
            .outerjoin(User, Suggestion.user_id == User.id)
            .where(Suggestion.status == SuggestionStatus.PENDING.value)
            .order_by(Suggestion.created_at, Suggestion.id)
        )
        try:
            result = await self.db.execute(query)
            rows = result.all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load pending suggestions: {e}")
            raise SuggestionStoreError("load pending suggestions", str(e)) from e

        records = [
            SuggestionRecord(
                id=suggestion.id,
                category=suggestion.category,
                title=suggestion.title,
                description=suggestion.description,
                created_at=suggestion.created_at,
                submitter_id=suggestion.user_id,
                submitter_blocked=bool(is_blocked),
            )
            for suggestion, is_blocked in rows
        ]
        logger.debug(f"Loaded {len(records)} pending suggestions")
        return records

    async def fetch_blocked_user_ids(self) -> set[str]:
        """Load the ids of all currently blocked users.

        Raises:
            SuggestionStoreError: If the database query fails
        """
        try:
            result = await self.db.execute(select(User.id).where(User.is_blocked.is_(True)))
            user_ids: list[uuid.UUID] = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load blocked users: {e}")
            raise SuggestionStoreError("load blocked users", str(e)) from e

        return {str(user_id) for user_id in user_ids}

    async def fetch_users(self) -> list[User]:
        """Load every user for activity statistics.

        Raises:
            SuggestionStoreError: If the database query fails
        """
        try:
            result = await self.db.execute(select(User).order_by(User.created_at, User.id))
            return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load users: {e}")
            raise SuggestionStoreError("load users", str(e)) from e

    async def fetch_submission_events(self) -> list[SubmissionEvent]:
        """Load creation time and visibility of every attributed suggestion.

        Raises:
            SuggestionStoreError: If the database query fails
        """
        query = (
            select(Suggestion.user_id, Suggestion.created_at, Suggestion.is_hidden)
            .where(Suggestion.user_id.is_not(None))
        )
        try:
            result = await self.db.execute(query)
            rows = result.all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to load submission events: {e}")
            raise SuggestionStoreError("load submission events", str(e)) from e

        return [
            SubmissionEvent(user_id=str(user_id), created_at=created_at, is_hidden=bool(is_hidden))
            for user_id, created_at, is_hidden in rows
        ]
