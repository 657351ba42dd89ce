"""SQLAlchemy models."""

from suggestion_insights.models.suggestion import Suggestion, SuggestionStatus
from suggestion_insights.models.user import User

__all__ = [
    "User",
    "Suggestion",
    "SuggestionStatus",
]
