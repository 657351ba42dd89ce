"""Suggestion analysis schemas."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from suggestion_insights.schemas.common import BaseSchema

# Bucket for suggestions stored without a category
UNCATEGORIZED = "Uncategorized"


class SuggestionRecord(BaseModel):
    """Immutable snapshot of one pending suggestion.

    Missing text fields become empty strings and a missing category becomes the
    ``Uncategorized`` bucket, so a single malformed row cannot abort a report.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    category: str = UNCATEGORIZED
    title: str = ""
    description: str = ""
    created_at: datetime
    submitter_id: str | None = None
    submitter_blocked: bool = False

    @field_validator("id", "submitter_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        if value is None:
            return None
        return str(value)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _empty_text(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNCATEGORIZED
        return value

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from the store are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def text(self) -> str:
        """Analyzable text: title and description joined by a space."""
        return f"{self.title} {self.description}"


class ClusterType(str, Enum):
    """How the members of a similarity cluster were matched."""

    EXACT = "exact"
    SEMANTIC = "semantic"
    THEME = "theme"


class Priority(str, Enum):
    """Priority tier derived from a category's urgency score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DateRange(BaseModel):
    """Oldest and newest creation time within a cluster."""

    oldest: datetime
    newest: datetime


class SimilarityClusterResponse(BaseSchema):
    """A group of related suggestions."""

    group_title: str
    count: int
    cluster_type: ClusterType
    confidence: float
    average_similarity: float
    top_keywords: list[str]
    examples: list[str]
    member_ids: list[str]
    categories: list[str]
    date_range: DateRange


class CategoryAnalysisResponse(BaseSchema):
    """Volume and urgency analysis for one category."""

    category: str
    count: int
    percentage: float
    avg_text_length: int
    common_words: list[str]
    urgency_score: float
    priority: Priority
    recommendations: list[str]


class SuggestionSummaryResponse(BaseModel):
    """Response for the pending-suggestion summary.

    ``has_data`` is false when no pending suggestion from an active user exists;
    ``message`` then explains why every list is empty.
    """

    has_data: bool
    message: str | None = None
    total_pending: int
    total_groups: int
    category_breakdown: list[CategoryAnalysisResponse]
    top_categories: list[str]
    urgent_categories: list[str]
    common_themes: list[str]
    action_recommendations: list[str]
    clusters: list[SimilarityClusterResponse]
    generated_at: datetime
    processing_time_ms: float


class SubmitterActivityResponse(BaseSchema):
    """Suggestion activity of one user."""

    user_id: str
    name: str
    email: str | None
    avatar_url: str | None
    total_suggestions: int
    max_suggestions_in_one_day: int
    status: str
    is_blocked: bool
    has_hidden_suggestions: bool
