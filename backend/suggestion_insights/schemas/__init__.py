"""Pydantic schemas."""

from suggestion_insights.schemas.common import BaseSchema, ErrorDetail, ErrorResponse
from suggestion_insights.schemas.suggestion import (
    UNCATEGORIZED,
    CategoryAnalysisResponse,
    ClusterType,
    Priority,
    SimilarityClusterResponse,
    SubmitterActivityResponse,
    SuggestionRecord,
    SuggestionSummaryResponse,
)

__all__ = [
    "BaseSchema",
    "ErrorDetail",
    "ErrorResponse",
    "UNCATEGORIZED",
    "CategoryAnalysisResponse",
    "ClusterType",
    "Priority",
    "SimilarityClusterResponse",
    "SubmitterActivityResponse",
    "SuggestionRecord",
    "SuggestionSummaryResponse",
]
