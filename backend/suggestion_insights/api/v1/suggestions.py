"""Pending-suggestion summary API endpoints.

- Summary: category breakdown, urgency, themes and similarity groups
- Submitter stats: per-user volume and burst detection

Both endpoints are read-only. An upstream database failure is reported as
503 with a structured error body; an empty pending queue is a normal 200
response with ``has_data`` set to false.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from suggestion_insights.api.deps import SuggestionStoreDep
from suggestion_insights.core.config import settings
from suggestion_insights.schemas.common import ErrorDetail, ErrorResponse
from suggestion_insights.schemas.suggestion import (
    CategoryAnalysisResponse,
    DateRange,
    SimilarityClusterResponse,
    SubmitterActivityResponse,
    SuggestionSummaryResponse,
)
from suggestion_insights.services.submitter_activity import SubmitterActivityAnalyzer
from suggestion_insights.services.suggestion_insights import (
    AnalysisReport,
    get_suggestion_insights_service,
)
from suggestion_insights.services.suggestion_store import SuggestionStoreError

logger = logging.getLogger(__name__)
router = APIRouter()


def _upstream_error(error: SuggestionStoreError, message: str) -> HTTPException:
    """Translate a store failure into a 503 with an ErrorResponse body."""
    body = ErrorResponse(
        code="upstream_unavailable",
        message=message,
        details=[ErrorDetail(field=error.operation, message=error.reason)],
    )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=body.model_dump(),
    )


def _to_response(report: AnalysisReport) -> SuggestionSummaryResponse:
    clusters = [
        SimilarityClusterResponse(
            group_title=cluster.group_title,
            count=cluster.count,
            cluster_type=cluster.cluster_type,
            confidence=cluster.confidence,
            average_similarity=cluster.average_similarity,
            top_keywords=cluster.top_keywords,
            examples=cluster.examples,
            member_ids=cluster.member_ids,
            categories=cluster.categories,
            date_range=DateRange(
                oldest=cluster.date_range.oldest,
                newest=cluster.date_range.newest,
            ),
        )
        for cluster in report.clusters
    ]

    return SuggestionSummaryResponse(
        has_data=report.has_data,
        message=report.message,
        total_pending=report.total_pending,
        total_groups=report.total_groups,
        category_breakdown=[
            CategoryAnalysisResponse.model_validate(analysis)
            for analysis in report.category_breakdown
        ],
        top_categories=report.top_categories,
        urgent_categories=report.urgent_categories,
        common_themes=report.common_themes,
        action_recommendations=report.action_recommendations,
        clusters=clusters,
        generated_at=report.generated_at,
        processing_time_ms=report.processing_time_ms,
    )


@router.get(
    "/summary",
    responses={503: {"model": ErrorResponse, "description": "Suggestion store unavailable"}},
)
async def get_suggestion_summary(store: SuggestionStoreDep) -> SuggestionSummaryResponse:
    """
    Analyze all pending suggestions from active users.

    Returns per-category urgency and recommendations, corpus-wide themes, and
    groups of duplicate or related suggestions.
    """
    try:
        suggestions = await store.fetch_pending_suggestions()
        blocked_user_ids = await store.fetch_blocked_user_ids()
    except SuggestionStoreError as e:
        raise _upstream_error(e, "Failed to generate summary") from e

    service = get_suggestion_insights_service(
        similarity_threshold=settings.suggestion_similarity_threshold,
        recent_days=settings.suggestion_recent_days,
    )
    report = service.build_report(suggestions, blocked_user_ids)
    return _to_response(report)


@router.get(
    "/submitter-stats",
    responses={503: {"model": ErrorResponse, "description": "Suggestion store unavailable"}},
)
async def get_submitter_stats(store: SuggestionStoreDep) -> list[SubmitterActivityResponse]:
    """
    Per-user suggestion totals and the largest burst within 24 hours.

    Users with more than five suggestions in one day are marked Suspicious.
    """
    try:
        users = await store.fetch_users()
        events = await store.fetch_submission_events()
    except SuggestionStoreError as e:
        raise _upstream_error(e, "Failed to fetch submitter stats") from e

    activity = SubmitterActivityAnalyzer().analyze(users, events)
    return [SubmitterActivityResponse.model_validate(entry) for entry in activity]
