"""Suggestion Insights: orchestrates the pending-suggestion summary.

Filters out suggestions from blocked submitters, runs category analysis and
similarity clustering independently over the survivors, and combines the
results into one read-only :class:`AnalysisReport`.
"""

import logging
import time
from collections import Counter
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from suggestion_insights.schemas.suggestion import Priority, SuggestionRecord
from suggestion_insights.services.category_analyzer import (
    CategoryAnalysis,
    CategoryAnalyzer,
)
from suggestion_insights.services.suggestion_clustering import (
    SimilarityCluster,
    SuggestionClusterBuilder,
)
from suggestion_insights.services.text_normalizer import coarse_tokens

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No pending suggestions from active users found"

TOP_CATEGORIES_LIMIT = 3
COMMON_THEMES_LIMIT = 8
HIGH_VOLUME_CATEGORY_THRESHOLD = 5
AUTOMATION_SUGGESTION_THRESHOLD = 20


@dataclass(frozen=True)
class AnalysisReport:
    """Result of one pending-suggestion analysis run."""
    total_pending: int
    category_breakdown: list[CategoryAnalysis] = field(default_factory=list)
    top_categories: list[str] = field(default_factory=list)
    urgent_categories: list[str] = field(default_factory=list)
    common_themes: list[str] = field(default_factory=list)
    action_recommendations: list[str] = field(default_factory=list)
    clusters: list[SimilarityCluster] = field(default_factory=list)
    message: str | None = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    processing_time_ms: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.total_pending > 0

    @property
    def total_groups(self) -> int:
        return len(self.clusters)


# =============================================================================
# Insight Helpers
# =============================================================================


def filter_active_suggestions(
    suggestions: Sequence[SuggestionRecord],
    blocked_user_ids: Collection[str] = (),
) -> list[SuggestionRecord]:
    """Drop suggestions whose submitter is blocked."""
    blocked = set(blocked_user_ids)
    return [
        s for s in suggestions
        if not s.submitter_blocked
        and (s.submitter_id is None or s.submitter_id not in blocked)
    ]


def extract_common_themes(
    suggestions: Sequence[SuggestionRecord],
    limit: int = COMMON_THEMES_LIMIT,
) -> list[str]:
    """Most frequent words longer than three characters across all suggestions."""
    frequencies: Counter[str] = Counter()
    for suggestion in suggestions:
        frequencies.update(coarse_tokens(suggestion.text))
    return [word for word, _ in frequencies.most_common(limit)]


def generate_action_recommendations(
    categories: Sequence[CategoryAnalysis],
) -> list[str]:
    """Corpus-level recommendations derived from the category breakdown."""
    recommendations: list[str] = []

    high_priority = [c for c in categories if c.priority == Priority.HIGH]
    if high_priority:
        recommendations.append(
            f"Focus on {len(high_priority)} high-priority categories first"
        )

    large_categories = [c for c in categories if c.count > HIGH_VOLUME_CATEGORY_THRESHOLD]
    if large_categories:
        recommendations.append(
            f"Batch process {len(large_categories)} categories with high volume"
        )

    total = sum(c.count for c in categories)
    if total > AUTOMATION_SUGGESTION_THRESHOLD:
        recommendations.append("Consider implementing automated categorization")

    return recommendations


# =============================================================================
# SuggestionInsightsService
# =============================================================================


class SuggestionInsightsService:
    """Builds the pending-suggestion report.

    Holds no state between calls; concurrent reports are independent.
    """

    def __init__(
        self,
        category_analyzer: CategoryAnalyzer | None = None,
        cluster_builder: SuggestionClusterBuilder | None = None,
    ):
        self.category_analyzer = category_analyzer or CategoryAnalyzer()
        self.cluster_builder = cluster_builder or SuggestionClusterBuilder()

    def build_report(
        self,
        suggestions: Sequence[SuggestionRecord],
        blocked_user_ids: Collection[str] = (),
        now: datetime | None = None,
    ) -> AnalysisReport:
        """Analyze pending suggestions.

        Args:
            suggestions: All pending suggestions
            blocked_user_ids: Submitters whose suggestions are excluded
            now: Reference time for recency scoring, defaults to current UTC time

        Returns:
            AnalysisReport; when nothing survives filtering the report has
            zero counts and an explanatory message
        """
        started = time.perf_counter()
        now = now or datetime.now(UTC)

        active = filter_active_suggestions(suggestions, blocked_user_ids)
        excluded = len(suggestions) - len(active)
        if excluded:
            logger.info(f"Excluded {excluded} suggestions from blocked submitters")

        if not active:
            logger.info("No pending suggestions from active users; skipping analysis")
            return AnalysisReport(
                total_pending=0,
                message=NO_DATA_MESSAGE,
                generated_at=now,
                processing_time_ms=(time.perf_counter() - started) * 1000,
            )

        categories = self.category_analyzer.analyze_categories(active, now=now)
        clusters = self.cluster_builder.cluster(active)

        report = AnalysisReport(
            total_pending=len(active),
            category_breakdown=categories,
            top_categories=[c.category for c in categories[:TOP_CATEGORIES_LIMIT]],
            urgent_categories=[c.category for c in categories if c.priority == Priority.HIGH],
            common_themes=extract_common_themes(active),
            action_recommendations=generate_action_recommendations(categories),
            clusters=clusters,
            generated_at=now,
            processing_time_ms=(time.perf_counter() - started) * 1000,
        )

        logger.info(
            f"Suggestion report: {report.total_pending} pending, "
            f"{len(categories)} categories, {report.total_groups} similarity groups "
            f"in {report.processing_time_ms:.1f}ms"
        )
        return report


def get_suggestion_insights_service(
    similarity_threshold: float = 0.6,
    recent_days: int = 7,
) -> SuggestionInsightsService:
    """Create a SuggestionInsightsService with the given tuning."""
    return SuggestionInsightsService(
        category_analyzer=CategoryAnalyzer(recent_days),
        cluster_builder=SuggestionClusterBuilder(similarity_threshold),
    )


def build_report(
    suggestions: Sequence[SuggestionRecord],
    blocked_user_ids: Collection[str] = (),
    now: datetime | None = None,
) -> AnalysisReport:
    """Build a report with default tuning."""
    return SuggestionInsightsService().build_report(suggestions, blocked_user_ids, now)
