"""Category Analyzer for pending suggestions.

Aggregates suggestions by category and scores each category with a
transparent urgency formula:

    urgency = min(10, volume + keyword + recency)

- volume: min(count / 5, 3)
- keyword: +2 when the category name mentions an urgent keyword
- recency: +0.5 per suggestion created within the recent window

Priority tiers: high (> 7), medium (> 4), low.
"""

import logging
import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from suggestion_insights.schemas.suggestion import Priority, SuggestionRecord
from suggestion_insights.services.text_normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryAnalysis:
    """Volume and urgency analysis for one category."""
    category: str
    count: int
    percentage: float
    avg_text_length: int
    common_words: list[str] = field(default_factory=list)
    urgency_score: float = 0.0
    priority: Priority = Priority.LOW
    recommendations: list[str] = field(default_factory=list)


class CategoryAnalyzer:
    """Scores suggestion categories by volume, keywords and recency.

    Urgency scores are in the range [0, 10].
    """

    URGENT_KEYWORDS: tuple[str, ...] = ("bug", "error", "issue", "problem", "critical", "urgent")

    VOLUME_DIVISOR = 5
    VOLUME_CAP = 3.0
    KEYWORD_BONUS = 2.0
    RECENT_WEIGHT = 0.5
    MAX_URGENCY = 10.0

    HIGH_PRIORITY_THRESHOLD = 7.0
    MEDIUM_PRIORITY_THRESHOLD = 4.0

    COMMON_WORDS_LIMIT = 5
    BATCH_VOLUME_THRESHOLD = 10
    INDIVIDUAL_VOLUME_THRESHOLD = 3

    def __init__(self, recent_days: int = 7):
        """Initialize the analyzer.

        Args:
            recent_days: Suggestions younger than this count as recent
        """
        self.recent_window = timedelta(days=recent_days)

    def _volume_score(self, count: int) -> float:
        """Formula: min(count / 5, 3)"""
        return min(count / self.VOLUME_DIVISOR, self.VOLUME_CAP)

    def _keyword_score(self, category: str) -> float:
        """Formula: 2 if the category name contains an urgent keyword, else 0"""
        name = category.lower()
        if any(keyword in name for keyword in self.URGENT_KEYWORDS):
            return self.KEYWORD_BONUS
        return 0.0

    def _count_recent(self, suggestions: Sequence[SuggestionRecord], now: datetime) -> int:
        return sum(1 for s in suggestions if now - s.created_at < self.recent_window)

    def calculate_urgency_score(
        self,
        suggestions: Sequence[SuggestionRecord],
        category: str,
        now: datetime,
    ) -> float:
        """Calculate the urgency score of one category.

        Args:
            suggestions: Suggestions in the category
            category: Category name
            now: Reference time for recency

        Returns:
            Urgency score 0-10
        """
        score = (
            self._volume_score(len(suggestions))
            + self._keyword_score(category)
            + self.RECENT_WEIGHT * self._count_recent(suggestions, now)
        )
        return min(self.MAX_URGENCY, score)

    def get_priority(self, urgency_score: float) -> Priority:
        """Map an urgency score to a priority tier."""
        if urgency_score > self.HIGH_PRIORITY_THRESHOLD:
            return Priority.HIGH
        elif urgency_score > self.MEDIUM_PRIORITY_THRESHOLD:
            return Priority.MEDIUM
        else:
            return Priority.LOW

    def generate_recommendations(
        self,
        count: int,
        urgency_score: float,
        common_words: list[str],
    ) -> list[str]:
        """Generate every recommendation that applies to a category."""
        recommendations: list[str] = []

        if count > self.BATCH_VOLUME_THRESHOLD:
            recommendations.append(
                f"High volume: Consider batch processing for {count} suggestions"
            )

        if urgency_score > self.HIGH_PRIORITY_THRESHOLD:
            recommendations.append("High priority: Review immediately")

        if common_words:
            recommendations.append(f"Common themes: {', '.join(common_words[:3])}")

        if count < self.INDIVIDUAL_VOLUME_THRESHOLD:
            recommendations.append("Low volume: Can be processed individually")

        return recommendations

    def _common_words(self, suggestions: Sequence[SuggestionRecord]) -> list[str]:
        frequencies: Counter[str] = Counter()
        for suggestion in suggestions:
            frequencies.update(normalize(suggestion.text))
        return [word for word, _ in frequencies.most_common(self.COMMON_WORDS_LIMIT)]

    def analyze_categories(
        self,
        suggestions: Sequence[SuggestionRecord],
        now: datetime | None = None,
    ) -> list[CategoryAnalysis]:
        """Analyze suggestions grouped by category.

        Args:
            suggestions: Suggestions to analyze
            now: Reference time for recency, defaults to the current UTC time

        Returns:
            One analysis per category, sorted by count descending
        """
        if not suggestions:
            return []

        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)

        groups: dict[str, list[SuggestionRecord]] = {}
        for suggestion in suggestions:
            groups.setdefault(suggestion.category, []).append(suggestion)

        total = len(suggestions)
        analyses: list[CategoryAnalysis] = []

        for category, members in groups.items():
            count = len(members)
            common_words = self._common_words(members)
            urgency_score = self.calculate_urgency_score(members, category, now)

            analyses.append(
                CategoryAnalysis(
                    category=category,
                    count=count,
                    percentage=count / total * 100,
                    avg_text_length=math.floor(sum(len(s.text) for s in members) / count + 0.5),
                    common_words=common_words,
                    urgency_score=urgency_score,
                    priority=self.get_priority(urgency_score),
                    recommendations=self.generate_recommendations(
                        count, urgency_score, common_words
                    ),
                )
            )

        analyses.sort(key=lambda a: a.count, reverse=True)

        logger.info(
            f"Category analysis: {total} suggestions in {len(analyses)} categories "
            f"({sum(1 for a in analyses if a.priority == Priority.HIGH)} high priority)"
        )
        return analyses


def get_category_analyzer(recent_days: int = 7) -> CategoryAnalyzer:
    """Create a CategoryAnalyzer instance."""
    return CategoryAnalyzer(recent_days)
