"""Business logic services.

The analysis engine (normalizer, vectorizer, similarity, clustering, category
analysis, insights) is pure and stateless; only ``suggestion_store`` performs I/O.
"""

from suggestion_insights.services.suggestion_insights import (
    AnalysisReport,
    SuggestionInsightsService,
    build_report,
)

__all__ = [
    "AnalysisReport",
    "SuggestionInsightsService",
    "build_report",
]
