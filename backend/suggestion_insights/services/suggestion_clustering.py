"""Suggestion Clustering for the pending-suggestion summary.

Groups near-duplicate and related suggestions in three phases that run in
strict sequence, each on what the previous phases left unclaimed:

- Exact: identical normalized text
- Semantic: TF-IDF cosine similarity to a seed suggestion
- Theme: a shared high-frequency keyword

A suggestion appears in at most one cluster and every cluster has at least
two members.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np

from suggestion_insights.schemas.suggestion import ClusterType, SuggestionRecord
from suggestion_insights.services.similarity import (
    average_pairwise_similarity,
    similarity_matrix,
)
from suggestion_insights.services.text_normalizer import normalize, processed_text
from suggestion_insights.services.tfidf import NormalizedDocument, TfidfVectorizer

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Cosine similarity a candidate must exceed to join a seed's semantic cluster
SIMILARITY_THRESHOLD = 0.6

# Semantic confidence is average similarity scaled by this factor, then capped
SEMANTIC_CONFIDENCE_BOOST = 1.2
SEMANTIC_CONFIDENCE_CAP = 0.95

# Theme clusters carry fixed scores
THEME_CONFIDENCE = 0.7
THEME_AVERAGE_SIMILARITY = 0.6

MAX_THEMES = 10
TOP_KEYWORDS_LIMIT = 5
MIN_CLUSTER_SIZE = 2


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class PreparedSuggestion:
    """A suggestion paired with its normalized tokens."""
    record: SuggestionRecord
    tokens: tuple[str, ...]

    @property
    def processed_text(self) -> str:
        return processed_text(list(self.tokens))

    def to_document(self) -> NormalizedDocument:
        return NormalizedDocument(source_id=self.record.id, tokens=self.tokens)


@dataclass(frozen=True)
class DateRange:
    """Oldest and newest member creation time."""
    oldest: datetime
    newest: datetime


@dataclass(frozen=True)
class SimilarityCluster:
    """Group of related suggestions.

    Attributes:
        members: Member suggestions in input order
        cluster_type: exact, semantic or theme
        confidence: How sure the grouping is (0.0-1.0)
        average_similarity: Mean pairwise similarity of the members
        date_range: Oldest and newest member creation time
        top_keywords: Up to five most frequent member tokens
        group_title: Most descriptive member title
    """
    members: tuple[SuggestionRecord, ...]
    cluster_type: ClusterType
    confidence: float
    average_similarity: float
    date_range: DateRange
    top_keywords: list[str] = field(default_factory=list)
    group_title: str = ""

    @property
    def count(self) -> int:
        return len(self.members)

    @property
    def member_ids(self) -> list[str]:
        return [member.id for member in self.members]

    @property
    def examples(self) -> list[str]:
        return [member.title for member in self.members]

    @property
    def categories(self) -> list[str]:
        return list(dict.fromkeys(member.category for member in self.members))


# =============================================================================
# Helpers
# =============================================================================


def top_keywords(items: Sequence[PreparedSuggestion], limit: int = TOP_KEYWORDS_LIMIT) -> list[str]:
    """Most frequent tokens across items, ties in first-seen order."""
    frequencies: Counter[str] = Counter()
    for item in items:
        frequencies.update(item.tokens)
    return [word for word, _ in frequencies.most_common(limit)]


def select_group_title(items: Sequence[PreparedSuggestion]) -> str:
    """Pick the most descriptive title: longest title plus most tokens wins."""
    if not items:
        return ""
    best = items[0]
    best_score = len(best.record.title) + len(best.tokens)
    for item in items[1:]:
        score = len(item.record.title) + len(item.tokens)
        if score > best_score:
            best, best_score = item, score
    return best.record.title


# =============================================================================
# SuggestionClusterBuilder Class
# =============================================================================


class SuggestionClusterBuilder:
    """Partitions suggestions into exact, semantic and theme clusters.

    Semantic grouping is greedy and seed-relative: a candidate joins when its
    similarity to the seed exceeds the threshold, regardless of its similarity
    to other members. The scan is O(N^2) in the number of suggestions left
    after exact matching.
    """

    def __init__(
        self,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        vectorizer: TfidfVectorizer | None = None,
    ):
        """Initialize the builder.

        Args:
            similarity_threshold: Cosine similarity a candidate must exceed
                to join a semantic cluster (0.0-1.0)
            vectorizer: TF-IDF vectorizer, defaults to corpus-occurrence counting
        """
        self.similarity_threshold = similarity_threshold
        self.vectorizer = vectorizer or TfidfVectorizer()

    def _build_cluster(
        self,
        items: Sequence[PreparedSuggestion],
        cluster_type: ClusterType,
        confidence: float,
        average_similarity: float,
    ) -> SimilarityCluster:
        created = [item.record.created_at for item in items]
        return SimilarityCluster(
            members=tuple(item.record for item in items),
            cluster_type=cluster_type,
            confidence=confidence,
            average_similarity=average_similarity,
            top_keywords=top_keywords(items),
            date_range=DateRange(oldest=min(created), newest=max(created)),
            group_title=select_group_title(items),
        )

    def _find_exact_duplicates(
        self, items: Sequence[PreparedSuggestion]
    ) -> list[SimilarityCluster]:
        """Phase A: group items whose processed text is identical."""
        groups: dict[str, list[PreparedSuggestion]] = {}
        for item in items:
            groups.setdefault(item.processed_text.lower(), []).append(item)

        return [
            self._build_cluster(group, ClusterType.EXACT, 1.0, 1.0)
            for group in groups.values()
            if len(group) >= MIN_CLUSTER_SIZE
        ]

    def _find_semantic_clusters(
        self, items: Sequence[PreparedSuggestion]
    ) -> list[SimilarityCluster]:
        """Phase B: seed-relative grouping by TF-IDF cosine similarity."""
        if len(items) < MIN_CLUSTER_SIZE:
            return []

        # IDF is computed over this subset only, not the whole input
        matrix = self.vectorizer.vectorize([item.to_document() for item in items])
        similarities = similarity_matrix(matrix.weights)
        logger.debug(f"Semantic clustering: scanning {len(items)} suggestions pairwise")

        clusters: list[SimilarityCluster] = []
        visited: set[int] = set()

        for i in range(len(items)):
            if i in visited:
                continue

            # Membership is relative to the seed only
            candidates = np.flatnonzero(similarities[i] > self.similarity_threshold)
            group = [i] + [int(j) for j in candidates if j != i and j not in visited]
            visited.update(group)

            if len(group) < MIN_CLUSTER_SIZE:
                continue

            average = average_pairwise_similarity(similarities, group)
            clusters.append(
                self._build_cluster(
                    [items[k] for k in group],
                    ClusterType.SEMANTIC,
                    min(average * SEMANTIC_CONFIDENCE_BOOST, SEMANTIC_CONFIDENCE_CAP),
                    average,
                )
            )

        return clusters

    def _extract_themes(self, items: Sequence[PreparedSuggestion]) -> list[str]:
        """Most frequent words that occur in more than one suggestion."""
        frequencies: Counter[str] = Counter()
        document_counts: Counter[str] = Counter()
        for item in items:
            frequencies.update(item.tokens)
            document_counts.update(set(item.tokens))

        themes = [
            word
            for word, _ in frequencies.most_common()
            if document_counts[word] > 1
        ]
        return themes[:MAX_THEMES]

    def _find_theme_clusters(
        self, items: Sequence[PreparedSuggestion]
    ) -> list[SimilarityCluster]:
        """Phase C: one cluster per shared keyword, first keyword wins."""
        clusters: list[SimilarityCluster] = []
        visited: set[int] = set()
        token_sets = [set(item.tokens) for item in items]

        for keyword in self._extract_themes(items):
            matched = [
                index
                for index in range(len(items))
                if index not in visited and keyword in token_sets[index]
            ]
            if len(matched) < MIN_CLUSTER_SIZE:
                continue

            visited.update(matched)
            clusters.append(
                self._build_cluster(
                    [items[index] for index in matched],
                    ClusterType.THEME,
                    THEME_CONFIDENCE,
                    THEME_AVERAGE_SIMILARITY,
                )
            )

        return clusters

    def cluster(self, suggestions: Sequence[SuggestionRecord]) -> list[SimilarityCluster]:
        """Cluster suggestions.

        Args:
            suggestions: Suggestions to group, in input order

        Returns:
            Clusters sorted by member count descending; ties keep phase order
            (exact, semantic, theme) and emission order within a phase
        """
        if not suggestions:
            return []

        prepared = [
            PreparedSuggestion(record=s, tokens=tuple(normalize(s.text)))
            for s in suggestions
        ]

        exact = self._find_exact_duplicates(prepared)
        claimed = {member.id for c in exact for member in c.members}
        remaining = [item for item in prepared if item.record.id not in claimed]

        semantic = self._find_semantic_clusters(remaining)
        claimed.update(member.id for c in semantic for member in c.members)
        remaining = [item for item in remaining if item.record.id not in claimed]

        theme = self._find_theme_clusters(remaining)

        clusters = sorted(exact + semantic + theme, key=lambda c: c.count, reverse=True)

        logger.info(
            f"Clustered {len(suggestions)} suggestions into {len(clusters)} groups "
            f"(exact={len(exact)}, semantic={len(semantic)}, theme={len(theme)})"
        )
        return clusters


# =============================================================================
# Convenience Functions
# =============================================================================


def get_cluster_builder(
    similarity_threshold: float = SIMILARITY_THRESHOLD,
) -> SuggestionClusterBuilder:
    """Create a SuggestionClusterBuilder instance.

    Args:
        similarity_threshold: Threshold for semantic grouping (0.0-1.0)

    Returns:
        Configured SuggestionClusterBuilder instance
    """
    return SuggestionClusterBuilder(similarity_threshold)
