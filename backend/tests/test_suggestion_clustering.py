"""Tests for three-phase suggestion clustering.

Covers exact-duplicate, semantic (seed-relative TF-IDF) and theme clustering,
plus the partition invariants that hold for any input.
"""

import math
from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from suggestion_insights.schemas.suggestion import ClusterType, SuggestionRecord
from suggestion_insights.services.suggestion_clustering import (
    SEMANTIC_CONFIDENCE_CAP,
    DateRange,
    SimilarityCluster,
    SuggestionClusterBuilder,
    get_cluster_builder,
)
from suggestion_insights.services.tfidf import TermMatrix, TfidfVectorizer

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=UTC)


def make_suggestion(
    suggestion_id: str,
    title: str,
    description: str = "",
    category: str = "Feature Request",
    days_ago: int = 0,
) -> SuggestionRecord:
    return SuggestionRecord(
        id=suggestion_id,
        category=category,
        title=title,
        description=description,
        created_at=BASE_TIME - timedelta(days=days_ago),
    )


class FixedVectorizer(TfidfVectorizer):
    """Vectorizer returning predetermined vectors, in document order."""

    def __init__(self, vectors: list[dict[str, float]]):
        super().__init__()
        self.vectors = vectors

    def vectorize(self, docs):
        return TermMatrix.from_vectors(self.vectors[: len(docs)])


# =============================================================================
# Phase A: Exact Duplicates
# =============================================================================


class TestExactDuplicates:
    """Exact-duplicate clustering."""

    def test_identical_suggestions_cluster_as_exact(self):
        suggestions = [
            make_suggestion("1", "Add dark mode", "Please add a dark theme option"),
            make_suggestion("2", "Add dark mode", "Please add a dark theme option"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.cluster_type == ClusterType.EXACT
        assert cluster.confidence == 1.0
        assert cluster.average_similarity == 1.0
        assert cluster.member_ids == ["1", "2"]

    def test_match_ignores_case_punctuation_and_stop_words(self):
        suggestions = [
            make_suggestion("1", "Add dark mode!", "It would be nice"),
            make_suggestion("2", "add DARK mode", "would be NICE."),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert [c.cluster_type for c in clusters] == [ClusterType.EXACT]

    def test_empty_text_suggestions_form_exact_cluster(self):
        suggestions = [
            make_suggestion("1", "", ""),
            make_suggestion("2", "ok", "it is"),
            make_suggestion("3", "Calendar export", "Export sessions to calendar"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert len(clusters) == 1
        assert clusters[0].cluster_type == ClusterType.EXACT
        assert clusters[0].member_ids == ["1", "2"]
        assert clusters[0].top_keywords == []


# =============================================================================
# Phase B: Semantic Clustering
# =============================================================================


class TestSemanticClustering:
    """Seed-relative semantic clustering."""

    def test_similar_suggestions_cluster_as_semantic(self):
        suggestions = [
            make_suggestion("1", "Dark mode toggle settings"),
            make_suggestion("2", "Dark mode toggle settings page"),
            make_suggestion("3", "Search filter results"),
            make_suggestion("4", "Export calendar events"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.cluster_type == ClusterType.SEMANTIC
        assert cluster.member_ids == ["1", "2"]
        assert cluster.average_similarity == pytest.approx(1 / math.sqrt(2))
        assert cluster.confidence == pytest.approx(1.2 / math.sqrt(2))

    def test_idf_uses_only_suggestions_left_after_exact_matching(self):
        suggestions = [
            make_suggestion("1", "Dark mode"),
            make_suggestion("2", "Dark mode"),
            make_suggestion("3", "Dark mode theme"),
            make_suggestion("4", "Dark mode theme settings"),
            make_suggestion("5", "Mentor badges"),
            make_suggestion("6", "Export calendar"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        # Over the 4 remaining suggestions dark/mode/theme get idf ln 2 and
        # settings ln 4, giving sqrt(3/7) ~ 0.655. Counting the exact pair
        # as well would lower dark/mode to ln 1.5 and the score to ~0.569.
        assert [c.cluster_type for c in clusters] == [ClusterType.EXACT, ClusterType.SEMANTIC]
        semantic = clusters[1]
        assert semantic.member_ids == ["3", "4"]
        assert semantic.average_similarity == pytest.approx(math.sqrt(3 / 7))
        assert semantic.confidence == pytest.approx(1.2 * math.sqrt(3 / 7))

    def test_membership_is_relative_to_seed_only(self):
        # 0 is similar to both 1 and 2, which are orthogonal to each other
        vectorizer = FixedVectorizer([{"x": 1.0, "y": 1.0}, {"x": 1.0}, {"y": 1.0}])
        builder = SuggestionClusterBuilder(vectorizer=vectorizer)
        suggestions = [
            make_suggestion("1", "alpha"),
            make_suggestion("2", "bravo"),
            make_suggestion("3", "charlie"),
        ]

        clusters = builder.cluster(suggestions)

        assert len(clusters) == 1
        assert clusters[0].member_ids == ["1", "2", "3"]
        # average over all pairs, including the orthogonal 1-2 pair
        assert clusters[0].average_similarity == pytest.approx(math.sqrt(2) / 3)
        assert clusters[0].confidence == pytest.approx(1.2 * math.sqrt(2) / 3)

    def test_grouping_is_not_transitive(self):
        # 0~1 and 1~2, but 0 and 2 are orthogonal
        vectorizer = FixedVectorizer([{"x": 1.0}, {"x": 1.0, "y": 1.0}, {"y": 1.0}])
        builder = SuggestionClusterBuilder(vectorizer=vectorizer)
        suggestions = [
            make_suggestion("1", "alpha"),
            make_suggestion("2", "bravo"),
            make_suggestion("3", "charlie"),
        ]

        clusters = builder.cluster(suggestions)

        assert len(clusters) == 1
        assert clusters[0].member_ids == ["1", "2"]

    def test_threshold_is_strict(self):
        # cosine of these vectors is exactly 0.5
        vectorizer = FixedVectorizer(
            [{"x": 1.0}, {"x": 1.0, "y": 1.0, "z": 1.0, "w": 1.0}]
        )
        builder = SuggestionClusterBuilder(similarity_threshold=0.5, vectorizer=vectorizer)
        suggestions = [make_suggestion("1", "alpha"), make_suggestion("2", "bravo")]

        assert builder.cluster(suggestions) == []

    def test_confidence_is_capped(self):
        vectorizer = FixedVectorizer([{"x": 1.0}, {"x": 1.0, "y": 0.01}])
        builder = SuggestionClusterBuilder(vectorizer=vectorizer)
        suggestions = [make_suggestion("1", "alpha"), make_suggestion("2", "bravo")]

        clusters = builder.cluster(suggestions)

        assert clusters[0].confidence == SEMANTIC_CONFIDENCE_CAP

    def test_degenerate_vectors_never_cluster_semantically(self):
        vectorizer = FixedVectorizer([{}, {}, {"x": 1.0}])
        builder = SuggestionClusterBuilder(vectorizer=vectorizer)
        suggestions = [
            make_suggestion("1", "alpha"),
            make_suggestion("2", "bravo"),
            make_suggestion("3", "charlie"),
        ]

        assert builder.cluster(suggestions) == []


# =============================================================================
# Phase C: Theme Clustering
# =============================================================================


class TestThemeClustering:
    """Keyword-theme fallback clustering."""

    def test_slow_page_load_falls_back_to_theme(self):
        suggestions = [
            make_suggestion("1", "Slow page load"),
            make_suggestion("2", "Page loads slowly"),
            make_suggestion("3", "Loading is slow"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert len(clusters) == 1
        cluster = clusters[0]
        assert cluster.cluster_type == ClusterType.THEME
        assert cluster.member_ids == ["1", "3"]
        assert cluster.confidence == 0.7
        assert cluster.average_similarity == 0.6
        assert cluster.top_keywords == ["slow", "page", "load", "loading"]

    def test_suggestion_joins_only_first_matching_theme(self):
        suggestions = [
            make_suggestion("1", "Calendar sync broken"),
            make_suggestion("2", "Calendar export option"),
            make_suggestion("3", "Calendar reminders email"),
            make_suggestion("4", "Email digest weekly"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        # "calendar" (3 occurrences) outranks "email" (2); once 3 is taken,
        # "email" only matches suggestion 4
        assert len(clusters) == 1
        assert clusters[0].cluster_type == ClusterType.THEME
        assert clusters[0].member_ids == ["1", "2", "3"]

    def test_words_repeated_in_one_suggestion_are_not_themes(self):
        suggestions = [
            make_suggestion("1", "Profile profile profile"),
            make_suggestion("2", "Badges for mentors"),
        ]

        assert get_cluster_builder().cluster(suggestions) == []


# =============================================================================
# Cluster Metadata and Ordering
# =============================================================================


class TestClusterMetadata:
    """Metadata carried by every cluster."""

    def test_date_range_title_examples_and_categories(self):
        suggestions = [
            make_suggestion("1", "Dark mode", "toggle", category="UI", days_ago=5),
            make_suggestion("2", "Dark mode!!", "Toggle", category="Design", days_ago=1),
            make_suggestion("3", "dark mode", "TOGGLE", category="UI", days_ago=9),
        ]

        cluster = get_cluster_builder().cluster(suggestions)[0]

        assert cluster.count == 3
        assert cluster.date_range.oldest == BASE_TIME - timedelta(days=9)
        assert cluster.date_range.newest == BASE_TIME - timedelta(days=1)
        assert cluster.examples == ["Dark mode", "Dark mode!!", "dark mode"]
        assert cluster.categories == ["UI", "Design"]
        # longest title wins; ties would keep the first
        assert cluster.group_title == "Dark mode!!"
        assert cluster.top_keywords == ["dark", "mode", "toggle"]

    def test_date_range_is_required(self):
        members = (make_suggestion("1", "Dark mode"), make_suggestion("2", "Dark mode"))

        with pytest.raises(TypeError):
            SimilarityCluster(
                members=members,
                cluster_type=ClusterType.EXACT,
                confidence=1.0,
                average_similarity=1.0,
            )

        cluster = SimilarityCluster(
            members=members,
            cluster_type=ClusterType.EXACT,
            confidence=1.0,
            average_similarity=1.0,
            date_range=DateRange(oldest=BASE_TIME, newest=BASE_TIME),
        )
        assert cluster.date_range.oldest == BASE_TIME

    def test_clusters_sorted_by_size(self):
        suggestions = [
            make_suggestion("1", "Add dark mode"),
            make_suggestion("2", "Add dark mode"),
            make_suggestion("3", "Calendar sync broken"),
            make_suggestion("4", "Calendar export option"),
            make_suggestion("5", "Calendar reminders email"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert [c.cluster_type for c in clusters] == [ClusterType.THEME, ClusterType.EXACT]
        assert [c.count for c in clusters] == [3, 2]

    def test_equal_sizes_keep_phase_order(self):
        suggestions = [
            make_suggestion("1", "Calendar sync broken"),
            make_suggestion("2", "Add dark mode"),
            make_suggestion("3", "Calendar export option"),
            make_suggestion("4", "Add dark mode"),
        ]

        clusters = get_cluster_builder().cluster(suggestions)

        assert [c.cluster_type for c in clusters] == [ClusterType.EXACT, ClusterType.THEME]

    def test_single_and_empty_input(self):
        builder = get_cluster_builder()

        assert builder.cluster([]) == []
        assert builder.cluster([make_suggestion("1", "Add dark mode")]) == []


# =============================================================================
# Partition Properties
# =============================================================================

VOCABULARY = [
    "dark", "mode", "theme", "page", "slow", "load", "calendar", "export",
    "session", "mentor", "search", "filter", "the", "is", "a", "ok",
]

suggestion_texts = st.lists(
    st.lists(st.sampled_from(VOCABULARY), min_size=0, max_size=6).map(" ".join),
    min_size=0,
    max_size=25,
)


class TestClusteringProperties:
    """Invariants that hold for any input."""

    @given(texts=suggestion_texts)
    @settings(max_examples=150, deadline=None)
    def test_clusters_partition_suggestions(self, texts: list[str]):
        """No suggestion appears in two clusters and every cluster has 2+ members."""
        suggestions = [make_suggestion(str(i), text, days_ago=i) for i, text in enumerate(texts)]

        clusters = get_cluster_builder().cluster(suggestions)

        seen: set[str] = set()
        for cluster in clusters:
            assert cluster.count >= 2
            assert 0.0 <= cluster.confidence <= 1.0
            assert len(cluster.top_keywords) <= 5
            for member_id in cluster.member_ids:
                assert member_id not in seen
                seen.add(member_id)

    @given(texts=suggestion_texts)
    @settings(max_examples=100, deadline=None)
    def test_clusters_ordered_by_size(self, texts: list[str]):
        """Clusters are sorted by member count, largest first."""
        suggestions = [make_suggestion(str(i), text) for i, text in enumerate(texts)]

        counts = [c.count for c in get_cluster_builder().cluster(suggestions)]

        assert counts == sorted(counts, reverse=True)
